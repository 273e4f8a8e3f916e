"""
User Preferences Model.

Exports:
    UserPreferences: Per-user preferences (zero or one record per user)
"""

from datetime import datetime
from typing import Optional

from pydantic import field_validator

from .base import DomainModel
from .enums import LocationPrecision


class UserPreferences(DomainModel):
    """Preferences stored in the fixed "UserPreferences" partition, row key = user id."""

    user_id: str = ""
    default_location_precision: LocationPrecision = LocationPrecision.CITY_WIDE
    enable_location_services: bool = True
    enable_teams_notifications: bool = True
    last_modified: Optional[datetime] = None
    last_modified_by: Optional[str] = None

    @field_validator("default_location_precision", mode="before")
    @classmethod
    def _parse_precision(cls, value):
        return LocationPrecision.parse(value)

    @classmethod
    def defaults(cls, user_id: str) -> "UserPreferences":
        """Default preferences: CityWide precision, location services and notifications on."""
        return cls(user_id=user_id)
