"""
Check-in Record Model.

One record per safety check-in, partitioned by user id and addressed by
check-in id within the partition.

Exports:
    CheckInRecord: Pydantic model for a check-in
"""

from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from .base import DomainModel
from .enums import LocationPrecision, SafetyStatus, CheckInState


class CheckInRecord(DomainModel):
    """
    A single safety-status report.

    Identity and location fields are fixed after creation; only notes,
    status, state and the acknowledge/resolve stamps change afterwards.
    """

    id: str = Field(default="", description="Check-in id, generated when empty")
    user_id: str = Field(default="", description="Submitting user (partition key)")
    user_display_name: str = Field(default="")
    user_email: str = Field(default="")

    job_title: Optional[str] = None
    department: Optional[str] = None
    office_location: Optional[str] = None

    timestamp: Optional[datetime] = Field(default=None, description="UTC submission time, now when unset")
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    location_precision: LocationPrecision = LocationPrecision.CITY_WIDE

    status: SafetyStatus = SafetyStatus.OK
    notes: Optional[str] = None
    state: CheckInState = CheckInState.SUBMITTED
    headcount_campaign_id: Optional[str] = None

    acknowledged_by_user_id: Optional[str] = None
    acknowledged_timestamp: Optional[datetime] = None
    resolved_by_user_id: Optional[str] = None
    resolved_timestamp: Optional[datetime] = None

    @field_validator("location_precision", mode="before")
    @classmethod
    def _parse_precision(cls, value):
        return LocationPrecision.parse(value)

    @field_validator("status", mode="before")
    @classmethod
    def _parse_status(cls, value):
        return SafetyStatus.parse(value)

    @field_validator("state", mode="before")
    @classmethod
    def _parse_state(cls, value):
        return CheckInState.parse(value)

    @property
    def needs_assistance(self) -> bool:
        return self.status == SafetyStatus.NEEDS_ASSISTANCE
