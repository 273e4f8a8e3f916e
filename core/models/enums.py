"""
Pure Enumeration Types for the Check-in Domain.

Enum values are the persisted string names (table columns store the
name, e.g. "NeedsAssistance"). Every enum offers a lenient parse() that
never raises on unknown, renamed or empty values so that rows written by
an older or newer revision still deserialize.

Exports:
    LocationPrecision: How precisely a check-in location was captured
    SafetyStatus: OK / NeedsAssistance
    CheckInState: Check-in workflow state
    HeadcountCampaignStatus: Campaign lifecycle status
    AuditActionType: Kind of audited action
"""

from enum import Enum
from typing import Any, Optional


def _lookup(enum_cls, value: Any):
    """Case-insensitive match on value or member name, None when unmatched."""
    if isinstance(value, enum_cls):
        return value
    if value is None:
        return None
    text = str(value).strip().lower()
    if not text:
        return None
    for member in enum_cls:
        if member.value.lower() == text or member.name.lower() == text:
            return member
    return None


class LocationPrecision(str, Enum):
    """Location precision of a check-in (default CityWide)."""

    CITY_WIDE = "CityWide"
    PRECISE = "Precise"

    @classmethod
    def parse(cls, value: Any, default: Optional["LocationPrecision"] = None) -> "LocationPrecision":
        found = _lookup(cls, value)
        if found is not None:
            return found
        return default if default is not None else cls.CITY_WIDE


class SafetyStatus(str, Enum):
    """Self-reported safety status (default OK)."""

    OK = "OK"
    NEEDS_ASSISTANCE = "NeedsAssistance"

    @classmethod
    def parse(cls, value: Any, default: Optional["SafetyStatus"] = None) -> "SafetyStatus":
        found = _lookup(cls, value)
        if found is not None:
            return found
        return default if default is not None else cls.OK


class CheckInState(str, Enum):
    """
    Check-in workflow state (default Submitted).

    State transitions:
    - SUBMITTED -> ACKNOWLEDGED (only when status is NeedsAssistance)
    - ACKNOWLEDGED -> RESOLVED
    """

    SUBMITTED = "Submitted"
    ACKNOWLEDGED = "Acknowledged"
    RESOLVED = "Resolved"

    @classmethod
    def parse(cls, value: Any, default: Optional["CheckInState"] = None) -> "CheckInState":
        found = _lookup(cls, value)
        if found is not None:
            return found
        return default if default is not None else cls.SUBMITTED


class HeadcountCampaignStatus(str, Enum):
    """
    Headcount campaign status (default Active).

    State transitions:
    - ACTIVE <-> PAUSED
    - ACTIVE/PAUSED -> COMPLETED / EXPIRED / CANCELLED (terminal)
    """

    ACTIVE = "Active"
    PAUSED = "Paused"
    COMPLETED = "Completed"
    EXPIRED = "Expired"
    CANCELLED = "Cancelled"

    @classmethod
    def parse(cls, value: Any, default: Optional["HeadcountCampaignStatus"] = None) -> "HeadcountCampaignStatus":
        found = _lookup(cls, value)
        if found is not None:
            return found
        return default if default is not None else cls.ACTIVE


class AuditActionType(str, Enum):
    """Audited action. parse() returns None for unknown values so the raw name survives."""

    CREATE = "Create"
    UPDATE = "Update"
    DELETE = "Delete"
    LOGIN = "Login"
    LOGOUT = "Logout"
    CHECK_IN = "CheckIn"
    HEADCOUNT_INITIATED = "HeadcountInitiated"
    CHECK_IN_ACKNOWLEDGED = "CheckInAcknowledged"
    CHECK_IN_RESOLVED = "CheckInResolved"

    @classmethod
    def parse(cls, value: Any, default: Optional["AuditActionType"] = None) -> Optional["AuditActionType"]:
        found = _lookup(cls, value)
        return found if found is not None else default
