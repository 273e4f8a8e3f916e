"""
Core Data Models Package.

Contains pure data structures without business logic.
All business logic is in the core.logic package.

Exports:
    CheckInRecord, HeadcountCampaign, UserPreferences, AuditLog: Stored entities
    UserIdSet, CampaignResponses: Campaign response value objects
    Principal, UserProfile: Identity models
    LocationPrecision, SafetyStatus, CheckInState,
    HeadcountCampaignStatus, AuditActionType: Enums
"""

# Enums
from .enums import (
    LocationPrecision,
    SafetyStatus,
    CheckInState,
    HeadcountCampaignStatus,
    AuditActionType,
)

from .base import DomainModel, utc_now

# Entity models
from .checkin import CheckInRecord
from .headcount import UserIdSet, CampaignResponses, HeadcountCampaign
from .preferences import UserPreferences
from .audit import AuditLog

# Identity models
from .identity import Principal, UserProfile

__all__ = [
    'LocationPrecision',
    'SafetyStatus',
    'CheckInState',
    'HeadcountCampaignStatus',
    'AuditActionType',
    'DomainModel',
    'utc_now',
    'CheckInRecord',
    'UserIdSet',
    'CampaignResponses',
    'HeadcountCampaign',
    'UserPreferences',
    'AuditLog',
    'Principal',
    'UserProfile',
]
