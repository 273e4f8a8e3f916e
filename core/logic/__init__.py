"""
Core Business Logic Package.

Pure functions over core.models; no I/O.

Exports:
    Transition helpers for check-ins and campaigns
    describe_change: Audit change description
"""

from .transitions import (
    can_checkin_transition,
    can_acknowledge,
    can_resolve,
    can_campaign_transition,
    get_campaign_terminal_states,
    is_campaign_terminal,
    stamps_expiry,
)
from .audit import describe_change

__all__ = [
    'can_checkin_transition',
    'can_acknowledge',
    'can_resolve',
    'can_campaign_transition',
    'get_campaign_terminal_states',
    'is_campaign_terminal',
    'stamps_expiry',
    'describe_change',
]
