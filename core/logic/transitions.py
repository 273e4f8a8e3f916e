"""
State Transition Logic for Check-ins and Headcount Campaigns.

Contains business rules for valid state transitions.
Separated from data models for clean architecture.

Exports:
    can_checkin_transition: Check if a check-in state transition is valid
    can_acknowledge: Check acknowledge preconditions on a record
    can_resolve: Check resolve preconditions on a record
    can_campaign_transition: Check if a campaign status transition is valid
    get_campaign_terminal_states: Terminal campaign statuses
    is_campaign_terminal: Check if a campaign status is terminal
    stamps_expiry: Whether entering a status stamps expiresTimestamp

Dependencies:
    core.models.enums: CheckInState, SafetyStatus, HeadcountCampaignStatus
"""

from typing import List

from ..models.enums import CheckInState, SafetyStatus, HeadcountCampaignStatus
from ..models.checkin import CheckInRecord


def can_checkin_transition(current: CheckInState, target: CheckInState) -> bool:
    """
    Check if a check-in can move from current to target state.

    Transitions are monotonic; no state leads back.

    Args:
        current: Current check-in state
        target: Target check-in state

    Returns:
        True if transition is valid, False otherwise
    """
    # Same state is always allowed (no-op)
    if current == target:
        return True

    transitions = {
        CheckInState.SUBMITTED: [CheckInState.ACKNOWLEDGED],
        CheckInState.ACKNOWLEDGED: [CheckInState.RESOLVED],
        CheckInState.RESOLVED: [],  # Terminal state
    }

    return target in transitions.get(current, [])


def can_acknowledge(record: CheckInRecord) -> bool:
    """Acknowledge requires status NeedsAssistance and state Submitted."""
    return (
        record.status == SafetyStatus.NEEDS_ASSISTANCE
        and record.state == CheckInState.SUBMITTED
    )


def can_resolve(record: CheckInRecord) -> bool:
    """Resolve requires state Acknowledged."""
    return record.state == CheckInState.ACKNOWLEDGED


def can_campaign_transition(current: HeadcountCampaignStatus, target: HeadcountCampaignStatus) -> bool:
    """
    Check if a campaign can move from current to target status.

    Closed campaigns never reopen, but a closing status may be corrected
    to another one (e.g. Expired -> Completed).

    Args:
        current: Current campaign status
        target: Target campaign status

    Returns:
        True if transition is valid, False otherwise
    """
    if current == target:
        return True

    closing = get_campaign_terminal_states()
    if is_campaign_terminal(current):
        return target in closing

    transitions = {
        HeadcountCampaignStatus.ACTIVE: [HeadcountCampaignStatus.PAUSED] + closing,
        HeadcountCampaignStatus.PAUSED: [HeadcountCampaignStatus.ACTIVE] + closing,
    }

    return target in transitions.get(current, [])


def get_campaign_terminal_states() -> List[HeadcountCampaignStatus]:
    return [
        HeadcountCampaignStatus.COMPLETED,
        HeadcountCampaignStatus.EXPIRED,
        HeadcountCampaignStatus.CANCELLED,
    ]


def is_campaign_terminal(status: HeadcountCampaignStatus) -> bool:
    return status in get_campaign_terminal_states()


def stamps_expiry(status: HeadcountCampaignStatus) -> bool:
    """Completed and Expired close the campaign with an expiry timestamp; Cancelled does not."""
    return status in (HeadcountCampaignStatus.COMPLETED, HeadcountCampaignStatus.EXPIRED)
