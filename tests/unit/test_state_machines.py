"""
Exhaustive state machine transition tests.

Every (current, target) enum pair is tested for check-ins and campaigns.
"""

import pytest

from core.models import CheckInRecord
from core.models.enums import CheckInState, HeadcountCampaignStatus, SafetyStatus
from core.logic.transitions import (
    can_acknowledge,
    can_campaign_transition,
    can_checkin_transition,
    can_resolve,
    get_campaign_terminal_states,
    is_campaign_terminal,
    stamps_expiry,
)

pytestmark = pytest.mark.unit


# ============================================================================
# DATA: Expected transition maps (source of truth for tests)
# ============================================================================

_CHECKIN_TRANSITIONS = {
    CheckInState.SUBMITTED: {CheckInState.ACKNOWLEDGED},
    CheckInState.ACKNOWLEDGED: {CheckInState.RESOLVED},
    CheckInState.RESOLVED: set(),
}

_CLOSING = {
    HeadcountCampaignStatus.COMPLETED,
    HeadcountCampaignStatus.EXPIRED,
    HeadcountCampaignStatus.CANCELLED,
}

_CAMPAIGN_TRANSITIONS = {
    HeadcountCampaignStatus.ACTIVE: {HeadcountCampaignStatus.PAUSED} | _CLOSING,
    HeadcountCampaignStatus.PAUSED: {HeadcountCampaignStatus.ACTIVE} | _CLOSING,
    HeadcountCampaignStatus.COMPLETED: _CLOSING,
    HeadcountCampaignStatus.EXPIRED: _CLOSING,
    HeadcountCampaignStatus.CANCELLED: _CLOSING,
}

_CHECKIN_PAIRS = [(c, t) for c in CheckInState for t in CheckInState]
_CAMPAIGN_PAIRS = [(c, t) for c in HeadcountCampaignStatus for t in HeadcountCampaignStatus]


def _expected(transitions, current, target) -> bool:
    if current == target:
        return True
    return target in transitions.get(current, set())


# ============================================================================
# CHECK-IN TRANSITIONS
# ============================================================================

class TestCheckInTransitions:

    @pytest.mark.parametrize(
        "current,target", _CHECKIN_PAIRS,
        ids=[f"{c.value}->{t.value}" for c, t in _CHECKIN_PAIRS],
    )
    def test_transition(self, current, target):
        assert can_checkin_transition(current, target) == _expected(_CHECKIN_TRANSITIONS, current, target)

    def test_no_state_leads_back(self):
        order = [CheckInState.SUBMITTED, CheckInState.ACKNOWLEDGED, CheckInState.RESOLVED]
        for i, later in enumerate(order):
            for earlier in order[:i]:
                assert not can_checkin_transition(later, earlier)


class TestCheckInPreconditions:

    @pytest.mark.parametrize("status", list(SafetyStatus), ids=lambda s: s.value)
    @pytest.mark.parametrize("state", list(CheckInState), ids=lambda s: s.value)
    def test_can_acknowledge(self, status, state):
        record = CheckInRecord(user_id="u1", status=status, state=state)
        expected = status == SafetyStatus.NEEDS_ASSISTANCE and state == CheckInState.SUBMITTED
        assert can_acknowledge(record) is expected

    @pytest.mark.parametrize("state", list(CheckInState), ids=lambda s: s.value)
    def test_can_resolve(self, state):
        record = CheckInRecord(user_id="u1", status=SafetyStatus.NEEDS_ASSISTANCE, state=state)
        assert can_resolve(record) is (state == CheckInState.ACKNOWLEDGED)


# ============================================================================
# CAMPAIGN TRANSITIONS
# ============================================================================

class TestCampaignTransitions:

    @pytest.mark.parametrize(
        "current,target", _CAMPAIGN_PAIRS,
        ids=[f"{c.value}->{t.value}" for c, t in _CAMPAIGN_PAIRS],
    )
    def test_transition(self, current, target):
        assert can_campaign_transition(current, target) == _expected(_CAMPAIGN_TRANSITIONS, current, target)

    @pytest.mark.parametrize("status", list(HeadcountCampaignStatus), ids=lambda s: s.value)
    def test_terminal(self, status):
        assert is_campaign_terminal(status) is (status in _CLOSING)

    def test_terminal_list_matches_closing_set(self):
        assert set(get_campaign_terminal_states()) == _CLOSING

    @pytest.mark.parametrize("closed", sorted(_CLOSING, key=lambda s: s.value), ids=lambda s: s.value)
    def test_closed_campaigns_never_reopen(self, closed):
        assert not can_campaign_transition(closed, HeadcountCampaignStatus.ACTIVE)
        assert not can_campaign_transition(closed, HeadcountCampaignStatus.PAUSED)

    @pytest.mark.parametrize("status,expected", [
        (HeadcountCampaignStatus.ACTIVE, False),
        (HeadcountCampaignStatus.PAUSED, False),
        (HeadcountCampaignStatus.COMPLETED, True),
        (HeadcountCampaignStatus.EXPIRED, True),
        (HeadcountCampaignStatus.CANCELLED, False),
    ], ids=lambda v: getattr(v, "value", str(v)))
    def test_stamps_expiry(self, status, expected):
        assert stamps_expiry(status) is expected
