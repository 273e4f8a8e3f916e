"""
Unit test fixtures: factory-built models.
"""

import pytest

from core.models import CheckInRecord, HeadcountCampaign, UserPreferences
from tests.factories.model_factories import make_campaign, make_checkin, make_preferences


@pytest.fixture
def checkin_data():
    """Return randomized check-in data dict."""
    return make_checkin()


@pytest.fixture
def checkin(checkin_data):
    return CheckInRecord(**checkin_data)


@pytest.fixture
def campaign():
    return HeadcountCampaign(**make_campaign(targets=["u1", "u2", "u3"]))


@pytest.fixture
def preferences():
    return UserPreferences(**make_preferences())
