"""
HTTP trigger fixtures: fake directory, wired services.
"""

import pytest

from core.models import UserProfile
from services import set_services
from tests.factories.http_factories import FakeDirectory


@pytest.fixture
def directory():
    return FakeDirectory(
        profile=UserProfile(
            id="u1", displayName="Ada Lovelace", mail="ada@contoso.example",
            department="Engineering", jobTitle="Analyst", officeLocation="Building 4",
        ),
        reports=[UserProfile(id="r1"), UserProfile(id="r2")],
    )


@pytest.fixture
def wired(services, directory):
    """Install the in-memory services as the process-wide container."""
    services.directory_factory = directory
    set_services(services)
    return services
