"""
Root conftest.py: sys.path, env vars, shared fixtures.

Sets up the test environment so all production code can be imported
without a storage account, Azurite or directory credentials.
"""

import os
import sys
from datetime import datetime, timedelta, timezone

import pytest

# Add project root to sys.path so 'core', 'config', 'services', etc. are importable
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from config import AppConfig, reset_config  # noqa: E402
from services import ServiceContainer, reset_services  # noqa: E402
from tests.factories.in_memory_store import InMemoryTableStore  # noqa: E402


@pytest.fixture(autouse=True, scope="session")
def set_minimal_env_vars():
    """
    Set minimal environment variables to prevent import crashes.

    Config is read lazily, but function_app validates the environment at
    import time. The connection string points at Azurite and is never
    dialled by the unit tests.
    """
    defaults = {
        "AZURE_TABLES_CONNECTION_STRING": "UseDevelopmentStorage=true",
        "ENVIRONMENT": "dev",
    }
    for key, value in defaults.items():
        os.environ.setdefault(key, value)


@pytest.fixture(autouse=True)
def reset_singletons():
    """Drop cached config and services between tests."""
    reset_config()
    reset_services()
    yield
    reset_config()
    reset_services()


class FakeClock:
    """Deterministic clock: every call advances by `step`."""

    def __init__(self, start: datetime = None, step: timedelta = timedelta(seconds=1)):
        self.now = start or datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)
        self.step = step

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + self.step
        return current

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def app_config():
    """Config with zero backoff so conflict retries do not sleep."""
    return AppConfig(conflict_base_delay=0, conflict_max_delay=0)


@pytest.fixture
def stores(app_config):
    names = {
        "checkins": app_config.storage.checkins_table,
        "preferences": app_config.storage.preferences_table,
        "campaigns": app_config.storage.campaigns_table,
        "audit": app_config.storage.audit_table,
    }
    return {key: InMemoryTableStore(name) for key, name in names.items()}


@pytest.fixture
def services(stores, app_config, clock):
    """Service container over in-memory tables with a fake clock."""
    return ServiceContainer.from_stores(stores, config=app_config, clock=clock)
