"""
Config test fixtures: clean environment via monkeypatch.
"""

import pytest


@pytest.fixture
def clean_env(monkeypatch):
    """Remove all env vars that config modules might read, for isolation."""
    env_vars_to_clear = [
        "AZURE_TABLES_CONNECTION_STRING", "STORAGE_ACCOUNT_NAME",
        "CHECKINS_TABLE", "PREFERENCES_TABLE", "CAMPAIGNS_TABLE", "AUDIT_TABLE",
        "AUDIT_PARTITION_SCHEME", "ENVIRONMENT", "LOG_LEVEL", "DEBUG_MODE",
        "GRAPH_BASE_URL", "GRAPH_TIMEOUT_SECONDS",
        "HISTORY_LOOKBACK_DAYS", "HISTORY_MAX_RESULTS",
        "AUDIT_LOOKBACK_DAYS", "AUDIT_MAX_RESULTS",
        "CONFLICT_MAX_ATTEMPTS", "CONFLICT_BASE_DELAY", "CONFLICT_MAX_DELAY",
    ]
    for var in env_vars_to_clear:
        monkeypatch.delenv(var, raising=False)
    return monkeypatch
