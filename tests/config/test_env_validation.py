"""
Environment variable validation tests.

Tests regex patterns for the storage, environment, table-name and
audit-partitioning validators, and the storage credential check.
"""

import logging

import pytest

from config.env_validation import (
    ENV_VAR_RULES,
    EnvValidationError,
    log_validation_results,
    validate_environment,
    validate_single_var,
    validate_storage_auth,
)


class TestStorageAccountValidation:
    """STORAGE_ACCOUNT_NAME must be a bare account name."""

    rule = ENV_VAR_RULES["STORAGE_ACCOUNT_NAME"]

    def test_account_name_accepted(self, monkeypatch):
        monkeypatch.setenv("STORAGE_ACCOUNT_NAME", "safetycheckin01")
        assert validate_single_var("STORAGE_ACCOUNT_NAME", self.rule) is None

    @pytest.mark.parametrize("value", [
        "https://safety.table.core.windows.net", "Upper", "ab", "x" * 25,
    ], ids=["url", "uppercase", "too_short", "too_long"])
    def test_bad_names_rejected(self, monkeypatch, value):
        monkeypatch.setenv("STORAGE_ACCOUNT_NAME", value)
        result = validate_single_var("STORAGE_ACCOUNT_NAME", self.rule)
        assert result is not None
        assert result.severity == "error"
        assert result.message == "Invalid format"

    def test_unset_without_default_passes(self, clean_env):
        assert validate_single_var("STORAGE_ACCOUNT_NAME", self.rule) is None


class TestEnvironmentValidation:
    """ENVIRONMENT must be one of dev, test, qa, uat, staging, prod."""

    rule = ENV_VAR_RULES["ENVIRONMENT"]

    @pytest.mark.parametrize("value", ["dev", "qa", "uat", "test", "staging", "prod", "PROD"])
    def test_valid_environments_accepted(self, monkeypatch, value):
        monkeypatch.setenv("ENVIRONMENT", value)
        assert validate_single_var("ENVIRONMENT", self.rule) is None

    @pytest.mark.parametrize("value", ["development", "local", "production"])
    def test_invalid_environments_rejected(self, monkeypatch, value):
        monkeypatch.setenv("ENVIRONMENT", value)
        assert validate_single_var("ENVIRONMENT", self.rule) is not None

    def test_unset_warns_with_default(self, clean_env):
        result = validate_single_var("ENVIRONMENT", self.rule)
        assert result.severity == "warning"
        assert result.expected_pattern == "Default: dev"

    def test_unset_silent_without_warnings(self, clean_env):
        assert validate_single_var("ENVIRONMENT", self.rule, include_warnings=False) is None


class TestTableAndSchemeValidation:

    @pytest.mark.parametrize("var", ["CHECKINS_TABLE", "PREFERENCES_TABLE", "CAMPAIGNS_TABLE", "AUDIT_TABLE"])
    @pytest.mark.parametrize("value,ok", [
        ("checkinrecords", True), ("Audit2024", True), ("1table", False), ("ab", False), ("check-ins", False),
    ], ids=["plain", "mixed_case", "leading_digit", "too_short", "hyphen"])
    def test_table_names(self, monkeypatch, var, value, ok):
        monkeypatch.setenv(var, value)
        assert (validate_single_var(var, ENV_VAR_RULES[var]) is None) is ok

    @pytest.mark.parametrize("value,ok", [("entity_type", True), ("month", True), ("year", False)])
    def test_partition_scheme(self, monkeypatch, value, ok):
        monkeypatch.setenv("AUDIT_PARTITION_SCHEME", value)
        result = validate_single_var("AUDIT_PARTITION_SCHEME", ENV_VAR_RULES["AUDIT_PARTITION_SCHEME"])
        assert (result is None) is ok

    @pytest.mark.parametrize("value,ok", [("3", True), ("0", False), ("-1", False), ("three", False)])
    def test_conflict_attempts(self, monkeypatch, value, ok):
        monkeypatch.setenv("CONFLICT_MAX_ATTEMPTS", value)
        result = validate_single_var("CONFLICT_MAX_ATTEMPTS", ENV_VAR_RULES["CONFLICT_MAX_ATTEMPTS"])
        assert (result is None) is ok


class TestStorageAuth:

    def test_missing_credentials(self, clean_env):
        result = validate_storage_auth()
        assert result is not None
        assert result.severity == "error"

    @pytest.mark.parametrize("var,value", [
        ("AZURE_TABLES_CONNECTION_STRING", "UseDevelopmentStorage=true"),
        ("STORAGE_ACCOUNT_NAME", "safetycheckin01"),
    ], ids=["connection_string", "managed_identity"])
    def test_either_credential_suffices(self, clean_env, var, value):
        clean_env.setenv(var, value)
        assert validate_storage_auth() is None

    def test_validate_environment_reports_auth_first(self, clean_env):
        results = validate_environment(include_warnings=False)
        assert [r.var_name for r in results] == ["AZURE_TABLES_CONNECTION_STRING"]


class TestReporting:

    def test_connection_string_masked(self):
        error = EnvValidationError(
            var_name="AZURE_TABLES_CONNECTION_STRING", message="x",
            current_value="AccountKey=abc", expected_pattern="", fix_suggestion="",
        )
        assert error.to_dict()["current_value"] == "***MASKED***"

    def test_long_values_truncated(self):
        error = EnvValidationError(
            var_name="GRAPH_BASE_URL", message="x",
            current_value="https://" + "a" * 40, expected_pattern="", fix_suggestion="",
        )
        assert error.to_dict()["current_value"].endswith("(48 chars)")

    def test_log_results_pass_with_warnings(self, clean_env, caplog):
        clean_env.setenv("AZURE_TABLES_CONNECTION_STRING", "UseDevelopmentStorage=true")
        logger = logging.getLogger("test.env")
        with caplog.at_level(logging.WARNING, logger="test.env"):
            assert log_validation_results(logger) is True
        assert "using defaults" in caplog.text

    def test_log_results_fail_on_error(self, clean_env, caplog):
        logger = logging.getLogger("test.env")
        with caplog.at_level(logging.ERROR, logger="test.env"):
            assert log_validation_results(logger) is False
        assert "STARTUP_FAILED" in caplog.text
