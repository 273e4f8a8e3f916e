# ============================================================================
# ENVIRONMENT VARIABLE VALIDATION
# ============================================================================
# STATUS: Configuration - Startup validation with regex patterns
# PURPOSE: Validate env vars at startup to fail fast with clear error messages
# EXPORTS: ENV_VAR_RULES, EnvVarRule, EnvValidationError, validate_environment,
#          validate_single_var, validate_storage_auth, log_validation_results
# DEPENDENCIES: os, re, dataclasses
# ============================================================================
"""
Environment Variable Validation Module.

Validates environment variables at startup using regex patterns so that a
mistyped account name or partition scheme is reported before the first
request instead of as a storage error mid-request.

Usage:
    from config.env_validation import validate_environment

    errors = validate_environment()
    for error in errors:
        print(f"{error.var_name}: {error.message}")
        print(f"  Expected: {error.expected_pattern}")
        print(f"  Fix: {error.fix_suggestion}")
"""

import os
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Pattern, Any


# ============================================================================
# VALIDATION ERROR
# ============================================================================

@dataclass
class EnvValidationError:
    """Result of a failed environment variable validation."""
    var_name: str
    message: str
    current_value: Optional[str]
    expected_pattern: str
    fix_suggestion: str
    severity: str = "error"  # error, warning

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for JSON serialization."""
        return {
            "var_name": self.var_name,
            "message": self.message,
            "current_value": self._mask_sensitive(self.current_value),
            "expected_pattern": self.expected_pattern,
            "fix_suggestion": self.fix_suggestion,
            "severity": self.severity,
        }

    def _mask_sensitive(self, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        if any(kw in self.var_name.lower() for kw in ("secret", "key", "token", "connection")):
            return "***MASKED***"
        if len(value) > 30:
            return f"{value[:20]}...({len(value)} chars)"
        return value


# ============================================================================
# VALIDATION RULE DEFINITION
# ============================================================================

@dataclass
class EnvVarRule:
    """
    Validation rule for an environment variable.

    Attributes:
        pattern: Compiled regex pattern for validation
        pattern_description: Human-readable description of expected format
        required: Whether this variable must be set
        fix_suggestion: How to fix if validation fails
        example: Example valid value
        default_value: Default used when unset (reported as a warning)
    """
    pattern: Pattern
    pattern_description: str
    required: bool
    fix_suggestion: str
    example: str
    default_value: Optional[str] = None


_AZURE_STORAGE_ACCOUNT = re.compile(r"^[a-z0-9]{3,24}$")
# Azure table names: alphanumeric, start with a letter, 3-63 chars
_TABLE_NAME = re.compile(r"^[A-Za-z][A-Za-z0-9]{2,62}$")
_ENVIRONMENT = re.compile(r"^(dev|test|qa|uat|staging|prod)$", re.IGNORECASE)
_PARTITION_SCHEME = re.compile(r"^(entity_type|month)$")
_LOG_LEVEL = re.compile(r"^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$", re.IGNORECASE)
_HTTPS_URL = re.compile(r"^https?://[a-z0-9][a-z0-9.:-]+(/.*)?$", re.IGNORECASE)
_POSITIVE_INT = re.compile(r"^[1-9][0-9]*$")


def _table_rule(default: str) -> EnvVarRule:
    return EnvVarRule(
        pattern=_TABLE_NAME,
        pattern_description="Letter followed by 2-62 letters or digits",
        required=False,
        fix_suggestion="Use an Azure-compatible table name",
        example=default,
        default_value=default,
    )


# ============================================================================
# VALIDATION RULES
# ============================================================================

ENV_VAR_RULES: Dict[str, EnvVarRule] = {
    "STORAGE_ACCOUNT_NAME": EnvVarRule(
        pattern=_AZURE_STORAGE_ACCOUNT,
        pattern_description="Lowercase alphanumeric, 3-24 characters",
        required=False,
        fix_suggestion="Use the storage account name only, not the full URL",
        example="safetycheckinstore",
    ),
    "ENVIRONMENT": EnvVarRule(
        pattern=_ENVIRONMENT,
        pattern_description="One of dev, test, qa, uat, staging, prod",
        required=False,
        fix_suggestion="Set ENVIRONMENT to the deployment tier",
        example="dev",
        default_value="dev",
    ),
    "AUDIT_PARTITION_SCHEME": EnvVarRule(
        pattern=_PARTITION_SCHEME,
        pattern_description="entity_type or month",
        required=False,
        fix_suggestion="Choose how audit rows are partitioned",
        example="entity_type",
        default_value="entity_type",
    ),
    "LOG_LEVEL": EnvVarRule(
        pattern=_LOG_LEVEL,
        pattern_description="Standard logging level name",
        required=False,
        fix_suggestion="Use DEBUG, INFO, WARNING, ERROR or CRITICAL",
        example="INFO",
        default_value="INFO",
    ),
    "GRAPH_BASE_URL": EnvVarRule(
        pattern=_HTTPS_URL,
        pattern_description="http(s) URL of the Graph API including version",
        required=False,
        fix_suggestion="Point at the Graph endpoint for your cloud",
        example="https://graph.microsoft.com/v1.0",
        default_value="https://graph.microsoft.com/v1.0",
    ),
    "CONFLICT_MAX_ATTEMPTS": EnvVarRule(
        pattern=_POSITIVE_INT,
        pattern_description="Positive integer",
        required=False,
        fix_suggestion="Set the number of attempts for conflicting writes",
        example="3",
        default_value="3",
    ),
    "CHECKINS_TABLE": _table_rule("checkinrecords"),
    "PREFERENCES_TABLE": _table_rule("userpreferences"),
    "CAMPAIGNS_TABLE": _table_rule("headcountcampaigns"),
    "AUDIT_TABLE": _table_rule("auditlogs"),
}


# ============================================================================
# VALIDATION FUNCTIONS
# ============================================================================

def validate_single_var(
    var_name: str,
    rule: EnvVarRule,
    include_warnings: bool = True
) -> Optional[EnvValidationError]:
    """
    Validate a single environment variable against its rule.

    Returns:
        EnvValidationError on failure (or a warning when a default is used), None if it passes
    """
    value = os.environ.get(var_name)

    if rule.required and not value:
        return EnvValidationError(
            var_name=var_name,
            message="Required environment variable not set",
            current_value=value,
            expected_pattern=rule.pattern_description,
            fix_suggestion=f"{rule.fix_suggestion}. Example: {rule.example}",
        )

    if not value:
        if include_warnings and rule.default_value is not None:
            return EnvValidationError(
                var_name=var_name,
                message="Not set, using default value",
                current_value=None,
                expected_pattern=f"Default: {rule.default_value}",
                fix_suggestion=f"Set explicitly or accept default. {rule.fix_suggestion}",
                severity="warning",
            )
        return None

    if not rule.pattern.match(value):
        return EnvValidationError(
            var_name=var_name,
            message="Invalid format",
            current_value=value,
            expected_pattern=rule.pattern_description,
            fix_suggestion=f"{rule.fix_suggestion}. Example: {rule.example}",
        )

    return None


def validate_storage_auth() -> Optional[EnvValidationError]:
    """Table Storage needs a connection string or an account name for managed identity."""
    if os.environ.get("AZURE_TABLES_CONNECTION_STRING") or os.environ.get("STORAGE_ACCOUNT_NAME"):
        return None
    return EnvValidationError(
        var_name="AZURE_TABLES_CONNECTION_STRING",
        message="No Table Storage credentials configured",
        current_value=None,
        expected_pattern="AZURE_TABLES_CONNECTION_STRING or STORAGE_ACCOUNT_NAME",
        fix_suggestion="Set a connection string for local development or the account name for managed identity",
    )


def validate_environment(
    rules: Optional[Dict[str, EnvVarRule]] = None,
    include_warnings: bool = True
) -> List[EnvValidationError]:
    """
    Validate all environment variables against their rules.

    Args:
        rules: Optional custom rules dict (defaults to ENV_VAR_RULES)
        include_warnings: Whether to include warnings for vars using defaults

    Returns:
        List of EnvValidationError objects (errors and optionally warnings)
    """
    if rules is None:
        rules = ENV_VAR_RULES

    results = []
    auth_error = validate_storage_auth()
    if auth_error:
        results.append(auth_error)

    for var_name, rule in rules.items():
        result = validate_single_var(var_name, rule, include_warnings=include_warnings)
        if result:
            results.append(result)

    return results


def log_validation_results(logger) -> bool:
    """
    Log validation results at appropriate levels.

    Returns:
        True if no errors (warnings are OK), False otherwise
    """
    all_results = validate_environment(include_warnings=True)
    errors = [r for r in all_results if r.severity == "error"]
    warnings = [r for r in all_results if r.severity == "warning"]

    for error in errors:
        logger.error(f"ENV VAR ERROR: {error.var_name} - {error.message}")
        logger.error(f"  Expected: {error.expected_pattern}")
        logger.error(f"  Fix: {error.fix_suggestion}")

    if warnings:
        logger.warning(f"ENV VARS: {len(warnings)} optional variables using defaults")
        for warning in warnings:
            logger.warning(f"  {warning.var_name} -> {warning.expected_pattern.replace('Default: ', '')}")

    if errors:
        logger.error(f"STARTUP_FAILED: {len(errors)} environment variable errors")
        return False
    return True


__all__ = [
    'ENV_VAR_RULES',
    'EnvVarRule',
    'EnvValidationError',
    'validate_environment',
    'validate_single_var',
    'validate_storage_auth',
    'log_validation_results',
]
