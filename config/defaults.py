"""
Configuration Defaults - Single source of truth for all default values.

Organization:
    - StorageDefaults: Table names, partition constants, audit partition scheme
    - DirectoryDefaults: Directory (Microsoft Graph) endpoint and timeout
    - AppDefaults: Environment, logging, lookback windows, page sizes
    - RetryDefaults: Bounded retry for optimistic concurrency conflicts

Usage:
    from config.defaults import StorageDefaults, AppDefaults

    # In Pydantic Field definitions:
    checkins_table: str = Field(default=StorageDefaults.CHECKINS_TABLE, ...)
"""


# =============================================================================
# STORAGE DEFAULTS
# =============================================================================

class StorageDefaults:
    """
    Azure Table Storage defaults.

    Table names match the tables provisioned for the original deployment
    and can each be overridden by environment variable.
    """

    CHECKINS_TABLE = "checkinrecords"
    PREFERENCES_TABLE = "userpreferences"
    CAMPAIGNS_TABLE = "headcountcampaigns"
    AUDIT_TABLE = "auditlogs"

    # Fixed partition for the preferences table (row key = user id)
    PREFERENCES_PARTITION = "UserPreferences"

    # Audit partitioning: "entity_type" or "month" (YYYY-MM bucket)
    AUDIT_PARTITION_SCHEME = "entity_type"

    # Partition used by the storage connectivity test row
    TEST_ROW_PARTITION = "diagnostics"

    TABLE_ENDPOINT_TEMPLATE = "https://{account}.table.core.windows.net"


# =============================================================================
# DIRECTORY DEFAULTS
# =============================================================================

class DirectoryDefaults:
    """Microsoft Graph defaults for profile and direct-report lookups."""

    BASE_URL = "https://graph.microsoft.com/v1.0"
    TIMEOUT_SECONDS = 10.0
    PROFILE_FIELDS = "id,displayName,mail,userPrincipalName,department,jobTitle,officeLocation"


# =============================================================================
# APPLICATION DEFAULTS
# =============================================================================

class AppDefaults:
    """Application-wide defaults (safe for any deployment)."""

    ENVIRONMENT = "dev"
    DEBUG_MODE = False
    LOG_LEVEL = "INFO"

    # Check-in history window (days) and page size
    HISTORY_LOOKBACK_DAYS = 30
    HISTORY_MAX_RESULTS = 50

    # Recent audit window (days, roughly two months) and page size
    AUDIT_LOOKBACK_DAYS = 60
    AUDIT_MAX_RESULTS = 100


# =============================================================================
# RETRY DEFAULTS
# =============================================================================

class RetryDefaults:
    """Retry-on-conflict settings for read-modify-write sequences."""

    CONFLICT_MAX_ATTEMPTS = 3
    CONFLICT_BASE_DELAY_SECONDS = 0.1
    CONFLICT_MAX_DELAY_SECONDS = 2.0
