"""
Main Application Configuration.

Composes domain-specific configuration modules:
    - StorageConfig (Table Storage account, tables, audit partitioning)
    - DirectoryConfig (Microsoft Graph)

Exports:
    AppConfig: Main configuration class

Dependencies:
    pydantic: BaseModel for configuration validation
    config.storage_config: StorageConfig
    config.directory_config: DirectoryConfig
    config.defaults: Default value constants

Pattern:
    Composition over inheritance - domain configs are composed, not inherited.
"""

import os
from pydantic import BaseModel, Field, model_validator

from .storage_config import StorageConfig
from .directory_config import DirectoryConfig
from .defaults import AppDefaults, RetryDefaults


# ============================================================================
# APPLICATION CONFIGURATION
# ============================================================================

class AppConfig(BaseModel):
    """
    Application configuration - composition of domain configs.

    Each domain config manages its own validation and defaults.
    """

    # ========================================================================
    # Core Application Settings
    # ========================================================================

    debug_mode: bool = Field(
        default=AppDefaults.DEBUG_MODE,
        description="Enable debug mode for verbose diagnostics"
    )

    environment: str = Field(
        default=AppDefaults.ENVIRONMENT,
        description="Environment name (dev, qa, prod)",
        examples=["dev", "qa", "prod"]
    )

    log_level: str = Field(
        default=AppDefaults.LOG_LEVEL,
        description="Root log level"
    )

    # ========================================================================
    # Query Windows
    # ========================================================================

    history_lookback_days: int = Field(
        default=AppDefaults.HISTORY_LOOKBACK_DAYS,
        ge=1,
        le=3650,
        description="Check-in history window in days"
    )

    history_max_results: int = Field(
        default=AppDefaults.HISTORY_MAX_RESULTS,
        ge=1,
        le=1000,
        description="Default page size for check-in history"
    )

    audit_lookback_days: int = Field(
        default=AppDefaults.AUDIT_LOOKBACK_DAYS,
        ge=1,
        le=3650,
        description="Window for recent audit queries in days"
    )

    audit_max_results: int = Field(
        default=AppDefaults.AUDIT_MAX_RESULTS,
        ge=1,
        le=5000,
        description="Default page size for recent audit queries"
    )

    # ========================================================================
    # Optimistic Concurrency Retries
    # ========================================================================

    conflict_max_attempts: int = Field(
        default=RetryDefaults.CONFLICT_MAX_ATTEMPTS,
        ge=1,
        le=10,
        description="Attempts for a read-modify-write sequence before surfacing ConflictError"
    )

    conflict_base_delay: float = Field(
        default=RetryDefaults.CONFLICT_BASE_DELAY_SECONDS,
        ge=0,
        le=10,
        description="Base delay in seconds for exponential backoff (first retry)"
    )

    conflict_max_delay: float = Field(
        default=RetryDefaults.CONFLICT_MAX_DELAY_SECONDS,
        ge=0,
        le=60,
        description="Maximum delay in seconds between retries (caps exponential growth)"
    )

    # ========================================================================
    # Domain Configurations
    # ========================================================================

    storage: StorageConfig = Field(default_factory=StorageConfig)
    directory: DirectoryConfig = Field(default_factory=DirectoryConfig)

    @model_validator(mode='after')
    def _delay_bounds(self) -> "AppConfig":
        if self.conflict_max_delay < self.conflict_base_delay:
            raise ValueError("conflict_max_delay must be >= conflict_base_delay")
        return self

    @classmethod
    def from_environment(cls) -> "AppConfig":
        """Load all configs from environment."""
        return cls(
            debug_mode=os.environ.get("DEBUG_MODE", str(AppDefaults.DEBUG_MODE).lower()).lower() == "true",
            environment=os.environ.get("ENVIRONMENT", AppDefaults.ENVIRONMENT),
            log_level=os.environ.get("LOG_LEVEL", AppDefaults.LOG_LEVEL),
            history_lookback_days=int(os.environ.get(
                "HISTORY_LOOKBACK_DAYS", str(AppDefaults.HISTORY_LOOKBACK_DAYS))),
            history_max_results=int(os.environ.get(
                "HISTORY_MAX_RESULTS", str(AppDefaults.HISTORY_MAX_RESULTS))),
            audit_lookback_days=int(os.environ.get(
                "AUDIT_LOOKBACK_DAYS", str(AppDefaults.AUDIT_LOOKBACK_DAYS))),
            audit_max_results=int(os.environ.get(
                "AUDIT_MAX_RESULTS", str(AppDefaults.AUDIT_MAX_RESULTS))),
            conflict_max_attempts=int(os.environ.get(
                "CONFLICT_MAX_ATTEMPTS", str(RetryDefaults.CONFLICT_MAX_ATTEMPTS))),
            conflict_base_delay=float(os.environ.get(
                "CONFLICT_BASE_DELAY", str(RetryDefaults.CONFLICT_BASE_DELAY_SECONDS))),
            conflict_max_delay=float(os.environ.get(
                "CONFLICT_MAX_DELAY", str(RetryDefaults.CONFLICT_MAX_DELAY_SECONDS))),

            # Domain configs
            storage=StorageConfig.from_environment(),
            directory=DirectoryConfig.from_environment(),
        )
