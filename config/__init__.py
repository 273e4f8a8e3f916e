"""
Configuration Package - Domain-Specific Configuration Modules

Structure:
    config/
    ├── __init__.py              # This file - exports and singleton
    ├── app_config.py            # Main config (composes domain configs)
    ├── storage_config.py        # Table Storage account, tables, audit partitioning
    ├── directory_config.py      # Microsoft Graph client settings
    ├── env_validation.py        # Startup validation of environment variables
    └── defaults.py              # Default values

Usage:
    from config import get_config
    config = get_config()
    table = config.storage.checkins_table

    # Debug output (secrets masked)
    from config import debug_config
    info = debug_config()
"""

from typing import Optional

from .storage_config import AuditPartitionScheme, StorageConfig
from .directory_config import DirectoryConfig
from .app_config import AppConfig


# ============================================================================
# SINGLETON PATTERN
# ============================================================================

_config_instance: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """
    Get global configuration singleton.

    Returns:
        AppConfig instance loaded from environment
    """
    global _config_instance
    if _config_instance is None:
        _config_instance = AppConfig.from_environment()
    return _config_instance


def reset_config() -> None:
    """Drop the cached singleton so the next get_config() re-reads the environment."""
    global _config_instance
    _config_instance = None


def debug_config() -> dict:
    """
    Get sanitized configuration for debugging (masks sensitive values).

    Returns:
        Dictionary with configuration values, secrets masked
    """
    try:
        config = get_config()
        return {
            'environment': config.environment,
            'debug_mode': config.debug_mode,
            'log_level': config.log_level,
            'storage': config.storage.debug_dict(),
            'directory': {
                'base_url': config.directory.base_url,
                'timeout_seconds': config.directory.timeout_seconds,
            },
            'history_lookback_days': config.history_lookback_days,
            'audit_lookback_days': config.audit_lookback_days,
            'conflict_max_attempts': config.conflict_max_attempts,
        }
    except Exception as e:
        return {'error': f"Failed to load configuration: {e}"}


__all__ = [
    'AppConfig',
    'StorageConfig',
    'DirectoryConfig',
    'AuditPartitionScheme',
    'get_config',
    'reset_config',
    'debug_config',
]
