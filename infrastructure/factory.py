# ============================================================================
# REPOSITORY FACTORY
# ============================================================================
# STATUS: Infrastructure - Central factory for table stores and repositories
# PURPOSE: Build AzureTableStore instances and entity repositories from config
# EXPORTS: RepositoryFactory
# DEPENDENCIES: config, infrastructure.table_store, infrastructure.auth, repositories
# ============================================================================
"""
Repository Factory - Central Creation Point

Single place where table stores are bound to credentials and table
names. Services receive repositories; they never build clients.

Authentication:
    AZURE_TABLES_CONNECTION_STRING set -> connection string (Azurite / key)
    otherwise STORAGE_ACCOUNT_NAME     -> managed identity (DefaultAzureCredential)
"""

from typing import Dict, Optional

from config import StorageConfig, get_config
from exceptions import ConfigurationError
from util_logger import LoggerFactory, ComponentType

from .auth import get_azure_credential
from .table_store import AzureTableStore, TableStore
from .checkin_repository import CheckInRepository
from .headcount_repository import HeadcountRepository
from .preferences_repository import PreferencesRepository
from .audit_repository import AuditRepository

logger = LoggerFactory.create_logger(ComponentType.FACTORY, "RepositoryFactory")


class RepositoryFactory:
    """
    Factory for creating table stores and repository instances.

    Usage:
        stores = RepositoryFactory.create_table_stores()
        repos = RepositoryFactory.create_repositories(stores)
        checkins = repos['checkin_repo']
    """

    @staticmethod
    def create_table_store(table_name: str, storage: Optional[StorageConfig] = None) -> TableStore:
        """
        Create one table store for the configured account.

        Raises:
            ConfigurationError: Neither a connection string nor an account name is configured
        """
        storage = storage or get_config().storage

        if storage.connection_string:
            logger.debug(f"Table store {table_name}: connection string auth")
            return AzureTableStore.from_connection_string(storage.connection_string, table_name)

        if storage.table_endpoint:
            logger.debug(f"Table store {table_name}: managed identity on {storage.account_name}")
            return AzureTableStore.from_endpoint(storage.table_endpoint, table_name, get_azure_credential())

        raise ConfigurationError(
            "Table Storage is not configured: set AZURE_TABLES_CONNECTION_STRING or STORAGE_ACCOUNT_NAME"
        )

    @staticmethod
    def create_table_stores(storage: Optional[StorageConfig] = None) -> Dict[str, TableStore]:
        """Create the four application table stores keyed by role."""
        storage = storage or get_config().storage
        logger.info("Creating table stores")
        return {
            'checkins': RepositoryFactory.create_table_store(storage.checkins_table, storage),
            'preferences': RepositoryFactory.create_table_store(storage.preferences_table, storage),
            'campaigns': RepositoryFactory.create_table_store(storage.campaigns_table, storage),
            'audit': RepositoryFactory.create_table_store(storage.audit_table, storage),
        }

    @staticmethod
    def create_repositories(
        stores: Dict[str, TableStore],
        storage: Optional[StorageConfig] = None,
    ) -> Dict[str, object]:
        """
        Wrap table stores in entity repositories.

        Args:
            stores: Output of create_table_stores() (or in-memory stores in tests)
            storage: Storage config for the audit partition scheme

        Returns:
            Dictionary with checkin_repo, headcount_repo, preferences_repo, audit_repo
        """
        storage = storage or get_config().storage
        return {
            'checkin_repo': CheckInRepository(stores['checkins']),
            'headcount_repo': HeadcountRepository(stores['campaigns']),
            'preferences_repo': PreferencesRepository(stores['preferences']),
            'audit_repo': AuditRepository(stores['audit'], storage.audit_partition_scheme),
        }
