# ============================================================================
# STORAGE CONFIGURATION
# ============================================================================
# STATUS: Configuration - Azure Table Storage
# PURPOSE: Account/connection settings, table names, audit partition scheme
# EXPORTS: AuditPartitionScheme, StorageConfig
# DEPENDENCIES: pydantic, os, enum
# SOURCE: Environment variables (AZURE_TABLES_CONNECTION_STRING, STORAGE_ACCOUNT_NAME, ...)
# ============================================================================

"""
Azure Table Storage Configuration.

Provides configuration for:
- Authentication (connection string OR managed identity against an account)
- The four logical tables (check-ins, preferences, campaigns, audit logs)
- Audit log partitioning scheme
"""

import os
from enum import Enum
from typing import Optional, List
from pydantic import BaseModel, Field

from .defaults import StorageDefaults


class AuditPartitionScheme(str, Enum):
    """
    How audit log rows are partitioned.

    ENTITY_TYPE: PartitionKey = entity type ("CheckInRecord", ...).
        Entity history is a single-partition scan.
    MONTH: PartitionKey = "YYYY-MM" of the audit timestamp.
        Recent-activity queries only touch the last few partitions.
    """
    ENTITY_TYPE = "entity_type"
    MONTH = "month"


class StorageConfig(BaseModel):
    """
    Table Storage configuration.

    Exactly one of connection_string / account_name is needed. The
    connection string wins when both are set (local development with
    Azurite uses a connection string).
    """

    connection_string: Optional[str] = Field(
        default=None,
        description="Table Storage connection string (Azurite or key-based)"
    )

    account_name: Optional[str] = Field(
        default=None,
        description="Storage account name for managed identity authentication"
    )

    checkins_table: str = Field(default=StorageDefaults.CHECKINS_TABLE)
    preferences_table: str = Field(default=StorageDefaults.PREFERENCES_TABLE)
    campaigns_table: str = Field(default=StorageDefaults.CAMPAIGNS_TABLE)
    audit_table: str = Field(default=StorageDefaults.AUDIT_TABLE)

    audit_partition_scheme: AuditPartitionScheme = Field(
        default=AuditPartitionScheme(StorageDefaults.AUDIT_PARTITION_SCHEME),
        description="Partitioning of the audit log table"
    )

    @property
    def table_endpoint(self) -> Optional[str]:
        """Table service endpoint for managed identity, None without an account."""
        if not self.account_name:
            return None
        return StorageDefaults.TABLE_ENDPOINT_TEMPLATE.format(account=self.account_name)

    @property
    def table_names(self) -> List[str]:
        """All tables the application requires."""
        return [
            self.checkins_table,
            self.preferences_table,
            self.campaigns_table,
            self.audit_table,
        ]

    def debug_dict(self) -> dict:
        """Sanitized view for diagnostics (connection string masked)."""
        return {
            'connection_string': "***MASKED***" if self.connection_string else None,
            'account_name': self.account_name,
            'tables': self.table_names,
            'audit_partition_scheme': self.audit_partition_scheme.value,
        }

    @classmethod
    def from_environment(cls) -> "StorageConfig":
        """Load from environment variables."""
        return cls(
            connection_string=os.environ.get("AZURE_TABLES_CONNECTION_STRING") or None,
            account_name=os.environ.get("STORAGE_ACCOUNT_NAME") or None,
            checkins_table=os.environ.get("CHECKINS_TABLE", StorageDefaults.CHECKINS_TABLE),
            preferences_table=os.environ.get("PREFERENCES_TABLE", StorageDefaults.PREFERENCES_TABLE),
            campaigns_table=os.environ.get("CAMPAIGNS_TABLE", StorageDefaults.CAMPAIGNS_TABLE),
            audit_table=os.environ.get("AUDIT_TABLE", StorageDefaults.AUDIT_TABLE),
            audit_partition_scheme=os.environ.get(
                "AUDIT_PARTITION_SCHEME", StorageDefaults.AUDIT_PARTITION_SCHEME
            ),
        )
