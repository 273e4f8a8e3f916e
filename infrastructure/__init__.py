"""
Infrastructure Package.

Storage, external API clients and the helpers around them.

Structure:
    table_store.py            TableStore interface, TableFilter, AzureTableStore
    table_repository.py       Repository base and Versioned
    checkin_repository.py     checkinrecords table
    headcount_repository.py   headcountcampaigns table
    preferences_repository.py userpreferences table
    audit_repository.py       auditlogs table
    table_initializer.py      Ensure tables exist
    retry.py                  retry_on_conflict
    directory.py              Microsoft Graph client
    factory.py                RepositoryFactory
    auth/                     Azure credential singleton
"""

from .table_store import (
    TableRecord,
    FilterOp,
    TableFilter,
    TableStore,
    AzureTableStore,
)
from .table_repository import Versioned, TableRepository
from .checkin_repository import CheckInRepository
from .headcount_repository import HeadcountRepository
from .preferences_repository import PreferencesRepository
from .audit_repository import AuditRepository
from .table_initializer import TableInitializer
from .retry import retry_on_conflict, backoff_delay
from .directory import DirectoryClient
from .factory import RepositoryFactory

__all__ = [
    'TableRecord',
    'FilterOp',
    'TableFilter',
    'TableStore',
    'AzureTableStore',
    'Versioned',
    'TableRepository',
    'CheckInRepository',
    'HeadcountRepository',
    'PreferencesRepository',
    'AuditRepository',
    'TableInitializer',
    'retry_on_conflict',
    'backoff_delay',
    'DirectoryClient',
    'RepositoryFactory',
]
