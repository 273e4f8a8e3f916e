"""
Service Layer - Check-in, Headcount, Preferences and Audit.

Services are wired explicitly in ServiceContainer. No decorators, no
auto-discovery: if a service is not built in ServiceContainer.from_stores
it is not available to the triggers.

Wiring:
    stores = RepositoryFactory.create_table_stores()      # one TableStore per table
    repos = RepositoryFactory.create_repositories(stores) # entity repositories
    audit = AuditService(repos['audit_repo'])             # shared by every service
    CheckInService / HeadcountService / PreferenceService(repo, audit)

Triggers call get_services(); tests build a container over in-memory
stores and install it with set_services().

Exports:
    AuditService, CheckInService, HeadcountService, PreferenceService
    ServiceContainer: All services over one set of table stores
    get_services / set_services / reset_services: Process-wide container
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, Optional

from config import AppConfig, get_config
from core.models import utc_now
from infrastructure import DirectoryClient, RepositoryFactory, TableInitializer, TableStore
from infrastructure.auth import close_azure_credential
from util_logger import LoggerFactory, ComponentType

from .audit_service import AuditService
from .checkin_service import CheckInService
from .headcount_service import HeadcountService
from .preference_service import PreferenceService

logger = LoggerFactory.create_logger(ComponentType.FACTORY, "ServiceContainer")


@dataclass
class ServiceContainer:
    """Services sharing one set of table stores and one audit trail."""

    stores: Dict[str, TableStore]
    audit: AuditService
    checkins: CheckInService
    headcount: HeadcountService
    preferences: PreferenceService
    directory_factory: Callable[[Optional[str]], DirectoryClient] = field(default=DirectoryClient)

    @classmethod
    def from_stores(
        cls,
        stores: Dict[str, TableStore],
        config: Optional[AppConfig] = None,
        clock: Callable[[], datetime] = utc_now,
        directory_factory: Callable[[Optional[str]], DirectoryClient] = DirectoryClient,
    ) -> "ServiceContainer":
        config = config or get_config()
        repos = RepositoryFactory.create_repositories(stores, config.storage)
        audit = AuditService(repos['audit_repo'], config, clock)
        return cls(
            stores=stores,
            audit=audit,
            checkins=CheckInService(repos['checkin_repo'], audit, config, clock),
            headcount=HeadcountService(repos['headcount_repo'], audit, config, clock),
            preferences=PreferenceService(repos['preferences_repo'], audit, clock),
            directory_factory=directory_factory,
        )

    async def ensure_tables(self) -> Dict[str, bool]:
        return await TableInitializer(self.stores.values()).ensure_tables()

    async def close(self) -> None:
        """Close every table store and the shared managed identity credential."""
        for store in self.stores.values():
            await store.close()
        await close_azure_credential()


_services: Optional[ServiceContainer] = None


def get_services() -> ServiceContainer:
    """Process-wide container, built from configuration on first use."""
    global _services
    if _services is None:
        config = get_config()
        stores = RepositoryFactory.create_table_stores(config.storage)
        _services = ServiceContainer.from_stores(stores, config)
        logger.info(f"Services initialized over tables: {', '.join(config.storage.table_names)}")
    return _services


def set_services(container: Optional[ServiceContainer]) -> None:
    """Install a container (tests); None clears it."""
    global _services
    _services = container


def reset_services() -> None:
    set_services(None)


__all__ = [
    'AuditService',
    'CheckInService',
    'HeadcountService',
    'PreferenceService',
    'ServiceContainer',
    'get_services',
    'set_services',
    'reset_services',
]
