# ============================================================================
# TABLE REPOSITORY BASE
# ============================================================================
# STATUS: Infrastructure - Root of the entity repository hierarchy
# PURPOSE: Shared logging, column conversion and query helpers over a TableStore
# EXPORTS: Versioned, TableRepository
# DEPENDENCIES: infrastructure.table_store, util_logger
# ============================================================================
"""
Table Repository Base.

Entity repositories translate between domain models and table entities
and own the query shapes for their table. They contain no workflow
rules and never swallow storage errors; degrading reads is the service
layer's decision.

Architecture:
    TableRepository (this file)
        ├── CheckInRepository
        ├── HeadcountRepository
        ├── PreferencesRepository
        └── AuditRepository

Exports:
    Versioned: Model paired with the etag it was read with
    TableRepository: Base class for entity repositories
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Generic, List, Optional, TypeVar

from util_logger import LoggerFactory, ComponentType
from .table_store import TableFilter, TableRecord, TableStore

M = TypeVar("M")


@dataclass
class Versioned(Generic[M]):
    """A model and the concurrency token of the row it came from."""
    model: M
    etag: Optional[str]


class TableRepository:
    """
    Base repository over one TableStore.

    Subclasses set ENTITY_TYPE (used in logs) and implement the
    to_entity/from_entity mapping for their model.
    """

    ENTITY_TYPE = "Entity"

    def __init__(self, store: TableStore):
        self.store = store
        self.logger = LoggerFactory.create_logger(ComponentType.REPOSITORY, self.__class__.__name__)

    async def _query(self, table_filter: Optional[TableFilter] = None) -> List[TableRecord]:
        """Collect every page of a query."""
        return [record async for record in self.store.query_entities(table_filter)]

    # ------------------------------------------------------------------
    # Column helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _compact(entity: Dict[str, Any]) -> Dict[str, Any]:
        """Drop None values; the table service has no null column type."""
        return {key: value for key, value in entity.items() if value is not None}

    @staticmethod
    def _blank_to_none(value: Any) -> Optional[str]:
        if value is None or value == "":
            return None
        return str(value)

    @staticmethod
    def _as_utc(value: Any) -> Optional[datetime]:
        """Normalize a stored datetime (or ISO string) to an aware UTC datetime."""
        if value is None or value == "":
            return None
        if isinstance(value, str):
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    @staticmethod
    def _as_float(value: Any) -> Optional[float]:
        return None if value is None else float(value)
