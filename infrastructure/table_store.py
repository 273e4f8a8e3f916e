# ============================================================================
# TABLE STORE - PARTITIONED KEY-VALUE STORAGE ABSTRACTION
# ============================================================================
# STATUS: Infrastructure - Storage boundary for all repositories
# PURPOSE: Async table interface, filter builder, Azure Table Storage backend
# EXPORTS: TableRecord, FilterOp, TableFilter, TableStore, AzureTableStore
# DEPENDENCIES: azure-data-tables (aio), azure-core, exceptions, util_logger
# ============================================================================
"""
Table Store - Partitioned key-value storage abstraction.

One TableStore instance fronts one logical table. Entities are plain
dicts addressed by (PartitionKey, RowKey); every read returns the
entity's etag, and update_entity() only succeeds when that etag is still
current.

Outcome contract (all backends):
    get_entity on a missing row     -> None
    stale etag / duplicate create   -> ConflictError
    any other storage failure       -> UpstreamError

Architecture:
    TableStore (abstract)
        ├── AzureTableStore (azure.data.tables.aio)
        └── InMemoryTableStore (tests/factories)

Exports:
    TableRecord: Entity dict plus etag
    FilterOp: Comparison operators
    TableFilter: Conjunctive filter rendered to OData with parameters
    TableStore: Abstract async table interface
    AzureTableStore: Azure Table Storage implementation
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, AsyncIterator, Dict, List, Optional, Tuple

from azure.core import MatchConditions
from azure.core.exceptions import (
    HttpResponseError,
    ResourceExistsError,
    ResourceModifiedError,
    ResourceNotFoundError as AzureResourceNotFoundError,
    ServiceRequestError,
)
from azure.data.tables import UpdateMode
from azure.data.tables.aio import TableClient

from exceptions import ConflictError, ResourceNotFoundError, UpstreamError
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.ADAPTER, "TableStore")


# ============================================================================
# RECORDS AND FILTERS
# ============================================================================

@dataclass
class TableRecord:
    """Entity as stored plus its concurrency token."""
    entity: Dict[str, Any]
    etag: Optional[str] = None

    @property
    def partition_key(self) -> str:
        return self.entity.get("PartitionKey", "")

    @property
    def row_key(self) -> str:
        return self.entity.get("RowKey", "")


class FilterOp(str, Enum):
    """OData comparison operators."""
    EQ = "eq"
    NE = "ne"
    GT = "gt"
    GE = "ge"
    LT = "lt"
    LE = "le"


@dataclass(frozen=True)
class _Clause:
    prop: str
    op: FilterOp
    value: Any


@dataclass(frozen=True)
class TableFilter:
    """
    Conjunction of (property, operator, value) clauses.

    Immutable: each builder call returns a new filter. Values never enter
    the filter text; render() emits named parameters for the SDK.

    Usage:
        flt = TableFilter().eq("Status", "NeedsAssistance").ne("State", "Resolved")
        text, params = flt.render()
        # "Status eq @p0 and State ne @p1", {"p0": "NeedsAssistance", "p1": "Resolved"}
    """
    clauses: Tuple[_Clause, ...] = field(default_factory=tuple)

    def where(self, prop: str, op: FilterOp, value: Any) -> "TableFilter":
        return TableFilter(self.clauses + (_Clause(prop, FilterOp(op), value),))

    def eq(self, prop: str, value: Any) -> "TableFilter":
        return self.where(prop, FilterOp.EQ, value)

    def ne(self, prop: str, value: Any) -> "TableFilter":
        return self.where(prop, FilterOp.NE, value)

    def ge(self, prop: str, value: Any) -> "TableFilter":
        return self.where(prop, FilterOp.GE, value)

    def lt(self, prop: str, value: Any) -> "TableFilter":
        return self.where(prop, FilterOp.LT, value)

    def partition(self, partition_key: str) -> "TableFilter":
        return self.eq("PartitionKey", partition_key)

    @property
    def is_empty(self) -> bool:
        return not self.clauses

    def render(self) -> Tuple[Optional[str], Dict[str, Any]]:
        """OData filter text with @pN placeholders and the parameter dict (None when empty)."""
        if not self.clauses:
            return None, {}
        parts: List[str] = []
        params: Dict[str, Any] = {}
        for index, clause in enumerate(self.clauses):
            name = f"p{index}"
            parts.append(f"{clause.prop} {clause.op.value} @{name}")
            params[name] = clause.value
        return " and ".join(parts), params

    def matches(self, entity: Dict[str, Any]) -> bool:
        """
        Evaluate against a plain entity dict.

        A clause on a property the entity lacks never matches, mirroring
        the table service.
        """
        for clause in self.clauses:
            if clause.prop not in entity:
                return False
            if not _compare(entity[clause.prop], clause.op, clause.value):
                return False
        return True


def _compare(left: Any, op: FilterOp, right: Any) -> bool:
    if isinstance(left, datetime) and isinstance(right, datetime):
        # naive values are treated as UTC
        if left.tzinfo is None:
            left = left.replace(tzinfo=right.tzinfo)
        if right.tzinfo is None:
            right = right.replace(tzinfo=left.tzinfo)
    try:
        if op == FilterOp.EQ:
            return left == right
        if op == FilterOp.NE:
            return left != right
        if op == FilterOp.GT:
            return left > right
        if op == FilterOp.GE:
            return left >= right
        if op == FilterOp.LT:
            return left < right
        if op == FilterOp.LE:
            return left <= right
    except TypeError:
        return False
    return False


# ============================================================================
# ABSTRACT INTERFACE
# ============================================================================

class TableStore(ABC):
    """
    Async interface to one partitioned table.

    Implementations must honor the outcome contract in the module docstring.
    """

    def __init__(self, table_name: str):
        self.table_name = table_name

    @abstractmethod
    async def ensure_table(self) -> bool:
        """Create the table if missing. Returns True if it was created."""

    @abstractmethod
    async def get_entity(self, partition_key: str, row_key: str) -> Optional[TableRecord]:
        """Point lookup, None when the row does not exist."""

    @abstractmethod
    async def create_entity(self, entity: Dict[str, Any]) -> TableRecord:
        """Insert a new row. ConflictError if the key already exists."""

    @abstractmethod
    async def update_entity(self, entity: Dict[str, Any], etag: str) -> TableRecord:
        """Replace a row only if its etag still matches. ConflictError otherwise."""

    @abstractmethod
    async def upsert_entity(self, entity: Dict[str, Any]) -> TableRecord:
        """Insert or replace without a version precondition (last writer wins)."""

    @abstractmethod
    async def delete_entity(self, partition_key: str, row_key: str) -> None:
        """Delete a row; deleting a missing row is not an error."""

    @abstractmethod
    def query_entities(self, table_filter: Optional[TableFilter] = None) -> AsyncIterator[TableRecord]:
        """Iterate every matching row across all result pages."""

    async def close(self) -> None:
        return None


# ============================================================================
# AZURE TABLE STORAGE
# ============================================================================

class AzureTableStore(TableStore):
    """
    TableStore backed by azure.data.tables.aio.TableClient.

    Create with from_connection_string() for Azurite/key auth or
    from_endpoint() with a token credential for managed identity.
    """

    def __init__(self, client: TableClient):
        super().__init__(client.table_name)
        self._client = client

    @classmethod
    def from_connection_string(cls, connection_string: str, table_name: str) -> "AzureTableStore":
        return cls(TableClient.from_connection_string(connection_string, table_name=table_name))

    @classmethod
    def from_endpoint(cls, endpoint: str, table_name: str, credential) -> "AzureTableStore":
        return cls(TableClient(endpoint=endpoint, table_name=table_name, credential=credential))

    def _upstream(self, operation: str, error: Exception) -> UpstreamError:
        logger.error(f"Table {self.table_name}: {operation} failed: {type(error).__name__}: {error}")
        return UpstreamError(f"Table storage {operation} failed on {self.table_name}: {error}")

    async def ensure_table(self) -> bool:
        try:
            await self._client.create_table()
            logger.info(f"Created table: {self.table_name}")
            return True
        except ResourceExistsError:
            logger.debug(f"Table already exists: {self.table_name}")
            return False
        except (HttpResponseError, ServiceRequestError) as e:
            raise self._upstream("create_table", e) from e

    async def get_entity(self, partition_key: str, row_key: str) -> Optional[TableRecord]:
        try:
            entity = await self._client.get_entity(partition_key=partition_key, row_key=row_key)
        except AzureResourceNotFoundError:
            return None
        except (HttpResponseError, ServiceRequestError) as e:
            raise self._upstream("get_entity", e) from e
        return TableRecord(dict(entity), entity.metadata.get("etag"))

    async def create_entity(self, entity: Dict[str, Any]) -> TableRecord:
        try:
            metadata = await self._client.create_entity(entity=entity)
        except ResourceExistsError as e:
            raise ConflictError(
                f"Entity {entity.get('PartitionKey')}/{entity.get('RowKey')} already exists in {self.table_name}"
            ) from e
        except (HttpResponseError, ServiceRequestError) as e:
            raise self._upstream("create_entity", e) from e
        return TableRecord(dict(entity), metadata.get("etag"))

    async def update_entity(self, entity: Dict[str, Any], etag: str) -> TableRecord:
        try:
            metadata = await self._client.update_entity(
                entity=entity,
                mode=UpdateMode.REPLACE,
                etag=etag,
                match_condition=MatchConditions.IfNotModified,
            )
        except ResourceModifiedError as e:
            raise ConflictError(
                f"Entity {entity.get('PartitionKey')}/{entity.get('RowKey')} changed since it was read"
            ) from e
        except AzureResourceNotFoundError as e:
            raise ResourceNotFoundError(
                f"Entity {entity.get('PartitionKey')}/{entity.get('RowKey')} not found in {self.table_name}"
            ) from e
        except HttpResponseError as e:
            if e.status_code == 412:
                raise ConflictError(
                    f"Entity {entity.get('PartitionKey')}/{entity.get('RowKey')} changed since it was read"
                ) from e
            raise self._upstream("update_entity", e) from e
        except ServiceRequestError as e:
            raise self._upstream("update_entity", e) from e
        return TableRecord(dict(entity), metadata.get("etag"))

    async def upsert_entity(self, entity: Dict[str, Any]) -> TableRecord:
        try:
            metadata = await self._client.upsert_entity(entity=entity, mode=UpdateMode.REPLACE)
        except (HttpResponseError, ServiceRequestError) as e:
            raise self._upstream("upsert_entity", e) from e
        return TableRecord(dict(entity), metadata.get("etag"))

    async def delete_entity(self, partition_key: str, row_key: str) -> None:
        try:
            await self._client.delete_entity(partition_key=partition_key, row_key=row_key)
        except (HttpResponseError, ServiceRequestError) as e:
            raise self._upstream("delete_entity", e) from e

    async def query_entities(self, table_filter: Optional[TableFilter] = None) -> AsyncIterator[TableRecord]:
        text, params = (table_filter or TableFilter()).render()
        try:
            if text is None:
                pages = self._client.list_entities()
            else:
                pages = self._client.query_entities(query_filter=text, parameters=params)
            async for entity in pages:
                yield TableRecord(dict(entity), entity.metadata.get("etag"))
        except (HttpResponseError, ServiceRequestError) as e:
            raise self._upstream("query_entities", e) from e

    async def close(self) -> None:
        await self._client.close()
