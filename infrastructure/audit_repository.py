# ============================================================================
# AUDIT LOG REPOSITORY
# ============================================================================
# STATUS: Infrastructure - auditlogs table (append-only)
# PURPOSE: AuditLog <-> entity mapping, partition scheme, audit query shapes
# EXPORTS: AuditRepository
# DEPENDENCIES: infrastructure.table_repository, config.AuditPartitionScheme
# ============================================================================
"""
Audit Log Repository.

Rows are inserted once and never updated or deleted.

Partition schemes (config.AuditPartitionScheme):
    ENTITY_TYPE: PartitionKey = entity type. Entity history is a
        single-partition query; recent activity scans the table.
    MONTH: PartitionKey = "YYYY-MM" of AuditTimestamp. Recent activity
        reads only the month buckets inside the lookback window; entity
        history filters on the EntityType column across partitions.

Exports:
    AuditRepository: Audit persistence
"""

from datetime import datetime
from typing import Any, Dict, List

from config import AuditPartitionScheme
from core.models import AuditLog
from .table_repository import TableRepository
from .table_store import TableFilter, TableStore


def month_bucket(moment: datetime) -> str:
    return moment.strftime("%Y-%m")


def month_buckets_between(start: datetime, end: datetime) -> List[str]:
    """Every YYYY-MM bucket from start's month through end's month, inclusive."""
    buckets = []
    year, month = start.year, start.month
    while (year, month) <= (end.year, end.month):
        buckets.append(f"{year:04d}-{month:02d}")
        month += 1
        if month > 12:
            year, month = year + 1, 1
    return buckets


class AuditRepository(TableRepository):
    """Append-only persistence for AuditLog."""

    ENTITY_TYPE = "AuditLog"

    def __init__(self, store: TableStore, scheme: AuditPartitionScheme = AuditPartitionScheme.ENTITY_TYPE):
        super().__init__(store)
        self.scheme = AuditPartitionScheme(scheme)

    def partition_for(self, entry: AuditLog) -> str:
        if self.scheme == AuditPartitionScheme.MONTH:
            return month_bucket(entry.timestamp)
        return entry.entity_type

    def to_entity(self, entry: AuditLog) -> Dict[str, Any]:
        return self._compact({
            "PartitionKey": self.partition_for(entry),
            "RowKey": entry.id,
            "UserId": entry.user_id,
            "UserDisplayName": entry.user_display_name,
            "AuditTimestamp": entry.timestamp,
            "ActionType": entry.action_type,
            "EntityType": entry.entity_type,
            "EntityId": entry.entity_id,
            "ChangeDescription": entry.change_description,
            "PreviousState": entry.previous_state,
            "NewState": entry.new_state,
            "IpAddress": entry.ip_address,
            "UserAgent": entry.user_agent,
        })

    def from_entity(self, entity: Dict[str, Any]) -> AuditLog:
        return AuditLog(
            id=entity.get("RowKey", ""),
            user_id=entity.get("UserId") or "",
            user_display_name=entity.get("UserDisplayName") or "",
            timestamp=self._as_utc(entity.get("AuditTimestamp")),
            action_type=entity.get("ActionType") or "",
            entity_type=entity.get("EntityType") or "",
            entity_id=entity.get("EntityId") or "",
            change_description=entity.get("ChangeDescription") or "",
            previous_state=self._blank_to_none(entity.get("PreviousState")),
            new_state=self._blank_to_none(entity.get("NewState")),
            ip_address=self._blank_to_none(entity.get("IpAddress")),
            user_agent=self._blank_to_none(entity.get("UserAgent")),
        )

    async def insert(self, entry: AuditLog) -> AuditLog:
        await self.store.create_entity(self.to_entity(entry))
        self.logger.debug(f"Audit {entry.action_type} on {entry.entity_type}/{entry.entity_id}")
        return entry

    async def list_for_entity(self, entity_type: str, entity_id: str) -> List[AuditLog]:
        """All entries for one entity. Unordered."""
        if self.scheme == AuditPartitionScheme.MONTH:
            table_filter = TableFilter().eq("EntityType", entity_type)
        else:
            table_filter = TableFilter().partition(entity_type)
        table_filter = table_filter.eq("EntityId", entity_id)
        return [self.from_entity(r.entity) for r in await self._query(table_filter)]

    async def list_since(self, since: datetime, until: datetime) -> List[AuditLog]:
        """Entries with AuditTimestamp >= since. Unordered."""
        if self.scheme == AuditPartitionScheme.MONTH:
            entries: List[AuditLog] = []
            for bucket in month_buckets_between(since, until):
                table_filter = TableFilter().partition(bucket).ge("AuditTimestamp", since)
                entries.extend(self.from_entity(r.entity) for r in await self._query(table_filter))
            return entries
        table_filter = TableFilter().ge("AuditTimestamp", since)
        return [self.from_entity(r.entity) for r in await self._query(table_filter)]
