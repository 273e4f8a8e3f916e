# ============================================================================
# CHECK-IN REPOSITORY
# ============================================================================
# STATUS: Infrastructure - checkinrecords table
# PURPOSE: CheckInRecord <-> entity mapping and check-in query shapes
# EXPORTS: CheckInRepository
# DEPENDENCIES: infrastructure.table_repository, core.models
# ============================================================================
"""
Check-in Repository.

Table Schema:
    PartitionKey: user id
    RowKey: check-in id
    CheckInTimestamp: submission time (the service reserves "Timestamp")
    LocationPrecision / Status / State: enum names
    Notes, HeadcountCampaignId, AcknowledgedByUserId, ResolvedByUserId:
        stored as "" when unset, read back as None

Exports:
    CheckInRepository: Check-in persistence
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from core.models import (
    CheckInRecord,
    CheckInState,
    LocationPrecision,
    SafetyStatus,
)
from .table_repository import TableRepository, Versioned
from .table_store import TableFilter


class CheckInRepository(TableRepository):
    """Persistence for CheckInRecord, partitioned by user id."""

    ENTITY_TYPE = "CheckInRecord"

    # ------------------------------------------------------------------
    # Mapping
    # ------------------------------------------------------------------

    def to_entity(self, record: CheckInRecord) -> Dict[str, Any]:
        return self._compact({
            "PartitionKey": record.user_id,
            "RowKey": record.id,
            "UserId": record.user_id,
            "UserDisplayName": record.user_display_name,
            "UserEmail": record.user_email,
            "JobTitle": record.job_title,
            "Department": record.department,
            "OfficeLocation": record.office_location,
            "CheckInTimestamp": record.timestamp,
            "Latitude": self._as_float(record.latitude),
            "Longitude": self._as_float(record.longitude),
            "LocationPrecision": record.location_precision.value,
            "Status": record.status.value,
            "Notes": record.notes or "",
            "State": record.state.value,
            "HeadcountCampaignId": record.headcount_campaign_id or "",
            "AcknowledgedByUserId": record.acknowledged_by_user_id or "",
            "AcknowledgedTimestamp": record.acknowledged_timestamp,
            "ResolvedByUserId": record.resolved_by_user_id or "",
            "ResolvedTimestamp": record.resolved_timestamp,
        })

    def from_entity(self, entity: Dict[str, Any]) -> CheckInRecord:
        return CheckInRecord(
            id=entity.get("RowKey", ""),
            user_id=entity.get("UserId") or entity.get("PartitionKey", ""),
            user_display_name=entity.get("UserDisplayName") or "",
            user_email=entity.get("UserEmail") or "",
            job_title=self._blank_to_none(entity.get("JobTitle")),
            department=self._blank_to_none(entity.get("Department")),
            office_location=self._blank_to_none(entity.get("OfficeLocation")),
            timestamp=self._as_utc(entity.get("CheckInTimestamp")),
            latitude=self._as_float(entity.get("Latitude")),
            longitude=self._as_float(entity.get("Longitude")),
            location_precision=LocationPrecision.parse(entity.get("LocationPrecision")),
            status=SafetyStatus.parse(entity.get("Status")),
            notes=self._blank_to_none(entity.get("Notes")),
            state=CheckInState.parse(entity.get("State")),
            headcount_campaign_id=self._blank_to_none(entity.get("HeadcountCampaignId")),
            acknowledged_by_user_id=self._blank_to_none(entity.get("AcknowledgedByUserId")),
            acknowledged_timestamp=self._as_utc(entity.get("AcknowledgedTimestamp")),
            resolved_by_user_id=self._blank_to_none(entity.get("ResolvedByUserId")),
            resolved_timestamp=self._as_utc(entity.get("ResolvedTimestamp")),
        )

    # ------------------------------------------------------------------
    # Point operations
    # ------------------------------------------------------------------

    async def get_versioned(self, user_id: str, checkin_id: str) -> Optional[Versioned[CheckInRecord]]:
        record = await self.store.get_entity(user_id, checkin_id)
        if record is None:
            return None
        return Versioned(self.from_entity(record.entity), record.etag)

    async def get(self, user_id: str, checkin_id: str) -> Optional[CheckInRecord]:
        versioned = await self.get_versioned(user_id, checkin_id)
        return versioned.model if versioned else None

    async def insert(self, record: CheckInRecord) -> CheckInRecord:
        stored = await self.store.create_entity(self.to_entity(record))
        self.logger.debug(f"Inserted check-in {record.user_id}/{record.id}")
        return self.from_entity(stored.entity)

    async def replace(self, record: CheckInRecord, etag: Optional[str]) -> CheckInRecord:
        stored = await self.store.update_entity(self.to_entity(record), etag)
        self.logger.debug(f"Replaced check-in {record.user_id}/{record.id}")
        return self.from_entity(stored.entity)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def list_for_user(self, user_id: str, since: Optional[datetime] = None) -> List[CheckInRecord]:
        """All check-ins in a user's partition, optionally from `since` onwards. Unordered."""
        table_filter = TableFilter().partition(user_id)
        if since is not None:
            table_filter = table_filter.ge("CheckInTimestamp", since)
        return [self.from_entity(r.entity) for r in await self._query(table_filter)]

    async def list_needing_assistance(self) -> List[CheckInRecord]:
        """Cross-partition scan: NeedsAssistance and not yet Resolved. Unordered."""
        table_filter = (
            TableFilter()
            .eq("Status", SafetyStatus.NEEDS_ASSISTANCE.value)
            .ne("State", CheckInState.RESOLVED.value)
        )
        return [self.from_entity(r.entity) for r in await self._query(table_filter)]

    async def list_by_campaign(self, campaign_id: str) -> List[CheckInRecord]:
        """Cross-partition scan by HeadcountCampaignId. Unordered."""
        table_filter = TableFilter().eq("HeadcountCampaignId", campaign_id)
        return [self.from_entity(r.entity) for r in await self._query(table_filter)]

    async def scan(self, limit: int) -> List[CheckInRecord]:
        """Read rows from any partition until `limit` are buffered."""
        rows: List[CheckInRecord] = []
        async for record in self.store.query_entities(None):
            rows.append(self.from_entity(record.entity))
            if len(rows) >= limit:
                break
        return rows

    async def write_test_row(self, partition_key: str) -> str:
        """Create and delete a throwaway row. Returns the test row key."""
        row_id = f"test-{uuid.uuid4()}"
        row = CheckInRecord(
            id=row_id,
            user_id=partition_key,
            user_display_name="Test User",
            user_email="test@example.com",
            timestamp=datetime.now(timezone.utc),
        )
        await self.store.create_entity(self.to_entity(row))
        await self.store.delete_entity(partition_key, row_id)
        return row_id
