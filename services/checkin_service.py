# ============================================================================
# CHECK-IN SERVICE
# ============================================================================
# STATUS: Service - Check-in lifecycle
# PURPOSE: Create, query, update, acknowledge and resolve safety check-ins
# EXPORTS: CheckInService
# DEPENDENCIES: infrastructure.checkin_repository, infrastructure.retry,
#               services.audit_service, core.logic.transitions
# ============================================================================
"""
Check-in Service.

Lifecycle:
    Submitted --(acknowledge, status NeedsAssistance)--> Acknowledged --(resolve)--> Resolved

Every mutation of an existing record is a read-modify-write run inside
retry_on_conflict: each attempt re-reads the row and its etag,
re-checks preconditions and writes with the etag. The audit entry is
written once, after the successful write.

Reads degrade: a storage failure on a read path is logged and answered
with an empty list or None. Writes always propagate.

Exports:
    CheckInService: Check-in business logic
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional, Tuple

from config import AppConfig, get_config
from config.defaults import StorageDefaults
from core.logic import can_acknowledge, can_checkin_transition, can_resolve
from core.models import (
    AuditActionType,
    CheckInRecord,
    CheckInState,
    SafetyStatus,
    utc_now,
)
from exceptions import InvalidStateError, NotFoundError, UpstreamError, ValidationError
from infrastructure.checkin_repository import CheckInRepository
from infrastructure.retry import retry_on_conflict
from util_logger import LoggerFactory, ComponentType

from .audit_service import AuditService

logger = LoggerFactory.create_logger(ComponentType.SERVICE, "CheckInService")

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)

Mutation = Callable[[CheckInRecord], CheckInRecord]


def newest_first(records: List[CheckInRecord]) -> List[CheckInRecord]:
    return sorted(records, key=lambda r: r.timestamp or _OLDEST, reverse=True)


class CheckInService:
    """
    Check-in lifecycle operations.

    The caller's identity is passed explicitly to every mutating
    operation; the service holds no request state.
    """

    ENTITY_TYPE = "CheckInRecord"

    def __init__(
        self,
        repository: CheckInRepository,
        audit: AuditService,
        config: Optional[AppConfig] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.repository = repository
        self.audit = audit
        self.config = config or get_config()
        self.clock = clock

    # ========================================================================
    # CREATE
    # ========================================================================

    async def create(self, record: CheckInRecord, requestor_id: str) -> CheckInRecord:
        """
        Store a new check-in and audit it as CheckIn.

        A missing id is generated and a missing timestamp set to now. New
        records always start Submitted with no acknowledge/resolve stamps.

        Raises:
            ValidationError: userId is empty
        """
        if not record.user_id or not record.user_id.strip():
            raise ValidationError("User ID is required")

        record = record.model_copy(deep=True)
        if not record.id:
            record.id = str(uuid.uuid4())
        if record.timestamp is None:
            record.timestamp = self.clock()
        record.state = CheckInState.SUBMITTED
        record.acknowledged_by_user_id = None
        record.acknowledged_timestamp = None
        record.resolved_by_user_id = None
        record.resolved_timestamp = None

        stored = await self.repository.insert(record)
        logger.info(f"Check-in {stored.id} created for {stored.user_id} ({stored.status.value})")

        await self.audit.log_action(
            requestor_id,
            stored.user_display_name,
            AuditActionType.CHECK_IN,
            self.ENTITY_TYPE,
            stored.id,
            previous_state=None,
            new_state=stored.to_snapshot(),
        )
        return stored

    # ========================================================================
    # READS (degrade on storage failure)
    # ========================================================================

    async def get(self, user_id: str, checkin_id: str) -> Optional[CheckInRecord]:
        """Point lookup; None when absent."""
        try:
            return await self.repository.get(user_id, checkin_id)
        except UpstreamError as e:
            logger.error(f"Check-in {user_id}/{checkin_id} unavailable: {e}")
            return None

    async def get_latest(self, user_id: str) -> Optional[CheckInRecord]:
        """Check-in with the greatest timestamp in the user's partition, None if there are none."""
        try:
            records = await self.repository.list_for_user(user_id)
        except UpstreamError as e:
            logger.error(f"Latest check-in for {user_id} unavailable: {e}")
            return None
        if not records:
            return None
        return newest_first(records)[0]

    async def get_history(
        self,
        user_id: str,
        max_results: Optional[int] = None,
        lookback_days: Optional[int] = None,
    ) -> List[CheckInRecord]:
        """Up to max_results check-ins inside the lookback window, newest first."""
        if max_results is None:
            max_results = self.config.history_max_results
        if lookback_days is None:
            lookback_days = self.config.history_lookback_days
        since = self.clock() - timedelta(days=lookback_days)
        try:
            records = await self.repository.list_for_user(user_id, since=since)
        except UpstreamError as e:
            logger.error(f"Check-in history for {user_id} unavailable: {e}")
            return []
        return newest_first(records)[:max_results]

    async def list_needing_assistance(self) -> List[CheckInRecord]:
        """
        Open NeedsAssistance check-ins across all users, newest first.

        Cross-partition scan; cost grows with the whole table.
        """
        try:
            records = await self.repository.list_needing_assistance()
        except UpstreamError as e:
            logger.error(f"Needs-assistance listing unavailable: {e}")
            return []
        return newest_first(records)

    async def list_by_campaign(self, campaign_id: str) -> List[CheckInRecord]:
        """Check-ins tagged with a headcount campaign, newest first."""
        try:
            records = await self.repository.list_by_campaign(campaign_id)
        except UpstreamError as e:
            logger.error(f"Check-ins for campaign {campaign_id} unavailable: {e}")
            return []
        return newest_first(records)

    async def list_recent(self, max_results: int = 10) -> List[CheckInRecord]:
        """Diagnostic sample across all users: first max_results rows read, newest first."""
        try:
            records = await self.repository.scan(max_results)
        except UpstreamError as e:
            logger.error(f"Recent check-ins unavailable: {e}")
            return []
        return newest_first(records)[:max_results]

    # ========================================================================
    # READ-MODIFY-WRITE
    # ========================================================================

    async def _modify(
        self,
        user_id: str,
        checkin_id: str,
        mutate: Mutation,
        requestor_id: str,
        requestor_display_name: str,
        description: str,
    ) -> CheckInRecord:
        """
        Apply `mutate` to the stored record with optimistic concurrency, then audit once.

        `mutate` receives a fresh copy of the current record on every
        attempt and raises to abort.
        """

        async def attempt() -> Tuple[CheckInRecord, CheckInRecord]:
            current = await self.repository.get_versioned(user_id, checkin_id)
            if current is None:
                raise NotFoundError("Check-in not found")
            previous = current.model
            updated = mutate(previous.model_copy(deep=True))
            stored = await self.repository.replace(updated, current.etag)
            return previous, stored

        previous, stored = await retry_on_conflict(
            attempt,
            max_attempts=self.config.conflict_max_attempts,
            base_delay=self.config.conflict_base_delay,
            max_delay=self.config.conflict_max_delay,
            description=f"{description} {user_id}/{checkin_id}",
        )

        await self.audit.log_action(
            requestor_id,
            requestor_display_name,
            AuditActionType.UPDATE,
            self.ENTITY_TYPE,
            stored.id,
            previous_state=previous.to_snapshot(),
            new_state=stored.to_snapshot(),
        )
        return stored

    async def update(
        self,
        record: CheckInRecord,
        requestor_id: str,
        requestor_display_name: str = "System",
    ) -> CheckInRecord:
        """
        Update the mutable fields of an existing check-in.

        Only notes, status, state and the acknowledge/resolve stamps are
        taken from `record`; identity and location fields keep their
        stored values.

        Raises:
            ValidationError: id or userId missing
            NotFoundError: no stored record for (userId, id)
            InvalidStateError: the state change is not a forward transition, or an
                acknowledged record would lose status NeedsAssistance
            ConflictError: the record kept changing underneath the update
        """
        if not record.id or not record.user_id:
            raise ValidationError("Check-in ID and User ID are required")

        def apply_fields(current: CheckInRecord) -> CheckInRecord:
            if not can_checkin_transition(current.state, record.state):
                raise InvalidStateError(
                    f"Cannot change check-in state from {current.state.value} to {record.state.value}"
                )
            # An acknowledged record always carries NeedsAssistance
            if record.state == CheckInState.ACKNOWLEDGED and record.status != SafetyStatus.NEEDS_ASSISTANCE:
                raise InvalidStateError("Acknowledged check-ins must keep status NeedsAssistance")
            current.notes = record.notes
            current.status = record.status
            current.state = record.state
            current.acknowledged_by_user_id = record.acknowledged_by_user_id
            current.acknowledged_timestamp = record.acknowledged_timestamp
            current.resolved_by_user_id = record.resolved_by_user_id
            current.resolved_timestamp = record.resolved_timestamp
            return current

        stored = await self._modify(
            record.user_id, record.id, apply_fields,
            requestor_id, requestor_display_name, "update",
        )
        logger.info(f"Check-in {stored.id} updated by {requestor_id}")
        return stored

    async def acknowledge(
        self,
        user_id: str,
        checkin_id: str,
        by_user_id: str,
        by_display_name: str,
    ) -> CheckInRecord:
        """
        Mark a NeedsAssistance check-in as acknowledged by a responder.

        Raises:
            NotFoundError: no such check-in
            InvalidStateError: status is not NeedsAssistance or state is not Submitted
        """

        def acknowledge_record(current: CheckInRecord) -> CheckInRecord:
            if current.status != SafetyStatus.NEEDS_ASSISTANCE:
                raise InvalidStateError("Can only acknowledge check-ins that need assistance")
            if not can_acknowledge(current):
                raise InvalidStateError("Check-in has already been acknowledged or resolved")
            current.state = CheckInState.ACKNOWLEDGED
            current.acknowledged_by_user_id = by_user_id
            current.acknowledged_timestamp = self.clock()
            return current

        stored = await self._modify(
            user_id, checkin_id, acknowledge_record,
            by_user_id, by_display_name, "acknowledge",
        )
        logger.info(f"Check-in {checkin_id} acknowledged by {by_user_id}")
        return stored

    async def resolve(
        self,
        user_id: str,
        checkin_id: str,
        by_user_id: str,
        by_display_name: str,
    ) -> CheckInRecord:
        """
        Close an acknowledged check-in.

        Raises:
            NotFoundError: no such check-in
            InvalidStateError: state is not Acknowledged
        """

        def resolve_record(current: CheckInRecord) -> CheckInRecord:
            if not can_resolve(current):
                raise InvalidStateError("Can only resolve check-ins that have been acknowledged")
            current.state = CheckInState.RESOLVED
            current.resolved_by_user_id = by_user_id
            current.resolved_timestamp = self.clock()
            return current

        stored = await self._modify(
            user_id, checkin_id, resolve_record,
            by_user_id, by_display_name, "resolve",
        )
        logger.info(f"Check-in {checkin_id} resolved by {by_user_id}")
        return stored

    # ========================================================================
    # DIAGNOSTICS
    # ========================================================================

    async def test_storage_connection(self) -> Dict[str, str]:
        """
        Ensure the check-in table exists, then create and delete a test row.

        Raises:
            UpstreamError: storage unreachable or the test row failed
        """
        await self.repository.store.ensure_table()
        row_id = await self.repository.write_test_row(StorageDefaults.TEST_ROW_PARTITION)
        logger.info(f"Storage test row {row_id} succeeded on {self.repository.store.table_name}")
        return {
            "status": "ok",
            "table": self.repository.store.table_name,
            "row_id": row_id,
        }
