# ============================================================================
# AUDIT SERVICE
# ============================================================================
# STATUS: Service - Append-only audit trail
# PURPOSE: Record every mutation and answer entity / recent-activity queries
# EXPORTS: AuditService
# DEPENDENCIES: infrastructure.audit_repository, core.logic.audit
# ============================================================================
"""
Audit Service.

Every mutating operation in the other services ends with exactly one
log_action() call. The entry is written synchronously and a failure
propagates to the caller: a mutation whose audit write failed is
reported as failed even though the primary row was stored.

Exports:
    AuditService: Audit trail writes and queries
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional, Union

from config import AppConfig, get_config
from core.logic import describe_change
from core.models import AuditActionType, AuditLog, utc_now
from exceptions import UpstreamError
from infrastructure.audit_repository import AuditRepository
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.SERVICE, "AuditService")

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def newest_first(entries: List[AuditLog]) -> List[AuditLog]:
    return sorted(entries, key=lambda e: e.timestamp or _OLDEST, reverse=True)


class AuditService:
    """
    Audit trail writes and queries.

    Usage:
        audit = AuditService(audit_repo)
        await audit.log_action(
            "admin1", "Admin One", AuditActionType.UPDATE,
            "CheckInRecord", checkin_id, previous_state=before, new_state=after,
        )
    """

    def __init__(
        self,
        repository: AuditRepository,
        config: Optional[AppConfig] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.repository = repository
        self.config = config or get_config()
        self.clock = clock

    async def log_action(
        self,
        user_id: str,
        user_display_name: str,
        action_type: Union[AuditActionType, str],
        entity_type: str,
        entity_id: str,
        previous_state: Optional[str] = None,
        new_state: Optional[str] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> AuditLog:
        """
        Append one audit entry.

        Raises:
            UpstreamError / ConflictError: The entry could not be written
        """
        entry = AuditLog(
            id=str(uuid.uuid4()),
            user_id=user_id or "",
            user_display_name=user_display_name or "",
            timestamp=self.clock(),
            action_type=action_type,
            entity_type=entity_type,
            entity_id=entity_id,
            change_description=describe_change(action_type, entity_type),
            previous_state=previous_state,
            new_state=new_state,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        try:
            await self.repository.insert(entry)
        except Exception as e:
            logger.error(f"Audit write failed for {entity_type}/{entity_id} ({entry.action_type}): {e}")
            raise
        logger.info(f"Audit: {entry.change_description} [{entity_type}/{entity_id}] by {user_id}")
        return entry

    async def get_for_entity(self, entity_type: str, entity_id: str) -> List[AuditLog]:
        """History of one entity, newest first. Empty when storage is unavailable."""
        try:
            entries = await self.repository.list_for_entity(entity_type, entity_id)
        except UpstreamError as e:
            logger.error(f"Audit history unavailable for {entity_type}/{entity_id}: {e}")
            return []
        return newest_first(entries)

    async def get_recent(
        self,
        max_results: Optional[int] = None,
        lookback_days: Optional[int] = None,
    ) -> List[AuditLog]:
        """Most recent entries inside the lookback window, newest first, truncated."""
        if max_results is None:
            max_results = self.config.audit_max_results
        if lookback_days is None:
            lookback_days = self.config.audit_lookback_days
        now = self.clock()
        try:
            entries = await self.repository.list_since(now - timedelta(days=lookback_days), now)
        except UpstreamError as e:
            logger.error(f"Recent audit entries unavailable: {e}")
            return []
        return newest_first(entries)[:max_results]
