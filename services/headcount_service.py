# ============================================================================
# HEADCOUNT CAMPAIGN SERVICE
# ============================================================================
# STATUS: Service - Headcount campaign lifecycle
# PURPOSE: Create campaigns, change their status, aggregate user responses
# EXPORTS: HeadcountService
# DEPENDENCIES: infrastructure.headcount_repository, infrastructure.retry,
#               services.audit_service, core.logic.transitions
# ============================================================================
"""
Headcount Campaign Service.

Campaigns are partitioned by initiator. Response aggregation goes
through HeadcountCampaign.record_response(), which keeps a responder in
exactly one of the need-assistance / safe sets.

Status changes and responses are read-modify-write sequences retried on
conflict; each audits once after its write succeeds.

Exports:
    HeadcountService: Campaign business logic
"""

import uuid
from datetime import datetime, timezone
from typing import Callable, List, Optional, Tuple

from config import AppConfig, get_config
from core.logic import can_campaign_transition, stamps_expiry
from core.models import (
    AuditActionType,
    HeadcountCampaign,
    HeadcountCampaignStatus,
    utc_now,
)
from exceptions import InvalidStateError, NotFoundError, UpstreamError, ValidationError
from infrastructure.headcount_repository import HeadcountRepository
from infrastructure.retry import retry_on_conflict
from util_logger import LoggerFactory, ComponentType

from .audit_service import AuditService

logger = LoggerFactory.create_logger(ComponentType.SERVICE, "HeadcountService")

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def newest_first(campaigns: List[HeadcountCampaign]) -> List[HeadcountCampaign]:
    return sorted(campaigns, key=lambda c: c.created_timestamp or _OLDEST, reverse=True)


class HeadcountService:
    """Headcount campaign operations."""

    ENTITY_TYPE = "HeadcountCampaign"

    def __init__(
        self,
        repository: HeadcountRepository,
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

    async def create(
        self,
        campaign: HeadcountCampaign,
        requestor_id: str,
        requestor_display_name: str,
        requestor_upn: str = "",
    ) -> HeadcountCampaign:
        """
        Start a campaign initiated by the requestor.

        Raises:
            ValidationError: empty title or no targeted users
        """
        if not campaign.title or not campaign.title.strip():
            raise ValidationError("Campaign title is required")
        if not campaign.targeted_user_ids:
            raise ValidationError("At least one targeted user ID is required")

        campaign = campaign.model_copy(deep=True)
        if not campaign.id:
            campaign.id = str(uuid.uuid4())
        campaign.initiated_by_user_id = requestor_id
        campaign.initiated_by_display_name = requestor_display_name
        campaign.initiated_by_upn = requestor_upn or campaign.initiated_by_upn
        campaign.created_timestamp = self.clock()
        campaign.expires_timestamp = None
        campaign.status = HeadcountCampaignStatus.ACTIVE
        campaign.responded_user_ids = []
        campaign.need_assistance_user_ids = []
        campaign.safe_user_ids = []

        stored = await self.repository.insert(campaign)
        logger.info(
            f"Campaign {stored.id} '{stored.title}' created by {requestor_id} "
            f"targeting {len(stored.targeted_user_ids)} users"
        )

        await self.audit.log_action(
            requestor_id,
            requestor_display_name,
            AuditActionType.HEADCOUNT_INITIATED,
            self.ENTITY_TYPE,
            stored.id,
            previous_state=None,
            new_state=stored.to_snapshot(),
        )
        return stored

    # ========================================================================
    # READS (degrade on storage failure)
    # ========================================================================

    async def get(self, initiator_id: str, campaign_id: str) -> Optional[HeadcountCampaign]:
        try:
            return await self.repository.get(initiator_id, campaign_id)
        except UpstreamError as e:
            logger.error(f"Campaign {initiator_id}/{campaign_id} unavailable: {e}")
            return None

    async def list_active(self, initiator_id: str) -> List[HeadcountCampaign]:
        """Active campaigns started by initiator_id, newest first."""
        try:
            campaigns = await self.repository.list_for_initiator(
                initiator_id, status=HeadcountCampaignStatus.ACTIVE
            )
        except UpstreamError as e:
            logger.error(f"Active campaigns for {initiator_id} unavailable: {e}")
            return []
        return newest_first(campaigns)

    async def list_all_for_user(self, user_id: str) -> List[HeadcountCampaign]:
        """
        Campaigns the user initiated plus campaigns targeting the user, newest first.

        The targeting half is a full-table scan.
        """
        try:
            initiated = await self.repository.list_for_initiator(user_id)
            targeting = await self.repository.list_targeting(user_id, exclude_partition=user_id)
        except UpstreamError as e:
            logger.error(f"Campaigns for {user_id} unavailable: {e}")
            return []

        seen = set()
        campaigns = []
        for campaign in initiated + targeting:
            key = (campaign.initiated_by_user_id, campaign.id)
            if key not in seen:
                seen.add(key)
                campaigns.append(campaign)
        return newest_first(campaigns)

    # ========================================================================
    # READ-MODIFY-WRITE
    # ========================================================================

    async def _modify(
        self,
        initiator_id: str,
        campaign_id: str,
        mutate: Callable[[HeadcountCampaign], HeadcountCampaign],
        description: str,
    ) -> Tuple[HeadcountCampaign, HeadcountCampaign]:

        async def attempt() -> Tuple[HeadcountCampaign, HeadcountCampaign]:
            current = await self.repository.get_versioned(initiator_id, campaign_id)
            if current is None:
                raise NotFoundError(f"Campaign {campaign_id} not found")
            previous = current.model
            updated = mutate(previous.model_copy(deep=True))
            stored = await self.repository.replace(updated, current.etag)
            return previous, stored

        return await retry_on_conflict(
            attempt,
            max_attempts=self.config.conflict_max_attempts,
            base_delay=self.config.conflict_base_delay,
            max_delay=self.config.conflict_max_delay,
            description=f"{description} {initiator_id}/{campaign_id}",
        )

    async def update_status(
        self,
        initiator_id: str,
        campaign_id: str,
        new_status: HeadcountCampaignStatus,
        requestor_id: str,
        requestor_display_name: str,
    ) -> HeadcountCampaign:
        """
        Change a campaign's status; Completed and Expired stamp expiresTimestamp.

        Raises:
            NotFoundError: no such campaign
            InvalidStateError: the campaign is closed or the change is not allowed
        """
        new_status = HeadcountCampaignStatus(new_status)

        def apply_status(current: HeadcountCampaign) -> HeadcountCampaign:
            if not can_campaign_transition(current.status, new_status):
                raise InvalidStateError(
                    f"Cannot change campaign status from {current.status.value} to {new_status.value}"
                )
            current.status = new_status
            if stamps_expiry(new_status):
                current.expires_timestamp = self.clock()
            return current

        previous, stored = await self._modify(initiator_id, campaign_id, apply_status, "update_status")
        logger.info(f"Campaign {campaign_id} status {previous.status.value} -> {stored.status.value}")

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

    async def record_response(
        self,
        initiator_id: str,
        campaign_id: str,
        user_id: str,
        needs_assistance: bool,
        user_display_name: Optional[str] = None,
    ) -> HeadcountCampaign:
        """
        Record a user's latest response in the campaign's membership sets.

        Repeating the call with a different flag moves the user between
        the need-assistance and safe sets.

        Raises:
            ValidationError: empty user id
            NotFoundError: no such campaign
        """
        if not user_id:
            raise ValidationError("User ID is required")

        def apply_response(current: HeadcountCampaign) -> HeadcountCampaign:
            current.record_response(user_id, needs_assistance)
            return current

        previous, stored = await self._modify(initiator_id, campaign_id, apply_response, "record_response")
        if not stored.is_targeted(user_id):
            logger.warning(f"Campaign {campaign_id}: response from {user_id}, who was not targeted")
        earlier = previous.responses().status_of(user_id)
        if earlier is not None and earlier != needs_assistance:
            logger.info(f"Campaign {campaign_id}: {user_id} changed their response")
        logger.info(
            f"Campaign {campaign_id}: {user_id} responded "
            f"{'needs assistance' if needs_assistance else 'safe'}"
        )

        await self.audit.log_action(
            user_id,
            user_display_name or user_id,
            AuditActionType.CHECK_IN,
            self.ENTITY_TYPE,
            stored.id,
            previous_state=previous.to_snapshot(),
            new_state=stored.to_snapshot(),
        )
        return stored
