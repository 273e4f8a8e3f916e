# ============================================================================
# HEADCOUNT CAMPAIGN REPOSITORY
# ============================================================================
# STATUS: Infrastructure - headcountcampaigns table
# PURPOSE: HeadcountCampaign <-> entity mapping and campaign query shapes
# EXPORTS: HeadcountRepository
# DEPENDENCIES: infrastructure.table_repository, core.models
# ============================================================================
"""
Headcount Campaign Repository.

Table Schema:
    PartitionKey: initiator user id
    RowKey: campaign id
    Status: enum name
    TargetedUserIds / RespondedUserIds / NeedAssistanceUserIds / SafeUserIds:
        JSON arrays in single string columns

A malformed user-id column is logged and read as an empty set so one bad
row cannot break a listing.

Exports:
    HeadcountRepository: Campaign persistence
"""

from typing import Any, Dict, List, Optional

from core.models import HeadcountCampaign, HeadcountCampaignStatus, UserIdSet
from .table_repository import TableRepository, Versioned
from .table_store import TableFilter

_SET_COLUMNS = {
    "targeted_user_ids": "TargetedUserIds",
    "responded_user_ids": "RespondedUserIds",
    "need_assistance_user_ids": "NeedAssistanceUserIds",
    "safe_user_ids": "SafeUserIds",
}


class HeadcountRepository(TableRepository):
    """Persistence for HeadcountCampaign, partitioned by initiator id."""

    ENTITY_TYPE = "HeadcountCampaign"

    # ------------------------------------------------------------------
    # Mapping
    # ------------------------------------------------------------------

    def to_entity(self, campaign: HeadcountCampaign) -> Dict[str, Any]:
        entity = {
            "PartitionKey": campaign.initiated_by_user_id,
            "RowKey": campaign.id,
            "Title": campaign.title,
            "Description": campaign.description,
            "InitiatedByUserId": campaign.initiated_by_user_id,
            "InitiatedByDisplayName": campaign.initiated_by_display_name,
            "InitiatedByUpn": campaign.initiated_by_upn,
            "CreatedTimestamp": campaign.created_timestamp,
            "ExpiresTimestamp": campaign.expires_timestamp,
            "Status": campaign.status.value,
            "Notes": campaign.notes,
        }
        for attribute, column in _SET_COLUMNS.items():
            entity[column] = UserIdSet(getattr(campaign, attribute)).to_json()
        return self._compact(entity)

    def from_entity(self, entity: Dict[str, Any]) -> HeadcountCampaign:
        fields = {
            attribute: self._decode_set(entity, column).to_list()
            for attribute, column in _SET_COLUMNS.items()
        }
        return HeadcountCampaign(
            id=entity.get("RowKey", ""),
            title=entity.get("Title") or "",
            description=entity.get("Description") or "",
            initiated_by_user_id=entity.get("InitiatedByUserId") or entity.get("PartitionKey", ""),
            initiated_by_display_name=entity.get("InitiatedByDisplayName") or "",
            initiated_by_upn=entity.get("InitiatedByUpn") or "",
            created_timestamp=self._as_utc(entity.get("CreatedTimestamp")),
            expires_timestamp=self._as_utc(entity.get("ExpiresTimestamp")),
            status=HeadcountCampaignStatus.parse(entity.get("Status")),
            notes=self._blank_to_none(entity.get("Notes")),
            **fields,
        )

    def _decode_set(self, entity: Dict[str, Any], column: str) -> UserIdSet:
        try:
            return UserIdSet.from_json(entity.get(column))
        except ValueError as e:
            # json.JSONDecodeError is a ValueError
            self.logger.warning(
                f"Malformed {column} on campaign {entity.get('PartitionKey')}/{entity.get('RowKey')}: {e}"
            )
            return UserIdSet()

    # ------------------------------------------------------------------
    # Point operations
    # ------------------------------------------------------------------

    async def get_versioned(self, initiator_id: str, campaign_id: str) -> Optional[Versioned[HeadcountCampaign]]:
        record = await self.store.get_entity(initiator_id, campaign_id)
        if record is None:
            return None
        return Versioned(self.from_entity(record.entity), record.etag)

    async def get(self, initiator_id: str, campaign_id: str) -> Optional[HeadcountCampaign]:
        versioned = await self.get_versioned(initiator_id, campaign_id)
        return versioned.model if versioned else None

    async def insert(self, campaign: HeadcountCampaign) -> HeadcountCampaign:
        stored = await self.store.create_entity(self.to_entity(campaign))
        self.logger.debug(f"Inserted campaign {campaign.initiated_by_user_id}/{campaign.id}")
        return self.from_entity(stored.entity)

    async def replace(self, campaign: HeadcountCampaign, etag: Optional[str]) -> HeadcountCampaign:
        stored = await self.store.update_entity(self.to_entity(campaign), etag)
        self.logger.debug(f"Replaced campaign {campaign.initiated_by_user_id}/{campaign.id}")
        return self.from_entity(stored.entity)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def list_for_initiator(
        self,
        initiator_id: str,
        status: Optional[HeadcountCampaignStatus] = None,
    ) -> List[HeadcountCampaign]:
        """Campaigns in the initiator's partition, optionally with one status. Unordered."""
        table_filter = TableFilter().partition(initiator_id)
        if status is not None:
            table_filter = table_filter.eq("Status", status.value)
        return [self.from_entity(r.entity) for r in await self._query(table_filter)]

    async def list_targeting(self, user_id: str, exclude_partition: Optional[str] = None) -> List[HeadcountCampaign]:
        """
        Full-table scan for campaigns whose TargetedUserIds contain user_id.

        The set column cannot be filtered server-side, so every row is
        decoded here.
        """
        matches = []
        async for record in self.store.query_entities(None):
            if exclude_partition is not None and record.partition_key == exclude_partition:
                continue
            if self._decode_set(record.entity, "TargetedUserIds").contains(user_id):
                matches.append(self.from_entity(record.entity))
        return matches
