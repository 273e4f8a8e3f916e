"""
User Preferences Repository.

Table Schema:
    PartitionKey: "UserPreferences" (fixed)
    RowKey: user id

Exports:
    PreferencesRepository: Preferences persistence (upsert only)
"""

from typing import Any, Dict, Optional

from config.defaults import StorageDefaults
from core.models import LocationPrecision, UserPreferences
from .table_repository import TableRepository
from .table_store import TableStore


class PreferencesRepository(TableRepository):
    """Zero or one preferences row per user in a single fixed partition."""

    ENTITY_TYPE = "UserPreferences"

    def __init__(self, store: TableStore, partition_key: str = StorageDefaults.PREFERENCES_PARTITION):
        super().__init__(store)
        self.partition_key = partition_key

    def to_entity(self, preferences: UserPreferences) -> Dict[str, Any]:
        return self._compact({
            "PartitionKey": self.partition_key,
            "RowKey": preferences.user_id,
            "DefaultLocationPrecision": preferences.default_location_precision.value,
            "EnableLocationServices": preferences.enable_location_services,
            "EnableTeamsNotifications": preferences.enable_teams_notifications,
            "LastModified": preferences.last_modified,
            "LastModifiedBy": preferences.last_modified_by,
        })

    def from_entity(self, entity: Dict[str, Any]) -> UserPreferences:
        return UserPreferences(
            user_id=entity.get("RowKey", ""),
            default_location_precision=LocationPrecision.parse(entity.get("DefaultLocationPrecision")),
            enable_location_services=bool(entity.get("EnableLocationServices", True)),
            enable_teams_notifications=bool(entity.get("EnableTeamsNotifications", True)),
            last_modified=self._as_utc(entity.get("LastModified")),
            last_modified_by=self._blank_to_none(entity.get("LastModifiedBy")),
        )

    async def get(self, user_id: str) -> Optional[UserPreferences]:
        record = await self.store.get_entity(self.partition_key, user_id)
        return self.from_entity(record.entity) if record else None

    async def upsert(self, preferences: UserPreferences) -> UserPreferences:
        stored = await self.store.upsert_entity(self.to_entity(preferences))
        self.logger.debug(f"Upserted preferences for {preferences.user_id}")
        return self.from_entity(stored.entity)
