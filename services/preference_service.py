"""
User Preference Service.

Exports:
    PreferenceService: Get-or-create and save for user preferences

Reads that find no record synthesize defaults and persist them, so a
first read produces a Create audit entry. Saves are upserts with no
version precondition (last writer wins).
"""

from datetime import datetime
from typing import Callable

from core.models import AuditActionType, UserPreferences, utc_now
from exceptions import ValidationError
from infrastructure.preferences_repository import PreferencesRepository
from util_logger import LoggerFactory, ComponentType

from .audit_service import AuditService

logger = LoggerFactory.create_logger(ComponentType.SERVICE, "PreferenceService")


class PreferenceService:
    """Per-user preferences."""

    ENTITY_TYPE = "UserPreferences"

    def __init__(
        self,
        repository: PreferencesRepository,
        audit: AuditService,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.repository = repository
        self.audit = audit
        self.clock = clock

    async def get_or_create(self, user_id: str) -> UserPreferences:
        """
        Stored preferences, or persisted defaults on first access.

        Storage failures propagate since this read may write.
        """
        if not user_id:
            raise ValidationError("User ID is required")

        existing = await self.repository.get(user_id)
        if existing is not None:
            return existing

        logger.info(f"No preferences for {user_id}, creating defaults")
        return await self.save(UserPreferences.defaults(user_id), user_id)

    async def save(self, preferences: UserPreferences, requestor_id: str) -> UserPreferences:
        """
        Upsert preferences, stamping lastModified/lastModifiedBy.

        Audited as Create when no record existed before, else Update.
        """
        if not preferences.user_id:
            raise ValidationError("User ID is required")

        previous = await self.repository.get(preferences.user_id)

        preferences = preferences.model_copy(deep=True)
        preferences.last_modified = self.clock()
        preferences.last_modified_by = requestor_id
        stored = await self.repository.upsert(preferences)

        await self.audit.log_action(
            requestor_id,
            "Self" if requestor_id == preferences.user_id else "Administrator",
            AuditActionType.CREATE if previous is None else AuditActionType.UPDATE,
            self.ENTITY_TYPE,
            preferences.user_id,
            previous_state=previous.to_snapshot() if previous is not None else None,
            new_state=stored.to_snapshot(),
        )
        logger.info(f"Preferences saved for {preferences.user_id} by {requestor_id}")
        return stored
