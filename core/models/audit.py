"""
Audit Log Model.

Exports:
    AuditLog: Immutable record of one state-changing action
"""

from datetime import datetime
from typing import Optional

from pydantic import field_validator

from .base import DomainModel
from .enums import AuditActionType


class AuditLog(DomainModel):
    """
    Append-only audit entry.

    action_type holds the persisted action name. Unknown names read from
    storage are kept as-is rather than coerced.
    """

    id: str = ""
    user_id: str = ""
    user_display_name: str = ""
    timestamp: Optional[datetime] = None
    entity_type: str = ""
    entity_id: str = ""
    action_type: str = ""
    change_description: str = ""
    previous_state: Optional[str] = None
    new_state: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None

    @field_validator("action_type", mode="before")
    @classmethod
    def _action_name(cls, value):
        if isinstance(value, AuditActionType):
            return value.value
        return "" if value is None else str(value)

    @property
    def action(self) -> Optional[AuditActionType]:
        """Parsed action type, None for names this revision does not know."""
        return AuditActionType.parse(self.action_type)
