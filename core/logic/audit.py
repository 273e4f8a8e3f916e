"""
Audit change descriptions.

Exports:
    describe_change: Deterministic description for (action type, entity type)
"""

from typing import Union

from ..models.enums import AuditActionType


_FIXED_DESCRIPTIONS = {
    AuditActionType.LOGIN: "User logged in",
    AuditActionType.LOGOUT: "User logged out",
    AuditActionType.CHECK_IN: "User submitted a check-in",
    AuditActionType.HEADCOUNT_INITIATED: "Headcount campaign initiated",
    AuditActionType.CHECK_IN_ACKNOWLEDGED: "Check-in acknowledged",
    AuditActionType.CHECK_IN_RESOLVED: "Check-in resolved",
}


def describe_change(action_type: Union[AuditActionType, str], entity_type: str) -> str:
    """
    Describe an audited change.

    Pure function of its inputs. Action names this revision does not know
    fall back to "{action} action on {entity}".

    Example:
        >>> describe_change(AuditActionType.CREATE, "UserPreferences")
        'Created new UserPreferences'
        >>> describe_change("Archive", "CheckInRecord")
        'Archive action on CheckInRecord'
    """
    action = AuditActionType.parse(action_type)

    if action == AuditActionType.CREATE:
        return f"Created new {entity_type}"
    if action == AuditActionType.UPDATE:
        return f"Updated {entity_type}"
    if action == AuditActionType.DELETE:
        return f"Deleted {entity_type}"
    if action in _FIXED_DESCRIPTIONS:
        return _FIXED_DESCRIPTIONS[action]

    name = action_type.value if isinstance(action_type, AuditActionType) else action_type
    return f"{name} action on {entity_type}"
