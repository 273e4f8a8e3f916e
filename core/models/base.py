"""
Shared Pydantic base for domain models.

Python attributes are snake_case; JSON (HTTP bodies and audit snapshots)
uses camelCase aliases. Both spellings are accepted on input.

Exports:
    DomainModel: Base class for all domain models
    utc_now: Timezone-aware current time
"""

from datetime import datetime, timezone
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class DomainModel(BaseModel):
    """camelCase-aliased model with JSON snapshot helpers."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
    )

    def to_api(self) -> Dict[str, Any]:
        """JSON-compatible dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)

    def to_snapshot(self) -> str:
        """Serialized state stored in audit previousState/newState."""
        return self.model_dump_json(by_alias=True)
