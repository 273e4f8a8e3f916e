"""
Headcount Campaign Models.

A campaign is a manager-initiated request for a set of users to report
their status. Response membership is kept in three user-id sets whose
invariants are enforced by CampaignResponses:

    - respondedUserIds only grows
    - a responder is in exactly one of needAssistanceUserIds / safeUserIds

Exports:
    UserIdSet: Ordered, duplicate-free set of user ids (JSON column codec)
    CampaignResponses: Aggregate of the three response sets
    HeadcountCampaign: Pydantic model for a campaign
"""

import json
from datetime import datetime
from typing import Iterable, Iterator, List, Optional

from pydantic import Field, field_validator

from .base import DomainModel
from .enums import HeadcountCampaignStatus


class UserIdSet:
    """
    Ordered set of user ids.

    Insertion order is preserved so the persisted JSON array is stable
    across read/write cycles. Ids are compared case-sensitively.
    """

    __slots__ = ("_items",)

    def __init__(self, user_ids: Optional[Iterable[str]] = None):
        # dict keeps insertion order and gives O(1) membership
        self._items = {}
        for user_id in user_ids or ():
            self.add(user_id)

    def add(self, user_id: str) -> bool:
        """Add user_id, returns True if it was not present."""
        if not user_id or user_id in self._items:
            return False
        self._items[user_id] = None
        return True

    def remove(self, user_id: str) -> bool:
        """Remove user_id, returns True if it was present."""
        if user_id in self._items:
            del self._items[user_id]
            return True
        return False

    def contains(self, user_id: str) -> bool:
        return user_id in self._items

    __contains__ = contains

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __eq__(self, other) -> bool:
        if isinstance(other, UserIdSet):
            return set(self._items) == set(other._items)
        return NotImplemented

    def __repr__(self) -> str:
        return f"UserIdSet({list(self._items)!r})"

    def to_list(self) -> List[str]:
        return list(self._items)

    def to_json(self) -> str:
        """Encode as a JSON array for a single table column."""
        return json.dumps(self.to_list())

    @classmethod
    def from_json(cls, text: Optional[str]) -> "UserIdSet":
        """
        Decode a JSON array column.

        Raises:
            ValueError: text is not a JSON array of strings
        """
        if text is None or not str(text).strip():
            return cls()
        decoded = json.loads(text)
        if not isinstance(decoded, list):
            raise ValueError(f"Expected JSON array, got {type(decoded).__name__}")
        return cls(str(item) for item in decoded if item is not None)


class CampaignResponses:
    """
    Response membership for a campaign.

    record() is the only mutator, so the mutual exclusion between the
    need-assistance and safe sets holds after every call regardless of
    call order or repetition.
    """

    def __init__(
        self,
        responded: Optional[Iterable[str]] = None,
        need_assistance: Optional[Iterable[str]] = None,
        safe: Optional[Iterable[str]] = None,
    ):
        self.responded = UserIdSet(responded)
        self.need_assistance = UserIdSet(need_assistance)
        self.safe = UserIdSet(safe)

    def record(self, user_id: str, needs_assistance: bool) -> None:
        """Record user_id's latest response, moving them between status sets."""
        self.responded.add(user_id)
        if needs_assistance:
            self.need_assistance.add(user_id)
            self.safe.remove(user_id)
        else:
            self.safe.add(user_id)
            self.need_assistance.remove(user_id)

    def status_of(self, user_id: str) -> Optional[bool]:
        """True if the user needs assistance, False if safe, None if no response."""
        if user_id in self.need_assistance:
            return True
        if user_id in self.safe:
            return False
        return None


class HeadcountCampaign(DomainModel):
    """
    Headcount campaign, partitioned by initiator id.

    The user-id collections are plain lists on the model (they serialize
    as JSON arrays); mutate responses through record_response().
    """

    id: str = ""
    title: str = ""
    description: str = ""

    initiated_by_user_id: str = ""
    initiated_by_display_name: str = ""
    initiated_by_upn: str = ""

    created_timestamp: Optional[datetime] = None
    expires_timestamp: Optional[datetime] = None
    status: HeadcountCampaignStatus = HeadcountCampaignStatus.ACTIVE

    targeted_user_ids: List[str] = Field(default_factory=list)
    responded_user_ids: List[str] = Field(default_factory=list)
    need_assistance_user_ids: List[str] = Field(default_factory=list)
    safe_user_ids: List[str] = Field(default_factory=list)

    notes: Optional[str] = None

    @field_validator("status", mode="before")
    @classmethod
    def _parse_status(cls, value):
        return HeadcountCampaignStatus.parse(value)

    @field_validator("targeted_user_ids", "responded_user_ids",
                     "need_assistance_user_ids", "safe_user_ids", mode="before")
    @classmethod
    def _dedupe(cls, value):
        if value is None:
            return []
        if isinstance(value, UserIdSet):
            return value.to_list()
        return UserIdSet(value).to_list()

    def responses(self) -> CampaignResponses:
        return CampaignResponses(
            self.responded_user_ids,
            self.need_assistance_user_ids,
            self.safe_user_ids,
        )

    def record_response(self, user_id: str, needs_assistance: bool) -> None:
        """Apply one user's response to the membership sets."""
        responses = self.responses()
        responses.record(user_id, needs_assistance)
        self.responded_user_ids = responses.responded.to_list()
        self.need_assistance_user_ids = responses.need_assistance.to_list()
        self.safe_user_ids = responses.safe.to_list()

    def is_targeted(self, user_id: str) -> bool:
        return user_id in self.targeted_user_ids
