"""
Audit trail writes and queries.
"""

from datetime import timedelta

import pytest

from config import AppConfig, AuditPartitionScheme, StorageConfig
from core.models import AuditActionType
from exceptions import UpstreamError
from infrastructure import AuditRepository
from services.audit_service import AuditService
from tests.factories.in_memory_store import InMemoryTableStore

pytestmark = pytest.mark.service


@pytest.fixture(params=list(AuditPartitionScheme), ids=lambda s: s.value)
def audit(request, clock):
    config = AppConfig(storage=StorageConfig(audit_partition_scheme=request.param))
    repository = AuditRepository(InMemoryTableStore("auditlogs"), config.storage.audit_partition_scheme)
    return AuditService(repository, config, clock)


class TestLogAction:

    @pytest.mark.parametrize("action", list(AuditActionType), ids=lambda a: a.value)
    async def test_description_from_mapping(self, audit, action):
        entry = await audit.log_action("u1", "Ada", action, "CheckInRecord", "c1")
        assert entry.action_type == action.value
        stored = (await audit.get_for_entity("CheckInRecord", "c1"))[0]
        assert stored.change_description == entry.change_description

    async def test_unknown_action_fallback(self, audit):
        entry = await audit.log_action("u1", "Ada", "Archive", "CheckInRecord", "c1")
        assert entry.change_description == "Archive action on CheckInRecord"

    async def test_optional_request_context(self, audit):
        await audit.log_action(
            "u1", "Ada", AuditActionType.LOGIN, "Session", "s1",
            ip_address="10.0.0.1", user_agent="pytest",
        )
        (stored,) = await audit.get_for_entity("Session", "s1")
        assert (stored.ip_address, stored.user_agent) == ("10.0.0.1", "pytest")
        assert stored.previous_state is None

    async def test_write_failure_propagates(self, audit):
        audit.repository.store.fail("create_entity")
        with pytest.raises(UpstreamError):
            await audit.log_action("u1", "Ada", AuditActionType.UPDATE, "CheckInRecord", "c1")


class TestQueries:

    async def test_entity_history_newest_first(self, audit):
        for _ in range(3):
            await audit.log_action("u1", "Ada", AuditActionType.UPDATE, "CheckInRecord", "c1")
        await audit.log_action("u1", "Ada", AuditActionType.UPDATE, "CheckInRecord", "c2")
        history = await audit.get_for_entity("CheckInRecord", "c1")
        assert len(history) == 3
        assert [e.timestamp for e in history] == sorted((e.timestamp for e in history), reverse=True)

    async def test_recent_bounded_by_window_and_count(self, audit, clock):
        await audit.log_action("u1", "Ada", AuditActionType.CREATE, "CheckInRecord", "old")
        clock.advance(timedelta(days=90))
        for i in range(4):
            await audit.log_action("u1", "Ada", AuditActionType.UPDATE, "CheckInRecord", f"c{i}")

        recent = await audit.get_recent()
        assert [e.entity_id for e in recent] == ["c3", "c2", "c1", "c0"]
        assert [e.entity_id for e in await audit.get_recent(max_results=2)] == ["c3", "c2"]
        assert "old" in {e.entity_id for e in await audit.get_recent(lookback_days=120)}
        assert await audit.get_recent(max_results=0) == []

    async def test_reads_degrade(self, audit):
        audit.repository.store.fail("query_entities")
        assert await audit.get_for_entity("CheckInRecord", "c1") == []
        assert await audit.get_recent() == []
