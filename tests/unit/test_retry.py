"""
Optimistic concurrency retry helper.
"""

import pytest

from exceptions import ConflictError, ValidationError
import infrastructure.retry as retry_module
from infrastructure.retry import backoff_delay, retry_on_conflict


@pytest.fixture
def sleeps(monkeypatch):
    """Record asyncio.sleep calls instead of waiting."""
    recorded = []

    async def fake_sleep(seconds):
        recorded.append(seconds)

    monkeypatch.setattr(retry_module.asyncio, "sleep", fake_sleep)
    return recorded


class _Flaky:
    """Operation that conflicts `failures` times, then returns 'done'."""

    def __init__(self, failures: int):
        self.failures = failures
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise ConflictError(f"conflict {self.calls}")
        return "done"


class TestBackoff:

    @pytest.mark.parametrize("attempt,expected", [(0, 0.1), (1, 0.2), (2, 0.4), (5, 2.0)])
    def test_exponential_and_capped(self, attempt, expected):
        assert backoff_delay(attempt, 0.1, 2.0) == pytest.approx(expected)


class TestRetryOnConflict:

    async def test_first_try(self, sleeps):
        op = _Flaky(0)
        assert await retry_on_conflict(op) == "done"
        assert op.calls == 1
        assert sleeps == []

    async def test_recovers_after_conflicts(self, sleeps):
        op = _Flaky(2)
        assert await retry_on_conflict(op, max_attempts=3, base_delay=0.1, max_delay=2.0) == "done"
        assert op.calls == 3
        assert sleeps == pytest.approx([0.1, 0.2])

    async def test_gives_up_with_last_conflict(self, sleeps):
        op = _Flaky(5)
        with pytest.raises(ConflictError, match="conflict 3"):
            await retry_on_conflict(op, max_attempts=3)
        assert op.calls == 3
        assert len(sleeps) == 2

    async def test_other_errors_not_retried(self, sleeps):
        calls = []

        async def op():
            calls.append(1)
            raise ValidationError("bad")

        with pytest.raises(ValidationError):
            await retry_on_conflict(op)
        assert len(calls) == 1

    async def test_rejects_zero_attempts(self):
        with pytest.raises(ValueError):
            await retry_on_conflict(_Flaky(0), max_attempts=0)
