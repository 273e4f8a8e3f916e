"""
Retry-on-conflict helper for read-modify-write sequences.

The operation passed in must perform the whole sequence (read entity and
etag, re-check preconditions, mutate, write with the etag) so that each
attempt works from fresh state. Only ConflictError is retried; every
other error propagates on the first occurrence.

Exports:
    retry_on_conflict: Run an async operation with bounded exponential backoff
    backoff_delay: Delay before a given retry attempt
"""

import asyncio
from typing import Awaitable, Callable, TypeVar

from exceptions import ConflictError
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.REPOSITORY, "RetryOnConflict")

T = TypeVar("T")


def backoff_delay(attempt: int, base_delay: float, max_delay: float) -> float:
    """Delay after failed attempt number `attempt` (0-based): base * 2**attempt, capped."""
    return min(base_delay * (2 ** attempt), max_delay)


async def retry_on_conflict(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = 3,
    base_delay: float = 0.1,
    max_delay: float = 2.0,
    description: str = "read-modify-write",
) -> T:
    """
    Run `operation` until it succeeds or conflicts `max_attempts` times.

    Args:
        operation: Zero-argument coroutine function performing the full sequence
        max_attempts: Total attempts (>= 1)
        base_delay: Seconds to wait after the first conflict
        max_delay: Upper bound for any single wait
        description: Label for log messages

    Returns:
        Result of the first successful attempt

    Raises:
        ConflictError: The last conflict once attempts are exhausted
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be >= 1")

    for attempt in range(max_attempts):
        try:
            return await operation()
        except ConflictError as e:
            if attempt == max_attempts - 1:
                logger.error(f"{description}: conflict persisted after {max_attempts} attempts: {e}")
                raise
            wait_time = backoff_delay(attempt, base_delay, max_delay)
            logger.warning(
                f"{description}: conflict on attempt {attempt + 1}/{max_attempts}, "
                f"retrying in {wait_time:.2f}s"
            )
            await asyncio.sleep(wait_time)

    # unreachable: the loop either returns or raises
    raise ConflictError(f"{description}: no attempts made")
