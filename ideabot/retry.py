"""Retry helper for flaky infrastructure calls."""

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int,
    base_delay: float = 1.0,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Run ``operation`` until it succeeds or ``max_attempts`` is exhausted.

    Backoff is linear: after the n-th failed attempt the helper waits
    ``n * base_delay`` seconds. Every exception is retried the same way; the
    last one is re-raised to the caller.

    Args:
        operation: Zero-argument coroutine function to call.
        max_attempts: Total number of attempts (>= 1).
        base_delay: Delay unit in seconds.
        sleep: Awaitable sleep function (injectable for tests).

    Returns:
        The operation's result.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    for attempt in range(1, max_attempts + 1):
        try:
            return await operation()
        except Exception as e:
            logger.error(
                "Database operation failed (attempt %d/%d): %s",
                attempt,
                max_attempts,
                e,
                exc_info=attempt == max_attempts,
            )
            if attempt == max_attempts:
                raise
            await sleep(attempt * base_delay)

    raise AssertionError("unreachable")
