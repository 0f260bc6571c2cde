"""Exponential backoff retry for calls to external services."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

import structlog

logger = structlog.get_logger()

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]


def backoff_delay(attempt: int, base_delay: float = 1.0) -> float:
    """Delay before the attempt following zero-based ``attempt``."""
    return base_delay * (2**attempt)


async def with_retries(
    operation: Callable[[], Awaitable[T]],
    *,
    attempts: int = 3,
    base_delay: float = 1.0,
    label: str = "operation",
    sleep: Sleep = asyncio.sleep,
) -> T:
    """Run ``operation`` until it succeeds or ``attempts`` are exhausted.

    Waits ``base_delay * 2**attempt`` seconds between attempts and never after
    the last one. The last exception is re-raised unchanged.
    """
    if attempts < 1:
        raise ValueError("attempts must be >= 1")

    last_error: Exception | None = None
    for attempt in range(attempts):
        try:
            return await operation()
        except Exception as e:
            last_error = e
            logger.warning(
                "Attempt failed",
                operation=label,
                attempt=attempt + 1,
                attempts=attempts,
                error=str(e),
            )
            if attempt < attempts - 1:
                await sleep(backoff_delay(attempt, base_delay))

    assert last_error is not None
    raise last_error
