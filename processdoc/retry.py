"""Async retry for transient LLM failures."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def retry(
    func: Callable[[], Awaitable[T]],
    max_attempts: int = 3,
    delay: float = 5.0,
    backoff: float = 2.0,
    retry_if: Optional[Callable[[Exception], bool]] = None,
) -> T:
    """Retry an async function with exponential backoff.

    Args:
        func: Zero-argument async callable to retry.
        max_attempts: Maximum number of attempts.
        delay: Initial delay between retries in seconds.
        backoff: Multiplier applied to delay after each retry.
        retry_if: Predicate deciding whether an exception is worth another
            attempt. Exceptions it rejects are re-raised immediately.

    Returns:
        The result of the successful function call.

    Raises:
        The last exception if all attempts fail.
    """
    current_delay = delay

    for attempt in range(1, max_attempts + 1):
        try:
            return await func()
        except Exception as exc:
            if retry_if is not None and not retry_if(exc):
                logger.error("Attempt %d/%d failed permanently: %s", attempt, max_attempts, exc)
                raise
            if attempt >= max_attempts:
                logger.error("All %d attempts failed. Last error: %s", max_attempts, exc)
                raise
            logger.warning(
                "Attempt %d/%d failed: %s. Retrying in %.1fs...",
                attempt, max_attempts, exc, current_delay,
            )
            await asyncio.sleep(current_delay)
            current_delay *= backoff

    raise ValueError("max_attempts must be at least 1")
