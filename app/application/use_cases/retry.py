"""Bounded retry of a unit of work after a concurrent-writer conflict"""
import logging
from typing import Awaitable, Callable, TypeVar
from app.domain.errors import ConcurrencyConflictError

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    max_retries: int,
    label: str,
    on_exhausted: Callable[[], T],
) -> T:
    """Run ``operation``, rerunning it up to ``max_retries`` more times on a conflict"""
    attempts = max_retries + 1
    for attempt in range(1, attempts + 1):
        try:
            return await operation()
        except ConcurrencyConflictError as e:
            if attempt < attempts:
                logger.warning("Concurrent write during %s (attempt %d/%d), retrying: %s", label, attempt, attempts, e)
                continue
            logger.error("Failed to %s after %d attempts: %s", label, attempts, e)
    return on_exhausted()
