"""Bounded retry for the initial boarding request submission."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from boardwatch.core.errors import TransientError, UnauthenticatedError
from boardwatch.core.settings import settings

__all__ = ["submit_with_retry"]

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def submit_with_retry(
    operation: Callable[[], Awaitable[T]],
    *,
    attempts: int | None = None,
    base_delay: float | None = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Run ``operation`` up to ``attempts`` times on transient failures.

    The wait after attempt ``n`` is ``n * base_delay``. Rejected credentials
    are never retried and other errors propagate immediately.

    Raises:
        UnauthenticatedError: On the first 401/403.
        TransientError: When every attempt failed transiently.
    """
    max_attempts = max(1, attempts if attempts is not None else settings.submit_max_attempts)
    delay = settings.submit_base_delay_seconds if base_delay is None else base_delay

    for attempt in range(1, max_attempts + 1):
        try:
            return await operation()
        except UnauthenticatedError:
            raise
        except TransientError as exc:
            if attempt == max_attempts:
                logger.warning("Submission failed after %d attempts: %s", attempt, exc)
                raise
            logger.warning("Submission attempt %d failed: %s; retrying", attempt, exc)
            await sleep(attempt * delay)
    raise AssertionError("unreachable")  # pragma: no cover
