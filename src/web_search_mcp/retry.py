"""Bounded retries with exponential backoff for async operations."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

RetryObserver = Callable[[int, Exception], None]
Sleep = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 3
    base_delay: float = 1.0
    backoff_multiplier: float = 2.0
    max_delay: float = 10.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.base_delay < 0 or self.max_delay < 0:
            raise ValueError("delays must not be negative")

    def delay_for(self, attempt: int) -> float:
        """Delay after the 0-indexed failed ``attempt``, capped at ``max_delay``."""
        return min(self.base_delay * self.backoff_multiplier**attempt, self.max_delay)


DEFAULT_RETRY_POLICY = RetryPolicy()


async def retry(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy = DEFAULT_RETRY_POLICY,
    *,
    on_retry: RetryObserver | None = None,
    sleep: Sleep = asyncio.sleep,
) -> T:
    """Run ``operation`` until it succeeds or ``policy.max_attempts`` is spent.

    Every failure is retried. When all attempts fail the last error is raised.
    ``on_retry`` receives the 1-based number of the failed attempt and its error
    before the backoff sleep; it is never called after the final attempt.
    """
    return await _run(operation, policy, None, on_retry, sleep)


async def retry_if(
    operation: Callable[[], Awaitable[T]],
    should_retry: Callable[[Exception], bool],
    policy: RetryPolicy = DEFAULT_RETRY_POLICY,
    *,
    on_retry: RetryObserver | None = None,
    sleep: Sleep = asyncio.sleep,
) -> T:
    """Like :func:`retry`, but re-raise at once when ``should_retry`` rejects the error.

    A rejected error is raised without calling ``on_retry`` and without sleeping.
    """
    return await _run(operation, policy, should_retry, on_retry, sleep)


async def _run(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    should_retry: Callable[[Exception], bool] | None,
    on_retry: RetryObserver | None,
    sleep: Sleep,
) -> T:
    # Every attempt but the last may be retried; the last one raises as is.
    for attempt in range(policy.max_attempts - 1):
        try:
            return await operation()
        except Exception as exc:
            if should_retry is not None and not should_retry(exc):
                raise

            delay = policy.delay_for(attempt)
            logger.debug(
                "Retrying after %.2fs (attempt %s/%s): %s",
                delay,
                attempt + 1,
                policy.max_attempts,
                exc.__class__.__name__,
            )
            _notify(on_retry, attempt + 1, exc)
            await sleep(delay)

    return await operation()


def _notify(on_retry: RetryObserver | None, attempt: int, exc: Exception) -> None:
    if on_retry is None:
        return
    try:
        on_retry(attempt, exc)
    except Exception:
        logger.exception("Retry observer failed on attempt %s", attempt)
