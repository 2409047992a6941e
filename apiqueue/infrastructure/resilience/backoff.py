"""Retries the quota query with exponential backoff.

Used by the checkpoint when the quota source itself fails (network error,
malformed response). Ordinary operations are never retried here; their
quota-exceeded handling lives in the rate-limited queue.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

from apiqueue.domain.events.queue_events import QuotaQueryFailed
from apiqueue.domain.models.errors import QuotaUnavailableError
from apiqueue.domain.models.quota import QuotaSnapshot

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 5
DEFAULT_INITIAL_BACKOFF_S = 1.0
DEFAULT_BACKOFF_FACTOR = 2.0
DEFAULT_MAX_BACKOFF_S = 60.0
DEFAULT_COOLDOWN_S = 60.0


class QuotaQueryBackoff:
    """Policy for fetching a quota snapshot from an unreliable source."""

    def __init__(
        self,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        initial_backoff_s: float = DEFAULT_INITIAL_BACKOFF_S,
        backoff_factor: float = DEFAULT_BACKOFF_FACTOR,
        max_backoff_s: float = DEFAULT_MAX_BACKOFF_S,
        cooldown_s: float = DEFAULT_COOLDOWN_S,
    ):
        """Initializes the QuotaQueryBackoff.

        Args:
            max_attempts: Total quota queries per checkpoint before giving up.
            initial_backoff_s: Delay in seconds after the first failure.
            backoff_factor: Multiplier applied to the delay after each failure.
            max_backoff_s: Upper bound for a single delay.
            cooldown_s: How long the checkpoint holds dispatch after giving up.
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.initial_backoff_s = initial_backoff_s
        self.backoff_factor = backoff_factor
        self.max_backoff_s = max_backoff_s
        self.cooldown_s = cooldown_s

    def delay_for(self, attempt: int) -> float:
        """Delay after the given failed attempt (1-based)."""
        delay = self.initial_backoff_s * (self.backoff_factor ** (attempt - 1))
        return min(delay, self.max_backoff_s)

    async def fetch(
        self,
        query: Callable[[], Awaitable[Any]],
        on_failure: Optional[Callable[[QuotaQueryFailed], None]] = None,
    ) -> QuotaSnapshot:
        """Runs query until it yields a valid snapshot.

        Args:
            query: Zero-argument coroutine function returning a snapshot or mapping.
            on_failure: Called with a QuotaQueryFailed event for every failed attempt.

        Returns:
            The first valid QuotaSnapshot.

        Raises:
            QuotaUnavailableError: If every attempt failed.
        """
        last_exception: Optional[Exception] = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                return QuotaSnapshot.coerce(await query())
            except Exception as e:
                last_exception = e
                delay = self.delay_for(attempt) if attempt < self.max_attempts else None
                if on_failure:
                    on_failure(QuotaQueryFailed(
                        attempt_number=attempt,
                        error_type=type(e).__name__,
                        error_message=str(e),
                        delay_seconds=delay,
                    ))
                if delay is None:
                    break
                logger.warning(
                    "Quota query failed on attempt %d/%d: %s. Waiting %.2fs...",
                    attempt, self.max_attempts, e, delay,
                )
                await asyncio.sleep(delay)

        raise QuotaUnavailableError(last_exception, self.max_attempts)
