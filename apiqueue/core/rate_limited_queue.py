"""Rate-limited queue: a dispatch queue paced by a recurring quota checkpoint.

The checkpoint is a job like any other, except for its kind. Every time it
runs it asks the quota source how many calls are left, puts itself back
``remaining`` jobs further down the queue, and then either stops the queue
(nothing else pending), holds dispatch until the quota resets (nothing left),
or simply lets the next job run.
"""

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Optional, Tuple

from apiqueue.core.dispatch_queue import DispatchQueue
from apiqueue.domain.events.queue_events import (
    CheckpointCompleted, DomainEvent, OperationFailed, OperationRequeued,
    QueueIdled, QuotaExhausted,
)
from apiqueue.domain.interfaces.quota_source import QuotaSource
from apiqueue.domain.models.errors import QuotaUnavailableError, RetryLimitExceeded
from apiqueue.domain.models.jobs import Job
from apiqueue.domain.models.quota import QuotaSnapshot
from apiqueue.infrastructure.resilience.backoff import QuotaQueryBackoff

logger = logging.getLogger(__name__)

DEFAULT_MAX_RETRIES = 10
QUOTA_EXCEEDED_STATUS = 403
QUOTA_EXCEEDED_MESSAGE = "rate limit exceeded"

Operation = Callable[[], Awaitable[Any]]
EventHandler = Callable[[DomainEvent], None]


def is_quota_exceeded(error: BaseException) -> bool:
    """Whether error means the server refused the call because the quota ran out."""
    if getattr(error, "code", None) != QUOTA_EXCEEDED_STATUS:
        return False
    message = getattr(error, "message", None)
    if message is None:
        message = str(error)
    return QUOTA_EXCEEDED_MESSAGE in str(message)


class RateLimitedQueue:
    """Runs async operations one at a time without exceeding the remote quota."""

    def __init__(
        self,
        quota_source: QuotaSource,
        max_retries: Optional[int] = DEFAULT_MAX_RETRIES,
        quota_backoff: Optional[QuotaQueryBackoff] = None,
        event_handler: Optional[EventHandler] = None,
    ):
        """Initializes the queue with the checkpoint at its head, not running.

        Args:
            quota_source: Where the checkpoint reads the remaining quota from.
            max_retries: Resubmissions allowed per operation after quota-exceeded
                failures. None means no limit.
            quota_backoff: Policy for retrying a failing quota query.
            event_handler: Optional callable receiving every domain event.
        """
        self.quota_source = quota_source
        self.max_retries = max_retries
        self.quota_backoff = quota_backoff or QuotaQueryBackoff()
        self.event_handler = event_handler

        self._queue = DispatchQueue(autostart=True)
        self._checkpoint = Job.checkpoint(self._run_checkpoint)
        self._queue.insert_at(0, self._checkpoint)

        logger.debug(
            "RateLimitedQueue initialized: max_retries=%s, quota_backoff_attempts=%d",
            max_retries, self.quota_backoff.max_attempts,
        )

    @property
    def checkpoint(self) -> Job:
        return self._checkpoint

    def get_jobs(self) -> Tuple[Job, ...]:
        return self._queue.jobs()

    def is_running(self) -> bool:
        return self._queue.is_running()

    def stop(self) -> None:
        self._queue.stop()

    async def join(self) -> None:
        """Waits until the queue has drained or been stopped."""
        await self._queue.join()

    def enqueue(self, operation: Operation) -> "asyncio.Future[Any]":
        """Schedules operation behind everything already queued.

        Must be called from within the event loop that runs the queue.

        Args:
            operation: Zero-argument coroutine function performing one API call.

        Returns:
            A future resolving with the operation's result. Quota-exceeded
            failures are retried transparently; any other error is set on
            the future unchanged.
        """
        future = asyncio.get_running_loop().create_future()
        self._submit(operation, future, attempt=1)
        return future

    def _submit(self, operation: Operation, future: "asyncio.Future[Any]", attempt: int) -> None:
        name = getattr(operation, "__name__", repr(operation))

        async def run_operation() -> None:
            try:
                result = await operation()
            except Exception as e:
                self._handle_failure(operation, future, attempt, e)
            else:
                if not future.done():
                    future.set_result(result)

        self._queue.append(Job.operation(run_operation, name=name))

    def _handle_failure(
        self,
        operation: Operation,
        future: "asyncio.Future[Any]",
        attempt: int,
        error: Exception,
    ) -> None:
        name = getattr(operation, "__name__", repr(operation))
        if future.done():
            return

        if is_quota_exceeded(error):
            if self.max_retries is None or attempt <= self.max_retries:
                logger.warning("Quota exceeded for %s on attempt %d; resubmitting to the tail", name, attempt)
                self._submit(operation, future, attempt + 1)
                self._dispatch_event(OperationRequeued(operation=name, attempt_number=attempt, error_message=str(error)))
                return
            error = RetryLimitExceeded(error, attempt)

        logger.warning("Operation %s failed on attempt %d: %s", name, attempt, error)
        future.set_exception(error)
        self._dispatch_event(OperationFailed(operation=name, error_type=type(error).__name__, error_message=str(error)))

    async def _fetch_quota(self) -> QuotaSnapshot:
        try:
            return await self.quota_backoff.fetch(self.quota_source.get_rate_limit, on_failure=self._dispatch_event)
        except QuotaUnavailableError as e:
            cooldown = self.quota_backoff.cooldown_s
            logger.error("%s. Holding dispatch for %.1fs before checking again.", e, cooldown)
            return QuotaSnapshot(remaining=0, reset_at=time.time() + cooldown)

    async def _run_checkpoint(self) -> None:
        snapshot = await self._fetch_quota()

        self._queue.insert_at(snapshot.remaining, self._checkpoint)
        pending = len(self._queue)
        position = min(snapshot.remaining, pending - 1)
        logger.debug(
            "Checkpoint: remaining=%d reset_at=%.3f position=%d pending=%d",
            snapshot.remaining, snapshot.reset_at, position, pending,
        )
        self._dispatch_event(CheckpointCompleted(
            remaining=snapshot.remaining, reset_at=snapshot.reset_at, position=position, pending=pending,
        ))

        if pending == 1:
            logger.info("No pending operations; queue going idle")
            self._queue.stop()
            self._dispatch_event(QueueIdled())
            return

        if snapshot.exhausted:
            wait = snapshot.seconds_until_reset()
            logger.info("Quota exhausted; holding dispatch for %.2fs", wait)
            self._dispatch_event(QuotaExhausted(reset_at=snapshot.reset_at, wait_time_seconds=wait))
            await asyncio.sleep(wait)

    def _dispatch_event(self, event: DomainEvent) -> None:
        logger.debug("EVENT: %s", event)
        if not self.event_handler:
            return
        # A failing handler must never skip reinsertion, idling or backpressure.
        try:
            self.event_handler(event)
        except Exception:
            logger.exception("Event handler failed on %s", type(event).__name__)
