"""Serialized job runner used underneath the rate-limited queue.

Jobs run strictly one at a time, head first. A job is popped from the head
when it starts, so ``jobs()`` only ever shows work that has not started yet.
The queue is confined to the event loop it was started on: appends, inserts
and the loop's "pop next" never interleave because there is no await between
them.
"""

import asyncio
import logging
from typing import List, Optional, Tuple

from apiqueue.domain.models.jobs import Job

logger = logging.getLogger(__name__)


class DispatchQueue:
    """FIFO job queue with a fixed concurrency of one."""

    concurrency = 1

    def __init__(self, autostart: bool = True):
        """Initializes an empty, stopped queue.

        Args:
            autostart: Whether append() resumes an idle queue.
        """
        self.autostart = autostart
        self._jobs: List[Job] = []
        self._running = False
        self._active: Optional[Job] = None
        self._task: Optional[asyncio.Task] = None

    def __len__(self) -> int:
        return len(self._jobs)

    @property
    def active(self) -> Optional[Job]:
        """The job currently executing, if any."""
        return self._active

    def jobs(self) -> Tuple[Job, ...]:
        """Pending jobs, head first."""
        return tuple(self._jobs)

    def is_running(self) -> bool:
        return self._running

    def append(self, job: Job) -> None:
        """Adds a job at the tail and resumes the queue if it was idle."""
        self._jobs.append(job)
        self.resume_if_idle()

    def insert_at(self, index: int, job: Job) -> None:
        """Inserts a job at index, clamped to [0, len]. Does not start the queue."""
        index = max(0, min(index, len(self._jobs)))
        self._jobs.insert(index, job)

    def resume_if_idle(self) -> None:
        if self.autostart and not self._running:
            self.start()

    def start(self) -> None:
        """Starts dispatching on the running event loop."""
        self._running = True
        if self._task is None:
            self._task = asyncio.get_running_loop().create_task(self._drain())
            logger.debug("Dispatch loop started with %d pending job(s)", len(self._jobs))

    def stop(self) -> None:
        """Stops dispatching. The in-flight job, if any, is allowed to finish."""
        self._running = False

    async def join(self) -> None:
        """Waits until the dispatch loop exits (stopped or drained)."""
        while self._task is not None:
            await asyncio.shield(self._task)

    async def _drain(self) -> None:
        try:
            while self._running and self._jobs:
                job = self._jobs.pop(0)
                self._active = job
                try:
                    await job.run()
                except Exception:
                    logger.exception("Job %r failed; continuing with the next job", job)
                finally:
                    self._active = None
            if not self._jobs:
                self._running = False
        finally:
            self._task = None
            logger.debug("Dispatch loop exited (running=%s, pending=%d)", self._running, len(self._jobs))
