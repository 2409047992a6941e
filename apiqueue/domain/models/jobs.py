"""Job value objects executed by the dispatch queue.

A job is a zero-argument coroutine function tagged with its kind, so the
dispatch loop and callers can tell the recurring quota checkpoint apart from
ordinary API operations without comparing identities.
"""

import enum
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

JobCallable = Callable[[], Awaitable[Any]]


class JobKind(enum.Enum):
    """Kinds of work the dispatch queue can hold."""
    OPERATION = "operation"
    CHECKPOINT = "checkpoint"


@dataclass(frozen=True, eq=False)
class Job:
    """A unit of work owned by the dispatch queue while pending."""
    kind: JobKind
    run: JobCallable = field(repr=False)
    name: str = ""

    @classmethod
    def operation(cls, run: JobCallable, name: str = "") -> "Job":
        return cls(kind=JobKind.OPERATION, run=run, name=name or getattr(run, "__name__", ""))

    @classmethod
    def checkpoint(cls, run: JobCallable) -> "Job":
        return cls(kind=JobKind.CHECKPOINT, run=run, name="checkpoint")

    @property
    def is_checkpoint(self) -> bool:
        return self.kind is JobKind.CHECKPOINT
