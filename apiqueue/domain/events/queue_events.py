"""Domain Events related to queue pacing and retries.

Examples include events for checkpoint decisions, quota exhaustion, idling,
and operations that were resubmitted or failed.
"""

from dataclasses import dataclass, field
import time
from typing import Optional


@dataclass
class DomainEvent:
    """Base class for domain events."""
    pass


# --- Checkpoint Events ---

@dataclass
class CheckpointCompleted(DomainEvent):
    """Event triggered after the checkpoint has repositioned itself."""
    remaining: int
    reset_at: float
    position: int # Index the checkpoint landed at
    pending: int # Jobs in the queue after reinsertion, checkpoint included
    timestamp: float = field(default_factory=time.time)

@dataclass
class QueueIdled(DomainEvent):
    """Event triggered when only the checkpoint is left and dispatch stops."""
    timestamp: float = field(default_factory=time.time)

@dataclass
class QuotaExhausted(DomainEvent):
    """Event triggered when dispatch is held until the quota resets."""
    reset_at: float
    wait_time_seconds: float
    timestamp: float = field(default_factory=time.time)

@dataclass
class QuotaQueryFailed(DomainEvent):
    """Event triggered when a single quota query attempt fails."""
    attempt_number: int
    error_type: str
    error_message: str
    delay_seconds: Optional[float] = None # None when no further attempt follows
    timestamp: float = field(default_factory=time.time)

# --- Operation Events ---

@dataclass
class OperationRequeued(DomainEvent):
    """Event triggered when an operation hit the quota and was resubmitted."""
    operation: str
    attempt_number: int
    error_message: str
    timestamp: float = field(default_factory=time.time)

@dataclass
class OperationFailed(DomainEvent):
    """Event triggered when an operation fails definitively."""
    operation: str
    error_type: str
    error_message: str
    timestamp: float = field(default_factory=time.time)
