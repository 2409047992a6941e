"""Quota value objects.

A snapshot is fetched fresh from the quota source on every checkpoint and is
never cached between checkpoints.
"""

import time
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union


@dataclass(frozen=True)
class QuotaSnapshot:
    """Remaining calls allowed before the quota resets.

    Attributes:
        remaining: Calls still allowed in the current window (never negative).
        reset_at: Epoch timestamp in seconds at which the window resets.
    """
    remaining: int
    reset_at: float

    def __post_init__(self) -> None:
        if self.remaining < 0:
            raise ValueError(f"remaining must be non-negative, got {self.remaining}")

    @property
    def exhausted(self) -> bool:
        return self.remaining == 0

    def seconds_until_reset(self, now: Optional[float] = None) -> float:
        """Seconds left until reset_at, clamped at zero."""
        current = time.time() if now is None else now
        return max(0.0, self.reset_at - current)

    @classmethod
    def coerce(cls, value: Union["QuotaSnapshot", Mapping[str, Any]]) -> "QuotaSnapshot":
        """Builds a snapshot from a snapshot or a mapping.

        Mappings may use either ``reset_at`` or ``reset`` for the reset time.
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, Mapping):
            raise TypeError(f"Cannot build a QuotaSnapshot from {type(value).__name__}")
        reset = value.get("reset_at", value.get("reset", 0))
        return cls(remaining=int(value["remaining"]), reset_at=float(reset or 0))
