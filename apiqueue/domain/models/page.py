"""One page of a paginated resource listing."""

from dataclasses import dataclass, field
from typing import Any, List, Optional


@dataclass
class Page:
    """Payload of a single page plus the cursor to the next one, if any."""
    data: List[Any] = field(default_factory=list)
    next_url: Optional[str] = None
