"""apiqueue: paces calls to a rate-limited API through a self-managing queue."""

from apiqueue.core.api_queue import ApiQueue
from apiqueue.core.dispatch_queue import DispatchQueue
from apiqueue.core.rate_limited_queue import RateLimitedQueue
from apiqueue.domain.models.errors import ApiError, QuotaUnavailableError, RetryLimitExceeded
from apiqueue.domain.models.jobs import Job, JobKind
from apiqueue.domain.models.page import Page
from apiqueue.domain.models.quota import QuotaSnapshot

__all__ = [
    "ApiQueue",
    "DispatchQueue",
    "RateLimitedQueue",
    "ApiError",
    "QuotaUnavailableError",
    "RetryLimitExceeded",
    "Job",
    "JobKind",
    "Page",
    "QuotaSnapshot",
]
