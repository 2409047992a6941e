"""Exceptions shared by the queue, the HTTP adapter and the CLI."""

from typing import Optional


class ApiError(Exception):
    """Failure reported by the remote API or the transport.

    Attributes:
        code: HTTP-like status code, or None when no response was received.
        message: Human readable message, usually taken from the response body.
    """
    def __init__(self, code: Optional[int], message: str):
        self.code = code
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        if self.code is None:
            return self.message
        return f"{self.code}: {self.message}"


class RetryLimitExceeded(Exception):
    """Raised when an operation kept failing on quota after every resubmission."""
    def __init__(self, original_exception: Exception, attempts: int):
        self.original_exception = original_exception
        self.attempts = attempts
        super().__init__(f"Gave up after {attempts} attempts. Last error: {original_exception}")


class QuotaUnavailableError(Exception):
    """Raised when the quota source could not be queried after all attempts."""
    def __init__(self, original_exception: Exception, attempts: int):
        self.original_exception = original_exception
        self.attempts = attempts
        super().__init__(f"Quota query failed {attempts} times. Last error: {original_exception}")
