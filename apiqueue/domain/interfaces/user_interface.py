"""Interface for showing results, quota and errors to the user.

Allows different UI implementations (e.g., console, plain logs).
"""

import abc
from typing import Any

from apiqueue.domain.models.quota import QuotaSnapshot


class UserInterface(abc.ABC):
    """Abstract Base Class for user interaction."""

    @abc.abstractmethod
    def display_output(self, output: Any, **kwargs: Any) -> None:
        """Displays an API result (any JSON-compatible value) to the user.

        Args:
            output: The decoded response payload.
            **kwargs: Additional arguments for formatting (e.g., title).
        """
        pass

    @abc.abstractmethod
    def display_quota(self, snapshot: QuotaSnapshot) -> None:
        """Displays the remaining quota and its reset time."""
        pass

    @abc.abstractmethod
    def display_error(self, error_message: str, **kwargs: Any) -> None:
        pass

    @abc.abstractmethod
    def display_warning(self, warning_message: str, **kwargs: Any) -> None:
        pass

    @abc.abstractmethod
    def display_info(self, info_message: str, **kwargs: Any) -> None:
        pass
