"""Interface for anything that can report the remaining API quota."""

import abc
from typing import Any, Mapping, Union

from apiqueue.domain.models.quota import QuotaSnapshot


class QuotaSource(abc.ABC):
    """Abstract Base Class for quota lookups."""

    @abc.abstractmethod
    async def get_rate_limit(self) -> Union[QuotaSnapshot, Mapping[str, Any]]:
        """Fetches the current quota asynchronously.

        Returns:
            A QuotaSnapshot, or a mapping with ``remaining`` and
            ``reset_at`` (or ``reset``) keys that will be coerced into one.

        Raises:
            Exception: Any failure; the checkpoint retries with backoff.
        """
        pass
