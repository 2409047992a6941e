"""Interface for the remote resource API paced by the queue.

Implementations perform the raw calls; they know nothing about quotas beyond
reporting them through get_rate_limit.
"""

import abc
from typing import Any

from apiqueue.domain.interfaces.quota_source import QuotaSource
from apiqueue.domain.models.page import Page


class ApiClient(QuotaSource):
    """Abstract Base Class for a paginated item API."""

    @abc.abstractmethod
    async def get_items(self) -> Page:
        """Fetches the first page of the item listing."""
        pass

    @abc.abstractmethod
    async def get_item(self, item_id: Any) -> Any:
        """Fetches a single item by its identifier."""
        pass

    @abc.abstractmethod
    def has_next_page(self, page: Page) -> bool:
        """Tells whether another page follows the given one."""
        pass

    @abc.abstractmethod
    async def get_next_page(self, page: Page) -> Page:
        """Fetches the page following the given one."""
        pass
