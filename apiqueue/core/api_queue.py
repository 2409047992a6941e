"""Resource-level facade that routes every API call through the rate-limited queue."""

import logging
from typing import Any, Awaitable, Callable, List, Optional

from apiqueue.core.rate_limited_queue import DEFAULT_MAX_RETRIES, EventHandler, RateLimitedQueue
from apiqueue.domain.interfaces.api_client import ApiClient
from apiqueue.domain.models.page import Page
from apiqueue.domain.models.quota import QuotaSnapshot
from apiqueue.infrastructure.resilience.backoff import QuotaQueryBackoff

logger = logging.getLogger(__name__)


class ApiQueue:
    """Paces item API calls so the client never exceeds the server quota."""

    def __init__(
        self,
        client: ApiClient,
        max_retries: Optional[int] = DEFAULT_MAX_RETRIES,
        quota_backoff: Optional[QuotaQueryBackoff] = None,
        event_handler: Optional[EventHandler] = None,
    ):
        """Initializes the ApiQueue.

        Args:
            client: The API client performing the raw calls; also the quota source.
            max_retries: Resubmissions allowed per call after quota-exceeded failures.
            quota_backoff: Policy for retrying a failing quota query.
            event_handler: Optional callable receiving queue domain events.
        """
        self.client = client
        self.queue = RateLimitedQueue(
            quota_source=client,
            max_retries=max_retries,
            quota_backoff=quota_backoff,
            event_handler=event_handler,
        )

    async def get_items(self) -> Page:
        return await self.queue.enqueue(self.client.get_items)

    async def get_item(self, item_id: Any) -> Any:
        async def get_item():
            return await self.client.get_item(item_id)
        return await self.queue.enqueue(get_item)

    async def get_rate_limit(self) -> QuotaSnapshot:
        """Reads the quota directly, bypassing the queue."""
        return QuotaSnapshot.coerce(await self.client.get_rate_limit())

    async def get_all_items(self) -> List[Any]:
        return await self.get_all_pages(self.client.get_items)

    async def get_all_pages(self, fetch_first: Callable[[], Awaitable[Page]]) -> List[Any]:
        """Fetches a page and every page after it, each through the queue.

        Args:
            fetch_first: Zero-argument coroutine function fetching the first page.

        Returns:
            The concatenated ``data`` of every page, in page order.
        """
        page = await self.queue.enqueue(fetch_first)
        items = list(page.data)
        pages = 1
        while self.client.has_next_page(page):
            current = page

            async def get_next_page():
                return await self.client.get_next_page(current)

            page = await self.queue.enqueue(get_next_page)
            items.extend(page.data)
            pages += 1

        logger.debug("Fetched %d item(s) across %d page(s)", len(items), pages)
        return items
