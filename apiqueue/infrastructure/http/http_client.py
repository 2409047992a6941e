"""HTTP implementation of the ApiClient interface using httpx.

Performs GET calls only. Responses with a status of 400 or above are turned
into ApiError so the queue can recognise quota-exceeded refusals; transport
failures become ApiError with no code.
"""

import logging
from typing import Any, Optional

import httpx

from apiqueue.domain.interfaces.api_client import ApiClient
from apiqueue.domain.models.errors import ApiError
from apiqueue.domain.models.page import Page
from apiqueue.domain.models.quota import QuotaSnapshot

logger = logging.getLogger(__name__)

DEFAULT_ITEMS_PATH = "/items"
DEFAULT_RATE_LIMIT_PATH = "/rate_limit"
DEFAULT_TIMEOUT_S = 30.0


class HttpApiClient(ApiClient):
    """Item API client backed by an httpx.AsyncClient."""

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        *,
        items_path: str = DEFAULT_ITEMS_PATH,
        rate_limit_path: str = DEFAULT_RATE_LIMIT_PATH,
        timeout: float = DEFAULT_TIMEOUT_S,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initializes the HttpApiClient.

        Args:
            base_url: Root URL of the API.
            token: Optional bearer token sent with every request.
            items_path: Path of the item listing; items live at ``{items_path}/{id}``.
            rate_limit_path: Path of the quota endpoint.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport, mainly for tests.
        """
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self.items_path = "/" + items_path.strip("/")
        self.rate_limit_path = "/" + rate_limit_path.strip("/")
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout,
            transport=transport,
        )
        logger.debug(f"HttpApiClient initialized for {base_url}")

    async def _get(self, url: str) -> httpx.Response:
        try:
            response = await self._client.get(url)
        except httpx.RequestError as e:
            logger.warning(f"GET {url} failed: {e}")
            raise ApiError(None, f"Request to {url} failed: {e}") from e

        if response.status_code >= 400:
            raise ApiError(response.status_code, self._error_message(response))
        return response

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("message"):
            return str(body["message"])
        return response.text or response.reason_phrase

    @staticmethod
    def _to_page(response: httpx.Response) -> Page:
        body = response.json()
        if isinstance(body, dict) and "data" in body:
            body = body["data"]
        data = body if isinstance(body, list) else [body]
        next_link = response.links.get("next")
        return Page(data=data, next_url=next_link.get("url") if next_link else None)

    async def get_items(self) -> Page:
        return self._to_page(await self._get(self.items_path))

    async def get_item(self, item_id: Any) -> Any:
        response = await self._get(f"{self.items_path}/{item_id}")
        return response.json()

    def has_next_page(self, page: Page) -> bool:
        return page.next_url is not None

    async def get_next_page(self, page: Page) -> Page:
        if page.next_url is None:
            raise ValueError("Page has no next page")
        return self._to_page(await self._get(page.next_url))

    async def get_rate_limit(self) -> QuotaSnapshot:
        """Reads the quota endpoint.

        Accepts ``{"rate": {"remaining", "reset"}}``, the same keys at the top
        level, or falls back to the ``X-RateLimit-Remaining`` and
        ``X-RateLimit-Reset`` headers.
        """
        response = await self._get(self.rate_limit_path)
        try:
            body = response.json()
        except ValueError:
            body = {}
        rate = body.get("rate", body) if isinstance(body, dict) else {}
        if "remaining" not in rate:
            rate = {
                "remaining": response.headers["X-RateLimit-Remaining"],
                "reset": response.headers.get("X-RateLimit-Reset", 0),
            }
        return QuotaSnapshot.coerce(rate)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "HttpApiClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
