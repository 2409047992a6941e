import time

import pytest
from unittest.mock import AsyncMock

from apiqueue.core.api_queue import ApiQueue
from apiqueue.domain.models.page import Page
from apiqueue.domain.models.quota import QuotaSnapshot

PAGE_ONE = Page(data=['one'], next_url='/items?page=2')
PAGE_TWO = Page(data=['two'], next_url='/items?page=3')
PAGE_THREE = Page(data=['three'])


def paginate(api_client):
    api_client.get_items = AsyncMock(return_value=PAGE_ONE)
    api_client.has_next_page.side_effect = lambda page: page.next_url is not None
    api_client.get_next_page = AsyncMock(side_effect=lambda page: {
        PAGE_ONE.next_url: PAGE_TWO,
        PAGE_TWO.next_url: PAGE_THREE,
    }[page.next_url])


@pytest.mark.asyncio
async def test_get_items_goes_through_the_queue(api_client):
    api = ApiQueue(api_client)

    page = await api.get_items()

    assert page.data == ['one']
    api_client.get_rate_limit.assert_awaited()


@pytest.mark.asyncio
async def test_get_item_passes_the_identifier(api_client):
    api = ApiQueue(api_client)

    assert await api.get_item(42) == {'id': 1}
    api_client.get_item.assert_awaited_once_with(42)


@pytest.mark.asyncio
async def test_get_all_items_with_a_single_page_returns_that_page(api_client):
    api = ApiQueue(api_client)

    assert await api.get_all_items() == ['one']
    api_client.get_next_page.assert_not_awaited()


@pytest.mark.asyncio
async def test_get_all_items_concatenates_every_page(api_client):
    paginate(api_client)
    api = ApiQueue(api_client)

    assert await api.get_all_items() == ['one', 'two', 'three']
    assert api_client.get_next_page.await_count == 2


@pytest.mark.asyncio
async def test_get_all_items_survives_running_out_of_quota(api_client, make_quota):
    paginate(api_client)
    api_client.get_rate_limit = make_quota(
        {'remaining': 2, 'reset': 0},
        {'remaining': 0, 'reset': time.time() + 0.3},
        {'remaining': 999, 'reset': 0},
    )
    api = ApiQueue(api_client)

    assert await api.get_all_items() == ['one', 'two', 'three']
    assert api_client.get_rate_limit.await_count >= 3


@pytest.mark.asyncio
async def test_get_all_pages_accepts_any_first_page_fetcher(api_client):
    api = ApiQueue(api_client)
    fetch_first = AsyncMock(return_value=Page(data=[1, 2, 3]))

    assert await api.get_all_pages(fetch_first) == [1, 2, 3]
    fetch_first.assert_awaited_once()


@pytest.mark.asyncio
async def test_get_rate_limit_bypasses_the_queue(api_client):
    api = ApiQueue(api_client)

    snapshot = await api.get_rate_limit()

    assert snapshot == QuotaSnapshot(remaining=999, reset_at=0)
    assert api.queue.is_running() is False
    assert len(api.queue.get_jobs()) == 1
