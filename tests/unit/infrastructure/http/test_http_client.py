import httpx
import pytest

from apiqueue.domain.models.errors import ApiError
from apiqueue.domain.models.page import Page
from apiqueue.domain.models.quota import QuotaSnapshot
from apiqueue.infrastructure.http.http_client import HttpApiClient

BASE_URL = "https://api.example.test"


def make_client(handler, **kwargs):
    return HttpApiClient(BASE_URL, transport=httpx.MockTransport(handler), **kwargs)


@pytest.mark.asyncio
async def test_get_items_builds_page_and_follows_link_header():
    def handler(request):
        assert request.url.path == "/items"
        return httpx.Response(
            200,
            json=[{'id': 1}, {'id': 2}],
            headers={'Link': f'<{BASE_URL}/items?page=2>; rel="next"'},
        )

    async with make_client(handler) as client:
        page = await client.get_items()

    assert page.data == [{'id': 1}, {'id': 2}]
    assert page.next_url == f"{BASE_URL}/items?page=2"
    assert client.has_next_page(page) is True


@pytest.mark.asyncio
async def test_get_next_page_unwraps_data_envelope():
    def handler(request):
        assert request.url.params['page'] == '2'
        return httpx.Response(200, json={'data': ['two']})

    async with make_client(handler) as client:
        page = await client.get_next_page(Page(data=['one'], next_url=f"{BASE_URL}/items?page=2"))

    assert page == Page(data=['two'], next_url=None)
    assert client.has_next_page(page) is False


@pytest.mark.asyncio
async def test_get_next_page_without_cursor_raises():
    async with make_client(lambda request: httpx.Response(200, json=[])) as client:
        with pytest.raises(ValueError):
            await client.get_next_page(Page(data=[]))


@pytest.mark.asyncio
async def test_get_item_uses_custom_items_path_and_token():
    seen = {}

    def handler(request):
        seen['path'] = request.url.path
        seen['auth'] = request.headers.get('Authorization')
        return httpx.Response(200, json={'id': 7})

    async with make_client(handler, token="secret", items_path="widgets/") as client:
        assert await client.get_item(7) == {'id': 7}

    assert seen == {'path': '/widgets/7', 'auth': 'Bearer secret'}


@pytest.mark.asyncio
async def test_rate_limit_refusal_becomes_api_error_with_body_message():
    def handler(request):
        return httpx.Response(403, json={'message': "API rate limit exceeded for user."})

    async with make_client(handler) as client:
        with pytest.raises(ApiError) as exc_info:
            await client.get_item(1)

    assert exc_info.value.code == 403
    assert exc_info.value.message == "API rate limit exceeded for user."


@pytest.mark.asyncio
async def test_error_without_json_body_uses_response_text():
    async with make_client(lambda request: httpx.Response(502, text="Bad Gateway")) as client:
        with pytest.raises(ApiError) as exc_info:
            await client.get_items()

    assert exc_info.value.code == 502
    assert exc_info.value.message == "Bad Gateway"


@pytest.mark.asyncio
async def test_transport_failure_becomes_api_error_without_code():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    async with make_client(handler) as client:
        with pytest.raises(ApiError) as exc_info:
            await client.get_items()

    assert exc_info.value.code is None
    assert isinstance(exc_info.value.__cause__, httpx.ConnectError)


@pytest.mark.asyncio
async def test_get_rate_limit_reads_rate_section():
    def handler(request):
        assert request.url.path == "/rate_limit"
        return httpx.Response(200, json={'rate': {'limit': 5000, 'remaining': 4999, 'reset': 1700000000}})

    async with make_client(handler) as client:
        snapshot = await client.get_rate_limit()

    assert snapshot == QuotaSnapshot(remaining=4999, reset_at=1700000000.0)


@pytest.mark.asyncio
async def test_get_rate_limit_falls_back_to_headers():
    def handler(request):
        return httpx.Response(
            200,
            json={},
            headers={'X-RateLimit-Remaining': '12', 'X-RateLimit-Reset': '1700000100'},
        )

    async with make_client(handler, rate_limit_path="/quota") as client:
        snapshot = await client.get_rate_limit()

    assert snapshot == QuotaSnapshot(remaining=12, reset_at=1700000100.0)
