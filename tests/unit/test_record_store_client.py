"""RecordStoreClient over httpx.MockTransport."""

import json

import httpx
import pytest

from app.infrastructure.exceptions import RecordStoreError
from app.infrastructure.record_store.rest_client import RecordStoreClient

BASE_URL = "http://store.test/rest/v1"


def _client(handler) -> RecordStoreClient:
    http = httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(handler))
    return RecordStoreClient(BASE_URL, http_client=http)


@pytest.mark.asyncio
async def test_select_renders_filters_order_and_limit() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[{"id": "c1"}])

    client = _client(handler)
    rows = await client.select(
        "categories",
        {"tenant_id": "t1", "is_published": True, "parent_id": None},
        order="display_order.asc",
        limit=10,
        columns="id,name",
    )
    assert rows == [{"id": "c1"}]
    params = seen[0].url.params
    assert seen[0].url.path == "/rest/v1/categories"
    assert params["tenant_id"] == "eq.t1"
    assert params["is_published"] == "is.true"
    assert params["parent_id"] == "is.null"
    assert params["order"] == "display_order.asc"
    assert params["limit"] == "10"
    assert params["select"] == "id,name"


@pytest.mark.asyncio
async def test_select_one_returns_none_when_empty() -> None:
    client = _client(lambda request: httpx.Response(200, json=[]))
    assert await client.select_one("pages", {"tenant_id": "t1", "slug": "about"}) is None


@pytest.mark.asyncio
async def test_count_reads_content_range() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "HEAD"
        assert request.headers["Prefer"] == "count=exact"
        return httpx.Response(200, headers={"Content-Range": "0-2/3"})

    assert await _client(handler).count("categories", {"tenant_id": "t1"}) == 3


@pytest.mark.asyncio
async def test_count_without_total_raises() -> None:
    client = _client(lambda request: httpx.Response(200, headers={"Content-Range": "*/*"}))
    with pytest.raises(RecordStoreError):
        await client.count("categories", {"tenant_id": "t1"})


@pytest.mark.asyncio
async def test_error_status_raises_record_store_error() -> None:
    client = _client(lambda request: httpx.Response(503, text="upstream unavailable"))
    with pytest.raises(RecordStoreError) as exc_info:
        await client.select("tenants", {"subdomain": "acme"})
    assert exc_info.value.status_code == 503
    assert exc_info.value.details["table"] == "tenants"


@pytest.mark.asyncio
async def test_transport_error_raises_record_store_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(RecordStoreError) as exc_info:
        await _client(handler).select("tenants")
    assert exc_info.value.status_code is None


@pytest.mark.asyncio
async def test_insert_returns_representation() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.headers["Prefer"] == "return=representation"
        body = json.loads(request.content)
        return httpx.Response(201, json=[{**body, "id": "new"}])

    row = await _client(handler).insert("categories", {"tenant_id": "t1", "name": "Anvils"})
    assert row == {"tenant_id": "t1", "name": "Anvils", "id": "new"}


@pytest.mark.asyncio
async def test_unfiltered_writes_are_refused() -> None:
    client = _client(lambda request: httpx.Response(200, json=[]))
    with pytest.raises(RecordStoreError):
        await client.update("categories", {"name": "x"}, {})
    with pytest.raises(RecordStoreError):
        await client.delete("categories", {})


@pytest.mark.asyncio
async def test_non_json_body_raises_record_store_error() -> None:
    client = _client(lambda request: httpx.Response(200, text="<html>proxy</html>"))
    with pytest.raises(RecordStoreError) as exc_info:
        await client.select("tenant_domains", {"domain": "shop.acme.com"})
    assert exc_info.value.details["table"] == "tenant_domains"
