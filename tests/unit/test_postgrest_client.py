"""Tests for the PostgREST store client (httpx MockTransport)."""

import httpx
import pytest

from marketsearch.application.dtos.store_query import OrderBy, StoreQuery
from marketsearch.application.services.filter_builder import build_or_filter, text_search_intents
from marketsearch.domain.exceptions import StoreError
from marketsearch.domain.value_objects.filters import FilterClause, InListClause
from marketsearch.infrastructure.postgrest.client import PostgRESTClient, build_params

QUERY = StoreQuery(
    table="listings",
    columns=("id", "title"),
    or_filter=build_or_filter(text_search_intents(("title", "story"), "50%_off")),
    filters=(FilterClause("status", "eq", "live"),),
    order=OrderBy("created_at", descending=True),
    limit=10,
)


def _client(handler) -> PostgRESTClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return PostgRESTClient(http, base_url="https://store.test/", service_key="secret-key")


def test_build_params_order_and_values() -> None:
    params = build_params(QUERY)
    assert params == [
        ("select", "id,title"),
        ("or", "(title.ilike.*50\\%\\_off*,story.ilike.*50\\%\\_off*)"),
        ("status", "eq.live"),
        ("order", "created_at.desc"),
        ("limit", "10"),
    ]


def test_build_params_in_filter() -> None:
    query = StoreQuery(
        table="creators",
        columns=("id",),
        in_filters=(InListClause("id", ("a1", "b2")),),
    )
    assert build_params(query) == [("select", "id"), ("id", "in.(a1,b2)")]


async def test_select_sends_rendered_query() -> None:
    seen: dict[str, httpx.Request] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["request"] = request
        return httpx.Response(200, json=[{"id": "1", "title": "x"}])

    rows = await _client(handler).select(QUERY)
    request = seen["request"]
    assert rows == [{"id": "1", "title": "x"}]
    assert request.method == "GET"
    assert request.url.path == "/rest/v1/listings"
    assert request.url.params["or"] == "(title.ilike.*50\\%\\_off*,story.ilike.*50\\%\\_off*)"
    assert request.url.params["status"] == "eq.live"
    assert request.url.params["order"] == "created_at.desc"
    assert request.url.params["limit"] == "10"
    assert request.headers["apikey"] == "secret-key"
    assert request.headers["authorization"] == "Bearer secret-key"


@pytest.mark.parametrize("status", [400, 401, 404, 500, 503])
async def test_error_status_raises_store_error(status: int) -> None:
    client = _client(lambda request: httpx.Response(status, json={"message": "nope"}))
    with pytest.raises(StoreError) as exc_info:
        await client.select(QUERY)
    assert exc_info.value.details == {"table": "listings", "status_code": status}


async def test_non_list_body_raises_store_error() -> None:
    client = _client(lambda request: httpx.Response(200, json={"rows": []}))
    with pytest.raises(StoreError):
        await client.select(QUERY)


async def test_non_json_body_raises_store_error() -> None:
    client = _client(lambda request: httpx.Response(200, text="<html>"))
    with pytest.raises(StoreError):
        await client.select(QUERY)


async def test_transport_error_raises_store_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(StoreError, match="Store request failed"):
        await _client(handler).select(QUERY)
