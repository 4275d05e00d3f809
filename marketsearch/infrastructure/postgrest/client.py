"""Thin PostgREST HTTP client (no supabase SDK).

Renders a StoreQuery into PostgREST query parameters and runs it with a
shared httpx.AsyncClient so reads do not block the event loop. Every
failure (transport, non-2xx status, non-JSON or non-list body) surfaces
as StoreError; callers decide whether to degrade.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from marketsearch.application.dtos.store_query import StoreQuery
from marketsearch.domain.exceptions import StoreError

logger = logging.getLogger(__name__)

_REST_PATH = "/rest/v1"


def build_params(query: StoreQuery) -> list[tuple[str, str]]:
    """Render a StoreQuery as ordered PostgREST query parameters.

    Produces `select=a,b`, `or=(c.op.v,...)`, `col=op.value` per AND
    filter, `col=in.(...)` per IN list, then `order` and `limit`.
    """
    params: list[tuple[str, str]] = [("select", ",".join(query.columns))]
    if query.or_filter is not None:
        params.append(("or", f"({query.or_filter.render()})"))
    for clause in query.filters:
        params.append((clause.column, f"{clause.operator}.{clause.value}"))
    for in_clause in query.in_filters:
        params.append((in_clause.column, in_clause.render_value()))
    if query.order is not None:
        params.append(("order", query.order.render()))
    if query.limit is not None:
        params.append(("limit", str(query.limit)))
    return params


class PostgRESTClient:
    """Read-only store client over the PostgREST filter grammar.

    The httpx client is owned by the caller (created once in the app
    lifespan) and is safe to share across concurrent requests.
    """

    def __init__(self, http: httpx.AsyncClient, base_url: str, service_key: str) -> None:
        """Initialize the client.

        Args:
            http: Shared async HTTP client.
            base_url: Project URL, e.g. 'https://xyz.supabase.co'.
            service_key: Key sent as both apikey and bearer token.
        """
        self._http = http
        self._base_url = base_url.rstrip("/") + _REST_PATH
        self._headers = {
            "apikey": service_key,
            "Authorization": f"Bearer {service_key}",
            "Accept": "application/json",
        }

    def table_url(self, table: str) -> str:
        return f"{self._base_url}/{quote(table, safe='')}"

    async def select(self, query: StoreQuery) -> list[dict[str, Any]]:
        """Run one read. Raises StoreError on any failure."""
        try:
            resp = await self._http.get(
                self.table_url(query.table),
                params=build_params(query),
                headers=self._headers,
            )
        except httpx.HTTPError as e:
            raise StoreError(f"Store request failed: {e}", table=query.table) from e
        if resp.status_code != 200:
            raise StoreError(
                f"Store returned {resp.status_code}: {resp.text}",
                table=query.table,
                status_code=resp.status_code,
            )
        try:
            body = resp.json()
        except ValueError as e:
            raise StoreError("Store returned a non-JSON body", table=query.table) from e
        if not isinstance(body, list):
            raise StoreError("Store returned a non-list body", table=query.table)
        logger.debug("Store read %s returned %d row(s)", query.table, len(body))
        return body
