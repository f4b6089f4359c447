"""Thin PostgREST-style record store client.

Filtered reads and writes against named tables over HTTP. Filters are
equality pairs rendered as column=eq.value; callers pass tenant_id
explicitly for every tenant-scoped call. All HTTP calls use
httpx.AsyncClient so they do not block the event loop.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from app.infrastructure.exceptions import RecordStoreError

logger = logging.getLogger(__name__)


def _encode_value(value: Any) -> str:
    """Render a filter value in PostgREST syntax."""
    if value is None:
        return "is.null"
    if isinstance(value, bool):
        return f"is.{str(value).lower()}"
    return f"eq.{value}"


def _build_params(
    filters: dict[str, Any] | None,
    order: str | None = None,
    limit: int | None = None,
    columns: str | None = None,
) -> dict[str, str]:
    """Query string for select/update/delete."""
    params: dict[str, str] = {}
    if columns:
        params["select"] = columns
    for column, value in (filters or {}).items():
        params[column] = _encode_value(value)
    if order:
        params["order"] = order
    if limit is not None:
        params["limit"] = str(limit)
    return params


def _decode_rows(resp: httpx.Response, table: str) -> Any:
    """JSON body of a successful response; [] when empty.

    Raises:
        RecordStoreError: the body is not JSON (e.g. a proxy error page).
    """
    if not resp.content:
        return []
    try:
        return resp.json()
    except ValueError as e:
        logger.warning("Record store %s returned a non-JSON body", table)
        raise RecordStoreError(table, "Response body is not JSON", resp.status_code) from e


class RecordStoreClient:
    """Async record store client over a PostgREST-compatible REST API.

    Pass http_client for DI/testing (e.g. httpx.MockTransport); otherwise
    one is created from base_url and closed by aclose().
    """

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        timeout: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if api_key:
            headers["apikey"] = api_key
            headers["Authorization"] = f"Bearer {api_key}"
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout,
        )

    async def aclose(self) -> None:
        """Close the HTTP connection pool (only if this client created it)."""
        if self._owns_client:
            await self._http.aclose()

    async def _request(
        self,
        method: str,
        table: str,
        params: dict[str, str],
        body: Any = None,
        prefer: str | None = None,
    ) -> httpx.Response:
        headers = {"Prefer": prefer} if prefer else None
        try:
            resp = await self._http.request(
                method, f"/{table}", params=params, json=body, headers=headers
            )
        except httpx.HTTPError as e:
            logger.warning("Record store %s %s failed: %s", method, table, e)
            raise RecordStoreError(table, str(e)) from e
        if resp.status_code >= 400:
            logger.warning(
                "Record store %s %s returned %s", method, table, resp.status_code
            )
            raise RecordStoreError(table, resp.text[:200], resp.status_code)
        return resp

    async def select(
        self,
        table: str,
        filters: dict[str, Any] | None = None,
        order: str | None = None,
        limit: int | None = None,
        columns: str = "*",
    ) -> list[dict[str, Any]]:
        """Return rows matching all equality filters.

        Args:
            table: Table name.
            filters: {column: value} equality filters (None value means IS NULL).
            order: PostgREST order clause (e.g. "display_order.asc").
            limit: Max rows.
            columns: Column list for select.
        """
        resp = await self._request(
            "GET", table, _build_params(filters, order, limit, columns)
        )
        rows = _decode_rows(resp, table)
        return rows if isinstance(rows, list) else [rows]

    async def select_one(
        self,
        table: str,
        filters: dict[str, Any],
        columns: str = "*",
    ) -> dict[str, Any] | None:
        """Return the single matching row, or None (first row when several match)."""
        rows = await self.select(table, filters, limit=1, columns=columns)
        return rows[0] if rows else None

    async def count(self, table: str, filters: dict[str, Any]) -> int:
        """Return the number of rows matching filters (exact count from Content-Range)."""
        resp = await self._request(
            "HEAD",
            table,
            _build_params(filters, columns="*"),
            prefer="count=exact",
        )
        content_range = resp.headers.get("Content-Range", "")
        _, _, total = content_range.partition("/")
        try:
            return int(total)
        except ValueError:
            raise RecordStoreError(
                table, f"Missing count in Content-Range: {content_range!r}"
            ) from None

    async def insert(self, table: str, payload: dict[str, Any]) -> dict[str, Any]:
        """Insert one row and return the stored representation."""
        resp = await self._request(
            "POST", table, {}, body=payload, prefer="return=representation"
        )
        rows = _decode_rows(resp, table)
        if isinstance(rows, list):
            return rows[0] if rows else dict(payload)
        return rows

    async def update(
        self, table: str, payload: dict[str, Any], filters: dict[str, Any]
    ) -> list[dict[str, Any]]:
        """Update rows matching filters; filters must not be empty."""
        if not filters:
            raise RecordStoreError(table, "Refusing unfiltered update")
        resp = await self._request(
            "PATCH",
            table,
            _build_params(filters),
            body=payload,
            prefer="return=representation",
        )
        rows = _decode_rows(resp, table)
        return rows if isinstance(rows, list) else [rows]

    async def delete(self, table: str, filters: dict[str, Any]) -> None:
        """Delete rows matching filters; filters must not be empty."""
        if not filters:
            raise RecordStoreError(table, "Refusing unfiltered delete")
        await self._request("DELETE", table, _build_params(filters))
