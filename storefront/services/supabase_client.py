"""
Hosted relational backend client.

A thin async wrapper over the Supabase PostgREST endpoint. It only knows how
to express table reads and writes as HTTP requests; the schema belongs to the
backend.
"""

from __future__ import annotations

from typing import Any

import httpx

from storefront.config import settings
from storefront.http_client import create_scoped_client
from storefront.logger import get_logger

logger = get_logger(__name__)

type Row = dict[str, Any]

_RETURN_REPRESENTATION = "return=representation"


class SupabaseError(Exception):
    """A PostgREST request failed (HTTP error body or transport failure)."""

    def __init__(self, message: str, *, status_code: int | None = None, code: str | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code

    def __str__(self) -> str:
        parts = [self.message]
        if self.code:
            parts.append(f"code={self.code}")
        if self.status_code is not None:
            parts.append(f"status={self.status_code}")
        return " ".join(parts)


def _literal(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    return str(value)


def _filters(
    eq: dict[str, Any] | None = None,
    neq: dict[str, Any] | None = None,
) -> dict[str, str]:
    params: dict[str, str] = {}
    for column, value in (eq or {}).items():
        params[column] = f"is.{_literal(value)}" if value is None else f"eq.{_literal(value)}"
    for column, value in (neq or {}).items():
        params[column] = "not.is.null" if value is None else f"neq.{_literal(value)}"
    return params


def _count_from_content_range(header: str | None) -> int:
    # Content-Range looks like "0-24/25" or "*/0".
    if not header or "/" not in header:
        return 0
    total = header.rsplit("/", 1)[1]
    return int(total) if total.isdigit() else 0


class SupabaseClient:
    """Table-level operations over PostgREST."""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        *,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.supabase_rest_url).rstrip("/")
        key = settings.supabase_key if api_key is None else api_key
        self._headers = {
            "apikey": key,
            "Authorization": f"Bearer {key}",
            "Content-Type": "application/json",
        }
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = create_scoped_client(
                base_url=self.base_url,
                timeout=self._timeout,
                headers=self._headers,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    async def _request(
        self,
        method: str,
        table: str,
        *,
        params: dict[str, str] | None = None,
        json_data: Any = None,
        prefer: str | None = None,
    ) -> httpx.Response:
        client = await self._get_client()
        headers = {"Prefer": prefer} if prefer else None
        try:
            response = await client.request(
                method,
                f"/{table}",
                params=params,
                json=json_data,
                headers=headers,
            )
        except httpx.HTTPError as exc:
            logger.error("supabase_request_failed", table=table, method=method, error=str(exc))
            raise SupabaseError(f"request to {table} failed: {exc}", code="network_error") from exc

        if response.status_code >= 400:
            code: str | None = None
            message = response.text or response.reason_phrase
            try:
                body = response.json()
            except ValueError:
                body = None
            if isinstance(body, dict):
                code = body.get("code")
                message = body.get("message") or message
            logger.error(
                "supabase_error_response",
                table=table,
                method=method,
                status=response.status_code,
                code=code,
            )
            raise SupabaseError(message, status_code=response.status_code, code=code)
        return response

    @staticmethod
    def _rows(response: httpx.Response) -> list[Row]:
        if not response.content:
            return []
        body = response.json()
        if isinstance(body, list):
            return body
        return [body] if isinstance(body, dict) else []

    async def select(
        self,
        table: str,
        *,
        columns: str = "*",
        eq: dict[str, Any] | None = None,
        neq: dict[str, Any] | None = None,
        order: str | None = None,
        descending: bool = False,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[Row]:
        params = {"select": columns, **_filters(eq, neq)}
        if order:
            params["order"] = f"{order}.{'desc' if descending else 'asc'}"
        if limit is not None:
            params["limit"] = str(limit)
        if offset:
            params["offset"] = str(offset)
        response = await self._request("GET", table, params=params)
        return self._rows(response)

    async def select_one(
        self,
        table: str,
        *,
        columns: str = "*",
        eq: dict[str, Any] | None = None,
    ) -> Row | None:
        """Maybe-single read: the first matching row or None."""
        rows = await self.select(table, columns=columns, eq=eq, limit=1)
        return rows[0] if rows else None

    async def insert(self, table: str, values: Row | list[Row]) -> list[Row]:
        response = await self._request(
            "POST", table, json_data=values, prefer=_RETURN_REPRESENTATION
        )
        return self._rows(response)

    async def upsert(
        self,
        table: str,
        values: Row | list[Row],
        *,
        on_conflict: str | None = None,
    ) -> list[Row]:
        params = {"on_conflict": on_conflict} if on_conflict else None
        response = await self._request(
            "POST",
            table,
            params=params,
            json_data=values,
            prefer=f"resolution=merge-duplicates,{_RETURN_REPRESENTATION}",
        )
        return self._rows(response)

    async def update(self, table: str, values: Row, *, eq: dict[str, Any]) -> list[Row]:
        if not eq:
            raise ValueError("update requires at least one eq filter")
        response = await self._request(
            "PATCH",
            table,
            params=_filters(eq),
            json_data=values,
            prefer=_RETURN_REPRESENTATION,
        )
        return self._rows(response)

    async def delete(self, table: str, *, eq: dict[str, Any]) -> list[Row]:
        if not eq:
            raise ValueError("delete requires at least one eq filter")
        response = await self._request(
            "DELETE",
            table,
            params=_filters(eq),
            prefer=_RETURN_REPRESENTATION,
        )
        return self._rows(response)

    async def count(self, table: str, *, eq: dict[str, Any] | None = None) -> int:
        params = {"select": "*", "limit": "1", **_filters(eq)}
        response = await self._request("GET", table, params=params, prefer="count=exact")
        return _count_from_content_range(response.headers.get("Content-Range"))


_supabase_client: SupabaseClient | None = None


def get_supabase_client() -> SupabaseClient:
    """Get or create the global backend client."""
    global _supabase_client
    if _supabase_client is None:
        _supabase_client = SupabaseClient()
    return _supabase_client


async def close_supabase_client() -> None:
    global _supabase_client
    if _supabase_client is not None:
        await _supabase_client.close()
    _supabase_client = None
