"""Shared test doubles: a manual clock, a deferred fetcher and a fake PostgREST backend."""

from __future__ import annotations

import asyncio
import json
from typing import Any

import httpx


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class Deferred:
    """Fetcher whose calls stay pending until the test resolves them."""

    def __init__(self) -> None:
        self.calls: list[asyncio.Future[Any]] = []

    async def __call__(self) -> Any:
        future: asyncio.Future[Any] = asyncio.get_running_loop().create_future()
        self.calls.append(future)
        return await future

    @property
    def count(self) -> int:
        return len(self.calls)


def _text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    return str(value)


class FakePostgrest:
    """In-memory stand-in for the PostgREST endpoint, served over httpx.MockTransport."""

    RESERVED = {"select", "order", "limit", "offset", "on_conflict"}

    def __init__(self, tables: dict[str, list[dict[str, Any]]] | None = None) -> None:
        self.tables: dict[str, list[dict[str, Any]]] = {
            name: [dict(row) for row in rows] for name, rows in (tables or {}).items()
        }
        self.requests: list[httpx.Request] = []
        self.fail_with: tuple[int, dict[str, Any]] | None = None
        self._next_id = 1000

    def requests_for(self, table: str, method: str = "GET") -> list[httpx.Request]:
        return [
            r for r in self.requests if r.url.path.endswith(f"/{table}") and r.method == method
        ]

    def _matches(self, row: dict[str, Any], params: httpx.QueryParams) -> bool:
        for column, expr in params.multi_items():
            if column in self.RESERVED:
                continue
            op, _, raw = expr.partition(".")
            value = _text(row.get(column))
            if op == "eq" and value != raw:
                return False
            if op == "neq" and value == raw:
                return False
        return True

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_with is not None:
            status, body = self.fail_with
            return httpx.Response(status, json=body)

        table = request.url.path.rsplit("/", 1)[-1]
        rows = self.tables.setdefault(table, [])
        params = request.url.params

        if request.method == "GET":
            matched = [row for row in rows if self._matches(row, params)]
            order = params.get("order")
            if order:
                column, direction = order.rsplit(".", 1)
                matched.sort(key=lambda r: _text(r.get(column)), reverse=direction == "desc")
            total = len(matched)
            offset = int(params.get("offset", "0"))
            limit = params.get("limit")
            matched = matched[offset : offset + int(limit)] if limit else matched[offset:]
            select = params.get("select", "*")
            if select != "*":
                columns = select.split(",")
                matched = [{c: row.get(c) for c in columns} for row in matched]
            headers = {}
            if "count=exact" in request.headers.get("prefer", ""):
                headers["Content-Range"] = f"0-{max(len(matched) - 1, 0)}/{total}"
            return httpx.Response(200, json=matched, headers=headers)

        if request.method == "POST":
            body = json.loads(request.content)
            items = body if isinstance(body, list) else [body]
            on_conflict = params.get("on_conflict")
            written = []
            for item in items:
                item = dict(item)
                if on_conflict:
                    existing = next(
                        (r for r in rows if r.get(on_conflict) == item.get(on_conflict)), None
                    )
                    if existing is not None:
                        existing.update(item)
                        written.append(dict(existing))
                        continue
                if "id" not in item:
                    item["id"] = str(self._next_id)
                    self._next_id += 1
                rows.append(item)
                written.append(dict(item))
            return httpx.Response(201, json=written)

        if request.method == "PATCH":
            values = json.loads(request.content)
            updated = []
            for row in rows:
                if self._matches(row, params):
                    row.update(values)
                    updated.append(dict(row))
            return httpx.Response(200, json=updated)

        if request.method == "DELETE":
            removed = [row for row in rows if self._matches(row, params)]
            self.tables[table] = [row for row in rows if row not in removed]
            return httpx.Response(200, json=removed)

        return httpx.Response(405)


def make_product(product_id: str, **overrides: Any) -> dict[str, Any]:
    row: dict[str, Any] = {
        "id": product_id,
        "name": f"Product {product_id}",
        "description": None,
        "short_description": "short",
        "price": 19.99,
        "original_price": 0,
        "discount_percentage": None,
        "category": "gadgets",
        "badge": None,
        "affiliate_link": f"https://shop.example.test/p/{product_id}",
        "images": None,
        "is_amazon_product": False,
        "is_active": True,
        "created_at": f"2024-01-{int(product_id) % 28 + 1:02d}T00:00:00Z",
        "updated_at": None,
    }
    row.update(overrides)
    return row
