"""Per-request performance logging.

Each request is timed and the cache counters are diffed around it, so one
``request_perf`` event shows how many hits, misses and loads the request cost.
Responses are only annotated with the request id.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from uuid import uuid4

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from storefront.core.cache import stats as cache_stats
from storefront.logger import log_request_performance

SKIPPED_PATHS = frozenset({"/", "/health"})
REQUEST_ID_HEADER = "x-request-id"


def _request_id(request: Request) -> str:
    return (
        request.headers.get(REQUEST_ID_HEADER)
        or request.headers.get("x-correlation-id")
        or uuid4().hex
    )


class PerformanceMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in SKIPPED_PATHS:
            return await call_next(request)

        request_id = _request_id(request)
        counters_before = cache_stats.snapshot()
        started = time.perf_counter()

        status_code = 500
        try:
            response: Response = await call_next(request)
            status_code = response.status_code
            response.headers.setdefault(REQUEST_ID_HEADER, request_id)
            return response
        finally:
            log_request_performance(
                request_id=request_id,
                method=request.method,
                path=request.url.path,
                status_code=status_code,
                duration_ms=(time.perf_counter() - started) * 1000.0,
                cache_delta=cache_stats.diff(counters_before, cache_stats.snapshot()),
            )
