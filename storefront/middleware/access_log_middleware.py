"""Access log middleware for the storefront API."""

import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from storefront.logger import get_logger

logger = get_logger(__name__)

QUIET_PATHS = frozenset({"/", "/health"})


def _request_line(request: Request) -> str:
    target = request.url.path
    if request.url.query:
        target = f"{target}?{request.url.query}"
    return f'"{request.method} {target} HTTP/{request.scope.get("http_version", "1.1")}"'


def _peer(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client:
        return f"{request.client.host}:{request.client.port}"
    return "-"


class AccessLogMiddleware(BaseHTTPMiddleware):
    """
    One ``http_request`` line per API call.

    The ``cache_control`` field shows what downstream caches were told, so the
    edge behaviour of the catalog routes can be read off the log.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.url.path in QUIET_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response: Response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        size = response.headers.get("content-length")
        logger.info(
            "http_request",
            client=_peer(request),
            request=_request_line(request),
            status=response.status_code,
            size=f"{size}B" if size else "-",
            duration=f"{elapsed_ms:.1f}ms",
            cache_control=response.headers.get("cache-control", "-"),
        )
        return response
