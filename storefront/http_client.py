"""
Outbound HTTP clients.

``get_http_client`` returns the pooled client used for the third-party APIs
(geolocation, exchange rates). Upstreams that need their own base URL and
auth headers, like the relational backend, get a scoped client from
``create_scoped_client``.
"""

from __future__ import annotations

import httpx

from storefront.config import settings
from storefront.logger import get_logger

logger = get_logger(__name__)

USER_AGENT = "storefront/0.1"

SHARED_LIMITS = httpx.Limits(
    max_connections=100,
    max_keepalive_connections=20,
    keepalive_expiry=30.0,
)

_shared_client: httpx.AsyncClient | None = None


def _timeout(seconds: float | None = None) -> httpx.Timeout:
    total = settings.http_request_timeout_seconds if seconds is None else seconds
    return httpx.Timeout(total, connect=min(total, 10.0))


def _base_headers(extra: dict[str, str] | None) -> dict[str, str]:
    return {"User-Agent": USER_AGENT, **(extra or {})}


async def get_http_client() -> httpx.AsyncClient:
    """Pooled client for third-party APIs, created on first use."""
    global _shared_client
    if _shared_client is None or _shared_client.is_closed:
        _shared_client = httpx.AsyncClient(
            timeout=_timeout(),
            limits=SHARED_LIMITS,
            headers=_base_headers(None),
            follow_redirects=True,
            http2=True,
        )
        logger.info("http_client_created", max_connections=SHARED_LIMITS.max_connections)
    return _shared_client


async def close_http_client() -> None:
    """Release pooled connections (application shutdown)."""
    global _shared_client
    if _shared_client is not None and not _shared_client.is_closed:
        await _shared_client.aclose()
        logger.info("http_client_closed")
    _shared_client = None


def create_scoped_client(
    base_url: str,
    timeout: float | None = None,
    headers: dict[str, str] | None = None,
    max_connections: int = 10,
    max_keepalive_connections: int = 5,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """
    Client bound to one upstream.

    Args:
        base_url: Prefix for every request path
        timeout: Seconds per request; defaults to ``http_request_timeout_seconds``
        headers: Default headers (auth, content type)
        max_connections: Pool size for this upstream
        max_keepalive_connections: Idle connections kept open
        transport: Replaces the network transport, e.g. ``httpx.MockTransport``
    """
    options: dict[str, object] = (
        {"transport": transport} if transport is not None else {"http2": True}
    )
    return httpx.AsyncClient(
        base_url=base_url,
        timeout=_timeout(timeout),
        headers=_base_headers(headers),
        limits=httpx.Limits(
            max_connections=max_connections,
            max_keepalive_connections=max_keepalive_connections,
            keepalive_expiry=30.0,
        ),
        **options,
    )
