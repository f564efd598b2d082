from __future__ import annotations

import time

from storefront.core.cache import stats
from storefront.logger import get_logger

logger = get_logger(__name__)

# Per-lookup events; INFO is kept for loads, evictions and resets.
_DEBUG_EVENTS = frozenset({"hit", "stale_hit", "miss", "set"})


class CacheTimer:
    """Milliseconds since construction."""

    def __init__(self) -> None:
        self._started = time.perf_counter()

    def elapsed_ms(self) -> float:
        return (time.perf_counter() - self._started) * 1000.0


def log_cache_event(
    *,
    namespace: str,
    cache_event: str,
    duration_ms: float | None = None,
    detail: str | None = None,
) -> None:
    """Count ``cache_event`` and log it. Keys and values are never logged."""
    stats.increment(namespace=namespace, cache_event=cache_event)

    # structlog reserves `event` for the message, hence `cache_event`.
    fields: dict[str, object] = {"namespace": namespace, "cache_event": cache_event}
    if duration_ms is not None:
        fields["duration_ms"] = round(duration_ms, 3)
    if detail is not None:
        fields["detail"] = detail

    log = logger.debug if cache_event in _DEBUG_EVENTS else logger.info
    log("cache", **fields)
