from __future__ import annotations

from threading import Lock
from typing import Any

from storefront.config import settings

from .logging import log_cache_event
from .store import QueryCache
from .types import CachePolicy

QUERY_NAMESPACE = "query"
CATALOG_NAMESPACE = "catalog"
CURRENCY_NAMESPACE = "currency"

_provider_lock = Lock()
_caches: dict[str, QueryCache[Any]] = {}


def get_query_cache(namespace: str = QUERY_NAMESPACE) -> QueryCache[Any]:
    """Return the process-wide cache for ``namespace``, creating it on first use."""
    with _provider_lock:
        existing = _caches.get(namespace)
        if existing is not None:
            return existing

        policy = _policy_for_namespace(namespace)
        cache: QueryCache[Any] = QueryCache(
            namespace=policy.namespace,
            default_stale_seconds=policy.default_stale_seconds,
            max_entries=policy.max_entries,
        )
        _caches[namespace] = cache
        return cache


def registered_caches() -> list[tuple[str, QueryCache[Any]]]:
    with _provider_lock:
        return sorted(_caches.items())


def reset_query_caches() -> None:
    """Clear every registered cache (sign-out / session reset)."""
    with _provider_lock:
        caches = list(_caches.values())
    for cache in caches:
        cache.clear()
    log_cache_event(
        namespace="*",
        cache_event="reset",
        detail=f"namespaces={len(caches)}",
    )


def _policy_for_namespace(namespace: str) -> CachePolicy:
    max_entries = settings.cache_max_entries if settings.cache_max_entries > 0 else None

    if namespace == CATALOG_NAMESPACE:
        stale = settings.cache_catalog_ttl_seconds
    elif namespace == CURRENCY_NAMESPACE:
        stale = settings.cache_currency_ttl_seconds
    else:
        stale = settings.query_stale_seconds

    return CachePolicy(namespace=namespace, default_stale_seconds=stale, max_entries=max_entries)
