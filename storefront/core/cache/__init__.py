from .keys import is_valid_key, query_key
from .provider import (
    CATALOG_NAMESPACE,
    CURRENCY_NAMESPACE,
    QUERY_NAMESPACE,
    get_query_cache,
    reset_query_caches,
)
from .singleflight import SingleFlight
from .store import QueryCache
from .types import UNBOUNDED, CacheEntry, CacheNamespace, CachePolicy

__all__ = [
    "CATALOG_NAMESPACE",
    "CURRENCY_NAMESPACE",
    "QUERY_NAMESPACE",
    "UNBOUNDED",
    "CacheEntry",
    "CacheNamespace",
    "CachePolicy",
    "QueryCache",
    "SingleFlight",
    "get_query_cache",
    "is_valid_key",
    "query_key",
    "reset_query_caches",
]
