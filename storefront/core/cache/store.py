from __future__ import annotations

import math
import time
from collections import OrderedDict
from collections.abc import Awaitable, Callable, Iterator
from typing import Generic

from .logging import CacheTimer, log_cache_event
from .singleflight import SingleFlight
from .types import CacheEntry, V


def _check_stale_seconds(stale_seconds: float) -> float:
    stale_seconds = float(stale_seconds)
    if math.isnan(stale_seconds) or stale_seconds < 0:
        raise ValueError("stale_seconds must be >= 0")
    return stale_seconds


class QueryCache(Generic[V]):
    """Key -> value store with a freshness window per entry.

    Reads never remove an entry for being stale; staleness is only a signal so
    callers can keep showing the old value while they revalidate. Entries leave
    the store through ``invalidate``/``clear`` or, when ``max_entries`` is set,
    least-recently-used eviction.

    All access is expected from one event loop, so there is no locking.
    """

    def __init__(
        self,
        *,
        namespace: str = "query",
        default_stale_seconds: float = 60.0,
        max_entries: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_entries is not None and max_entries <= 0:
            raise ValueError("max_entries must be > 0")
        self._namespace = namespace
        self._default_stale_seconds = _check_stale_seconds(default_stale_seconds)
        self._max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry[V]] = OrderedDict()
        self._singleflight = SingleFlight()

    @property
    def namespace(self) -> str:
        return self._namespace

    @property
    def default_stale_seconds(self) -> float:
        return self._default_stale_seconds

    def now(self) -> float:
        return self._clock()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def keys(self) -> Iterator[str]:
        return iter(list(self._entries.keys()))

    def set(self, key: str, value: V, *, stale_seconds: float | None = None) -> CacheEntry[V]:
        stale = (
            self._default_stale_seconds
            if stale_seconds is None
            else _check_stale_seconds(stale_seconds)
        )
        now = self._clock()
        entry = CacheEntry(key=key, value=value, stored_at=now, fresh_until=now + stale)
        self._entries[key] = entry
        self._entries.move_to_end(key, last=True)
        log_cache_event(namespace=self._namespace, cache_event="set")
        self._evict_lru()
        return entry

    def entry(self, key: str) -> CacheEntry[V] | None:
        entry = self._entries.get(key)
        if entry is None:
            log_cache_event(namespace=self._namespace, cache_event="miss")
            return None
        self._entries.move_to_end(key, last=True)
        log_cache_event(
            namespace=self._namespace,
            cache_event="stale_hit" if entry.is_stale(self._clock()) else "hit",
        )
        return entry

    def get(self, key: str) -> V | None:
        entry = self.entry(key)
        return None if entry is None else entry.value

    def is_stale(self, key: str) -> bool:
        entry = self._entries.get(key)
        if entry is None:
            return True
        return entry.is_stale(self._clock())

    def invalidate(self, key: str) -> None:
        if self._entries.pop(key, None) is not None:
            log_cache_event(namespace=self._namespace, cache_event="invalidate")

    def invalidate_matching(self, pattern: str) -> int:
        """Remove every key containing ``pattern``; returns how many were removed."""
        matched = [k for k in self._entries if pattern in k]
        for k in matched:
            self._entries.pop(k, None)
        if matched:
            log_cache_event(
                namespace=self._namespace,
                cache_event="invalidate",
                detail=f"reason=pattern count={len(matched)}",
            )
        return len(matched)

    def clear(self) -> None:
        count = len(self._entries)
        self._entries.clear()
        log_cache_event(
            namespace=self._namespace,
            cache_event="clear",
            detail=f"count={count}",
        )

    async def get_or_set(
        self,
        key: str,
        factory: Callable[[], Awaitable[V]],
        *,
        stale_seconds: float | None = None,
        cache_if: Callable[[V], bool] | None = None,
    ) -> V:
        """Return the fresh value for ``key`` or load it once for all concurrent callers.

        Unlike bindings, this never serves stale data. Factory errors reach every
        waiter and are not cached; ``cache_if`` can veto storing a result
        (e.g. an empty list or a not-found ``None``).
        """
        existing = self._entries.get(key)
        if existing is not None and not existing.is_stale(self._clock()):
            self._entries.move_to_end(key, last=True)
            log_cache_event(namespace=self._namespace, cache_event="hit")
            return existing.value

        async def load() -> V:
            # Another flight may have filled the key while this caller waited.
            current = self._entries.get(key)
            if current is not None and not current.is_stale(self._clock()):
                return current.value

            log_cache_event(namespace=self._namespace, cache_event="miss")
            timer = CacheTimer()
            value = await factory()
            if cache_if is None or cache_if(value):
                self.set(key, value, stale_seconds=stale_seconds)
            log_cache_event(
                namespace=self._namespace,
                cache_event="load",
                duration_ms=timer.elapsed_ms(),
            )
            return value

        return await self._singleflight.do(key, load)

    def _evict_lru(self) -> None:
        if self._max_entries is None:
            return

        evicted = 0
        while len(self._entries) > self._max_entries:
            self._entries.popitem(last=False)
            evicted += 1

        if evicted:
            log_cache_event(
                namespace=self._namespace,
                cache_event="evict",
                detail=f"reason=lru count={evicted}",
            )
