"""Query lifecycle for one (key, fetcher) consumer binding.

A binding seeds itself from the shared ``QueryCache``, decides when to fetch,
and publishes ``QueryState`` snapshots to its subscribers. Stale cached data
is shown while a fresh copy loads (stale-while-revalidate).

Only the most recently started fetch of a binding may change its state.
Older attempts are superseded through their ``CancelToken`` and their results
are dropped. When a binding is unbound mid-fetch, a successful result is still
written to the shared cache so other bindings benefit, but the binding's own
state no longer changes.
"""

from __future__ import annotations

import asyncio
import functools
import math
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

from storefront.config import settings
from storefront.core.cache import QueryCache, get_query_cache, is_valid_key
from storefront.logger import get_logger

from .cancellation import CancelReason, CancelToken
from .focus import FocusEvents, focus_events

logger = get_logger(__name__)

T = TypeVar("T")


class QueryStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class QueryState(Generic[T]):
    """Read model handed to consumers."""

    status: QueryStatus
    data: T | None
    error: Exception | None
    is_stale: bool
    is_fetching: bool = False

    @property
    def is_loading(self) -> bool:
        return self.status is QueryStatus.LOADING

    @property
    def has_data(self) -> bool:
        return self.data is not None


type QueryListener = Callable[[QueryState[Any]], None]


class QueryBinding(Generic[T]):
    """Binds one consumer to one cache key.

    Must be bound and refetched from inside a running event loop; fetches run
    as tasks on that loop.
    """

    def __init__(
        self,
        key: str | None,
        fetcher: Callable[[], Awaitable[T]],
        *,
        stale_seconds: float | None = None,
        refetch_on_focus: bool | None = None,
        fallback: T | None = None,
        cache: QueryCache[Any] | None = None,
        focus: FocusEvents | None = None,
    ) -> None:
        stale = settings.query_stale_seconds if stale_seconds is None else float(stale_seconds)
        if math.isnan(stale) or stale < 0:
            raise ValueError("stale_seconds must be >= 0")

        self._key = key
        self._fetcher = fetcher
        self._stale_seconds = stale
        self._refetch_on_focus = (
            settings.query_refetch_on_focus if refetch_on_focus is None else refetch_on_focus
        )
        self._fallback = fallback
        self._cache = cache if cache is not None else get_query_cache()
        self._focus = focus if focus is not None else focus_events

        self._status = QueryStatus.IDLE
        self._data: T | None = fallback
        self._error: Exception | None = None
        self._is_fetching = False

        self._token: CancelToken | None = None
        self._current: asyncio.Task[QueryState[T]] | None = None
        self._tasks: set[asyncio.Task[QueryState[T]]] = set()
        self._listeners: dict[int, QueryListener] = {}
        self._next_listener_id = 0
        self._unsubscribe_focus: Callable[[], None] | None = None
        self._bound = False
        self._closed = False

    @property
    def key(self) -> str | None:
        return self._key

    @property
    def is_bound(self) -> bool:
        return self._bound and not self._closed

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def in_flight(self) -> bool:
        """True while the latest fetch attempt has not finished."""
        return self._current is not None and not self._current.done()

    @property
    def state(self) -> QueryState[T]:
        return QueryState(
            status=self._status,
            data=self._data,
            error=self._error,
            is_stale=self._is_stale(),
            is_fetching=self._is_fetching,
        )

    def bind(self) -> QueryBinding[T]:
        """Seed from the cache and fetch if nothing fresh is stored."""
        if self._closed:
            raise RuntimeError("binding was unbound and cannot be bound again")
        if self._bound:
            return self
        self._bound = True

        if not is_valid_key(self._key):
            # Keys often depend on data that has not loaded yet; wait quietly.
            logger.debug("query_skipped", reason="invalid_key")
            self._publish()
            return self

        key = self._key
        entry = self._cache.entry(key)
        if entry is not None:
            self._data = entry.value
            self._status = QueryStatus.SUCCESS
            self._publish()
            if entry.is_stale(self._cache.now()):
                self._start_fetch(background=True)
        else:
            self._data = self._fallback
            self._status = QueryStatus.LOADING
            self._start_fetch()

        if self._refetch_on_focus:
            self._unsubscribe_focus = self._focus.subscribe(self._on_focus)
        return self

    def refetch(self) -> asyncio.Future[QueryState[T]]:
        """Start a new fetch, superseding any in-flight one.

        The returned future resolves with the state after the attempt settles;
        fetch failures are reported through the state, never raised. Cancelling the
        future drops the attempt and puts the binding back in its prior status.
        """
        if not self._bound and not self._closed:
            raise RuntimeError("bind() must be called before refetch()")
        if self._closed or not is_valid_key(self._key):
            future: asyncio.Future[QueryState[T]] = asyncio.get_running_loop().create_future()
            future.set_result(self.state)
            return future
        return self._start_fetch()

    def unbind(self) -> None:
        """Tear the binding down; the shared cache entry is left alone."""
        if self._closed:
            return
        self._closed = True
        if self._token is not None:
            self._token.cancel(CancelReason.UNBOUND)
        if self._unsubscribe_focus is not None:
            self._unsubscribe_focus()
            self._unsubscribe_focus = None
        self._listeners.clear()

    async def settled(self) -> QueryState[T]:
        """Wait until no fetch of this binding is in flight."""
        while self.in_flight:
            await asyncio.wait([self._current])
        return self.state

    def subscribe(self, listener: QueryListener) -> Callable[[], None]:
        token = self._next_listener_id
        self._next_listener_id += 1
        self._listeners[token] = listener

        def unsubscribe() -> None:
            self._listeners.pop(token, None)

        return unsubscribe

    async def __aenter__(self) -> QueryBinding[T]:
        return self.bind()

    async def __aexit__(self, *exc_info: object) -> None:
        self.unbind()

    def _is_stale(self) -> bool:
        if not is_valid_key(self._key):
            return True
        return self._cache.is_stale(self._key)

    def _start_fetch(self, *, background: bool = False) -> asyncio.Task[QueryState[T]]:
        if self._token is not None:
            self._token.cancel(CancelReason.SUPERSEDED)
        token = CancelToken()
        self._token = token

        previous = (self._status, self._error)
        self._error = None
        self._is_fetching = True
        if not background:
            self._status = QueryStatus.LOADING
        self._publish()

        task = asyncio.get_running_loop().create_task(self._run(token), name=f"query:{self._key}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        task.add_done_callback(functools.partial(self._on_attempt_done, token, previous))
        self._current = task
        return task

    async def _run(self, token: CancelToken) -> QueryState[T]:
        key = self._key
        try:
            value = await self._fetcher()
        except Exception as exc:
            if token.cancelled:
                logger.debug(
                    "query_result_discarded",
                    key=key,
                    reason=token.reason.value,
                    outcome="error",
                )
                return self.state
            self._status = QueryStatus.ERROR
            self._error = exc
            self._is_fetching = False
            logger.warning(
                "query_failed",
                key=key,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            self._publish()
            return self.state

        if token.reason is CancelReason.SUPERSEDED:
            logger.debug("query_result_discarded", key=key, reason=token.reason.value)
            return self.state

        self._cache.set(key, value, stale_seconds=self._stale_seconds)

        if token.reason is CancelReason.UNBOUND:
            logger.debug("query_committed_after_unbind", key=key)
            return self.state

        self._data = value
        self._status = QueryStatus.SUCCESS
        self._error = None
        self._is_fetching = False
        self._publish()
        return self.state

    def _on_attempt_done(
        self,
        token: CancelToken,
        previous: tuple[QueryStatus, Exception | None],
        task: asyncio.Task[QueryState[T]],
    ) -> None:
        """Settle the state of the latest attempt when its task was cancelled."""
        if not task.cancelled() or token is not self._token or token.cancelled:
            return
        status, error = previous
        if status is QueryStatus.LOADING:
            status = QueryStatus.SUCCESS if self._key in self._cache else QueryStatus.IDLE
        self._status = status
        self._error = error
        self._is_fetching = False
        logger.debug("query_cancelled", key=self._key, status=status.value)
        self._publish()

    def _on_focus(self) -> None:
        if self._closed or not is_valid_key(self._key):
            return
        if self._cache.is_stale(self._key):
            logger.debug("query_refetch_on_focus", key=self._key)
            self._start_fetch()

    def _publish(self) -> None:
        if not self._listeners:
            return
        state = self.state
        for listener in list(self._listeners.values()):
            try:
                listener(state)
            except Exception as exc:  # noqa: BLE001 - a consumer bug must not break the fetch
                logger.warning("query_listener_failed", key=self._key, error=str(exc))


def use_cached_query(
    key: str | None,
    fetcher: Callable[[], Awaitable[T]],
    **options: Any,
) -> QueryBinding[T]:
    """Create a binding and bind it right away."""
    return QueryBinding(key, fetcher, **options).bind()
