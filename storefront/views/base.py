from __future__ import annotations

from typing import Any

from storefront.core.cache import QueryCache
from storefront.core.query import FocusEvents, QueryBinding


class BaseView:
    """Owns a set of query bindings and tears them down together."""

    def __init__(
        self,
        *,
        cache: QueryCache[Any] | None = None,
        focus: FocusEvents | None = None,
        stale_seconds: float | None = None,
    ) -> None:
        self._cache = cache
        self._focus = focus
        self._stale_seconds = stale_seconds
        self._bindings: list[QueryBinding[Any]] = []

    def open(self) -> None:
        raise NotImplementedError

    def close(self) -> None:
        for binding in self._bindings:
            binding.unbind()
        self._bindings.clear()

    async def settled(self) -> None:
        """Wait until every binding of the view has finished fetching.

        Settling one binding can add another (e.g. similar products once the
        product is known), so this loops until nothing is in flight.
        """
        while pending := [b for b in self._bindings if b.in_flight]:
            for binding in pending:
                await binding.settled()

    def _binding(self, key: str | None, fetcher: Any, **options: Any) -> QueryBinding[Any]:
        options.setdefault("stale_seconds", self._stale_seconds)
        binding: QueryBinding[Any] = QueryBinding(
            key,
            fetcher,
            cache=self._cache,
            focus=self._focus,
            **options,
        )
        self._bindings.append(binding)
        return binding

    def _drop(self, binding: QueryBinding[Any]) -> None:
        binding.unbind()
        if binding in self._bindings:
            self._bindings.remove(binding)

    async def __aenter__(self) -> BaseView:
        self.open()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.close()
