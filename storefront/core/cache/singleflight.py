from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

T = TypeVar("T")


class SingleFlight:
    """Coalesces concurrent async calls that share a key.

    The first caller starts the function as its own task; every caller, the
    first included, awaits that task through ``asyncio.shield``. Cancelling any
    one caller leaves the shared call and the other callers untouched.
    """

    def __init__(self) -> None:
        self._calls: dict[str, asyncio.Future[Any]] = {}

    def in_flight(self, key: str) -> bool:
        return key in self._calls

    async def do(self, key: str, fn: Callable[[], Awaitable[T]]) -> T:
        call = self._calls.get(key)
        if call is None:
            call = asyncio.ensure_future(fn())
            self._calls[key] = call
            call.add_done_callback(lambda done: self._finish(key, done))
        return await asyncio.shield(call)

    def _finish(self, key: str, call: asyncio.Future[Any]) -> None:
        if self._calls.get(key) is call:
            del self._calls[key]
        if not call.cancelled():
            # Mark retrieved so a call whose callers all went away does not warn on GC.
            call.exception()
