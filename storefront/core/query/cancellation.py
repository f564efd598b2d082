from __future__ import annotations

from enum import Enum


class CancelReason(str, Enum):
    """Why an in-flight fetch stopped mattering."""

    SUPERSEDED = "superseded"
    UNBOUND = "unbound"


class CancelToken:
    """Cooperative cancellation flag for one fetch attempt.

    The fetch itself keeps running; whoever awaits it checks the token before
    touching shared state. The first reason given wins.
    """

    __slots__ = ("_reason",)

    def __init__(self) -> None:
        self._reason: CancelReason | None = None

    def cancel(self, reason: CancelReason) -> None:
        if self._reason is None:
            self._reason = reason

    @property
    def cancelled(self) -> bool:
        return self._reason is not None

    @property
    def reason(self) -> CancelReason | None:
        return self._reason

    def __repr__(self) -> str:
        state = self._reason.value if self._reason else "active"
        return f"CancelToken({state})"
