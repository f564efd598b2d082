"""Foreground-focus event source.

The host shell (browser tab, desktop wrapper, ...) tells the process it has
regained focus; bindings that opted in revalidate stale data when that happens.
"""

from __future__ import annotations

from collections.abc import Callable

from storefront.logger import get_logger

logger = get_logger(__name__)

type FocusListener = Callable[[], None]


class FocusEvents:
    def __init__(self) -> None:
        self._listeners: dict[int, FocusListener] = {}
        self._next_id = 0

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def subscribe(self, listener: FocusListener) -> Callable[[], None]:
        """Register ``listener``; the returned callable removes it (safe to call twice)."""
        token = self._next_id
        self._next_id += 1
        self._listeners[token] = listener

        def unsubscribe() -> None:
            self._listeners.pop(token, None)

        return unsubscribe

    def notify(self) -> int:
        """Deliver a focus-regained event; returns the number of listeners called."""
        listeners = list(self._listeners.values())
        for listener in listeners:
            try:
                listener()
            except Exception as exc:  # noqa: BLE001 - one bad listener must not starve the rest
                logger.warning("focus_listener_failed", error=str(exc))
        logger.debug("focus_regained", listeners=len(listeners))
        return len(listeners)


focus_events = FocusEvents()
