from .binding import QueryBinding, QueryListener, QueryState, QueryStatus, use_cached_query
from .cancellation import CancelReason, CancelToken
from .focus import FocusEvents, focus_events

__all__ = [
    "CancelReason",
    "CancelToken",
    "FocusEvents",
    "QueryBinding",
    "QueryListener",
    "QueryState",
    "QueryStatus",
    "focus_events",
    "use_cached_query",
]
