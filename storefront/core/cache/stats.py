"""In-memory cache event counters.

Counts are process-wide and reset only by ``reset()``; the performance
middleware diffs two snapshots to attribute events to a request.
"""

from __future__ import annotations

from collections import Counter
from threading import Lock

type Snapshot = dict[str, dict[str, int]]

_counts: Counter[tuple[str, str]] = Counter()
_lock = Lock()


def increment(*, namespace: str, cache_event: str) -> None:
    with _lock:
        _counts[(namespace, cache_event)] += 1


def snapshot() -> Snapshot:
    """``{namespace: {cache_event: count}}``, detached from the live counters."""
    with _lock:
        items = list(_counts.items())
    out: Snapshot = {}
    for (namespace, cache_event), count in items:
        out.setdefault(namespace, {})[cache_event] = count
    return out


def reset() -> None:
    with _lock:
        _counts.clear()


def diff(before: Snapshot, after: Snapshot) -> Snapshot:
    """Per-namespace ``after - before``; zero deltas and empty namespaces are dropped."""
    out: Snapshot = {}
    for namespace in sorted(before.keys() | after.keys()):
        old = before.get(namespace, {})
        new = after.get(namespace, {})
        delta = {
            cache_event: new.get(cache_event, 0) - old.get(cache_event, 0)
            for cache_event in sorted(old.keys() | new.keys())
        }
        delta = {cache_event: n for cache_event, n in delta.items() if n}
        if delta:
            out[namespace] = delta
    return out
