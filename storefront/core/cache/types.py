from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Generic, TypeVar

V = TypeVar("V")

type CacheNamespace = str

UNBOUNDED = math.inf


@dataclass(frozen=True, slots=True)
class CacheEntry(Generic[V]):
    key: str
    value: V
    stored_at: float
    fresh_until: float

    @property
    def stale_seconds(self) -> float:
        return self.fresh_until - self.stored_at

    def is_stale(self, now: float) -> bool:
        return now >= self.fresh_until


@dataclass(frozen=True, slots=True)
class CachePolicy:
    namespace: CacheNamespace
    default_stale_seconds: float
    max_entries: int | None
