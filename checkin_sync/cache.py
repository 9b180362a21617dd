"""Time-bounded caches for externally sourced dashboard data."""
from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    value: T
    fetched_at: float


class ExpiringCache(Generic[T]):
    """Single-entry cache whose value expires ``ttl`` seconds after ``put``.

    A stale entry is kept until it is replaced or invalidated; ``get`` simply
    reports it as absent.
    """

    def __init__(self, ttl: float, *, clock: Callable[[], float] = time.monotonic) -> None:
        if ttl <= 0:
            raise ValueError("ttl must be positive")
        self._ttl = ttl
        self._clock = clock
        self._entry: Optional[CacheEntry[T]] = None
        self._lock = threading.Lock()

    @property
    def ttl(self) -> float:
        return self._ttl

    def get(self) -> T | None:
        with self._lock:
            entry = self._entry
        if entry is None or not self._is_fresh(entry):
            return None
        return entry.value

    def put(self, value: T) -> None:
        entry = CacheEntry(value=value, fetched_at=self._clock())
        with self._lock:
            self._entry = entry

    def invalidate(self) -> None:
        with self._lock:
            self._entry = None

    def is_valid(self) -> bool:
        with self._lock:
            entry = self._entry
        return entry is not None and self._is_fresh(entry)

    def age(self) -> float | None:
        """Seconds since the last ``put``, or ``None`` when empty."""

        with self._lock:
            entry = self._entry
        if entry is None:
            return None
        return self._clock() - entry.fetched_at

    def _is_fresh(self, entry: CacheEntry[T]) -> bool:
        return self._clock() - entry.fetched_at < self._ttl
