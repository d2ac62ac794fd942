"""TTL cache for venue validation results.

The cache is process-wide and unbounded: entries are only dropped when
read after expiry. Concurrent writers to the same key resolve as
last-write-wins.
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Generic, TypeVar

T = TypeVar("T")

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass
class CacheEntry(Generic[T]):
    """Cached value with the time it was stored."""

    value: T
    cached_at: datetime
    ttl: timedelta

    def is_fresh(self, now: datetime) -> bool:
        return now - self.cached_at < self.ttl


class FreshnessCache(Generic[T]):
    """In-memory key/value store with a per-entry expiry."""

    def __init__(self, ttl: timedelta, clock: Clock = utc_now) -> None:
        self._ttl = ttl
        self._clock = clock
        self._entries: dict[str, CacheEntry[T]] = {}

    def get(self, key: str) -> T | None:
        """Get cached value if fresh, None otherwise."""
        entry = self._entries.get(key)
        if entry and entry.is_fresh(self._clock()):
            return entry.value
        elif entry:
            # Expired - remove
            del self._entries[key]
        return None

    def set(self, key: str, value: T) -> None:
        self._entries[key] = CacheEntry(value=value, cached_at=self._clock(), ttl=self._ttl)

    def __len__(self) -> int:
        return len(self._entries)
