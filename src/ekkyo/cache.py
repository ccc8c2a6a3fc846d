"""Small thread-safe TTL cache with an injectable clock."""

from __future__ import annotations

import threading
from time import monotonic
from typing import Any, Callable, Hashable

_MISSING = object()


class TtlCache:
    """Memoize values for ``ttl`` seconds.

    The clock defaults to ``time.monotonic``; tests pass their own callable
    to move time forward without sleeping. All readers inside the same window
    see the same stored value.
    """

    def __init__(
        self,
        ttl: float,
        clock: Callable[[], float] = monotonic,
        max_entries: int = 256,
    ) -> None:
        self.ttl = ttl
        self._clock = clock
        self._max_entries = max_entries
        self._entries: dict[Hashable, tuple[float, Any]] = {}
        self._lock = threading.Lock()

    def get(self, key: Hashable, default: Any = None) -> Any:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return default
            stored_at, value = entry
            if self._clock() - stored_at >= self.ttl:
                del self._entries[key]
                return default
            return value

    def set(self, key: Hashable, value: Any) -> None:
        with self._lock:
            if len(self._entries) >= self._max_entries and key not in self._entries:
                self._evict_expired()
                if len(self._entries) >= self._max_entries:
                    self._entries.clear()
            self._entries[key] = (self._clock(), value)

    def get_or_set(self, key: Hashable, factory: Callable[[], Any]) -> Any:
        """Return the cached value, computing and storing it on a miss.

        ``factory`` runs under the lock so concurrent callers inside the
        window never compute twice. A ``None`` result is not stored.
        """
        with self._lock:
            entry = self._entries.get(key)
            now = self._clock()
            if entry is not None and now - entry[0] < self.ttl:
                return entry[1]
            value = factory()
            if value is not None:
                self._entries[key] = (now, value)
            return value

    def invalidate(self, key: Hashable | None = None) -> None:
        with self._lock:
            if key is None:
                self._entries.clear()
            else:
                self._entries.pop(key, None)

    def _evict_expired(self) -> None:
        now = self._clock()
        expired = [k for k, (ts, _) in self._entries.items() if now - ts >= self.ttl]
        for k in expired:
            del self._entries[k]

    def __contains__(self, key: Hashable) -> bool:
        return self.get(key, _MISSING) is not _MISSING

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
