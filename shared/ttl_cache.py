"""
In-memory TTL cache for serverless instances.

Entries live in a plain dict as ``{'data': ..., 'timestamp': ...}`` and expire
after a fixed window. There is no size bound; expired entries are dropped on
lookup or by an explicit ``purge_expired`` call.
"""

import time
from typing import Any, Callable, Optional

CACHE_DURATION_SECONDS = 30 * 60


class TTLCache:
    """Dict-backed cache whose entries expire ``ttl_seconds`` after insertion."""

    def __init__(self, ttl_seconds: float = CACHE_DURATION_SECONDS,
                 clock: Callable[[], float] = time.time):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def _is_expired(self, entry: dict, now: float) -> bool:
        return now - entry['timestamp'] >= self.ttl_seconds

    def get(self, key: str) -> Optional[dict]:
        """Return the live entry for ``key``, deleting it if it has expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._is_expired(entry, self._clock()):
            del self._entries[key]
            return None
        return entry

    def set(self, key: str, data: Any) -> dict:
        entry = {'data': data, 'timestamp': self._clock()}
        self._entries[key] = entry
        return entry

    def purge_expired(self) -> int:
        """Drop every expired entry. Returns how many were removed."""
        now = self._clock()
        expired = [k for k, v in self._entries.items() if self._is_expired(v, now)]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def age_minutes(self, entry: dict) -> int:
        return round((self._clock() - entry['timestamp']) / 60)

    def clear(self) -> None:
        self._entries.clear()
