# ABOUTME: In-memory result cache with per-entry time-to-live.
# ABOUTME: Lets repeat lookups for the same source and identifier skip the network and the rate gate.

import logging
import threading
import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 24 * 60 * 60
DEFAULT_MAX_ENTRIES = 1000


@dataclass(frozen=True)
class CacheEntry:
    key: str
    value: Any
    expires_at: float


class ResultCache:
    """Thread-safe TTL cache.

    Expiry is lazy: an expired entry is dropped when it is next read, or when
    room is needed. Beyond TTL, the cache is bounded to ``max_entries``; when
    full, expired entries go first, then the least recently written.
    """

    def __init__(
        self,
        *,
        default_ttl: float = DEFAULT_TTL_SECONDS,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._default_ttl = default_ttl
        self._max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = threading.Lock()

    @staticmethod
    def generate_key(source_name: str, identifier: str) -> str:
        return f"{source_name}:{identifier}"

    def get(self, key: str) -> Any | None:
        """Return the cached value, or None if absent or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.expires_at <= self._clock():
                del self._entries[key]
                return None
            return entry.value

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        """Store ``value`` under ``key`` for ``ttl`` seconds (default TTL if None)."""
        expires_at = self._clock() + (self._default_ttl if ttl is None else ttl)
        with self._lock:
            self._entries.pop(key, None)
            self._entries[key] = CacheEntry(key=key, value=value, expires_at=expires_at)
            if len(self._entries) > self._max_entries:
                self._evict()

    def remove(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def purge_expired(self) -> int:
        """Drop every expired entry now. Returns how many were removed."""
        with self._lock:
            return self._purge_expired()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _purge_expired(self) -> int:
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if entry.expires_at <= now]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def _evict(self) -> None:
        # Caller holds the lock.
        self._purge_expired()
        while len(self._entries) > self._max_entries:
            key, _ = self._entries.popitem(last=False)
            logger.debug("Evicted cache entry %s", key)
