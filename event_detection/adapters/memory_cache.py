"""In-process TTL cache implementing CacheProtocol."""

from __future__ import annotations

import threading
import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from event_detection.config.logging_config import get_logger

__all__ = ["InMemoryTTLCache"]

logger = get_logger(__name__)

DEFAULT_MAX_ENTRIES = 1000


@dataclass(frozen=True)
class _CacheEntry:
    value: Any
    expires_at: float


class InMemoryTTLCache:
    """Bounded key/value cache with per-entry expiry.

    When full, the oldest inserted entry is evicted. Safe to share between
    threads; each detection run may also own a private instance.
    """

    def __init__(
        self,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize cache.

        Args:
            max_entries: Capacity before eviction kicks in
            clock: Seconds source, monotonic by default
        """
        if max_entries < 1:
            raise ValueError("max_entries must be >= 1")

        self._max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, _CacheEntry] = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, key: str) -> Any | None:
        """Return the cached value, or None when missing or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self.misses += 1
                return None

            if self._clock() >= entry.expires_at:
                del self._entries[key]
                self.misses += 1
                return None

            self.hits += 1
            return entry.value

    def set(self, key: str, value: Any, ttl_ms: int) -> None:
        """Store a value for ``ttl_ms`` milliseconds."""
        if ttl_ms <= 0:
            return

        with self._lock:
            if key in self._entries:
                del self._entries[key]
            elif len(self._entries) >= self._max_entries:
                evicted_key, _ = self._entries.popitem(last=False)
                logger.debug("cache_entry_evicted", key=evicted_key)

            self._entries[key] = _CacheEntry(
                value=value, expires_at=self._clock() + ttl_ms / 1000
            )

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
