"""Content-addressed render cache.

Entries are keyed by the SHA-256 digest of the input text and bounded both
by count (least recently used entry evicted first) and by age.
"""

import hashlib
import threading
import time
from collections import OrderedDict
from collections.abc import Callable
from typing import Optional


def content_key(content: str) -> str:
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


class RenderCache:
    """Fixed-capacity LRU cache with a per-entry time to live."""

    def __init__(
        self,
        capacity: int = 500,
        ttl_seconds: float = 30 * 60,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.capacity = max(1, capacity)
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: OrderedDict[str, tuple[str, float]] = OrderedDict()
        # Lookups reorder entries, so reads need the same lock as writes
        self._lock = threading.Lock()

    def get(self, content: str) -> Optional[str]:
        """Return the cached value for ``content``.

        A hit moves the entry to the most recently used position. An entry
        older than the TTL is removed and reported as a miss.
        """
        key = content_key(content)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, stored_at = entry
            if self._clock() - stored_at > self.ttl_seconds:
                del self._entries[key]
                return None
            self._entries.move_to_end(key)
            return value

    def set(self, content: str, value: str) -> None:
        key = content_key(content)
        with self._lock:
            self._entries[key] = (value, self._clock())
            self._entries.move_to_end(key)
            if len(self._entries) > self.capacity:
                self._entries.popitem(last=False)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
