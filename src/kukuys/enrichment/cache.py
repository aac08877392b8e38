"""Name-keyed cache with per-entry expiry."""

from __future__ import annotations

import threading
import time
from typing import Callable, Dict, Generic, Optional, Tuple, TypeVar


V = TypeVar("V")


class TTLCache(Generic[V]):
    """Entries expire ``ttl`` seconds after they are set; expiry is checked on read."""

    def __init__(self, ttl: float, *, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._entries: Dict[str, Tuple[V, float]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[V]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, expiry = entry
            if expiry <= self._clock():
                del self._entries[key]
                return None
            return value

    def set(self, key: str, value: V) -> None:
        with self._lock:
            self._entries[key] = (value, self._clock() + self.ttl)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
