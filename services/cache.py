from __future__ import annotations

import hashlib
from collections import OrderedDict
from dataclasses import dataclass
from threading import RLock
from time import monotonic
from typing import Any


def sha256_bytes(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def make_key(namespace: str, *parts: str) -> str:
    safe = ":".join(p.replace(":", "_") for p in parts)
    return f"{namespace}:{safe}"


@dataclass(frozen=True)
class CacheStats:
    hits: int
    misses: int
    size: int


class InMemoryCache:
    """Cache LRU en memoire, thread-safe, avec TTL optionnel.

    Sert a garder les profils d'elevation extraits des GPX televerses.
    """

    def __init__(self, max_items: int = 32):
        self._max_items = max(1, int(max_items))
        self._lock = RLock()
        # key -> (expires_at_monotonic | None, value)
        self._data: OrderedDict[str, tuple[float | None, Any]] = OrderedDict()
        self._hits = 0
        self._misses = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(hits=self._hits, misses=self._misses, size=len(self._data))

    def get(self, key: str) -> Any | None:
        now = monotonic()
        with self._lock:
            item = self._data.get(key)
            if item is None:
                self._misses += 1
                return None
            expires_at, value = item
            if expires_at is not None and now >= expires_at:
                self._data.pop(key, None)
                self._misses += 1
                return None
            # Rafraichit l'ordre LRU
            self._data.move_to_end(key)
            self._hits += 1
            return value

    def set(self, key: str, value: Any, *, ttl_s: float | None = None) -> None:
        expires_at = None
        if ttl_s is not None:
            expires_at = monotonic() + float(ttl_s)
        with self._lock:
            if key in self._data:
                self._data.pop(key)
            self._data[key] = (expires_at, value)
            while len(self._data) > self._max_items:
                self._data.popitem(last=False)

