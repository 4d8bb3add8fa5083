"""Thread-safe in-memory TTL cache for read-mostly settings and reference data."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from typing import Any


class TTLCache:
    """Dict-based cache with per-key TTL expiry."""

    def __init__(self, default_ttl: float = 300.0) -> None:
        self._store: dict[str, tuple[Any, float]] = {}
        self._lock = threading.Lock()
        self._default_ttl = default_ttl

    def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if time.monotonic() > expires_at:
                del self._store[key]
                return None
            return value

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        with self._lock:
            expires_at = time.monotonic() + (ttl if ttl is not None else self._default_ttl)
            self._store[key] = (value, expires_at)

    def get_or_load(self, key: str, loader: Callable[[], Any], ttl: float | None = None) -> Any:
        """Return the cached value, calling `loader` on a miss.

        The loader runs outside the lock; two concurrent misses may both
        load, and the last write wins.
        """
        value = self.get(key)
        if value is None:
            value = loader()
            self.set(key, value, ttl)
        return value

    def delete(self, key: str) -> None:
        with self._lock:
            self._store.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._store.clear()


# Domain caches
catalog_cache = TTLCache(default_ttl=300)      # categories, locations
settings_cache = TTLCache(default_ttl=60)      # tax config, referral settings
duty_rate_cache = TTLCache(default_ttl=3600)   # custom duty rates
hs_code_cache = TTLCache(default_ttl=86400)    # HS code search results

ALL_CACHES = (catalog_cache, settings_cache, duty_rate_cache, hs_code_cache)
