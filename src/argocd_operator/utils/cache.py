"""Cache utilities for Kubernetes API calls."""

from __future__ import annotations

import os
import threading
import time
from typing import Any, Optional


class TTLCache:
    """Thread-safe key/value cache with a fixed time-to-live.

    Args:
        ttl: Seconds an entry stays valid
    """

    def __init__(self, ttl: float) -> None:
        self.ttl = ttl
        self._entries: dict[str, tuple[Any, float]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            obj, timestamp = entry
            if time.monotonic() - timestamp > self.ttl:
                del self._entries[key]
                return None
            return obj

    def set(self, key: str, obj: Any) -> None:
        with self._lock:
            self._entries[key] = (obj, time.monotonic())

    def invalidate(self, pattern: Optional[str] = None) -> None:
        """Drop entries whose key contains pattern, or all entries when pattern is None."""
        with self._lock:
            if pattern is None:
                self._entries.clear()
                return
            for key in [k for k in self._entries if pattern in k]:
                del self._entries[key]

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


# ProviderConfig objects only; secrets are always read fresh
_cache = TTLCache(float(os.getenv("K8S_CACHE_TTL_SECONDS", "30.0")))


def get_cached_object(key: str) -> Optional[Any]:
    """Get an object from cache if it hasn't expired.

    Args:
        key: Cache key (typically "kind:namespace:name")

    Returns:
        Cached object or None if not found or expired
    """
    return _cache.get(key)


def set_cached_object(key: str, obj: Any) -> None:
    """Store an object in cache with current timestamp."""
    _cache.set(key, obj)


def invalidate_cache(pattern: Optional[str] = None) -> None:
    """Invalidate cache entries.

    Args:
        pattern: Optional pattern to match keys (if None, clears all)
    """
    _cache.invalidate(pattern)


def make_cache_key(kind: str, namespace: str, name: str) -> str:
    """Create a cache key for a Kubernetes resource.

    Args:
        kind: Resource kind (e.g., "ProviderConfig")
        namespace: Resource namespace, empty for cluster-scoped kinds
        name: Resource name

    Returns:
        Cache key string
    """
    return f"{kind}:{namespace}:{name}"
