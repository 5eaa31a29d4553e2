"""
Caching Utilities
=================
Small in-memory TTL cache for catalog snapshots.

Usage:
    from moviehub.utils.cache import CacheStore

    store = CacheStore(max_size=8)
    store.set("catalog:all", movies, ttl=300)
    movies = store.get("catalog:all")
"""
from typing import Any, Dict, Optional, Tuple
from collections import OrderedDict
import logging
import time

logger = logging.getLogger(__name__)


class CacheStore:
    """
    Entries expire after their TTL; when full, the least recently read entry
    is evicted. Owned by a single service instance.
    """

    def __init__(self, max_size: int = 16):
        self._entries: "OrderedDict[str, Tuple[Any, Optional[float]]]" = OrderedDict()
        self._max_size = max_size
        self._hits = 0
        self._misses = 0

    def get(self, key: str) -> Optional[Any]:
        """Cached value, or None when absent or expired"""
        entry = self._entries.get(key)
        if entry is None:
            self._misses += 1
            return None

        value, expires_at = entry
        if expires_at is not None and time.monotonic() >= expires_at:
            del self._entries[key]
            self._misses += 1
            logger.debug(f"Cache entry '{key}' expired")
            return None

        self._entries.move_to_end(key)
        self._hits += 1
        return value

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        """Store ``value``; a falsy ``ttl`` means it never expires."""
        expires_at = time.monotonic() + ttl if ttl else None
        self._entries[key] = (value, expires_at)
        self._entries.move_to_end(key)

        while len(self._entries) > self._max_size:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug(f"Evicted cache key: {evicted}")

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()
        self._hits = self._misses = 0

    def get_stats(self) -> Dict[str, Any]:
        total = self._hits + self._misses
        return {
            'size': len(self._entries),
            'max_size': self._max_size,
            'hits': self._hits,
            'misses': self._misses,
            'hit_rate': f"{(self._hits / total * 100) if total else 0:.2f}%",
        }
