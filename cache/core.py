"""
Core caching functionality for the insight explorer.

This module provides a bounded in-memory store with least-recently-used
eviction, used for block objects and block summaries keyed by hash.
"""
import threading
from collections import OrderedDict
from typing import Any, Dict, Generic, Hashable, Optional, TypeVar

import structlog

logger = structlog.get_logger()

K = TypeVar('K', bound=Hashable)
V = TypeVar('V')


class LRUCache(Generic[K, V]):
    """
    Bounded in-memory cache with least-recently-used eviction.

    Both reads and writes refresh an entry's recency. All operations hold a
    single lock, so concurrent request handlers never observe a partially
    updated store and every write is an atomic replace-or-insert.
    """

    def __init__(self, max_size: int = 1000, name: str = "cache"):
        """
        Initialize the cache with specified maximum size.

        Args:
            max_size: Maximum number of items to store in the cache
            name: Label used in logs and statistics
        """
        if max_size <= 0:
            raise ValueError("Cache max_size must be positive")
        self._cache: "OrderedDict[K, V]" = OrderedDict()
        self._max_size = max_size
        self._lock = threading.RLock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0
        self.name = name

    @property
    def max_size(self) -> int:
        return self._max_size

    def get(self, key: K) -> Optional[V]:
        """
        Get a value from the cache.

        Args:
            key: Cache key to retrieve

        Returns:
            The cached value or None if not found
        """
        with self._lock:
            if key not in self._cache:
                self._misses += 1
                return None
            self._cache.move_to_end(key)
            self._hits += 1
            return self._cache[key]

    def set(self, key: K, value: V) -> bool:
        """
        Set a value in the cache, evicting the least recently used entry
        when the cache is full.

        Returns:
            True once the value is stored
        """
        with self._lock:
            if key in self._cache:
                self._cache.move_to_end(key)
            elif len(self._cache) >= self._max_size:
                evicted, _ = self._cache.popitem(last=False)
                self._evictions += 1
                logger.debug("cache_evicted", cache=self.name, key=evicted)
            self._cache[key] = value
            return True

    def delete(self, key: K) -> bool:
        """
        Delete a key from the cache.

        Returns:
            True if deleted, False if key not found
        """
        with self._lock:
            if key in self._cache:
                del self._cache[key]
                return True
            return False

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._cache

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    def flush(self) -> bool:
        """Clear all keys in the cache."""
        with self._lock:
            self._cache.clear()
            self._hits = 0
            self._misses = 0
            self._evictions = 0
            return True

    def get_stats(self) -> Dict[str, Any]:
        """
        Get cache statistics.

        Returns:
            Dictionary with cache statistics
        """
        with self._lock:
            total_requests = self._hits + self._misses
            hit_ratio = self._hits / total_requests if total_requests > 0 else 0

            return {
                'size': len(self._cache),
                'max_size': self._max_size,
                'hits': self._hits,
                'misses': self._misses,
                'evictions': self._evictions,
                'hit_ratio': hit_ratio
            }
