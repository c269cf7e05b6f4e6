"""
Insight explorer caching module.

This module provides process-local caching for the block read path:
a bounded LRU store and a confirmation-aware block cache holding full
block objects and lightweight block summaries.

Only blocks buried under enough confirmations are cached, so a chain
reorganization near the tip never leaves stale data behind.
"""

from .core import LRUCache
from .block_cache import BlockCache
from .monitoring import CacheMonitor, get_monitor

__all__ = [
    'LRUCache',
    'BlockCache',
    'CacheMonitor',
    'get_monitor'
]
