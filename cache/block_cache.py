"""
Block-specific caching for the explorer.

Two independent LRU stores are kept: one for fully transformed blocks and
one for lightweight block summaries. Entries are only admitted once the
block is buried deep enough that a chain reorganization is unlikely to
replace it; anything shallower is always re-read from the node.
"""
from typing import Any, Dict, Optional

import structlog

from chain.constants import (
    BLOCK_CACHE_CONFIRMATIONS,
    BLOCK_CACHE_SIZE,
    BLOCK_SUMMARY_CACHE_SIZE
)
from chain.types import BlockDetail, BlockSummary

from .core import LRUCache
from .monitoring import BLOCK_CACHE, SUMMARY_CACHE, CacheMonitor, get_monitor

logger = structlog.get_logger()


class BlockCache:
    """
    Confirmation-aware caching of blocks and block summaries.

    Cached blocks are immutable. Confirmations are not trusted from the
    stored copy: every read recomputes them from the stored height and the
    current chain height.
    """

    def __init__(
        self,
        block_cache_size: int = BLOCK_CACHE_SIZE,
        summary_cache_size: int = BLOCK_SUMMARY_CACHE_SIZE,
        min_confirmations: int = BLOCK_CACHE_CONFIRMATIONS,
        monitor: Optional[CacheMonitor] = None
    ):
        """
        Initialize the block cache.

        Args:
            block_cache_size: Capacity of the full block store
            summary_cache_size: Capacity of the summary store
            min_confirmations: Confirmations required before admission
            monitor: Metrics recorder, the global monitor by default
        """
        self.blocks: LRUCache[str, BlockDetail] = LRUCache(block_cache_size, name=BLOCK_CACHE)
        self.summaries: LRUCache[str, BlockSummary] = LRUCache(summary_cache_size, name=SUMMARY_CACHE)
        self.min_confirmations = min_confirmations
        self.monitor = monitor or get_monitor()

    def is_cacheable(self, confirmations: int) -> bool:
        return confirmations >= self.min_confirmations

    def get_block(self, block_hash: str, chain_height: int) -> Optional[BlockDetail]:
        """
        Get a block from cache.

        Args:
            block_hash: Block hash as received from the client
            chain_height: Current best chain height

        Returns:
            Copy of the block with fresh confirmations, or None on a miss
        """
        block = self.blocks.get(block_hash)
        if block is None:
            self.monitor.record_miss(BLOCK_CACHE)
            logger.debug("block_cache_miss", hash=block_hash)
            return None

        self.monitor.record_hit(BLOCK_CACHE)
        logger.debug("block_cache_hit", hash=block_hash)
        return block.with_confirmations(chain_height)

    def cache_block(self, block: BlockDetail, confirmations: int) -> bool:
        """
        Admit a block if it has enough confirmations.

        Args:
            block: Transformed block to cache
            confirmations: Confirmations of the block right now

        Returns:
            True if the block was cached
        """
        if not self.is_cacheable(confirmations):
            self.monitor.record_rejection(BLOCK_CACHE)
            logger.debug("block_cache_rejected", hash=block.hash, confirmations=confirmations)
            return False

        self.blocks.set(block.hash, block)
        self.monitor.record_admission(BLOCK_CACHE, len(self.blocks))
        logger.debug("block_cached", hash=block.hash, height=block.height)
        return True

    def get_summary(self, block_hash: str) -> Optional[BlockSummary]:
        """Get a block summary from cache."""
        summary = self.summaries.get(block_hash)
        if summary is None:
            self.monitor.record_miss(SUMMARY_CACHE)
            return None

        self.monitor.record_hit(SUMMARY_CACHE)
        return summary

    def cache_summary(self, summary: BlockSummary, confirmations: int) -> bool:
        """Admit a block summary if it has enough confirmations."""
        if not self.is_cacheable(confirmations):
            self.monitor.record_rejection(SUMMARY_CACHE)
            return False

        self.summaries.set(summary.hash, summary)
        self.monitor.record_admission(SUMMARY_CACHE, len(self.summaries))
        return True

    def get_stats(self) -> Dict[str, Any]:
        """
        Get cache statistics.

        Returns:
            Dictionary with statistics for both stores
        """
        return {
            BLOCK_CACHE: self.blocks.get_stats(),
            SUMMARY_CACHE: self.summaries.get_stats(),
            'min_confirmations': self.min_confirmations
        }
