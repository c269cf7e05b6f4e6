"""
Block resolution for the explorer.

Turns node responses into cached, confirmation-aware block objects
annotated with their reward and the pool that mined them.
"""
import re
from typing import List, Optional

import structlog

from cache.block_cache import BlockCache
from chain.constants import DEFAULT_HEADERS_COUNT, HASH_HEX_LENGTH
from chain.errors import ValidationError
from chain.pools import EMPTY_POOL_INFO, PoolAttributor
from chain.rewards import RewardCalculator
from chain.serialization import RawBlock, Transaction, parse_block_prefix
from chain.types import BlockDetail, BlockHeaderInfo, BlockSummary, PoolInfo
from node.base import BlockIdentifier, BlockNode

logger = structlog.get_logger()

HEX_PATTERN = re.compile(r'^[0-9a-fA-F]+$')


def is_hexadecimal(value: str) -> bool:
    return isinstance(value, str) and bool(HEX_PATTERN.match(value))


def normalize_prev_hash(block_hash: Optional[str]) -> Optional[str]:
    """
    Map the all-zero predecessor of the genesis block to None.

    Any hash consisting only of zeros is treated as "no predecessor",
    whatever its length.
    """
    if not block_hash or block_hash.strip('0') == '':
        return None
    return block_hash


def parse_height(identifier: str) -> int:
    try:
        height = int(identifier)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid block hash or height: {identifier}")
    if height < 0:
        raise ValidationError(f"Invalid block height: {identifier}")
    return height


class BlockResolver:
    """
    Resolves blocks, summaries and headers through the node and the cache.

    Lookups are cache-aside: the cache is consulted first, the node is
    asked on a miss, and the result is admitted to the cache once it has
    enough confirmations. Node errors propagate unchanged.
    """

    def __init__(
        self,
        node: BlockNode,
        cache: BlockCache,
        rewards: RewardCalculator,
        pools: PoolAttributor
    ):
        self.node = node
        self.cache = cache
        self.rewards = rewards
        self.pools = pools

    def pool_info(self, coinbase: Optional[Transaction]) -> PoolInfo:
        if coinbase is None:
            return EMPTY_POOL_INFO
        return self.pools.attribute(coinbase.coinbase_script)

    def transform_block(self, block: RawBlock, info: BlockHeaderInfo) -> BlockDetail:
        """
        Build the canonical block representation.

        The reward is left unset; ``resolve_block`` fills it in once the
        previous block's height is known.
        """
        header = block.header
        return BlockDetail(
            hash=block.hash,
            size=block.size,
            height=info.height,
            version=header.version,
            merkle_root=header.merkle_root,
            transaction_ids=block.transaction_ids,
            time=header.time,
            nonce=header.nonce,
            bits=format(header.bits, 'x'),
            difficulty=info.difficulty,
            chain_work=info.chain_work,
            confirmations=info.confirmations,
            previous_block_hash=normalize_prev_hash(header.prev_hash),
            next_block_hash=info.next_hash,
            reward=None,
            is_main_chain=info.confirmations != -1,
            pool_info=self.pool_info(block.coinbase)
        )

    async def previous_block_header(self, prev_hash: Optional[str]) -> Optional[BlockHeaderInfo]:
        """Header of the previous block, None for the genesis block."""
        if prev_hash is None:
            return None
        return await self.node.get_block_header(prev_hash)

    async def block_reward(self, prev_hash: Optional[str]) -> str:
        """Reward of the block whose predecessor is ``prev_hash``."""
        header = await self.previous_block_header(prev_hash)
        return self.rewards.reward(header.height if header else None)

    async def resolve_block(self, block_hash: str) -> BlockDetail:
        """
        Resolve a full block by hash.

        Raises:
            BlockNotFoundError: If the node does not know the block
            UpstreamError: For any other node failure
        """
        cached = self.cache.get_block(block_hash, await self.node.current_height())
        if cached is not None:
            return cached

        block = await self.node.get_block(block_hash)
        info = await self.node.get_block_header(block_hash)

        detail = self.transform_block(block, info)
        reward = await self.block_reward(detail.previous_block_hash)
        detail = detail.model_copy(update={"reward": reward})

        self.cache.cache_block(detail, detail.confirmations)
        logger.debug("block_resolved", hash=block_hash, height=detail.height,
                     confirmations=detail.confirmations)
        return detail

    async def resolve_summary(self, block_hash: str) -> BlockSummary:
        """
        Resolve a block summary by hash.

        Only the header and the coinbase transaction are read from the raw
        block; the remaining transactions are never deserialized.
        """
        cached = self.cache.get_summary(block_hash)
        if cached is not None:
            return cached

        raw = await self.node.get_raw_block(block_hash)
        prefix = parse_block_prefix(raw)
        header = await self.node.get_block_header(block_hash)

        summary = BlockSummary(
            hash=block_hash,
            height=header.height,
            size=len(raw),
            time=prefix.header.time,
            transaction_count=prefix.tx_count,
            pool_info=self.pool_info(prefix.coinbase)
        )

        confirmations = await self.node.current_height() - header.height + 1
        self.cache.cache_summary(summary, confirmations)
        return summary

    async def resolve_header(self, identifier: BlockIdentifier) -> BlockHeaderInfo:
        """Header for a hash or height, straight from the node."""
        return await self.node.get_block_header(identifier)

    async def resolve_headers(self, identifier: str, count: Optional[int] = None) -> List[BlockHeaderInfo]:
        """
        Consecutive headers starting at a block hash or height.

        Args:
            identifier: 64-character block hash, or a height
            count: Number of headers, 25 when absent or not positive
        """
        if not count or count <= 0:
            count = DEFAULT_HEADERS_COUNT
        start: BlockIdentifier = identifier
        if len(identifier) != HASH_HEX_LENGTH:
            start = parse_height(identifier)
        return await self.node.get_block_headers(start, count)

    async def resolve_block_hash(self, identifier: str) -> str:
        """
        Resolve a path identifier to a block hash.

        Anything that is not a full-length hex hash is taken as a height.
        """
        if len(identifier) < HASH_HEX_LENGTH or not is_hexadecimal(identifier):
            header = await self.node.get_block_header(parse_height(identifier))
            return header.hash
        return identifier

    async def block_index(self, height: int) -> str:
        """Hash of the main-chain block at ``height``."""
        header = await self.node.get_block_header(height)
        return header.hash

    async def resolve_raw_block(self, block_hash: str) -> str:
        """Serialized block as hex."""
        raw = await self.node.get_raw_block(block_hash)
        return raw.hex()
