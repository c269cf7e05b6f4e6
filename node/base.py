"""
Contract for the full-node collaborator.

Implementations classify failures at this boundary: a missing block or
unavailable index raises ``BlockNotFoundError``, anything else raises
``UpstreamError``. Callers never inspect raw node error codes.
"""
from abc import ABC, abstractmethod
from typing import List, Optional, Union

from chain.serialization import RawBlock
from chain.types import BlockHeaderInfo

BlockIdentifier = Union[str, int]


class BlockNode(ABC):
    """Read-only view of a full node's block index."""

    def __init__(self):
        self._height: Optional[int] = None

    @property
    def height(self) -> Optional[int]:
        """Height of the best chain tip as last observed, None before the first refresh."""
        return self._height

    async def current_height(self) -> int:
        """Last observed tip height, asking the node if it was never observed."""
        if self._height is None:
            return await self.refresh_height()
        return self._height

    @abstractmethod
    async def refresh_height(self) -> int:
        """Query the node for the current tip height and remember it."""

    @abstractmethod
    async def get_block(self, block_hash: str) -> RawBlock:
        """Fetch and read a full block."""

    @abstractmethod
    async def get_raw_block(self, block_hash: str) -> bytes:
        """Fetch the serialized bytes of a block."""

    @abstractmethod
    async def get_block_hash(self, height: int) -> str:
        """Hash of the main-chain block at ``height``."""

    @abstractmethod
    async def get_block_header(self, identifier: BlockIdentifier) -> BlockHeaderInfo:
        """Header metadata for a block hash or height."""

    @abstractmethod
    async def get_block_headers(self, identifier: BlockIdentifier, count: int) -> List[BlockHeaderInfo]:
        """Up to ``count`` consecutive headers starting at a block hash or height."""

    @abstractmethod
    async def get_block_hashes_by_timestamp(self, low: int, high: int) -> List[str]:
        """Hashes of blocks with ``low <= time < high``, oldest first."""

    async def close(self) -> None:
        """Release any resources held by the node client."""
