"""
Mock implementation of a full node for testing.

Blocks are real serialized bytes built by the helpers below, so the
explorer's raw block reader runs against them unchanged.
"""
import struct
from collections import Counter
from typing import Dict, List, Optional

from chain.errors import BlockNotFoundError
from chain.serialization import RawBlock, double_sha256, parse_block
from chain.types import BlockHeaderInfo
from node.base import BlockIdentifier, BlockNode

ZERO_HASH = "0" * 64
DEFAULT_BITS = 0x1e0ffff0


def encode_varint(value: int) -> bytes:
    if value < 0xfd:
        return struct.pack('<B', value)
    elif value <= 0xffff:
        return b'\xfd' + struct.pack('<H', value)
    elif value <= 0xffffffff:
        return b'\xfe' + struct.pack('<I', value)
    return b'\xff' + struct.pack('<Q', value)


def encode_hash(hex_hash: str) -> bytes:
    return bytes.fromhex(hex_hash)[::-1]


def build_transaction(
    script: bytes = b'',
    version: int = 1,
    tx_type: int = 0,
    outputs: int = 1,
    extra_payload: bytes = b'',
    prev_txid: str = ZERO_HASH,
    prev_index: int = 0xffffffff
) -> bytes:
    """Serialize a single-input transaction."""
    data = struct.pack('<I', (tx_type << 16) | version)
    data += encode_varint(1)
    data += encode_hash(prev_txid) + struct.pack('<I', prev_index)
    data += encode_varint(len(script)) + script + struct.pack('<I', 0xffffffff)
    data += encode_varint(outputs)
    for i in range(outputs):
        output_script = b'\x76\xa9\x14' + bytes([i]) * 20 + b'\x88\xac'
        data += struct.pack('<q', 5000000000) + encode_varint(len(output_script)) + output_script
    data += struct.pack('<I', 0)
    if version >= 3 and tx_type != 0:
        data += encode_varint(len(extra_payload)) + extra_payload
    return data


def build_header(
    prev_hash: str = ZERO_HASH,
    merkle_root: str = "ab" * 32,
    time: int = 1600000000,
    bits: int = DEFAULT_BITS,
    nonce: int = 42,
    version: int = 0x20000000
) -> bytes:
    return (
        struct.pack('<i', version)
        + encode_hash(prev_hash)
        + encode_hash(merkle_root)
        + struct.pack('<III', time, bits, nonce)
    )


def build_block(transactions: List[bytes], **header_fields) -> bytes:
    return build_header(**header_fields) + encode_varint(len(transactions)) + b''.join(transactions)


def txid(tx_bytes: bytes) -> str:
    return double_sha256(tx_bytes)[::-1].hex()


def block_hash_for(height: int) -> str:
    return "bb" + f"{height:062x}"


class MockNode(BlockNode):
    """
    In-memory node holding serialized blocks.

    Records every call in ``calls`` and raises any exception registered in
    ``failures`` for a method name.
    """

    def __init__(self, height: int = 0, tip_known: bool = True):
        super().__init__()
        self.tip = height
        if tip_known:
            self._height = height
        self.raw_blocks: Dict[str, bytes] = {}
        self.headers: Dict[str, BlockHeaderInfo] = {}
        self.by_height: Dict[int, str] = {}
        self.orphans = set()
        self.calls: Counter = Counter()
        self.failures: Dict[str, Exception] = {}
        self.closed = False

    def set_height(self, height: int) -> None:
        self.tip = height
        self._height = height

    def add_block(
        self,
        height: int,
        time: int = 1600000000,
        coinbase_script: bytes = b'\x03mined',
        extra_transactions: int = 0,
        block_hash: Optional[str] = None,
        prev_hash: Optional[str] = None,
        difficulty: float = 1.5,
        chain_work: str = "00" * 31 + "10"
    ) -> str:
        """Add a block at ``height`` linked to the block below it."""
        block_hash = block_hash or block_hash_for(height)
        if prev_hash is None:
            prev_hash = self.by_height.get(height - 1, ZERO_HASH) if height > 0 else ZERO_HASH

        transactions = [build_transaction(coinbase_script)]
        for i in range(extra_transactions):
            transactions.append(build_transaction(bytes([i]) * 4, prev_txid="cd" * 32, prev_index=i))

        self.raw_blocks[block_hash] = build_block(transactions, prev_hash=prev_hash, time=time, nonce=height)
        self.headers[block_hash] = BlockHeaderInfo(
            hash=block_hash,
            height=height,
            confirmations=0,
            chain_work=chain_work,
            difficulty=difficulty,
            prev_hash=None if prev_hash == ZERO_HASH else prev_hash,
            time=time
        )
        self.by_height[height] = block_hash
        return block_hash

    def _check(self, method: str) -> None:
        self.calls[method] += 1
        if method in self.failures:
            raise self.failures[method]

    def _lookup(self, block_hash: str) -> str:
        if block_hash not in self.raw_blocks:
            raise BlockNotFoundError(block_hash, -5)
        return block_hash

    def _header(self, block_hash: str) -> BlockHeaderInfo:
        header = self.headers[self._lookup(block_hash)]
        if block_hash in self.orphans:
            confirmations = -1
        else:
            confirmations = self.tip - header.height + 1
        next_hash = self.by_height.get(header.height + 1)
        return header.model_copy(update={"confirmations": confirmations, "next_hash": next_hash})

    async def refresh_height(self) -> int:
        self._check("refresh_height")
        self._height = self.tip
        return self._height

    async def get_block(self, block_hash: str) -> RawBlock:
        self._check("get_block")
        return parse_block(self.raw_blocks[self._lookup(block_hash)], block_hash)

    async def get_raw_block(self, block_hash: str) -> bytes:
        self._check("get_raw_block")
        return self.raw_blocks[self._lookup(block_hash)]

    async def get_block_hash(self, height: int) -> str:
        self._check("get_block_hash")
        if height not in self.by_height:
            raise BlockNotFoundError(str(height), -8)
        return self.by_height[height]

    async def get_block_header(self, identifier: BlockIdentifier) -> BlockHeaderInfo:
        self._check("get_block_header")
        if isinstance(identifier, int):
            if identifier not in self.by_height:
                raise BlockNotFoundError(str(identifier), -8)
            identifier = self.by_height[identifier]
        return self._header(identifier)

    async def get_block_headers(self, identifier: BlockIdentifier, count: int) -> List[BlockHeaderInfo]:
        self._check("get_block_headers")
        start = await self.get_block_header(identifier)
        headers = []
        for height in range(start.height, start.height + count):
            if height not in self.by_height:
                break
            headers.append(self._header(self.by_height[height]))
        return headers

    async def get_block_hashes_by_timestamp(self, low: int, high: int) -> List[str]:
        self._check("get_block_hashes_by_timestamp")
        matching = [h for h in self.headers.values() if low <= h.time < high]
        matching.sort(key=lambda h: (h.time, h.height))
        return [h.hash for h in matching]

    async def close(self) -> None:
        self.closed = True
