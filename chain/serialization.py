"""
Reader for serialized blocks.

Only the framing needed by the explorer is decoded: the 80-byte header,
transaction boundaries (to derive txids) and the coinbase input script.
Scripts and outputs are kept as raw bytes.
"""
import hashlib
import struct
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .errors import DeserializationError

HEADER_SIZE = 80
SPECIAL_TX_MIN_VERSION = 3


def double_sha256(data: bytes) -> bytes:
    return hashlib.sha256(hashlib.sha256(data).digest()).digest()


@dataclass(frozen=True)
class BlockHeader:
    """Decoded 80-byte block header."""
    version: int
    prev_hash: str
    merkle_root: str
    time: int
    bits: int
    nonce: int


@dataclass(frozen=True)
class TxInput:
    prev_txid: str
    prev_index: int
    script: bytes
    sequence: int


@dataclass(frozen=True)
class Transaction:
    """Transaction framing with its computed id."""
    txid: str
    version: int
    tx_type: int
    inputs: Tuple[TxInput, ...]
    output_count: int
    lock_time: int
    extra_payload: bytes = b""

    @property
    def coinbase_script(self) -> bytes:
        return self.inputs[0].script if self.inputs else b""


@dataclass(frozen=True)
class RawBlock:
    """Fully read block: header plus every transaction, in block order."""
    hash: str
    header: BlockHeader
    transactions: Tuple[Transaction, ...]
    size: int

    @property
    def transaction_ids(self) -> List[str]:
        return [tx.txid for tx in self.transactions]

    @property
    def coinbase(self) -> Optional[Transaction]:
        return self.transactions[0] if self.transactions else None


@dataclass(frozen=True)
class BlockPrefix:
    """Header, transaction count and coinbase read from the start of a block."""
    header: BlockHeader
    tx_count: int
    coinbase: Optional[Transaction]
    size: int = field(default=0)


class BlockReader:
    """Sequential little-endian reader over a byte buffer."""

    def __init__(self, data: bytes):
        self.data = data
        self.pos = 0

    def remaining(self) -> int:
        return len(self.data) - self.pos

    def read(self, size: int) -> bytes:
        if size < 0 or self.pos + size > len(self.data):
            raise DeserializationError(
                f"Unexpected end of data: need {size} bytes at offset {self.pos}, "
                f"{self.remaining()} available"
            )
        chunk = self.data[self.pos:self.pos + size]
        self.pos += size
        return chunk

    def _unpack(self, fmt: str, size: int) -> int:
        return struct.unpack(fmt, self.read(size))[0]

    def read_uint8(self) -> int:
        return self._unpack('<B', 1)

    def read_uint16(self) -> int:
        return self._unpack('<H', 2)

    def read_int32(self) -> int:
        return self._unpack('<i', 4)

    def read_uint32(self) -> int:
        return self._unpack('<I', 4)

    def read_int64(self) -> int:
        return self._unpack('<q', 8)

    def read_uint64(self) -> int:
        return self._unpack('<Q', 8)

    def read_varint(self) -> int:
        prefix = self.read_uint8()
        if prefix < 0xfd:
            return prefix
        if prefix == 0xfd:
            return self.read_uint16()
        if prefix == 0xfe:
            return self.read_uint32()
        return self.read_uint64()

    def read_var_bytes(self) -> bytes:
        return self.read(self.read_varint())

    def read_hash(self) -> str:
        """Read a 32-byte hash and return it in display (reversed) hex."""
        return self.read(32)[::-1].hex()

    def read_block_header(self) -> BlockHeader:
        return BlockHeader(
            version=self.read_int32(),
            prev_hash=self.read_hash(),
            merkle_root=self.read_hash(),
            time=self.read_uint32(),
            bits=self.read_uint32(),
            nonce=self.read_uint32()
        )

    def read_transaction(self) -> Transaction:
        start = self.pos
        n_version = self.read_uint32()
        version = n_version & 0xffff
        tx_type = (n_version >> 16) & 0xffff

        inputs = []
        for _ in range(self.read_varint()):
            inputs.append(TxInput(
                prev_txid=self.read_hash(),
                prev_index=self.read_uint32(),
                script=self.read_var_bytes(),
                sequence=self.read_uint32()
            ))

        output_count = self.read_varint()
        for _ in range(output_count):
            self.read_int64()
            self.read_var_bytes()

        lock_time = self.read_uint32()

        extra_payload = b""
        if version >= SPECIAL_TX_MIN_VERSION and tx_type != 0:
            extra_payload = self.read_var_bytes()

        txid = double_sha256(self.data[start:self.pos])[::-1].hex()
        return Transaction(
            txid=txid,
            version=version,
            tx_type=tx_type,
            inputs=tuple(inputs),
            output_count=output_count,
            lock_time=lock_time,
            extra_payload=extra_payload
        )


def parse_block(raw: bytes, block_hash: str) -> RawBlock:
    """
    Read a full block.

    The block hash is supplied by the caller: it is the hash the node was
    asked for, and the proof-of-work hash function is not needed here.
    """
    reader = BlockReader(raw)
    header = reader.read_block_header()
    tx_count = reader.read_varint()
    transactions = tuple(reader.read_transaction() for _ in range(tx_count))
    return RawBlock(
        hash=block_hash,
        header=header,
        transactions=transactions,
        size=len(raw)
    )


def parse_block_prefix(raw: bytes) -> BlockPrefix:
    """Read the header, transaction count and coinbase only."""
    reader = BlockReader(raw)
    header = reader.read_block_header()
    tx_count = reader.read_varint()
    coinbase = reader.read_transaction() if tx_count else None
    return BlockPrefix(header=header, tx_count=tx_count, coinbase=coinbase, size=len(raw))
