"""
Domain types served by the explorer.

Field names follow the insight API wire format through aliases, so
``model_dump(by_alias=True)`` yields the JSON shape clients expect while
Python code uses snake_case attributes. Every model is frozen: cached
objects are shared between requests and must never be mutated.
"""
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_serializer


class ExplorerModel(BaseModel):
    """Base model for immutable explorer values."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class PoolInfo(ExplorerModel):
    """Mining pool that signed a coinbase, empty when nothing matched."""

    pool_name: Optional[str] = Field(default=None, alias="poolName")
    url: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return self.pool_name is None and self.url is None

    def to_dict(self) -> Dict[str, str]:
        return self.model_dump(by_alias=True, exclude_none=True)


class BlockHeaderInfo(ExplorerModel):
    """Header metadata as reported by the node."""

    hash: str
    height: int
    confirmations: int
    chain_work: Optional[str] = Field(default=None, alias="chainWork")
    difficulty: Optional[float] = None
    next_hash: Optional[str] = Field(default=None, alias="nextHash")
    prev_hash: Optional[str] = Field(default=None, alias="prevHash")
    version: Optional[int] = None
    merkle_root: Optional[str] = Field(default=None, alias="merkleRoot")
    time: Optional[int] = None
    median_time: Optional[int] = Field(default=None, alias="medianTime")
    nonce: Optional[int] = None
    bits: Optional[str] = None

    @classmethod
    def from_rpc(cls, data: Dict[str, Any]) -> "BlockHeaderInfo":
        """Build from a dashd ``getblockheader`` verbose result."""
        difficulty = data.get("difficulty")
        return cls(
            hash=data["hash"],
            height=data["height"],
            confirmations=data.get("confirmations", -1),
            chain_work=data.get("chainwork"),
            difficulty=float(difficulty) if difficulty is not None else None,
            next_hash=data.get("nextblockhash"),
            prev_hash=data.get("previousblockhash"),
            version=data.get("version"),
            merkle_root=data.get("merkleroot"),
            time=data.get("time"),
            median_time=data.get("mediantime"),
            nonce=data.get("nonce"),
            bits=data.get("bits")
        )


class BlockSummary(ExplorerModel):
    """Lightweight block listing entry built from a partial block read."""

    hash: str
    height: int
    size: int
    time: int
    transaction_count: int = Field(alias="txlength")
    pool_info: PoolInfo = Field(default_factory=PoolInfo, alias="poolInfo")

    @field_serializer("pool_info")
    def _serialize_pool_info(self, pool_info: PoolInfo) -> Dict[str, str]:
        return pool_info.to_dict()


class BlockDetail(ExplorerModel):
    """Fully transformed block annotated with reward and pool info."""

    hash: str
    size: int
    height: int
    version: int
    merkle_root: str = Field(alias="merkleroot")
    transaction_ids: Tuple[str, ...] = Field(alias="tx")
    time: int
    nonce: int
    bits: str
    difficulty: Optional[float] = None
    chain_work: Optional[str] = Field(default=None, alias="chainwork")
    confirmations: int
    previous_block_hash: Optional[str] = Field(default=None, alias="previousblockhash")
    next_block_hash: Optional[str] = Field(default=None, alias="nextblockhash")
    reward: Optional[str] = None
    is_main_chain: bool = Field(alias="isMainChain")
    pool_info: PoolInfo = Field(default_factory=PoolInfo, alias="poolInfo")

    @field_serializer("pool_info")
    def _serialize_pool_info(self, pool_info: PoolInfo) -> Dict[str, str]:
        return pool_info.to_dict()

    def with_confirmations(self, chain_height: int) -> "BlockDetail":
        """Return a copy with confirmations recomputed against the tip."""
        return self.model_copy(update={"confirmations": chain_height - self.height + 1})


class Pagination(ExplorerModel):
    """Cursor information for a date-range listing."""

    next: Optional[str] = None
    prev: str
    current_ts: int = Field(alias="currentTs")
    current: str
    is_today: bool = Field(alias="isToday")
    more: bool = False
    more_ts: Optional[int] = Field(default=None, alias="moreTs")


class BlocksPage(ExplorerModel):
    """One page of blocks mined on a given UTC day."""

    blocks: List[BlockSummary]
    length: int
    pagination: Pagination

    def to_dict(self) -> Dict[str, Any]:
        data = self.model_dump(by_alias=True)
        if not self.pagination.more:
            data["pagination"].pop("moreTs", None)
        return data
