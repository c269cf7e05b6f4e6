"""
Mining pool attribution.

Pools sign the coinbase input script of the blocks they mine with a
free-text tag. A static list of pools and their tags is loaded once at
startup and matched against each block's coinbase.
"""
import json
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Union

import structlog

from .types import PoolInfo

logger = structlog.get_logger()

DEFAULT_POOLS_FILE = Path(__file__).with_name("pools.json")

EMPTY_POOL_INFO = PoolInfo()


class PoolAttributor:
    """Matches coinbase scripts against registered pool signatures."""

    def __init__(self, pool_strings: Optional[Dict[str, PoolInfo]] = None):
        self.pool_strings: Dict[str, PoolInfo] = dict(pool_strings or {})

    @classmethod
    def from_pools(cls, pools: Iterable[Dict[str, Any]]) -> "PoolAttributor":
        """
        Build the signature table from pool definitions.

        Each definition has ``poolName``, ``url`` and ``searchStrings``.
        A search string registered twice keeps its first position in the
        table but maps to the last pool that registered it.
        """
        pool_strings: Dict[str, PoolInfo] = {}
        for pool in pools:
            info = PoolInfo(pool_name=pool["poolName"], url=pool["url"])
            for search_string in pool.get("searchStrings", []):
                pool_strings[search_string] = info
        return cls(pool_strings)

    @classmethod
    def load(cls, path: Optional[Union[str, Path]] = None) -> "PoolAttributor":
        """Load pool definitions from a JSON file, the bundled list by default."""
        path = Path(path) if path else DEFAULT_POOLS_FILE
        with open(path, encoding="utf-8") as f:
            pools = json.load(f)
        attributor = cls.from_pools(pools)
        logger.info("pool_signatures_loaded", path=str(path), signatures=len(attributor))
        return attributor

    def __len__(self) -> int:
        return len(self.pool_strings)

    def attribute(self, coinbase_script: bytes) -> PoolInfo:
        """
        Identify the pool that mined a block.

        Args:
            coinbase_script: Raw script of the coinbase transaction's first input

        Returns:
            Matching pool info, or an empty PoolInfo when nothing matched
        """
        text = coinbase_script.decode("utf-8", errors="replace")
        for search_string, info in self.pool_strings.items():
            if search_string in text:
                return info
        return EMPTY_POOL_INFO
