"""
Chain-level building blocks for the insight explorer.

This package holds the domain types served by the explorer, the error
hierarchy, the block reward schedule, mining pool attribution and the
raw block reader used to avoid deserializing whole blocks.
"""

from .errors import (
    ExplorerError,
    ValidationError,
    BlockNotFoundError,
    UpstreamError,
    DeserializationError
)
from .types import (
    PoolInfo,
    BlockHeaderInfo,
    BlockSummary,
    BlockDetail,
    Pagination,
    BlocksPage
)
from .rewards import RewardCalculator, HourlySubsidyTable
from .pools import PoolAttributor

__all__ = [
    'ExplorerError',
    'ValidationError',
    'BlockNotFoundError',
    'UpstreamError',
    'DeserializationError',
    'PoolInfo',
    'BlockHeaderInfo',
    'BlockSummary',
    'BlockDetail',
    'Pagination',
    'BlocksPage',
    'RewardCalculator',
    'HourlySubsidyTable',
    'PoolAttributor'
]
