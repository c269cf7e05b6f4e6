import asyncio
from datetime import datetime, timezone

import pytest

from cache.block_cache import BlockCache
from cache.monitoring import CacheMonitor
from chain.pools import PoolAttributor
from chain.rewards import RewardCalculator
from explorer.pagination import DateRangePaginator
from explorer.resolver import BlockResolver
from tests.mock_node import MockNode

# Non-increasing table, as the generator produces
FIXED_HOURLY_TABLE = [
    500, 480, 470, 455, 450, 420, 400, 390, 380, 350, 340, 330,
    300, 290, 280, 260, 250, 220, 200, 180, 150, 120, 100, 90
]

TEST_POOLS = [
    {"poolName": "AntPool", "url": "https://www.antpool.com/", "searchStrings": ["AntPool"]},
    {"poolName": "F2Pool", "url": "https://www.f2pool.com/", "searchStrings": ["七彩神仙鱼", "F2Pool"]},
]

# 2020-09-13 00:00:00 UTC
DAY_START = 1599955200


def run(coro):
    """Run a coroutine to completion on a fresh event loop."""
    return asyncio.run(coro)


@pytest.fixture
def hourly_table():
    return list(FIXED_HOURLY_TABLE)


@pytest.fixture
def rewards(hourly_table):
    return RewardCalculator(hourly_table)


@pytest.fixture
def pools():
    return PoolAttributor.from_pools(TEST_POOLS)


@pytest.fixture
def block_cache():
    """Create a small block cache instance."""
    return BlockCache(block_cache_size=10, summary_cache_size=10, monitor=CacheMonitor())


@pytest.fixture
def node():
    """Node with a ten block chain and tip at height 9."""
    mock = MockNode(height=9)
    for height in range(10):
        mock.add_block(height, time=DAY_START + height * 60)
    return mock


@pytest.fixture
def resolver(node, block_cache, rewards, pools):
    return BlockResolver(node, block_cache, rewards, pools)


@pytest.fixture
def fixed_clock():
    return lambda: datetime(2020, 9, 13, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def paginator(node, resolver, fixed_clock):
    return DateRangePaginator(node, resolver, default_limit=200, clock=fixed_clock)
