"""
Insight explorer read path.

Block resolution with confirmation-aware caching, date-range listing of
blocks, search hints and the HTTP application exposing them.
"""

from .resolver import BlockResolver
from .pagination import DateRangePaginator
from .search import define_search_type

__all__ = [
    'BlockResolver',
    'DateRangePaginator',
    'define_search_type'
]
