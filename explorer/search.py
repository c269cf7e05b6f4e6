"""
Search type hints.

Given a free-text search string, suggests which kind of resource the
client should try first by reordering a fixed list of descriptors.
"""
import math
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from chain.constants import HASH_HEX_LENGTH

ADDRESS_LENGTHS = (34, 38)


class SearchType(BaseModel):
    """Kind of resource a search string may refer to."""

    model_config = ConfigDict(frozen=True)

    factory: str
    object: str
    path: str


SEARCH_TYPES: Tuple[SearchType, ...] = (
    SearchType(factory='Block', object='blockHash', path='block/'),
    SearchType(factory='Transaction', object='txId', path='tx/'),
    SearchType(factory='Address', object='addrStr', path='address/'),
    SearchType(factory='BlockByHeight', object='blockHeight', path='block/')
)


def is_finite_number(value: str) -> bool:
    """True if ``value`` reads as a finite number, as JavaScript's isFinite would."""
    text = value.strip()
    if not text:
        return True
    if '_' in text:
        return False
    try:
        return math.isfinite(float(text))
    except ValueError:
        pass
    try:
        int(text, 0)
        return True
    except ValueError:
        return False


def _swap(items: List[SearchType], a: int, b: int) -> None:
    items[a], items[b] = items[b], items[a]


def define_search_type(search: str) -> List[SearchType]:
    """
    Order the search descriptors by how likely they match ``search``.

    Always works on a fresh copy; the shared descriptor tuple is never
    touched.
    """
    types = list(SEARCH_TYPES)
    if len(search) == HASH_HEX_LENGTH:
        if not search.startswith('00'):
            _swap(types, 0, 1)
    elif len(search) in ADDRESS_LENGTHS:
        _swap(types, 0, 2)
    if is_finite_number(search):
        _swap(types, 0, 3)
    return types


def search_types_payload(search: Optional[str] = None) -> List[Dict[str, str]]:
    types = define_search_type(search) if search is not None else list(SEARCH_TYPES)
    return [t.model_dump() for t in types]
