"""Full-node collaborator used by the explorer read path."""

from .base import BlockNode
from .rpc import DashdRPCNode

__all__ = [
    'BlockNode',
    'DashdRPCNode'
]
