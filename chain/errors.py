"""Exception hierarchy for the explorer read path."""
from typing import Optional


class ExplorerError(Exception):
    """Base exception class for explorer errors"""
    pass


class ValidationError(ExplorerError):
    """Raised when a request parameter is malformed"""
    pass


class BlockNotFoundError(ExplorerError):
    """Raised when the node has no such block or the index is unavailable"""

    def __init__(self, identifier: Optional[str] = None, code: Optional[int] = None):
        self.identifier = identifier
        self.code = code
        super().__init__(f"Block not found: {identifier}" if identifier else "Not found")


class UpstreamError(ExplorerError):
    """Raised when the node collaborator fails for any other reason"""

    def __init__(self, message: str, code: Optional[int] = None):
        self.message = message
        self.code = code
        super().__init__(message)


class DeserializationError(UpstreamError):
    """Raised when the node returns block bytes that cannot be read"""
    pass
