"""Configuration for the insight explorer."""

from .settings import ExplorerSettings, get_settings
from .logging import configure_logging, log_error

__all__ = [
    'ExplorerSettings',
    'get_settings',
    'configure_logging',
    'log_error'
]
