"""Utils module."""

from .helpers import ensure_dir, get_file_size_mb, short_hash
from .parsing import TextParser
from .logger import setup_logger

__all__ = [
    'ensure_dir',
    'get_file_size_mb',
    'short_hash',
    'TextParser',
    'setup_logger'
]
