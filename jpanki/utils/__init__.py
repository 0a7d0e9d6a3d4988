"""Utils module."""

from .helpers import (
    get_file_size_mb,
    remove_file,
    temp_path_for,
)
from .ids import generate_card_id
from .parsing import TextParser
from .paths import MediaPathGenerator
from .logger import setup_logger

__all__ = [
    'get_file_size_mb',
    'remove_file',
    'temp_path_for',
    'generate_card_id',
    'TextParser',
    'MediaPathGenerator',
    'setup_logger'
]
