"""
Index declaration and creation for providers.
"""

from .helpers import (
    is_key_pattern,
    normalize_index_spec,
    normalize_index_specs,
    normalize_keys,
)
from .manager import create_indexes_sequentially

__all__ = [
    "create_indexes_sequentially",
    "is_key_pattern",
    "normalize_index_spec",
    "normalize_index_specs",
    "normalize_keys",
]
