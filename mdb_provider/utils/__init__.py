"""
Utility functions and helpers for MDB Provider.

This module provides utility functions used across the MDB Provider codebase.
"""

from .mongo import clean_mongo_doc, clean_mongo_docs, serialize_for_error, to_object_id
from .tick import defer_raise, tick

__all__ = [
    "clean_mongo_doc",
    "clean_mongo_docs",
    "defer_raise",
    "serialize_for_error",
    "tick",
    "to_object_id",
]
