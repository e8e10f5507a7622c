"""
Database connection helpers.
"""

from .connection import (
    close_shared_client,
    get_database,
    get_shared_mongo_client,
    verify_shared_client,
)

__all__ = [
    "close_shared_client",
    "get_database",
    "get_shared_mongo_client",
    "verify_shared_client",
]
