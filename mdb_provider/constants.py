"""
Constants for MDB_PROVIDER.

This module contains all shared constants used across the codebase to avoid
magic numbers and improve maintainability.
"""

from typing import Final

# ============================================================================
# WRITE CONCERN CONSTANTS
# ============================================================================

DEFAULT_WRITE_CONCERN: Final[dict[str, int]] = {"w": 1}
"""Write concern applied to every collection handle (acknowledged writes)."""

WRITE_CONCERN_KEYS: Final[frozenset[str]] = frozenset({"w", "wtimeout", "j", "fsync"})
"""Option keys that belong to the write concern rather than to the driver call."""

# ============================================================================
# CONNECTION CONSTANTS
# ============================================================================

DEFAULT_MAX_POOL_SIZE: Final[int] = 50
"""Default maximum MongoDB connection pool size."""

DEFAULT_MIN_POOL_SIZE: Final[int] = 10
"""Default minimum MongoDB connection pool size."""

DEFAULT_SERVER_SELECTION_TIMEOUT_MS: Final[int] = 5000
"""Default server selection timeout in milliseconds."""

DEFAULT_MAX_IDLE_TIME_MS: Final[int] = 45000
"""Default maximum idle time before closing connections (milliseconds)."""

# ============================================================================
# INDEX CONSTANTS
# ============================================================================

INDEX_BUILD_OPTIONS: Final[dict[str, bool]] = {"background": True}
"""Options forced on every declared index build."""

# ============================================================================
# VALIDATION CONSTANTS
# ============================================================================

MAX_COLLECTION_NAME_LENGTH: Final[int] = 255
"""Maximum length for MongoDB collection names."""

MIN_COLLECTION_NAME_LENGTH: Final[int] = 1
"""Minimum length for MongoDB collection names."""

RESERVED_COLLECTION_PREFIXES: Final[tuple[str, ...]] = ("system.",)
"""Collection name prefixes reserved by MongoDB."""

# ============================================================================
# ERROR MESSAGES
# ============================================================================

MSG_DOCUMENT_NOT_FOUND: Final[str] = "document not found"
MSG_DOCUMENTS_NOT_CREATED: Final[str] = "documents not created"
MSG_DOCUMENT_NOT_CREATED: Final[str] = "document not created"
MSG_DOCUMENTS_NOT_UPDATED: Final[str] = "documents not updated"
MSG_DOCUMENT_NOT_UPDATED: Final[str] = "document not updated"
MSG_DOCUMENT_NOT_FOUND_UPDATED: Final[str] = "document not found/updated"
MSG_DOCUMENTS_NOT_REMOVED: Final[str] = "documents not removed"
MSG_DOCUMENT_NOT_FOUND_REMOVED: Final[str] = "document not found/removed"

# ============================================================================
# OBSERVABILITY CONSTANTS
# ============================================================================

METRIC_PREFIX: Final[str] = "provider"
"""Prefix for provider operation metric names (e.g. ``provider.find``)."""

MAX_METRICS: Final[int] = 10000
"""Maximum number of metric series kept before LRU eviction."""
