"""
MDB_PROVIDER - MongoDB Provider base

Uniform, error-normalized CRUD access to a single MongoDB collection for
concrete data-access providers.
"""

from .config import ProviderConfig, ProviderSettings
from .database import close_shared_client, get_database, get_shared_mongo_client
from .exceptions import (
    CollectionNotFoundError,
    ConfigurationError,
    DocumentNotFoundError,
    DocumentsNotCreatedError,
    DocumentsNotRemovedError,
    DocumentsNotUpdatedError,
    NotAffectedError,
    ProviderError,
)
from .providers import MongoProvider, Provider
from .utils import tick, to_object_id

__version__ = "0.1.0"

__all__ = [
    # Providers
    "Provider",
    "MongoProvider",
    # Configuration
    "ProviderConfig",
    "ProviderSettings",
    # Database
    "get_shared_mongo_client",
    "get_database",
    "close_shared_client",
    # Errors
    "ProviderError",
    "ConfigurationError",
    "CollectionNotFoundError",
    "NotAffectedError",
    "DocumentNotFoundError",
    "DocumentsNotCreatedError",
    "DocumentsNotUpdatedError",
    "DocumentsNotRemovedError",
    # Utilities
    "tick",
    "to_object_id",
]
