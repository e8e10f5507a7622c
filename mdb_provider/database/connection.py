"""
Shared MongoDB Connection

Providers never own their connection: every provider in a process is handed
the same AsyncIOMotorDatabase. This module keeps a single AsyncIOMotorClient
per process so those databases share one connection pool.

Usage:
    from mdb_provider.database import get_database, close_shared_client

    db = get_database(ProviderConfig())
    users = UserProvider(db)
    ...
    close_shared_client()
"""

import logging
import threading

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import (
    ConnectionFailure,
    InvalidOperation,
    OperationFailure,
    ServerSelectionTimeoutError,
)

from ..config import ProviderConfig
from ..constants import (
    DEFAULT_MAX_IDLE_TIME_MS,
    DEFAULT_MAX_POOL_SIZE,
    DEFAULT_MIN_POOL_SIZE,
    DEFAULT_SERVER_SELECTION_TIMEOUT_MS,
)

logger = logging.getLogger(__name__)

# Global singleton instance
_shared_client: AsyncIOMotorClient | None = None
# threading.Lock: the client may be requested from several threads at startup
_init_lock = threading.Lock()


def get_shared_mongo_client(
    mongo_uri: str,
    max_pool_size: int = DEFAULT_MAX_POOL_SIZE,
    min_pool_size: int = DEFAULT_MIN_POOL_SIZE,
    server_selection_timeout_ms: int = DEFAULT_SERVER_SELECTION_TIMEOUT_MS,
    max_idle_time_ms: int = DEFAULT_MAX_IDLE_TIME_MS,
    write_concern_w: int | str = 1,
) -> AsyncIOMotorClient:
    """
    Gets or creates the shared MongoDB client instance.

    Args:
        mongo_uri: MongoDB connection URI
        max_pool_size: Maximum connection pool size
        min_pool_size: Minimum connection pool size
        server_selection_timeout_ms: Server selection timeout in milliseconds
        max_idle_time_ms: Maximum idle time before closing connections
        write_concern_w: Default write concern ``w`` for the client

    Returns:
        Shared AsyncIOMotorClient instance
    """
    global _shared_client

    if _shared_client is not None:
        return _shared_client

    with _init_lock:
        # Another thread may have created it while we waited
        if _shared_client is not None:
            return _shared_client

        logger.info(
            f"Creating shared MongoDB client (max_pool_size={max_pool_size}, "
            f"min_pool_size={min_pool_size})"
        )
        try:
            _shared_client = AsyncIOMotorClient(
                mongo_uri,
                serverSelectionTimeoutMS=server_selection_timeout_ms,
                appname="MDB_PROVIDER_Shared",
                maxPoolSize=max_pool_size,
                minPoolSize=min_pool_size,
                maxIdleTimeMS=max_idle_time_ms,
                w=write_concern_w,
            )
        except (ConnectionFailure, ServerSelectionTimeoutError, ValueError, TypeError) as e:
            logger.error(f"Failed to create shared MongoDB client: {e}", exc_info=True)
            _shared_client = None
            raise

    return _shared_client


def get_database(config: ProviderConfig | None = None) -> AsyncIOMotorDatabase:
    """
    Return the configured database on the shared client.

    Args:
        config: Provider configuration (read from the environment when None)

    Raises:
        ConfigurationError: If the configuration is invalid
    """
    config = config or ProviderConfig()
    config.validate()
    client = get_shared_mongo_client(
        config.mongo_uri,
        max_pool_size=config.max_pool_size,
        min_pool_size=config.min_pool_size,
        server_selection_timeout_ms=config.server_selection_timeout_ms,
        write_concern_w=config.write_concern_w,
    )
    return client[config.db_name]


async def verify_shared_client() -> bool:
    """
    Ping the shared client.

    Returns:
        True if the client is connected and responsive, False otherwise
    """
    if _shared_client is None:
        logger.warning("Shared MongoDB client is None - cannot verify")
        return False

    try:
        await _shared_client.admin.command("ping")
        logger.debug("Shared MongoDB client verification successful")
        return True
    except (
        ConnectionFailure,
        ServerSelectionTimeoutError,
        OperationFailure,
        InvalidOperation,
    ) as e:
        logger.exception(f"Shared MongoDB client verification failed: {e}")
        return False


def close_shared_client() -> None:
    """
    Closes the shared MongoDB client.
    Should be called during application shutdown.
    """
    global _shared_client

    with _init_lock:
        if _shared_client is None:
            return
        try:
            _shared_client.close()
            logger.info("Shared MongoDB client closed")
        except (InvalidOperation, AttributeError, RuntimeError) as e:
            logger.warning(f"Error closing shared MongoDB client: {e}")
        finally:
            _shared_client = None
