"""
Sequential index creation.

Declared indexes are built one at a time, in declaration order: the next
``create_index`` is not issued until the previous one has completed, and the
first failure stops the sequence.
"""

from typing import Any

from pymongo.errors import PyMongoError

from ..constants import INDEX_BUILD_OPTIONS
from ..observability.logging import get_logger
from ..observability.metrics import timed_operation
from .helpers import NormalizedIndexSpec

logger = get_logger(__name__)


@timed_operation("indexes.create_sequential")
async def create_indexes_sequentially(
    collection: Any,
    specs: list[NormalizedIndexSpec],
    log_prefix: str = "",
) -> list[str]:
    """
    Create each declared index on ``collection``, strictly one after another.

    Every build is forced into background mode; acknowledgement comes from the
    collection handle's write concern.

    Args:
        collection: AsyncIOMotorCollection to build indexes on
        specs: Normalized ``(keys, options)`` declarations
        log_prefix: Logging prefix for messages

    Returns:
        Names of the created (or already existing) indexes, in order

    Raises:
        PyMongoError: The first index creation failure; later indexes are not attempted
    """
    total = len(specs)
    names: list[str] = []

    for position, (keys, options) in enumerate(specs, start=1):
        build_options = {**options, **INDEX_BUILD_OPTIONS}
        logger.debug(
            f"{log_prefix} Ensuring index {position}/{total}: keys={keys}, options={build_options}"
        )
        try:
            name = await collection.create_index(keys, **build_options)
        except PyMongoError as e:
            logger.error(
                f"{log_prefix} Index {position}/{total} with keys {keys} failed: "
                f"{type(e).__name__}: {e}. Skipping the remaining {total - position}."
            )
            raise
        names.append(name)

    if total:
        logger.info(f"{log_prefix} Ensured {total} index(es): {names}")
    return names
