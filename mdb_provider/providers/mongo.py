"""
MongoDB Provider Implementation

Implements the Provider interface over a single MongoDB collection using
Motor. Concrete providers either pass ``collection_name``/``indexes`` to the
constructor or declare them as class attributes:

    class UserProvider(MongoProvider):
        collection_name = "users"
        indexes = [
            ({"email": 1}, {"unique": True}),
            ([("created_at", -1)], None),
        ]

    users = UserProvider(db)
    user = await users.find_one({"email": "john@example.com"})

Every operation acquires a fresh collection handle with acknowledged writes,
normalizes "nothing matched" into the errors in ``mdb_provider.exceptions``
and surfaces driver errors unchanged.
"""

import asyncio
from collections.abc import Mapping, Sequence
from typing import Any

from motor.motor_asyncio import AsyncIOMotorCollection, AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.write_concern import WriteConcern

from ..constants import (
    DEFAULT_WRITE_CONCERN,
    MAX_COLLECTION_NAME_LENGTH,
    MIN_COLLECTION_NAME_LENGTH,
    MSG_DOCUMENT_NOT_CREATED,
    MSG_DOCUMENT_NOT_FOUND,
    MSG_DOCUMENT_NOT_FOUND_REMOVED,
    MSG_DOCUMENT_NOT_FOUND_UPDATED,
    MSG_DOCUMENT_NOT_UPDATED,
    MSG_DOCUMENTS_NOT_CREATED,
    MSG_DOCUMENTS_NOT_REMOVED,
    MSG_DOCUMENTS_NOT_UPDATED,
    RESERVED_COLLECTION_PREFIXES,
    WRITE_CONCERN_KEYS,
)
from ..exceptions import (
    CollectionNotFoundError,
    ConfigurationError,
    DocumentNotFoundError,
    DocumentsNotCreatedError,
    DocumentsNotRemovedError,
    DocumentsNotUpdatedError,
)
from ..indexes import create_indexes_sequentially, normalize_index_specs
from ..observability.logging import get_logger
from ..utils.decorators import provider_operation
from .base import CompletionCallback, Conditions, Document, Provider

logger = get_logger(__name__)


def validate_collection_name(name: Any) -> str:
    """
    Validate a collection name, failing fast with ConfigurationError.

    Args:
        name: Collection name to validate

    Returns:
        The validated name
    """
    if not isinstance(name, str) or not name:
        raise ConfigurationError(
            "collection_name must be set to a non-empty string",
            config_key="collection_name",
            config_value=name,
        )
    if not MIN_COLLECTION_NAME_LENGTH <= len(name) <= MAX_COLLECTION_NAME_LENGTH:
        raise ConfigurationError(
            f"collection_name must be {MIN_COLLECTION_NAME_LENGTH}-"
            f"{MAX_COLLECTION_NAME_LENGTH} characters, got {len(name)}",
            config_key="collection_name",
            config_value=name,
        )
    if "$" in name or "\x00" in name or name.startswith(".") or name.endswith("."):
        raise ConfigurationError(
            "collection_name must not contain '$' or null bytes, nor start or end with '.'",
            config_key="collection_name",
            config_value=name,
        )
    if name.startswith(RESERVED_COLLECTION_PREFIXES):
        raise ConfigurationError(
            f"collection_name uses a reserved prefix {RESERVED_COLLECTION_PREFIXES}",
            config_key="collection_name",
            config_value=name,
        )
    return name


def split_write_options(
    options: Mapping[str, Any] | None,
    base: Mapping[str, Any] = DEFAULT_WRITE_CONCERN,
) -> tuple[dict[str, Any], dict[str, Any]]:
    """
    Split caller options into (write concern, driver keyword arguments).

    The write concern part is merged over ``base`` (acknowledged by default).
    """
    write_concern = dict(base)
    op_options: dict[str, Any] = {}
    for key, value in (options or {}).items():
        if key in WRITE_CONCERN_KEYS:
            write_concern[key] = value
        else:
            op_options[key] = value
    return write_concern, op_options


class MongoProvider(Provider):
    """
    MongoDB implementation of the Provider interface.

    Attributes:
        collection_name: Target collection (class attribute or constructor argument)
        indexes: Index declarations, ``(keys, options)`` pairs, built at construction
        db: Shared AsyncIOMotorDatabase; never mutated by the provider
        require_existing: Fail with CollectionNotFoundError instead of letting
            MongoDB create the collection implicitly
        index_task: Task ensuring the declared indexes, when one was scheduled
    """

    collection_name: str | None = None
    indexes: Sequence[Any] | None = None

    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        collection_name: str | None = None,
        indexes: Sequence[Any] | None = None,
        *,
        auto_index: bool = True,
        require_existing: bool = False,
        write_concern: Mapping[str, Any] | None = None,
        callback: CompletionCallback | None = None,
    ):
        """
        Initialize the provider.

        Args:
            db: AsyncIOMotorDatabase shared with other providers
            collection_name: Overrides the class-level ``collection_name``
            indexes: Overrides the class-level ``indexes``
            auto_index: Schedule ``ensure_indexes()`` on the running loop
            require_existing: Require the collection to exist before each operation
            write_concern: Write concern merged over ``{"w": 1}`` for every handle
            callback: Completion callback for the scheduled ``ensure_indexes()``

        Raises:
            ConfigurationError: If ``db``, ``collection_name`` or ``indexes`` is invalid,
                or ``write_concern`` disables acknowledgement (``w=0``)
        """
        if db is None:
            raise ConfigurationError("db is required", config_key="db")

        self.db = db
        if collection_name is not None:
            self.collection_name = collection_name
        if indexes is not None:
            self.indexes = indexes

        self.collection_name = validate_collection_name(self.collection_name)
        self._index_specs = normalize_index_specs(self.indexes)
        self.require_existing = require_existing
        self.write_concern = {**DEFAULT_WRITE_CONCERN, **(write_concern or {})}
        if self.write_concern["w"] == 0:
            raise ConfigurationError(
                "write_concern must request acknowledgement (got w=0)",
                config_key="write_concern",
                config_value=self.write_concern,
            )
        self.log_prefix = f"[{type(self).__name__}:{self.collection_name}]"

        self.index_task: asyncio.Task | None = None
        if auto_index:
            self.index_task = self._schedule_index_creation(callback)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(collection_name={self.collection_name!r})"

    def _schedule_index_creation(self, callback: CompletionCallback | None) -> asyncio.Task | None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            if self._index_specs:
                logger.debug(
                    f"{self.log_prefix} No running event loop; "
                    f"await ensure_indexes() to build {len(self._index_specs)} index(es)."
                )
            return None
        return loop.create_task(self.ensure_indexes(callback=callback or self._log_index_result))

    def _log_index_result(self, error: BaseException | None, names: list[str] | None) -> None:
        if error is not None:
            logger.error(
                f"{self.log_prefix} Index creation failed: {type(error).__name__}: {error}"
            )
        else:
            logger.debug(f"{self.log_prefix} Indexes ready: {names}")

    async def _get_collection(
        self, write_concern: Mapping[str, Any] | None = None
    ) -> AsyncIOMotorCollection:
        """
        Acquire a fresh collection handle with acknowledged writes.

        Args:
            write_concern: Write concern document (defaults to the provider's)

        Raises:
            CollectionNotFoundError: If ``require_existing`` is set and the
                collection does not exist
        """
        if self.require_existing:
            names = await self.db.list_collection_names(filter={"name": self.collection_name})
            if self.collection_name not in names:
                raise CollectionNotFoundError(self.collection_name)

        return self.db.get_collection(
            self.collection_name,
            write_concern=WriteConcern(**(write_concern or self.write_concern)),
        )

    # ------------------------------------------------------------------
    # Indexes
    # ------------------------------------------------------------------

    @provider_operation("ensure_indexes")
    async def ensure_indexes(self) -> list[str]:
        """
        Create the declared indexes sequentially, in declaration order.

        With nothing declared, completes on the next loop iteration without
        touching the database.
        """
        if not self._index_specs:
            await asyncio.sleep(0)
            return []

        collection = await self._get_collection()
        return await create_indexes_sequentially(collection, self._index_specs, self.log_prefix)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @provider_operation("find")
    async def find(
        self, conditions: Conditions, projection: Mapping[str, Any] | None = None
    ) -> list[Document]:
        """Find all matching documents; no match yields an empty list."""
        collection = await self._get_collection()
        return await collection.find(conditions, projection).to_list(length=None)

    @provider_operation("find_one")
    async def find_one(
        self, conditions: Conditions, projection: Mapping[str, Any] | None = None
    ) -> Document:
        """Find one document; no match raises DocumentNotFoundError."""
        collection = await self._get_collection()
        doc = await collection.find_one(conditions, projection)
        if doc is None:
            raise DocumentNotFoundError(
                MSG_DOCUMENT_NOT_FOUND,
                conditions,
                operation="find_one",
                collection_name=self.collection_name,
            )
        return doc

    @provider_operation("find_only")
    async def find_only(
        self, conditions: Conditions, projection: Mapping[str, Any] | None = None
    ) -> Document | None:
        """Find one document; no match yields None."""
        collection = await self._get_collection()
        return await collection.find_one(conditions, projection)

    @provider_operation("aggregate")
    async def aggregate(
        self,
        pipeline: Sequence[Mapping[str, Any]],
        options: Mapping[str, Any] | None = None,
    ) -> list[Document]:
        """Run an aggregation pipeline; the result is returned as produced."""
        collection = await self._get_collection()
        cursor = collection.aggregate(list(pipeline), **dict(options or {}))
        return await cursor.to_list(length=None)

    @provider_operation("count")
    async def count(self, conditions: Conditions | None = None) -> int:
        """Count matching documents."""
        collection = await self._get_collection()
        return await collection.count_documents(conditions or {})

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    @provider_operation("create")
    async def create(self, docs: Sequence[Document]) -> list[Document]:
        """Insert documents and return them with their ``_id``s."""
        if isinstance(docs, Mapping):
            docs = [docs]
        docs = list(docs)
        if not docs:
            raise DocumentsNotCreatedError(
                MSG_DOCUMENTS_NOT_CREATED,
                docs,
                operation="create",
                collection_name=self.collection_name,
            )

        collection = await self._get_collection()
        result = await collection.insert_many(docs)
        if not result.inserted_ids:
            raise DocumentsNotCreatedError(
                MSG_DOCUMENTS_NOT_CREATED,
                docs,
                operation="create",
                collection_name=self.collection_name,
            )

        for doc, inserted_id in zip(docs, result.inserted_ids):
            doc.setdefault("_id", inserted_id)
        logger.debug(f"{self.log_prefix} Created {len(result.inserted_ids)} document(s)")
        return docs

    @provider_operation("create_one")
    async def create_one(self, doc: Document) -> Document:
        """Insert one document and return it with its ``_id``."""
        collection = await self._get_collection()
        result = await collection.insert_one(doc)
        if result.inserted_id is None:
            raise DocumentsNotCreatedError(
                MSG_DOCUMENT_NOT_CREATED,
                doc,
                operation="create_one",
                collection_name=self.collection_name,
            )

        doc.setdefault("_id", result.inserted_id)
        logger.debug(f"{self.log_prefix} Created document _id={doc['_id']}")
        return doc

    @provider_operation("update")
    async def update(self, conditions: Conditions, update: Mapping[str, Any]) -> None:
        """Update every matching document; no match raises DocumentsNotUpdatedError."""
        collection = await self._get_collection()
        result = await collection.update_many(conditions, update)
        if result.matched_count == 0:
            raise DocumentsNotUpdatedError(
                MSG_DOCUMENTS_NOT_UPDATED,
                conditions,
                operation="update",
                collection_name=self.collection_name,
            )

    @provider_operation("update_only")
    async def update_only(self, conditions: Conditions, update: Mapping[str, Any]) -> int:
        """Update every matching document and return the match count."""
        collection = await self._get_collection()
        result = await collection.update_many(conditions, update)
        return result.matched_count

    @provider_operation("update_one")
    async def update_one(
        self,
        conditions: Conditions,
        update: Mapping[str, Any],
        options: Mapping[str, Any] | None = None,
    ) -> None:
        """
        Update the first matching document.

        ``options`` may hold write concern keys (``w``, ``wtimeout``, ``j``,
        ``fsync``), merged over ``{"w": 1}``, and ``update_one`` keyword
        arguments such as ``upsert`` or ``array_filters``.
        """
        write_concern, op_options = split_write_options(options, self.write_concern)
        collection = await self._get_collection(write_concern)
        result = await collection.update_one(conditions, update, **op_options)
        if not result.acknowledged:
            return
        if result.matched_count == 0 and result.upserted_id is None:
            raise DocumentsNotUpdatedError(
                MSG_DOCUMENT_NOT_UPDATED,
                conditions,
                operation="update_one",
                collection_name=self.collection_name,
            )

    @provider_operation("find_and_update")
    async def find_and_update(
        self,
        conditions: Conditions,
        update: Mapping[str, Any],
        options: Mapping[str, Any] | None = None,
    ) -> Document:
        """Atomically update one document and return the post-update version."""
        write_concern, op_options = split_write_options(options, self.write_concern)
        op_options["return_document"] = ReturnDocument.AFTER
        collection = await self._get_collection(write_concern)
        doc = await collection.find_one_and_update(conditions, update, **op_options)
        if doc is None:
            raise DocumentNotFoundError(
                MSG_DOCUMENT_NOT_FOUND_UPDATED,
                conditions,
                operation="find_and_update",
                collection_name=self.collection_name,
            )
        return doc

    @provider_operation("remove")
    async def remove(self, conditions: Conditions) -> None:
        """Delete every matching document; none deleted raises DocumentsNotRemovedError."""
        collection = await self._get_collection()
        result = await collection.delete_many(conditions)
        if result.deleted_count == 0:
            raise DocumentsNotRemovedError(
                MSG_DOCUMENTS_NOT_REMOVED,
                conditions,
                operation="remove",
                collection_name=self.collection_name,
            )

    @provider_operation("remove_only")
    async def remove_only(self, conditions: Conditions) -> int:
        """Delete every matching document and return the deleted count."""
        collection = await self._get_collection()
        result = await collection.delete_many(conditions)
        return result.deleted_count

    @provider_operation("find_and_remove")
    async def find_and_remove(
        self, conditions: Conditions, options: Mapping[str, Any] | None = None
    ) -> Document:
        """Atomically delete one document and return it."""
        write_concern, op_options = split_write_options(options, self.write_concern)
        collection = await self._get_collection(write_concern)
        doc = await collection.find_one_and_delete(conditions, **op_options)
        if doc is None:
            raise DocumentNotFoundError(
                MSG_DOCUMENT_NOT_FOUND_REMOVED,
                conditions,
                operation="find_and_remove",
                collection_name=self.collection_name,
            )
        return doc
