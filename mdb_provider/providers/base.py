"""
Abstract Provider Contract

Defines the CRUD interface every data-access provider offers over a single
collection. Domain services depend on this contract; ``MongoProvider`` is the
MongoDB implementation concrete providers are configured from or extend.

Every operation is a coroutine. Awaited plainly it returns its result or
raises; given ``callback=`` it instead invokes ``callback(error, result)``
exactly once and returns None.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping, Sequence
from typing import Any

Document = dict[str, Any]
Conditions = Mapping[str, Any]
CompletionCallback = Callable[[BaseException | None, Any], Any]


class Provider(ABC):
    """
    Abstract provider interface for single-collection data access.

    Example:
        class UserService:
            def __init__(self, users: Provider):
                self._users = users

            async def rename(self, email: str, name: str) -> Document:
                return await self._users.find_and_update(
                    {"email": email}, {"$set": {"name": name}}
                )
    """

    @abstractmethod
    async def ensure_indexes(self, *, callback: CompletionCallback | None = None) -> list[str]:
        """
        Create the declared indexes, one at a time, in declaration order.

        Returns:
            Names of the ensured indexes (empty when none are declared)
        """
        pass

    @abstractmethod
    async def find(
        self,
        conditions: Conditions,
        projection: Mapping[str, Any] | None = None,
        *,
        callback: CompletionCallback | None = None,
    ) -> list[Document]:
        """
        Find all documents matching ``conditions``.

        Args:
            conditions: MongoDB-style filter dictionary
            projection: Fields to return (all fields when None)

        Returns:
            Matching documents in driver order; an empty list is not an error
        """
        pass

    @abstractmethod
    async def find_one(
        self,
        conditions: Conditions,
        projection: Mapping[str, Any] | None = None,
        *,
        callback: CompletionCallback | None = None,
    ) -> Document:
        """
        Find exactly one document.

        Raises:
            DocumentNotFoundError: If nothing matches
        """
        pass

    @abstractmethod
    async def find_only(
        self,
        conditions: Conditions,
        projection: Mapping[str, Any] | None = None,
        *,
        callback: CompletionCallback | None = None,
    ) -> Document | None:
        """
        Find one document, returning None when nothing matches.
        """
        pass

    @abstractmethod
    async def aggregate(
        self,
        pipeline: Sequence[Mapping[str, Any]],
        options: Mapping[str, Any] | None = None,
        *,
        callback: CompletionCallback | None = None,
    ) -> list[Document]:
        """
        Run an aggregation pipeline and return whatever it produces.
        """
        pass

    @abstractmethod
    async def count(
        self,
        conditions: Conditions | None = None,
        *,
        callback: CompletionCallback | None = None,
    ) -> int:
        """
        Count matching documents; zero is a valid result.
        """
        pass

    @abstractmethod
    async def create(
        self,
        docs: Sequence[Document],
        *,
        callback: CompletionCallback | None = None,
    ) -> list[Document]:
        """
        Insert documents.

        Returns:
            The inserted documents, each carrying its ``_id``

        Raises:
            DocumentsNotCreatedError: If nothing was inserted
        """
        pass

    @abstractmethod
    async def create_one(
        self,
        doc: Document,
        *,
        callback: CompletionCallback | None = None,
    ) -> Document:
        """
        Insert one document and return it with its ``_id``.

        Raises:
            DocumentsNotCreatedError: If nothing was inserted
        """
        pass

    @abstractmethod
    async def update(
        self,
        conditions: Conditions,
        update: Mapping[str, Any],
        *,
        callback: CompletionCallback | None = None,
    ) -> None:
        """
        Apply ``update`` to every matching document.

        Raises:
            DocumentsNotUpdatedError: If nothing matched
        """
        pass

    @abstractmethod
    async def update_only(
        self,
        conditions: Conditions,
        update: Mapping[str, Any],
        *,
        callback: CompletionCallback | None = None,
    ) -> int:
        """
        Apply ``update`` to every matching document and return the match count.
        """
        pass

    @abstractmethod
    async def update_one(
        self,
        conditions: Conditions,
        update: Mapping[str, Any],
        options: Mapping[str, Any] | None = None,
        *,
        callback: CompletionCallback | None = None,
    ) -> None:
        """
        Apply ``update`` to the first matching document.

        Raises:
            DocumentsNotUpdatedError: If nothing matched (and nothing was upserted)
        """
        pass

    @abstractmethod
    async def find_and_update(
        self,
        conditions: Conditions,
        update: Mapping[str, Any],
        options: Mapping[str, Any] | None = None,
        *,
        callback: CompletionCallback | None = None,
    ) -> Document:
        """
        Atomically update one document and return it as it is after the update.

        Raises:
            DocumentNotFoundError: If nothing matched
        """
        pass

    @abstractmethod
    async def remove(
        self,
        conditions: Conditions,
        *,
        callback: CompletionCallback | None = None,
    ) -> None:
        """
        Delete every matching document.

        Raises:
            DocumentsNotRemovedError: If nothing was deleted
        """
        pass

    @abstractmethod
    async def remove_only(
        self,
        conditions: Conditions,
        *,
        callback: CompletionCallback | None = None,
    ) -> int:
        """
        Delete every matching document and return how many were deleted.
        """
        pass

    @abstractmethod
    async def find_and_remove(
        self,
        conditions: Conditions,
        options: Mapping[str, Any] | None = None,
        *,
        callback: CompletionCallback | None = None,
    ) -> Document:
        """
        Atomically delete one document and return it.

        Raises:
            DocumentNotFoundError: If nothing matched
        """
        pass
