"""
Pytest configuration and shared fixtures for MDB_PROVIDER tests.

This module provides:
- An in-memory, Motor-shaped database/collection for scenario tests
- Mock Motor collection fixtures for driver-error tests
- Testcontainers fixtures for integration tests
"""

import copy
import os
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.results import DeleteResult, InsertManyResult, InsertOneResult, UpdateResult

from mdb_provider.observability.metrics import get_metrics_collector
from mdb_provider.providers import MongoProvider


def pytest_configure(config):
    config.addinivalue_line("markers", "integration: tests that need a real MongoDB")


# ============================================================================
# IN-MEMORY MOTOR FAKE
# ============================================================================


class InMemoryCursor:
    """Cursor over an already materialized result list."""

    def __init__(self, docs: List[Dict[str, Any]]):
        self._docs = docs

    async def to_list(self, length: Optional[int] = None) -> List[Dict[str, Any]]:
        return self._docs if length is None else self._docs[:length]


class InMemoryCollection:
    """
    Minimal Motor-like collection for tests.

    Supports top-level equality filters, ``$set``/``$inc``/``$unset`` updates,
    ``$match`` aggregation stages and records ``create_index`` calls.
    Documents are copied on the way in and out, like a real server.
    """

    def __init__(self, name: str):
        self.name = name
        self._docs: List[Dict[str, Any]] = []
        self.index_calls: List[tuple] = []

    # -- helpers ------------------------------------------------------------

    @staticmethod
    def _matches(doc: Dict[str, Any], conditions: Optional[Dict[str, Any]]) -> bool:
        for key, value in (conditions or {}).items():
            if key not in doc or doc[key] != value:
                return False
        return True

    @staticmethod
    def _project(doc: Dict[str, Any], projection: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        doc = copy.deepcopy(doc)
        if not projection:
            return doc
        included = {k for k, v in projection.items() if v and k != "_id"}
        if included:
            keep = included | ({"_id"} if projection.get("_id", 1) else set())
            return {k: v for k, v in doc.items() if k in keep}
        return {k: v for k, v in doc.items() if projection.get(k, 1)}

    @staticmethod
    def _apply_update(doc: Dict[str, Any], update: Dict[str, Any]) -> None:
        for field, value in update.get("$set", {}).items():
            doc[field] = value
        for field, value in update.get("$inc", {}).items():
            doc[field] = doc.get(field, 0) + value
        for field in update.get("$unset", {}):
            doc.pop(field, None)

    def _matching(self, conditions: Optional[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return [doc for doc in self._docs if self._matches(doc, conditions)]

    # -- reads --------------------------------------------------------------

    def find(self, conditions=None, projection=None) -> InMemoryCursor:
        return InMemoryCursor([self._project(d, projection) for d in self._matching(conditions)])

    async def find_one(self, conditions=None, projection=None):
        matches = self._matching(conditions)
        return self._project(matches[0], projection) if matches else None

    async def count_documents(self, conditions) -> int:
        return len(self._matching(conditions))

    def aggregate(self, pipeline, **kwargs) -> InMemoryCursor:
        docs = [copy.deepcopy(d) for d in self._docs]
        for stage in pipeline:
            if "$match" in stage:
                docs = [d for d in docs if self._matches(d, stage["$match"])]
            elif "$count" in stage:
                docs = [{stage["$count"]: len(docs)}] if docs else []
        return InMemoryCursor(docs)

    # -- writes -------------------------------------------------------------

    async def insert_one(self, doc) -> InsertOneResult:
        doc.setdefault("_id", ObjectId())
        self._docs.append(copy.deepcopy(doc))
        return InsertOneResult(doc["_id"], True)

    async def insert_many(self, docs) -> InsertManyResult:
        ids = []
        for doc in docs:
            doc.setdefault("_id", ObjectId())
            self._docs.append(copy.deepcopy(doc))
            ids.append(doc["_id"])
        return InsertManyResult(ids, True)

    async def update_many(self, conditions, update) -> UpdateResult:
        matches = self._matching(conditions)
        for doc in matches:
            self._apply_update(doc, update)
        return UpdateResult({"n": len(matches), "nModified": len(matches)}, True)

    async def update_one(self, conditions, update, upsert=False, **kwargs) -> UpdateResult:
        matches = self._matching(conditions)
        if matches:
            self._apply_update(matches[0], update)
            return UpdateResult({"n": 1, "nModified": 1}, True)
        if upsert:
            doc = {"_id": ObjectId(), **dict(conditions)}
            self._apply_update(doc, update)
            self._docs.append(doc)
            return UpdateResult({"n": 1, "nModified": 0, "upserted": doc["_id"]}, True)
        return UpdateResult({"n": 0, "nModified": 0}, True)

    async def find_one_and_update(
        self, conditions, update, return_document=ReturnDocument.BEFORE, **kwargs
    ):
        matches = self._matching(conditions)
        if not matches:
            return None
        before = copy.deepcopy(matches[0])
        self._apply_update(matches[0], update)
        return copy.deepcopy(matches[0]) if return_document == ReturnDocument.AFTER else before

    async def delete_many(self, conditions) -> DeleteResult:
        matches = self._matching(conditions)
        self._docs = [d for d in self._docs if not any(d is m for m in matches)]
        return DeleteResult({"n": len(matches)}, True)

    async def find_one_and_delete(self, conditions, **kwargs):
        matches = self._matching(conditions)
        if not matches:
            return None
        self._docs = [d for d in self._docs if d is not matches[0]]
        return matches[0]

    # -- indexes ------------------------------------------------------------

    async def create_index(self, keys, **kwargs) -> str:
        self.index_calls.append((keys, kwargs))
        return "_".join(f"{field}_{direction}" for field, direction in keys)


class InMemoryDatabase:
    """Minimal Motor-like database handing out InMemoryCollections."""

    def __init__(self, name: str = "test_db"):
        self.name = name
        self._collections: Dict[str, InMemoryCollection] = {}
        self.get_collection_calls: List[tuple] = []

    def get_collection(self, name: str, write_concern=None) -> InMemoryCollection:
        self.get_collection_calls.append((name, write_concern))
        if name not in self._collections:
            self._collections[name] = InMemoryCollection(name)
        return self._collections[name]

    def __getitem__(self, name: str) -> InMemoryCollection:
        return self.get_collection(name)

    async def list_collection_names(self, filter=None) -> List[str]:
        names = list(self._collections)
        if filter and "name" in filter:
            names = [n for n in names if n == filter["name"]]
        return names


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture(autouse=True)
def reset_metrics():
    """Give every test an empty global metrics collector."""
    get_metrics_collector().reset()
    yield
    get_metrics_collector().reset()


@pytest.fixture
def memory_db() -> InMemoryDatabase:
    """Provide an empty in-memory database."""
    return InMemoryDatabase()


@pytest.fixture
def users(memory_db: InMemoryDatabase) -> MongoProvider:
    """Provide a provider over the in-memory ``users`` collection."""
    return MongoProvider(memory_db, "users", auto_index=False)


@pytest.fixture
def mock_collection() -> MagicMock:
    """Create a mock Motor collection."""
    collection = MagicMock()
    collection.name = "users"
    collection.find = MagicMock(return_value=MagicMock(to_list=AsyncMock(return_value=[])))
    collection.find_one = AsyncMock(return_value=None)
    collection.insert_one = AsyncMock(return_value=MagicMock(inserted_id="test_id"))
    collection.insert_many = AsyncMock(return_value=MagicMock(inserted_ids=["id1", "id2"]))
    collection.update_one = AsyncMock(
        return_value=MagicMock(acknowledged=True, matched_count=1, upserted_id=None)
    )
    collection.update_many = AsyncMock(return_value=MagicMock(matched_count=2))
    collection.delete_many = AsyncMock(return_value=MagicMock(deleted_count=2))
    collection.find_one_and_update = AsyncMock(return_value=None)
    collection.find_one_and_delete = AsyncMock(return_value=None)
    collection.count_documents = AsyncMock(return_value=0)
    collection.aggregate = MagicMock(return_value=MagicMock(to_list=AsyncMock(return_value=[])))
    collection.create_index = AsyncMock(side_effect=lambda keys, **kwargs: f"idx_{keys[0][0]}")
    return collection


@pytest.fixture
def mock_db(mock_collection: MagicMock) -> MagicMock:
    """Create a mock Motor database whose get_collection returns ``mock_collection``."""
    db = MagicMock()
    db.name = "test_db"
    db.get_collection = MagicMock(return_value=mock_collection)
    db.list_collection_names = AsyncMock(return_value=["users"])
    return db


# ============================================================================
# TESTCONTAINERS FIXTURES (Real MongoDB for Integration Tests)
# ============================================================================


def start_mongodb_container(image: str):
    """
    Start a MongoDB container, skipping the requesting test when it cannot run.

    Constructing and starting the container both need a reachable Docker.
    """
    try:
        from testcontainers.mongodb import MongoDbContainer
    except ImportError:
        pytest.skip("testcontainers not installed. Install with: pip install -e '.[test]'")

    try:
        container = MongoDbContainer(image=image)
        container.start()
    except Exception as e:  # docker missing or unreachable
        pytest.skip(f"Could not start MongoDB container: {e}")
    return container


@pytest.fixture(scope="session")
def mongodb_container():
    """
    Start a MongoDB container for integration tests.

    Session-scoped: the container starts once and is reused.
    """
    container = start_mongodb_container(os.getenv("MONGO_TEST_IMAGE", "mongo:7"))
    yield container
    container.stop()


@pytest_asyncio.fixture
async def real_mongo_db(mongodb_container):
    """
    Create a real MongoDB database for testing.

    Uses a unique database name per test and drops it afterwards.
    """
    from motor.motor_asyncio import AsyncIOMotorClient

    client = AsyncIOMotorClient(mongodb_container.get_connection_url())
    db_name = f"test_db_{os.getpid()}_{ObjectId()}"
    yield client[db_name]
    await client.drop_database(db_name)
    client.close()
