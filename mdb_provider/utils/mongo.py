"""
MongoDB utility functions for MDB Provider.

This module provides helpers for working with MongoDB documents: ObjectId
coercion, compact serialization of request payloads for error messages, and
JSON-friendly document conversion.
"""

from datetime import datetime
from typing import Any

from bson import ObjectId, json_util
from bson.errors import InvalidDocument


def to_object_id(data: Any) -> Any:
    """
    Coerce a value, or every item of a list, to ``ObjectId``.

    Lists are converted in place and returned; values that already are
    ``ObjectId`` instances are left untouched.

    Args:
        data: A 24-character hex string, 12-byte value, ObjectId, or a list of those

    Returns:
        ObjectId, or the same list with every item converted

    Raises:
        bson.errors.InvalidId: If a value cannot be converted

    Example:
        ```python
        from mdb_provider.utils import to_object_id

        doc = await users.find_one({"_id": to_object_id(user_id)})
        docs = await users.find({"_id": {"$in": to_object_id(id_list)}})
        ```
    """
    if isinstance(data, list):
        for i, item in enumerate(data):
            data[i] = item if isinstance(item, ObjectId) else ObjectId(item)
        return data

    return data if isinstance(data, ObjectId) else ObjectId(data)


def serialize_for_error(payload: Any) -> str:
    """
    Serialize a query or document payload for inclusion in an error message.

    Uses ``bson.json_util`` in compact form so BSON types (ObjectId, datetime)
    render as extended JSON, e.g. ``{"name":"a"}`` or
    ``{"_id":{"$oid":"507f1f77bcf86cd799439011"}}``. Payloads json_util cannot
    encode fall back to ``repr``.
    """
    try:
        return json_util.dumps(payload, separators=(",", ":"))
    except (TypeError, ValueError, InvalidDocument):
        return repr(payload)


def clean_mongo_doc(doc: dict[str, Any] | None) -> dict[str, Any] | None:
    """
    Convert MongoDB document to JSON-serializable format.

    Recursively converts MongoDB-specific types to JSON-compatible types:
    - ObjectId -> str
    - datetime -> ISO format string
    - Nested dictionaries and lists are processed recursively

    Args:
        doc: MongoDB document (dict) or None

    Returns:
        Cleaned document with all MongoDB types converted, or None if input was None
    """
    if doc is None:
        return None

    if not isinstance(doc, dict):
        return _clean_value(doc)

    return {key: _clean_value(value) for key, value in doc.items()}


def clean_mongo_docs(docs: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Apply ``clean_mongo_doc`` to each document in a list."""
    return [clean_mongo_doc(doc) for doc in docs]


def _clean_value(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return clean_mongo_doc(value)
    if isinstance(value, list):
        return [_clean_value(item) for item in value]
    return value
