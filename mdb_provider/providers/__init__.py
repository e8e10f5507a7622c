"""
MDB Provider data-access providers.

Provides the abstract Provider contract and its MongoDB implementation.

Usage:
    from mdb_provider.providers import MongoProvider, Provider

    class SessionProvider(MongoProvider):
        collection_name = "sessions"
        indexes = [({"expires_at": 1}, {"expireAfterSeconds": 0})]

    class SessionService:
        def __init__(self, sessions: Provider):
            self._sessions = sessions

        async def revoke(self, token: str) -> int:
            return await self._sessions.remove_only({"token": token})
"""

from .base import CompletionCallback, Conditions, Document, Provider
from .mongo import MongoProvider, split_write_options, validate_collection_name

__all__ = [
    "CompletionCallback",
    "Conditions",
    "Document",
    "MongoProvider",
    "Provider",
    "split_write_options",
    "validate_collection_name",
]
