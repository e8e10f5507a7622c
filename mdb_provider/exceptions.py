"""
Custom exceptions for MDB_PROVIDER.

Driver errors (``pymongo.errors.*``) are never wrapped by the provider; the
classes below cover configuration problems and the "nothing matched" outcomes
the provider synthesizes itself. All of them remain ``RuntimeError``s.
"""

from typing import Any, Dict, Optional

from .utils.mongo import serialize_for_error


class ProviderError(RuntimeError):
    """
    Base exception for provider errors.

    Attributes:
        message: Error message
        context: Optional dictionary with additional context (collection_name,
                 operation, etc.)
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            context: Optional dictionary with additional context information
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        """Return formatted error message with context if available."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} (context: {context_str})"
        return self.message


class ConfigurationError(ProviderError):
    """
    Raised when configuration is invalid or missing.

    Raised at provider construction when ``collection_name`` is missing or
    invalid, or when an index declaration cannot be understood, and by
    ``ProviderConfig.validate()``.

    Attributes:
        message: Error message
        config_key: Configuration key that caused the error (if available)
        config_value: Configuration value that caused the error (if available)
        context: Additional context information
    """

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        context = context or {}
        if config_key:
            context["config_key"] = config_key
        if config_value is not None:
            context["config_value"] = config_value
        super().__init__(message, context=context)
        self.config_key = config_key
        self.config_value = config_value


class CollectionNotFoundError(ProviderError):
    """
    Raised when a provider requires an existing collection and it is missing.

    Attributes:
        collection_name: Name of the missing collection
    """

    def __init__(self, collection_name: str, context: Optional[Dict[str, Any]] = None) -> None:
        context = context or {}
        context["collection_name"] = collection_name
        super().__init__(f"collection does not exist: {collection_name}", context=context)
        self.collection_name = collection_name


class NotAffectedError(ProviderError):
    """
    Base class for operations that matched, created or removed nothing.

    The message embeds the serialized request payload (query conditions, or
    the documents for inserts) so the failing call can be identified from the
    error alone.

    Attributes:
        operation: Provider operation name (e.g. ``"find_one"``)
        collection_name: Target collection
        payload: The conditions or documents the operation was called with
    """

    def __init__(
        self,
        message: str,
        payload: Any = None,
        operation: Optional[str] = None,
        collection_name: Optional[str] = None,
    ) -> None:
        context: Dict[str, Any] = {}
        if operation:
            context["operation"] = operation
        if collection_name:
            context["collection_name"] = collection_name
        super().__init__(f"{message}: {serialize_for_error(payload)}", context=context)
        self.reason = message
        self.payload = payload
        self.operation = operation
        self.collection_name = collection_name


class DocumentNotFoundError(NotAffectedError):
    """Raised when a singular read or find-and-modify matched no document."""


class DocumentsNotCreatedError(NotAffectedError):
    """Raised when an insert reports no inserted documents."""


class DocumentsNotUpdatedError(NotAffectedError):
    """Raised when an update matched no document."""


class DocumentsNotRemovedError(NotAffectedError):
    """Raised when a removal deleted no document."""
