"""
Unit tests for custom exceptions.

Tests exception hierarchy and error messages.
"""

from bson import ObjectId

from mdb_provider.exceptions import (
    CollectionNotFoundError,
    ConfigurationError,
    DocumentNotFoundError,
    DocumentsNotCreatedError,
    DocumentsNotRemovedError,
    DocumentsNotUpdatedError,
    NotAffectedError,
    ProviderError,
)


class TestExceptionHierarchy:
    """Test exception inheritance hierarchy."""

    def test_provider_error_is_runtime_error(self):
        """Test that ProviderError is a RuntimeError."""
        assert isinstance(ProviderError("test error"), RuntimeError)

    def test_configuration_error_inheritance(self):
        """Test that ConfigurationError inherits from ProviderError."""
        assert isinstance(ConfigurationError("config invalid"), ProviderError)

    def test_collection_not_found_inheritance(self):
        """Test that CollectionNotFoundError inherits from ProviderError."""
        assert isinstance(CollectionNotFoundError("users"), ProviderError)

    def test_not_affected_subclasses(self):
        """Test that every 'nothing affected' error shares one base."""
        for cls in (
            DocumentNotFoundError,
            DocumentsNotCreatedError,
            DocumentsNotUpdatedError,
            DocumentsNotRemovedError,
        ):
            error = cls("nothing", {})
            assert isinstance(error, NotAffectedError)
            assert isinstance(error, ProviderError)
            assert isinstance(error, RuntimeError)


class TestExceptionMessages:
    """Test exception message formatting."""

    def test_provider_error_message(self):
        """Test ProviderError message."""
        error = ProviderError("Something went wrong")
        assert str(error) == "Something went wrong"
        assert error.message == "Something went wrong"
        assert error.context == {}

    def test_provider_error_with_context(self):
        """Test ProviderError message with context."""
        error = ProviderError("Something went wrong", context={"collection_name": "users"})
        assert "context:" in str(error)
        assert "collection_name=users" in str(error)

    def test_configuration_error_attributes(self):
        """Test ConfigurationError records key and value."""
        error = ConfigurationError("bad name", config_key="collection_name", config_value="")
        assert error.config_key == "collection_name"
        assert error.config_value == ""
        assert error.context["config_key"] == "collection_name"

    def test_collection_not_found_message(self):
        """Test CollectionNotFoundError message."""
        error = CollectionNotFoundError("users")
        assert error.message == "collection does not exist: users"
        assert error.collection_name == "users"

    def test_not_affected_embeds_compact_payload(self):
        """Test that the payload is serialized compactly after the reason."""
        error = DocumentsNotUpdatedError("documents not updated", {"name": "a"})
        assert error.message == 'documents not updated: {"name":"a"}'
        assert error.reason == "documents not updated"
        assert error.payload == {"name": "a"}

    def test_not_affected_serializes_bson_types(self):
        """Test that ObjectIds render as extended JSON."""
        oid = ObjectId("507f1f77bcf86cd799439011")
        error = DocumentNotFoundError("document not found", {"_id": oid})
        assert error.message == 'document not found: {"_id":{"$oid":"507f1f77bcf86cd799439011"}}'

    def test_not_affected_context(self):
        """Test that operation and collection land in the context."""
        error = DocumentsNotRemovedError(
            "documents not removed", {"a": 1}, operation="remove", collection_name="users"
        )
        assert error.operation == "remove"
        assert error.collection_name == "users"
        assert "operation=remove" in str(error)
        assert "collection_name=users" in str(error)

    def test_not_affected_unserializable_payload_falls_back_to_repr(self):
        """Test that payloads json_util cannot encode still produce a message."""
        payload = {"value": object()}
        error = DocumentNotFoundError("document not found", payload)
        assert error.message.startswith("document not found: {'value': <object object")
