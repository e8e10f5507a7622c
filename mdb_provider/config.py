"""
Configuration management for MDB_PROVIDER.

Providers themselves take their configuration as constructor arguments; this
module gathers the connection-level settings (URI, database, pool sizes,
provider defaults) from the environment for applications that build their
providers from one place.
"""

import os
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

from .constants import (
    DEFAULT_MAX_POOL_SIZE,
    DEFAULT_MIN_POOL_SIZE,
    DEFAULT_SERVER_SELECTION_TIMEOUT_MS,
)
from .exceptions import ConfigurationError


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_write_concern(name: str = "MONGO_WRITE_CONCERN_W") -> int | str:
    value = os.getenv(name, "1")
    return int(value) if value.lstrip("-").isdigit() else value


class ProviderConfig:
    """
    Provider configuration.

    Explicit arguments win over environment variables, which win over
    defaults.

    Example:
        config = ProviderConfig()
        config.validate()
        db = get_database(config)
        users = UserProvider(db, **config.provider_options())
    """

    def __init__(
        self,
        mongo_uri: str | None = None,
        db_name: str | None = None,
        max_pool_size: int | None = None,
        min_pool_size: int | None = None,
        server_selection_timeout_ms: int | None = None,
        write_concern_w: int | str | None = None,
        require_existing: bool | None = None,
        auto_index: bool | None = None,
    ):
        """
        Initialize configuration.

        Args:
            mongo_uri: MongoDB connection URI (defaults to MONGO_URI env var)
            db_name: Database name (defaults to DB_NAME env var)
            max_pool_size: Maximum connection pool size (MONGO_MAX_POOL_SIZE, default 50)
            min_pool_size: Minimum connection pool size (MONGO_MIN_POOL_SIZE, default 10)
            server_selection_timeout_ms: Server selection timeout in ms
                (MONGO_SERVER_SELECTION_TIMEOUT_MS, default 5000)
            write_concern_w: Write concern ``w`` (MONGO_WRITE_CONCERN_W, default 1)
            require_existing: Providers require existing collections
                (PROVIDER_REQUIRE_EXISTING, default false)
            auto_index: Providers ensure indexes on construction
                (PROVIDER_AUTO_INDEX, default true)
        """
        self.mongo_uri = mongo_uri or os.getenv("MONGO_URI", "")
        self.db_name = db_name or os.getenv("DB_NAME", "")
        self.max_pool_size = max_pool_size or int(
            os.getenv("MONGO_MAX_POOL_SIZE", str(DEFAULT_MAX_POOL_SIZE))
        )
        self.min_pool_size = min_pool_size or int(
            os.getenv("MONGO_MIN_POOL_SIZE", str(DEFAULT_MIN_POOL_SIZE))
        )
        self.server_selection_timeout_ms = server_selection_timeout_ms or int(
            os.getenv(
                "MONGO_SERVER_SELECTION_TIMEOUT_MS", str(DEFAULT_SERVER_SELECTION_TIMEOUT_MS)
            )
        )
        self.write_concern_w = (
            write_concern_w if write_concern_w is not None else _env_write_concern()
        )
        self.require_existing = (
            require_existing
            if require_existing is not None
            else _env_bool("PROVIDER_REQUIRE_EXISTING", False)
        )
        self.auto_index = (
            auto_index if auto_index is not None else _env_bool("PROVIDER_AUTO_INDEX", True)
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ConfigurationError: If required configuration is missing or invalid
        """
        if not self.mongo_uri:
            raise ConfigurationError(
                "mongo_uri is required (set MONGO_URI environment variable or pass directly)",
                config_key="mongo_uri",
            )

        if not self.db_name:
            raise ConfigurationError(
                "db_name is required (set DB_NAME environment variable or pass directly)",
                config_key="db_name",
            )

        if self.max_pool_size < 1:
            raise ConfigurationError(
                f"max_pool_size must be >= 1, got {self.max_pool_size}",
                config_key="max_pool_size",
                config_value=self.max_pool_size,
            )

        if self.min_pool_size < 1:
            raise ConfigurationError(
                f"min_pool_size must be >= 1, got {self.min_pool_size}",
                config_key="min_pool_size",
                config_value=self.min_pool_size,
            )

        if self.min_pool_size > self.max_pool_size:
            raise ConfigurationError(
                f"min_pool_size ({self.min_pool_size}) cannot be greater than "
                f"max_pool_size ({self.max_pool_size})",
                config_key="min_pool_size",
                config_value=self.min_pool_size,
            )

        if self.server_selection_timeout_ms < 1000:
            raise ConfigurationError(
                f"server_selection_timeout_ms must be >= 1000, got "
                f"{self.server_selection_timeout_ms}",
                config_key="server_selection_timeout_ms",
                config_value=self.server_selection_timeout_ms,
            )

        if self.write_concern_w == 0:
            raise ConfigurationError(
                "write_concern_w must request acknowledgement (got 0)",
                config_key="write_concern_w",
                config_value=self.write_concern_w,
            )

    def provider_options(self) -> dict[str, Any]:
        """Keyword arguments to pass to a provider constructor."""
        return {
            "auto_index": self.auto_index,
            "require_existing": self.require_existing,
            "write_concern": {"w": self.write_concern_w},
        }


class ProviderSettings(BaseModel):
    """
    Pydantic-based configuration with automatic validation.

    An alternative to ProviderConfig for applications that already validate
    their settings with Pydantic.

    Usage:
        settings = ProviderSettings.from_env()
        client = get_shared_mongo_client(settings.mongo_uri)
    """

    mongo_uri: str = Field(..., min_length=1, description="MongoDB connection URI")
    db_name: str = Field(..., min_length=1, description="Database name")
    max_pool_size: int = Field(
        DEFAULT_MAX_POOL_SIZE, ge=1, description="Maximum connection pool size"
    )
    min_pool_size: int = Field(
        DEFAULT_MIN_POOL_SIZE, ge=1, description="Minimum connection pool size"
    )
    server_selection_timeout_ms: int = Field(
        DEFAULT_SERVER_SELECTION_TIMEOUT_MS,
        ge=1000,
        description="Server selection timeout in milliseconds",
    )
    write_concern_w: int | str = Field(1, description="Write concern ``w`` (never 0)")
    require_existing: bool = Field(False, description="Require existing collections")
    auto_index: bool = Field(True, description="Ensure indexes on provider construction")

    @field_validator("write_concern_w")
    @classmethod
    def require_acknowledged(cls, value: int | str) -> int | str:
        if value == 0:
            raise ValueError("write_concern_w must request acknowledgement (got 0)")
        return value

    def provider_options(self) -> dict[str, Any]:
        """Keyword arguments to pass to a provider constructor."""
        return {
            "auto_index": self.auto_index,
            "require_existing": self.require_existing,
            "write_concern": {"w": self.write_concern_w},
        }

    @classmethod
    def from_env(cls, **overrides: Any) -> "ProviderSettings":
        """
        Build settings from environment variables, then ``overrides``.

        Raises:
            ConfigurationError: If the resulting settings fail validation
        """
        values: dict[str, Any] = {
            "mongo_uri": os.getenv("MONGO_URI", ""),
            "db_name": os.getenv("DB_NAME", ""),
            "max_pool_size": os.getenv("MONGO_MAX_POOL_SIZE", DEFAULT_MAX_POOL_SIZE),
            "min_pool_size": os.getenv("MONGO_MIN_POOL_SIZE", DEFAULT_MIN_POOL_SIZE),
            "server_selection_timeout_ms": os.getenv(
                "MONGO_SERVER_SELECTION_TIMEOUT_MS", DEFAULT_SERVER_SELECTION_TIMEOUT_MS
            ),
            "write_concern_w": _env_write_concern(),
            "require_existing": _env_bool("PROVIDER_REQUIRE_EXISTING", False),
            "auto_index": _env_bool("PROVIDER_AUTO_INDEX", True),
        }
        values.update(overrides)
        try:
            return cls(**values)
        except ValidationError as e:
            raise ConfigurationError(
                "Invalid provider settings",
                context={"errors": [err["loc"] for err in e.errors()]},
            ) from e
