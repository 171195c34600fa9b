"""Configuration module for Vikunja MCP server.

``ServerConfig`` is the single description of every setting. The TOML keys a
config file may use, the command-line flags that override them and the
values hidden from logs are all read from its field metadata:

- ``cli_flag`` in ``json_schema_extra`` exposes a field as a flag
- ``secret`` in ``json_schema_extra`` redacts a field in ``to_redacted_dict``
"""

import tomllib
from collections.abc import Mapping
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, HttpUrl, ValidationError, field_validator
from pydantic.fields import FieldInfo

DEFAULT_CONFIG_FILE = "./config.toml"

_REDACTED = "***redacted***"


class ConfigurationError(Exception):
    """Raised when the configuration file or the merged settings are unusable."""


def _default_user_agent() -> str:
    """Build the default User-Agent from the installed distribution version."""
    try:
        return f"vikunja-mcp/{version('vikunja-mcp')}"
    except PackageNotFoundError:
        return "vikunja-mcp"


def _metadata(field: FieldInfo) -> dict[str, Any]:
    extra = field.json_schema_extra
    return extra if isinstance(extra, dict) else {}


class ServerConfig(BaseModel):
    """Server configuration model with validation and default values.

    The API token is the only secret and is fixed for the lifetime of every
    client built from this configuration.
    """

    vikunja_api_token: str | None = Field(
        default=None,
        description="API token (or JWT) sent as a bearer token to the Vikunja API",
        json_schema_extra={"cli_flag": "--token", "secret": True},
    )

    vikunja_base_url: HttpUrl = Field(
        ...,
        description="Base URL of the Vikunja API, e.g. https://vikunja.example.com/api/v1",
        json_schema_extra={"cli_flag": "--base-url"},
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level for the application",
        json_schema_extra={"cli_flag": "--log-level"},
    )

    config_file: str | None = Field(
        default=None,
        description=f"Path to configuration file (default: {DEFAULT_CONFIG_FILE})",
        json_schema_extra={"cli_flag": "--config-file"},
    )

    test_connectivity_on_startup: bool = Field(
        default=False,
        description="Test Vikunja API connectivity during server startup",
    )

    http_user_agent: str = Field(
        default_factory=_default_user_agent,
        description="HTTP client User-Agent header",
    )

    timeout_connect: float = Field(
        default=5.0,
        ge=1.0,
        le=30.0,
        description="HTTP connection timeout in seconds",
    )

    timeout_read: float = Field(
        default=30.0,
        ge=5.0,
        le=120.0,
        description="HTTP read timeout in seconds",
    )

    @field_validator("vikunja_base_url")
    @classmethod
    def validate_https_url(cls, v: HttpUrl) -> HttpUrl:
        """Validate that the base URL uses HTTPS protocol.

        Raises:
            ValueError: If the URL does not use HTTPS protocol.
        """
        if v.scheme != "https":
            msg = "URL must use HTTPS"
            raise ValueError(msg)
        return v

    @classmethod
    def cli_options(cls) -> list[tuple[str, str, FieldInfo]]:
        """List ``(field_name, flag, field)`` for every field settable from the CLI."""
        return [
            (name, _metadata(field)["cli_flag"], field)
            for name, field in cls.model_fields.items()
            if "cli_flag" in _metadata(field)
        ]

    @classmethod
    def read_toml(cls, path: Path) -> dict[str, Any]:
        """Read a TOML config file, accepting only keys that name a field.

        Raises:
            ConfigurationError: If the file cannot be read or parsed, or has
                unknown keys.
        """
        try:
            with path.open("rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as error:
            msg = f"Failed to parse TOML configuration file {path}: {error}"
            raise ConfigurationError(msg) from error
        except OSError as error:
            msg = f"Failed to read configuration file {path}: {error}"
            raise ConfigurationError(msg) from error

        unknown_keys = sorted(set(data) - set(cls.model_fields))
        if unknown_keys:
            msg = f"Unknown configuration keys in {path}: {', '.join(unknown_keys)}"
            raise ConfigurationError(msg)
        return data

    @classmethod
    def load(
        cls, config_file: str | None = None, overrides: Mapping[str, Any] | None = None
    ) -> "ServerConfig":
        """Build the configuration with CLI > file > defaults precedence.

        Args:
            config_file: Explicit config file; ``./config.toml`` is used (when
                present) if omitted.
            overrides: Field values that win over the file. ``None`` values
                are ignored.

        Raises:
            ConfigurationError: If an explicit file is missing, the file is
                invalid, or the merged values fail validation.
        """
        path_name = config_file or DEFAULT_CONFIG_FILE
        path = Path(path_name)
        if config_file and not path.exists():
            msg = f"Configuration file not found: {path_name}"
            raise ConfigurationError(msg)

        data = cls.read_toml(path) if path.exists() else {}
        data.update({key: value for key, value in (overrides or {}).items() if value is not None})
        data["config_file"] = path_name

        try:
            return cls(**data)
        except ValidationError as error:
            msg = f"Configuration validation failed: {error}"
            raise ConfigurationError(msg) from error

    def to_redacted_dict(self) -> dict[str, Any]:
        """Return a JSON-ready dictionary with secret fields redacted."""
        config_dict = self.model_dump(mode="json")
        for name, field in type(self).model_fields.items():
            if _metadata(field).get("secret") and config_dict[name] is not None:
                config_dict[name] = _REDACTED
        return config_dict
