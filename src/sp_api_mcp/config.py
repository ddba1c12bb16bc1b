"""Configuration management for the Selling Partner API MCP server."""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field, SecretStr, ValidationError, field_validator

_config_logger = logging.getLogger(__name__)

DEFAULT_INSTRUCTIONS = (
    "This MCP server organizes Amazon Selling Partner API domains into discrete tools "
    "and documentation resources. Order, sales, FBA inventory, pricing and report tools "
    "call the live SP-API; the remaining tools are placeholders for future integrations."
)


class LoggingSettings(BaseModel):
    level: str = Field(default="INFO", description="Python logging level name")
    file: str | None = Field(default=None, description="Optional log file path")
    verbose_upstream: bool = Field(
        default=False,
        description="Log upstream status, headers and bodies at DEBUG level.",
    )


class ServerSettings(BaseModel):
    name: str = Field(default="Selling Partner MCP Server")
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=8080, ge=1, le=65535)
    instructions: str = Field(default=DEFAULT_INSTRUCTIONS)
    transport_mode: Literal["stdio", "http", "sse"] = Field(default="stdio")
    http_allowed_origins: tuple[str, ...] = Field(default=())
    http_allow_missing_origin: bool = Field(default=True)

    @field_validator("transport_mode", mode="before")
    @classmethod
    def _normalize_transport(cls, value: object) -> object:
        if not isinstance(value, str):
            return value
        normalized = value.strip().lower()
        if normalized in {"", "stdio"}:
            return "stdio"
        if normalized in {"http", "streamablehttp", "streamable-http"}:
            return "http"
        return normalized


class SPAPISettings(BaseModel):
    """Selling Partner API endpoint and Login with Amazon credentials.

    Credentials are all-or-nothing: when none are set the server starts with a
    client that reports itself as not ready, and every live tool returns that
    explanation instead of calling the upstream API.
    """

    endpoint: str = Field(default="https://sellingpartnerapi-na.amazon.com")
    token_url: str = Field(default="https://api.amazon.com/auth/o2/token")
    client_id: str | None = Field(default=None)
    client_secret: SecretStr | None = Field(default=None)
    refresh_token: SecretStr | None = Field(default=None)
    timeout_seconds: float = Field(default=30.0, gt=0, le=300)
    token_refresh_buffer_seconds: int = Field(default=60, ge=0, le=3600)

    @field_validator("endpoint", "token_url")
    @classmethod
    def _validate_url(cls, value: str) -> str:
        trimmed = value.strip().rstrip("/")
        if not trimmed.startswith(("https://", "http://")):
            raise ValueError(f"expected an http(s) URL, got {value!r}")
        return trimmed

    @property
    def has_any_credentials(self) -> bool:
        return any(self.credential_values())

    @property
    def has_credentials(self) -> bool:
        return all(self.credential_values())

    def credential_values(self) -> tuple[str, str, str]:
        return (
            self.client_id or "",
            self.client_secret.get_secret_value() if self.client_secret else "",
            self.refresh_token.get_secret_value() if self.refresh_token else "",
        )


class Settings(BaseModel):
    server: ServerSettings = Field(default_factory=ServerSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    spapi: SPAPISettings = Field(default_factory=SPAPISettings)


ENV_KEYS = {
    "server_name": "MCP_SERVER_NAME",
    "host": "MCP_HOST",
    "port": "MCP_PORT",
    "instructions": "MCP_INSTRUCTIONS",
    "transport_mode": "TRANSPORT_MODE",
    "log_level": "LOG_LEVEL",
    "log_file": "LOG_FILE",
    "verbose": "VERBOSE",
    "endpoint": "SP_API_ENDPOINT",
    "token_url": "SP_API_TOKEN_URL",
    "client_id": "SP_API_CLIENT_ID",
    "client_secret": "SP_API_CLIENT_SECRET",
    "refresh_token": "SP_API_REFRESH_TOKEN",
    "timeout": "SP_API_TIMEOUT_SECONDS",
}

_TRUE_VALUES = frozenset({"1", "true", "yes"})


def _split_csv_preserve_case(value: str | None) -> list[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def _project_root() -> Path:
    return Path(__file__).resolve().parents[2]


def _resolve_path(path: str) -> str:
    candidate = Path(path)
    root = _project_root().resolve()
    if candidate.is_absolute():
        resolved = candidate.resolve()
    else:
        resolved = (root / candidate).resolve()
    if not resolved.is_relative_to(root):
        raise ValueError(f"Path traversal detected: '{path}' resolves outside project root")
    return str(resolved)


def _env_str(key: str) -> str | None:
    value = os.getenv(key)
    if value is None:
        return None
    return value.strip() or None


def _env_bool(key: str, default: bool) -> bool:
    value = os.getenv(key)
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


def _env_int(key: str, default: int) -> int:
    value = os.getenv(key)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        _config_logger.warning(
            "Invalid integer value for %s: %r, using default %d", key, value, default
        )
        return default


def _env_float(key: str, default: float) -> float:
    value = os.getenv(key)
    if value is None or value.strip() == "":
        return default
    try:
        return float(value)
    except ValueError:
        _config_logger.warning(
            "Invalid float value for %s: %r, using default %s", key, value, default
        )
        return default


def load_settings() -> Settings:
    """Load configuration and cache the result."""

    return _load_settings_cached()


@lru_cache(maxsize=1)
def _load_settings_cached() -> Settings:
    load_dotenv(dotenv_path=_project_root() / ".env")
    log_file_env = _env_str(ENV_KEYS["log_file"])

    settings_data: dict[str, object] = {
        "server": {
            "name": _env_str(ENV_KEYS["server_name"]) or ServerSettings().name,
            "host": _env_str(ENV_KEYS["host"]) or ServerSettings().host,
            "port": _env_int(ENV_KEYS["port"], ServerSettings().port),
            "instructions": _env_str(ENV_KEYS["instructions"]) or ServerSettings().instructions,
            "transport_mode": (
                _env_str(ENV_KEYS["transport_mode"])
                or _env_str("MCP_TRANSPORT")
                or ServerSettings().transport_mode
            ),
            "http_allowed_origins": tuple(
                _split_csv_preserve_case(os.getenv("HTTP_ALLOWED_ORIGINS"))
            ),
            "http_allow_missing_origin": _env_bool(
                "HTTP_ALLOW_MISSING_ORIGIN",
                ServerSettings().http_allow_missing_origin,
            ),
        },
        "logging": {
            "level": _env_str(ENV_KEYS["log_level"]) or LoggingSettings().level,
            "file": _resolve_path(log_file_env) if log_file_env else None,
            "verbose_upstream": _env_bool(
                ENV_KEYS["verbose"], LoggingSettings().verbose_upstream
            ),
        },
        "spapi": {
            "endpoint": _env_str(ENV_KEYS["endpoint"]) or SPAPISettings().endpoint,
            "token_url": _env_str(ENV_KEYS["token_url"]) or SPAPISettings().token_url,
            "client_id": _env_str(ENV_KEYS["client_id"]),
            "client_secret": _env_str(ENV_KEYS["client_secret"]),
            "refresh_token": _env_str(ENV_KEYS["refresh_token"]),
            "timeout_seconds": _env_float(ENV_KEYS["timeout"], SPAPISettings().timeout_seconds),
            "token_refresh_buffer_seconds": _env_int(
                "SP_API_TOKEN_REFRESH_BUFFER_SECONDS",
                SPAPISettings().token_refresh_buffer_seconds,
            ),
        },
    }

    try:
        settings = Settings.model_validate(settings_data)
    except ValidationError as exc:
        raise RuntimeError(f"Invalid configuration: {exc}") from exc

    if settings.spapi.has_any_credentials and not settings.spapi.has_credentials:
        raise RuntimeError(
            "Invalid configuration: SP-API credentials are partially configured; "
            "set SP_API_CLIENT_ID, SP_API_CLIENT_SECRET and SP_API_REFRESH_TOKEN or none of them"
        )

    return settings
