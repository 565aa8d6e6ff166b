"""
Pydantic models for client configuration.

This module defines the configuration models validated when a client is
created or a YAML configuration file is loaded. The models provide the
documented defaults for every optional setting so a client can be built
from nothing but an API URL.

Configuration file (optional):
    - config/client.yaml: API endpoint, credentials and connection settings

Example:
    >>> from hollaex_sdk.config.models import ClientConfig
    >>> config = ClientConfig(api_key="K", api_secret="S")
    >>> config.ws_url
    'wss://api.hollaex.com/stream'
"""

from enum import Enum
from typing import Optional
from urllib.parse import urlsplit

from pydantic import BaseModel, Field, field_validator, model_validator

DEFAULT_API_URL = "https://api.hollaex.com/v2"
STREAM_PATH = "/stream"


# =============================================================================
# ENUMS
# =============================================================================


class LogFormat(str, Enum):
    """Logging format options."""

    JSON = "json"
    TEXT = "text"


class LogLevel(str, Enum):
    """Logging level options."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


# =============================================================================
# CONNECTION CONFIGURATION
# =============================================================================


class ConnectionSettings(BaseModel):
    """Connection settings shared by the REST client and the streaming session."""

    model_config = {"frozen": True, "extra": "forbid"}

    reconnect_interval_seconds: float = Field(
        default=5.0,
        description="Fixed delay before each reconnection attempt",
        ge=0,
        le=300,
    )
    auto_reconnect: bool = Field(
        default=True,
        description="Reconnect automatically after the stream drops",
    )
    ping_interval_seconds: float = Field(
        default=25.0,
        description="Seconds between application-level ping frames",
        gt=0,
        le=300,
    )
    ping_timeout_seconds: float = Field(
        default=60.0,
        description="Seconds without a pong before the stream is considered dead",
        gt=0,
        le=600,
    )
    connect_timeout_seconds: float = Field(
        default=10.0,
        description="Timeout for the WebSocket opening handshake",
        gt=0,
        le=120,
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        description="Total timeout for a REST request",
        gt=0,
        le=300,
    )
    rate_limit_per_second: int = Field(
        default=10,
        description="Maximum REST requests per second",
        ge=1,
        le=100,
    )
    message_queue_size: int = Field(
        default=10000,
        description="Maximum buffered stream messages before the oldest are dropped",
        ge=1,
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    model_config = {"frozen": True, "extra": "forbid"}

    format: LogFormat = Field(
        default=LogFormat.JSON,
        description="Log output format",
    )
    level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Default log level",
    )


# =============================================================================
# ROOT CONFIGURATION
# =============================================================================


class ClientConfig(BaseModel):
    """
    Root client configuration.

    Immutable once created. Credentials are optional: without them only
    public endpoints and an unauthenticated stream are available. Setting
    only one of key and secret is a configuration error.

    Attributes:
        api_url: REST base URL including the version path.
        api_key: API key sent with signed requests.
        api_secret: Secret used to compute request signatures.
        api_expires_after: Signature validity window in seconds.
        connection: Connection settings.
        logging: Logging settings.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    api_url: str = Field(
        default=DEFAULT_API_URL,
        description="REST API base URL",
    )
    api_key: Optional[str] = Field(
        default=None,
        description="API key",
    )
    api_secret: Optional[str] = Field(
        default=None,
        description="API secret",
        repr=False,
    )
    api_expires_after: int = Field(
        default=60,
        description="Signature validity window in seconds",
        ge=1,
        le=3600,
    )
    connection: ConnectionSettings = Field(
        default_factory=ConnectionSettings,
        description="Connection settings",
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging settings",
    )

    @field_validator("api_url")
    @classmethod
    def validate_api_url(cls, v: str) -> str:
        """Require an absolute http(s) URL and strip the trailing slash."""
        parts = urlsplit(v)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise ValueError(f"api_url must be an absolute http(s) URL, got {v!r}")
        return v.rstrip("/")

    @field_validator("api_key", "api_secret")
    @classmethod
    def empty_credential_is_absent(cls, v: Optional[str]) -> Optional[str]:
        """Treat blank credentials as not configured."""
        if v is not None and not v.strip():
            return None
        return v

    @model_validator(mode="after")
    def validate_credentials(self) -> "ClientConfig":
        """Ensure key and secret are configured together."""
        if (self.api_key is None) != (self.api_secret is None):
            raise ValueError("api_key and api_secret must be provided together")
        return self

    @property
    def has_credentials(self) -> bool:
        """Check if signed requests are possible."""
        return self.api_key is not None and self.api_secret is not None

    @property
    def rest_root(self) -> str:
        """Scheme and host of the API, without the version path."""
        parts = urlsplit(self.api_url)
        return f"{parts.scheme}://{parts.netloc}"

    @property
    def base_path(self) -> str:
        """Version path prefix shared by every REST endpoint (e.g. "/v2")."""
        return urlsplit(self.api_url).path.rstrip("/")

    @property
    def ws_url(self) -> str:
        """Streaming endpoint on the same host as the REST API."""
        parts = urlsplit(self.api_url)
        scheme = "wss" if parts.scheme == "https" else "ws"
        return f"{scheme}://{parts.netloc}{STREAM_PATH}"
