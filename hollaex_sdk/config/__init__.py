"""
Configuration management for the HollaEx SDK.

This module handles building and validating client configuration, either
directly in code or from a YAML file merged with environment variables.

Environment variables can override file settings:
    - HOLLAEX_API_URL: REST API base URL
    - HOLLAEX_API_KEY / HOLLAEX_API_SECRET: API credentials
    - HOLLAEX_API_EXPIRES_AFTER: Signature validity window
    - LOG_LEVEL: Application log level

Example:
    >>> from hollaex_sdk.config import load_config
    >>> config = load_config()
    >>> config.connection.reconnect_interval_seconds
    5.0

Modules:
    loader: Configuration file loading utilities
    models: Pydantic models for configuration validation
"""

from hollaex_sdk.config.loader import ConfigLoadError, ConfigLoader, load_config
from hollaex_sdk.config.models import (
    DEFAULT_API_URL,
    STREAM_PATH,
    ClientConfig,
    ConnectionSettings,
    LogFormat,
    LoggingConfig,
    LogLevel,
)

__all__: list[str] = [
    # Loader
    "load_config",
    "ConfigLoader",
    "ConfigLoadError",
    # Enums
    "LogFormat",
    "LogLevel",
    # Models
    "ConnectionSettings",
    "LoggingConfig",
    "ClientConfig",
    # Constants
    "DEFAULT_API_URL",
    "STREAM_PATH",
]
