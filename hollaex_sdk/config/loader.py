"""
Configuration loader for YAML-based client configuration.

This module loads and validates client configuration from an optional YAML
file merged with environment variables. All configuration is validated
using Pydantic models so configuration errors surface before any network
activity.

Configuration file layout:
    api:
      url: https://api.hollaex.com/v2
      key: ...
      secret: ...
      expires_after: 60
    connection:
      reconnect_interval_seconds: 5
      ping_interval_seconds: 25
    logging:
      format: json
      level: INFO

Environment variables override:
    - HOLLAEX_API_URL: REST API base URL
    - HOLLAEX_API_KEY: API key
    - HOLLAEX_API_SECRET: API secret
    - HOLLAEX_API_EXPIRES_AFTER: Signature validity window in seconds
    - LOG_LEVEL: Application log level

Example:
    >>> from hollaex_sdk.config.loader import load_config
    >>> config = load_config("config/client.yaml")
    >>> print(config.ws_url)
    wss://api.hollaex.com/stream
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from hollaex_sdk.config.models import (
    ClientConfig,
    ConnectionSettings,
    LoggingConfig,
    LogLevel,
)
from hollaex_sdk.exceptions import ConfigurationError

ENV_API_URL = "HOLLAEX_API_URL"
ENV_API_KEY = "HOLLAEX_API_KEY"
ENV_API_SECRET = "HOLLAEX_API_SECRET"
ENV_API_EXPIRES_AFTER = "HOLLAEX_API_EXPIRES_AFTER"


class ConfigLoadError(ConfigurationError):
    """
    Raised when configuration loading fails.

    Attributes:
        message: Error message describing what went wrong.
        file_path: Path to the file that caused the error, if applicable.
        cause: Original exception that caused the error, if any.
    """

    def __init__(
        self,
        message: str,
        file_path: Optional[Path] = None,
        cause: Optional[Exception] = None,
    ):
        self.message = message
        self.file_path = file_path
        self.cause = cause
        super().__init__(message)


class ConfigLoader:
    """
    Loads and validates client configuration.

    The YAML file is optional; when no path is given the configuration is
    built from environment variables and defaults only.

    Example:
        >>> loader = ConfigLoader("config/client.yaml")
        >>> config = loader.load()
        >>> config.has_credentials
        True
    """

    def __init__(
        self,
        config_path: Optional[Path | str] = None,
        environ: Optional[Dict[str, str]] = None,
    ):
        """
        Initialize config loader.

        Args:
            config_path: Path to a YAML configuration file.
            environ: Environment mapping (default: os.environ).

        Raises:
            ConfigLoadError: If config_path is given but is not a file.
        """
        self.config_path = Path(config_path) if config_path is not None else None
        self._environ = environ if environ is not None else os.environ

        if self.config_path is not None and not self.config_path.is_file():
            raise ConfigLoadError(
                f"Configuration file not found: {self.config_path}",
                file_path=self.config_path,
            )

    def _load_yaml(self) -> Dict[str, Any]:
        """
        Load the YAML file, if configured.

        Returns:
            Dict containing parsed YAML content (empty without a file).

        Raises:
            ConfigLoadError: If the file is unreadable or not a mapping.
        """
        if self.config_path is None:
            return {}

        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigLoadError(
                f"Invalid YAML syntax in {self.config_path}: {e}",
                file_path=self.config_path,
                cause=e,
            ) from e
        except OSError as e:
            raise ConfigLoadError(
                f"Error reading {self.config_path}: {e}",
                file_path=self.config_path,
                cause=e,
            ) from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigLoadError(
                f"Configuration root must be a mapping: {self.config_path}",
                file_path=self.config_path,
            )
        return data

    def _get_log_level(self, default: Any) -> Any:
        """
        Get log level from environment.

        Environment variables:
            - LOG_LEVEL: Log level (falls back to the file value)
        """
        level_str = self._environ.get("LOG_LEVEL")
        if not level_str:
            return default
        try:
            return LogLevel(level_str.upper())
        except ValueError:
            return default

    def load(self) -> ClientConfig:
        """
        Load and validate the configuration.

        Returns:
            ClientConfig: Validated client configuration.

        Raises:
            ConfigLoadError: If the configuration is invalid.
        """
        data = self._load_yaml()

        try:
            api_data = data.get("api") or {}
            conn_data = data.get("connection") or {}
            log_data = dict(data.get("logging") or {})

            api_url = self._environ.get(ENV_API_URL) or api_data.get("url")
            api_key = self._environ.get(ENV_API_KEY) or api_data.get("key")
            api_secret = self._environ.get(ENV_API_SECRET) or api_data.get("secret")
            expires_after = self._environ.get(ENV_API_EXPIRES_AFTER) or api_data.get(
                "expires_after"
            )

            log_level = self._get_log_level(log_data.get("level"))
            if log_level is not None:
                log_data["level"] = log_level

            fields: Dict[str, Any] = {
                "api_key": api_key,
                "api_secret": api_secret,
                "connection": ConnectionSettings(**conn_data),
                "logging": LoggingConfig(**log_data),
            }
            if api_url:
                fields["api_url"] = api_url
            if expires_after is not None:
                fields["api_expires_after"] = expires_after

            return ClientConfig(**fields)

        except ValidationError as e:
            raise ConfigLoadError(
                f"Configuration validation failed: {e}",
                file_path=self.config_path,
                cause=e,
            ) from e
        except (TypeError, AttributeError) as e:
            raise ConfigLoadError(
                f"Malformed configuration: {e}",
                file_path=self.config_path,
                cause=e,
            ) from e


def load_config(
    config_path: Optional[Path | str] = None,
    environ: Optional[Dict[str, str]] = None,
) -> ClientConfig:
    """
    Convenience function to load client configuration.

    Args:
        config_path: Optional path to a YAML configuration file.
        environ: Environment mapping (default: os.environ).

    Returns:
        ClientConfig: Validated client configuration.

    Raises:
        ConfigLoadError: If configuration loading fails.

    Example:
        >>> from hollaex_sdk.config import load_config
        >>> config = load_config()
        >>> print(config.api_url)
        https://api.hollaex.com/v2
    """
    loader = ConfigLoader(config_path, environ=environ)
    return loader.load()
