"""
HollaEx SDK.

An asyncio client for the HollaEx exchange API: signed REST access to
market data, account information and order management, plus one
authenticated streaming session that reconnects on failure and replays
its subscriptions.

This package provides:
- HollaExClient: REST endpoints and the streaming session in one object
- Request signing and canonical URL building
- Configuration models and YAML/environment loading
- Structured logging setup
"""

from hollaex_sdk.client import HollaExClient
from hollaex_sdk.config import ClientConfig, ConnectionSettings, load_config
from hollaex_sdk.exceptions import (
    ApiError,
    AuthenticationRequiredError,
    ConfigurationError,
    HollaExError,
    NotConnectedError,
    TransportError,
)
from hollaex_sdk.logging_setup import setup_logging
from hollaex_sdk.models import SessionState, StateChange, Topic

__version__ = "0.1.0"

__all__ = [
    "HollaExClient",
    "ClientConfig",
    "ConnectionSettings",
    "load_config",
    "setup_logging",
    "SessionState",
    "StateChange",
    "Topic",
    "HollaExError",
    "ConfigurationError",
    "AuthenticationRequiredError",
    "NotConnectedError",
    "ApiError",
    "TransportError",
]
