"""
Exception hierarchy for the HollaEx SDK.

Errors fall into four groups:
    - Configuration errors: raised at construction, never retried.
    - Caller misuse: operating on a session that is not open.
    - Remote rejections: HTTP error responses, passed through as ApiError.
    - Transport errors: REST network failures. Streaming transport
      failures are absorbed by the session and never raised.
"""

from typing import Any, Optional


class HollaExError(Exception):
    """Base class for all SDK errors."""

    pass


class ConfigurationError(HollaExError):
    """Raised when the client configuration is invalid."""

    pass


class AuthenticationRequiredError(ConfigurationError):
    """Raised when a signed endpoint is called without API credentials."""

    pass


class NotConnectedError(HollaExError):
    """Raised when a streaming operation requires an open connection."""

    pass


class TransportError(HollaExError):
    """Raised when a REST request fails before a response is received."""

    pass


class ApiError(HollaExError):
    """
    Raised when the exchange answers a REST request with an error status.

    Attributes:
        status: HTTP status code.
        payload: Decoded JSON body, or the raw text if it was not JSON.
        url: Request URL that produced the error.
    """

    def __init__(self, status: int, payload: Any, url: Optional[str] = None):
        self.status = status
        self.payload = payload
        self.url = url
        message = payload.get("message") if isinstance(payload, dict) else payload
        super().__init__(f"HollaEx API error {status}: {message}")
