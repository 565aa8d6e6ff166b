"""
Request signer.

Authenticated requests carry an API key, an expiry timestamp and a hex
HMAC-SHA256 signature computed over:

    METHOD + CANONICAL_URL + EXPIRES + BODY

where CANONICAL_URL is the path+query produced by build_url() (including
the API version prefix, e.g. "/v2/user/balance") and BODY is the compact
JSON text of the request body, or "" when there is none.

The streaming connection reuses the same scheme with the pseudo-method
CONNECT against the "/stream" path, so the server can tell connection
authentication apart from REST verbs.

Example:
    >>> signer = Signer("K", "S", expires_after=60, base_path="/v2")
    >>> headers = signer.sign("GET", "/user/balance")
    >>> sorted(headers.as_headers())
    ['api-expires', 'api-key', 'api-signature']
"""

import hashlib
import hmac
import json
import time
from typing import Any, Callable, Mapping, Optional

from hollaex_sdk.auth.urls import build_url
from hollaex_sdk.config.models import STREAM_PATH
from hollaex_sdk.exceptions import ConfigurationError
from hollaex_sdk.models.signature import SignatureHeaders

CONNECT_METHOD = "CONNECT"


def canonical_json(body: Any) -> str:
    """Serialize a request body exactly as it is signed and sent."""
    if body is None:
        return ""
    return json.dumps(body, separators=(",", ":"), ensure_ascii=False, default=str)


def create_signature(
    secret: str, method: str, url: str, expires: int, body_text: str = ""
) -> str:
    """
    Compute the hex HMAC-SHA256 signature of one request.

    Args:
        secret: API secret.
        method: Upper-case HTTP method or CONNECT.
        url: Canonical path+query.
        expires: Expiry in Unix seconds.
        body_text: Canonical JSON body, "" when absent.

    Returns:
        str: Hex digest.
    """
    message = f"{method}{url}{expires}{body_text}"
    return hmac.new(
        secret.encode("utf-8"), message.encode("utf-8"), hashlib.sha256
    ).hexdigest()


class Signer:
    """
    Produces signature header sets for REST and streaming authentication.

    Attributes:
        api_key: API key placed in every header set.
        expires_after: Signature validity window in seconds.
        base_path: Version prefix prepended to REST paths before signing.
    """

    def __init__(
        self,
        api_key: Optional[str],
        api_secret: Optional[str],
        expires_after: int = 60,
        base_path: str = "",
        clock: Callable[[], float] = time.time,
    ):
        if not api_key or not api_secret:
            raise ConfigurationError("Signer requires both api_key and api_secret")
        if expires_after <= 0:
            raise ConfigurationError("expires_after must be positive")

        self.api_key = api_key
        self._secret = api_secret
        self.expires_after = expires_after
        self.base_path = base_path.rstrip("/")
        self._clock = clock

    def expiry(self) -> int:
        """Return the expiry for a request issued now."""
        return int(self._clock()) + self.expires_after

    def sign_url(
        self, method: str, url: str, body_text: str = ""
    ) -> SignatureHeaders:
        """
        Sign an already-canonical URL.

        The expiry is computed once and used for both the signed string and
        the returned header set.
        """
        expires = self.expiry()
        signature = create_signature(
            self._secret, method.upper(), url, expires, body_text
        )
        return SignatureHeaders(
            api_key=self.api_key,
            api_expires=expires,
            api_signature=signature,
        )

    def sign(
        self,
        method: str,
        path: str,
        params: Optional[Mapping[str, Any]] = None,
        body: Any = None,
    ) -> SignatureHeaders:
        """
        Sign a REST request.

        Args:
            method: HTTP method.
            path: Endpoint path without the version prefix (e.g., "/user/balance").
            params: Optional query parameters.
            body: Optional JSON body.

        Returns:
            SignatureHeaders: Header set for the request.
        """
        url = build_url(f"{self.base_path}{path}", params)
        return self.sign_url(method, url, canonical_json(body))

    def sign_stream(self, path: str = STREAM_PATH) -> SignatureHeaders:
        """Sign the streaming connection handshake."""
        return self.sign_url(CONNECT_METHOD, path)

    def __repr__(self) -> str:
        return (
            f"Signer(api_key={self.api_key}, "
            f"expires_after={self.expires_after}, base_path={self.base_path!r})"
        )
