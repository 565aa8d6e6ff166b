"""
Signed request models.

Models:
    SignatureHeaders: API key, expiry and HMAC signature of one request
"""

from typing import Dict

from pydantic import BaseModel, Field


class SignatureHeaders(BaseModel):
    """
    Signature header set attached to an authenticated request.

    The same triple is sent as HTTP headers for REST calls and as query
    parameters on the streaming URL.

    Attributes:
        api_key: API key identifying the caller.
        api_expires: Unix time (seconds) after which the signature is invalid.
        api_signature: Hex-encoded HMAC-SHA256 signature.

    Example:
        >>> headers = SignatureHeaders(api_key="K", api_expires=1700000060, api_signature="ab12")
        >>> headers.as_headers()["api-expires"]
        '1700000060'
    """

    model_config = {"frozen": True, "extra": "forbid"}

    api_key: str = Field(
        ...,
        description="API key",
        min_length=1,
    )
    api_expires: int = Field(
        ...,
        description="Expiry as Unix seconds",
        ge=0,
    )
    api_signature: str = Field(
        ...,
        description="Hex HMAC-SHA256 signature",
        min_length=1,
    )

    def as_headers(self) -> Dict[str, str]:
        """Return the HTTP header mapping."""
        return {
            "api-key": self.api_key,
            "api-expires": str(self.api_expires),
            "api-signature": self.api_signature,
        }

    def as_query(self) -> Dict[str, str]:
        """Return the streaming URL query parameters."""
        return self.as_headers()
