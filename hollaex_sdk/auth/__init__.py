"""
Request authentication.

Components:
    - build_url: Canonical path+query builder shared by signing and transport
    - Signer: HMAC-SHA256 signature header sets for REST and streaming

Example:
    >>> from hollaex_sdk.auth import Signer, build_url
    >>> build_url("/v2/orders", {"symbol": "xht-usdt"})
    '/v2/orders?symbol=xht-usdt'
"""

from hollaex_sdk.auth.signer import (
    CONNECT_METHOD,
    Signer,
    canonical_json,
    create_signature,
)
from hollaex_sdk.auth.urls import (
    build_query,
    build_url,
    encode_value,
    normalize_params,
    to_snake_case,
)

__all__ = [
    "CONNECT_METHOD",
    "Signer",
    "canonical_json",
    "create_signature",
    "build_query",
    "build_url",
    "encode_value",
    "normalize_params",
    "to_snake_case",
]
