"""
Canonical URL builder.

Builds the exact path+query string that is both signed and sent. Any
divergence between the two invalidates the signature, so every URL the
SDK signs or requests goes through build_url().

Rules:
    - Parameter keys are converted from camelCase to snake_case.
    - Only None values are omitted; 0, "" and False are kept.
    - Keys keep caller insertion order; values are percent-encoded like
      JavaScript's encodeURIComponent.
"""

import re
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple
from urllib.parse import quote

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")

# Characters encodeURIComponent leaves untouched besides alphanumerics and "-_.~"
_SAFE_CHARS = "!*'()"


def to_snake_case(key: str) -> str:
    """
    Convert a camelCase parameter name to snake_case.

    Already snake-cased names are returned unchanged.

    Example:
        >>> to_snake_case("startDate")
        'start_date'
        >>> to_snake_case("start_date")
        'start_date'
    """
    return _CAMEL_BOUNDARY.sub("_", key).lower()


def encode_value(value: Any) -> str:
    """Render a single query value in its wire form."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return encode_value(value.value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def normalize_params(params: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """
    Snake-case keys and drop absent values.

    Args:
        params: Call-site parameters.

    Returns:
        Dict[str, Any]: Wire parameters in insertion order.

    Raises:
        ValueError: If two keys normalize to the same wire key.
    """
    normalized: Dict[str, Any] = {}
    if not params:
        return normalized

    seen = set()
    for key, value in params.items():
        wire_key = to_snake_case(key)
        if wire_key in seen:
            raise ValueError(f"Conflicting query parameters for {wire_key!r}")
        seen.add(wire_key)
        if value is None:
            continue
        normalized[wire_key] = value
    return normalized


def _pairs(params: Mapping[str, Any]) -> List[Tuple[str, str]]:
    pairs: List[Tuple[str, str]] = []
    for key, value in params.items():
        if isinstance(value, (list, tuple)):
            pairs.extend((key, encode_value(item)) for item in value if item is not None)
        else:
            pairs.append((key, encode_value(value)))
    return pairs


def build_query(params: Optional[Mapping[str, Any]]) -> str:
    """
    Serialize parameters into a query string (without the leading "?").

    Example:
        >>> build_query({"symbol": "xht-usdt", "limit": 0, "open": False})
        'symbol=xht-usdt&limit=0&open=false'
    """
    normalized = normalize_params(params)
    return "&".join(
        f"{quote(key, safe=_SAFE_CHARS)}={quote(value, safe=_SAFE_CHARS)}"
        for key, value in _pairs(normalized)
    )


def build_url(base_path: str, params: Optional[Mapping[str, Any]] = None) -> str:
    """
    Build the canonical path+query string.

    Args:
        base_path: Endpoint path (e.g., "/v2/orders").
        params: Optional query parameters.

    Returns:
        str: Path with "?query" appended when any parameter survives.

    Example:
        >>> build_url("/v2/orders", {"symbol": "xht-usdt", "startDate": None})
        '/v2/orders?symbol=xht-usdt'
    """
    query = build_query(params)
    if not query:
        return base_path
    return f"{base_path}?{query}"
