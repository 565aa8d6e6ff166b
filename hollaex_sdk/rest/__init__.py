"""
REST facade for the HollaEx SDK.

Example:
    >>> from hollaex_sdk.rest import HollaExRestClient
    >>> async with HollaExRestClient(config) as client:
    ...     await client.get_tickers()
"""

from hollaex_sdk.rest.client import HollaExRestClient

__all__ = [
    "HollaExRestClient",
]
