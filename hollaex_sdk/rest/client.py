"""
HollaEx REST API client.

Thin async wrappers mapping one method call to one HTTP request. Public
market data endpoints are sent unsigned; user endpoints carry the
api-key / api-expires / api-signature headers.

The canonical path+query is built once per request with build_url() and
the very same string is signed and sent (passed to aiohttp pre-encoded),
so the server recomputes an identical signature.

Endpoints (relative to the API version path, e.g. /v2):
    Public:  /kit, /constants, /ticker, /tickers, /orderbook, /orderbooks,
             /trades, /chart
    User:    /user, /user/balance, /user/deposits, /user/withdrawals,
             /user/withdrawal, /user/trades
    Orders:  /order, /orders, /order/all

Errors:
    - ApiError: HTTP status >= 400, payload passed through untouched
    - TransportError: network failures and timeouts
    - AuthenticationRequiredError: user endpoint called without credentials

Example:
    >>> async with HollaExRestClient(ClientConfig()) as client:
    ...     ticker = await client.get_ticker("xht-usdt")
    ...     print(ticker["last"])
"""

import asyncio
import json
from typing import Any, Dict, Optional

import aiohttp
import structlog
from yarl import URL

from hollaex_sdk.auth.signer import Signer, canonical_json
from hollaex_sdk.auth.urls import build_url
from hollaex_sdk.config.models import ClientConfig
from hollaex_sdk.exceptions import ApiError, AuthenticationRequiredError, TransportError

logger = structlog.get_logger(__name__)

ORDER_SIDES = ("buy", "sell")
ORDER_TYPES = ("market", "limit")


class HollaExRestClient:
    """
    Async REST API client for HollaEx.

    Implements simple time-based throttling and request signing.

    Attributes:
        base_url: Scheme and host of the API (e.g., "https://api.hollaex.com").
        base_path: Version path prefix (e.g., "/v2").
        rate_limit_per_second: Maximum requests per second.

    Example:
        >>> client = HollaExRestClient(ClientConfig(api_key="K", api_secret="S"))
        >>> balance = await client.get_balance()
        >>> await client.close()
    """

    def __init__(
        self,
        config: ClientConfig,
        signer: Optional[Signer] = None,
    ):
        """
        Initialize REST client.

        Args:
            config: Client configuration.
            signer: Request signer; built from the configured credentials
                when omitted. Without credentials only public endpoints work.
        """
        self._config = config
        self.base_url = config.rest_root
        self.base_path = config.base_path
        self.rate_limit_per_second = config.connection.rate_limit_per_second
        self.timeout_seconds = config.connection.request_timeout_seconds

        if signer is None and config.has_credentials:
            signer = Signer(
                config.api_key,
                config.api_secret,
                expires_after=config.api_expires_after,
                base_path=config.base_path,
            )
        self._signer = signer

        self._session: Optional[aiohttp.ClientSession] = None
        self._last_request_time: float = 0.0
        self._request_interval = 1.0 / self.rate_limit_per_second

        logger.info(
            "rest_client_initialized",
            base_url=config.api_url,
            authenticated=signer is not None,
            rate_limit=self.rate_limit_per_second,
        )

    @property
    def signer(self) -> Optional[Signer]:
        return self._signer

    async def __aenter__(self) -> "HollaExRestClient":
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure aiohttp session is created."""
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
            self._session = aiohttp.ClientSession(
                timeout=timeout,
                headers={"User-Agent": "hollaex-sdk-python/0.1"},
            )
        return self._session

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()
            logger.debug("rest_client_session_closed", base_url=self.base_url)

    async def _rate_limit(self) -> None:
        """
        Apply rate limiting using simple time-based throttling.

        Ensures minimum interval between requests.
        """
        loop = asyncio.get_running_loop()
        time_since_last = loop.time() - self._last_request_time

        if time_since_last < self._request_interval:
            await asyncio.sleep(self._request_interval - time_since_last)

        self._last_request_time = loop.time()

    @staticmethod
    async def _read_payload(response: aiohttp.ClientResponse) -> Any:
        text = await response.text()
        if not text:
            return None
        try:
            return json.loads(text)
        except ValueError:
            return text

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        body: Optional[Dict[str, Any]] = None,
        signed: bool = False,
    ) -> Any:
        """
        Make HTTP request with rate limiting, signing and error handling.

        Args:
            method: HTTP method (GET, POST, PUT, DELETE).
            path: Endpoint path without the version prefix.
            params: Query parameters (None values omitted).
            body: JSON body.
            signed: Attach signature headers.

        Returns:
            Any: Decoded JSON response.

        Raises:
            AuthenticationRequiredError: If signed and no credentials are configured.
            ApiError: If the exchange returns an error status.
            TransportError: If the request fails or times out.
        """
        method = method.upper()
        if signed and self._signer is None:
            raise AuthenticationRequiredError(
                f"{method} {path} requires api_key and api_secret"
            )

        url_path = build_url(f"{self.base_path}{path}", params)
        body_text = canonical_json(body)

        headers: Dict[str, str] = {}
        if body is not None:
            headers["Content-Type"] = "application/json"
        if signed:
            headers.update(self._signer.sign_url(method, url_path, body_text).as_headers())

        await self._rate_limit()
        session = await self._ensure_session()
        url = URL(f"{self.base_url}{url_path}", encoded=True)

        try:
            async with session.request(
                method,
                url,
                data=body_text.encode("utf-8") if body is not None else None,
                headers=headers,
            ) as response:
                payload = await self._read_payload(response)

                if response.status >= 400:
                    logger.error(
                        "rest_request_failed",
                        method=method,
                        url=url_path,
                        status=response.status,
                        error=payload,
                    )
                    raise ApiError(response.status, payload, url=str(url))

                logger.debug(
                    "rest_request_completed",
                    method=method,
                    url=url_path,
                    status=response.status,
                )
                return payload

        except aiohttp.ClientError as e:
            logger.error("rest_client_error", method=method, url=url_path, error=str(e))
            raise TransportError(f"REST request failed: {e}") from e
        except asyncio.TimeoutError as e:
            logger.error(
                "rest_timeout", method=method, url=url_path, timeout=self.timeout_seconds
            )
            raise TransportError(
                f"REST request timeout after {self.timeout_seconds}s"
            ) from e

    # -------------------------------------------------------------------------
    # Public endpoints
    # -------------------------------------------------------------------------

    async def get_kit(self) -> Any:
        """Exchange kit information (name, features, settings)."""
        return await self._request("GET", "/kit")

    async def get_constants(self) -> Any:
        """Coins, pairs and exchange constants."""
        return await self._request("GET", "/constants")

    async def get_ticker(self, symbol: str) -> Any:
        """Last 24h ticker for one symbol (e.g., "xht-usdt")."""
        return await self._request("GET", "/ticker", {"symbol": symbol})

    async def get_tickers(self) -> Any:
        return await self._request("GET", "/tickers")

    async def get_orderbook(self, symbol: str) -> Any:
        """Order book snapshot for one symbol."""
        return await self._request("GET", "/orderbook", {"symbol": symbol})

    async def get_orderbooks(self) -> Any:
        return await self._request("GET", "/orderbooks")

    async def get_trades(self, symbol: Optional[str] = None) -> Any:
        """Recent public trades, for every symbol when none is given."""
        return await self._request("GET", "/trades", {"symbol": symbol})

    async def get_chart(
        self,
        symbol: str,
        resolution: str,
        start: int,
        end: int,
    ) -> Any:
        """
        Trade history candles.

        Args:
            symbol: Trading pair.
            resolution: Candle resolution (e.g., "1D", "60").
            start: Window start in Unix seconds.
            end: Window end in Unix seconds.
        """
        return await self._request(
            "GET",
            "/chart",
            {"symbol": symbol, "resolution": resolution, "from": start, "to": end},
        )

    # -------------------------------------------------------------------------
    # User endpoints
    # -------------------------------------------------------------------------

    async def get_user(self) -> Any:
        """Authenticated user's profile."""
        return await self._request("GET", "/user", signed=True)

    async def get_balance(self) -> Any:
        """Authenticated user's wallet balances."""
        return await self._request("GET", "/user/balance", signed=True)

    async def get_deposits(
        self,
        currency: Optional[str] = None,
        limit: Optional[int] = None,
        page: Optional[int] = None,
        order_by: Optional[str] = None,
        order: Optional[str] = None,
        start_date: Optional[Any] = None,
        end_date: Optional[Any] = None,
        **filters: Any,
    ) -> Any:
        """
        Deposit history.

        Extra filters (status, dismissed, rejected, processing, waiting,
        transaction_id, address) are passed through; False and 0 are sent.
        """
        params = {
            "currency": currency,
            "limit": limit,
            "page": page,
            "order_by": order_by,
            "order": order,
            "start_date": start_date,
            "end_date": end_date,
            **filters,
        }
        return await self._request("GET", "/user/deposits", params, signed=True)

    async def get_withdrawals(
        self,
        currency: Optional[str] = None,
        limit: Optional[int] = None,
        page: Optional[int] = None,
        order_by: Optional[str] = None,
        order: Optional[str] = None,
        start_date: Optional[Any] = None,
        end_date: Optional[Any] = None,
        **filters: Any,
    ) -> Any:
        """Withdrawal history; same filters as get_deposits()."""
        params = {
            "currency": currency,
            "limit": limit,
            "page": page,
            "order_by": order_by,
            "order": order,
            "start_date": start_date,
            "end_date": end_date,
            **filters,
        }
        return await self._request("GET", "/user/withdrawals", params, signed=True)

    async def make_withdrawal(
        self,
        currency: str,
        amount: Any,
        address: str,
        network: Optional[str] = None,
    ) -> Any:
        """Request a withdrawal to an external address."""
        body = {"currency": currency, "amount": amount, "address": address}
        if network is not None:
            body["network"] = network
        return await self._request("POST", "/user/withdrawal", body=body, signed=True)

    async def get_user_trades(
        self,
        symbol: Optional[str] = None,
        limit: Optional[int] = None,
        page: Optional[int] = None,
        order_by: Optional[str] = None,
        order: Optional[str] = None,
        start_date: Optional[Any] = None,
        end_date: Optional[Any] = None,
        **filters: Any,
    ) -> Any:
        """Authenticated user's trade history."""
        params = {
            "symbol": symbol,
            "limit": limit,
            "page": page,
            "order_by": order_by,
            "order": order,
            "start_date": start_date,
            "end_date": end_date,
            **filters,
        }
        return await self._request("GET", "/user/trades", params, signed=True)

    # -------------------------------------------------------------------------
    # Order endpoints
    # -------------------------------------------------------------------------

    async def get_order(self, order_id: str) -> Any:
        return await self._request("GET", "/order", {"order_id": order_id}, signed=True)

    async def get_orders(
        self,
        symbol: Optional[str] = None,
        side: Optional[str] = None,
        status: Optional[str] = None,
        open: Optional[bool] = None,
        limit: Optional[int] = None,
        page: Optional[int] = None,
        order_by: Optional[str] = None,
        order: Optional[str] = None,
        start_date: Optional[Any] = None,
        end_date: Optional[Any] = None,
        **filters: Any,
    ) -> Any:
        """Authenticated user's orders. open=False is sent, not dropped."""
        params = {
            "symbol": symbol,
            "side": side,
            "status": status,
            "open": open,
            "limit": limit,
            "page": page,
            "order_by": order_by,
            "order": order,
            "start_date": start_date,
            "end_date": end_date,
            **filters,
        }
        return await self._request("GET", "/orders", params, signed=True)

    async def create_order(
        self,
        symbol: str,
        side: str,
        size: Any,
        type: str,
        price: Any = None,
        stop: Any = None,
        meta: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Place an order.

        Args:
            symbol: Trading pair.
            side: "buy" or "sell".
            size: Order size in base currency.
            type: "market" or "limit".
            price: Limit price (required for limit orders).
            stop: Optional stop price.
            meta: Optional metadata (e.g., {"post_only": True}).

        Raises:
            ValueError: If side/type are invalid or a limit order has no price.
        """
        if side not in ORDER_SIDES:
            raise ValueError(f"side must be one of {ORDER_SIDES}, got {side!r}")
        if type not in ORDER_TYPES:
            raise ValueError(f"type must be one of {ORDER_TYPES}, got {type!r}")
        if type == "limit" and price is None:
            raise ValueError("limit orders require a price")

        body: Dict[str, Any] = {"symbol": symbol, "side": side, "size": size, "type": type}
        if price is not None:
            body["price"] = price
        if stop is not None:
            body["stop"] = stop
        if meta is not None:
            body["meta"] = meta
        return await self._request("POST", "/order", body=body, signed=True)

    async def cancel_order(self, order_id: str) -> Any:
        return await self._request("DELETE", "/order", {"order_id": order_id}, signed=True)

    async def cancel_all_orders(self, symbol: Optional[str] = None) -> Any:
        """Cancel every open order, optionally for one symbol only."""
        return await self._request("DELETE", "/order/all", {"symbol": symbol}, signed=True)

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"HollaExRestClient(base_url={self._config.api_url}, "
            f"rate_limit={self.rate_limit_per_second}/s)"
        )
