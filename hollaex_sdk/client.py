"""
HollaEx client.

Combines the REST facade and one streaming session over a shared
configuration and signer, so a single object serves market data, account
calls and live updates.

Example:
    >>> from hollaex_sdk import HollaExClient
    >>>
    >>> async with HollaExClient(api_key="K", api_secret="S") as client:
    ...     print(await client.get_balance())
    ...     await client.connect(["orderbook:xht-usdt", "wallet"])
    ...     async for message in client.stream_messages():
    ...         print(message)
"""

from typing import Any, AsyncIterator, FrozenSet, Iterable, List, Optional

import structlog

from hollaex_sdk.auth.signer import Signer
from hollaex_sdk.config.models import ClientConfig
from hollaex_sdk.models.session import SessionState
from hollaex_sdk.models.topics import Topic
from hollaex_sdk.rest.client import HollaExRestClient
from hollaex_sdk.streaming.session import (
    Connector,
    MessageHandler,
    StateListener,
    StreamingSession,
)
from hollaex_sdk.streaming.subscriptions import TopicLike

logger = structlog.get_logger(__name__)


class HollaExClient(HollaExRestClient):
    """
    REST endpoints plus one authenticated streaming session.

    Either pass a ClientConfig or its fields as keyword arguments.

    Attributes:
        config: Immutable client configuration.
        stream: The streaming session.
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        *,
        connector: Optional[Connector] = None,
        **settings: Any,
    ):
        """
        Initialize client.

        Args:
            config: Client configuration; built from settings when omitted.
            connector: WebSocket opener override (default: websockets.connect).
            **settings: ClientConfig fields (api_url, api_key, api_secret, ...).

        Raises:
            ValueError: If both config and settings are given.
            pydantic.ValidationError: If settings are invalid.
        """
        if config is not None and settings:
            raise ValueError("Pass either a ClientConfig or keyword settings, not both")
        if config is None:
            config = ClientConfig(**settings)

        signer = None
        if config.has_credentials:
            signer = Signer(
                config.api_key,
                config.api_secret,
                expires_after=config.api_expires_after,
                base_path=config.base_path,
            )

        super().__init__(config, signer=signer)
        self.config = config
        self.stream = StreamingSession(config, signer=signer, connector=connector)

    @property
    def is_connected(self) -> bool:
        return self.stream.is_connected

    @property
    def stream_state(self) -> SessionState:
        return self.stream.state

    @property
    def subscriptions(self) -> FrozenSet[Topic]:
        return self.stream.subscriptions

    async def connect(self, topics: Optional[Iterable[TopicLike]] = None) -> None:
        """Open the stream and subscribe to topics once it is open."""
        await self.stream.connect(topics)

    async def disconnect(self) -> None:
        """Close the stream; raises NotConnectedError if it is not open."""
        await self.stream.disconnect()

    async def subscribe(self, topics: Iterable[TopicLike]) -> List[Topic]:
        return await self.stream.subscribe(topics)

    async def unsubscribe(self, topics: Iterable[TopicLike]) -> List[Topic]:
        return await self.stream.unsubscribe(topics)

    async def wait_until_open(self, timeout: Optional[float] = None) -> bool:
        return await self.stream.wait_until_open(timeout)

    def stream_messages(self) -> AsyncIterator[Any]:
        return self.stream.stream_messages()

    def add_state_listener(self, listener: StateListener) -> None:
        self.stream.add_state_listener(listener)

    def add_message_handler(self, handler: MessageHandler) -> None:
        self.stream.add_message_handler(handler)

    async def __aenter__(self) -> "HollaExClient":
        await self._ensure_session()
        return self

    async def close(self) -> None:
        """Close the stream and the HTTP session."""
        await self.stream.close()
        await super().close()
        logger.info("client_closed", api_url=self.config.api_url)

    def __repr__(self) -> str:
        return (
            f"HollaExClient(api_url={self.config.api_url}, "
            f"authenticated={self.config.has_credentials}, "
            f"stream={self.stream.state.value})"
        )
