"""
Streaming channel for the HollaEx SDK.

Components:
    - StreamingSession: WebSocket connection manager with fixed-delay
      reconnect, heartbeat and subscription replay
    - SubscriptionRegistry: Desired subscription set and frame planning

Example:
    >>> from hollaex_sdk.streaming import StreamingSession
    >>> session = StreamingSession(config, signer=signer)
    >>> await session.connect(["orderbook:xht-usdt"])
"""

from hollaex_sdk.streaming.session import PING_FRAME, StreamingSession
from hollaex_sdk.streaming.subscriptions import SubscriptionRegistry

__all__ = [
    "PING_FRAME",
    "StreamingSession",
    "SubscriptionRegistry",
]
