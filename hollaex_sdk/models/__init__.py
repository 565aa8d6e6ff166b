"""
Shared Pydantic data models for the HollaEx SDK.

Modules:
    topics: Subscription topics and their scope
    session: Streaming session state and transitions
    signature: Signature header set for authenticated requests

Example:
    >>> from hollaex_sdk.models import Topic, SessionState
    >>> Topic.parse("trade:xht-usdt").scope
    <TopicScope.MARKET: 'market'>
"""

from hollaex_sdk.models.session import SessionState, StateChange
from hollaex_sdk.models.signature import SignatureHeaders
from hollaex_sdk.models.topics import (
    ACCOUNT_TOPICS,
    MARKET_TOPICS,
    Topic,
    TopicScope,
    parse_topics,
)

__all__: list[str] = [
    # Session models
    "SessionState",
    "StateChange",
    # Signature models
    "SignatureHeaders",
    # Topic models
    "Topic",
    "TopicScope",
    "parse_topics",
    "MARKET_TOPICS",
    "ACCOUNT_TOPICS",
]
