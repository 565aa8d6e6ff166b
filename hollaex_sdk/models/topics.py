"""
Subscription topic models.

A topic is a named stream of server-pushed events. Market topics may be
narrowed to a single symbol with the "topic:symbol" notation; account
topics are always scoped to the authenticated user.

Models:
    TopicScope: Market or account scope
    Topic: Topic name with optional symbol
"""

from enum import Enum
from typing import Iterable, List, Optional, Union

from pydantic import BaseModel, Field, field_validator


class TopicScope(str, Enum):
    """
    Scope of a subscription topic.

    Attributes:
        MARKET: Public market data, optionally narrowed to one symbol.
        ACCOUNT: Private events of the authenticated user.
    """

    MARKET = "market"
    ACCOUNT = "account"


MARKET_TOPICS = frozenset({"orderbook", "trade"})
ACCOUNT_TOPICS = frozenset({"order", "usertrade", "wallet", "deposit", "withdrawal"})


class Topic(BaseModel):
    """
    Subscription topic identity.

    Identity is the (name, symbol) pair, so topics can be stored in sets.

    Attributes:
        name: Topic name (e.g., "orderbook", "wallet").
        symbol: Trading pair for symbol-narrowed market topics.

    Example:
        >>> topic = Topic.parse("orderbook:xht-usdt")
        >>> topic.wire
        'orderbook:xht-usdt'
        >>> topic.unscoped
        Topic(name='orderbook', symbol=None)
    """

    model_config = {"frozen": True, "extra": "forbid"}

    name: str = Field(
        ...,
        description="Topic name",
        min_length=1,
    )
    symbol: Optional[str] = Field(
        default=None,
        description="Trading pair for symbol-narrowed topics",
    )

    @field_validator("symbol")
    @classmethod
    def empty_symbol_is_absent(cls, v: Optional[str]) -> Optional[str]:
        """Treat "orderbook:" as the unscoped topic."""
        return v or None

    @classmethod
    def parse(cls, value: Union[str, "Topic"]) -> "Topic":
        """
        Parse "topic" or "topic:symbol" notation.

        Args:
            value: Topic string or an existing Topic.

        Returns:
            Topic: Parsed topic.
        """
        if isinstance(value, Topic):
            return value
        name, _, symbol = value.strip().partition(":")
        if not name:
            raise ValueError(f"Topic name is empty: {value!r}")
        # account topics are never symbol-scoped
        if name in ACCOUNT_TOPICS:
            symbol = ""
        return cls(name=name, symbol=symbol or None)

    @property
    def scope(self) -> Optional[TopicScope]:
        """Return the topic scope, or None for unrecognized topic names."""
        if self.name in MARKET_TOPICS:
            return TopicScope.MARKET
        if self.name in ACCOUNT_TOPICS:
            return TopicScope.ACCOUNT
        return None

    @property
    def is_recognized(self) -> bool:
        return self.scope is not None

    @property
    def is_narrowed(self) -> bool:
        """Check if this is a symbol-narrowed market topic."""
        return self.symbol is not None and self.scope is TopicScope.MARKET

    @property
    def unscoped(self) -> "Topic":
        """The all-symbols version of this topic."""
        if self.symbol is None:
            return self
        return Topic(name=self.name)

    @property
    def wire(self) -> str:
        """Argument used in subscribe/unsubscribe frames."""
        if self.is_narrowed:
            return f"{self.name}:{self.symbol}"
        return self.name

    def __str__(self) -> str:
        return self.wire


def parse_topics(topics: Optional[Iterable[Union[str, Topic]]]) -> List[Topic]:
    """Parse a list of topic strings, keeping order and skipping blank names."""
    if topics is None:
        return []
    if isinstance(topics, (str, Topic)):
        topics = [topics]
    return [Topic.parse(t) for t in topics if isinstance(t, Topic) or _topic_name(t)]


def _topic_name(value: str) -> str:
    return value.strip().partition(":")[0]
