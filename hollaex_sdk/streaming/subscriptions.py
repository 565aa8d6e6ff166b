"""
Subscription registry.

Tracks the desired subscription set: the topics the caller wants active,
independent of the current connection. The registry never touches the
socket; it decides which topics need a wire frame and the session sends
them.

Rules:
    - Unrecognized topic names are ignored.
    - A topic already in the desired set is not sent again.
    - A symbol-narrowed market topic is not sent (nor recorded) while the
      unscoped topic of the same name is desired.
    - Unsubscribe only sends for topics present, and always removes them.
    - Replay after (re)connect re-sends every desired topic without the
      "already desired" check and without narrowed-topic suppression, since
      a new socket has no server-side state.
    - Blank topic names are ignored like unrecognized ones.
"""

from typing import FrozenSet, Iterable, List, Optional, Set, Union

import structlog

from hollaex_sdk.models.topics import Topic, parse_topics

logger = structlog.get_logger(__name__)

TopicLike = Union[str, Topic]


class SubscriptionRegistry:
    """
    Desired subscription set for one streaming session.

    Example:
        >>> registry = SubscriptionRegistry()
        >>> [t.wire for t in registry.plan_subscribe(["orderbook", "orderbook:xht-usdt"])]
        ['orderbook']
        >>> registry.plan_subscribe(["orderbook"])
        []
    """

    def __init__(self, topics: Optional[Iterable[TopicLike]] = None):
        self._desired: Set[Topic] = set()
        if topics:
            self.replace(topics)

    @property
    def desired(self) -> FrozenSet[Topic]:
        """Snapshot of the desired subscription set."""
        return frozenset(self._desired)

    def __contains__(self, topic: object) -> bool:
        if not isinstance(topic, (str, Topic)):
            return False
        parsed = parse_topics(topic)
        return bool(parsed) and parsed[0] in self._desired

    def __len__(self) -> int:
        return len(self._desired)

    def _is_suppressed(self, topic: Topic) -> bool:
        return topic.is_narrowed and topic.unscoped in self._desired

    def replace(self, topics: Optional[Iterable[TopicLike]]) -> None:
        """Replace the desired set with the recognized topics given."""
        self._desired = set()
        for topic in parse_topics(topics):
            if not topic.is_recognized:
                logger.debug("subscription_topic_ignored", topic=topic.name)
                continue
            self._desired.add(topic)

    def clear(self) -> None:
        self._desired.clear()

    def plan_subscribe(self, topics: Iterable[TopicLike]) -> List[Topic]:
        """
        Record new topics and return the ones that need a subscribe frame.

        Args:
            topics: Topics in "topic" or "topic:symbol" notation.

        Returns:
            List[Topic]: Topics to send, in call order.
        """
        to_send: List[Topic] = []
        for topic in parse_topics(topics):
            if not topic.is_recognized:
                logger.debug("subscription_topic_ignored", topic=topic.name)
                continue
            if topic in self._desired:
                continue
            if self._is_suppressed(topic):
                logger.debug(
                    "subscription_covered_by_unscoped",
                    topic=topic.wire,
                    unscoped=topic.unscoped.wire,
                )
                continue
            self._desired.add(topic)
            to_send.append(topic)
        return to_send

    def plan_unsubscribe(self, topics: Iterable[TopicLike]) -> List[Topic]:
        """
        Remove topics and return the ones that need an unsubscribe frame.

        Args:
            topics: Topics in "topic" or "topic:symbol" notation.

        Returns:
            List[Topic]: Topics that were desired, in call order.
        """
        to_send: List[Topic] = []
        for topic in parse_topics(topics):
            if topic not in self._desired:
                continue
            self._desired.discard(topic)
            to_send.append(topic)
        return to_send

    def plan_replay(self) -> List[Topic]:
        """
        Return every desired topic to re-declare on a fresh connection.

        A new socket has no server-side subscriptions, so narrowed topics
        are re-sent even while their unscoped topic is desired. The order
        is stable (by wire name) so replays are reproducible.
        """
        return sorted(self._desired, key=lambda t: t.wire)

    def __repr__(self) -> str:
        topics = ", ".join(sorted(t.wire for t in self._desired))
        return f"SubscriptionRegistry([{topics}])"
