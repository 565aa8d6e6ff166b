import pytest

from hollaex_sdk.models.topics import Topic, TopicScope
from hollaex_sdk.streaming.subscriptions import SubscriptionRegistry


def wires(topics):
    return [t.wire for t in topics]


class TestTopic:
    def test_parse_market_topic_with_symbol(self):
        topic = Topic.parse("orderbook:xht-usdt")

        assert topic.name == "orderbook"
        assert topic.symbol == "xht-usdt"
        assert topic.scope is TopicScope.MARKET
        assert topic.is_narrowed
        assert topic.unscoped == Topic(name="orderbook")

    def test_account_topics_drop_symbol(self):
        assert Topic.parse("wallet:xht-usdt") == Topic(name="wallet")

    def test_unrecognized_topic(self):
        assert Topic.parse("candles").scope is None

    def test_parse_rejects_blank_name(self):
        with pytest.raises(ValueError):
            Topic.parse(":xht-usdt")

    def test_identity_is_name_and_symbol(self):
        assert {Topic.parse("trade"), Topic.parse("trade"), Topic.parse("trade:a-b")} == {
            Topic(name="trade"),
            Topic(name="trade", symbol="a-b"),
        }


class TestSubscriptionRegistry:
    def test_new_topics_are_planned_once(self):
        registry = SubscriptionRegistry()

        assert wires(registry.plan_subscribe(["orderbook:xht-usdt", "wallet"])) == [
            "orderbook:xht-usdt",
            "wallet",
        ]
        assert registry.plan_subscribe(["wallet", "orderbook:xht-usdt"]) == []

    def test_duplicates_in_one_call_collapse(self):
        registry = SubscriptionRegistry()

        assert wires(registry.plan_subscribe(["order", "order"])) == ["order"]

    def test_unscoped_topic_suppresses_narrowed(self):
        registry = SubscriptionRegistry()

        assert wires(registry.plan_subscribe(["orderbook"])) == ["orderbook"]
        assert registry.plan_subscribe(["orderbook:BTC-USDT"]) == []
        assert "orderbook:BTC-USDT" not in registry

    def test_narrowed_topics_of_other_names_are_not_suppressed(self):
        registry = SubscriptionRegistry(["orderbook"])

        assert wires(registry.plan_subscribe(["trade:xht-usdt"])) == ["trade:xht-usdt"]

    def test_unrecognized_topics_are_ignored(self):
        registry = SubscriptionRegistry()

        assert registry.plan_subscribe(["candles", "candles:xht-usdt"]) == []
        assert len(registry) == 0

    def test_unsubscribe_unknown_topic_is_noop(self):
        registry = SubscriptionRegistry(["order"])

        assert registry.plan_unsubscribe(["wallet"]) == []
        assert registry.desired == frozenset({Topic(name="order")})

    def test_unsubscribe_removes_topic(self):
        registry = SubscriptionRegistry(["wallet", "trade"])

        assert wires(registry.plan_unsubscribe(["wallet"])) == ["wallet"]
        assert "wallet" not in registry
        assert "trade" in registry

    def test_replay_returns_everything_without_mutation(self):
        registry = SubscriptionRegistry(["wallet", "orderbook:xht-usdt", "trade"])

        assert wires(registry.plan_replay()) == ["orderbook:xht-usdt", "trade", "wallet"]
        assert wires(registry.plan_replay()) == ["orderbook:xht-usdt", "trade", "wallet"]
        assert len(registry) == 3

    def test_replay_includes_narrowed_topics_alongside_unscoped(self):
        registry = SubscriptionRegistry(["orderbook:xht-usdt", "orderbook"])

        assert wires(registry.plan_replay()) == ["orderbook", "orderbook:xht-usdt"]

    @pytest.mark.parametrize("topic", ["", "  ", ":BTC-USDT"])
    def test_blank_topic_names_are_ignored(self, topic):
        registry = SubscriptionRegistry([topic, "wallet"])

        assert registry.plan_subscribe([topic]) == []
        assert registry.plan_unsubscribe([topic]) == []
        assert topic not in registry
        assert wires(registry.desired) == ["wallet"]

    @pytest.mark.parametrize("topics", [None, []])
    def test_replace_with_nothing_empties_the_set(self, topics):
        registry = SubscriptionRegistry(["wallet"])
        registry.replace(topics)

        assert len(registry) == 0
