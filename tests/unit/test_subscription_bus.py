import pytest
from datetime import datetime, timezone

from titan_terminal.domain.models import MarketUpdate
from titan_terminal.infrastructure.market_data.streams.subscription_bus import (
    INDEX_TOPIC,
    TICK_TOPIC,
    SubscriptionBus,
)


def _update(symbol: str = "AAPL", price: float = 100.0) -> MarketUpdate:
    return MarketUpdate(
        symbol=symbol,
        price=price,
        absolute_change=0.0,
        percent_change=0.0,
        timestamp=datetime(2024, 1, 15, tzinfo=timezone.utc),
    )


@pytest.mark.asyncio
async def test_delivers_to_listeners_in_registration_order():
    bus = SubscriptionBus()
    seen = []
    bus.subscribe(lambda u: seen.append(("L1", u.symbol)))
    bus.subscribe(lambda u: seen.append(("L2", u.symbol)))

    await bus.publish(TICK_TOPIC, _update("AAPL"))
    await bus.publish(TICK_TOPIC, _update("BTC"))

    assert seen == [("L1", "AAPL"), ("L2", "AAPL"), ("L1", "BTC"), ("L2", "BTC")]


@pytest.mark.asyncio
async def test_unsubscribe_removes_only_that_listener():
    bus = SubscriptionBus()
    first, second = [], []
    unsubscribe_first = bus.subscribe(first.append)
    bus.subscribe(second.append)

    await bus.publish(TICK_TOPIC, _update(price=1.0))
    unsubscribe_first()
    unsubscribe_first()
    await bus.publish(TICK_TOPIC, _update(price=2.0))

    assert [u.price for u in first] == [1.0]
    assert [u.price for u in second] == [1.0, 2.0]
    assert bus.count(TICK_TOPIC) == 1


@pytest.mark.asyncio
async def test_same_handler_registered_twice_is_two_subscriptions():
    bus = SubscriptionBus()
    seen = []
    unsubscribe = bus.subscribe(seen.append)
    bus.subscribe(seen.append)

    unsubscribe()
    await bus.publish(TICK_TOPIC, _update())

    assert len(seen) == 1


@pytest.mark.asyncio
async def test_failing_listener_does_not_block_others(caplog):
    bus = SubscriptionBus()
    seen = []

    def broken(update):
        raise RuntimeError("display crashed")

    bus.subscribe(broken)
    bus.subscribe(seen.append)

    await bus.publish(TICK_TOPIC, _update())

    assert len(seen) == 1
    assert "display crashed" in caplog.text


@pytest.mark.asyncio
async def test_coroutine_listeners_are_awaited():
    bus = SubscriptionBus()
    seen = []

    async def handler(update):
        seen.append(update.symbol)

    bus.subscribe(handler)
    await bus.publish(TICK_TOPIC, _update("ETH"))

    assert seen == ["ETH"]


@pytest.mark.asyncio
async def test_self_unsubscribe_during_dispatch_keeps_current_delivery():
    bus = SubscriptionBus()
    seen = []
    unsubscribe_holder = {}

    def once(update):
        seen.append(("once", update.price))
        unsubscribe_holder["once"]()

    unsubscribe_holder["once"] = bus.subscribe(once)
    bus.subscribe(lambda u: seen.append(("steady", u.price)))

    await bus.publish(TICK_TOPIC, _update(price=1.0))
    await bus.publish(TICK_TOPIC, _update(price=2.0))

    assert seen == [("once", 1.0), ("steady", 1.0), ("steady", 2.0)]


@pytest.mark.asyncio
async def test_listener_added_mid_dispatch_starts_with_next_event():
    bus = SubscriptionBus()
    late = []

    def subscriber_factory(update):
        if not late:
            bus.subscribe(late.append)

    bus.subscribe(subscriber_factory)
    await bus.publish(TICK_TOPIC, _update(price=1.0))
    await bus.publish(TICK_TOPIC, _update(price=2.0))

    assert [u.price for u in late] == [2.0]


@pytest.mark.asyncio
async def test_topics_are_isolated():
    bus = SubscriptionBus()
    ticks, indices = [], []
    bus.subscribe(ticks.append, TICK_TOPIC)
    bus.subscribe(indices.append, INDEX_TOPIC)

    await bus.publish(INDEX_TOPIC, "index-event")

    assert ticks == []
    assert indices == ["index-event"]
    assert bus.count(INDEX_TOPIC) == 1
    assert bus.count("unknown") == 0
