"""Publish/subscribe bus for simulated market data."""
import inspect
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)

TICK_TOPIC = "tick"
INDEX_TOPIC = "index"
STATUS_TOPIC = "status"

Unsubscribe = Callable[[], None]


@dataclass(eq=False)
class _Subscription:
    topic: str
    handler: Callable[[Any], Any]
    active: bool = True


class SubscriptionBus:
    """
    Ordered listener registry per topic.

    Handlers run in registration order and may be plain callables or
    coroutine functions. A handler that raises is logged and skipped.
    """

    def __init__(self):
        self._subscribers: Dict[str, List[_Subscription]] = {}

    def subscribe(self, handler: Callable[[Any], Any], topic: str = TICK_TOPIC) -> Unsubscribe:
        subscription = _Subscription(topic=topic, handler=handler)
        self._subscribers.setdefault(topic, []).append(subscription)

        def unsubscribe() -> None:
            if not subscription.active:
                return
            subscription.active = False
            self._subscribers[topic] = [
                s for s in self._subscribers.get(topic, []) if s is not subscription
            ]

        return unsubscribe

    async def publish(self, topic: str, event: Any) -> None:
        # Snapshot: (un)subscribing mid-dispatch takes effect from the next event
        for subscription in list(self._subscribers.get(topic, [])):
            try:
                result = subscription.handler(event)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception("Subscriber on %r failed; continuing delivery", topic)

    def count(self, topic: str = TICK_TOPIC) -> int:
        return len(self._subscribers.get(topic, []))
