"""In-process publish/subscribe for cross-component refresh signals."""

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable

logger = logging.getLogger(__name__)

BOOST_COMPLETED = "boost_completed"
WEEK_RESET = "week_reset"

Handler = Callable[[Any], None]


@dataclass(frozen=True)
class CompletionEvent:
    """Published once per successful boost completion."""
    user_id: str
    boost_id: str
    points_earned: int
    category: str


@dataclass(frozen=True)
class WeekResetEvent:
    """Published once per transition into a new weekly window."""
    previous_start: datetime
    start: datetime


class Subscription:
    """Handle returned by EventBus.subscribe."""

    def __init__(self, bus: "EventBus", topic: str, handler: Handler):
        self._bus = bus
        self.topic = topic
        self.handler = handler
        self.active = True

    def unsubscribe(self):
        """Stop receiving events. Safe to call more than once."""
        if self.active:
            self._bus._remove(self)
            self.active = False

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.unsubscribe()


class EventBus:
    """Synchronous event bus with explicit subscription lifetimes."""

    def __init__(self):
        self._subscriptions: dict[str, list[Subscription]] = defaultdict(list)

    def subscribe(self, topic: str, handler: Handler) -> Subscription:
        subscription = Subscription(self, topic, handler)
        self._subscriptions[topic].append(subscription)
        logger.debug(f"Subscribed {handler!r} to {topic}")
        return subscription

    def publish(self, topic: str, event: Any) -> int:
        """
        Deliver an event to every current subscriber of a topic.

        A handler that raises is logged and skipped; the rest still run.

        Returns:
            Number of handlers that received the event without error
        """
        delivered = 0
        # Copy so handlers may unsubscribe while we iterate
        for subscription in list(self._subscriptions.get(topic, [])):
            try:
                subscription.handler(event)
                delivered += 1
            except Exception:
                logger.exception(f"Handler {subscription.handler!r} failed for {topic}")
        return delivered

    def subscriber_count(self, topic: str) -> int:
        return len(self._subscriptions.get(topic, []))

    def _remove(self, subscription: Subscription):
        handlers = self._subscriptions.get(subscription.topic, [])
        if subscription in handlers:
            handlers.remove(subscription)
