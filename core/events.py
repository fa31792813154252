import enum
import logging
from typing import Callable, Dict, List

logger = logging.getLogger(__name__)


class Topic(str, enum.Enum):
    BOOKING_CREATED = "bookingCreated"
    BOOKING_CANCELLED = "bookingCancelled"
    FAVORITE_UPDATED = "favoriteUpdated"


class Subscription:
    """Handle returned by `EventBus.subscribe`. Unsubscribing is idempotent."""

    def __init__(self, bus: "EventBus", topic: Topic, callback: Callable[[], None]):
        self.bus = bus
        self.topic = topic
        self.callback = callback
        self.active = True

    def unsubscribe(self):
        if self.active:
            self.active = False
            self.bus._remove(self)

    def __repr__(self):
        return f"<Subscription(topic={self.topic.value}, active={self.active})>"


class EventBus:
    """
    In-process publish/subscribe keyed by topic.

    Publishing is synchronous and carries no payload: subscribers only learn
    that something changed and have to refetch. Events are not replayed to
    subscribers that join later.
    """

    def __init__(self):
        self._subscriptions: Dict[Topic, List[Subscription]] = {topic: [] for topic in Topic}

    def subscribe(self, topic, callback: Callable[[], None]) -> Subscription:
        subscription = Subscription(self, Topic(topic), callback)
        self._subscriptions[subscription.topic].append(subscription)
        return subscription

    def _remove(self, subscription: Subscription):
        try:
            self._subscriptions[subscription.topic].remove(subscription)
        except ValueError:
            pass

    def subscriber_count(self, topic) -> int:
        return len(self._subscriptions[Topic(topic)])

    def publish(self, topic) -> int:
        """Call every current subscriber of `topic`; returns how many were called."""
        topic = Topic(topic)
        delivered = 0
        # snapshot so callbacks may unsubscribe while we iterate
        for subscription in list(self._subscriptions[topic]):
            if not subscription.active:
                continue
            try:
                subscription.callback()
            except Exception:
                logger.exception("Subscriber to %s failed", topic.value)
            delivered += 1
        logger.debug("Published %s to %d subscriber(s)", topic.value, delivered)
        return delivered
