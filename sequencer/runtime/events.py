"""Lightweight event bus primitives for runtime modules."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

from sequencer.api.events import Subscription, TopicListener

TEvent = TypeVar("TEvent")
EventHandler = Callable[[Any], None]


class RuntimeEventBus:
    """Simple in-process pub/sub keyed by event type."""

    def __init__(self) -> None:
        self._next_id = 1
        self._subscriptions: dict[int, tuple[type[object], EventHandler]] = {}

    def subscribe(
        self,
        event_type: type[TEvent],
        handler: Callable[[TEvent], None],
    ) -> Subscription:
        """Subscribe handler for an event type."""
        sub_id = self._next_id
        self._next_id += 1
        self._subscriptions[sub_id] = (event_type, handler)
        return Subscription(sub_id)

    def unsubscribe(self, subscription: Subscription) -> None:
        """Remove a subscription if present."""
        self._subscriptions.pop(subscription.id, None)

    def publish(self, event: object) -> int:
        """Publish one event and return number of invoked handlers."""
        invoked = 0
        for subscribed_type, handler in tuple(self._subscriptions.values()):
            if isinstance(event, subscribed_type):
                handler(event)
                invoked += 1
        return invoked

    @property
    def subscription_count(self) -> int:
        return len(self._subscriptions)


class RuntimeTopicEmitter:
    """Named-topic pub/sub with registration-ordered synchronous dispatch."""

    def __init__(self) -> None:
        self._listeners: dict[str, list[TopicListener]] = {}

    def on(self, topic: str, listener: TopicListener) -> None:
        """Register listener for topic."""
        self._listeners.setdefault(topic, []).append(listener)

    def off(self, topic: str, listener: TopicListener) -> None:
        """Remove every registration of listener (identity match) for topic."""
        listeners = self._listeners.get(topic)
        if not listeners:
            return
        self._listeners[topic] = [cb for cb in listeners if cb is not listener]

    def emit(self, topic: str, data: object = None) -> int:
        """Invoke listeners for topic in registration order."""
        listeners = self._listeners.get(topic)
        if not listeners:
            return 0
        # Snapshot so listeners may register/unregister while dispatching.
        snapshot = tuple(listeners)
        for listener in snapshot:
            listener(data)
        return len(snapshot)

    def listener_count(self, topic: str) -> int:
        return len(self._listeners.get(topic, ()))


EventBus = RuntimeEventBus
TopicEmitter = RuntimeTopicEmitter
