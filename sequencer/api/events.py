"""Public event bus and topic emitter API contracts."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol, TypeVar

TEvent = TypeVar("TEvent")
TopicListener = Callable[[Any], None]


@dataclass(frozen=True, slots=True)
class Subscription:
    """Opaque subscription token."""

    id: int


class EventBus(Protocol):
    """Typed in-process pub/sub contract."""

    def subscribe(
        self,
        event_type: type[TEvent],
        handler: Callable[[TEvent], None],
    ) -> Subscription:
        """Subscribe handler for event type."""

    def unsubscribe(self, subscription: Subscription) -> None:
        """Unsubscribe token."""

    def publish(self, event: object) -> int:
        """Publish event and return invocation count."""


class TopicEmitter(Protocol):
    """Named-topic listener registry with identity-based removal."""

    def on(self, topic: str, listener: TopicListener) -> None:
        """Register listener for topic."""

    def off(self, topic: str, listener: TopicListener) -> None:
        """Remove listener by reference identity."""

    def emit(self, topic: str, data: object = None) -> int:
        """Invoke topic listeners in registration order and return the count."""

    def listener_count(self, topic: str) -> int:
        """Return number of listeners registered for topic."""


def create_event_bus() -> EventBus:
    """Create default typed event bus implementation."""
    from sequencer.runtime.events import RuntimeEventBus

    return RuntimeEventBus()


def create_topic_emitter() -> TopicEmitter:
    """Create default topic emitter implementation."""
    from sequencer.runtime.events import RuntimeTopicEmitter

    return RuntimeTopicEmitter()
