"""Public state-store API contracts."""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, fields, is_dataclass
from typing import Protocol

from sequencer.api.events import TopicEmitter, TopicListener

CHANGE_TOPIC = "change"
RESET_TOPIC = "reset"


def change_topic(path: str) -> str:
    """Return the path-specific change topic name."""
    return f"{CHANGE_TOPIC}:{path}"


@dataclass(frozen=True, slots=True)
class ChangeEvent:
    """One state mutation, delivered on the wildcard and path-specific topics."""

    key: str
    old_value: object
    new_value: object


@dataclass(frozen=True, slots=True)
class StateSnapshot[TState]:
    """Versioned state snapshot from state-store."""

    value: TState
    revision: int


type ValueCoercer = Callable[[object], object]


class StateStore[TState](Protocol):
    """Dotted-path state-store contract with change notification."""

    @property
    def paths(self) -> frozenset[str]:
        """Return the closed set of assignable leaf paths."""

    def get(self, path: str) -> object | None:
        """Resolve path; return None if any segment is missing."""

    def set(self, path: str, value: object) -> None:
        """Assign leaf and emit wildcard then path-specific change events."""

    def on(self, topic: str, listener: TopicListener) -> None:
        """Register topic listener."""

    def off(self, topic: str, listener: TopicListener) -> None:
        """Remove topic listener by identity."""

    def emit(self, topic: str, data: object = None) -> int:
        """Dispatch topic synchronously."""

    def reset(self) -> None:
        """Restore reset fields to defaults and emit the reset topic."""

    def peek(self) -> TState:
        """Return current state by reference (read-only contract)."""

    def snapshot(self) -> StateSnapshot[TState]:
        """Return deep-copied snapshot."""

    def revision(self) -> int:
        """Return current revision number."""


def iter_leaf_paths(value: object, prefix: str = "") -> Iterator[str]:
    """Yield dotted paths of every non-dataclass field under a dataclass instance."""
    if not is_dataclass(value) or isinstance(value, type):
        return
    for item in fields(value):
        path = f"{prefix}{item.name}"
        child = getattr(value, item.name)
        if is_dataclass(child) and not isinstance(child, type):
            yield from iter_leaf_paths(child, prefix=f"{path}.")
        else:
            yield path


def create_state_store[TState](
    factory: Callable[[], TState],
    *,
    emitter: TopicEmitter | None = None,
    reset_fields: tuple[str, ...] | None = None,
    coercers: Mapping[str, ValueCoercer] | None = None,
) -> StateStore[TState]:
    """Create default state-store implementation."""
    from sequencer.runtime.state_store import RuntimeStateStore

    return RuntimeStateStore(
        factory,
        emitter=emitter,
        reset_fields=reset_fields,
        coercers=coercers,
    )
