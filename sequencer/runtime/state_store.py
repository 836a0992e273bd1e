"""Dotted-path state-store implementation."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from copy import deepcopy
from dataclasses import fields

from sequencer.api.errors import UnknownStatePathError
from sequencer.api.events import TopicEmitter, TopicListener
from sequencer.api.state import (
    CHANGE_TOPIC,
    RESET_TOPIC,
    ChangeEvent,
    StateSnapshot,
    ValueCoercer,
    change_topic,
    iter_leaf_paths,
)
from sequencer.runtime.events import RuntimeTopicEmitter

_MISSING = object()


class RuntimeStateStore[TState]:
    """Typed state record addressed by dotted paths, with pub/sub change events.

    The record is a tree of dataclasses built by `factory`. Assignable paths are
    the closed set of leaf fields of that tree. Listeners run synchronously on
    the caller's stack; a listener that calls `set` recurses, there is no guard.
    """

    def __init__(
        self,
        factory: Callable[[], TState],
        *,
        emitter: TopicEmitter | None = None,
        reset_fields: tuple[str, ...] | None = None,
        coercers: Mapping[str, ValueCoercer] | None = None,
    ) -> None:
        self._factory = factory
        self._value = factory()
        self._emitter = emitter if emitter is not None else RuntimeTopicEmitter()
        self._paths = frozenset(iter_leaf_paths(self._value))
        if reset_fields is None:
            reset_fields = tuple(item.name for item in fields(self._value))
        self._reset_fields = reset_fields
        self._coercers = dict(coercers or {})
        self._revision = 0

    @property
    def paths(self) -> frozenset[str]:
        return self._paths

    @property
    def emitter(self) -> TopicEmitter:
        return self._emitter

    def get(self, path: str) -> object | None:
        """Resolve dotted path; missing segments yield None."""
        current: object = self._value
        for segment in path.split("."):
            current = getattr(current, segment, _MISSING) if segment else _MISSING
            if current is _MISSING:
                return None
        return current

    def set(self, path: str, value: object) -> None:
        """Assign leaf, then emit the wildcard and the path-specific change event."""
        if path not in self._paths:
            raise UnknownStatePathError(path)
        coercer = self._coercers.get(path)
        if coercer is not None:
            value = coercer(value)
        *parents, leaf = path.split(".")
        owner: object = self._value
        for segment in parents:
            owner = getattr(owner, segment)
        old_value = getattr(owner, leaf)
        setattr(owner, leaf, value)
        self._revision += 1
        event = ChangeEvent(key=path, old_value=old_value, new_value=value)
        self._emitter.emit(CHANGE_TOPIC, event)
        self._emitter.emit(change_topic(path), event)

    def on(self, topic: str, listener: TopicListener) -> None:
        self._emitter.on(topic, listener)

    def off(self, topic: str, listener: TopicListener) -> None:
        self._emitter.off(topic, listener)

    def emit(self, topic: str, data: object = None) -> int:
        return self._emitter.emit(topic, data)

    def reset(self) -> None:
        """Restore reset fields from a fresh record; listeners are kept."""
        fresh = self._factory()
        for name in self._reset_fields:
            setattr(self._value, name, getattr(fresh, name))
        self._revision += 1
        self._emitter.emit(RESET_TOPIC, None)

    def peek(self) -> TState:
        """Return current state value by reference (read-only contract)."""
        return self._value

    def snapshot(self) -> StateSnapshot[TState]:
        """Return immutable snapshot copy."""
        return StateSnapshot(value=deepcopy(self._value), revision=self._revision)

    def revision(self) -> int:
        return self._revision


StateStore = RuntimeStateStore
