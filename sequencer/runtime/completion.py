"""Resolve-once completion signal for scheduler-driven work."""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum


class CompletionState(Enum):
    PENDING = "pending"
    RESOLVED = "resolved"
    FAILED = "failed"
    CANCELLED = "cancelled"


class Completion[T]:
    """Settles exactly once: resolved with a value, failed with an error, or cancelled.

    Done-callbacks run synchronously on settle (or immediately when added to an
    already resolved/failed completion). Cancellation drops pending callbacks and
    runs cancel hooks so the producer can release timers or resources.
    """

    def __init__(self) -> None:
        self._state = CompletionState.PENDING
        self._value: T | None = None
        self._error: BaseException | None = None
        self._callbacks: list[Callable[[Completion[T]], None]] = []
        self._cancel_hooks: list[Callable[[], None]] = []

    @classmethod
    def resolved(cls, value: T | None = None) -> Completion[T]:
        completion: Completion[T] = cls()
        completion.resolve(value)
        return completion

    @property
    def state(self) -> CompletionState:
        return self._state

    @property
    def pending(self) -> bool:
        return self._state is CompletionState.PENDING

    @property
    def done(self) -> bool:
        """Return whether the completion resolved or failed."""
        return self._state in (CompletionState.RESOLVED, CompletionState.FAILED)

    @property
    def cancelled(self) -> bool:
        return self._state is CompletionState.CANCELLED

    @property
    def error(self) -> BaseException | None:
        return self._error

    def result(self) -> T | None:
        """Return resolved value, re-raise failure, or raise when unsettled."""
        if self._state is CompletionState.RESOLVED:
            return self._value
        if self._state is CompletionState.FAILED:
            assert self._error is not None
            raise self._error
        raise RuntimeError(f"completion is {self._state.value}")

    def resolve(self, value: T | None = None) -> bool:
        """Resolve with value. Returns False when already settled."""
        if self._state is not CompletionState.PENDING:
            return False
        self._state = CompletionState.RESOLVED
        self._value = value
        self._settle()
        return True

    def fail(self, error: BaseException) -> bool:
        """Fail with error. Returns False when already settled."""
        if self._state is not CompletionState.PENDING:
            return False
        self._state = CompletionState.FAILED
        self._error = error
        self._settle()
        return True

    def cancel(self) -> bool:
        """Cancel a pending completion. Done-callbacks never run afterwards."""
        if self._state is not CompletionState.PENDING:
            return False
        self._state = CompletionState.CANCELLED
        self._callbacks.clear()
        hooks = tuple(self._cancel_hooks)
        self._cancel_hooks.clear()
        for hook in hooks:
            hook()
        return True

    def add_done_callback(self, callback: Callable[[Completion[T]], None]) -> None:
        if self.done:
            callback(self)
            return
        if self._state is CompletionState.PENDING:
            self._callbacks.append(callback)

    def add_cancel_hook(self, hook: Callable[[], None]) -> None:
        if self._state is CompletionState.PENDING:
            self._cancel_hooks.append(hook)

    def _settle(self) -> None:
        self._cancel_hooks.clear()
        callbacks = tuple(self._callbacks)
        self._callbacks.clear()
        for callback in callbacks:
            callback(self)
