"""Collaborator ports consumed by the stage flow (haptics, particles, capture)."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

from sequencer.runtime.errors import RECOVERABLE_RUNTIME_ERRORS, log_recoverable

if TYPE_CHECKING:
    import numpy as np

    from gauntlet.app.state import SessionStore
    from sequencer.runtime.completion import Completion

logger = logging.getLogger(__name__)

HAPTIC_PATTERNS: dict[str, tuple[int, ...]] = {
    "light": (10,),
    "medium": (25,),
    "heavy": (50,),
    "success": (50, 50, 50, 50, 100),
    "error": (100, 50, 100, 50, 100),
    "warning": (30, 30, 30),
}


class HapticsBackend(Protocol):
    """Device vibration sink; pattern alternates vibrate/pause milliseconds."""

    def vibrate(self, pattern: tuple[int, ...]) -> None: ...


class RecordingHapticsBackend:
    def __init__(self) -> None:
        self.patterns: list[tuple[int, ...]] = []

    def vibrate(self, pattern: tuple[int, ...]) -> None:
        self.patterns.append(pattern)


class GatedHaptics:
    """Fire-and-forget haptic pulses gated by `settings.vibration_enabled`."""

    def __init__(self, store: SessionStore, backend: HapticsBackend | None = None) -> None:
        self._store = store
        self._backend = backend

    @property
    def supported(self) -> bool:
        return self._backend is not None

    def light(self) -> None:
        self._pulse("light")

    def medium(self) -> None:
        self._pulse("medium")

    def heavy(self) -> None:
        self._pulse("heavy")

    def success(self) -> None:
        self._pulse("success")

    def error(self) -> None:
        self._pulse("error")

    def warning(self) -> None:
        self._pulse("warning")

    def _pulse(self, name: str) -> None:
        if self._backend is None or not self._store.get("settings.vibration_enabled"):
            return
        try:
            self._backend.vibrate(HAPTIC_PATTERNS[name])
        except RECOVERABLE_RUNTIME_ERRORS:
            log_recoverable(logger, "haptic_pulse_failed kind=%s", name)


class ParticlesPort(Protocol):
    """Background particle renderer."""

    def init(self, container_id: str) -> None: ...

    def burst(self) -> None: ...

    def destroy(self) -> None: ...


class NullParticles:
    def init(self, container_id: str) -> None:
        return None

    def burst(self) -> None:
        return None

    def destroy(self) -> None:
        return None


class RecordingParticles:
    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple[object, ...]]] = []

    def init(self, container_id: str) -> None:
        self.calls.append(("init", (container_id,)))

    def burst(self) -> None:
        self.calls.append(("burst", ()))

    def destroy(self) -> None:
        self.calls.append(("destroy", ()))

    def count(self, name: str) -> int:
        return sum(1 for call, _ in self.calls if call == name)


class CaptureStream(Protocol):
    """Live capture stream owned by exactly one controller."""

    @property
    def active(self) -> bool: ...

    def read_frame(self) -> np.ndarray: ...

    def stop(self) -> None: ...


class CaptureDevice(Protocol):
    """Asynchronous capture-device access.

    The returned completion resolves with a stream, fails with
    CapturePermissionDenied / CaptureUnavailable, or never settles.
    """

    def request_stream(self) -> Completion[CaptureStream]: ...
