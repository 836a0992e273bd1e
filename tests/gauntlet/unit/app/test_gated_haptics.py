from __future__ import annotations

import logging

from gauntlet.app.ports import HAPTIC_PATTERNS, GatedHaptics, NullParticles, RecordingHapticsBackend
from gauntlet.app.state import SessionStore


class _BrokenBackend:
    def vibrate(self, pattern: tuple[int, ...]) -> None:
        raise RuntimeError("vibration motor unavailable")


def test_pulses_map_to_named_patterns() -> None:
    backend = RecordingHapticsBackend()
    haptics = GatedHaptics(SessionStore(), backend)

    haptics.light()
    haptics.medium()
    haptics.heavy()
    haptics.error()
    haptics.warning()

    assert backend.patterns == [
        HAPTIC_PATTERNS["light"],
        HAPTIC_PATTERNS["medium"],
        HAPTIC_PATTERNS["heavy"],
        HAPTIC_PATTERNS["error"],
        HAPTIC_PATTERNS["warning"],
    ]


def test_unsupported_backend_is_silent() -> None:
    haptics = GatedHaptics(SessionStore())

    assert haptics.supported is False
    haptics.success()


def test_disabled_setting_suppresses_pulses() -> None:
    store = SessionStore()
    backend = RecordingHapticsBackend()
    haptics = GatedHaptics(store, backend)
    store.set("settings.vibration_enabled", False)

    haptics.heavy()

    assert backend.patterns == []


def test_backend_failure_is_logged_not_raised(caplog) -> None:
    haptics = GatedHaptics(SessionStore(), _BrokenBackend())

    with caplog.at_level(logging.DEBUG, logger="gauntlet.app.ports"):
        haptics.medium()

    assert "haptic_pulse_failed" in caplog.text


def test_null_particles_accept_every_call() -> None:
    particles = NullParticles()
    particles.init("particles-container")
    particles.burst()
    particles.destroy()
