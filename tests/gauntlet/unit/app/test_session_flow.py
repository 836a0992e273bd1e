from __future__ import annotations

from gauntlet.app.controller import StagePhase
from gauntlet.app.events import ButtonPressed, PointerPressed
from gauntlet.app.ports import HAPTIC_PATTERNS
from gauntlet.app.state import ScreenId
from gauntlet.app.walkthrough import run_walkthrough
from gauntlet.infra.capture import DeniedCaptureDevice, SyntheticCaptureDevice
from gauntlet.ui.layout import INTRO_START_BUTTON, SCAN_WRAPPER, STAGE_DOT_PREFIX, TOP_PROGRESS_FILL
from sequencer.runtime.scheduler import Scheduler


def _start_scan(session) -> None:
    session.start()
    session.dispatch(ButtonPressed(INTRO_START_BUTTON))
    session.advance(1.5)


def test_intro_button_hands_off_to_scan(session) -> None:
    _start_scan(session)

    assert session.store.current_screen is ScreenId.SCAN
    assert session.active_stage is session.scan
    assert session.surfaces.get(f"{STAGE_DOT_PREFIX}0").has_class("active")


def test_intro_button_only_starts_once(session) -> None:
    session.start()
    session.dispatch(ButtonPressed(INTRO_START_BUTTON))
    session.dispatch(ButtonPressed(INTRO_START_BUTTON))
    session.advance(1.5)

    assert session.scan.bound is True
    assert session.scan.phase is StagePhase.ACTIVE


def test_scan_completion_hands_off_to_answer(session) -> None:
    _start_scan(session)
    session.dispatch(PointerPressed(SCAN_WRAPPER))
    session.advance(3.1)
    session.advance(3.0)

    assert session.store.current_screen is ScreenId.ANSWER
    assert session.scan.bound is False
    assert session.answer.bound is True
    assert session.surfaces.get(TOP_PROGRESS_FILL).number("width") == 25.0
    assert session.surfaces.get(f"{STAGE_DOT_PREFIX}0").has_class("completed")
    assert session.surfaces.get(f"{STAGE_DOT_PREFIX}1").has_class("active")


def test_full_walkthrough_with_live_stream(session_factory, particles) -> None:
    scheduler = Scheduler()
    device = SyntheticCaptureDevice(scheduler, height=12, width=16)
    session = session_factory(capture_device=device, scheduler=scheduler)

    result = run_walkthrough(session)

    assert result.completed is True
    assert result.progress == 100.0
    assert result.answer_attempts == 0
    assert result.used_fallback is False
    assert session.store.current_screen is ScreenId.CAPTURE
    assert session.capture.still.shape == (12, 16, 3)
    assert particles.count("burst") == 4
    assert all(controller.completion_count == 1 for controller in session.controllers)


def test_full_walkthrough_with_denied_camera(session_factory) -> None:
    scheduler = Scheduler()
    session = session_factory(capture_device=DeniedCaptureDevice(scheduler), scheduler=scheduler)

    result = run_walkthrough(session)

    assert result.completed is True
    assert result.used_fallback is True


def test_wrong_answer_stalls_walkthrough(session_factory) -> None:
    session = session_factory()

    result = run_walkthrough(session, answer="warm")

    assert result.completed is False
    assert result.progress == 25.0
    assert result.answer_attempts == 1
    assert session.active_stage is session.answer


def test_vibration_setting_gates_haptics(session, haptics_backend) -> None:
    session.store.set("settings.vibration_enabled", False)
    _start_scan(session)
    session.dispatch(PointerPressed(SCAN_WRAPPER))
    session.advance(3.1)

    assert haptics_backend.patterns == []

    session.store.set("settings.vibration_enabled", True)
    session.haptics.success()
    assert haptics_backend.patterns == [HAPTIC_PATTERNS["success"]]


def test_particles_disabled_skips_bursts(session, particles) -> None:
    session.store.set("settings.particles_enabled", False)
    _start_scan(session)
    session.dispatch(PointerPressed(SCAN_WRAPPER))
    session.advance(3.1)

    assert particles.count("init") == 0
    assert particles.count("burst") == 0


def test_reset_returns_to_intro_with_fresh_controllers(session) -> None:
    _start_scan(session)
    session.dispatch(PointerPressed(SCAN_WRAPPER))
    session.advance(3.1)
    old_scan = session.scan

    session.reset()

    assert session.scan is not old_scan
    assert session.store.get_progress() == 0.0
    assert session.store.current_screen is ScreenId.INTRO
    assert session.surfaces.get(ScreenId.INTRO.value).has_class("active")
    assert not session.surfaces.get(ScreenId.SCAN.value).has_class("active")
    assert session.active_stage is None
    assert old_scan.scope.active_count == 0

    _start_scan(session)
    assert session.scan.bound is True


def test_teardown_releases_active_stage(session, particles) -> None:
    _start_scan(session)

    session.teardown()

    assert session.active_stage is None
    assert session.input_bus.subscription_count == 0
    assert particles.count("destroy") == 1
