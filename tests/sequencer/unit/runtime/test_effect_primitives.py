from __future__ import annotations

from dataclasses import dataclass

import pytest

from sequencer.runtime.scheduler import Scheduler
from sequencer.runtime.state_store import RuntimeStateStore
from sequencer.runtime.surfaces import SurfaceRegistry
from sequencer.runtime.transitions import RuntimeTransitionOrchestrator, round_half_up


@dataclass(slots=True)
class ScreenRecord:
    current_screen: str = "main"


@pytest.fixture
def rig() -> tuple[RuntimeTransitionOrchestrator, SurfaceRegistry, Scheduler]:
    scheduler = Scheduler()
    surfaces = SurfaceRegistry()
    surfaces.create("main")
    surfaces.create("badge")
    surfaces.create("item-1")
    surfaces.create("item-2")
    orchestrator = RuntimeTransitionOrchestrator(
        surfaces=surfaces,
        store=RuntimeStateStore(ScreenRecord),
        scheduler=scheduler,
    )
    return orchestrator, surfaces, scheduler


def test_pulse_returns_to_start_scale(rig) -> None:
    orchestrator, surfaces, scheduler = rig
    timeline = orchestrator.pulse("badge", scale=1.2, duration=0.3, repeat=2)

    assert timeline is not None
    assert timeline.duration == pytest.approx(1.8)
    scheduler.advance(0.3)
    assert surfaces.get("badge").number("scale") > 1.1
    scheduler.advance(2.0)
    assert surfaces.get("badge").number("scale") == pytest.approx(1.0)


def test_shake_restores_original_x_on_complete_and_kill(rig) -> None:
    orchestrator, surfaces, scheduler = rig
    badge = surfaces.get("badge")
    badge.set_prop("x", 12.0)

    orchestrator.shake(badge, intensity=5.0, duration=0.5)
    scheduler.advance(1.0)
    assert badge.number("x") == pytest.approx(12.0)

    timeline = orchestrator.shake(badge, intensity=5.0, duration=0.5)
    scheduler.advance(0.06)
    assert timeline is not None
    timeline.kill()
    assert badge.number("x") == pytest.approx(12.0)


def test_glow_pulse_is_bounded_and_validates_repeat(rig) -> None:
    orchestrator, surfaces, scheduler = rig
    timeline = orchestrator.glow_pulse("badge", duration=0.5)

    assert timeline is not None
    assert timeline.duration == pytest.approx(2.0)
    scheduler.advance(2.5)
    assert not timeline.playing
    assert surfaces.get("badge").number("glow") == pytest.approx(0.0)
    assert surfaces.get("badge").prop("glow_color") == "#00FFFF"
    with pytest.raises(ValueError):
        orchestrator.glow_pulse("badge", repeat=-1)


def test_animate_in_staggers_prefix_matches(rig) -> None:
    orchestrator, surfaces, scheduler = rig
    timeline = orchestrator.animate_in("item-", type="fade_up", duration=0.5, stagger=0.1)

    assert timeline is not None
    assert surfaces.get("item-1").number("opacity") == 0.0
    assert surfaces.get("item-2").number("y") == pytest.approx(30.0)
    scheduler.advance(1.0)
    assert surfaces.get("item-1").number("opacity") == pytest.approx(1.0)
    assert surfaces.get("item-2").number("y") == pytest.approx(0.0)


def test_animate_out_and_missing_targets(rig) -> None:
    orchestrator, surfaces, scheduler = rig
    orchestrator.animate_out("badge", type="scale")
    scheduler.advance(0.5)

    assert surfaces.get("badge").number("opacity") == pytest.approx(0.0)
    assert surfaces.get("badge").number("scale") == pytest.approx(0.8)
    assert orchestrator.animate_out("ghost") is None
    assert orchestrator.tween("ghost", {"x": 1.0}, duration=0.1) is None


def test_flash_requires_overlay(rig) -> None:
    orchestrator, surfaces, scheduler = rig
    assert orchestrator.flash() is None

    overlay = surfaces.create("flash-overlay")
    overlay.set_prop("opacity", 0.0)
    timeline = orchestrator.flash(color="#ff0000", duration=0.5)
    scheduler.advance(0.1)
    assert overlay.number("opacity") == pytest.approx(1.0, abs=0.05)
    scheduler.advance(0.5)

    assert timeline is not None
    assert overlay.number("opacity") == pytest.approx(0.0)
    assert overlay.prop("background") == "#ff0000"


def test_typewriter_reveals_text_and_resolves(rig) -> None:
    orchestrator, surfaces, scheduler = rig
    badge = surfaces.get("badge")
    badge.text = "old"

    completion = orchestrator.typewriter(badge, "abc", speed=0.25, delay=0.5)
    assert badge.text == ""
    scheduler.advance(0.75)
    assert badge.text == "a"
    scheduler.advance(0.5)

    assert badge.text == "abc"
    assert completion.done


def test_typewriter_empty_text_resolves_after_delay(rig) -> None:
    orchestrator, surfaces, scheduler = rig
    completion = orchestrator.typewriter("badge", "", delay=0.5)

    assert completion.pending
    scheduler.advance(0.5)
    assert completion.done


def test_typewriter_cancel_stops_typing(rig) -> None:
    orchestrator, surfaces, scheduler = rig
    completion = orchestrator.typewriter("badge", "abcdef", speed=0.25)
    scheduler.advance(0.5)

    completion.cancel()
    scheduler.advance(2.0)

    assert surfaces.get("badge").text == "ab"
    assert scheduler.queued_task_count == 0


def test_count_to_formats_with_half_up_rounding(rig) -> None:
    orchestrator, surfaces, scheduler = rig
    orchestrator.count_to("badge", 0, 42, duration=0.5, prefix="#", suffix="%")
    scheduler.advance(1.0)
    assert surfaces.get("badge").text == "#42%"

    orchestrator.count_to("main", 0, 10, duration=0.5, formatter=lambda value: f"{value:.1f}")
    scheduler.advance(1.0)
    assert surfaces.get("main").text == "10.0"
    assert round_half_up(2.5) == 3
    assert round_half_up(-2.5) == -2


def test_frame_interval_must_be_positive() -> None:
    with pytest.raises(ValueError):
        RuntimeTransitionOrchestrator(
            surfaces=SurfaceRegistry(),
            store=RuntimeStateStore(ScreenRecord),
            scheduler=Scheduler(),
            frame_interval=0.0,
        )
