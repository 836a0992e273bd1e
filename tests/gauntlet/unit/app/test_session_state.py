from __future__ import annotations

import pytest

from gauntlet.app.state import STAGE_ORDER, STATE_PATHS, ScreenId, SessionStore, StageId, stage_path
from sequencer.api.errors import UnknownStatePathError
from sequencer.api.state import CHANGE_TOPIC


def test_progress_is_a_quarter_per_completed_stage() -> None:
    store = SessionStore()
    assert store.get_progress() == 0.0

    for index, stage in enumerate(STAGE_ORDER, start=1):
        store.set(stage_path(stage, "completed"), True)
        assert store.get_progress() == 25.0 * index


def test_progress_ignores_completion_order() -> None:
    store = SessionStore()
    store.set(stage_path(StageId.CAPTURE, "completed"), True)
    store.set(stage_path(StageId.ANSWER, "completed"), True)

    assert store.get_progress() == 50.0
    assert store.stage_completed(StageId.CAPTURE) is True
    assert store.stage_completed(StageId.SCAN) is False


def test_current_screen_is_coerced_and_validated() -> None:
    store = SessionStore()
    store.set("current_screen", "answer-screen")
    assert store.current_screen is ScreenId.ANSWER

    with pytest.raises(ValueError):
        store.set("current_screen", "lobby-screen")
    assert store.current_screen is ScreenId.ANSWER


def test_unknown_stage_field_is_rejected() -> None:
    store = SessionStore()
    with pytest.raises(UnknownStatePathError):
        store.set("stages.scan.hold_ms", 10)
    assert store.get("stages.scan.hold_ms") is None


def test_reset_clears_stages_and_screen_but_keeps_settings() -> None:
    store = SessionStore()
    store.set("settings.vibration_enabled", False)
    store.set("permissions.camera", True)
    store.set("current_screen", ScreenId.CAPTURE)
    store.set(stage_path(StageId.PLACEMENT, "placed_count"), 4)
    store.set(stage_path(StageId.SCAN, "completed"), True)

    store.reset()

    assert store.current_screen is ScreenId.INTRO
    assert store.get(stage_path(StageId.PLACEMENT, "placed_count")) == 0
    assert store.get_progress() == 0.0
    assert store.get("settings.vibration_enabled") is False
    assert store.get("permissions.camera") is True


def test_change_listener_sees_progress_after_write() -> None:
    store = SessionStore()
    seen: list[float] = []
    store.on(CHANGE_TOPIC, lambda event: seen.append(store.get_progress()))

    store.set(stage_path(StageId.SCAN, "completed"), True)

    assert seen == [25.0]


def test_state_paths_are_the_closed_leaf_set() -> None:
    store = SessionStore()

    assert store.paths == STATE_PATHS
    assert "stages.answer.extra" in STATE_PATHS
    assert "settings.particles_enabled" in STATE_PATHS
    assert "stages" not in STATE_PATHS
