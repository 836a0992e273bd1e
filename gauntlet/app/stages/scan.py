"""Stage 1: press-and-hold identity scan."""

from __future__ import annotations

import logging
import math

from gauntlet.app.controller import (
    HandoffHook,
    InputHandler,
    StageContext,
    StageController,
    StagePhase,
)
from gauntlet.app.events import PointerLeft, PointerPressed, PointerReleased
from gauntlet.app.state import ScreenId, StageId, stage_path
from gauntlet.ui.layout import (
    SCAN_ICON,
    SCAN_LINE,
    SCAN_RING,
    SCAN_STATUS_PROGRESS,
    SCAN_STATUS_TEXT,
    SCAN_WRAPPER,
)
from sequencer.api.geometry import clamp
from sequencer.api.transitions import TransitionDirection

logger = logging.getLogger(__name__)

RING_RADIUS = 90.0
RING_CIRCUMFERENCE = 2.0 * math.pi * RING_RADIUS

STATUS_IDLE = "Keep holding the scanner"
STATUS_SCANNING = "Scanning..."
STATUS_DONE = "Identity confirmed"


class ScanStage(StageController):
    """Completes once the wrapper is held for `scan_hold_seconds` without release."""

    stage_id = StageId.SCAN
    screen_id = ScreenId.SCAN
    next_screen_id = ScreenId.ANSWER
    required_anchors = (SCAN_WRAPPER,)
    transition_direction = TransitionDirection.LEFT

    def __init__(self, context: StageContext, *, on_handoff: HandoffHook | None = None) -> None:
        super().__init__(context, on_handoff=on_handoff)
        self._holding = False
        self._hold_started_at = 0.0
        self._ticker: int | None = None
        self._quarters = 0
        self.progress = 0.0

    @property
    def holding(self) -> bool:
        return self._holding

    def reset(self) -> None:
        if self._phase is StagePhase.COMPLETED:
            return
        self._stop_ticker()
        self._holding = False
        self._reset_visuals()

    def _input_handlers(self) -> tuple[tuple[type, InputHandler], ...]:
        return (
            (PointerPressed, self._on_press),
            (PointerReleased, self._on_release),
            (PointerLeft, self._on_leave),
        )

    def _on_activate(self) -> None:
        self._add_class(SCAN_WRAPPER, "waiting")

    def _release_resources(self) -> None:
        self._ticker = None
        self._holding = False

    def _on_press(self, event: PointerPressed) -> bool:
        if event.target != SCAN_WRAPPER or self._phase is not StagePhase.ACTIVE:
            return False
        if self._ctx.store.get(stage_path(StageId.SCAN, "locked")):
            return False
        if self._holding:
            return True
        self._holding = True
        self._hold_started_at = self._ctx.scheduler.now_seconds
        self._quarters = 0
        self._ctx.haptics.light()
        self._remove_class(SCAN_WRAPPER, "waiting")
        self._add_class(SCAN_WRAPPER, "scanning")
        self._add_class(SCAN_LINE, "active")
        self._set_text(SCAN_STATUS_TEXT, STATUS_SCANNING)
        self._ticker = self._scope.call_every(self._ctx.config.frame_interval_seconds, self._tick)
        logger.debug("scan_hold_started at=%.3f", self._hold_started_at)
        return True

    def _on_release(self, event: PointerReleased) -> bool:
        return self._end_hold()

    def _on_leave(self, event: PointerLeft) -> bool:
        if event.target != SCAN_WRAPPER:
            return False
        return self._end_hold()

    def _end_hold(self) -> bool:
        if not self._holding:
            return False
        if self._held_long_enough():
            self._finish_scan()
            return True
        held = self._ctx.scheduler.now_seconds - self._hold_started_at
        logger.debug("scan_hold_released held=%.3f required=%.3f", held, self._ctx.config.scan_hold_seconds)
        self.reset()
        return True

    def _tick(self) -> None:
        if not self._holding:
            return
        hold = self._ctx.config.scan_hold_seconds
        elapsed = self._ctx.scheduler.now_seconds - self._hold_started_at
        self._render_progress(clamp(elapsed / hold, 0.0, 1.0))
        quarter = min(3, int(self.progress * 4))
        if quarter > self._quarters:
            self._quarters = quarter
            self._ctx.haptics.light()
        if self._held_long_enough():
            self._finish_scan()

    def _held_long_enough(self) -> bool:
        # Millisecond comparison; repeated frame steps drift below the threshold in float seconds.
        elapsed_ms = round((self._ctx.scheduler.now_seconds - self._hold_started_at) * 1000.0, 6)
        return elapsed_ms >= self._ctx.config.scan_hold_seconds * 1000.0

    def _finish_scan(self) -> None:
        self._stop_ticker()
        self._holding = False
        if not self._begin_validation():
            return
        self._render_progress(1.0)
        self._complete()

    def _record_completion(self) -> None:
        self._ctx.store.set(stage_path(StageId.SCAN, "locked"), True)
        super()._record_completion()

    def _celebrate(self) -> None:
        self._remove_class(SCAN_WRAPPER, "scanning")
        self._add_class(SCAN_WRAPPER, "success")
        self._remove_class(SCAN_LINE, "active")
        self._set_text(SCAN_STATUS_TEXT, STATUS_DONE)
        orchestrator = self._ctx.orchestrator
        self._track(orchestrator.pulse(SCAN_ICON, scale=1.2, duration=0.3, repeat=2))
        self._track(orchestrator.tween(SCAN_WRAPPER, {"glow": 1.0}, duration=0.5))

    def _settle_seconds(self) -> float:
        return self._ctx.config.scan_settle_seconds

    def _render_progress(self, progress: float) -> None:
        self.progress = progress
        self._set_prop(SCAN_RING, "stroke_dashoffset", RING_CIRCUMFERENCE * (1.0 - progress))
        self._set_prop(SCAN_STATUS_PROGRESS, "width", progress * 100.0)

    def _reset_visuals(self) -> None:
        self._quarters = 0
        self._remove_class(SCAN_WRAPPER, "scanning")
        self._add_class(SCAN_WRAPPER, "waiting")
        self._remove_class(SCAN_LINE, "active")
        self._render_progress(0.0)
        self._set_text(SCAN_STATUS_TEXT, STATUS_IDLE)

    def _stop_ticker(self) -> None:
        if self._ticker is not None:
            self._scope.cancel(self._ticker)
            self._ticker = None
