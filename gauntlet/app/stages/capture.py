"""Stage 4: capture a still from the device, or a static fallback, and verify."""

from __future__ import annotations

import logging
from datetime import datetime

import numpy as np

from gauntlet.app.controller import (
    HandoffHook,
    InputHandler,
    StageContext,
    StageController,
    StagePhase,
)
from gauntlet.app.errors import CapturePermissionDenied, CaptureUnavailable
from gauntlet.app.events import ButtonPressed
from gauntlet.app.ports import CaptureDevice, CaptureStream
from gauntlet.app.state import ScreenId, StageId, stage_path
from gauntlet.infra.capture import fallback_frame
from gauntlet.ui.layout import (
    CAPTURE_CHECKMARK,
    CAPTURE_FALLBACK,
    CAPTURE_PERMISSION,
    CAPTURE_START,
    CAPTURE_STATUS_FILL,
    CAPTURE_SUCCESS,
    CAPTURE_VERIFY,
    CAPTURE_VIDEO,
    HUD_LEFT,
    HUD_RIGHT,
    HUD_TOP_LEFT,
    HUD_TOP_RIGHT,
)
from sequencer.runtime.completion import Completion
from sequencer.runtime.errors import RECOVERABLE_RUNTIME_ERRORS, log_recoverable

logger = logging.getLogger(__name__)

FLASH_SECONDS = 0.5
CHECKMARK_DELAY_SECONDS = 0.3


class CaptureStage(StageController):
    """Final stage. Verification always succeeds; the still comes from the live stream when one is held."""

    stage_id = StageId.CAPTURE
    screen_id = ScreenId.CAPTURE
    next_screen_id = None
    required_anchors = (CAPTURE_VERIFY,)

    def __init__(
        self,
        context: StageContext,
        *,
        device: CaptureDevice | None = None,
        on_handoff: HandoffHook | None = None,
    ) -> None:
        super().__init__(context, on_handoff=on_handoff)
        self._device = device
        self._request: Completion[CaptureStream] | None = None
        self._stream: CaptureStream | None = None
        self._hud_task: int | None = None
        self._verifying = False
        self.fallback_active = False
        self.still: np.ndarray | None = None

    @property
    def stream(self) -> CaptureStream | None:
        return self._stream

    @property
    def verifying(self) -> bool:
        return self._verifying

    @property
    def acquiring(self) -> bool:
        return self._request is not None

    def reset(self) -> None:
        if self._phase is StagePhase.COMPLETED or self._verifying:
            return
        self._abandon_request()
        self._stop_stream()
        self.fallback_active = False
        self._show_permission_panel()

    def start_capture(self) -> bool:
        """Request the device stream; a missing device goes straight to the fallback."""
        if self._phase is not StagePhase.ACTIVE or self._request is not None or self._stream is not None:
            return False
        if self._device is None:
            self._fall_back(CaptureUnavailable("no capture device"))
            return True
        request = self._device.request_stream()
        self._request = request
        timeout = self._ctx.config.capture_permission_timeout_seconds
        timeout_task = self._scope.call_later(timeout, lambda: self._on_timeout(request))
        request.add_done_callback(lambda settled: self._on_request_settled(settled, timeout_task))
        logger.info("capture_requested timeout=%.1f", timeout)
        return True

    def verify(self) -> bool:
        """Flash, wait, then commit a still. Ignored while a verification is in flight."""
        if self._verifying or not self._begin_validation():
            return False
        self._verifying = True
        self._ctx.haptics.heavy()
        self._track(self._ctx.orchestrator.flash(duration=FLASH_SECONDS))
        self._scope.call_later(
            FLASH_SECONDS + self._ctx.config.capture_verify_delay_seconds,
            self._commit_still,
        )
        return True

    def _input_handlers(self) -> tuple[tuple[type, InputHandler], ...]:
        return ((ButtonPressed, self._on_button),)

    def _on_activate(self) -> None:
        self._verifying = False
        self._refresh_hud()
        self._hud_task = self._scope.call_every(self._ctx.config.hud_interval_seconds, self._refresh_hud)
        self._show_permission_panel()

    def _release_resources(self) -> None:
        self._hud_task = None
        self._abandon_request()
        self._stop_stream()
        self._verifying = False

    def _on_button(self, event: ButtonPressed) -> bool:
        if event.button_id == CAPTURE_START:
            return self.start_capture()
        if event.button_id == CAPTURE_VERIFY:
            return self.verify()
        return False

    def _on_request_settled(self, request: Completion[CaptureStream], timeout_task: int) -> None:
        if request is not self._request:
            if request.error is None:
                stream = request.result()
                if stream is not None:
                    stream.stop()
                    logger.info("capture_stream_discarded reason=late")
            return
        self._request = None
        self._scope.cancel(timeout_task)
        if request.error is not None:
            self._fall_back(request.error)
            return
        stream = request.result()
        if stream is None:
            self._fall_back(CaptureUnavailable("device returned no stream"))
            return
        self._stream = stream
        self._ctx.store.set("permissions.camera", True)
        self._set_prop(CAPTURE_VIDEO, "visibility", "visible")
        self._remove_class(CAPTURE_FALLBACK, "visible")
        self._set_prop(CAPTURE_PERMISSION, "visibility", "hidden")
        self._add_class(CAPTURE_STATUS_FILL, "analyzing")
        logger.info("capture_stream_started")

    def _on_timeout(self, request: Completion[CaptureStream]) -> None:
        if request is not self._request:
            return
        self._detach_request()
        self._fall_back(CapturePermissionDenied("capture permission timed out"))

    def _fall_back(self, error: BaseException) -> None:
        if isinstance(error, (CapturePermissionDenied, CaptureUnavailable)):
            logger.info("capture_fallback reason=%s", error)
        else:
            logger.warning("capture_fallback reason=unexpected", exc_info=error)
        self.fallback_active = True
        self._set_prop(CAPTURE_VIDEO, "visibility", "hidden")
        self._add_class(CAPTURE_FALLBACK, "visible")
        self._set_prop(CAPTURE_PERMISSION, "visibility", "hidden")

    def _commit_still(self) -> None:
        if self._request is not None:
            self._detach_request()
            logger.info("capture_request_detached reason=committed")
        frame: np.ndarray | None = None
        if self._stream is not None and self._stream.active:
            try:
                frame = np.array(self._stream.read_frame(), copy=True)
            except RECOVERABLE_RUNTIME_ERRORS:
                log_recoverable(logger, "capture_frame_failed", level=logging.WARNING)
        if frame is None:
            frame = fallback_frame()
            self.fallback_active = True
        self.still = frame
        logger.info(
            "capture_committed source=%s shape=%s",
            "fallback" if self.fallback_active else "stream",
            "x".join(str(size) for size in frame.shape),
        )
        self._complete()

    def _record_completion(self) -> None:
        super()._record_completion()
        self._ctx.store.set(stage_path(StageId.CAPTURE, "verified"), True)

    def _celebrate(self) -> None:
        self._verifying = False
        if self._hud_task is not None:
            self._scope.cancel(self._hud_task)
            self._hud_task = None
        self._stop_stream()
        self._add_class(CAPTURE_SUCCESS, "show")
        self._scope.call_later(CHECKMARK_DELAY_SECONDS, lambda: self._add_class(CAPTURE_CHECKMARK, "animate"))

    def _show_permission_panel(self) -> None:
        self._remove_class(CAPTURE_FALLBACK, "visible")
        self._set_prop(CAPTURE_VIDEO, "visibility", "hidden")
        self._set_prop(CAPTURE_PERMISSION, "visibility", "visible")

    def _refresh_hud(self) -> None:
        rng = self._ctx.rng
        self._set_text(HUD_TOP_LEFT, "SYS.STATUS: ACTIVE\nCAM.FEED: ONLINE")
        self._set_text(HUD_TOP_RIGHT, f"{datetime.now():%H:%M:%S}\nREC")
        self._set_text(
            HUD_LEFT,
            f"SCAN.MODE\nBIOMETRIC\nCONF.LVL\n{rng.randint(92, 99)}%\nMATRIX\n0x{rng.getrandbits(16):04X}",
        )
        self._set_text(
            HUD_RIGHT,
            f"RANGE\n{rng.randint(10, 50)}cm\nLIGHT\n{rng.randint(60, 100)}%\nFOCUS\nLOCKED",
        )

    def _detach_request(self) -> None:
        # Left pending so a stream granted later is stopped on arrival.
        self._request = None

    def _abandon_request(self) -> None:
        request = self._request
        self._request = None
        if request is not None:
            request.cancel()

    def _stop_stream(self) -> None:
        stream = self._stream
        self._stream = None
        if stream is not None:
            stream.stop()
            logger.debug("capture_stream_stopped")
