from __future__ import annotations

import logging

import numpy as np

from gauntlet.app.controller import StagePhase
from gauntlet.app.errors import CapturePermissionDenied
from gauntlet.app.events import ButtonPressed
from gauntlet.app.state import StageId, stage_path
from gauntlet.infra.capture import DeniedCaptureDevice, SyntheticCaptureDevice
from gauntlet.ui.layout import (
    CAPTURE_CHECKMARK,
    CAPTURE_FALLBACK,
    CAPTURE_START,
    CAPTURE_SUCCESS,
    CAPTURE_VERIFY,
    CAPTURE_VIDEO,
    HUD_LEFT,
)
from sequencer.runtime.scheduler import Scheduler


def test_granted_stream_feeds_the_committed_still(session_factory, stream_factory, manual_device) -> None:
    session = session_factory(capture_device=manual_device)
    capture = session.capture
    capture.init()
    session.dispatch(ButtonPressed(CAPTURE_START))
    stream = stream_factory()
    manual_device.requests[0].resolve(stream)

    assert capture.stream is stream
    assert session.store.get("permissions.camera") is True
    assert session.surfaces.get(CAPTURE_VIDEO).prop("visibility") == "visible"

    session.dispatch(ButtonPressed(CAPTURE_VERIFY))
    session.advance(1.5)

    assert capture.phase is StagePhase.COMPLETED
    assert capture.fallback_active is False
    assert isinstance(capture.still, np.ndarray)
    assert capture.still.shape == (4, 6, 3)
    assert stream.active is False
    assert session.store.get(stage_path(StageId.CAPTURE, "verified")) is True
    assert session.surfaces.get(CAPTURE_SUCCESS).has_class("show")
    assert session.surfaces.get(CAPTURE_CHECKMARK).has_class("animate")


def test_permission_timeout_falls_back_and_late_stream_is_stopped(
    session_factory, stream_factory, manual_device, caplog
) -> None:
    session = session_factory(capture_device=manual_device)
    capture = session.capture
    capture.init()
    capture.start_capture()

    session.advance(9.9)
    assert capture.acquiring is True
    assert capture.fallback_active is False

    session.advance(0.2)
    assert capture.acquiring is False
    assert capture.fallback_active is True
    assert session.surfaces.get(CAPTURE_FALLBACK).has_class("visible")

    late = stream_factory()
    with caplog.at_level(logging.INFO, logger="gauntlet.app.stages.capture"):
        manual_device.requests[0].resolve(late)

    assert late.stop_calls == 1
    assert capture.stream is None
    assert "capture_stream_discarded" in caplog.text


def test_grant_after_verify_while_acquiring_is_stopped(session_factory, stream_factory, manual_device) -> None:
    session = session_factory(capture_device=manual_device)
    capture = session.capture
    capture.init()
    capture.start_capture()
    capture.verify()
    session.advance(1.5)

    assert capture.phase is StagePhase.COMPLETED
    assert capture.acquiring is False
    assert session.sequence_completed is True

    late = stream_factory()
    manual_device.requests[0].resolve(late)

    assert late.stop_calls == 1
    assert late.active is False
    assert capture.stream is None
    assert session.store.get("permissions.camera") is False

    session.advance(15.0)
    assert capture.completion_count == 1


def test_denied_permission_uses_fallback_still(session_factory) -> None:
    scheduler = Scheduler()
    session = session_factory(capture_device=DeniedCaptureDevice(scheduler), scheduler=scheduler)
    capture = session.capture
    capture.init()
    capture.start_capture()
    session.advance(0.5)

    assert capture.fallback_active is True
    assert session.store.get("permissions.camera") is False

    capture.verify()
    session.advance(1.5)

    assert capture.phase is StagePhase.COMPLETED
    assert isinstance(capture.still, np.ndarray)
    assert capture.still.ndim == 3


def test_device_failure_before_timeout_cancels_timer(session_factory, manual_device) -> None:
    session = session_factory(capture_device=manual_device)
    capture = session.capture
    capture.init()
    capture.start_capture()
    manual_device.requests[0].fail(CapturePermissionDenied("no"))
    active_after_fail = capture.scope.active_count

    session.advance(11.0)

    assert capture.fallback_active is True
    # Only the HUD ticker stays scheduled.
    assert active_after_fail == 1


def test_missing_device_goes_straight_to_fallback(session) -> None:
    capture = session.capture
    capture.init()

    assert capture.start_capture() is True
    assert capture.fallback_active is True
    assert capture.acquiring is False


def test_double_verify_completes_once(session, particles) -> None:
    capture = session.capture
    capture.init()

    assert capture.verify() is True
    assert capture.verify() is False
    session.dispatch(ButtonPressed(CAPTURE_VERIFY))
    session.advance(2.0)

    assert capture.completion_count == 1
    assert particles.count("burst") == 1
    assert session.sequence_completed is True


def test_synthetic_device_grants_after_latency(session_factory) -> None:
    scheduler = Scheduler()
    device = SyntheticCaptureDevice(scheduler, latency_seconds=0.2, height=8, width=12)
    session = session_factory(capture_device=device, scheduler=scheduler)
    capture = session.capture
    capture.init()
    capture.start_capture()
    session.advance(0.3)

    assert capture.stream is device.streams[0]

    capture.verify()
    session.advance(1.2)

    assert capture.still.shape == (8, 12, 3)
    assert capture.still.dtype == np.uint8
    assert device.streams[0].active is False


def test_destroy_cancels_pending_request_and_hud(session_factory, manual_device) -> None:
    session = session_factory(capture_device=manual_device)
    capture = session.capture
    capture.init()
    capture.start_capture()
    hud_before = session.surfaces.get(HUD_LEFT).text

    capture.destroy()

    assert manual_device.requests[0].cancelled is True
    assert capture.scope.active_count == 0
    assert capture.phase is StagePhase.IDLE
    assert hud_before.startswith("SCAN.MODE")
