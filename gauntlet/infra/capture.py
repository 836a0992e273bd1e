"""Capture-device implementations producing numpy RGB frames."""

from __future__ import annotations

import logging

import numpy as np

from gauntlet.app.errors import CapturePermissionDenied
from gauntlet.app.ports import CaptureStream
from sequencer.runtime.completion import Completion
from sequencer.runtime.scheduler import Scheduler

logger = logging.getLogger(__name__)

FRAME_HEIGHT = 480
FRAME_WIDTH = 640


def fallback_frame(height: int = FRAME_HEIGHT, width: int = FRAME_WIDTH) -> np.ndarray:
    """Static still used when no live frame can be committed."""
    frame = np.empty((height, width, 3), dtype=np.uint8)
    frame[...] = (6, 24, 32)
    top, left = height // 4, width // 4
    frame[top : height - top, left : width - left] = (0, 170, 170)
    return frame


class SyntheticCaptureStream:
    """Deterministic moving-gradient stream with sensor noise."""

    def __init__(self, *, height: int = FRAME_HEIGHT, width: int = FRAME_WIDTH, seed: int = 0) -> None:
        self._height = height
        self._width = width
        self._rng = np.random.default_rng(seed)
        self._frame_index = 0
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    @property
    def frames_read(self) -> int:
        return self._frame_index

    def read_frame(self) -> np.ndarray:
        if not self._active:
            raise RuntimeError("capture stream stopped")
        rows = np.linspace(0, 255, self._height, dtype=np.float32)[:, None]
        cols = np.linspace(0, 255, self._width, dtype=np.float32)[None, :]
        shift = float(self._frame_index % 256)
        base = np.stack(
            (
                np.broadcast_to((rows + shift) % 256, (self._height, self._width)),
                np.broadcast_to((cols + shift) % 256, (self._height, self._width)),
                np.full((self._height, self._width), 128.0, dtype=np.float32),
            ),
            axis=-1,
        )
        noise = self._rng.normal(0.0, 4.0, size=base.shape)
        self._frame_index += 1
        return np.clip(base + noise, 0, 255).astype(np.uint8)

    def stop(self) -> None:
        self._active = False


class SyntheticCaptureDevice:
    """Grants a synthetic stream after a fixed acquisition latency."""

    def __init__(
        self,
        scheduler: Scheduler,
        *,
        latency_seconds: float = 0.2,
        height: int = FRAME_HEIGHT,
        width: int = FRAME_WIDTH,
        seed: int = 0,
    ) -> None:
        self._scheduler = scheduler
        self._latency_seconds = latency_seconds
        self._height = height
        self._width = width
        self._seed = seed
        self.streams: list[SyntheticCaptureStream] = []

    def request_stream(self) -> Completion[CaptureStream]:
        completion: Completion[CaptureStream] = Completion()

        def _grant() -> None:
            stream = SyntheticCaptureStream(height=self._height, width=self._width, seed=self._seed)
            self.streams.append(stream)
            logger.debug("capture_stream_granted size=%dx%d", self._width, self._height)
            completion.resolve(stream)

        task_id = self._scheduler.call_later(self._latency_seconds, _grant)
        completion.add_cancel_hook(lambda: self._scheduler.cancel(task_id))
        return completion


class DeniedCaptureDevice:
    """Refuses access after a fixed prompt latency."""

    def __init__(self, scheduler: Scheduler, *, latency_seconds: float = 0.1) -> None:
        self._scheduler = scheduler
        self._latency_seconds = latency_seconds

    def request_stream(self) -> Completion[CaptureStream]:
        completion: Completion[CaptureStream] = Completion()
        task_id = self._scheduler.call_later(
            self._latency_seconds,
            lambda: completion.fail(CapturePermissionDenied("camera access denied")),
        )
        completion.add_cancel_hook(lambda: self._scheduler.cancel(task_id))
        return completion
