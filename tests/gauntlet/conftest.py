from __future__ import annotations

import random

import numpy as np
import pytest

from gauntlet.app.ports import CaptureStream, RecordingHapticsBackend, RecordingParticles
from gauntlet.app.session import GauntletSession
from gauntlet.infra.config import GauntletConfig
from sequencer.runtime.completion import Completion


class FakeCaptureStream:
    def __init__(self, shape: tuple[int, int, int] = (4, 6, 3)) -> None:
        self._shape = shape
        self.active = True
        self.stop_calls = 0

    def read_frame(self) -> np.ndarray:
        return np.full(self._shape, 200, dtype=np.uint8)

    def stop(self) -> None:
        self.active = False
        self.stop_calls += 1


class ManualCaptureDevice:
    """Hands out completions the test settles by hand (or never)."""

    def __init__(self) -> None:
        self.requests: list[Completion[CaptureStream]] = []

    def request_stream(self) -> Completion[CaptureStream]:
        completion: Completion[CaptureStream] = Completion()
        self.requests.append(completion)
        return completion


@pytest.fixture
def config() -> GauntletConfig:
    return GauntletConfig(seed=7)


@pytest.fixture
def haptics_backend() -> RecordingHapticsBackend:
    return RecordingHapticsBackend()


@pytest.fixture
def particles() -> RecordingParticles:
    return RecordingParticles()


@pytest.fixture
def session_factory(config: GauntletConfig, haptics_backend: RecordingHapticsBackend, particles: RecordingParticles):
    def _make(**overrides) -> GauntletSession:
        options = {
            "config": config,
            "haptics_backend": haptics_backend,
            "particles": particles,
            "rng": random.Random(7),
        }
        options.update(overrides)
        return GauntletSession(**options)

    return _make


@pytest.fixture
def session(session_factory) -> GauntletSession:
    return session_factory()


@pytest.fixture
def manual_device() -> ManualCaptureDevice:
    return ManualCaptureDevice()


@pytest.fixture
def stream_factory():
    return FakeCaptureStream
