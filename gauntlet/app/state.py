"""Session state record and the store that owns it."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import StrEnum

from sequencer.api.events import TopicEmitter
from sequencer.api.state import iter_leaf_paths
from sequencer.runtime.state_store import RuntimeStateStore


class ScreenId(StrEnum):
    INTRO = "intro-screen"
    SCAN = "scan-screen"
    ANSWER = "answer-screen"
    PLACEMENT = "placement-screen"
    CAPTURE = "capture-screen"


class StageId(StrEnum):
    SCAN = "scan"
    ANSWER = "answer"
    PLACEMENT = "placement"
    CAPTURE = "capture"


STAGE_ORDER: tuple[StageId, ...] = (StageId.SCAN, StageId.ANSWER, StageId.PLACEMENT, StageId.CAPTURE)

STAGE_SCREENS: dict[StageId, ScreenId] = {
    StageId.SCAN: ScreenId.SCAN,
    StageId.ANSWER: ScreenId.ANSWER,
    StageId.PLACEMENT: ScreenId.PLACEMENT,
    StageId.CAPTURE: ScreenId.CAPTURE,
}


@dataclass(slots=True)
class ScanRecord:
    completed: bool = False
    locked: bool = False


@dataclass(slots=True)
class AnswerRecord:
    completed: bool = False
    # Extra ring count; kept in the schema, no success or failure path reads it.
    extra: int = 0


@dataclass(slots=True)
class PlacementRecord:
    completed: bool = False
    placed_count: int = 0


@dataclass(slots=True)
class CaptureRecord:
    completed: bool = False
    verified: bool = False


@dataclass(slots=True)
class StageRecords:
    scan: ScanRecord = field(default_factory=ScanRecord)
    answer: AnswerRecord = field(default_factory=AnswerRecord)
    placement: PlacementRecord = field(default_factory=PlacementRecord)
    capture: CaptureRecord = field(default_factory=CaptureRecord)


@dataclass(slots=True)
class Permissions:
    motion: bool = False
    camera: bool = False


@dataclass(slots=True)
class Sensors:
    alpha: float = 0.0
    beta: float = 0.0
    gamma: float = 0.0


@dataclass(slots=True)
class Settings:
    sound_enabled: bool = True
    vibration_enabled: bool = True
    particles_enabled: bool = True


@dataclass(slots=True)
class AppStateData:
    """Whole-session state. Mutated only through SessionStore.set."""

    current_screen: ScreenId = ScreenId.INTRO
    stages: StageRecords = field(default_factory=StageRecords)
    permissions: Permissions = field(default_factory=Permissions)
    sensors: Sensors = field(default_factory=Sensors)
    settings: Settings = field(default_factory=Settings)


STATE_PATHS: frozenset[str] = frozenset(iter_leaf_paths(AppStateData()))


def stage_path(stage: StageId, name: str) -> str:
    """Return dotted path of one stage record field."""
    return f"stages.{stage.value}.{name}"


class SessionStore(RuntimeStateStore[AppStateData]):
    """Session store: resets stages and current screen, reports stage progress."""

    def __init__(self, *, emitter: TopicEmitter | None = None) -> None:
        super().__init__(
            AppStateData,
            emitter=emitter,
            reset_fields=("current_screen", "stages"),
            coercers={"current_screen": ScreenId},
        )

    @property
    def current_screen(self) -> ScreenId:
        return self.peek().current_screen

    def stage_completed(self, stage: StageId) -> bool:
        return bool(self.get(stage_path(stage, "completed")))

    def completed_count(self) -> int:
        stages = self.peek().stages
        return sum(1 for item in fields(stages) if getattr(stages, item.name).completed)

    def get_progress(self) -> float:
        """Return percentage of completed stages (multiples of 25)."""
        return 100.0 * self.completed_count() / len(STAGE_ORDER)


def create_session_store(*, emitter: TopicEmitter | None = None) -> SessionStore:
    return SessionStore(emitter=emitter)
