"""Stage-controller lifecycle contract shared by the four stages."""

from __future__ import annotations

import logging
import random
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar

from gauntlet.app.ports import GatedHaptics, ParticlesPort
from gauntlet.app.state import ScreenId, SessionStore, StageId, stage_path
from gauntlet.infra.config import GauntletConfig
from sequencer.api.errors import MissingAnchorError
from sequencer.api.events import EventBus, Subscription
from sequencer.api.transitions import TransitionDirection, TransitionOrchestrator
from sequencer.runtime.scheduler import Scheduler, TaskScope
from sequencer.runtime.surfaces import Surface, SurfaceRegistry
from sequencer.runtime.tween import Timeline

logger = logging.getLogger(__name__)

type InputHandler = Callable[[Any], bool]
type HandoffHook = Callable[[], None]


class StagePhase(Enum):
    IDLE = "idle"
    ACTIVE = "active"
    VALIDATING = "validating"
    COMPLETED = "completed"


@dataclass(frozen=True, slots=True)
class StageContext:
    """Collaborators shared by every controller of one session."""

    store: SessionStore
    orchestrator: TransitionOrchestrator
    surfaces: SurfaceRegistry
    scheduler: Scheduler
    input_bus: EventBus
    haptics: GatedHaptics
    particles: ParticlesPort
    config: GauntletConfig
    rng: random.Random


class StageController(ABC):
    """Idle -> Active -> Validating -> Completed lifecycle for one stage.

    `init` binds anchors and subscribes input handlers once; calling it again
    before `destroy` is a no-op. Every timer the controller starts goes through
    its task scope, so `destroy` cancels all of them.
    """

    stage_id: ClassVar[StageId]
    screen_id: ClassVar[ScreenId]
    next_screen_id: ClassVar[ScreenId | None] = None
    required_anchors: ClassVar[tuple[str, ...]] = ()
    transition_direction: ClassVar[TransitionDirection] = TransitionDirection.LEFT

    def __init__(self, context: StageContext, *, on_handoff: HandoffHook | None = None) -> None:
        self._ctx = context
        self._on_handoff = on_handoff
        self._phase = StagePhase.IDLE
        self._scope = TaskScope(context.scheduler)
        self._subscriptions: list[Subscription] = []
        self._timelines: list[Timeline] = []
        self._bound = False
        self.completion_count = 0

    @property
    def phase(self) -> StagePhase:
        return self._phase

    @property
    def bound(self) -> bool:
        return self._bound

    @property
    def scope(self) -> TaskScope:
        return self._scope

    def set_handoff(self, hook: HandoffHook | None) -> None:
        self._on_handoff = hook

    def init(self) -> bool:
        """Bind anchors and input handlers. Returns whether the stage became active."""
        if self._bound:
            logger.debug("stage_init_skipped stage=%s reason=already_bound", self.stage_id)
            return False
        if self._phase is StagePhase.COMPLETED:
            logger.debug("stage_init_skipped stage=%s reason=completed", self.stage_id)
            return False
        try:
            self._ctx.surfaces.require(self.screen_id.value, *self._anchor_ids())
        except MissingAnchorError as exc:
            logger.warning(
                "stage_init_aborted stage=%s missing_anchors=%s",
                self.stage_id,
                ",".join(exc.anchor_ids),
            )
            return False
        for event_type, handler in self._input_handlers():
            self._subscriptions.append(self._ctx.input_bus.subscribe(event_type, handler))
        self._bound = True
        self._phase = StagePhase.ACTIVE
        logger.info("stage_active stage=%s", self.stage_id)
        self._on_activate()
        return True

    def handle_input(self, event: object) -> bool:
        """Route one event straight to this controller's handlers."""
        if not self._bound:
            return False
        for event_type, handler in self._input_handlers():
            if isinstance(event, event_type):
                return bool(handler(event))
        return False

    @abstractmethod
    def reset(self) -> None:
        """Discard in-progress interaction state without leaving the stage."""

    def destroy(self) -> None:
        """Cancel timers, unsubscribe handlers and release resources; idempotent."""
        self._scope.cancel_all()
        for subscription in self._subscriptions:
            self._ctx.input_bus.unsubscribe(subscription)
        self._subscriptions.clear()
        for timeline in self._timelines:
            timeline.kill()
        self._timelines.clear()
        self._release_resources()
        if self._bound:
            logger.debug("stage_destroyed stage=%s phase=%s", self.stage_id, self._phase.value)
        self._bound = False
        if self._phase is not StagePhase.COMPLETED:
            self._phase = StagePhase.IDLE

    def _anchor_ids(self) -> tuple[str, ...]:
        return self.required_anchors

    @abstractmethod
    def _input_handlers(self) -> tuple[tuple[type, InputHandler], ...]:
        """Return (event type, handler) pairs subscribed while bound."""

    def _on_activate(self) -> None:
        return None

    def _release_resources(self) -> None:
        return None

    def _record_completion(self) -> None:
        self._ctx.store.set(stage_path(self.stage_id, "completed"), True)

    def _celebrate(self) -> None:
        return None

    def _settle_seconds(self) -> float:
        return 0.0

    def _begin_validation(self) -> bool:
        if self._phase is not StagePhase.ACTIVE:
            return False
        self._phase = StagePhase.VALIDATING
        return True

    def _reject(self) -> None:
        if self._phase is StagePhase.VALIDATING:
            self._phase = StagePhase.ACTIVE

    def _complete(self) -> None:
        """Terminal success: record, celebrate, then advance after the settle delay."""
        if self._phase is StagePhase.COMPLETED:
            return
        self._phase = StagePhase.COMPLETED
        self.completion_count += 1
        self._record_completion()
        logger.info(
            "stage_completed stage=%s progress=%.0f",
            self.stage_id,
            self._ctx.store.get_progress(),
        )
        self._ctx.haptics.success()
        self._celebrate()
        if self._ctx.store.get("settings.particles_enabled"):
            self._ctx.particles.burst()
        self._schedule_advance()

    def _schedule_advance(self) -> None:
        self._scope.call_later(self._settle_seconds(), self._advance)

    def _advance(self) -> None:
        if self.next_screen_id is None:
            self._handoff()
            return
        timeline = self._track(
            self._ctx.orchestrator.goto(
                self.screen_id.value,
                self.next_screen_id.value,
                direction=self.transition_direction,
                duration=self._ctx.config.transition_duration_seconds,
                on_complete=self._handoff,
            )
        )
        if timeline is None:
            logger.error(
                "stage_advance_failed stage=%s target=%s",
                self.stage_id,
                self.next_screen_id,
            )

    def _handoff(self) -> None:
        if self._on_handoff is not None:
            self._on_handoff()

    def _track(self, timeline: Timeline | None) -> Timeline | None:
        if timeline is not None:
            self._timelines = [item for item in self._timelines if item.playing]
            self._timelines.append(timeline)
        return timeline

    def _surface(self, anchor_id: str) -> Surface | None:
        return self._ctx.surfaces.get(anchor_id)

    def _set_text(self, anchor_id: str, text: str) -> None:
        surface = self._surface(anchor_id)
        if surface is not None:
            surface.text = text

    def _set_prop(self, anchor_id: str, name: str, value: float | str) -> None:
        surface = self._surface(anchor_id)
        if surface is not None:
            surface.set_prop(name, value)

    def _add_class(self, anchor_id: str, *names: str) -> None:
        surface = self._surface(anchor_id)
        if surface is not None:
            surface.add_class(*names)

    def _remove_class(self, anchor_id: str, *names: str) -> None:
        surface = self._surface(anchor_id)
        if surface is not None:
            surface.remove_class(*names)
