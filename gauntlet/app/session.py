"""Session composition: store, orchestrator, input bus and the stage hand-off chain."""

from __future__ import annotations

import logging
import random

from gauntlet.app.controller import HandoffHook, StageContext, StageController
from gauntlet.app.events import ButtonPressed
from gauntlet.app.ports import CaptureDevice, GatedHaptics, HapticsBackend, NullParticles, ParticlesPort
from gauntlet.app.stages.answer import AnswerStage
from gauntlet.app.stages.capture import CaptureStage
from gauntlet.app.stages.placement import PlacementStage
from gauntlet.app.stages.scan import ScanStage
from gauntlet.app.state import STAGE_ORDER, STAGE_SCREENS, ScreenId, SessionStore
from gauntlet.infra.config import GauntletConfig
from gauntlet.ui.layout import (
    INTRO_START_BUTTON,
    PARTICLES_CONTAINER,
    STAGE_DOT_PREFIX,
    TOP_PROGRESS_FILL,
    build_default_surfaces,
)
from sequencer.api.events import Subscription
from sequencer.api.state import CHANGE_TOPIC, ChangeEvent
from sequencer.api.transitions import TransitionDirection, TransitionOrchestrator
from sequencer.runtime.debug_config import load_debug_config
from sequencer.runtime.events import RuntimeEventBus, RuntimeTopicEmitter
from sequencer.runtime.scheduler import Scheduler
from sequencer.runtime.surfaces import SurfaceRegistry
from sequencer.runtime.transitions import RuntimeTransitionOrchestrator
from sequencer.runtime.tween import Timeline

logger = logging.getLogger(__name__)

INTRO_SEQUENCE: tuple[tuple[str, str, float], ...] = (
    ("intro-logo", "scale", 0.2),
    ("intro-classification", "fade_up", 0.4),
    ("intro-title", "fade_up", 0.6),
    ("intro-subtitle", "fade_up", 0.8),
    (INTRO_START_BUTTON, "fade_up", 1.0),
)


class GauntletSession:
    """Owns every collaborator of one run and chains the stages intro -> scan -> ... -> capture."""

    def __init__(
        self,
        *,
        config: GauntletConfig | None = None,
        surfaces: SurfaceRegistry | None = None,
        capture_device: CaptureDevice | None = None,
        haptics_backend: HapticsBackend | None = None,
        particles: ParticlesPort | None = None,
        rng: random.Random | None = None,
        scheduler: Scheduler | None = None,
    ) -> None:
        self.config = config if config is not None else GauntletConfig()
        self.scheduler = scheduler if scheduler is not None else Scheduler()
        self.surfaces = (
            surfaces if surfaces is not None else build_default_surfaces(token_count=self.config.token_count)
        )
        self.store = SessionStore(emitter=RuntimeTopicEmitter())
        self.orchestrator: TransitionOrchestrator = RuntimeTransitionOrchestrator(
            surfaces=self.surfaces,
            store=self.store,
            scheduler=self.scheduler,
            frame_interval=self.config.frame_interval_seconds,
        )
        self.input_bus = RuntimeEventBus()
        self.haptics = GatedHaptics(self.store, haptics_backend)
        self.particles = particles if particles is not None else NullParticles()
        self.rng = rng if rng is not None else random.Random(self.config.seed)
        self._capture_device = capture_device
        self._context = StageContext(
            store=self.store,
            orchestrator=self.orchestrator,
            surfaces=self.surfaces,
            scheduler=self.scheduler,
            input_bus=self.input_bus,
            haptics=self.haptics,
            particles=self.particles,
            config=self.config,
            rng=self.rng,
        )
        self._trace_input = load_debug_config().trace_input
        self._intro_subscription: Subscription | None = None
        self._intro_timeline: Timeline | None = None
        self._intro_started = False
        self._started = False
        self.sequence_completed = False
        self._build_controllers()

    @property
    def controllers(self) -> tuple[StageController, ...]:
        return (self.scan, self.answer, self.placement, self.capture)

    @property
    def active_stage(self) -> StageController | None:
        for controller in self.controllers:
            if controller.bound:
                return controller
        return None

    def start(self) -> None:
        """Show the intro and wait for its start button."""
        if self._started:
            return
        self._started = True
        if self.store.get("settings.particles_enabled"):
            self.particles.init(PARTICLES_CONTAINER)
        self.store.on(CHANGE_TOPIC, self._on_state_change)
        self._show_intro()
        logger.info("session_started seed=%s", self.config.seed)

    def dispatch(self, event: object) -> int:
        """Publish one input event on the bus; returns the number of handlers invoked."""
        if self._trace_input:
            logger.info("input_event event=%r", event)
        return self.input_bus.publish(event)

    def advance(self, seconds: float) -> int:
        return self.scheduler.advance(seconds)

    def reset(self) -> None:
        """Tear the flow back down to the intro with fresh controllers."""
        self._stop_intro_transition()
        for controller in self.controllers:
            controller.destroy()
        self.store.reset()
        for screen in ScreenId:
            surface = self.surfaces.get(screen.value)
            if surface is None:
                continue
            surface.remove_class("active")
            surface.clear_props("x", "y", "scale", "rotation")
            surface.set_prop("visibility", "hidden")
            surface.set_prop("opacity", 0.0)
        self.sequence_completed = False
        self._intro_started = False
        self._build_controllers()
        self._refresh_progress()
        if self._started:
            self._show_intro()
        logger.info("session_reset")

    def teardown(self) -> None:
        self._stop_intro_transition()
        for controller in self.controllers:
            controller.destroy()
        if self._intro_subscription is not None:
            self.input_bus.unsubscribe(self._intro_subscription)
            self._intro_subscription = None
        if self._started:
            self.store.off(CHANGE_TOPIC, self._on_state_change)
            self.particles.destroy()
            self._started = False
        logger.info("session_teardown progress=%.0f", self.store.get_progress())

    def _build_controllers(self) -> None:
        self.scan = ScanStage(self._context)
        self.answer = AnswerStage(self._context)
        self.placement = PlacementStage(self._context)
        self.capture = CaptureStage(self._context, device=self._capture_device)
        chain = self.controllers
        for current, following in zip(chain, chain[1:]):
            current.set_handoff(self._hand_off_hook(current, following))
        self.capture.set_handoff(self._on_sequence_complete)

    def _hand_off_hook(self, current: StageController, following: StageController) -> HandoffHook:
        def _hand_off() -> None:
            current.destroy()
            following.init()

        return _hand_off

    def _show_intro(self) -> None:
        intro = self.surfaces.get(ScreenId.INTRO.value)
        if intro is None:
            logger.error("screen_not_found screen=%s", ScreenId.INTRO.value)
            return
        intro.add_class("active")
        intro.set_prop("visibility", "visible")
        intro.set_prop("opacity", 1.0)
        for anchor, kind, delay in INTRO_SEQUENCE:
            self.orchestrator.animate_in(anchor, type=kind, delay=delay)
        if self._intro_subscription is None:
            self._intro_subscription = self.input_bus.subscribe(ButtonPressed, self._on_intro_button)

    def _on_intro_button(self, event: ButtonPressed) -> None:
        if event.button_id != INTRO_START_BUTTON or self._intro_started:
            return
        self._intro_started = True
        self.haptics.medium()
        self._intro_timeline = timeline = self.orchestrator.goto(
            ScreenId.INTRO.value,
            ScreenId.SCAN.value,
            direction=TransitionDirection.LEFT,
            duration=self.config.transition_duration_seconds,
            on_complete=self.scan.init,
        )
        if timeline is None:
            self._intro_started = False

    def _stop_intro_transition(self) -> None:
        if self._intro_timeline is not None:
            self._intro_timeline.kill()
            self._intro_timeline = None

    def _on_sequence_complete(self) -> None:
        self.sequence_completed = True
        logger.info("sequence_complete progress=%.0f", self.store.get_progress())

    def _on_state_change(self, event: ChangeEvent) -> None:
        self._refresh_progress()

    def _refresh_progress(self) -> None:
        fill = self.surfaces.get(TOP_PROGRESS_FILL)
        if fill is not None:
            fill.set_prop("width", self.store.get_progress())
        current = self.store.current_screen
        for index, stage in enumerate(STAGE_ORDER):
            dot = self.surfaces.get(f"{STAGE_DOT_PREFIX}{index}")
            if dot is None:
                continue
            dot.remove_class("active", "completed")
            if self.store.stage_completed(stage):
                dot.add_class("completed")
            elif current is STAGE_SCREENS[stage]:
                dot.add_class("active")
