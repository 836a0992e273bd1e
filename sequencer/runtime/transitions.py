"""Screen transition executor and visual-effect primitives."""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Iterable, Mapping

from sequencer.api.state import StateStore
from sequencer.api.transitions import (
    CompletionHook,
    ElementRef,
    TransitionDirection,
    TransitionProfile,
    TransitionRequest,
    default_transition_profiles,
)
from sequencer.runtime.completion import Completion
from sequencer.runtime.debug_config import load_debug_config
from sequencer.runtime.scheduler import Scheduler
from sequencer.runtime.surfaces import PropValue, Surface, SurfaceRegistry
from sequencer.runtime.tween import Timeline, Tween

logger = logging.getLogger(__name__)

DEFAULT_FRAME_INTERVAL = 1.0 / 60.0
FLASH_OVERLAY_ID = "flash-overlay"

ENTRY_PRESETS: dict[str, tuple[dict[str, PropValue], dict[str, PropValue], str]] = {
    "fade_up": ({"opacity": 0.0, "y": 30.0}, {"opacity": 1.0, "y": 0.0}, "power2.out"),
    "fade_down": ({"opacity": 0.0, "y": -30.0}, {"opacity": 1.0, "y": 0.0}, "power2.out"),
    "fade_left": ({"opacity": 0.0, "x": 30.0}, {"opacity": 1.0, "x": 0.0}, "power2.out"),
    "fade_right": ({"opacity": 0.0, "x": -30.0}, {"opacity": 1.0, "x": 0.0}, "power2.out"),
    "scale": ({"opacity": 0.0, "scale": 0.8}, {"opacity": 1.0, "scale": 1.0}, "power2.out"),
    "pop": ({"opacity": 0.0, "scale": 0.0}, {"opacity": 1.0, "scale": 1.0}, "back.out(1.7)"),
}

EXIT_PRESETS: dict[str, dict[str, PropValue]] = {
    "fade_up": {"opacity": 0.0, "y": -30.0},
    "fade_down": {"opacity": 0.0, "y": 30.0},
    "fade_left": {"opacity": 0.0, "x": -30.0},
    "fade_right": {"opacity": 0.0, "x": 30.0},
    "scale": {"opacity": 0.0, "scale": 0.8},
}


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


class RuntimeTransitionOrchestrator:
    """Plays declarative transition profiles and one-off effects on the scheduler."""

    def __init__(
        self,
        *,
        surfaces: SurfaceRegistry,
        store: StateStore[object],
        scheduler: Scheduler,
        frame_interval: float = DEFAULT_FRAME_INTERVAL,
        screen_path: str = "current_screen",
        profiles: Mapping[TransitionDirection, TransitionProfile] | None = None,
    ) -> None:
        if frame_interval <= 0.0:
            raise ValueError("frame_interval must be > 0")
        self._surfaces = surfaces
        self._store = store
        self._scheduler = scheduler
        self._frame_interval = frame_interval
        self._screen_path = screen_path
        self._profiles = dict(profiles) if profiles is not None else default_transition_profiles()
        self._trace = load_debug_config().trace_transitions

    @property
    def scheduler(self) -> Scheduler:
        return self._scheduler

    @property
    def surfaces(self) -> SurfaceRegistry:
        return self._surfaces

    def goto(
        self,
        from_screen_id: str,
        to_screen_id: str,
        *,
        direction: TransitionDirection | str = TransitionDirection.LEFT,
        duration: float = 0.6,
        on_complete: CompletionHook | None = None,
    ) -> Timeline | None:
        return self.run(
            TransitionRequest(
                from_screen_id=from_screen_id,
                to_screen_id=to_screen_id,
                direction=self._direction(direction),
                duration=duration,
                on_complete=on_complete,
            )
        )

    def run(self, request: TransitionRequest) -> Timeline | None:
        """Exit the outgoing screen, overlap the entry, then record the new screen."""
        from_el = self._surfaces.get(request.from_screen_id)
        to_el = self._surfaces.get(request.to_screen_id)
        if from_el is None or to_el is None:
            logger.error(
                "screen_not_found from=%s to=%s",
                request.from_screen_id,
                request.to_screen_id,
            )
            return None
        profile = self._profiles.get(request.direction) or self._profiles[TransitionDirection.FADE]
        finished = False

        def _finish() -> None:
            nonlocal finished
            if finished:
                return
            finished = True
            from_el.remove_class("active")
            self._store.set(self._screen_path, request.to_screen_id)
            if request.on_complete is not None:
                request.on_complete()

        timeline = Timeline(
            on_complete=_finish,
            label=f"goto:{request.from_screen_id}->{request.to_screen_id}",
        )
        to_el.set_prop("visibility", "visible")
        to_el.set_prop("opacity", 0.0)
        for step in profile.exit_steps:
            timeline.to(from_el, step.props, duration=step.seconds(request.duration), ease=step.ease)
        if profile.after_exit:
            timeline.set(from_el, profile.after_exit)
        timeline.from_to(
            to_el,
            profile.enter_from,
            profile.enter_to,
            duration=profile.enter_seconds(request.duration),
            ease=profile.enter_ease,
            offset=profile.overlap,
        )
        to_el.add_class("active")
        log = logger.info if self._trace else logger.debug
        log(
            "transition_start from=%s to=%s direction=%s duration=%.3f",
            request.from_screen_id,
            request.to_screen_id,
            profile.direction.value,
            timeline.duration,
        )
        timeline.play(self._scheduler, frame_interval=self._frame_interval)
        return timeline

    def tween(
        self,
        element: ElementRef,
        props: dict[str, PropValue],
        *,
        duration: float,
        ease: str = "power2.out",
        delay: float = 0.0,
        stagger: float = 0.0,
    ) -> Timeline | None:
        targets = self._resolve(element)
        if not targets:
            return None
        timeline = Timeline(label="tween")
        for index, target in enumerate(targets):
            timeline.add_at(
                Tween(target, props, duration=duration, ease=ease),
                delay + index * stagger,
            )
        return self._play(timeline)

    def animate_in(
        self,
        elements: ElementRef,
        *,
        type: str = "fade_up",
        duration: float = 0.5,
        delay: float = 0.0,
        stagger: float = 0.1,
    ) -> Timeline | None:
        targets = self._resolve(elements)
        if not targets:
            return None
        from_, to, ease = ENTRY_PRESETS.get(type, ENTRY_PRESETS["fade_up"])
        timeline = Timeline(label=f"animate_in:{type}")
        for index, target in enumerate(targets):
            timeline.add_at(
                Tween(target, to, from_=from_, duration=duration, ease=ease),
                delay + index * stagger,
            )
        return self._play(timeline)

    def animate_out(
        self,
        elements: ElementRef,
        *,
        type: str = "fade_up",
        duration: float = 0.3,
        delay: float = 0.0,
        stagger: float = 0.0,
    ) -> Timeline | None:
        targets = self._resolve(elements)
        if not targets:
            return None
        props = EXIT_PRESETS.get(type, EXIT_PRESETS["fade_up"])
        timeline = Timeline(label=f"animate_out:{type}")
        for index, target in enumerate(targets):
            timeline.add_at(
                Tween(target, props, duration=duration, ease="power2.in"),
                delay + index * stagger,
            )
        return self._play(timeline)

    def pulse(
        self,
        element: ElementRef,
        *,
        scale: float = 1.1,
        duration: float = 0.3,
        repeat: int = 0,
    ) -> Timeline | None:
        """Scale out and back `repeat + 1` times."""
        if repeat < 0:
            raise ValueError("repeat must be >= 0")
        targets = self._resolve(element)
        if not targets:
            return None
        timeline = Timeline(label="pulse")
        for target in targets:
            timeline.add_at(
                Tween(
                    target,
                    {"scale": scale},
                    duration=duration,
                    ease="power2.inOut",
                    repeat=repeat * 2 + 1,
                    yoyo=True,
                ),
                0.0,
            )
        return self._play(timeline)

    def shake(
        self,
        element: ElementRef,
        *,
        intensity: float = 5.0,
        duration: float = 0.5,
    ) -> Timeline | None:
        targets = self._resolve(element)
        if not targets:
            return None
        origins = [(target, target.number("x")) for target in targets]

        def _restore() -> None:
            for target, origin in origins:
                target.set_prop("x", origin)

        timeline = Timeline(on_complete=_restore, label="shake")
        timeline.on_kill(_restore)
        for target, origin in origins:
            timeline.add_at(
                Tween(
                    target,
                    {"x": origin + intensity},
                    duration=duration / 10.0,
                    ease="power2.inOut",
                    repeat=10,
                    yoyo=True,
                ),
                0.0,
            )
        return self._play(timeline)

    def glow_pulse(
        self,
        element: ElementRef,
        *,
        color: str = "#00FFFF",
        duration: float = 1.0,
        repeat: int = 1,
    ) -> Timeline | None:
        if repeat < 0:
            raise ValueError("glow_pulse repeat must be >= 0")
        targets = self._resolve(element)
        if not targets:
            return None
        timeline = Timeline(label="glow_pulse")
        for target in targets:
            target.set_prop("glow_color", color)
            timeline.add_at(
                Tween(
                    target,
                    {"glow": 1.0},
                    duration=duration,
                    ease="power2.inOut",
                    repeat=repeat * 2 + 1,
                    yoyo=True,
                ),
                0.0,
            )
        return self._play(timeline)

    def flash(self, color: str = "#ffffff", duration: float = 0.5) -> Timeline | None:
        overlay = self._surfaces.get(FLASH_OVERLAY_ID)
        if overlay is None:
            logger.debug("flash_skipped reason=no_overlay")
            return None
        overlay.set_prop("background", color)
        timeline = Timeline(label="flash")
        timeline.to(overlay, {"opacity": 1.0}, duration=0.1)
        timeline.to(overlay, {"opacity": 0.0}, duration=max(0.0, duration - 0.1))
        return self._play(timeline)

    def typewriter(
        self,
        element: ElementRef,
        text: str,
        *,
        speed: float = 0.05,
        delay: float = 0.0,
    ) -> Completion[None]:
        """Append one character every `speed` seconds; cancel through the completion."""
        completion: Completion[None] = Completion()
        targets = self._resolve(element)
        if not targets:
            completion.resolve()
            return completion
        target = targets[0]
        target.text = ""
        tasks: list[int] = []
        index = 0

        def _type_next() -> None:
            nonlocal index
            target.text += text[index]
            index += 1
            if index >= len(text):
                self._scheduler.cancel(tasks[-1])
                completion.resolve()

        def _begin() -> None:
            if not text:
                completion.resolve()
                return
            tasks.append(self._scheduler.call_every(speed, _type_next))

        def _cancel() -> None:
            for task_id in tasks:
                self._scheduler.cancel(task_id)

        tasks.append(self._scheduler.call_later(delay, _begin))
        completion.add_cancel_hook(_cancel)
        return completion

    def count_to(
        self,
        element: ElementRef,
        start: float,
        end: float,
        *,
        duration: float = 1.0,
        prefix: str = "",
        suffix: str = "",
        formatter: Callable[[float], str] | None = None,
    ) -> Timeline | None:
        targets = self._resolve(element)
        if not targets:
            return None
        target = targets[0]

        def _format(value: float) -> str:
            if formatter is not None:
                return formatter(value)
            return f"{prefix}{round_half_up(value)}{suffix}"

        def _update(tween: Tween) -> None:
            value = tween.values["value"]
            target.text = _format(float(value) if isinstance(value, (int, float)) else end)

        timeline = Timeline(label="count_to")
        timeline.add(
            Tween(
                None,
                {"value": end},
                from_={"value": start},
                duration=duration,
                ease="power2.out",
                on_update=_update,
            )
        )
        return self._play(timeline)

    def _play(self, timeline: Timeline) -> Timeline:
        timeline.play(self._scheduler, frame_interval=self._frame_interval)
        return timeline

    def _resolve(self, element: ElementRef) -> tuple[Surface, ...]:
        if isinstance(element, Surface):
            return (element,)
        if isinstance(element, str):
            surface = self._surfaces.get(element)
            if surface is not None:
                return (surface,)
            matches = self._surfaces.select(element)
            if not matches:
                logger.debug("effect_target_missing target=%s", element)
            return matches
        if isinstance(element, Iterable):
            return tuple(element)
        return ()

    @staticmethod
    def _direction(value: TransitionDirection | str) -> TransitionDirection:
        try:
            return TransitionDirection(value)
        except ValueError:
            logger.warning("unknown_transition_direction direction=%s fallback=fade", value)
            return TransitionDirection.FADE


TransitionOrchestrator = RuntimeTransitionOrchestrator
