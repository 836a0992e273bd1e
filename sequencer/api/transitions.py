"""Public transition orchestration API contracts."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from sequencer.runtime.completion import Completion
    from sequencer.runtime.surfaces import PropValue, Surface
    from sequencer.runtime.tween import Timeline

type CompletionHook = Callable[[], None]
type ElementRef = Surface | str | Iterable[Surface]


class TransitionDirection(StrEnum):
    LEFT = "left"
    RIGHT = "right"
    UP = "up"
    DOWN = "down"
    FADE = "fade"
    ZOOM = "zoom"
    GLITCH = "glitch"


@dataclass(frozen=True, slots=True)
class TransitionRequest:
    """One screen hand-off request."""

    from_screen_id: str
    to_screen_id: str
    direction: TransitionDirection = TransitionDirection.LEFT
    duration: float = 0.6
    on_complete: CompletionHook | None = None


@dataclass(frozen=True, slots=True)
class ExitStep:
    """One exit tween applied to the outgoing surface.

    Runs for `fixed_duration` seconds when given, otherwise for
    `duration_factor` times the requested transition duration.
    """

    props: dict[str, PropValue]
    duration_factor: float = 1.0
    fixed_duration: float | None = None
    ease: str = "power2.inOut"

    def seconds(self, duration: float) -> float:
        if self.fixed_duration is not None:
            return self.fixed_duration
        return duration * self.duration_factor


@dataclass(frozen=True, slots=True)
class TransitionProfile:
    """Declarative enter/exit parameters for one transition direction."""

    direction: TransitionDirection
    exit_steps: tuple[ExitStep, ...]
    enter_from: dict[str, PropValue]
    enter_to: dict[str, PropValue]
    enter_duration_factor: float = 1.0
    enter_fixed_duration: float | None = None
    enter_ease: str = "power2.out"
    overlap: float = 0.0
    after_exit: dict[str, PropValue] = field(default_factory=dict)

    def enter_seconds(self, duration: float) -> float:
        if self.enter_fixed_duration is not None:
            return self.enter_fixed_duration
        return duration * self.enter_duration_factor


class TransitionOrchestrator(Protocol):
    """Screen hand-off executor plus reusable effect primitives."""

    def goto(
        self,
        from_screen_id: str,
        to_screen_id: str,
        *,
        direction: TransitionDirection | str = TransitionDirection.LEFT,
        duration: float = 0.6,
        on_complete: CompletionHook | None = None,
    ) -> Timeline | None:
        """Animate from one screen to another; None when a screen is missing."""

    def run(self, request: TransitionRequest) -> Timeline | None:
        """Execute a prepared transition request."""

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
        """Animate props on one or more surfaces."""

    def animate_in(self, elements: ElementRef, **options: object) -> Timeline | None:
        """Play an entry preset."""

    def animate_out(self, elements: ElementRef, **options: object) -> Timeline | None:
        """Play an exit preset."""

    def pulse(self, element: ElementRef, **options: object) -> Timeline | None:
        """Scale pulse."""

    def shake(self, element: ElementRef, **options: object) -> Timeline | None:
        """Horizontal shake restoring the original position."""

    def glow_pulse(self, element: ElementRef, **options: object) -> Timeline | None:
        """Bounded glow pulse."""

    def flash(self, color: str = "#ffffff", duration: float = 0.5) -> Timeline | None:
        """Full-screen flash overlay."""

    def typewriter(self, element: ElementRef, text: str, **options: object) -> Completion[None]:
        """Reveal text one character at a time."""

    def count_to(self, element: ElementRef, start: float, end: float, **options: object) -> Timeline | None:
        """Animate numeric text from start to end."""


def default_transition_profiles() -> dict[TransitionDirection, TransitionProfile]:
    """Return the built-in profile table keyed by direction."""
    slide_exit = {
        TransitionDirection.LEFT: ("x", -100.0),
        TransitionDirection.RIGHT: ("x", 100.0),
        TransitionDirection.UP: ("y", -100.0),
        TransitionDirection.DOWN: ("y", 100.0),
    }
    profiles: dict[TransitionDirection, TransitionProfile] = {}
    for direction, (axis, distance) in slide_exit.items():
        profiles[direction] = TransitionProfile(
            direction=direction,
            exit_steps=(ExitStep({axis: distance, "opacity": 0.0}),),
            enter_from={axis: -distance, "opacity": 0.0},
            enter_to={axis: 0.0, "opacity": 1.0},
            overlap=-0.3,
        )
    profiles[TransitionDirection.FADE] = TransitionProfile(
        direction=TransitionDirection.FADE,
        exit_steps=(ExitStep({"opacity": 0.0}, duration_factor=0.5, ease="power2.in"),),
        after_exit={"visibility": "hidden"},
        enter_from={"opacity": 0.0, "scale": 0.95},
        enter_to={"opacity": 1.0, "scale": 1.0},
        enter_duration_factor=0.5,
    )
    profiles[TransitionDirection.ZOOM] = TransitionProfile(
        direction=TransitionDirection.ZOOM,
        exit_steps=(ExitStep({"scale": 1.2, "opacity": 0.0}, ease="power2.in"),),
        enter_from={"scale": 0.8, "opacity": 0.0},
        enter_to={"scale": 1.0, "opacity": 1.0},
        overlap=-0.2,
    )
    profiles[TransitionDirection.GLITCH] = TransitionProfile(
        direction=TransitionDirection.GLITCH,
        exit_steps=(
            ExitStep({"opacity": 0.0}, fixed_duration=0.1, ease="steps(5)"),
            ExitStep({"opacity": 1.0}, fixed_duration=0.05, ease="power2.out"),
            ExitStep({"opacity": 0.0, "x": 10.0}, fixed_duration=0.1, ease="power2.out"),
            ExitStep({"x": -10.0}, fixed_duration=0.05, ease="power2.out"),
        ),
        after_exit={"visibility": "hidden", "x": 0.0},
        enter_from={"opacity": 0.0, "x": -10.0},
        enter_to={"opacity": 1.0, "x": 0.0},
        enter_fixed_duration=0.2,
    )
    return profiles


def create_transition_orchestrator(**kwargs: object) -> TransitionOrchestrator:
    """Create default orchestrator implementation."""
    from sequencer.runtime.transitions import RuntimeTransitionOrchestrator

    return RuntimeTransitionOrchestrator(**kwargs)  # type: ignore[arg-type]
