"""Input events published on the session input bus."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class PointerPressed:
    """Press (touch start / mouse down) on a target surface, in board coordinates."""

    target: str
    x: float = 0.0
    y: float = 0.0


@dataclass(frozen=True, slots=True)
class PointerMoved:
    x: float
    y: float


@dataclass(frozen=True, slots=True)
class PointerReleased:
    """Release anywhere (touch end / mouse up)."""

    x: float = 0.0
    y: float = 0.0
    target: str | None = None


@dataclass(frozen=True, slots=True)
class PointerLeft:
    """Pointer left or touch cancelled on a target surface."""

    target: str


@dataclass(frozen=True, slots=True)
class TextChanged:
    target: str
    text: str


@dataclass(frozen=True, slots=True)
class KeyPressed:
    target: str
    key: str


@dataclass(frozen=True, slots=True)
class ButtonPressed:
    button_id: str


InputEvent = PointerPressed | PointerMoved | PointerReleased | PointerLeft | TextChanged | KeyPressed | ButtonPressed
