"""Easing curves addressable by name (``power2.out``, ``back.out(1.7)``, ``steps(5)``)."""

from __future__ import annotations

import math
import re
from collections.abc import Callable

type EaseFn = Callable[[float], float]

_EASE_PATTERN = re.compile(r"^(?P<name>[A-Za-z0-9]+(?:\.[A-Za-z]+)?)(?:\((?P<arg>-?\d+(?:\.\d+)?)\))?$")


def linear(t: float) -> float:
    return t


def power2_in(t: float) -> float:
    return t * t


def power2_out(t: float) -> float:
    return 1.0 - (1.0 - t) * (1.0 - t)


def power2_in_out(t: float) -> float:
    if t < 0.5:
        return 2.0 * t * t
    return 1.0 - ((-2.0 * t + 2.0) ** 2) / 2.0


def back_out(overshoot: float = 1.70158) -> EaseFn:
    c3 = overshoot + 1.0

    def _ease(t: float) -> float:
        u = t - 1.0
        return 1.0 + c3 * u * u * u + overshoot * u * u

    return _ease


def steps(count: int) -> EaseFn:
    if count <= 0:
        raise ValueError("steps count must be > 0")

    def _ease(t: float) -> float:
        if t >= 1.0:
            return 1.0
        return math.floor(t * count) / count

    return _ease


_NAMED: dict[str, EaseFn] = {
    "linear": linear,
    "none": linear,
    "power2.in": power2_in,
    "power2.out": power2_out,
    "power2.inOut": power2_in_out,
}


def resolve_ease(ease: str | EaseFn | None) -> EaseFn:
    """Resolve an ease name or callable into an easing function."""
    if ease is None:
        return power2_out
    if callable(ease):
        return ease
    match = _EASE_PATTERN.match(ease.strip())
    if match is None:
        raise ValueError(f"invalid ease: {ease!r}")
    name = match.group("name")
    arg = match.group("arg")
    if name == "back.out":
        return back_out(float(arg)) if arg is not None else back_out()
    if name == "steps":
        return steps(int(float(arg)) if arg is not None else 1)
    fn = _NAMED.get(name)
    if fn is None or arg is not None:
        raise ValueError(f"unknown ease: {ease!r}")
    return fn
