"""Runtime debug configuration sourced from environment."""

from __future__ import annotations

import os
from dataclasses import dataclass


def env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass(frozen=True, slots=True)
class DebugConfig:
    """Immutable runtime debug configuration."""

    trace_transitions: bool
    trace_input: bool
    log_level: str


def resolve_log_level_name(default: str = "INFO") -> str:
    """Resolve runtime log level with sequencer-prefixed override."""
    value = os.getenv("SEQUENCER_LOG_LEVEL")
    if value is None:
        value = os.getenv("LOG_LEVEL", default)
    return value.strip().upper()


def load_debug_config() -> DebugConfig:
    """Load immutable debug configuration from env vars."""
    return DebugConfig(
        trace_transitions=env_flag("SEQUENCER_DEBUG_TRANSITIONS", False),
        trace_input=env_flag("SEQUENCER_DEBUG_INPUT", False),
        log_level=resolve_log_level_name(),
    )
