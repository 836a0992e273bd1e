"""Application configuration and env loading."""

from __future__ import annotations

import os
import sys
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from sequencer.runtime.debug_config import env_float, env_int


@dataclass(frozen=True, slots=True)
class GauntletConfig:
    """Immutable stage-flow tuning."""

    secret_answer: str = "chill"
    scan_hold_seconds: float = 3.0
    snap_distance: float = 60.0
    token_count: int = 6
    scan_settle_seconds: float = 1.5
    answer_settle_seconds: float = 2.0
    placement_settle_seconds: float = 1.0
    capture_verify_delay_seconds: float = 0.5
    capture_permission_timeout_seconds: float = 10.0
    hud_interval_seconds: float = 0.5
    frame_interval_seconds: float = 1.0 / 60.0
    transition_duration_seconds: float = 0.6
    seed: int | None = None


def load_config() -> GauntletConfig:
    """Build config from GAUNTLET_* env vars; malformed values keep defaults."""
    defaults = GauntletConfig()
    secret = os.getenv("GAUNTLET_SECRET_ANSWER", defaults.secret_answer).strip() or defaults.secret_answer
    return GauntletConfig(
        secret_answer=secret,
        scan_hold_seconds=_positive("GAUNTLET_SCAN_HOLD_SECONDS", defaults.scan_hold_seconds),
        snap_distance=_positive("GAUNTLET_SNAP_DISTANCE", defaults.snap_distance),
        token_count=max(1, env_int("GAUNTLET_TOKEN_COUNT", defaults.token_count)),
        scan_settle_seconds=_non_negative("GAUNTLET_SCAN_SETTLE_SECONDS", defaults.scan_settle_seconds),
        answer_settle_seconds=_non_negative("GAUNTLET_ANSWER_SETTLE_SECONDS", defaults.answer_settle_seconds),
        placement_settle_seconds=_non_negative(
            "GAUNTLET_PLACEMENT_SETTLE_SECONDS", defaults.placement_settle_seconds
        ),
        capture_verify_delay_seconds=_non_negative(
            "GAUNTLET_CAPTURE_VERIFY_DELAY_SECONDS", defaults.capture_verify_delay_seconds
        ),
        capture_permission_timeout_seconds=_positive(
            "GAUNTLET_CAPTURE_TIMEOUT_SECONDS", defaults.capture_permission_timeout_seconds
        ),
        hud_interval_seconds=_positive("GAUNTLET_HUD_INTERVAL_SECONDS", defaults.hud_interval_seconds),
        frame_interval_seconds=_positive("GAUNTLET_FRAME_INTERVAL_SECONDS", defaults.frame_interval_seconds),
        transition_duration_seconds=_non_negative(
            "GAUNTLET_TRANSITION_SECONDS", defaults.transition_duration_seconds
        ),
        seed=_optional_int("GAUNTLET_SEED"),
    )


def load_env_file(path: str = ".env", *, override_existing: bool = True) -> None:
    """Load KEY=VALUE pairs from an env file into process environment.

    By default, values from the env file overwrite existing environment variables.
    """
    env_path = _resolve_env_path(path)
    if not env_path.exists():
        return

    for raw_line in env_path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue

        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip()
        if not key:
            continue

        if len(value) >= 2 and value[0] == value[-1] and value[0] in {"'", '"'}:
            value = value[1:-1]

        if override_existing or key not in os.environ:
            os.environ[key] = value


def load_default_env_files(
    *, override_existing: bool = True, paths: Sequence[str] | None = None
) -> None:
    """Load `.env.app` then `.env.app.local`; later files win."""
    to_load = tuple(paths) if paths is not None else (".env.app", ".env.app.local")
    for path in to_load:
        load_env_file(path, override_existing=override_existing)


def _positive(name: str, default: float) -> float:
    value = env_float(name, default)
    return value if value > 0.0 else default


def _non_negative(name: str, default: float) -> float:
    value = env_float(name, default)
    return value if value >= 0.0 else default


def _optional_int(name: str) -> int | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw)
    except ValueError:
        return None


def _resolve_env_path(path: str) -> Path:
    """Resolve env path from cwd, frozen exe dir, then project root."""
    candidate = Path(path)
    if candidate.exists():
        return candidate

    if getattr(sys, "frozen", False):
        executable = getattr(sys, "executable", "")
        if executable:
            frozen_dir_candidate = Path(executable).resolve().parent / path
            if frozen_dir_candidate.exists():
                return frozen_dir_candidate

    # Fallback for IDE run configs with different working directory.
    project_root = Path(__file__).resolve().parents[2]
    return project_root / path
