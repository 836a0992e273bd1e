"""Headless entry point: run the scripted stage walkthrough."""

from __future__ import annotations

import argparse
import dataclasses

from gauntlet.app.session import GauntletSession
from gauntlet.app.walkthrough import run_walkthrough
from gauntlet.infra.capture import DeniedCaptureDevice, SyntheticCaptureDevice
from gauntlet.infra.config import load_config, load_default_env_files
from gauntlet.infra.logging import setup_logging
from sequencer.api.logging import get_logger
from sequencer.runtime.logging import shutdown_logging
from sequencer.runtime.scheduler import Scheduler

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="gauntlet")
    parser.add_argument("--seed", type=int, default=None, help="Seed for token layout and HUD readouts.")
    parser.add_argument("--answer", default=None, help="Answer typed into the security question.")
    parser.add_argument(
        "--deny-camera",
        action="store_true",
        help="Refuse capture-device access so verification uses the fallback still.",
    )
    parser.add_argument("--log-level", default=None, help="Override GAUNTLET_LOG_LEVEL / LOG_LEVEL.")
    parser.add_argument(
        "--log-format",
        choices=("text", "json"),
        default=None,
        help="Console log format.",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    load_default_env_files()
    setup_logging(level_name=args.log_level, console_format=args.log_format)
    config = load_config()
    if args.seed is not None:
        config = dataclasses.replace(config, seed=args.seed)

    scheduler = Scheduler()
    if args.deny_camera:
        device = DeniedCaptureDevice(scheduler)
    else:
        device = SyntheticCaptureDevice(scheduler, seed=config.seed or 0)
    session = GauntletSession(config=config, capture_device=device, scheduler=scheduler)
    try:
        result = run_walkthrough(session, answer=args.answer)
    finally:
        session.teardown()
        shutdown_logging()

    print(f"progress={result.progress:.0f}")
    print(f"completed={result.completed} attempts={result.answer_attempts} fallback={result.used_fallback}")
    return 0 if result.completed else 1


if __name__ == "__main__":
    raise SystemExit(main())
