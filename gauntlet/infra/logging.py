"""App-level logging policy over the sequencer logging API."""

from __future__ import annotations

import logging
import os
from datetime import UTC, datetime
from pathlib import Path

from sequencer.api.logging import LoggingConfig, configure_logging

__all__ = ["setup_logging"]


def setup_logging(*, level_name: str | None = None, console_format: str | None = None) -> None:
    """Configure application logging; a JSONL file sink is added when GAUNTLET_LOG_DIR is set."""
    resolved_level = (
        level_name or os.getenv("GAUNTLET_LOG_LEVEL", os.getenv("LOG_LEVEL", "INFO"))
    ).upper()
    resolved_format = (console_format or os.getenv("LOG_FORMAT", "text")).lower()
    file_path = _resolve_run_log_file_path()
    configure_logging(
        LoggingConfig(
            level_name=resolved_level,
            console_format=resolved_format,
            file_path=file_path,
            file_format="json",
        )
    )
    if file_path is not None:
        logging.getLogger(__name__).info("logging_file=%s", file_path)


def _resolve_run_log_file_path() -> str | None:
    configured = os.getenv("GAUNTLET_LOG_DIR", "").strip()
    if not configured:
        return None
    base_dir = Path(configured)
    base_dir.mkdir(parents=True, exist_ok=True)
    stamp = datetime.now(UTC).strftime("%Y%m%dT%H%M%S")
    return str(base_dir / f"gauntlet_run_{stamp}.jsonl")
