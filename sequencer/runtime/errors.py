"""Shared runtime exception policy helpers."""

from __future__ import annotations

import logging

# Explicitly bounded set for tolerated collaborator failures (ports, devices).
RECOVERABLE_RUNTIME_ERRORS: tuple[type[BaseException], ...] = (
    RuntimeError,
    OSError,
    ValueError,
    TypeError,
    AttributeError,
)


def log_recoverable(
    logger: logging.Logger,
    message: str,
    *args: object,
    level: int = logging.DEBUG,
) -> None:
    """Emit structured observability for tolerated recoverable exceptions."""
    logger.log(level, message, *args, exc_info=True)
