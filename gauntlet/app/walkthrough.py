"""Scripted headless pass through all four stages."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from gauntlet.app.events import (
    ButtonPressed,
    KeyPressed,
    PointerMoved,
    PointerPressed,
    PointerReleased,
    TextChanged,
)
from gauntlet.app.session import GauntletSession
from gauntlet.ui.layout import (
    ANSWER_INPUT,
    CAPTURE_START,
    CAPTURE_VERIFY,
    INTRO_START_BUTTON,
    PLACEMENT_TARGET,
    REVEAL_CONTINUE,
    SCAN_WRAPPER,
)

logger = logging.getLogger(__name__)

TRANSITION_MARGIN_SECONDS = 1.5
INTRO_SECONDS = 1.6
TOKEN_SETTLE_SECONDS = 0.5


@dataclass(frozen=True, slots=True)
class WalkthroughResult:
    progress: float
    completed: bool
    answer_attempts: int
    used_fallback: bool


def run_walkthrough(session: GauntletSession, *, answer: str | None = None) -> WalkthroughResult:
    """Drive the session with synthetic input until capture verifies or a stage stalls."""
    config = session.config
    session.start()
    session.advance(INTRO_SECONDS)
    session.dispatch(ButtonPressed(INTRO_START_BUTTON))
    session.advance(config.transition_duration_seconds + TRANSITION_MARGIN_SECONDS)

    session.dispatch(PointerPressed(SCAN_WRAPPER))
    session.advance(config.scan_hold_seconds + config.frame_interval_seconds)
    session.dispatch(PointerReleased())
    session.advance(config.scan_settle_seconds + config.transition_duration_seconds + TRANSITION_MARGIN_SECONDS)

    session.dispatch(TextChanged(ANSWER_INPUT, answer if answer is not None else config.secret_answer))
    session.dispatch(KeyPressed(ANSWER_INPUT, "Enter"))
    session.advance(config.answer_settle_seconds + config.transition_duration_seconds + TRANSITION_MARGIN_SECONDS)

    target = session.surfaces.get(PLACEMENT_TARGET)
    if session.placement.bound and target is not None:
        target_x, target_y = target.rect.center
        for token in session.placement.token_ids:
            session.dispatch(PointerPressed(token))
            session.dispatch(PointerMoved(target_x, target_y))
            session.dispatch(PointerReleased(target_x, target_y))
            session.advance(TOKEN_SETTLE_SECONDS)
        session.advance(config.placement_settle_seconds + TRANSITION_MARGIN_SECONDS)
        session.dispatch(ButtonPressed(REVEAL_CONTINUE))
        session.advance(config.transition_duration_seconds + TRANSITION_MARGIN_SECONDS)

    session.dispatch(ButtonPressed(CAPTURE_START))
    session.advance(TRANSITION_MARGIN_SECONDS)
    session.dispatch(ButtonPressed(CAPTURE_VERIFY))
    session.advance(config.capture_verify_delay_seconds + TRANSITION_MARGIN_SECONDS)

    result = WalkthroughResult(
        progress=session.store.get_progress(),
        completed=session.sequence_completed,
        answer_attempts=session.answer.attempts,
        used_fallback=session.capture.fallback_active,
    )
    logger.info(
        "walkthrough_finished progress=%.0f completed=%s attempts=%d fallback=%s",
        result.progress,
        result.completed,
        result.answer_attempts,
        result.used_fallback,
    )
    return result
