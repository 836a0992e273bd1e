"""Stage 2: free-text security answer."""

from __future__ import annotations

import logging

from gauntlet.app.controller import (
    HandoffHook,
    InputHandler,
    StageContext,
    StageController,
    StagePhase,
)
from gauntlet.app.events import ButtonPressed, KeyPressed, TextChanged
from gauntlet.app.state import ScreenId, StageId
from gauntlet.ui.layout import (
    ANSWER_FEEDBACK,
    ANSWER_INPUT,
    ANSWER_QUESTION_BOX,
    ANSWER_STATUS,
    ANSWER_SUBMIT,
)
from sequencer.api.transitions import TransitionDirection

logger = logging.getLogger(__name__)

FOCUS_DELAY_SECONDS = 0.5
CLEAR_DELAY_SECONDS = 0.8
SHAKE_CLASS_SECONDS = 0.5

FEEDBACK_EMPTY = "Enter an answer"
FEEDBACK_WRONG = "Wrong! Try again..."
FEEDBACK_RIGHT = "CORRECT"
STATUS_UNLOCKED = "UNLOCKED"


def normalize_answer(text: str) -> str:
    return text.strip().casefold()


class AnswerStage(StageController):
    """Accepts the configured secret, compared trimmed and case-folded. Retries are unlimited."""

    stage_id = StageId.ANSWER
    screen_id = ScreenId.ANSWER
    next_screen_id = ScreenId.PLACEMENT
    required_anchors = (ANSWER_INPUT,)
    transition_direction = TransitionDirection.LEFT

    def __init__(self, context: StageContext, *, on_handoff: HandoffHook | None = None) -> None:
        super().__init__(context, on_handoff=on_handoff)
        self._secret = normalize_answer(context.config.secret_answer)
        self._attempts = 0

    @property
    def attempts(self) -> int:
        """Count of wrong submissions."""
        return self._attempts

    def is_correct(self, text: str) -> bool:
        return normalize_answer(text) == self._secret

    def reset(self) -> None:
        if self._phase is StagePhase.COMPLETED:
            return
        self._set_value("")
        self._clear_feedback()

    def submit(self) -> bool:
        """Validate the current input value. Returns whether it was accepted."""
        if not self._begin_validation():
            return False
        field = self._surface(ANSWER_INPUT)
        value = field.value if field is not None else ""
        if not value.strip():
            self._reject()
            self._show_feedback(FEEDBACK_EMPTY, "error")
            self._ctx.haptics.light()
            return False
        if not self.is_correct(value):
            self._on_wrong()
            return False
        self._complete()
        return True

    def _input_handlers(self) -> tuple[tuple[type, InputHandler], ...]:
        return (
            (TextChanged, self._on_text),
            (KeyPressed, self._on_key),
            (ButtonPressed, self._on_button),
        )

    def _on_activate(self) -> None:
        self._scope.call_later(FOCUS_DELAY_SECONDS, lambda: self._add_class(ANSWER_INPUT, "focused"))

    def _on_text(self, event: TextChanged) -> bool:
        if event.target != ANSWER_INPUT or self._phase is StagePhase.COMPLETED:
            return False
        self._set_value(event.text)
        self._clear_feedback()
        return True

    def _on_key(self, event: KeyPressed) -> bool:
        if event.target != ANSWER_INPUT or event.key != "Enter":
            return False
        self.submit()
        return True

    def _on_button(self, event: ButtonPressed) -> bool:
        if event.button_id != ANSWER_SUBMIT:
            return False
        self.submit()
        return True

    def _on_wrong(self) -> None:
        self._attempts += 1
        logger.info("answer_rejected attempts=%d", self._attempts)
        self._ctx.haptics.heavy()
        self._add_class(ANSWER_INPUT, "shake")
        self._track(self._ctx.orchestrator.shake(ANSWER_INPUT))
        self._scope.call_later(SHAKE_CLASS_SECONDS, lambda: self._remove_class(ANSWER_INPUT, "shake"))
        self._show_feedback(FEEDBACK_WRONG, "error")
        self._scope.call_later(CLEAR_DELAY_SECONDS, self._clear_input)
        self._reject()

    def _clear_input(self) -> None:
        self._set_value("")
        self._add_class(ANSWER_INPUT, "focused")

    def _celebrate(self) -> None:
        field = self._surface(ANSWER_INPUT)
        if field is not None:
            field.disabled = True
            field.add_class("correct")
        self._show_feedback(FEEDBACK_RIGHT, "success")
        self._set_text(ANSWER_STATUS, STATUS_UNLOCKED)
        self._add_class(ANSWER_STATUS, "success")
        self._add_class(ANSWER_QUESTION_BOX, "unlocked")

    def _settle_seconds(self) -> float:
        return self._ctx.config.answer_settle_seconds

    def _set_value(self, text: str) -> None:
        field = self._surface(ANSWER_INPUT)
        if field is not None and not field.disabled:
            field.value = text

    def _show_feedback(self, text: str, kind: str) -> None:
        feedback = self._surface(ANSWER_FEEDBACK)
        if feedback is None:
            return
        feedback.text = text
        feedback.remove_class("error", "success")
        feedback.add_class(kind, "visible")

    def _clear_feedback(self) -> None:
        self._remove_class(ANSWER_FEEDBACK, "visible")
