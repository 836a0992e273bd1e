"""Stage 3: drag every token onto the shared target centre."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass

from gauntlet.app.controller import (
    HandoffHook,
    InputHandler,
    StageContext,
    StageController,
    StagePhase,
)
from gauntlet.app.events import ButtonPressed, PointerMoved, PointerPressed, PointerReleased
from gauntlet.app.state import ScreenId, StageId, stage_path
from gauntlet.ui.layout import (
    PLACEMENT_BOARD,
    PLACEMENT_PROGRESS,
    PLACEMENT_RESET,
    PLACEMENT_TARGET,
    REVEAL_CONTINUE,
    REVEAL_OVERLAY,
    TOKEN_HEIGHT,
    TOKEN_WIDTH,
    token_id,
)
from sequencer.api.geometry import Rect, clamp, distance
from sequencer.api.transitions import TransitionDirection
from sequencer.runtime.surfaces import Surface
from sequencer.runtime.tween import Timeline

logger = logging.getLogger(__name__)

EDGE_PADDING = 30.0
POSITION_JITTER = 10.0
ROTATION_JITTER = 30.0
NEAR_FACTOR = 1.5
PLACED_ROTATION_STEP = 60.0
REVEAL_SHOW_DELAY = 0.1
REVEAL_HIDE_DELAY = 0.5


@dataclass(frozen=True, slots=True)
class TokenPosition:
    """Resting top-left corner and rotation of one token."""

    left: float
    top: float
    rotation: float


def generate_token_positions(board: Rect, count: int, rng: random.Random) -> list[TokenPosition]:
    """Spread tokens around the left and right board edges with jitter."""
    spots = (
        (EDGE_PADDING, board.h * 0.2),
        (board.w - EDGE_PADDING - 50.0, board.h * 0.15),
        (EDGE_PADDING, board.h * 0.5),
        (board.w - EDGE_PADDING - 50.0, board.h * 0.55),
        (EDGE_PADDING + 30.0, board.h * 0.8),
        (board.w - EDGE_PADDING - 60.0, board.h * 0.85),
    )
    positions: list[TokenPosition] = []
    for index in range(count):
        x, y = spots[index % len(spots)]
        positions.append(
            TokenPosition(
                left=x + rng.uniform(-POSITION_JITTER, POSITION_JITTER),
                top=y + rng.uniform(-POSITION_JITTER, POSITION_JITTER),
                rotation=rng.uniform(-ROTATION_JITTER, ROTATION_JITTER),
            )
        )
    return positions


def token_center(token: Surface) -> tuple[float, float]:
    return token.number("left") + TOKEN_WIDTH / 2.0, token.number("top") + TOKEN_HEIGHT / 2.0


class PlacementStage(StageController):
    """Completes once every token has been released within snap distance of the target."""

    stage_id = StageId.PLACEMENT
    screen_id = ScreenId.PLACEMENT
    next_screen_id = ScreenId.CAPTURE
    required_anchors = (PLACEMENT_BOARD, PLACEMENT_TARGET)
    transition_direction = TransitionDirection.LEFT

    def __init__(self, context: StageContext, *, on_handoff: HandoffHook | None = None) -> None:
        super().__init__(context, on_handoff=on_handoff)
        self._token_ids = tuple(token_id(index) for index in range(context.config.token_count))
        self.start_positions: dict[str, TokenPosition] = {}
        self._placed: set[str] = set()
        self._dragging: str | None = None
        self._token_timelines: dict[str, Timeline] = {}
        self._awaiting_reveal = False

    @property
    def token_ids(self) -> tuple[str, ...]:
        return self._token_ids

    @property
    def placed_count(self) -> int:
        return len(self._placed)

    @property
    def awaiting_reveal(self) -> bool:
        return self._awaiting_reveal

    def is_placed(self, token: str) -> bool:
        return token in self._placed

    def reset(self) -> None:
        """Unplace every token and return each to its generated coordinate."""
        if self._phase is StagePhase.COMPLETED:
            return
        self._dragging = None
        self._placed.clear()
        self._kill_token_timelines()
        for token_key, position in self.start_positions.items():
            token = self._surface(token_key)
            if token is None:
                continue
            self._rest(token, position)
            token.remove_class("placed", "dragging")
        self._remove_class(PLACEMENT_TARGET, "near")
        self._write_count()
        self._ctx.haptics.light()
        logger.debug("placement_reset tokens=%d", len(self.start_positions))

    def _anchor_ids(self) -> tuple[str, ...]:
        return (*self.required_anchors, *self._token_ids)

    def _input_handlers(self) -> tuple[tuple[type, InputHandler], ...]:
        return (
            (PointerPressed, self._on_press),
            (PointerMoved, self._on_move),
            (PointerReleased, self._on_release),
            (ButtonPressed, self._on_button),
        )

    def _on_activate(self) -> None:
        board = self._ctx.surfaces.require(PLACEMENT_BOARD)[0]
        positions = generate_token_positions(board.rect, len(self._token_ids), self._ctx.rng)
        self.start_positions = dict(zip(self._token_ids, positions, strict=True))
        self._placed.clear()
        for token_key, position in self.start_positions.items():
            token = self._ctx.surfaces.require(token_key)[0]
            self._rest(token, position)
            token.remove_class("placed", "dragging")
        self._write_count()

    def _release_resources(self) -> None:
        self._kill_token_timelines()
        self._dragging = None
        self._awaiting_reveal = False

    def _on_press(self, event: PointerPressed) -> bool:
        if event.target not in self._token_ids or self._phase is not StagePhase.ACTIVE:
            return False
        if event.target in self._placed or self._dragging is not None:
            return False
        token = self._surface(event.target)
        if token is None:
            return False
        self._dragging = event.target
        token.add_class("dragging")
        token.set_prop("z_index", 100.0)
        self._ctx.haptics.light()
        return True

    def _on_move(self, event: PointerMoved) -> bool:
        token = self._dragged_token()
        if token is None:
            return False
        board = self._surface(PLACEMENT_BOARD)
        width = board.rect.w if board is not None else 0.0
        height = board.rect.h if board is not None else 0.0
        token.set_prop("left", clamp(event.x - TOKEN_WIDTH / 2.0, 0.0, width - TOKEN_WIDTH))
        token.set_prop("top", clamp(event.y - TOKEN_HEIGHT / 2.0, 0.0, height - TOKEN_HEIGHT))
        if self._distance_to_target(token) < self._ctx.config.snap_distance * NEAR_FACTOR:
            self._add_class(PLACEMENT_TARGET, "near")
        else:
            self._remove_class(PLACEMENT_TARGET, "near")
        return True

    def _on_release(self, event: PointerReleased) -> bool:
        token = self._dragged_token()
        self._dragging = None
        if token is None:
            return False
        token.remove_class("dragging")
        self._remove_class(PLACEMENT_TARGET, "near")
        gap = self._distance_to_target(token)
        if gap < self._ctx.config.snap_distance:
            self._place(token)
        else:
            logger.debug("token_missed token=%s distance=%.1f", token.id, gap)
            self._rest(token, self.start_positions[token.id])
        return True

    def _on_button(self, event: ButtonPressed) -> bool:
        if event.button_id == PLACEMENT_RESET:
            if self._phase is not StagePhase.ACTIVE:
                return False
            self.reset()
            return True
        if event.button_id == REVEAL_CONTINUE and self._awaiting_reveal:
            self._dismiss_reveal()
            return True
        return False

    def _place(self, token: Surface) -> None:
        index = self._token_ids.index(token.id)
        self._placed.add(token.id)
        target_x, target_y = self._target_center()
        token.add_class("placed")
        token.set_prop("z_index", 10.0 + index)
        timeline = self._ctx.orchestrator.tween(
            token,
            {
                "left": target_x - TOKEN_WIDTH / 2.0,
                "top": target_y - TOKEN_HEIGHT / 2.0 - 10.0,
                "rotation": index * PLACED_ROTATION_STEP,
            },
            duration=0.4,
            ease="back.out(1.5)",
        )
        if timeline is not None:
            self._token_timelines[token.id] = timeline
        self._ctx.haptics.medium()
        self._write_count()
        logger.info("token_placed token=%s placed=%d total=%d", token.id, len(self._placed), len(self._token_ids))
        if len(self._placed) >= len(self._token_ids) and self._begin_validation():
            self._complete()

    def _celebrate(self) -> None:
        orchestrator = self._ctx.orchestrator
        self._track(orchestrator.tween(PLACEMENT_TARGET, {"scale": 1.3, "glow": 1.0}, duration=0.5))
        tokens = tuple(token for token in map(self._surface, self._token_ids) if token is not None)
        self._track(orchestrator.tween(tokens, {"glow": 1.0}, duration=0.3, stagger=0.1))

    def _settle_seconds(self) -> float:
        return self._ctx.config.placement_settle_seconds

    def _schedule_advance(self) -> None:
        self._scope.call_later(self._settle_seconds(), self._show_reveal)

    def _show_reveal(self) -> None:
        overlay = self._surface(REVEAL_OVERLAY)
        if overlay is None:
            self._advance()
            return
        overlay.set_prop("visibility", "visible")
        self._scope.call_later(REVEAL_SHOW_DELAY, lambda: overlay.add_class("show"))
        self._awaiting_reveal = True
        logger.debug("reveal_shown")

    def _dismiss_reveal(self) -> None:
        self._awaiting_reveal = False
        self._remove_class(REVEAL_OVERLAY, "show")

        def _hide() -> None:
            self._set_prop(REVEAL_OVERLAY, "visibility", "hidden")
            self._advance()

        self._scope.call_later(REVEAL_HIDE_DELAY, _hide)

    def _rest(self, token: Surface, position: TokenPosition) -> None:
        timeline = self._token_timelines.pop(token.id, None)
        if timeline is not None:
            timeline.kill()
        token.set_prop("left", position.left)
        token.set_prop("top", position.top)
        token.set_prop("rotation", position.rotation)
        token.clear_props("z_index")

    def _dragged_token(self) -> Surface | None:
        if self._dragging is None:
            return None
        return self._surface(self._dragging)

    def _target_center(self) -> tuple[float, float]:
        target = self._surface(PLACEMENT_TARGET)
        if target is None:
            return 0.0, 0.0
        return target.rect.center

    def _distance_to_target(self, token: Surface) -> float:
        return distance(*token_center(token), *self._target_center())

    def _write_count(self) -> None:
        count = len(self._placed)
        self._ctx.store.set(stage_path(StageId.PLACEMENT, "placed_count"), count)
        self._set_text(PLACEMENT_PROGRESS, str(count))

    def _kill_token_timelines(self) -> None:
        for timeline in self._token_timelines.values():
            timeline.kill()
        self._token_timelines.clear()
