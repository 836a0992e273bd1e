"""Anchor ids and the default headless surface layout."""

from __future__ import annotations

from gauntlet.app.state import ScreenId
from sequencer.api.geometry import Rect
from sequencer.runtime.surfaces import SurfaceRegistry

BOARD_WIDTH = 360.0
BOARD_HEIGHT = 640.0

FLASH_OVERLAY = "flash-overlay"
PARTICLES_CONTAINER = "particles-container"
TOP_PROGRESS_FILL = "top-progress-fill"
STAGE_DOT_PREFIX = "stage-dot-"

INTRO_ELEMENTS = (
    "intro-logo",
    "intro-classification",
    "intro-title",
    "intro-subtitle",
    "intro-start-btn",
)
INTRO_START_BUTTON = "intro-start-btn"

SCAN_WRAPPER = "fingerprint-wrapper"
SCAN_ICON = "fingerprint-icon"
SCAN_RING = "progress-ring-fill"
SCAN_LINE = "scan-line"
SCAN_STATUS_TEXT = "scan-status-text"
SCAN_STATUS_PROGRESS = "scan-status-progress"

ANSWER_QUESTION_BOX = "question-box"
ANSWER_INPUT = "answer-input"
ANSWER_SUBMIT = "answer-submit"
ANSWER_FEEDBACK = "answer-feedback"
ANSWER_STATUS = "answer-status"

PLACEMENT_BOARD = "flower-builder"
PLACEMENT_TARGET = "center-target"
PLACEMENT_TOKEN_PREFIX = "petal-"
PLACEMENT_PROGRESS = "progress-count"
PLACEMENT_RESET = "reset-button"
REVEAL_OVERLAY = "reveal-overlay"
REVEAL_CONTINUE = "reveal-continue"
TOKEN_WIDTH = 60.0
TOKEN_HEIGHT = 80.0
TARGET_SIZE = 60.0

CAPTURE_VIDEO = "capture-video"
CAPTURE_FALLBACK = "capture-fallback"
CAPTURE_VERIFY = "verify-button"
CAPTURE_SUCCESS = "verification-success"
CAPTURE_CHECKMARK = "success-checkmark"
CAPTURE_PERMISSION = "capture-permission"
CAPTURE_START = "capture-start-button"
CAPTURE_STATUS_FILL = "status-fill"
HUD_TOP_LEFT = "hud-data-tl"
HUD_TOP_RIGHT = "hud-data-tr"
HUD_LEFT = "hud-data-left"
HUD_RIGHT = "hud-data-right"


def token_id(index: int) -> str:
    return f"{PLACEMENT_TOKEN_PREFIX}{index}"


def build_default_surfaces(*, token_count: int = 6) -> SurfaceRegistry:
    """Register every screen and anchor the four stages and the intro use."""
    registry = SurfaceRegistry()
    full = Rect(0.0, 0.0, BOARD_WIDTH, BOARD_HEIGHT)
    for screen in ScreenId:
        surface = registry.create(screen.value, rect=full, classes=("screen",))
        surface.set_prop("visibility", "hidden")
        surface.set_prop("opacity", 0.0)
    overlay = registry.create(FLASH_OVERLAY, rect=full)
    overlay.set_prop("opacity", 0.0)
    registry.create(PARTICLES_CONTAINER, rect=full)
    registry.create(TOP_PROGRESS_FILL)
    for index in range(4):
        registry.create(f"{STAGE_DOT_PREFIX}{index}", classes=("stage-dot",))
    for anchor in INTRO_ELEMENTS:
        registry.create(anchor)

    for anchor in (SCAN_WRAPPER, SCAN_ICON, SCAN_RING, SCAN_LINE, SCAN_STATUS_TEXT, SCAN_STATUS_PROGRESS):
        registry.create(anchor)

    for anchor in (ANSWER_QUESTION_BOX, ANSWER_INPUT, ANSWER_SUBMIT, ANSWER_FEEDBACK, ANSWER_STATUS):
        registry.create(anchor)

    registry.create(PLACEMENT_BOARD, rect=full)
    registry.create(
        PLACEMENT_TARGET,
        rect=Rect(
            (BOARD_WIDTH - TARGET_SIZE) / 2.0,
            (BOARD_HEIGHT - TARGET_SIZE) / 2.0,
            TARGET_SIZE,
            TARGET_SIZE,
        ),
    )
    for index in range(token_count):
        registry.create(token_id(index), rect=Rect(0.0, 0.0, TOKEN_WIDTH, TOKEN_HEIGHT), classes=("petal",))
    registry.create(PLACEMENT_PROGRESS)
    registry.create(PLACEMENT_RESET)
    reveal = registry.create(REVEAL_OVERLAY, rect=full)
    reveal.set_prop("visibility", "hidden")
    registry.create(REVEAL_CONTINUE)

    for anchor in (
        CAPTURE_VIDEO,
        CAPTURE_FALLBACK,
        CAPTURE_VERIFY,
        CAPTURE_SUCCESS,
        CAPTURE_CHECKMARK,
        CAPTURE_PERMISSION,
        CAPTURE_START,
        CAPTURE_STATUS_FILL,
        HUD_TOP_LEFT,
        HUD_TOP_RIGHT,
        HUD_LEFT,
        HUD_RIGHT,
    ):
        registry.create(anchor)
    return registry
