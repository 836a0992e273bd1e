"""Stage controllers in sequence order."""

from gauntlet.app.stages.answer import AnswerStage
from gauntlet.app.stages.capture import CaptureStage
from gauntlet.app.stages.placement import PlacementStage
from gauntlet.app.stages.scan import ScanStage

__all__ = [
    "AnswerStage",
    "CaptureStage",
    "PlacementStage",
    "ScanStage",
]
