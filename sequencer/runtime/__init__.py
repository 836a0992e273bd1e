"""Sequencer runtime modules."""

from sequencer.runtime.completion import Completion, CompletionState
from sequencer.runtime.debug_config import DebugConfig, load_debug_config
from sequencer.runtime.events import RuntimeEventBus, RuntimeTopicEmitter
from sequencer.runtime.logging import JsonFormatter, configure_logging, setup_default_logging
from sequencer.runtime.scheduler import Scheduler, TaskScope
from sequencer.runtime.state_store import RuntimeStateStore
from sequencer.runtime.surfaces import Surface, SurfaceRegistry
from sequencer.runtime.transitions import RuntimeTransitionOrchestrator
from sequencer.runtime.tween import Timeline, Tween

__all__ = [
    "Completion",
    "CompletionState",
    "DebugConfig",
    "JsonFormatter",
    "RuntimeEventBus",
    "RuntimeStateStore",
    "RuntimeTopicEmitter",
    "RuntimeTransitionOrchestrator",
    "Scheduler",
    "Surface",
    "SurfaceRegistry",
    "TaskScope",
    "Timeline",
    "Tween",
    "configure_logging",
    "load_debug_config",
    "setup_default_logging",
]
