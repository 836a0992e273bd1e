"""Public sequencer API contracts."""

from sequencer.api.errors import MissingAnchorError, UnknownStatePathError
from sequencer.api.events import (
    EventBus,
    Subscription,
    TopicEmitter,
    create_event_bus,
    create_topic_emitter,
)
from sequencer.api.geometry import Rect, clamp, distance
from sequencer.api.logging import LoggingConfig, configure_logging, get_logger
from sequencer.api.state import (
    CHANGE_TOPIC,
    RESET_TOPIC,
    ChangeEvent,
    StateSnapshot,
    StateStore,
    change_topic,
    create_state_store,
    iter_leaf_paths,
)
from sequencer.api.transitions import (
    ExitStep,
    TransitionDirection,
    TransitionOrchestrator,
    TransitionProfile,
    TransitionRequest,
    create_transition_orchestrator,
    default_transition_profiles,
)

__all__ = [
    "CHANGE_TOPIC",
    "ChangeEvent",
    "EventBus",
    "ExitStep",
    "LoggingConfig",
    "MissingAnchorError",
    "RESET_TOPIC",
    "Rect",
    "StateSnapshot",
    "StateStore",
    "Subscription",
    "TopicEmitter",
    "TransitionDirection",
    "TransitionOrchestrator",
    "TransitionProfile",
    "TransitionRequest",
    "UnknownStatePathError",
    "change_topic",
    "clamp",
    "configure_logging",
    "create_event_bus",
    "create_state_store",
    "create_topic_emitter",
    "create_transition_orchestrator",
    "default_transition_profiles",
    "distance",
    "get_logger",
    "iter_leaf_paths",
]
