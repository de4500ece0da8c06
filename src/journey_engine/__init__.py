"""Journey classification engine: ledger, classifier, and mission state machine."""

from journey_engine.classifier import (
    JourneyAnalysis,
    analyze,
    classify,
    classify_sequence,
    is_valid_for_target,
    journey_explanation,
)
from journey_engine.config import (
    DEFAULT_JOURNEY_CONFIGS,
    DEFAULT_MISSIONS,
    EngineSettings,
    JourneyConfigTable,
    load_engine_settings,
    load_journey_configs,
    resolve_journey_type,
)
from journey_engine.contracts import (
    AnomalyKind,
    AnomalyRecord,
    JourneyConfigError,
    JourneyStep,
    JourneyType,
    JourneyTypeConfig,
    MissionEvent,
    MissionEventKind,
    MissionIndexError,
    MissionPhase,
    MissionSpec,
    MissionState,
)
from journey_engine.engine import JourneyEngine
from journey_engine.events import MissionEventChannel
from journey_engine.feedback import FeedbackView, TutorialStage
from journey_engine.ledger import JourneyLedger, ManualClock
from journey_engine.mission import MissionStateMachine
from journey_engine.progression import MissionProgression

__all__ = [
    "AnomalyKind",
    "AnomalyRecord",
    "DEFAULT_JOURNEY_CONFIGS",
    "DEFAULT_MISSIONS",
    "EngineSettings",
    "FeedbackView",
    "JourneyAnalysis",
    "JourneyConfigError",
    "JourneyConfigTable",
    "JourneyEngine",
    "JourneyLedger",
    "JourneyStep",
    "JourneyType",
    "JourneyTypeConfig",
    "ManualClock",
    "MissionEvent",
    "MissionEventChannel",
    "MissionEventKind",
    "MissionIndexError",
    "MissionPhase",
    "MissionProgression",
    "MissionSpec",
    "MissionState",
    "MissionStateMachine",
    "TutorialStage",
    "analyze",
    "classify",
    "classify_sequence",
    "is_valid_for_target",
    "journey_explanation",
    "load_engine_settings",
    "load_journey_configs",
    "resolve_journey_type",
]
