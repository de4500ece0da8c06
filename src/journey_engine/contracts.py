# journey_engine/contracts.py
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from journey_engine._compat import Self, StrEnum

# ------------------------------------------------------------------------------
# Shared BaseModel config helpers
# ------------------------------------------------------------------------------

_CONTRACT_CONFIG = ConfigDict(
    extra="forbid",
    validate_assignment=True,
    use_enum_values=False,  # keep enums as enums in Python
)

_IMMUTABLE_CONTRACT_CONFIG = ConfigDict(
    extra="forbid",
    use_enum_values=False,
    frozen=True,
)


class JourneyConfigError(ValueError):
    """Raised when journey type configuration is incomplete or malformed."""


class MissionIndexError(ValueError):
    """Raised when a mission index falls outside the mission catalogue."""


# ------------------------------------------------------------------------------
# Journey taxonomy
# ------------------------------------------------------------------------------


class JourneyType(StrEnum):
    WALK = "walk"
    TRAIL = "trail"
    PATH = "path"
    CIRCUIT = "circuit"
    CYCLE = "cycle"
    INVALID = "invalid"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


class JourneyStep(BaseModel):
    """
    One traversal event. `edge_id` is the bridge used to arrive at the vertex;
    the ledger fills it in after the fact when the crossing is reported late.
    """

    model_config = _CONTRACT_CONFIG
    vertex_id: str = Field(min_length=1)
    edge_id: str | None = None
    sequence_index: int = Field(ge=0)
    timestamp: float


class JourneyTypeConfig(BaseModel):
    model_config = _IMMUTABLE_CONTRACT_CONFIG
    journey_type: JourneyType
    minimum_steps_for_classification: int = Field(ge=0)
    minimum_steps_for_completion: int = Field(ge=0)
    mission_instruction: str = ""
    progress_encouragement: str = ""
    success_message: str = ""
    correction_hint: str = ""


# ------------------------------------------------------------------------------
# Missions
# ------------------------------------------------------------------------------


class MissionSpec(BaseModel):
    model_config = _IMMUTABLE_CONTRACT_CONFIG
    target_type: JourneyType
    minimum_steps_for_classification: int = Field(ge=0)
    minimum_steps_for_completion: int = Field(ge=0)
    mission_name: str = ""
    learning_objective: str = ""
    completion_delay_s: float = Field(default=13.0, ge=0)

    @classmethod
    def for_target(
        cls,
        config: JourneyTypeConfig,
        *,
        mission_name: str = "",
        learning_objective: str = "",
        completion_delay_s: float = 13.0,
    ) -> Self:
        return cls(
            target_type=config.journey_type,
            minimum_steps_for_classification=config.minimum_steps_for_classification,
            minimum_steps_for_completion=config.minimum_steps_for_completion,
            mission_name=mission_name,
            learning_objective=learning_objective,
            completion_delay_s=completion_delay_s,
        )


class MissionPhase(StrEnum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETE = "complete"


class MissionState(BaseModel):
    """Read-only snapshot of the mission currently owned by a state machine."""

    model_config = _IMMUTABLE_CONTRACT_CONFIG
    current_journey: list[JourneyStep] = Field(default_factory=list)
    target: MissionSpec | None = None
    completed: bool = False
    phase: MissionPhase = MissionPhase.NOT_STARTED
    journey_type: JourneyType = JourneyType.WALK

    @model_validator(mode="after")
    def _validate_phase_consistency(self) -> Self:
        if self.completed != (self.phase == MissionPhase.COMPLETE):
            raise ValueError("completed flag must agree with the mission phase")
        if self.phase != MissionPhase.NOT_STARTED and self.target is None:
            raise ValueError("a started mission requires a target")
        return self


# ------------------------------------------------------------------------------
# Anomalies / notifications
# ------------------------------------------------------------------------------


class AnomalyKind(StrEnum):
    ORPHAN_EDGE_CROSSING = "orphan_edge_crossing"
    RESET_VERIFICATION_FAILED = "reset_verification_failed"
    UNKNOWN_TARGET_TYPE = "unknown_target_type"
    DEFERRED_MISSION_START = "deferred_mission_start"
    SUSPICIOUS_COMPLETION = "suspicious_completion"
    EMPTY_JOURNEY_COMPLETION = "empty_journey_completion"
    BLANK_VERTEX_ID = "blank_vertex_id"


class AnomalyRecord(BaseModel):
    model_config = _IMMUTABLE_CONTRACT_CONFIG
    kind: AnomalyKind
    message: str
    details: dict[str, Any] = Field(default_factory=dict)
    timestamp: float


class MissionEventKind(StrEnum):
    MISSION_STARTED = "mission_started"
    JOURNEY_RESET = "journey_reset"
    STEP_RECORDED = "step_recorded"
    EDGE_RECORDED = "edge_recorded"
    JOURNEY_TYPE_CHANGED = "journey_type_changed"
    MISSION_COMPLETED = "mission_completed"


class MissionEvent(BaseModel):
    model_config = _IMMUTABLE_CONTRACT_CONFIG
    kind: MissionEventKind
    target_type: JourneyType | None = None
    mission_name: str = ""
    journey_length: int = Field(default=0, ge=0)
    journey_type: JourneyType = JourneyType.WALK
    previous_type: JourneyType | None = None
    timestamp: float
