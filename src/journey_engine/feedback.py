# journey_engine/feedback.py
from __future__ import annotations

from collections.abc import Mapping
from typing import Optional

from journey_engine._compat import StrEnum
from journey_engine.classifier import JourneyView, analyze, is_valid_for_target
from journey_engine.config import JourneyConfigTable, require_every_journey_type
from journey_engine.contracts import JourneyType, JourneyTypeConfig
from journey_engine.mission import MissionStateMachine

HISTORY_SEPARATOR = " → "


class TutorialStage(StrEnum):
    AWAITING_VERTEX = "awaiting_vertex"
    FIRST_VERTEX = "first_vertex"
    FIRST_EDGE = "first_edge"
    COMPLETED = "completed"


_TUTORIAL_STAGE_ORDER = (
    TutorialStage.AWAITING_VERTEX,
    TutorialStage.FIRST_VERTEX,
    TutorialStage.FIRST_EDGE,
    TutorialStage.COMPLETED,
)

TUTORIAL_MESSAGES: Mapping[JourneyType, tuple[str, str, str, str]] = {
    JourneyType.WALK: (
        "Move to a vertex (sphere) to begin your walk!",
        "Great start! Move along the edge (bridge) to continue your walk.",
        "Building your walk! A walk is any sequence of connected vertices and edges - there are no restrictions.",
        "Well done, you completed a Walk! Now learn about trails or exit the tutorial.",
    ),
    JourneyType.TRAIL: (
        "Move to a vertex (sphere) to begin your trail!",
        "Good start! Move along the edge (bridge) to continue your trail.",
        "Building your trail! A trail uses each bridge only once - but you can revisit vertices.",
        "Excellent! You completed a Trail! You avoided repeating any bridges.",
    ),
    JourneyType.PATH: (
        "Move to a vertex (sphere) to begin your path!",
        "Perfect! Move along the edge (bridge) to continue your path.",
        "Building your path! A path visits each vertex only once - the most efficient journey.",
        "Outstanding! You completed a Path! You visited each vertex exactly once.",
    ),
    JourneyType.CIRCUIT: (
        "Move to a vertex (sphere) to begin your circuit!",
        "Nice! Move along the edge (bridge) to continue your circuit.",
        "Building your circuit! A circuit is a trail that returns to where you started.",
        "Brilliant! You completed a Circuit! You created a closed trail that returned home.",
    ),
    JourneyType.CYCLE: (
        "Move to a vertex (sphere) to begin your cycle!",
        "Excellent! Move along the edge (bridge) to continue your cycle.",
        "Building your cycle! A cycle is a path that returns to where you started - the most elegant journey.",
        "Magnificent! You completed a Cycle! You created a perfect closed path.",
    ),
    JourneyType.INVALID: (
        "Move to a vertex (sphere) to begin.",
        "Move along the edge (bridge) to continue.",
        "Keep exploring the bridges.",
        "Journey complete.",
    ),
}

require_every_journey_type(TUTORIAL_MESSAGES, "tutorial messages")


def tutorial_message(journey_type: JourneyType, stage: TutorialStage) -> str:
    return TUTORIAL_MESSAGES[journey_type][_TUTORIAL_STAGE_ORDER.index(stage)]


def tutorial_stage_for(journey: JourneyView, *, completed: bool = False) -> TutorialStage:
    if completed:
        return TutorialStage.COMPLETED
    if journey.length() == 0:
        return TutorialStage.AWAITING_VERTEX
    if not journey.edges():
        return TutorialStage.FIRST_VERTEX
    return TutorialStage.FIRST_EDGE


def journey_history(journey: JourneyView) -> str:
    vertices = journey.vertices()
    history = HISTORY_SEPARATOR.join(vertices) if vertices else "(No journey)"
    return f"Journey: {history}"


def correction_guidance(journey: JourneyView, target: JourneyType, config: JourneyTypeConfig) -> str:
    facts = analyze(journey)

    if target == JourneyType.TRAIL and facts.has_repeated_edges:
        return "You've repeated a bridge! For a trail, each bridge can only be crossed once."
    if target == JourneyType.PATH and facts.has_repeated_vertices:
        return "You've revisited a vertex! For a path, each vertex can only be visited once."
    if target == JourneyType.CIRCUIT:
        if facts.has_repeated_edges:
            return "You've repeated a bridge! For a circuit, avoid repeating bridges and return to start."
        if not facts.returns_to_start:
            return "Good trail! Now return to your starting vertex to complete the circuit."
    if target == JourneyType.CYCLE:
        vertices = journey.vertices()
        # the closing return to the start vertex is not a revisit
        open_part = vertices[:-1] if facts.returns_to_start else vertices
        if len(open_part) != len(set(open_part)):
            return "You've revisited a vertex! For a cycle, visit each vertex once and return to start."
        if not facts.returns_to_start:
            return "Good path! Now return to your starting vertex to complete the cycle."
    return config.correction_hint


class FeedbackView:
    """Text the UI shows for the mission a state machine is running."""

    def __init__(self, machine: MissionStateMachine, configs: Optional[JourneyConfigTable] = None) -> None:
        self.machine = machine
        self.configs = configs or JourneyConfigTable()

    def _config(self) -> JourneyTypeConfig:
        return self.configs.get(self.machine.target_journey_type())

    def _classification_threshold(self) -> int:
        target = self.machine.target
        if target is not None:
            return target.minimum_steps_for_classification
        return self._config().minimum_steps_for_classification

    def journey_history(self) -> str:
        return journey_history(self.machine.ledger)

    def mission_objective(self) -> str:
        config = self._config()
        if self.machine.is_complete():
            return f"COMPLETE: {config.success_message}"
        return f"Mission: {config.mission_instruction}"

    def showing_classification(self) -> bool:
        return self.machine.current_journey_length() >= self._classification_threshold()

    def status_line(self) -> str:
        target = self.machine.target_journey_type()
        if not self.showing_classification():
            return f"Creating your {target.display_name}..."
        actual = self.machine.current_journey_type()
        return f"Current: {actual.display_name} | Target: {target.display_name}"

    def feedback_text(self) -> str:
        config = self._config()
        if not self.showing_classification():
            remaining = self._classification_threshold() - self.machine.current_journey_length()
            return f"{config.progress_encouragement}\nSteps needed: {remaining}"

        target = self.machine.target_journey_type()
        actual = self.machine.current_journey_type()
        if is_valid_for_target(actual, target):
            if self.machine.is_complete():
                return config.success_message
            return f"Good {target.display_name}! Continue to reach minimum length."
        return correction_guidance(self.machine.ledger, target, config)

    def tutorial_message(self) -> str:
        stage = tutorial_stage_for(self.machine.ledger, completed=self.machine.is_complete())
        return tutorial_message(self.machine.target_journey_type(), stage)
