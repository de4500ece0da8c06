# journey_engine/config.py
from __future__ import annotations

import json
import logging
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from journey_engine.contracts import JourneyConfigError, JourneyType, JourneyTypeConfig, MissionSpec

log = logging.getLogger(__name__)

PathLike = Union[str, Path]

FALLBACK_JOURNEY_TYPE = JourneyType.WALK


def require_every_journey_type(table: Mapping[JourneyType, Any], name: str) -> None:
    missing = [jt.value for jt in JourneyType if jt not in table]
    if missing:
        raise JourneyConfigError(f"{name} has no entry for journey type(s): {', '.join(missing)}")


def resolve_journey_type(value: JourneyType | str) -> JourneyType:
    """Map a raw target name onto a JourneyType, degrading unknown names to Walk."""
    if isinstance(value, JourneyType):
        return value
    try:
        return JourneyType(str(value).strip().lower())
    except ValueError:
        log.warning("Unknown journey type %r; falling back to %s", value, FALLBACK_JOURNEY_TYPE.value)
        return FALLBACK_JOURNEY_TYPE


# ------------------------------------------------------------------------------
# Journey type table
# ------------------------------------------------------------------------------

DEFAULT_JOURNEY_CONFIGS: Mapping[JourneyType, JourneyTypeConfig] = {
    JourneyType.WALK: JourneyTypeConfig(
        journey_type=JourneyType.WALK,
        minimum_steps_for_classification=5,
        minimum_steps_for_completion=3,
        mission_instruction="Move between vertices in any pattern - you can repeat vertices and edges freely",
        progress_encouragement="Keep exploring! A walk allows any movement pattern",
        success_message="Perfect walk! You moved freely between vertices",
        correction_hint="For a walk, you can revisit any vertex or cross any bridge multiple times",
    ),
    JourneyType.TRAIL: JourneyTypeConfig(
        journey_type=JourneyType.TRAIL,
        minimum_steps_for_classification=4,
        minimum_steps_for_completion=4,
        mission_instruction="Visit vertices without using the same bridge twice - vertices can be revisited",
        progress_encouragement="Good progress! Remember: no bridge should be crossed twice",
        success_message="Excellent trail! You avoided repeating any bridges",
        correction_hint="For a trail, you can revisit vertices, but don't cross the same bridge twice",
    ),
    JourneyType.PATH: JourneyTypeConfig(
        journey_type=JourneyType.PATH,
        minimum_steps_for_classification=4,
        minimum_steps_for_completion=4,
        mission_instruction="Visit each vertex only once - the most restrictive journey type",
        progress_encouragement="Great! Remember: each vertex should only be visited once",
        success_message="Outstanding path! You visited each vertex exactly once",
        correction_hint="For a path, no vertex should be visited more than once",
    ),
    JourneyType.CIRCUIT: JourneyTypeConfig(
        journey_type=JourneyType.CIRCUIT,
        minimum_steps_for_classification=6,
        minimum_steps_for_completion=5,
        mission_instruction="Create a trail that returns to your starting vertex",
        progress_encouragement="Building your circuit! Remember: no repeated bridges, and return to start",
        success_message="Perfect circuit! You created a closed trail",
        correction_hint="For a circuit, avoid repeating bridges and end where you started",
    ),
    JourneyType.CYCLE: JourneyTypeConfig(
        journey_type=JourneyType.CYCLE,
        minimum_steps_for_classification=6,
        minimum_steps_for_completion=5,
        mission_instruction="Create a path that returns to your starting vertex",
        progress_encouragement="Creating your cycle! Remember: no repeated vertices, and return to start",
        success_message="Excellent cycle! You created a closed path",
        correction_hint="For a cycle, visit each vertex once and end where you started",
    ),
    JourneyType.INVALID: JourneyTypeConfig(
        journey_type=JourneyType.INVALID,
        minimum_steps_for_classification=2,
        minimum_steps_for_completion=2,
        mission_instruction="This journey type is not currently available",
        progress_encouragement="Continue exploring",
        success_message="Journey complete",
        correction_hint="Keep going",
    ),
}


class JourneyConfigTable(Mapping[JourneyType, JourneyTypeConfig]):
    """Immutable JourneyType -> JourneyTypeConfig lookup covering every type."""

    def __init__(self, configs: Mapping[JourneyType, JourneyTypeConfig] | None = None) -> None:
        table = dict(DEFAULT_JOURNEY_CONFIGS if configs is None else configs)
        require_every_journey_type(table, "journey config table")
        for journey_type, config in table.items():
            if config.journey_type != journey_type:
                raise JourneyConfigError(
                    f"config registered under {journey_type.value} describes {config.journey_type.value}"
                )
        self._table = table

    def __getitem__(self, key: JourneyType) -> JourneyTypeConfig:
        return self._table[key]

    def __iter__(self) -> Iterator[JourneyType]:
        return iter(self._table)

    def __len__(self) -> int:
        return len(self._table)

    def get(self, key: Any, default: Any = None) -> JourneyTypeConfig:  # type: ignore[override]
        journey_type = resolve_journey_type(key) if isinstance(key, str) else key
        config = self._table.get(journey_type)
        if config is None:
            log.warning("No config found for journey type %r; using %s", key, FALLBACK_JOURNEY_TYPE.value)
            return default if default is not None else self._table[FALLBACK_JOURNEY_TYPE]
        return config

    def with_overrides(self, overrides: Mapping[JourneyType, JourneyTypeConfig]) -> JourneyConfigTable:
        return JourneyConfigTable({**self._table, **overrides})

    def mission_spec(self, target: JourneyType | str, **kwargs: Any) -> MissionSpec:
        return MissionSpec.for_target(self.get(target), **kwargs)


# ------------------------------------------------------------------------------
# Engine settings / mission catalogue
# ------------------------------------------------------------------------------


class EngineSettings(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    mission_transition_delay_s: float = Field(default=0.5, ge=0)
    suspicious_completion_window_s: float = Field(default=1.0, ge=0)
    tracked_crosser_id: str | None = "Player"


_DEFAULT_MISSION_TEXT: tuple[tuple[JourneyType, str, str, float], ...] = (
    (
        JourneyType.WALK,
        "Free Exploration",
        "Learn that any movement between connected vertices creates a 'walk' - the foundation of all journeys.",
        12.0,
    ),
    (
        JourneyType.TRAIL,
        "Bridge Management",
        "Discover how to create a 'trail' by using each bridge only once - vertices can be revisited.",
        13.0,
    ),
    (
        JourneyType.PATH,
        "Vertex Efficiency",
        "Master the 'path' - the most efficient journey where each vertex is visited exactly once.",
        13.0,
    ),
    (
        JourneyType.CIRCUIT,
        "Closed Trails",
        "Create a 'circuit' - a trail that returns to where you started, using each bridge only once.",
        14.0,
    ),
    (
        JourneyType.CYCLE,
        "Perfect Loops",
        "Achieve a 'cycle' - a path that returns to start, visiting each vertex exactly once.",
        14.0,
    ),
)


def default_missions(configs: Mapping[JourneyType, JourneyTypeConfig] | None = None) -> list[MissionSpec]:
    table = configs if isinstance(configs, JourneyConfigTable) else JourneyConfigTable(configs)
    return [
        table.mission_spec(
            target,
            mission_name=name,
            learning_objective=objective,
            completion_delay_s=delay,
        )
        for target, name, objective, delay in _DEFAULT_MISSION_TEXT
    ]


DEFAULT_MISSIONS: tuple[MissionSpec, ...] = tuple(default_missions())


# ------------------------------------------------------------------------------
# JSON loading
# ------------------------------------------------------------------------------


def _read_json_object(path: PathLike) -> dict[str, Any]:
    p = Path(path)
    try:
        payload = json.loads(p.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise JourneyConfigError(f"{p} is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise JourneyConfigError(f"Expected a JSON object in {p}, got {type(payload).__name__}")
    return payload


def load_journey_configs(path: PathLike, *, base: JourneyConfigTable | None = None) -> JourneyConfigTable:
    """
    Load per-type overrides keyed by journey type value, e.g.
    {"circuit": {"minimum_steps_for_completion": 7}}. Fields that are not
    given keep the values of `base` (the defaults when omitted).
    """
    base_table = base or JourneyConfigTable()
    overrides: dict[JourneyType, JourneyTypeConfig] = {}
    for raw_key, raw_config in _read_json_object(path).items():
        try:
            journey_type = JourneyType(str(raw_key).strip().lower())
        except ValueError as exc:
            raise JourneyConfigError(f"Unknown journey type {raw_key!r} in {path}") from exc
        if not isinstance(raw_config, dict):
            raise JourneyConfigError(f"Config for {raw_key!r} must be a JSON object")
        merged = {**base_table[journey_type].model_dump(), **raw_config, "journey_type": journey_type}
        try:
            overrides[journey_type] = JourneyTypeConfig.model_validate(merged)
        except ValidationError as exc:
            raise JourneyConfigError(f"Invalid config for {raw_key!r}: {exc}") from exc
    return base_table.with_overrides(overrides)


def load_engine_settings(path: PathLike) -> EngineSettings:
    try:
        return EngineSettings.model_validate(_read_json_object(path))
    except ValidationError as exc:
        raise JourneyConfigError(f"Invalid engine settings in {path}: {exc}") from exc
