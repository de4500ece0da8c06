# features/steps/journey_steps.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from behave import given, then, when  # type: ignore[import-untyped]

from journey_engine.config import JourneyConfigTable
from journey_engine.contracts import JourneyType, MissionSpec
from journey_engine.engine import JourneyEngine
from journey_engine.ledger import ManualClock


@dataclass
class JourneyStepState:
    clock: ManualClock = field(default_factory=ManualClock)
    engine: JourneyEngine | None = None


def get_journey_step_state(context: Any) -> JourneyStepState:
    state = getattr(context, "_journey_step_state", None)
    if not isinstance(state, JourneyStepState):
        state = JourneyStepState()
        setattr(context, "_journey_step_state", state)
    return state


def _engine(context: Any) -> JourneyEngine:
    engine = get_journey_step_state(context).engine
    assert engine is not None, "engine not created; missing 'Given a fresh journey engine'"
    return engine


def _spec(target: str, steps: int) -> MissionSpec:
    config = JourneyConfigTable()[JourneyType(target)]
    return MissionSpec(
        target_type=config.journey_type,
        minimum_steps_for_classification=config.minimum_steps_for_classification,
        minimum_steps_for_completion=steps,
    )


@given("a fresh journey engine")
def step_fresh_engine(context: Any) -> None:
    state = get_journey_step_state(context)
    state.clock = ManualClock()
    state.engine = JourneyEngine(clock=state.clock)


@given('the mission target is "{target}" with {steps:d} steps required')
def step_mission_target(context: Any, target: str, steps: int) -> None:
    assert _engine(context).set_mission(_spec(target, steps))


@when('the player walks "{route}"')
def step_player_walks(context: Any, route: str) -> None:
    state = get_journey_step_state(context)
    engine = _engine(context)
    # alternating tokens: vertex, bridge, vertex, ...
    for position, token in enumerate(route.split()):
        if position % 2 == 0:
            state.clock.advance(1.0)
            engine.on_vertex_visited(token, "Player")
        else:
            engine.on_edge_crossed(token, "Player")


@when('the sensor reports bridge "{edge_id}" before any vertex')
def step_orphan_bridge(context: Any, edge_id: str) -> None:
    _engine(context).on_edge_crossed(edge_id, "Player")


@when('the next mission targets "{target}" with {steps:d} steps required')
def step_next_mission(context: Any, target: str, steps: int) -> None:
    get_journey_step_state(context).clock.advance(1.0)
    assert _engine(context).set_mission(_spec(target, steps))


@then('the journey is classified as "{journey_type}"')
def step_classified_as(context: Any, journey_type: str) -> None:
    assert _engine(context).current_journey_type() == JourneyType(journey_type)


@then("the mission is complete")
def step_mission_complete(context: Any) -> None:
    assert _engine(context).is_mission_complete()


@then("the mission is not complete")
def step_mission_not_complete(context: Any) -> None:
    assert not _engine(context).is_mission_complete()


@then("the journey has {count:d} steps")
def step_journey_length(context: Any, count: int) -> None:
    assert _engine(context).current_journey_length() == count


@then('an "{kind}" anomaly is recorded')
def step_anomaly_recorded(context: Any, kind: str) -> None:
    assert kind in {record.kind.value for record in _engine(context).anomalies}
