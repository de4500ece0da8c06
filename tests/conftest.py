from __future__ import annotations

from collections.abc import Callable, Sequence

import pytest

from journey_engine.config import EngineSettings, JourneyConfigTable
from journey_engine.contracts import JourneyType, MissionEvent, MissionSpec
from journey_engine.engine import JourneyEngine
from journey_engine.ledger import JourneyLedger, ManualClock
from journey_engine.mission import MissionStateMachine


@pytest.fixture
def fake_clock() -> ManualClock:
    return ManualClock(start=100.0)


@pytest.fixture
def make_ledger(fake_clock: ManualClock) -> Callable[..., JourneyLedger]:
    def _make_ledger(*, vertices: Sequence[str] = (), edges: Sequence[str | None] = ()) -> JourneyLedger:
        ledger = JourneyLedger(clock=fake_clock)
        padded = list(edges) + [None] * (len(vertices) - len(edges))
        for vertex_id, edge_id in zip(vertices, padded):
            ledger.record_vertex_visit(vertex_id)
            if edge_id:
                ledger.record_edge_crossing(edge_id)
        return ledger

    return _make_ledger


@pytest.fixture
def make_spec() -> Callable[..., MissionSpec]:
    def _make_spec(
        target: JourneyType = JourneyType.WALK,
        *,
        completion_steps: int | None = None,
        classification_steps: int | None = None,
        mission_name: str = "",
        completion_delay_s: float = 13.0,
    ) -> MissionSpec:
        config = JourneyConfigTable()[target]
        return MissionSpec(
            target_type=target,
            minimum_steps_for_classification=(
                config.minimum_steps_for_classification if classification_steps is None else classification_steps
            ),
            minimum_steps_for_completion=(
                config.minimum_steps_for_completion if completion_steps is None else completion_steps
            ),
            mission_name=mission_name,
            completion_delay_s=completion_delay_s,
        )

    return _make_spec


@pytest.fixture
def make_machine(fake_clock: ManualClock) -> Callable[..., MissionStateMachine]:
    def _make_machine(
        *,
        ledger: JourneyLedger | None = None,
        settings: EngineSettings | None = None,
    ) -> MissionStateMachine:
        return MissionStateMachine(
            ledger if ledger is not None else JourneyLedger(clock=fake_clock),
            settings=settings,
            clock=fake_clock,
        )

    return _make_machine


@pytest.fixture
def make_engine(fake_clock: ManualClock) -> Callable[..., JourneyEngine]:
    def _make_engine(
        *,
        settings: EngineSettings | None = None,
        configs: JourneyConfigTable | None = None,
    ) -> JourneyEngine:
        return JourneyEngine(configs=configs, settings=settings, clock=fake_clock)

    return _make_engine


@pytest.fixture
def walk(fake_clock: ManualClock) -> Callable[..., None]:
    """Drive a machine or engine along "A e1 B e2 C" (vertices and bridges alternate)."""

    def _walk(target: MissionStateMachine | JourneyEngine, route: str, *, step_s: float = 1.0) -> None:
        for position, token in enumerate(route.split()):
            if position % 2 == 0:
                fake_clock.advance(step_s)
                if isinstance(target, JourneyEngine):
                    target.on_vertex_visited(token, "Player")
                else:
                    target.record_vertex_visit(token)
            elif isinstance(target, JourneyEngine):
                target.on_edge_crossed(token, "Player")
            else:
                target.record_edge_crossing(token)

    return _walk


@pytest.fixture
def recorded_events() -> Callable[[MissionStateMachine | JourneyEngine], list[MissionEvent]]:
    def _recorded(target: MissionStateMachine | JourneyEngine) -> list[MissionEvent]:
        events: list[MissionEvent] = []
        target.subscribe(events.append)
        return events

    return _recorded
