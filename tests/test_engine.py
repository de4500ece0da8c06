from __future__ import annotations

from collections.abc import Callable

from journey_engine.config import EngineSettings
from journey_engine.contracts import AnomalyKind, JourneyType, MissionEvent, MissionEventKind, MissionSpec
from journey_engine.engine import JourneyEngine
from journey_engine.ledger import ManualClock


def test_untracked_crosser_is_ignored(make_engine: Callable[..., JourneyEngine]) -> None:
    engine = make_engine()
    engine.set_mission(JourneyType.WALK)

    assert engine.on_vertex_visited("A", "Player") is True
    assert engine.on_vertex_visited("B", "Npc") is False
    assert engine.on_edge_crossed("e1", "Npc") is False

    assert engine.current_journey_length() == 1
    assert engine.ledger.edges() == []


def test_any_crosser_counts_when_tracking_is_disabled(make_engine: Callable[..., JourneyEngine]) -> None:
    engine = make_engine(settings=EngineSettings(tracked_crosser_id=None))

    engine.on_vertex_visited("A", "Npc")
    engine.on_vertex_visited("B")

    assert engine.current_journey_length() == 2


def test_orphan_edge_reports_false(make_engine: Callable[..., JourneyEngine]) -> None:
    engine = make_engine()
    engine.set_mission("trail")

    assert engine.on_edge_crossed("e1", "Player") is False
    assert [a.kind for a in engine.anomalies] == [AnomalyKind.ORPHAN_EDGE_CROSSING]


def test_mission_spec_accepts_names_types_and_specs(make_engine: Callable[..., JourneyEngine]) -> None:
    engine = make_engine()

    by_name = engine.mission_spec(" Circuit ")
    by_type = engine.mission_spec(JourneyType.CIRCUIT, mission_name="Closed Trails")
    ready = MissionSpec(target_type=JourneyType.PATH, minimum_steps_for_classification=1, minimum_steps_for_completion=2)

    assert by_name.target_type is JourneyType.CIRCUIT
    assert by_name.minimum_steps_for_completion == 5
    assert by_type.mission_name == "Closed Trails"
    assert engine.mission_spec(ready) is ready
    assert engine.anomalies == ()


def test_unknown_target_falls_back_to_walk(make_engine: Callable[..., JourneyEngine]) -> None:
    engine = make_engine()

    assert engine.set_mission("spiral") is True

    assert engine.target_journey_type() is JourneyType.WALK
    (anomaly,) = engine.anomalies
    assert anomaly.kind is AnomalyKind.UNKNOWN_TARGET_TYPE
    assert anomaly.details == {"requested": "spiral", "resolved": "walk"}


def test_full_cycle_mission_through_engine(
    make_engine: Callable[..., JourneyEngine],
    walk: Callable[..., None],
    recorded_events: Callable[..., list[MissionEvent]],
) -> None:
    engine = make_engine()
    events = recorded_events(engine)
    engine.set_mission(JourneyType.CYCLE)

    walk(engine, "A e1 B e2 C e3 D e4 A")

    assert engine.current_journey_type() is JourneyType.CYCLE
    assert engine.is_mission_complete()
    assert engine.state().completed is True
    assert events[-1].kind is MissionEventKind.MISSION_COMPLETED
    assert events[-1].journey_length == 5


def test_poll_applies_deferred_mission(make_engine: Callable[..., JourneyEngine], fake_clock: ManualClock) -> None:
    engine = make_engine()
    engine.set_mission(JourneyType.WALK)

    assert engine.set_mission(JourneyType.PATH) is False
    fake_clock.advance(1.0)

    assert engine.poll() is True
    assert engine.target_journey_type() is JourneyType.PATH


def test_reset_clears_journey_but_keeps_target(
    make_engine: Callable[..., JourneyEngine],
    walk: Callable[..., None],
) -> None:
    engine = make_engine()
    engine.set_mission(JourneyType.TRAIL)
    walk(engine, "A e1 B")

    engine.reset()

    assert engine.current_journey_length() == 0
    assert engine.target_journey_type() is JourneyType.TRAIL


def test_blank_vertex_id_is_dropped_not_raised(make_engine: Callable[..., JourneyEngine]) -> None:
    engine = make_engine()
    engine.set_mission(JourneyType.WALK)

    assert engine.on_vertex_visited("", "Player") is False

    assert engine.current_journey_length() == 0
    assert [a.kind for a in engine.anomalies] == [AnomalyKind.BLANK_VERTEX_ID]
    assert engine.on_vertex_visited("A", "Player") is True
