from __future__ import annotations

from collections.abc import Callable

import pytest

from journey_engine.classifier import (
    SATISFYING_TYPES,
    analyze,
    classify,
    classify_sequence,
    is_valid_for_target,
    journey_explanation,
)
from journey_engine.contracts import JourneyType
from journey_engine.ledger import JourneyLedger


@pytest.mark.parametrize(
    ("vertices", "edges", "expected"),
    [
        ([], [], JourneyType.WALK),
        (["A"], [], JourneyType.WALK),
        (["A", "B", "C", "A"], ["e1", "e2", "e3"], JourneyType.CYCLE),
        (["A", "B", "C", "D", "A"], ["e1", "e2", "e3", "e1"], JourneyType.WALK),
        (["A", "B", "C", "B", "D"], ["e1", "e2", "e3", "e4"], JourneyType.TRAIL),
        (["A", "B", "C", "D"], ["e1", "e2", "e3"], JourneyType.PATH),
        (["A", "B", "C", "B", "A"], ["e1", "e2", "e3", "e4"], JourneyType.CIRCUIT),
        (["A", "B", "A", "B"], ["e1", "e1", "e1"], JourneyType.WALK),
        (["A", "B"], ["e1"], JourneyType.PATH),
    ],
)
def test_classify_sequence_examples(vertices: list[str], edges: list[str], expected: JourneyType) -> None:
    assert classify_sequence(vertices, edges) is expected


def test_two_vertex_return_is_not_a_closed_journey() -> None:
    # A -> A needs more than two entries to count as returning to start
    assert classify_sequence(["A", "A"], ["e1"]) is JourneyType.TRAIL


def test_classify_ignores_unset_edges(make_ledger: Callable[..., JourneyLedger]) -> None:
    ledger = make_ledger(vertices=["A", "B", "C", "D"], edges=["e1", None, "e3"])

    assert ledger.edges() == ["e1", "e3"]
    assert classify(ledger) is JourneyType.PATH


def test_classify_is_pure(make_ledger: Callable[..., JourneyLedger]) -> None:
    ledger = make_ledger(vertices=["A", "B", "C", "A"], edges=["e1", "e2", "e3"])
    before = ledger.steps()

    first = classify(ledger)
    second = classify(ledger)

    assert first is second is JourneyType.CYCLE
    assert ledger.steps() == before


def test_analyze_reports_intermediate_facts(make_ledger: Callable[..., JourneyLedger]) -> None:
    facts = analyze(make_ledger(vertices=["A", "B", "C", "D", "A"], edges=["e1", "e2", "e3", "e1"]))

    assert facts.journey_type is JourneyType.WALK
    assert facts.returns_to_start is True
    assert facts.has_repeated_vertices is True
    assert facts.has_repeated_edges is True
    assert (facts.vertex_count, facts.edge_count) == (5, 4)


@pytest.mark.parametrize(
    ("target", "satisfied_by"),
    [
        (JourneyType.WALK, set(JourneyType)),
        (JourneyType.TRAIL, {JourneyType.TRAIL, JourneyType.PATH, JourneyType.CIRCUIT, JourneyType.CYCLE}),
        (JourneyType.PATH, {JourneyType.PATH, JourneyType.CYCLE}),
        (JourneyType.CIRCUIT, {JourneyType.CIRCUIT}),
        (JourneyType.CYCLE, {JourneyType.CYCLE}),
        (JourneyType.INVALID, {JourneyType.INVALID}),
    ],
)
def test_is_valid_for_target_table(target: JourneyType, satisfied_by: set[JourneyType]) -> None:
    actual = {journey_type for journey_type in JourneyType if is_valid_for_target(journey_type, target)}
    assert actual == satisfied_by


def test_satisfaction_is_monotone_under_type_preserving_extension(
    make_ledger: Callable[..., JourneyLedger],
) -> None:
    ledger = make_ledger(vertices=["A", "B", "C", "B"], edges=["e1", "e2", "e3"])
    assert classify(ledger) is JourneyType.TRAIL
    assert is_valid_for_target(classify(ledger), JourneyType.TRAIL)

    ledger.record_edge_crossing("e4")
    ledger.record_vertex_visit("D")

    assert classify(ledger) is JourneyType.TRAIL
    assert is_valid_for_target(classify(ledger), JourneyType.TRAIL)


def test_invalid_target_has_no_satisfaction_entry() -> None:
    assert JourneyType.INVALID not in SATISFYING_TYPES


def test_every_journey_type_has_an_explanation() -> None:
    for journey_type in JourneyType:
        assert journey_explanation(journey_type)
    assert "returns to its starting vertex" in journey_explanation(JourneyType.CYCLE)
