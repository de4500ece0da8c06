"""Journey classification.

Classification is recomputed from the full step sequence on every call. No
result is cached between calls, so a classification always reflects the
ledger exactly as it is.

Precedence, most restrictive first:

    returns to start, no repeated vertex, no repeated edge  -> Cycle
    returns to start, no repeated edge                      -> Circuit
    no repeated vertex                                      -> Path
    no repeated edge                                        -> Trail
    anything else                                           -> Walk

A closed journey that repeats an edge is judged like any open one. Its full
vertex list always repeats the start vertex, so it can only end up as Walk.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Protocol

from journey_engine.config import require_every_journey_type
from journey_engine.contracts import JourneyType


class JourneyView(Protocol):
    def length(self) -> int: ...

    def vertices(self) -> list[str]: ...

    def edges(self) -> list[str]: ...


@dataclass(frozen=True)
class JourneyAnalysis:
    journey_type: JourneyType
    vertex_count: int
    edge_count: int
    returns_to_start: bool
    has_repeated_vertices: bool
    has_repeated_edges: bool


def _has_repeats(items: Sequence[str]) -> bool:
    return len(items) != len(set(items))


def analyze_sequence(vertices: Sequence[str], edges: Sequence[str]) -> JourneyAnalysis:
    vertices = list(vertices)
    edges = [edge for edge in edges if edge]

    returns_to_start = len(vertices) > 2 and vertices[0] == vertices[-1]
    has_repeated_vertices = _has_repeats(vertices)
    has_repeated_edges = _has_repeats(edges)

    def _result(journey_type: JourneyType) -> JourneyAnalysis:
        return JourneyAnalysis(
            journey_type=journey_type,
            vertex_count=len(vertices),
            edge_count=len(edges),
            returns_to_start=returns_to_start,
            has_repeated_vertices=has_repeated_vertices,
            has_repeated_edges=has_repeated_edges,
        )

    if len(vertices) < 2:
        return _result(JourneyType.WALK)

    if returns_to_start and not has_repeated_edges:
        closed_vertices = vertices[:-1]
        if not _has_repeats(closed_vertices):
            return _result(JourneyType.CYCLE)
        return _result(JourneyType.CIRCUIT)

    if not has_repeated_vertices:
        return _result(JourneyType.PATH)
    if not has_repeated_edges:
        return _result(JourneyType.TRAIL)
    return _result(JourneyType.WALK)


def analyze(journey: JourneyView) -> JourneyAnalysis:
    return analyze_sequence(journey.vertices(), journey.edges())


def classify_sequence(vertices: Sequence[str], edges: Sequence[str]) -> JourneyType:
    return analyze_sequence(vertices, edges).journey_type


def classify(journey: JourneyView) -> JourneyType:
    return analyze(journey).journey_type


# target -> actual types that satisfy it
SATISFYING_TYPES: Mapping[JourneyType, frozenset[JourneyType]] = {
    JourneyType.WALK: frozenset(JourneyType),
    JourneyType.TRAIL: frozenset(
        {JourneyType.TRAIL, JourneyType.PATH, JourneyType.CIRCUIT, JourneyType.CYCLE}
    ),
    JourneyType.PATH: frozenset({JourneyType.PATH, JourneyType.CYCLE}),
    JourneyType.CIRCUIT: frozenset({JourneyType.CIRCUIT}),
    JourneyType.CYCLE: frozenset({JourneyType.CYCLE}),
}


def is_valid_for_target(actual: JourneyType, target: JourneyType) -> bool:
    satisfying = SATISFYING_TYPES.get(target)
    if satisfying is None:
        return actual == target
    return actual in satisfying


JOURNEY_EXPLANATIONS: Mapping[JourneyType, str] = {
    JourneyType.WALK: "A walk is any sequence of connected vertices and edges - complete freedom of movement.",
    JourneyType.TRAIL: "A trail is a walk where no edge (bridge) is repeated - vertices can be revisited.",
    JourneyType.PATH: "A path is a walk where no vertex is repeated - the most restrictive journey.",
    JourneyType.CIRCUIT: "A circuit is a trail that returns to its starting vertex - closed trail.",
    JourneyType.CYCLE: "A cycle is a path that returns to its starting vertex - closed path.",
    JourneyType.INVALID: "This journey type is not recognized.",
}


require_every_journey_type(JOURNEY_EXPLANATIONS, "journey explanations")


def journey_explanation(journey_type: JourneyType) -> str:
    return JOURNEY_EXPLANATIONS[journey_type]
