"""Append-only record of the steps walked during the current mission attempt."""

from __future__ import annotations

import logging
import time
from typing import Callable

from journey_engine.contracts import JourneyStep

log = logging.getLogger(__name__)

Clock = Callable[[], float]


class JourneyLedger:
    """Ordered (vertex, incoming edge) steps plus the starting-vertex marker.

    Steps are only ever appended; the one permitted mutation is filling in the
    edge of the most recent step when a crossing is reported after the visit
    it led to. The whole journey is discarded on `reset()`; there is no undo
    of individual steps.
    """

    def __init__(self, *, clock: Clock = time.monotonic) -> None:
        self._clock = clock
        self._steps: list[JourneyStep] = []
        self._starting_vertex: str | None = None
        self._next_index = 0
        self.reset_count = 0

    def __len__(self) -> int:
        return len(self._steps)

    def __repr__(self) -> str:
        return f"JourneyLedger(steps={len(self._steps)}, starting_vertex={self._starting_vertex!r})"

    @property
    def starting_vertex(self) -> str | None:
        return self._starting_vertex

    def reset(self) -> None:
        self.reset_count += 1
        if self._steps:
            log.debug("Resetting journey %s (reset #%d)", " → ".join(self.vertices()), self.reset_count)
        self._steps.clear()
        self._starting_vertex = None
        self._next_index = 0

    def force_rebuild(self) -> None:
        """Replace the storage with fresh empty containers."""
        self._steps = []
        self._starting_vertex = None
        self._next_index = 0

    def is_clean(self) -> bool:
        return not self._steps and self._starting_vertex is None

    def record_vertex_visit(self, vertex_id: str) -> JourneyStep:
        step = JourneyStep(
            vertex_id=vertex_id,
            edge_id=None,
            sequence_index=self._next_index,
            timestamp=self._clock(),
        )
        if not self._steps:
            self._starting_vertex = vertex_id
            log.debug("Starting vertex set to %s", vertex_id)
        self._steps.append(step)
        self._next_index += 1
        log.debug("Journey now has %d steps", len(self._steps))
        return step

    def record_edge_crossing(self, edge_id: str) -> JourneyStep | None:
        if not self._steps:
            log.warning("Edge %s crossed but no journey steps recorded; dropping the crossing", edge_id)
            return None
        last = self._steps[-1]
        last.edge_id = edge_id
        log.debug("Attached edge %s to step %d", edge_id, last.sequence_index)
        return last

    def length(self) -> int:
        return len(self._steps)

    def vertices(self) -> list[str]:
        return [step.vertex_id for step in self._steps]

    def edges(self) -> list[str]:
        return [step.edge_id for step in self._steps if step.edge_id]

    def steps(self) -> list[JourneyStep]:
        return [step.model_copy() for step in self._steps]


class ManualClock:
    """Deterministic clock for replays and tests; time only moves when told to."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> float:
        self.now += seconds
        return self.now
