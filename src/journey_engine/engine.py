# journey_engine/engine.py
from __future__ import annotations

import logging
import time
from collections.abc import Iterable
from typing import Any, Optional, Union

from journey_engine.config import EngineSettings, JourneyConfigTable, resolve_journey_type
from journey_engine.contracts import (
    AnomalyKind,
    AnomalyRecord,
    JourneyType,
    MissionEventKind,
    MissionSpec,
    MissionState,
)
from journey_engine.events import Listener, Unsubscribe
from journey_engine.ledger import Clock, JourneyLedger
from journey_engine.mission import MissionStateMachine

log = logging.getLogger(__name__)

MissionTarget = Union[MissionSpec, JourneyType, str]


class JourneyEngine:
    """
    Boundary between the host game and the classification core.

    Sensor callbacks come in through `on_vertex_visited` / `on_edge_crossed`;
    UI and progression collaborators read state through the query methods and
    listen for `MissionEvent`s via `subscribe`.
    """

    def __init__(
        self,
        machine: Optional[MissionStateMachine] = None,
        *,
        configs: Optional[JourneyConfigTable] = None,
        settings: Optional[EngineSettings] = None,
        clock: Clock = time.monotonic,
    ) -> None:
        self.configs = configs or JourneyConfigTable()
        if machine is None:
            machine = MissionStateMachine(
                JourneyLedger(clock=clock),
                settings=settings,
                clock=clock,
            )
        self.machine = machine

    @property
    def settings(self) -> EngineSettings:
        return self.machine.settings

    @property
    def ledger(self) -> JourneyLedger:
        return self.machine.ledger

    @property
    def anomalies(self) -> tuple[AnomalyRecord, ...]:
        return self.machine.anomalies

    def _accepts(self, crosser_id: Optional[str]) -> bool:
        tracked = self.settings.tracked_crosser_id
        if tracked is None or crosser_id == tracked:
            return True
        log.debug("Ignoring event from untracked crosser %r", crosser_id)
        return False

    # sensor inputs

    def on_vertex_visited(self, vertex_id: str, crosser_id: Optional[str] = None) -> bool:
        if not self._accepts(crosser_id):
            return False
        return self.machine.record_vertex_visit(vertex_id) is not None

    def on_edge_crossed(self, edge_id: str, crosser_id: Optional[str] = None) -> bool:
        if not self._accepts(crosser_id):
            return False
        return self.machine.record_edge_crossing(edge_id) is not None

    # UI / progression surface

    def current_journey_length(self) -> int:
        return self.machine.current_journey_length()

    def current_journey_type(self) -> JourneyType:
        return self.machine.current_journey_type()

    def target_journey_type(self) -> JourneyType:
        return self.machine.target_journey_type()

    def is_mission_complete(self) -> bool:
        return self.machine.is_complete()

    def state(self) -> MissionState:
        return self.machine.state()

    def reset(self) -> None:
        self.machine.reset()

    def poll(self) -> bool:
        return self.machine.poll()

    def mission_spec(self, target: MissionTarget, **kwargs: Any) -> MissionSpec:
        if isinstance(target, MissionSpec):
            return target
        resolved = resolve_journey_type(target)
        if not isinstance(target, JourneyType) and resolved.value != str(target).strip().lower():
            self.machine.record_anomaly(
                AnomalyKind.UNKNOWN_TARGET_TYPE,
                "Unrecognized mission target; using the least restrictive configuration",
                {"requested": str(target), "resolved": resolved.value},
                warn=False,
            )
        return self.configs.mission_spec(resolved, **kwargs)

    def set_mission(self, target: MissionTarget, **kwargs: Any) -> bool:
        return self.machine.start(self.mission_spec(target, **kwargs))

    def subscribe(self, listener: Listener, kinds: Optional[Iterable[MissionEventKind]] = None) -> Unsubscribe:
        return self.machine.subscribe(listener, kinds)
