# journey_engine/mission.py
from __future__ import annotations

import logging
import time
from collections.abc import Iterable
from typing import Any, Mapping, Optional

from journey_engine.classifier import classify, is_valid_for_target
from journey_engine.config import EngineSettings
from journey_engine.contracts import (
    AnomalyKind,
    AnomalyRecord,
    JourneyStep,
    JourneyType,
    MissionEvent,
    MissionEventKind,
    MissionPhase,
    MissionSpec,
    MissionState,
)
from journey_engine.events import Listener, MissionEventChannel, Unsubscribe
from journey_engine.invariants import (
    COMPLETION_GATE,
    RESET_GATE,
    Flow,
    MissionCheckContext,
    first_stop,
    run_checkers,
)
from journey_engine.ledger import Clock, JourneyLedger

log = logging.getLogger(__name__)


class MissionStateMachine:
    """
    NotStarted -> InProgress -> Complete for one mission at a time.

    The machine owns the ledger it is given and is the only thing that should
    mutate it. Every step event re-runs the classifier and re-evaluates the
    completion predicate; completion is sticky until the next start or an
    explicit reset.
    """

    def __init__(
        self,
        ledger: Optional[JourneyLedger] = None,
        *,
        settings: Optional[EngineSettings] = None,
        clock: Clock = time.monotonic,
        channel: Optional[MissionEventChannel] = None,
    ) -> None:
        self._clock = clock
        self._ledger = ledger if ledger is not None else JourneyLedger(clock=clock)
        self._settings = settings or EngineSettings()
        self._channel = channel or MissionEventChannel()

        self._phase = MissionPhase.NOT_STARTED
        self._target: Optional[MissionSpec] = None
        self._pending: Optional[MissionSpec] = None
        self._started_at: Optional[float] = None
        self._completed_at: Optional[float] = None
        self._last_type = classify(self._ledger)
        self._anomalies: list[AnomalyRecord] = []
        self.start_count = 0

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def ledger(self) -> JourneyLedger:
        return self._ledger

    @property
    def settings(self) -> EngineSettings:
        return self._settings

    @property
    def phase(self) -> MissionPhase:
        return self._phase

    @property
    def target(self) -> Optional[MissionSpec]:
        return self._target

    @property
    def pending_target(self) -> Optional[MissionSpec]:
        return self._pending

    @property
    def started_at(self) -> Optional[float]:
        return self._started_at

    @property
    def completed_at(self) -> Optional[float]:
        return self._completed_at

    @property
    def anomalies(self) -> tuple[AnomalyRecord, ...]:
        return tuple(self._anomalies)

    def is_complete(self) -> bool:
        return self._phase == MissionPhase.COMPLETE

    def current_journey_length(self) -> int:
        return self._ledger.length()

    def current_journey_type(self) -> JourneyType:
        return classify(self._ledger)

    def target_journey_type(self) -> JourneyType:
        return self._target.target_type if self._target is not None else JourneyType.INVALID

    def seconds_since_start(self) -> Optional[float]:
        if self._started_at is None:
            return None
        return self._clock() - self._started_at

    def state(self) -> MissionState:
        return MissionState(
            current_journey=self._ledger.steps(),
            target=self._target,
            completed=self.is_complete(),
            phase=self._phase,
            journey_type=self.current_journey_type(),
        )

    def subscribe(self, listener: Listener, kinds: Optional[Iterable[MissionEventKind]] = None) -> Unsubscribe:
        return self._channel.subscribe(listener, kinds)

    # ------------------------------------------------------------------
    # Mission lifecycle
    # ------------------------------------------------------------------

    def start(self, spec: MissionSpec) -> bool:
        """
        Start `spec`, or defer it when the previous start was less than
        `mission_transition_delay_s` ago. Returns True when the mission is
        live on return; a deferred start is applied by `poll()`.
        """
        now = self._clock()
        if self._within_transition_window(now):
            if self._pending is not None:
                log.debug("Replacing deferred mission %s with %s", self._pending.target_type.value, spec.target_type.value)
            self._pending = spec
            self.record_anomaly(
                AnomalyKind.DEFERRED_MISSION_START,
                "Mission start requested too soon after the previous start; deferring",
                {
                    "target_type": spec.target_type.value,
                    "delay_s": self._settings.mission_transition_delay_s,
                },
            )
            return False

        self._pending = None
        self._begin(spec, now)
        return True

    set_mission = start

    def poll(self) -> bool:
        """Apply a deferred start once the transition window has elapsed."""
        if self._pending is None:
            return False
        now = self._clock()
        if self._within_transition_window(now):
            return False
        spec, self._pending = self._pending, None
        self._begin(spec, now)
        return True

    def reset(self) -> None:
        self._reset_journey()
        if self._phase == MissionPhase.COMPLETE:
            self._phase = MissionPhase.IN_PROGRESS
        self._completed_at = None
        self._last_type = classify(self._ledger)
        self._publish(MissionEventKind.JOURNEY_RESET)

    def _within_transition_window(self, now: float) -> bool:
        if self._started_at is None:
            return False
        return now - self._started_at < self._settings.mission_transition_delay_s

    def _begin(self, spec: MissionSpec, now: float) -> None:
        self.start_count += 1
        log.info(
            "Starting mission %r (target=%s, start #%d)",
            spec.mission_name or spec.target_type.value,
            spec.target_type.value,
            self.start_count,
        )
        self._reset_journey()
        self._target = spec
        self._phase = MissionPhase.IN_PROGRESS
        self._started_at = now
        self._completed_at = None
        self._last_type = classify(self._ledger)
        self._publish(MissionEventKind.MISSION_STARTED)
        # a zero-step threshold must not complete an empty journey
        self._evaluate()

    def _reset_journey(self) -> None:
        self._ledger.reset()
        if self._verify_reset():
            return

        self._ledger.force_rebuild()
        if self._verify_reset(record=False):
            return

        log.warning("Ledger still dirty after rebuild; replacing it with a fresh ledger")
        self._ledger = JourneyLedger(clock=self._clock)

    def _verify_reset(self, *, record: bool = True) -> bool:
        outcomes = run_checkers(
            ctx=MissionCheckContext(
                journey_length=self._ledger.length(),
                starting_vertex=self._ledger.starting_vertex,
            ),
            invariant_ids=RESET_GATE,
        )
        halt = first_stop(outcomes)
        if halt is None:
            return True
        if record:
            self.record_anomaly(AnomalyKind.RESET_VERIFICATION_FAILED, halt.reason, dict(halt.details))
        return False

    # ------------------------------------------------------------------
    # Step events
    # ------------------------------------------------------------------

    def record_vertex_visit(self, vertex_id: str) -> Optional[JourneyStep]:
        if not vertex_id or not vertex_id.strip():
            self.record_anomaly(
                AnomalyKind.BLANK_VERTEX_ID,
                "Vertex visit reported without a vertex id; dropping it",
                {"vertex_id": vertex_id},
            )
            return None
        self.poll()
        step = self._ledger.record_vertex_visit(vertex_id)
        self._publish(MissionEventKind.STEP_RECORDED)
        self._evaluate()
        return step

    def record_edge_crossing(self, edge_id: str) -> Optional[JourneyStep]:
        self.poll()
        step = self._ledger.record_edge_crossing(edge_id)
        if step is None:
            self.record_anomaly(
                AnomalyKind.ORPHAN_EDGE_CROSSING,
                "Edge crossing reported before any vertex visit",
                {"edge_id": edge_id},
                warn=False,
            )
            return None
        self._publish(MissionEventKind.EDGE_RECORDED)
        self._evaluate()
        return step

    def _evaluate(self) -> None:
        current = classify(self._ledger)
        if current != self._last_type:
            previous, self._last_type = self._last_type, current
            log.debug("Journey reclassified %s -> %s", previous.value, current.value)
            self._publish(MissionEventKind.JOURNEY_TYPE_CHANGED, previous_type=previous)

        if self._phase != MissionPhase.IN_PROGRESS or self._target is None:
            return

        length = self._ledger.length()
        if length < self._target.minimum_steps_for_completion:
            return
        if not is_valid_for_target(current, self._target.target_type):
            return

        outcomes = run_checkers(
            ctx=MissionCheckContext(
                journey_length=length,
                starting_vertex=self._ledger.starting_vertex,
                completing=True,
                seconds_since_start=self.seconds_since_start(),
                suspicious_completion_window_s=self._settings.suspicious_completion_window_s,
            ),
            invariant_ids=COMPLETION_GATE,
        )
        halt = first_stop(outcomes)
        if halt is not None:
            self.record_anomaly(AnomalyKind.EMPTY_JOURNEY_COMPLETION, halt.reason, dict(halt.details))
            return
        for outcome in outcomes:
            if not outcome.passed and outcome.flow == Flow.CONTINUE:
                self.record_anomaly(AnomalyKind.SUSPICIOUS_COMPLETION, outcome.reason, dict(outcome.details))

        self._phase = MissionPhase.COMPLETE
        self._completed_at = self._clock()
        log.info(
            "Mission %r complete: %s in %d steps",
            self._target.mission_name or self._target.target_type.value,
            current.value,
            length,
        )
        self._publish(MissionEventKind.MISSION_COMPLETED)

    # ------------------------------------------------------------------
    # Notifications / anomalies
    # ------------------------------------------------------------------

    def record_anomaly(
        self,
        kind: AnomalyKind,
        message: str,
        details: Optional[Mapping[str, Any]] = None,
        *,
        warn: bool = True,
    ) -> AnomalyRecord:
        record = AnomalyRecord(kind=kind, message=message, details=dict(details or {}), timestamp=self._clock())
        self._anomalies.append(record)
        if warn:
            log.warning("%s: %s %s", kind.value, message, record.details)
        return record

    def _publish(self, kind: MissionEventKind, *, previous_type: Optional[JourneyType] = None) -> None:
        target = self._target
        self._channel.publish(
            MissionEvent(
                kind=kind,
                target_type=target.target_type if target is not None else None,
                mission_name=target.mission_name if target is not None else "",
                journey_length=self._ledger.length(),
                journey_type=self._last_type,
                previous_type=previous_type,
                timestamp=self._clock(),
            )
        )
