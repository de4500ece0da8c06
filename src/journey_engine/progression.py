"""Ordered learning missions driven on top of a MissionStateMachine."""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from typing import TYPE_CHECKING, Optional

from journey_engine.config import DEFAULT_MISSIONS
from journey_engine.contracts import JourneyType, MissionEvent, MissionEventKind, MissionIndexError, MissionSpec
from journey_engine.ledger import Clock
from journey_engine.mission import MissionStateMachine

if TYPE_CHECKING:
    from journey_engine.adapters.progress import ProgressTracker

log = logging.getLogger(__name__)


class MissionProgression:
    """
    Walks the player through `missions` in order. A completed mission is
    shown for its `completion_delay_s` before `poll()` advances to the next
    one; after the last mission the progression is `all_complete`.
    """

    def __init__(
        self,
        machine: MissionStateMachine,
        missions: Sequence[MissionSpec] = DEFAULT_MISSIONS,
        *,
        clock: Clock = time.monotonic,
        progress: Optional[ProgressTracker] = None,
    ) -> None:
        if not missions:
            raise MissionIndexError("a mission progression needs at least one mission")
        self.machine = machine
        self.missions = tuple(missions)
        self.progress = progress
        self._clock = clock
        self._index = 0
        self._pending_index: Optional[int] = None
        self._started = False
        self._all_complete = False
        self._completed: set[int] = set()
        machine.subscribe(self._on_mission_started, kinds=(MissionEventKind.MISSION_STARTED,))
        machine.subscribe(self._on_mission_completed, kinds=(MissionEventKind.MISSION_COMPLETED,))

    @property
    def current_index(self) -> int:
        return self._index

    @property
    def pending_index(self) -> Optional[int]:
        """Mission index waiting for a deferred start to be applied, if any."""
        return self._pending_index

    @property
    def current_mission(self) -> Optional[MissionSpec]:
        if self._all_complete:
            return None
        return self.missions[self._index]

    @property
    def all_complete(self) -> bool:
        return self._all_complete

    @property
    def completed_indices(self) -> frozenset[int]:
        return frozenset(self._completed)

    def current_mission_name(self) -> str:
        mission = self.current_mission
        return mission.mission_name if mission is not None else "Complete"

    def current_target_type(self) -> JourneyType:
        mission = self.current_mission
        return mission.target_type if mission is not None else JourneyType.INVALID

    def start(self, index: int = 0) -> bool:
        if index >= len(self.missions):
            self._finish()
            return False
        if index < 0:
            raise MissionIndexError(f"mission index {index} is out of range")
        self._pending_index = index
        return self.machine.start(self.missions[index])

    def next_mission(self) -> bool:
        if self._index < len(self.missions) - 1:
            return self.start(self._index + 1)
        return False

    def previous_mission(self) -> bool:
        if self._index > 0:
            return self.start(self._index - 1)
        return False

    def restart_current_mission(self) -> bool:
        return self.start(self._index)

    def jump_to_mission(self, index: int) -> bool:
        if not 0 <= index < len(self.missions):
            raise MissionIndexError(f"mission index {index} is out of range 0..{len(self.missions) - 1}")
        return self.start(index)

    def poll(self) -> bool:
        """Apply deferred starts and auto-advance once a completion has been shown long enough."""
        self.machine.poll()
        if not self._started or self._all_complete or not self.machine.is_complete():
            return False
        completed_at = self.machine.completed_at
        mission = self.missions[self._index]
        if completed_at is None or self._clock() - completed_at < mission.completion_delay_s:
            return False
        if self._index < len(self.missions) - 1:
            log.info("Auto-advancing to mission %d", self._index + 2)
            self.start(self._index + 1)
        else:
            self._finish()
        return True

    def overall_progress(self) -> tuple[int, int, int]:
        total = len(self.missions)
        done = len(self._completed)
        return done, total, round(100 * done / total)

    def _finish(self) -> None:
        if not self._all_complete:
            log.info("All %d missions complete", len(self.missions))
        self._all_complete = True

    def _on_mission_started(self, event: MissionEvent) -> None:
        index = self._pending_index
        if index is None or self.machine.target is not self.missions[index]:
            return
        self._pending_index = None
        self._index = index
        self._started = True
        self._all_complete = False
        log.info("Mission %d/%d: %s", index + 1, len(self.missions), event.mission_name)

    def _on_mission_completed(self, event: MissionEvent) -> None:
        mission = self.missions[self._index]
        if event.target_type != mission.target_type:
            return
        self._completed.add(self._index)
        if self.progress is not None:
            self.progress.record_mission_completed(self._index, mission.mission_name)
