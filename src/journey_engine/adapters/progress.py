# journey_engine/adapters/progress.py
from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Optional, Protocol, Union

from pydantic import BaseModel, ConfigDict, ValidationError

from journey_engine.contracts import JourneyType, MissionEvent, MissionEventKind

log = logging.getLogger(__name__)

PathLike = Union[str, Path]

COMPLETED_TUTORIALS_KEY = "completed_tutorials"
COMPLETED_MISSIONS_KEY = "completed_missions"


class KeyValueStore(Protocol):
    """Adapter interface for the host's save-game flag storage."""

    def get(self, key: str, default: Any = None) -> Any:
        ...

    def set(self, key: str, value: Any) -> None:
        ...

    def delete(self, key: str) -> None:
        ...

    def flush(self) -> None:
        ...


class InMemoryKeyValueStore:
    def __init__(self, initial: Optional[Mapping[str, Any]] = None) -> None:
        self.data: dict[str, Any] = dict(initial or {})

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self.data[key] = value

    def delete(self, key: str) -> None:
        self.data.pop(key, None)

    def flush(self) -> None:
        return None


class JsonFileKeyValueStore:
    """Key-value flags kept in one JSON object on disk, rewritten atomically on flush."""

    def __init__(self, path: PathLike) -> None:
        self.path = Path(path)
        self.data: dict[str, Any] = self._read()

    def _read(self) -> dict[str, Any]:
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except json.JSONDecodeError:
            log.warning("Progress file %s is not valid JSON; starting from empty progress", self.path)
            return {}
        if not isinstance(payload, dict):
            log.warning("Progress file %s does not hold a JSON object; starting from empty progress", self.path)
            return {}
        return payload

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self.data[key] = value

    def delete(self, key: str) -> None:
        self.data.pop(key, None)

    def flush(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        temp_path: Path | None = None
        data = json.dumps(self.data, ensure_ascii=False, sort_keys=True, indent=2) + "\n"
        try:
            with tempfile.NamedTemporaryFile("w", encoding="utf-8", dir=self.path.parent, delete=False) as handle:
                temp_path = Path(handle.name)
                handle.write(data)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(temp_path, self.path)
            temp_path = None
        finally:
            if temp_path is not None:
                try:
                    temp_path.unlink()
                except FileNotFoundError:
                    pass


class MissionCompletion(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)
    mission_index: int
    mission_name: str = ""


class ProgressTracker:
    """
    Which tutorials and missions the player has finished. Completions are
    written through to the store immediately when `save_immediately` is set.
    """

    def __init__(self, store: KeyValueStore, *, save_immediately: bool = True) -> None:
        self.store = store
        self.save_immediately = save_immediately
        self._tutorials: list[JourneyType] = []
        self._missions: dict[int, MissionCompletion] = {}

    @property
    def completed_tutorials(self) -> tuple[JourneyType, ...]:
        return tuple(self._tutorials)

    @property
    def completed_missions(self) -> tuple[MissionCompletion, ...]:
        return tuple(self._missions[index] for index in sorted(self._missions))

    def is_tutorial_completed(self, journey_type: JourneyType) -> bool:
        return journey_type in self._tutorials

    def is_mission_completed(self, mission_index: int) -> bool:
        return mission_index in self._missions

    def record_tutorial_completed(self, journey_type: JourneyType) -> bool:
        if journey_type in self._tutorials:
            return False
        self._tutorials.append(journey_type)
        log.info("Tutorial completed: %s", journey_type.value)
        if self.save_immediately:
            self.save()
        return True

    def record_mission_completed(self, mission_index: int, mission_name: str = "") -> bool:
        if mission_index in self._missions:
            return False
        self._missions[mission_index] = MissionCompletion(mission_index=mission_index, mission_name=mission_name)
        log.info("Mission %d completed: %s", mission_index + 1, mission_name)
        if self.save_immediately:
            self.save()
        return True

    def completion_ratio(self, *, total_tutorials: int = 5, total_missions: int = 5) -> float:
        total = total_tutorials + total_missions
        if total <= 0:
            return 0.0
        return min(1.0, (len(self._tutorials) + len(self._missions)) / total)

    def on_mission_event(self, event: MissionEvent) -> None:
        """Listener for tutorial mode: a completed mission marks its target type as learned."""
        if event.kind == MissionEventKind.MISSION_COMPLETED and event.target_type is not None:
            self.record_tutorial_completed(event.target_type)

    def save(self) -> None:
        self.store.set(COMPLETED_TUTORIALS_KEY, [journey_type.value for journey_type in self._tutorials])
        self.store.set(
            COMPLETED_MISSIONS_KEY,
            [completion.model_dump(mode="json") for completion in self.completed_missions],
        )
        self.store.flush()
        log.debug("Progress saved: %d tutorials, %d missions", len(self._tutorials), len(self._missions))

    def load(self) -> None:
        for raw in self.store.get(COMPLETED_TUTORIALS_KEY, None) or []:
            try:
                journey_type = JourneyType(raw)
            except ValueError:
                log.warning("Skipping unknown tutorial type %r in saved progress", raw)
                continue
            if journey_type not in self._tutorials:
                self._tutorials.append(journey_type)

        for raw in self.store.get(COMPLETED_MISSIONS_KEY, None) or []:
            try:
                completion = MissionCompletion.model_validate(raw)
            except ValidationError:
                log.warning("Skipping malformed mission completion %r in saved progress", raw)
                continue
            self._missions.setdefault(completion.mission_index, completion)

        log.debug("Progress loaded: %d tutorials, %d missions", len(self._tutorials), len(self._missions))

    def clear(self) -> None:
        self._tutorials.clear()
        self._missions.clear()
        self.store.delete(COMPLETED_TUTORIALS_KEY)
        self.store.delete(COMPLETED_MISSIONS_KEY)
        self.store.flush()
