# journey_engine/adapters/persistence.py
from __future__ import annotations

import json
from dataclasses import asdict, is_dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, Tuple, Union

from pydantic import BaseModel

from journey_engine.contracts import AnomalyRecord, MissionEvent

JsonObj = Dict[str, Any]
PathLike = Union[str, Path]

MISSION_EVENTS_LOG_PATH = Path("artifacts/mission_events.jsonl")
ANOMALIES_LOG_PATH = Path("artifacts/anomalies.jsonl")


def _to_jsonable(x: Any) -> Any:
    if x is None:
        return None
    if isinstance(x, BaseModel):
        return x.model_dump(mode="json")
    if is_dataclass(x) and not isinstance(x, type):
        return asdict(x)
    if isinstance(x, dict):
        return {str(k): _to_jsonable(v) for k, v in x.items()}
    if isinstance(x, (list, tuple)):
        return [_to_jsonable(v) for v in x]
    return x


def _next_offset(p: Path) -> int:
    if not p.exists():
        return 1
    return len(p.read_text(encoding="utf-8").splitlines()) + 1


def append_jsonl(path: PathLike, record: Any) -> JsonObj:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    offset = _next_offset(p)

    # enforce "one JSON object per line"
    line = json.dumps(_to_jsonable(record), ensure_ascii=False)
    with p.open("a", encoding="utf-8") as f:
        f.write(line + "\n")
    return {"kind": "jsonl", "ref": f"{p.name}@{offset}"}


def read_jsonl(path: PathLike) -> Iterator[Tuple[JsonObj, JsonObj]]:
    """
    Yields (meta, obj) for each JSON object line.
    - meta includes line number and source path.
    - obj is the parsed dict.
    """
    p = Path(path)
    with p.open("r", encoding="utf-8") as f:
        for lineno, line in enumerate(f, start=1):
            s = line.strip()
            if not s:
                continue
            obj = json.loads(s)
            if not isinstance(obj, dict):
                raise ValueError(f"Expected JSON object on line {lineno}, got {type(obj).__name__}")
            meta: JsonObj = {"path": str(p), "lineno": lineno}
            yield meta, obj


def append_mission_event(event: MissionEvent, path: PathLike = MISSION_EVENTS_LOG_PATH) -> JsonObj:
    return append_jsonl(path, {"event_kind": "mission_event", **_to_jsonable(event)})


def append_anomaly(record: AnomalyRecord, path: PathLike = ANOMALIES_LOG_PATH) -> JsonObj:
    return append_jsonl(path, {"event_kind": "anomaly", **_to_jsonable(record)})


def iter_mission_events(path: PathLike) -> Iterable[MissionEvent]:
    """Rehydrate persisted mission events, skipping other record kinds."""
    for _, raw in read_jsonl(path):
        if raw.get("event_kind") != "mission_event":
            continue
        payload = {k: v for k, v in raw.items() if k != "event_kind"}
        yield MissionEvent.model_validate(payload)


class JsonlEventRecorder:
    """Listener that appends every mission event it receives to a JSONL log."""

    def __init__(self, path: PathLike = MISSION_EVENTS_LOG_PATH) -> None:
        self.path = Path(path)
        self.refs: list[JsonObj] = []

    def __call__(self, event: MissionEvent) -> None:
        self.refs.append(append_mission_event(event, self.path))
