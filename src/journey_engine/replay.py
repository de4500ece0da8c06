from __future__ import annotations

import json
from collections import Counter
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from journey_engine.adapters.persistence import JsonlEventRecorder
from journey_engine.config import EngineSettings, JourneyConfigTable
from journey_engine.contracts import MissionEvent
from journey_engine.engine import JourneyEngine
from journey_engine.ledger import ManualClock


@dataclass(frozen=True)
class ScenarioExecution:
    scenario_id: str
    target: str
    journey_type: str
    journey_length: int
    completed: bool
    anomalies: list[str]
    event_kinds: list[str]
    expectation_met: Optional[bool] = None


def load_scenario_packs(packs_dir: Path) -> list[dict[str, Any]]:
    packs: list[dict[str, Any]] = []
    for path in sorted(packs_dir.glob("*.json")):
        payload = json.loads(path.read_text(encoding="utf-8"))
        payload["_source"] = str(path)
        packs.append(payload)
    return packs


def _expectation_met(expected: dict[str, Any], engine: JourneyEngine) -> Optional[bool]:
    if not expected:
        return None
    checks = []
    if "journey_type" in expected:
        checks.append(engine.current_journey_type().value == str(expected["journey_type"]).lower())
    if "completed" in expected:
        checks.append(engine.is_mission_complete() is bool(expected["completed"]))
    if "journey_length" in expected:
        checks.append(engine.current_journey_length() == int(expected["journey_length"]))
    return all(checks)


def run_scenario(
    pack: dict[str, Any],
    *,
    configs: Optional[JourneyConfigTable] = None,
    settings: Optional[EngineSettings] = None,
    event_log_path: Optional[Path] = None,
) -> ScenarioExecution:
    clock = ManualClock()
    engine = JourneyEngine(configs=configs, settings=settings, clock=clock)
    seen: list[MissionEvent] = []
    engine.subscribe(seen.append)
    if event_log_path is not None:
        engine.subscribe(JsonlEventRecorder(event_log_path))

    step_interval = float(pack.get("step_interval_s", 1.0))
    default_crosser = pack.get("crosser", engine.settings.tracked_crosser_id)
    target = str(pack.get("target", "walk"))
    engine.set_mission(target)

    for event in pack.get("events", []):
        if not isinstance(event, dict):
            continue
        crosser = event.get("crosser", default_crosser)
        if "wait" in event:
            clock.advance(float(event["wait"]))
            engine.poll()
        elif "vertex" in event:
            clock.advance(step_interval)
            engine.on_vertex_visited(str(event["vertex"]), crosser)
        elif "edge" in event:
            engine.on_edge_crossed(str(event["edge"]), crosser)
        elif event.get("reset"):
            engine.reset()
        elif "mission" in event:
            engine.set_mission(str(event["mission"]))

    return ScenarioExecution(
        scenario_id=str(pack.get("scenario_id", pack.get("_source", "scenario"))),
        target=engine.target_journey_type().value,
        journey_type=engine.current_journey_type().value,
        journey_length=engine.current_journey_length(),
        completed=engine.is_mission_complete(),
        anomalies=[record.kind.value for record in engine.anomalies],
        event_kinds=[evt.kind.value for evt in seen],
        expectation_met=_expectation_met(dict(pack.get("expected") or {}), engine),
    )


def summarize(executions: list[ScenarioExecution]) -> dict[str, Any]:
    total = len(executions)
    completed = sum(1 for execution in executions if execution.completed)
    judged = [execution.expectation_met for execution in executions if execution.expectation_met is not None]
    anomaly_counts = Counter(kind for execution in executions for kind in execution.anomalies)
    return {
        "scenarios": total,
        "completion_rate": round(completed / total, 4) if total else 0.0,
        "expectation_pass_rate": round(sum(judged) / len(judged), 4) if judged else 1.0,
        "anomaly_counts": dict(sorted(anomaly_counts.items())),
    }


def run_packs(packs_dir: Path, *, settings: Optional[EngineSettings] = None) -> dict[str, Any]:
    packs = load_scenario_packs(packs_dir)
    executions = [run_scenario(pack, settings=settings) for pack in packs]
    return {
        "scenarios": [
            {
                "scenario_id": execution.scenario_id,
                "target": execution.target,
                "journey_type": execution.journey_type,
                "journey_length": execution.journey_length,
                "completed": execution.completed,
                "anomalies": execution.anomalies,
                "expectation_met": execution.expectation_met,
            }
            for execution in executions
        ],
        "summary_metrics": summarize(executions),
    }
