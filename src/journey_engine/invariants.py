from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Mapping, Optional, Protocol, Sequence


class InvariantId(str, Enum):
    LEDGER_RESET_CLEAN = "ledger_reset_clean.v1"
    COMPLETION_HAS_STEPS = "completion_has_steps.v1"
    COMPLETION_TIMING = "completion_timing.v1"


class Flow(str, Enum):
    CONTINUE = "continue"
    STOP = "stop"


class Validity(str, Enum):
    VALID = "valid"
    DEGRADED = "degraded"
    INVALID = "invalid"


@dataclass(frozen=True)
class InvariantOutcome:
    invariant_id: InvariantId
    passed: bool
    reason: str
    flow: Flow
    validity: Validity
    code: str
    details: Mapping[str, Any] = field(default_factory=dict)


class CheckContext(Protocol):
    journey_length: int
    starting_vertex: Optional[str]
    completing: bool
    seconds_since_start: Optional[float]
    suspicious_completion_window_s: float


@dataclass(frozen=True)
class MissionCheckContext:
    journey_length: int
    starting_vertex: Optional[str] = None
    completing: bool = False
    seconds_since_start: Optional[float] = None
    suspicious_completion_window_s: float = 1.0


Checker = Callable[[CheckContext], InvariantOutcome]


def _ok(invariant_id: InvariantId, code: str, details: Optional[Mapping[str, Any]] = None) -> InvariantOutcome:
    detail_map = dict(details or {})
    reason = str(detail_map.get("message") or code)
    return InvariantOutcome(
        invariant_id=invariant_id,
        passed=True,
        reason=reason,
        flow=Flow.CONTINUE,
        validity=Validity.VALID,
        code=code,
        details=detail_map,
    )


def check_ledger_reset_clean(ctx: CheckContext) -> InvariantOutcome:
    if ctx.journey_length == 0 and ctx.starting_vertex is None:
        return _ok(InvariantId.LEDGER_RESET_CLEAN, "ledger_empty")

    return InvariantOutcome(
        invariant_id=InvariantId.LEDGER_RESET_CLEAN,
        passed=False,
        reason="Journey state survived a reset; classifying it would leak the previous mission.",
        flow=Flow.STOP,
        validity=Validity.INVALID,
        code="ledger_not_empty_after_reset",
        details={
            "journey_length": ctx.journey_length,
            "starting_vertex": ctx.starting_vertex,
        },
    )


def check_completion_has_steps(ctx: CheckContext) -> InvariantOutcome:
    if not ctx.completing:
        return _ok(InvariantId.COMPLETION_HAS_STEPS, "completion_not_applicable")
    if ctx.journey_length > 0:
        return _ok(InvariantId.COMPLETION_HAS_STEPS, "completion_has_steps", {"journey_length": ctx.journey_length})

    return InvariantOutcome(
        invariant_id=InvariantId.COMPLETION_HAS_STEPS,
        passed=False,
        reason="Mission completion was requested for an empty journey.",
        flow=Flow.STOP,
        validity=Validity.INVALID,
        code="empty_journey_completion",
        details={"journey_length": 0},
    )


def check_completion_timing(ctx: CheckContext) -> InvariantOutcome:
    elapsed = ctx.seconds_since_start
    if not ctx.completing or elapsed is None:
        return _ok(InvariantId.COMPLETION_TIMING, "completion_timing_not_applicable")
    if elapsed >= ctx.suspicious_completion_window_s:
        return _ok(InvariantId.COMPLETION_TIMING, "completion_timing_plausible", {"seconds_since_start": elapsed})

    return InvariantOutcome(
        invariant_id=InvariantId.COMPLETION_TIMING,
        passed=False,
        reason="Mission completed suspiciously soon after it started.",
        flow=Flow.CONTINUE,
        validity=Validity.DEGRADED,
        code="suspicious_completion",
        details={
            "seconds_since_start": elapsed,
            "window_s": ctx.suspicious_completion_window_s,
            "journey_length": ctx.journey_length,
        },
    )


REGISTRY: dict[InvariantId, Checker] = {
    InvariantId.LEDGER_RESET_CLEAN: check_ledger_reset_clean,
    InvariantId.COMPLETION_HAS_STEPS: check_completion_has_steps,
    InvariantId.COMPLETION_TIMING: check_completion_timing,
}

RESET_GATE: tuple[InvariantId, ...] = (InvariantId.LEDGER_RESET_CLEAN,)
COMPLETION_GATE: tuple[InvariantId, ...] = (
    InvariantId.COMPLETION_HAS_STEPS,
    InvariantId.COMPLETION_TIMING,
)


def run_checkers(*, ctx: CheckContext, invariant_ids: Sequence[InvariantId]) -> list[InvariantOutcome]:
    return [REGISTRY[invariant_id](ctx) for invariant_id in invariant_ids]


def first_stop(outcomes: Sequence[InvariantOutcome]) -> Optional[InvariantOutcome]:
    return next((outcome for outcome in outcomes if outcome.flow == Flow.STOP), None)
