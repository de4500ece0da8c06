from __future__ import annotations

import pytest

from journey_engine.invariants import (
    COMPLETION_GATE,
    REGISTRY,
    RESET_GATE,
    Flow,
    InvariantId,
    MissionCheckContext,
    Validity,
    check_completion_has_steps,
    check_completion_timing,
    check_ledger_reset_clean,
    first_stop,
    run_checkers,
)


def test_registry_covers_every_invariant() -> None:
    assert set(REGISTRY) == set(InvariantId)
    assert set(RESET_GATE) | set(COMPLETION_GATE) == set(InvariantId)


def test_reset_clean_passes_for_empty_ledger() -> None:
    outcome = check_ledger_reset_clean(MissionCheckContext(journey_length=0))

    assert outcome.passed
    assert outcome.flow == Flow.CONTINUE
    assert outcome.code == "ledger_empty"


@pytest.mark.parametrize(
    "ctx",
    [
        MissionCheckContext(journey_length=3, starting_vertex="A"),
        MissionCheckContext(journey_length=0, starting_vertex="A"),
    ],
)
def test_reset_clean_stops_on_leftover_state(ctx: MissionCheckContext) -> None:
    outcome = check_ledger_reset_clean(ctx)

    assert outcome.passed is False
    assert outcome.flow == Flow.STOP
    assert outcome.validity == Validity.INVALID
    assert outcome.code == "ledger_not_empty_after_reset"
    assert outcome.details["starting_vertex"] == "A"


def test_completion_checks_do_not_apply_outside_completion() -> None:
    ctx = MissionCheckContext(journey_length=0)

    assert check_completion_has_steps(ctx).code == "completion_not_applicable"
    assert check_completion_timing(ctx).code == "completion_timing_not_applicable"


def test_empty_completion_stops() -> None:
    outcome = check_completion_has_steps(MissionCheckContext(journey_length=0, completing=True))

    assert outcome.flow == Flow.STOP
    assert outcome.code == "empty_journey_completion"


def test_fast_completion_degrades_but_continues() -> None:
    ctx = MissionCheckContext(
        journey_length=3,
        completing=True,
        seconds_since_start=0.25,
        suspicious_completion_window_s=1.0,
    )

    outcome = check_completion_timing(ctx)

    assert outcome.passed is False
    assert outcome.flow == Flow.CONTINUE
    assert outcome.validity == Validity.DEGRADED
    assert outcome.details["seconds_since_start"] == 0.25


def test_run_checkers_preserves_gate_order() -> None:
    ctx = MissionCheckContext(journey_length=4, completing=True, seconds_since_start=5.0)

    outcomes = run_checkers(ctx=ctx, invariant_ids=COMPLETION_GATE)

    assert [o.invariant_id for o in outcomes] == list(COMPLETION_GATE)
    assert all(o.passed for o in outcomes)
    assert first_stop(outcomes) is None
    assert outcomes[1].code == "completion_timing_plausible"
