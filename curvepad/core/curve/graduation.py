"""Lifecycle state machine: Active -> Graduating -> Migrated.

Transitions only move forward. `Active -> Graduating` fires automatically
after a buy that takes real SOL to the graduation threshold (or empties the
real token reserve); `Graduating -> Migrated` happens once the migration
collaborator has consumed the final reserve snapshot.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Optional

from .errors import ErrorCode, fail
from .types import CompletionState, CurveState, GraduationRecord, ReserveSnapshot

_NEXT: dict[CompletionState, Optional[CompletionState]] = {
    CompletionState.ACTIVE: CompletionState.GRADUATING,
    CompletionState.GRADUATING: CompletionState.MIGRATED,
    CompletionState.MIGRATED: None,
}

_ORDER: dict[CompletionState, int] = {
    CompletionState.ACTIVE: 0,
    CompletionState.GRADUATING: 1,
    CompletionState.MIGRATED: 2,
}


def can_transition(current: CompletionState, target: CompletionState) -> bool:
    return _NEXT[current] is target


def is_forward(previous: CompletionState, current: CompletionState) -> bool:
    """True when `current` is `previous` or a later lifecycle stage."""
    return _ORDER[current] >= _ORDER[previous]


def transition(state: CurveState, target: CompletionState, now: int) -> CurveState:
    if not can_transition(state.completion_state, target):
        code = (
            ErrorCode.NOT_GRADUATING
            if target is CompletionState.MIGRATED
            else ErrorCode.TOKEN_ALREADY_GRADUATED
        )
        raise fail(code, f"{state.completion_state.value} -> {target.value} is not allowed")
    if target is CompletionState.GRADUATING:
        return replace(state, completion_state=target, graduated_at=now)
    return replace(state, completion_state=target)


def should_graduate(state: CurveState) -> bool:
    if not state.is_active:
        return False
    return state.real_sol_reserves >= state.graduation_threshold or state.real_token_reserves == 0


def snapshot(state: CurveState) -> ReserveSnapshot:
    return ReserveSnapshot(
        virtual_sol_reserves=state.virtual_sol_reserves,
        virtual_token_reserves=state.virtual_token_reserves,
        real_sol_reserves=state.real_sol_reserves,
        real_token_reserves=state.real_token_reserves,
        total_supply=state.total_supply,
        completion_state=state.completion_state,
    )


def record_transition(previous: CurveState, current: CurveState, now: int) -> GraduationRecord:
    return GraduationRecord(
        curve_id=current.curve_id,
        previous=previous.completion_state,
        current=current.completion_state,
        reserves=snapshot(current),
        timestamp=now,
    )


def maybe_graduate(state: CurveState, now: int) -> tuple[CurveState, Optional[GraduationRecord]]:
    """Apply the automatic post-buy transition if its condition holds."""
    if not should_graduate(state):
        return state, None
    graduated = transition(state, CompletionState.GRADUATING, now)
    return graduated, record_transition(state, graduated, now)
