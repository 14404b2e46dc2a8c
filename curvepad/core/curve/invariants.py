"""Invariant checkers for the bonding-curve engine.

State invariants hold for every `CurveState`; transition invariants compare
the PRE- and POST-state of one step. `check_all()` / `check_transition()`
return the list of violated invariant IDs (empty = all pass).
"""

from __future__ import annotations

from typing import Callable

from .graduation import is_forward
from .math import U64_MAX
from .types import CurveState

_RESERVE_FIELDS: tuple[str, ...] = (
    "virtual_sol_reserves",
    "virtual_token_reserves",
    "real_sol_reserves",
    "real_token_reserves",
    "total_supply",
)


def inv_virtual_sol_positive(s: CurveState) -> bool:
    return s.virtual_sol_reserves > 0


def inv_virtual_token_positive(s: CurveState) -> bool:
    return s.virtual_token_reserves > 0


def inv_real_sol_backed(s: CurveState) -> bool:
    return s.real_sol_reserves <= s.virtual_sol_reserves


def inv_real_token_backed(s: CurveState) -> bool:
    return s.real_token_reserves <= s.virtual_token_reserves


def inv_reserves_in_u64(s: CurveState) -> bool:
    return all(0 <= getattr(s, name) <= U64_MAX for name in _RESERVE_FIELDS)


def inv_real_token_within_supply(s: CurveState) -> bool:
    return s.real_token_reserves <= s.total_supply


def inv_trade_after_creation(s: CurveState) -> bool:
    return s.last_trade_timestamp >= s.creation_timestamp


def inv_active_not_graduated(s: CurveState) -> bool:
    if not s.is_active:
        return True
    return s.graduated_at == 0


# -- Transition invariants (pre, post) ---------------------------------------

def tinv_k_non_decreasing(pre: CurveState, post: CurveState) -> bool:
    k_pre = pre.virtual_sol_reserves * pre.virtual_token_reserves
    k_post = post.virtual_sol_reserves * post.virtual_token_reserves
    return k_post >= k_pre


def tinv_frozen_when_not_active(pre: CurveState, post: CurveState) -> bool:
    if pre.is_active:
        return True
    return all(getattr(pre, name) == getattr(post, name) for name in _RESERVE_FIELDS)


def tinv_lifecycle_forward(pre: CurveState, post: CurveState) -> bool:
    return is_forward(pre.completion_state, post.completion_state)


def tinv_last_trade_monotonic(pre: CurveState, post: CurveState) -> bool:
    return post.last_trade_timestamp >= pre.last_trade_timestamp


def tinv_total_supply_fixed(pre: CurveState, post: CurveState) -> bool:
    return post.total_supply == pre.total_supply


# ---------------------------------------------------------------------------
# Registry + check_all
# ---------------------------------------------------------------------------

INVARIANT_REGISTRY: dict[str, Callable[[CurveState], bool]] = {
    "inv_virtual_sol_positive": inv_virtual_sol_positive,
    "inv_virtual_token_positive": inv_virtual_token_positive,
    "inv_real_sol_backed": inv_real_sol_backed,
    "inv_real_token_backed": inv_real_token_backed,
    "inv_reserves_in_u64": inv_reserves_in_u64,
    "inv_real_token_within_supply": inv_real_token_within_supply,
    "inv_trade_after_creation": inv_trade_after_creation,
    "inv_active_not_graduated": inv_active_not_graduated,
}

TRANSITION_REGISTRY: dict[str, Callable[[CurveState, CurveState], bool]] = {
    "tinv_k_non_decreasing": tinv_k_non_decreasing,
    "tinv_frozen_when_not_active": tinv_frozen_when_not_active,
    "tinv_lifecycle_forward": tinv_lifecycle_forward,
    "tinv_last_trade_monotonic": tinv_last_trade_monotonic,
    "tinv_total_supply_fixed": tinv_total_supply_fixed,
}


def check_all(state: CurveState) -> list[str]:
    """Return list of violated invariant IDs (empty = all pass)."""
    return [
        inv_id
        for inv_id, check_fn in INVARIANT_REGISTRY.items()
        if not check_fn(state)
    ]


def check_transition(pre: CurveState, post: CurveState) -> list[str]:
    return [
        inv_id
        for inv_id, check_fn in TRANSITION_REGISTRY.items()
        if not check_fn(pre, post)
    ]
