"""Dispatch-table engine for the bonding curve.

``step(state, config, params)`` is the single entry point. It:

1. Validates parameter domains (u64 bounds).
2. Runs the action's guard, which prices trades into a ``Quote``.
3. Applies the update (and, for buys, the automatic graduation check).
4. Checks state and transition invariants on the post-state.
5. Returns a ``StepResult`` (accepted or rejected with the failing code).

The step is pure: the input state is never mutated, so a rejected step
leaves nothing behind for the caller to undo.
"""

from __future__ import annotations

from typing import Callable, Optional

from .effects import effect_buy, effect_sell
from .errors import CurveError, ErrorCode, InvariantViolation, MathOverflow, fail
from .graduation import maybe_graduate, record_transition
from .guards import guard_buy, guard_graduate, guard_migrate, guard_sell
from .invariants import check_all, check_transition
from .math import U64_MAX
from .types import (
    Action,
    CurveState,
    FeeConfig,
    GraduationRecord,
    Quote,
    StepResult,
    TradeParams,
    TradeRecord,
)
from .updates import apply_buy, apply_graduate, apply_migrate, apply_sell

GuardFn = Callable[[CurveState, FeeConfig, TradeParams], Optional[Quote]]
UpdateFn = Callable[[CurveState, TradeParams, Optional[Quote]], CurveState]
EffectFn = Callable[[CurveState, TradeParams, Quote], TradeRecord]

_DISPATCH: dict[Action, tuple[GuardFn, UpdateFn, Optional[EffectFn]]] = {
    Action.BUY: (guard_buy, apply_buy, effect_buy),
    Action.SELL: (guard_sell, apply_sell, effect_sell),
    Action.GRADUATE: (guard_graduate, apply_graduate, None),
    Action.MIGRATE: (guard_migrate, apply_migrate, None),
}

# Fields that must fit an unsigned 64-bit quantity.
_U64_PARAMS: tuple[str, ...] = ("amount", "min_out", "trader_token_balance")


def _validate_params(params: TradeParams) -> None:
    for field in _U64_PARAMS:
        val = getattr(params, field)
        if not isinstance(val, int) or isinstance(val, bool):
            raise TypeError(f"{field} must be an int")
        if val < 0:
            raise fail(ErrorCode.INVALID_AMOUNT, f"param_domain:{field}")
        if val > U64_MAX:
            raise MathOverflow(f"param_domain:{field}")
    if not isinstance(params.now, int) or isinstance(params.now, bool):
        raise TypeError("now must be an int")


def step(state: CurveState, config: FeeConfig, params: TradeParams) -> StepResult:
    """Execute one action against the given curve and fee-config snapshot.

    Returns ``StepResult`` with ``accepted=True`` on success,
    or ``accepted=False`` with the failing ``ErrorCode`` value as ``rejection``.
    """
    entry = _DISPATCH.get(params.action)
    if entry is None:
        return StepResult(accepted=False, rejection=f"unknown_action:{params.action}")

    guard_fn, update_fn, effect_fn = entry
    events: list[GraduationRecord] = []
    try:
        _validate_params(params)
        quote = guard_fn(state, config, params)
        new_state = update_fn(state, params, quote)
        if effect_fn is not None:
            new_state, graduated = maybe_graduate(new_state, params.now)
            if graduated is not None:
                events.append(graduated)
        else:
            events.append(record_transition(state, new_state, params.now))
    except CurveError as exc:
        return StepResult(accepted=False, rejection=exc.code.value, error=exc)

    violations = check_all(new_state) + check_transition(state, new_state)
    if violations:
        return StepResult(
            accepted=False,
            rejection=f"invariant:{','.join(violations)}",
            error=InvariantViolation(violations),
        )

    record = None
    if effect_fn is not None and quote is not None:
        record = effect_fn(new_state, params, quote)
    return StepResult(accepted=True, state=new_state, record=record, events=tuple(events))


def step_or_raise(state: CurveState, config: FeeConfig, params: TradeParams) -> StepResult:
    """Like ``step()`` but raises the typed ``CurveError`` on rejection."""
    result = step(state, config, params)
    if result.accepted:
        return result
    if result.error is not None:
        raise result.error
    raise ValueError(result.rejection or "rejected")


def buy(
    state: CurveState,
    config: FeeConfig,
    *,
    trader: str,
    sol_in: int,
    min_tokens_out: int = 0,
    now: int = 0,
) -> StepResult:
    return step_or_raise(
        state,
        config,
        TradeParams(action=Action.BUY, trader=trader, amount=sol_in, min_out=min_tokens_out, now=now),
    )


def sell(
    state: CurveState,
    config: FeeConfig,
    *,
    trader: str,
    tokens_in: int,
    min_sol_out: int = 0,
    trader_token_balance: int,
    now: int = 0,
) -> StepResult:
    return step_or_raise(
        state,
        config,
        TradeParams(
            action=Action.SELL,
            trader=trader,
            amount=tokens_in,
            min_out=min_sol_out,
            trader_token_balance=trader_token_balance,
            now=now,
        ),
    )
