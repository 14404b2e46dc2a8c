"""Curve creation and serialization.

`new_curve()` validates launch parameters and returns a fresh `Active` curve
with zero real SOL. `state_to_dict()` / `state_from_dict()` convert to the
plain-dict form used by ledgers and snapshots.

Round-trip property (tested): `state_from_dict(state_to_dict(s)) == s`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from .errors import ErrorCode, MathError, fail
from .math import U64_MAX, require_u64, wide_mul
from .types import (
    DEFAULT_GRADUATION_THRESHOLD,
    DEFAULT_REAL_TOKEN_RESERVES,
    DEFAULT_TOKEN_TOTAL_SUPPLY,
    DEFAULT_VIRTUAL_SOL_RESERVES,
    DEFAULT_VIRTUAL_TOKEN_RESERVES,
    CompletionState,
    CurveState,
)

# Auto-derived from CurveState field definitions (single source of truth).
STATE_VAR_NAMES: tuple[str, ...] = tuple(CurveState.__dataclass_fields__)

_STR_FIELDS = frozenset({"curve_id", "creator"})


@dataclass(frozen=True)
class CurveParams:
    """Launch parameters applied to every new curve."""

    initial_virtual_sol_reserves: int = DEFAULT_VIRTUAL_SOL_RESERVES
    initial_virtual_token_reserves: int = DEFAULT_VIRTUAL_TOKEN_RESERVES
    initial_real_token_reserves: int = DEFAULT_REAL_TOKEN_RESERVES
    token_total_supply: int = DEFAULT_TOKEN_TOTAL_SUPPLY
    graduation_threshold: int = DEFAULT_GRADUATION_THRESHOLD
    min_buy_amount: int = 1
    max_buy_amount: int = U64_MAX


def validate_curve_params(params: CurveParams) -> None:
    """Raise `ConfigError(InvalidCurveParameters)` on inconsistent launch parameters."""
    try:
        for name in CurveParams.__dataclass_fields__:
            require_u64(name, getattr(params, name))
        wide_mul(params.initial_virtual_sol_reserves, params.initial_virtual_token_reserves)
    except MathError as exc:
        raise fail(ErrorCode.INVALID_CURVE_PARAMETERS, str(exc)) from exc

    checks = (
        (params.initial_virtual_sol_reserves > 0, "initial_virtual_sol_reserves must be positive"),
        (params.initial_virtual_token_reserves > 0, "initial_virtual_token_reserves must be positive"),
        (params.initial_real_token_reserves > 0, "initial_real_token_reserves must be positive"),
        (
            params.initial_real_token_reserves <= params.token_total_supply,
            "initial_real_token_reserves exceeds token_total_supply",
        ),
        (
            params.initial_real_token_reserves <= params.initial_virtual_token_reserves,
            "initial_real_token_reserves exceeds initial_virtual_token_reserves",
        ),
        (params.graduation_threshold > 0, "graduation_threshold must be positive"),
        (params.min_buy_amount > 0, "min_buy_amount must be positive"),
        (params.min_buy_amount <= params.max_buy_amount, "min_buy_amount exceeds max_buy_amount"),
    )
    for ok, message in checks:
        if not ok:
            raise fail(ErrorCode.INVALID_CURVE_PARAMETERS, message)


def new_curve(
    curve_id: str,
    creator: str = "",
    params: CurveParams = CurveParams(),
    now: int = 0,
) -> CurveState:
    validate_curve_params(params)
    return CurveState(
        curve_id=curve_id,
        creator=creator,
        virtual_sol_reserves=params.initial_virtual_sol_reserves,
        virtual_token_reserves=params.initial_virtual_token_reserves,
        real_sol_reserves=0,
        real_token_reserves=params.initial_real_token_reserves,
        total_supply=params.token_total_supply,
        completion_state=CompletionState.ACTIVE,
        graduation_threshold=params.graduation_threshold,
        min_buy_amount=params.min_buy_amount,
        max_buy_amount=params.max_buy_amount,
        creation_timestamp=now,
        last_trade_timestamp=now,
        graduated_at=0,
    )


def state_to_dict(state: CurveState) -> dict[str, str | int]:
    """Serialize a CurveState to a plain dict (lifecycle as its string value)."""
    out: dict[str, str | int] = {}
    for name in STATE_VAR_NAMES:
        val = getattr(state, name)
        out[name] = val.value if isinstance(val, CompletionState) else val
    return out


def state_from_dict(d: Mapping[str, Any]) -> CurveState:
    """Deserialize a dict to a CurveState. Raises KeyError on missing fields."""
    kwargs: dict[str, Any] = {}
    for name in STATE_VAR_NAMES:
        val = d[name]
        if name == "completion_state":
            kwargs[name] = CompletionState(val)
        elif name in _STR_FIELDS:
            if not isinstance(val, str):
                raise TypeError(f"state var {name!r} must be str, got {type(val).__name__}")
            kwargs[name] = val
        elif isinstance(val, int) and not isinstance(val, bool):
            kwargs[name] = int(val)
        else:
            raise TypeError(f"state var {name!r} must be int, got {type(val).__name__}")
    return CurveState(**kwargs)
