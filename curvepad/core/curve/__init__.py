"""`curve`: pure-Python bonding-curve pricing and reserve-accounting engine.

- deterministic, integer-only transitions with u64/u128 range checks,
- immutable state (frozen dataclasses),
- fail-closed guards and invariant checks.

Public API:
- `new_curve(curve_id, creator, params, now) -> CurveState`
- `step(state, config, params) -> StepResult`
- `step_or_raise(state, config, params) -> StepResult` (raises on rejection)
- `buy(...)` / `sell(...)` keyword wrappers around `step_or_raise`
- `quote_buy(...)` / `quote_sell(...)` read-only quotes
"""

from .engine import buy, sell, step, step_or_raise
from .errors import (
    CapacityError,
    ConfigError,
    CurveError,
    DivisionByZero,
    ErrorCode,
    InvariantViolation,
    MathError,
    MathOverflow,
    MathUnderflow,
    StateError,
    ValidationError,
)
from .pricing import quote_buy, quote_sell
from .state import CurveParams, new_curve, state_from_dict, state_to_dict
from .types import (
    Action,
    CompletionState,
    CurveState,
    Direction,
    FeeConfig,
    GraduationRecord,
    Quote,
    ReserveSnapshot,
    StepResult,
    TradeParams,
    TradeRecord,
)

__all__ = [
    "buy",
    "sell",
    "step",
    "step_or_raise",
    "quote_buy",
    "quote_sell",
    "new_curve",
    "state_from_dict",
    "state_to_dict",
    "Action",
    "CompletionState",
    "CurveParams",
    "CurveState",
    "Direction",
    "FeeConfig",
    "GraduationRecord",
    "Quote",
    "ReserveSnapshot",
    "StepResult",
    "TradeParams",
    "TradeRecord",
    "CurveError",
    "ValidationError",
    "MathError",
    "MathOverflow",
    "MathUnderflow",
    "DivisionByZero",
    "StateError",
    "CapacityError",
    "ConfigError",
    "InvariantViolation",
    "ErrorCode",
]
