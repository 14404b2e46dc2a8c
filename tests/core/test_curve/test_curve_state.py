"""Tests for curvepad/core/curve/state.py: curve creation and serialization."""

from dataclasses import replace

import pytest

from curvepad.core.curve.errors import ConfigError, ErrorCode
from curvepad.core.curve.math import U64_MAX
from curvepad.core.curve.state import (
    STATE_VAR_NAMES,
    CurveParams,
    new_curve,
    state_from_dict,
    state_to_dict,
    validate_curve_params,
)
from curvepad.core.curve.types import CompletionState


class TestNewCurve:
    def test_defaults(self):
        s = new_curve("PEPE", "alice", now=1_700_000_000)
        assert s.curve_id == "PEPE"
        assert s.creator == "alice"
        assert s.virtual_sol_reserves == 30_000_000_000
        assert s.virtual_token_reserves == 1_073_000_000_000_000
        assert s.real_sol_reserves == 0
        assert s.real_token_reserves == 793_100_000_000_000
        assert s.total_supply == 1_000_000_000_000_000
        assert s.graduation_threshold == 85_000_000_000
        assert s.completion_state is CompletionState.ACTIVE
        assert s.creation_timestamp == s.last_trade_timestamp == 1_700_000_000
        assert s.graduated_at == 0

    def test_custom_params(self):
        params = CurveParams(
            initial_virtual_sol_reserves=10,
            initial_virtual_token_reserves=1_000,
            initial_real_token_reserves=800,
            token_total_supply=900,
            graduation_threshold=5,
        )
        s = new_curve("T", params=params)
        assert (s.virtual_sol_reserves, s.real_token_reserves, s.total_supply) == (10, 800, 900)


class TestValidateCurveParams:
    @pytest.mark.parametrize(
        "changes",
        [
            {"initial_virtual_sol_reserves": 0},
            {"initial_virtual_token_reserves": 0},
            {"initial_real_token_reserves": 0},
            {"initial_real_token_reserves": 1_000_000_000_000_001},
            {"initial_virtual_token_reserves": 793_100_000_000_000 - 1},
            {"graduation_threshold": 0},
            {"min_buy_amount": 0},
            {"min_buy_amount": 10, "max_buy_amount": 9},
            {"token_total_supply": -1},
            {"max_buy_amount": U64_MAX + 1},
        ],
    )
    def test_rejected(self, changes):
        with pytest.raises(ConfigError) as ei:
            validate_curve_params(replace(CurveParams(), **changes))
        assert ei.value.code is ErrorCode.INVALID_CURVE_PARAMETERS

    def test_defaults_valid(self):
        validate_curve_params(CurveParams())


class TestSerialization:
    def test_round_trip(self):
        s = replace(new_curve("PEPE", "alice", now=5), completion_state=CompletionState.GRADUATING, graduated_at=9)
        d = state_to_dict(s)
        assert d["completion_state"] == "Graduating"
        assert set(d) == set(STATE_VAR_NAMES)
        assert state_from_dict(d) == s

    def test_missing_field(self):
        d = state_to_dict(new_curve("PEPE"))
        del d["real_sol_reserves"]
        with pytest.raises(KeyError):
            state_from_dict(d)

    def test_wrong_type(self):
        d = state_to_dict(new_curve("PEPE"))
        d["real_sol_reserves"] = "0"
        with pytest.raises(TypeError):
            state_from_dict(d)

    def test_unknown_lifecycle(self):
        d = state_to_dict(new_curve("PEPE"))
        d["completion_state"] = "Complete"
        with pytest.raises(ValueError):
            state_from_dict(d)
