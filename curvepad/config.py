"""
YAML configuration loading for the launchpad (fail-closed).

Layout:

    platform:
      fee_basis_points: 100
      paused: false
      fee_recipient: fee-recipient
      admins: [admin]
    curve:
      initial_virtual_sol_reserves: 30000000000
      initial_virtual_token_reserves: 1073000000000000
      initial_real_token_reserves: 793100000000000
      token_total_supply: 1000000000000000
      graduation_threshold: 85000000000
      min_buy_amount: 1
      max_buy_amount: 18446744073709551615
    logging:
      level: INFO
      file: null

Missing sections/keys take the defaults above. Unknown keys are rejected.
Fee and curve-parameter range errors surface as the core `ConfigError`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, FrozenSet, Mapping, Optional

import yaml

from .core.curve.state import CurveParams, validate_curve_params
from .core.curve.types import FeeConfig

logger = logging.getLogger(__name__)

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigFileError(ValueError):
    """Raised when a config file is malformed."""


@dataclass(frozen=True)
class LaunchpadConfig:
    fee_config: FeeConfig = FeeConfig()
    fee_recipient: str = "fee-recipient"
    admins: FrozenSet[str] = frozenset()
    curve_params: CurveParams = CurveParams()
    log_level: str = "INFO"
    log_file: Optional[str] = None
    source: Optional[str] = field(default=None, compare=False)


def _require_mapping(obj: Any, *, name: str) -> dict[str, Any]:
    if obj is None:
        return {}
    if not isinstance(obj, dict):
        raise ConfigFileError(f"{name} must be a mapping")
    return obj


def _require_known_keys(obj: Mapping[str, Any], allowed: tuple[str, ...], *, name: str) -> None:
    unknown = sorted(set(obj) - set(allowed))
    if unknown:
        raise ConfigFileError(f"{name} has unknown keys: {', '.join(unknown)}")


def _require_int(obj: Any, *, name: str) -> int:
    if not isinstance(obj, int) or isinstance(obj, bool):
        raise ConfigFileError(f"{name} must be an integer")
    return obj


def _require_bool(obj: Any, *, name: str) -> bool:
    if not isinstance(obj, bool):
        raise ConfigFileError(f"{name} must be a boolean")
    return obj


def _require_str(obj: Any, *, name: str) -> str:
    if not isinstance(obj, str) or not obj.strip():
        raise ConfigFileError(f"{name} must be a non-empty string")
    return obj.strip()


def _require_str_list(obj: Any, *, name: str) -> list[str]:
    if obj is None:
        return []
    if not isinstance(obj, list):
        raise ConfigFileError(f"{name} must be a list")
    return [_require_str(it, name=f"{name}[{i}]") for i, it in enumerate(obj)]


def parse_config(raw: Any, *, source: Optional[str] = None) -> LaunchpadConfig:
    root = _require_mapping(raw, name="config")
    _require_known_keys(root, ("platform", "curve", "logging"), name="config")
    defaults = LaunchpadConfig()

    platform = _require_mapping(root.get("platform"), name="platform")
    _require_known_keys(platform, ("fee_basis_points", "paused", "fee_recipient", "admins"), name="platform")
    fee_config = FeeConfig(
        fee_basis_points=_require_int(
            platform.get("fee_basis_points", defaults.fee_config.fee_basis_points),
            name="platform.fee_basis_points",
        ),
        paused=_require_bool(platform.get("paused", defaults.fee_config.paused), name="platform.paused"),
    )
    fee_recipient = _require_str(
        platform.get("fee_recipient", defaults.fee_recipient), name="platform.fee_recipient",
    )
    admins = frozenset(_require_str_list(platform.get("admins"), name="platform.admins"))

    curve = _require_mapping(root.get("curve"), name="curve")
    param_names = tuple(CurveParams.__dataclass_fields__)
    _require_known_keys(curve, param_names, name="curve")
    curve_params = CurveParams(
        **{
            key: _require_int(curve.get(key, getattr(defaults.curve_params, key)), name=f"curve.{key}")
            for key in param_names
        }
    )
    validate_curve_params(curve_params)

    log_section = _require_mapping(root.get("logging"), name="logging")
    _require_known_keys(log_section, ("level", "file"), name="logging")
    level = _require_str(log_section.get("level", defaults.log_level), name="logging.level").upper()
    if level not in _LOG_LEVELS:
        raise ConfigFileError(f"logging.level must be one of {', '.join(_LOG_LEVELS)}")
    log_file = log_section.get("file")
    if log_file is not None:
        log_file = _require_str(log_file, name="logging.file")

    return LaunchpadConfig(
        fee_config=fee_config,
        fee_recipient=fee_recipient,
        admins=admins,
        curve_params=curve_params,
        log_level=level,
        log_file=log_file,
        source=source,
    )


def load_config(path: str | Path) -> LaunchpadConfig:
    """Load and validate a YAML config file."""
    p = Path(path)
    raw_text = p.read_text(encoding="utf-8")
    try:
        raw = yaml.safe_load(raw_text)
    except yaml.YAMLError as exc:
        raise ConfigFileError(f"invalid YAML in {p}: {exc}") from exc
    cfg = parse_config(raw, source=str(p))
    logger.debug("loaded config from %s (fee_bps=%d)", p, cfg.fee_config.fee_basis_points)
    return cfg
