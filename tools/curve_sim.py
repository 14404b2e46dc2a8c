#!/usr/bin/env python3
"""
Replay a JSON trade script against an in-memory launchpad and print a report.

Script format (list of steps):

    [
      {"op": "create", "creator": "alice", "curve": "PEPE"},
      {"op": "buy", "trader": "bob", "curve": "PEPE", "amount": 1000000000},
      {"op": "sell", "trader": "bob", "curve": "PEPE", "amount": 5000000, "min_out": 0},
      {"op": "advance", "seconds": 60},
      {"op": "graduate", "admin": "admin", "curve": "PEPE"},
      {"op": "migrate", "admin": "admin", "curve": "PEPE"}
    ]

Traders are funded on first use with `--fund` lamports. Rejected steps are
reported with their error code and do not stop the replay.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional, Sequence

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from curvepad.config import LaunchpadConfig, load_config
from curvepad.core.curve.errors import CurveError
from curvepad.core.curve.state import state_to_dict
from curvepad.integration.collaborators import AuthorizationError, FixedClock, Transfer
from curvepad.integration.launchpad import Launchpad
from curvepad.logging_setup import setup_logging
from curvepad.state.balances import NATIVE_ASSET

logger = logging.getLogger("curve_sim")

DEFAULT_FUNDING = 1_000 * 1_000_000_000


def _fund(pad: Launchpad, identity: str, amount: int, funded: set[str]) -> None:
    if identity in funded:
        return
    funded.add(identity)
    with pad.ledger.atomic():
        pad.transfers.execute([Transfer(NATIVE_ASSET, None, identity, amount)])


def _run_step(pad: Launchpad, clock: FixedClock, step: dict[str, Any], funding: int, funded: set[str]) -> dict[str, Any]:
    op = step.get("op")
    if op == "advance":
        return {"now": clock.advance(int(step.get("seconds", 0)))}
    if op == "create":
        state = pad.create_curve(step["creator"], step["curve"])
        return {"curve": state_to_dict(state)}
    if op == "buy":
        _fund(pad, step["trader"], funding, funded)
        rec = pad.buy(step["trader"], step["curve"], int(step["amount"]), int(step.get("min_out", 0)))
        return {"amount_out": rec.amount_out, "fee": rec.fee_amount}
    if op == "sell":
        _fund(pad, step["trader"], funding, funded)
        rec = pad.sell(step["trader"], step["curve"], int(step["amount"]), int(step.get("min_out", 0)))
        return {"amount_out": rec.amount_out, "fee": rec.fee_amount}
    if op == "graduate":
        grad = pad.graduate(step["admin"], step["curve"])
        return {"state": grad.current.value}
    if op == "migrate":
        grad = pad.migrate(step["admin"], step["curve"])
        return {"state": grad.current.value}
    raise ValueError(f"unknown op: {op!r}")


def run_script(
    steps: Sequence[dict[str, Any]],
    *,
    config: Optional[LaunchpadConfig] = None,
    funding: int = DEFAULT_FUNDING,
    start_time: int = 0,
) -> dict[str, Any]:
    """Replay `steps` and return a JSON-serializable report."""
    clock = FixedClock(start_time)
    pad = Launchpad.from_config(config or LaunchpadConfig(), clock=clock)
    funded: set[str] = set()

    results: list[dict[str, Any]] = []
    for i, step in enumerate(steps):
        entry: dict[str, Any] = {"index": i, "op": step.get("op")}
        try:
            entry.update(_run_step(pad, clock, step, funding, funded))
            entry["ok"] = True
        except CurveError as exc:
            entry.update(ok=False, error=exc.code.value, detail=exc.message)
        except AuthorizationError as exc:
            entry.update(ok=False, error="Unauthorized", detail=str(exc))
        results.append(entry)

    curves = {cid: state_to_dict(pad.curve(cid)) for cid in pad.ledger.curve_ids()}
    stats = pad.platform_stats
    return {
        "schema": "curvepad/sim/v1",
        "steps": results,
        "curves": curves,
        "platform": {
            "curves_created": stats.curves_created,
            "curves_graduated": stats.curves_graduated,
            "trades_executed": stats.trades_executed,
            "total_volume": stats.total_volume,
            "fees_collected": stats.fees_collected,
        },
    }


def main() -> int:
    ap = argparse.ArgumentParser(description="Replay a bonding-curve trade script against an in-memory launchpad")
    ap.add_argument("script", type=str, help="path to a JSON list of steps")
    ap.add_argument("--config", type=str, default="", help="optional YAML launchpad config")
    ap.add_argument("--fund", type=int, default=DEFAULT_FUNDING, help="lamports credited to each new identity")
    ap.add_argument("--start-time", type=int, default=0)
    ap.add_argument("--log-level", type=str, default="")
    ap.add_argument("--out", type=str, default="")
    args = ap.parse_args()

    config = load_config(args.config) if args.config else LaunchpadConfig()
    setup_logging(args.log_level or config.log_level, config.log_file)

    steps = json.loads(Path(args.script).read_text(encoding="utf-8"))
    if not isinstance(steps, list):
        raise SystemExit("script must be a JSON list")

    report = run_script(steps, config=config, funding=args.fund, start_time=args.start_time)
    rejected = sum(1 for s in report["steps"] if not s["ok"])
    logger.info("replayed %d steps (%d rejected)", len(report["steps"]), rejected)

    text = json.dumps(report, indent=2, sort_keys=True)
    if args.out:
        Path(args.out).write_text(text + "\n", encoding="utf-8")
    else:
        print(text)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
