"""Reconcile part records with live equipment slots for unit loadout files.

Purpose:
  - Run an unscramble pass per unit file and report unresolved parts.
Inputs:
  - One or more JSON unit loadout files; matching order; write-back flag.
Outputs:
  - UNIT=<name> STATUS=<OK|UNRESOLVED> lines, failure reports and totals on stdout.
  - A file that cannot be loaded prints UNIT=<path> STATUS=ERROR and the batch continues.
  - With --write, the applied equipment indices are saved back to each file.
Example:
  - PYTHONPATH=. python3 unscrambler/cli/run_unscramble.py units/atlas.json --write
"""

from __future__ import annotations

import argparse
from typing import List, Optional

from unscrambler.cli._debug_utils import _dbg, _debug_hook
from unscrambler.core.engine.factory import create_unscrambler
from unscrambler.core.engine.unscrambler import set_unscrambler_debug
from unscrambler.core.matching.rules import MatchOrder
from unscrambler.infra.json_store.unit_store import load_unit, save_unit


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Re-link part records to equipment slots")
    parser.add_argument("units", nargs="+", help="Unit loadout JSON files")
    parser.add_argument(
        "--order",
        choices=[order.value for order in MatchOrder],
        default=MatchOrder.BY_RULE.value,
        help="Apply each rule to all parts first (by_rule) or each part through all rules (by_part)",
    )
    parser.add_argument("--write", action="store_true", help="Save applied indices back to the files")
    parser.add_argument("--quiet", action="store_true", help="Only print status lines and totals")
    parser.add_argument("--debug", action="store_true", help="Print per-match debug lines")
    return parser.parse_args(argv)


def _run_one(args: argparse.Namespace, path: str, order: MatchOrder) -> bool:
    unit = load_unit(path)
    _dbg(args, f"loaded unit={unit.name} shape={unit.shape.kind.value} path={path}")
    result = create_unscrambler(unit, match_order=order).unscramble()
    if result.succeeded:
        print(f"UNIT={result.unit_name} STATUS=OK")
    else:
        print(f"UNIT={result.unit_name} STATUS=UNRESOLVED")
        if not args.quiet and result.message:
            print(result.message)
    if args.write:
        save_unit(unit, path)
        _dbg(args, f"saved unit={unit.name} path={path}")
    return result.succeeded


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    order = MatchOrder(args.order)
    set_unscrambler_debug(_debug_hook(args))
    resolved = 0
    unresolved = 0
    errors = 0
    try:
        for path in args.units:
            try:
                succeeded = _run_one(args, path, order)
            except (OSError, ValueError) as exc:
                errors += 1
                print(f"UNIT={path} STATUS=ERROR error={exc}")
                continue
            if succeeded:
                resolved += 1
            else:
                unresolved += 1
    finally:
        set_unscrambler_debug(None)
        print(f"RESOLVED={resolved} UNRESOLVED={unresolved} ERRORS={errors}")

    return 1 if unresolved or errors else 0


if __name__ == "__main__":
    raise SystemExit(main())
