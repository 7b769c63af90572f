#!/usr/bin/env python3
"""stakelock command line: offline quotes and the API server."""

from __future__ import annotations

import argparse
import json
import sys
import time
from typing import List, Optional

from stakelock.ledger.earnings import split_duration, split_earnings
from stakelock.ledger.phase import resolve_phase
from stakelock.runtime.errors import StakeError
from stakelock.runtime.staking_config import config_from_mapping, default_staking_config, read_staking_config_file


def _schedule_from_args(args: argparse.Namespace):
    cfg = default_staking_config()
    if args.config:
        cfg = config_from_mapping(read_staking_config_file(args.config), cfg)
    return cfg.schedule()


def quote(balance: int, anchor: int, at: int, schedule) -> dict:
    info = resolve_phase(schedule, anchor, at)
    lock_portion, unlock_portion = split_duration(schedule, anchor, at)
    lock_e, unlock_e = split_earnings(schedule, balance, anchor, at)
    return {
        "balance": str(balance),
        "anchor_time": anchor,
        "reference_time": at,
        "phase": info.phase.value,
        "next_lock_at": info.next_lock_at,
        "next_unlock_at": info.next_unlock_at,
        "lock_portion": lock_portion,
        "unlock_portion": unlock_portion,
        "lock_earnings": str(lock_e),
        "unlock_earnings": str(unlock_e),
        "earnings": str(lock_e + unlock_e),
    }


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="stakelock")
    sub = parser.add_subparsers(dest="cmd", required=True)

    q = sub.add_parser("quote", help="phase and earnings for a hypothetical account")
    q.add_argument("--balance", type=int, required=True)
    q.add_argument("--anchor", type=int, required=True, help="anchor time, unix seconds")
    q.add_argument("--at", type=int, default=None, help="reference time, unix seconds (default: now)")
    q.add_argument("--config", default=None, help="JSON/YAML config supplying the schedule")

    sub.add_parser("serve", help="run the HTTP API")

    args = parser.parse_args(argv)

    if args.cmd == "serve":
        from stakelock.api.__main__ import main as serve_main

        serve_main()
        return 0

    at = int(time.time()) if args.at is None else int(args.at)
    try:
        out = quote(int(args.balance), int(args.anchor), at, _schedule_from_args(args))
    except StakeError as e:
        print(json.dumps({"ok": False, "code": e.code, "reason": e.reason}), file=sys.stderr)
        return 2
    print(json.dumps(out, sort_keys=True))
    return 0


if __name__ == "__main__":
    sys.exit(main())
