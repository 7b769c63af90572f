# src/stakelock/ledger/constants.py
from __future__ import annotations

"""Reward schedule constants.

Anchors (reference deployment):
- Lock sub-interval: 30 days, unlock sub-interval: 30 days
- Reward period: 30 days (rates are expressed per reward period)
- Rates are basis points of *retained* value out of RATE_BASE:
    lock   9700 / 10000 -> 3.00% earned per period
    unlock 9990 / 10000 -> 0.10% earned per period
"""

SECONDS_PER_DAY: int = 24 * 60 * 60

DEFAULT_LOCK_DURATION: int = 30 * SECONDS_PER_DAY
DEFAULT_UNLOCK_DURATION: int = 30 * SECONDS_PER_DAY
DEFAULT_REWARD_PERIOD: int = 30 * SECONDS_PER_DAY

RATE_BASE: int = 10_000
DEFAULT_LOCK_RATE_PTG: int = 9_700
DEFAULT_UNLOCK_RATE_PTG: int = 9_990

# Balances and the global total are unsigned 256-bit quantities.
UINT256_MAX: int = 2**256 - 1
