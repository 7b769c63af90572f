# src/stakelock/ledger/earnings.py
from __future__ import annotations

"""Earnings math.

All functions are pure integer arithmetic and must match the reference
ledger bit for bit:

  value    = amount * duration // reward_period
  earnings = (value * rate_base - value * rate_pct) // rate_base

The subtraction is formed on the full numerator; truncation happens only at
the two floor divisions.

Accrual is linear inside one call. Compounding only happens across calls,
when a ledger operation folds earnings into the balance and resets the
anchor time.
"""

from typing import Tuple

from stakelock.ledger.phase import cycle_position
from stakelock.ledger.schedule import RewardSchedule


def split_duration(schedule: RewardSchedule, anchor_time: int, reference_time: int) -> Tuple[int, int]:
    """Partition reference_time - anchor_time into (lock_portion, unlock_portion)."""
    cycles, position = cycle_position(schedule, anchor_time, reference_time)
    lock = int(schedule.lock_duration)
    unlock = int(schedule.unlock_duration)

    lock_portion = cycles * lock + min(position, lock)
    unlock_portion = cycles * unlock + max(position - lock, 0)
    return lock_portion, unlock_portion


def accrue(amount: int, duration: int, reward_period: int, rate_pct: int, rate_base: int) -> int:
    amount = int(amount)
    duration = int(duration)
    if amount == 0 or duration == 0:
        return 0
    value = (amount * duration) // int(reward_period)
    return (value * int(rate_base) - value * int(rate_pct)) // int(rate_base)


def split_earnings(schedule: RewardSchedule, balance: int, anchor_time: int, reference_time: int) -> Tuple[int, int]:
    """Return (lock_earnings, unlock_earnings) owed on balance since anchor_time."""
    lock_portion, unlock_portion = split_duration(schedule, anchor_time, reference_time)
    lock_earnings = accrue(
        balance, lock_portion, schedule.reward_period, schedule.lock_rate_ptg, schedule.rate_base
    )
    unlock_earnings = accrue(
        balance, unlock_portion, schedule.reward_period, schedule.unlock_rate_ptg, schedule.rate_base
    )
    return lock_earnings, unlock_earnings


def total_earnings(schedule: RewardSchedule, balance: int, anchor_time: int, reference_time: int) -> int:
    lock_earnings, unlock_earnings = split_earnings(schedule, balance, anchor_time, reference_time)
    return lock_earnings + unlock_earnings


__all__ = ["split_duration", "accrue", "split_earnings", "total_earnings"]
