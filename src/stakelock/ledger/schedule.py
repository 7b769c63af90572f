# src/stakelock/ledger/schedule.py
from __future__ import annotations

from dataclasses import dataclass

from stakelock.ledger.constants import (
    DEFAULT_LOCK_DURATION,
    DEFAULT_LOCK_RATE_PTG,
    DEFAULT_REWARD_PERIOD,
    DEFAULT_UNLOCK_DURATION,
    DEFAULT_UNLOCK_RATE_PTG,
    RATE_BASE,
)


@dataclass(frozen=True, slots=True)
class RewardSchedule:
    """The single global lock/unlock cycle and its two accrual rates.

    unlock_duration == 0 is the flexible single-phase variant: accounts are
    never withdraw-locked and all elapsed time accrues at the lock rate.
    """

    lock_duration: int = DEFAULT_LOCK_DURATION
    unlock_duration: int = DEFAULT_UNLOCK_DURATION
    reward_period: int = DEFAULT_REWARD_PERIOD
    lock_rate_ptg: int = DEFAULT_LOCK_RATE_PTG
    unlock_rate_ptg: int = DEFAULT_UNLOCK_RATE_PTG
    rate_base: int = RATE_BASE

    def __post_init__(self) -> None:
        if int(self.lock_duration) <= 0:
            raise ValueError(f"lock_duration must be > 0; got: {self.lock_duration}")
        if int(self.unlock_duration) < 0:
            raise ValueError(f"unlock_duration must be >= 0; got: {self.unlock_duration}")
        if int(self.reward_period) <= 0:
            raise ValueError(f"reward_period must be > 0; got: {self.reward_period}")
        if int(self.rate_base) <= 0:
            raise ValueError(f"rate_base must be > 0; got: {self.rate_base}")
        for name, v in (("lock_rate_ptg", self.lock_rate_ptg), ("unlock_rate_ptg", self.unlock_rate_ptg)):
            if int(v) < 0 or int(v) > int(self.rate_base):
                raise ValueError(f"{name} must be within 0..rate_base; got: {v}")

    @property
    def cycle(self) -> int:
        return int(self.lock_duration) + int(self.unlock_duration)

    @property
    def single_phase(self) -> bool:
        return int(self.unlock_duration) == 0
