from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from stakelock.ledger.constants import SECONDS_PER_DAY
from stakelock.ledger.schedule import RewardSchedule
from stakelock.runtime.custody import InMemoryTokenCustody
from stakelock.runtime.gates import OwnerPauseSwitch
from stakelock.runtime.staking import StakingPool

DAY = SECONDS_PER_DAY
TOKEN = "0xT0KEN"
OWNER = "owner"


@dataclass
class ManualClock:
    """Settable clock. TEST ONLY."""

    now: int = 0

    def __call__(self) -> int:
        return int(self.now)

    def advance(self, seconds: int) -> int:
        self.now = int(self.now) + int(seconds)
        return self.now


def make_pool(
    *,
    schedule: Optional[RewardSchedule] = None,
    start: int = 0,
    reward_reserve: int = 1_000_000,
) -> tuple[StakingPool, InMemoryTokenCustody, ManualClock]:
    """Pool on an in-memory token with the owner's reward reserve already in custody."""
    clock = ManualClock(now=start)
    custody = InMemoryTokenCustody(TOKEN)
    if reward_reserve > 0:
        custody.mint(OWNER, reward_reserve)
        custody.fund(OWNER, reward_reserve)
    pool = StakingPool(
        schedule=schedule or RewardSchedule(),
        custody=custody,
        gate=OwnerPauseSwitch(OWNER),
        clock=clock,
    )
    return pool, custody, clock


def fund_user(custody: InMemoryTokenCustody, user: str, amount: int) -> None:
    """Mint tokens to user and approve the pool for the same amount. TEST ONLY."""
    custody.mint(user, amount)
    custody.approve(user, custody.allowance(user) + amount)
