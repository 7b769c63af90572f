# tests/test_conservation_random_ops.py
from __future__ import annotations

import random

import pytest

from stakelock.ledger.schedule import RewardSchedule
from stakelock.runtime.errors import StakeError
from stakelock.testing.harness import DAY, fund_user, make_pool

USERS = ["alice", "bob", "carol", "dave", "erin", "frank"]


@pytest.mark.parametrize(
    "schedule,seed",
    [
        (RewardSchedule(), 1),
        (RewardSchedule(), 2),
        (RewardSchedule(lock_duration=3 * DAY, unlock_duration=DAY, reward_period=DAY), 3),
        (RewardSchedule(lock_duration=5 * DAY, unlock_duration=0), 4),
    ],
)
def test_total_balance_tracks_sum_of_accounts(schedule: RewardSchedule, seed: int) -> None:
    rng = random.Random(seed)
    pool, custody, clock = make_pool(schedule=schedule, reward_reserve=10**12)
    for u in USERS:
        fund_user(custody, u, 10**9)

    seen_existing: set[str] = set()
    ok = 0

    for _ in range(400):
        clock.advance(rng.randrange(0, 20 * DAY))
        user = rng.choice(USERS)
        op = rng.choice(["deposit", "withdraw", "withdraw_all", "exit_all", "transfer"])
        try:
            if op == "deposit":
                pool.deposit(user, rng.randrange(1, 100_000))
            elif op == "withdraw":
                bal = pool.account_info(user).balance
                pool.withdraw(user, rng.randrange(1, bal + 2) if bal else 1)
            elif op == "withdraw_all":
                pool.withdraw_all(user)
            elif op == "exit_all":
                pool.exit_all(user)
            else:
                pool.transfer(user, rng.choice(USERS + [f"fresh{rng.randrange(10**6)}"]))
            ok += 1
        except StakeError:
            pass

        ledger = pool.ledger
        assert ledger.verify_conservation()
        for addr, acct in ledger.accounts().items():
            assert acct.balance >= 0
            if acct.exists:
                seen_existing.add(addr)
        assert ledger.total_balance >= 0
        for addr in seen_existing:
            assert ledger.exists(addr)

    assert ok > 50
