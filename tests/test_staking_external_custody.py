from __future__ import annotations

from typing import List, Optional, Tuple

import pytest

from stakelock.ledger.schedule import RewardSchedule
from stakelock.ledger.state import AccountLedger
from stakelock.runtime.errors import TransferFailed
from stakelock.runtime.gates import OwnerPauseSwitch
from stakelock.runtime.staking import StakingPool
from stakelock.testing.harness import DAY, OWNER, TOKEN, ManualClock


class ExternalCustody:
    """Token custody with no snapshot/restore, like a real token bridge."""

    def __init__(self, held: int = 1_000_000) -> None:
        self.token_address = TOKEN
        self.held = held
        self.pulled: List[Tuple[str, int]] = []
        self.pushed: List[Tuple[str, int]] = []
        self.fail_push = False

    def pull_from(self, owner: str, amount: int) -> None:
        self.pulled.append((owner, amount))
        self.held += amount

    def push_to(self, recipient: str, amount: int) -> None:
        if self.fail_push:
            raise TransferFailed("token_refused", {"recipient": recipient})
        self.pushed.append((recipient, amount))
        self.held -= amount


class FlakyStore:
    def __init__(self) -> None:
        self.failures = 0
        self.saved: Optional[dict] = None

    def save(self, ledger: AccountLedger) -> None:
        if self.failures > 0:
            self.failures -= 1
            raise OSError("disk full")
        self.saved = ledger.to_json()


def _pool() -> Tuple[StakingPool, ExternalCustody, FlakyStore, ManualClock]:
    custody = ExternalCustody()
    store = FlakyStore()
    clock = ManualClock()
    pool = StakingPool(
        schedule=RewardSchedule(),
        custody=custody,
        gate=OwnerPauseSwitch(OWNER),
        clock=clock,
        store=store,
    )
    return pool, custody, store, clock


def test_failed_save_pays_nothing_and_retry_pays_once() -> None:
    pool, custody, store, clock = _pool()
    pool.deposit("alice", 10_000)
    clock.now = 45 * DAY

    store.failures = 1
    with pytest.raises(OSError):
        pool.withdraw_all("alice")
    assert custody.pushed == []
    assert pool.account_info("alice").balance == 10_000
    assert store.saved["accounts"]["alice"]["balance"] == "10000"

    pool.withdraw_all("alice")
    assert custody.pushed == [("alice", 10_305)]
    assert pool.account_info("alice").balance == 0
    assert store.saved["total_balance"] == "0"


def test_failed_save_refunds_the_deposit() -> None:
    pool, custody, store, _ = _pool()
    store.failures = 1

    with pytest.raises(OSError):
        pool.deposit("alice", 500)

    assert custody.pulled == [("alice", 500)]
    assert custody.pushed == [("alice", 500)]
    assert pool.account_info("alice").exists is False
    assert pool.total_balance() == 0
    assert len(pool.events) == 0


def test_failed_payout_restores_and_persists_the_ledger() -> None:
    pool, custody, store, clock = _pool()
    pool.deposit("alice", 10_000)
    clock.now = 45 * DAY
    events_before = len(pool.events)

    custody.fail_push = True
    with pytest.raises(TransferFailed):
        pool.withdraw("alice", 4_000)

    snap = pool.account_info("alice")
    assert (snap.balance, snap.anchor_time) == (10_000, 0)
    assert store.saved["accounts"]["alice"] == {"exists": True, "balance": "10000", "anchor_time": 0}
    assert store.saved["total_balance"] == "10000"
    assert len(pool.events) == events_before
