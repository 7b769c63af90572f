# tests/test_staking_atomicity.py
from __future__ import annotations

import pytest

from stakelock.ledger.constants import UINT256_MAX
from stakelock.runtime import metrics
from stakelock.runtime.errors import (
    ArithmeticOverflow,
    InvalidTimeRange,
    OperationPaused,
    TransferFailed,
    Unauthorized,
)
from stakelock.testing.harness import DAY, OWNER, fund_user, make_pool


def test_failed_pull_leaves_no_trace() -> None:
    pool, custody, _ = make_pool()
    custody.mint("alice", 100)  # no approval

    with pytest.raises(TransferFailed):
        pool.deposit("alice", 100)

    assert pool.account_info("alice").exists is False
    assert pool.total_balance() == 0
    assert len(pool.events) == 0
    assert custody.balance_of("alice") == 100


def test_failed_payout_reverts_ledger_and_custody() -> None:
    pool, custody, clock = make_pool(reward_reserve=0)
    fund_user(custody, "alice", 10_000)
    pool.deposit("alice", 10_000)
    events_before = len(pool.events)
    clock.now = 45 * DAY

    # custody holds 10_000 but the payout is 10_305
    with pytest.raises(TransferFailed):
        pool.withdraw_all("alice")

    snap = pool.account_info("alice")
    assert (snap.balance, snap.anchor_time) == (10_000, 0)
    assert pool.total_balance() == 10_000
    assert custody.held == 10_000
    assert custody.balance_of("alice") == 0
    assert len(pool.events) == events_before

    # exit_all needs no reward reserve
    pool.exit_all("alice")
    assert custody.balance_of("alice") == 10_000


def test_clock_before_anchor_is_an_error_not_a_clamp() -> None:
    pool, custody, clock = make_pool(start=1_000)
    fund_user(custody, "alice", 20)
    pool.deposit("alice", 10)

    clock.now = 999
    with pytest.raises(InvalidTimeRange):
        pool.deposit("alice", 10)
    assert pool.total_balance() == 10
    assert custody.balance_of("alice") == 10

    with pytest.raises(InvalidTimeRange):
        pool.account_info("alice", at=500)


def test_overflow_is_detected_before_tokens_move() -> None:
    pool, custody, _ = make_pool()
    fund_user(custody, "whale", UINT256_MAX)
    pool.deposit("whale", UINT256_MAX)

    fund_user(custody, "whale", 1)
    with pytest.raises(ArithmeticOverflow):
        pool.deposit("whale", 1)
    assert custody.balance_of("whale") == 1
    assert pool.total_balance() == UINT256_MAX


def test_pause_blocks_every_mutation() -> None:
    pool, custody, clock = make_pool()
    fund_user(custody, "alice", 100)
    pool.deposit("alice", 50)
    clock.now = 45 * DAY

    pool.gate.pause(OWNER)
    for call in (
        lambda: pool.deposit("alice", 50),
        lambda: pool.withdraw("alice", 1),
        lambda: pool.withdraw_all("alice"),
        lambda: pool.exit_all("alice"),
        lambda: pool.transfer("alice", "bob"),
    ):
        with pytest.raises(OperationPaused):
            call()

    # queries still work while paused
    assert pool.account_info("alice").balance == 50

    pool.gate.unpause(OWNER)
    pool.withdraw("alice", 1)
    assert pool.account_info("alice").balance == 49


def test_pause_requires_owner() -> None:
    pool, _, _ = make_pool()
    with pytest.raises(Unauthorized):
        pool.gate.pause("mallory")
    assert pool.gate.is_paused() is False
    with pytest.raises(Unauthorized):
        pool.gate.unpause("mallory")


def test_metrics_count_ok_and_failed_ops() -> None:
    metrics.reset()
    pool, custody, _ = make_pool()
    fund_user(custody, "alice", 10)
    pool.deposit("alice", 10)
    with pytest.raises(TransferFailed):
        pool.deposit("alice", 10)

    snap = metrics.snapshot()
    assert snap["counters"]["deposit_ok"] == 1
    assert snap["counters"]["deposit_failed"] == 1
    assert snap["gauges"]["total_balance"] == 10
