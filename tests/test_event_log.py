from __future__ import annotations

import dataclasses

import pytest

from stakelock.runtime.boot import build_pool
from stakelock.runtime.events import DEFAULT_EVENT_WINDOW, EventLog
from stakelock.runtime.staking_config import default_staking_config
from stakelock.testing.harness import OWNER, TOKEN, fund_user


def test_event_log_keeps_only_the_newest_records() -> None:
    cfg = dataclasses.replace(default_staking_config(), token_address=TOKEN, owner=OWNER, mode="test", event_window=5)
    pool = build_pool(cfg)
    assert pool.events.max_records == 5

    fund_user(pool.custody, "alice", 100)
    for _ in range(10):
        pool.deposit("alice", 10)

    # two records per deposit: account_changed + deposit_replenished
    assert len(pool.events) == 5
    assert pool.events.published == 20
    assert pool.events.records()[-1].kind == "deposit_replenished"
    assert pool.account_info("alice").balance == 100


def test_default_window_and_bad_bound() -> None:
    assert EventLog().max_records == DEFAULT_EVENT_WINDOW
    with pytest.raises(ValueError):
        EventLog(max_records=0)
