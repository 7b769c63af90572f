# src/stakelock/runtime/boot.py

from __future__ import annotations

from typing import Optional

from stakelock.runtime.custody import InMemoryTokenCustody, TokenCustody
from stakelock.runtime.events import EventLog
from stakelock.runtime.gates import OwnerPauseSwitch
from stakelock.runtime.staking import Clock, StakingPool
from stakelock.runtime.staking_config import StakingConfig, load_staking_config
from stakelock.runtime.store import LedgerStore


def build_pool(
    cfg: Optional[StakingConfig] = None,
    *,
    custody: Optional[TokenCustody] = None,
    clock: Optional[Clock] = None,
) -> StakingPool:
    """
    Build a StakingPool from an explicit config or, if omitted, from
    STAKELOCK_* environment / config file.

    Without an explicit custody the pool gets an InMemoryTokenCustody for the
    configured token; that is only allowed outside prod. An in-memory custody
    is persisted next to the ledger when state_path is set.
    """
    c = cfg or load_staking_config()

    if custody is None:
        if c.mode.strip().lower() == "prod":
            raise RuntimeError("prod mode requires an explicit token custody")
        custody = InMemoryTokenCustody(c.token_address)
    elif custody.token_address != c.token_address:
        raise ValueError(
            f"custody token {custody.token_address!r} does not match configured token {c.token_address!r}"
        )

    store = None
    ledger = None
    if c.state_path.strip():
        held = custody if isinstance(custody, InMemoryTokenCustody) else None
        store = LedgerStore(c.state_path, custody=held)
        ledger = store.open()

    return StakingPool(
        schedule=c.schedule(),
        custody=custody,
        gate=OwnerPauseSwitch(c.owner),
        ledger=ledger,
        events=EventLog(max_records=c.event_window),
        clock=clock,
        store=store,
    )
