# src/stakelock/runtime/staking_config.py
from __future__ import annotations

import json
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from stakelock.ledger.constants import (
    DEFAULT_LOCK_DURATION,
    DEFAULT_LOCK_RATE_PTG,
    DEFAULT_REWARD_PERIOD,
    DEFAULT_UNLOCK_DURATION,
    DEFAULT_UNLOCK_RATE_PTG,
    RATE_BASE,
)
from stakelock.runtime.events import DEFAULT_EVENT_WINDOW
from stakelock.ledger.schedule import RewardSchedule

Json = Dict[str, Any]


def _as_int(v: Any, default: int) -> int:
    if v is None:
        return int(default)
    try:
        return int(v)
    except (TypeError, ValueError):
        raise ValueError(f"expected an integer, got: {v!r}") from None


def _as_str(v: Any, default: str) -> str:
    if v is None:
        return str(default)
    s = str(v)
    return s if s.strip() else str(default)


@dataclass(frozen=True)
class StakingConfig:
    token_address: str
    owner: str
    mode: str  # "dev" | "test" | "prod"

    lock_duration: int
    unlock_duration: int
    reward_period: int
    lock_rate_ptg: int
    unlock_rate_ptg: int
    rate_base: int

    # Empty means in-memory only.
    state_path: str

    # Committed records kept in memory; older ones survive only in the log.
    event_window: int

    log_level: str

    def schedule(self) -> RewardSchedule:
        return RewardSchedule(
            lock_duration=self.lock_duration,
            unlock_duration=self.unlock_duration,
            reward_period=self.reward_period,
            lock_rate_ptg=self.lock_rate_ptg,
            unlock_rate_ptg=self.unlock_rate_ptg,
            rate_base=self.rate_base,
        )


_ALLOWED_MODES = {"dev", "test", "prod"}

_FIELDS = (
    "token_address",
    "owner",
    "mode",
    "lock_duration",
    "unlock_duration",
    "reward_period",
    "lock_rate_ptg",
    "unlock_rate_ptg",
    "rate_base",
    "state_path",
    "event_window",
    "log_level",
)

_INT_FIELDS = {
    "lock_duration",
    "unlock_duration",
    "reward_period",
    "lock_rate_ptg",
    "unlock_rate_ptg",
    "rate_base",
    "event_window",
}


def validate_staking_config(cfg: StakingConfig) -> None:
    """Fail-fast validation for operator config."""

    if not isinstance(cfg.token_address, str) or not cfg.token_address.strip():
        raise ValueError("token_address must be a non-empty string")

    if not isinstance(cfg.owner, str) or not cfg.owner.strip():
        raise ValueError("owner must be a non-empty string")

    mode = str(cfg.mode or "").strip().lower()
    if mode not in _ALLOWED_MODES:
        raise ValueError(f"mode must be one of {_ALLOWED_MODES}; got: {cfg.mode!r}")

    if int(cfg.event_window) <= 0:
        raise ValueError(f"event_window must be > 0; got: {cfg.event_window!r}")

    # RewardSchedule carries the numeric rules.
    cfg.schedule()


def default_staking_config() -> StakingConfig:
    return StakingConfig(
        token_address="",
        owner="",
        mode="prod",
        lock_duration=DEFAULT_LOCK_DURATION,
        unlock_duration=DEFAULT_UNLOCK_DURATION,
        reward_period=DEFAULT_REWARD_PERIOD,
        lock_rate_ptg=DEFAULT_LOCK_RATE_PTG,
        unlock_rate_ptg=DEFAULT_UNLOCK_RATE_PTG,
        rate_base=RATE_BASE,
        state_path="",
        event_window=DEFAULT_EVENT_WINDOW,
        log_level="INFO",
    )


def config_from_mapping(raw: Json, base: StakingConfig) -> StakingConfig:
    changes: Json = {}
    for name in _FIELDS:
        if name not in raw:
            continue
        cur = getattr(base, name)
        if name in _INT_FIELDS:
            changes[name] = _as_int(raw.get(name), cur)
        else:
            changes[name] = _as_str(raw.get(name), cur)
    return replace(base, **changes)


def read_staking_config_file(path: str) -> Json:
    p = Path(path)
    text = p.read_text(encoding="utf-8")
    if p.suffix.lower() in {".yaml", ".yml"}:
        raw = yaml.safe_load(text)
    else:
        raw = json.loads(text)
    if not isinstance(raw, dict):
        raise ValueError("staking config must be a mapping")
    return raw


def _env_overrides() -> Json:
    out: Json = {}
    for name in _FIELDS:
        v = os.environ.get(f"STAKELOCK_{name.upper()}")
        if v is not None and v.strip():
            out[name] = v.strip()
    return out


def load_staking_config(*, config_path: Optional[str] = None) -> StakingConfig:
    """Defaults <- config file (JSON or YAML) <- STAKELOCK_* env vars."""
    cfg = default_staking_config()

    p = config_path or os.environ.get("STAKELOCK_CONFIG_PATH")
    if p:
        cfg = config_from_mapping(read_staking_config_file(p), cfg)

    cfg = config_from_mapping(_env_overrides(), cfg)
    validate_staking_config(cfg)
    return cfg


__all__ = [
    "StakingConfig",
    "config_from_mapping",
    "default_staking_config",
    "load_staking_config",
    "read_staking_config_file",
    "validate_staking_config",
]
