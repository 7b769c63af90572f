# src/stakelock/runtime/gates.py
from __future__ import annotations

"""Pause gate capability.

The staking pool only asks two questions: is the pool paused, and is this
caller the owner. Anything that answers them can be injected.
"""

import logging
from typing import Protocol, runtime_checkable

from stakelock.runtime.errors import OperationPaused, Unauthorized
from stakelock.runtime.log import log_event

log = logging.getLogger("stakelock.gates")


@runtime_checkable
class PauseGate(Protocol):
    def is_paused(self) -> bool: ...

    def is_owner(self, caller: str) -> bool: ...


class OwnerPauseSwitch:
    """Single-owner pause switch."""

    def __init__(self, owner: str, *, paused: bool = False) -> None:
        o = str(owner or "").strip()
        if not o:
            raise ValueError("owner must be a non-empty string")
        self._owner = o
        self._paused = bool(paused)

    @property
    def owner(self) -> str:
        return self._owner

    def is_paused(self) -> bool:
        return self._paused

    def is_owner(self, caller: str) -> bool:
        return str(caller or "").strip() == self._owner

    def pause(self, caller: str) -> None:
        self._require_owner(caller, "pause")
        self._paused = True
        log_event(log, "paused", caller=caller)

    def unpause(self, caller: str) -> None:
        self._require_owner(caller, "unpause")
        self._paused = False
        log_event(log, "unpaused", caller=caller)

    def _require_owner(self, caller: str, action: str) -> None:
        if not self.is_owner(caller):
            raise Unauthorized("owner_required", {"action": action, "caller": caller})


def deny_if_paused(gate: PauseGate, op: str) -> None:
    if gate.is_paused():
        raise OperationPaused("pool_paused", {"op": op})


__all__ = ["PauseGate", "OwnerPauseSwitch", "deny_if_paused"]
