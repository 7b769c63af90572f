# src/stakelock/ledger/phase.py
from __future__ import annotations

"""Cyclic lock/unlock phase resolution.

Each account runs its own cycle anchored at its anchor time:

    anchor            anchor+L          anchor+P          anchor+P+L
      |---- Locked ------|--- Unlocked ----|---- Locked ------| ...

The boundary instant anchor + k*P + L still belongs to the Locked
sub-interval (position <= L). Phase is never stored; it is re-derived from
(anchor_time, reference_time) on every call.
"""

from typing import Tuple

from stakelock.ledger.schedule import RewardSchedule
from stakelock.ledger.types import Phase, PhaseInfo
from stakelock.runtime.errors import InvalidTimeRange


def cycle_position(schedule: RewardSchedule, anchor_time: int, reference_time: int) -> Tuple[int, int]:
    """Return (cycles_elapsed, position_in_cycle).

    Raises:
        InvalidTimeRange: if reference_time precedes anchor_time
    """
    anchor = int(anchor_time)
    ref = int(reference_time)
    if ref < anchor:
        raise InvalidTimeRange(
            "reference_before_anchor",
            {"anchor_time": anchor, "reference_time": ref},
        )
    elapsed = ref - anchor
    return divmod(elapsed, schedule.cycle)


def resolve_phase(schedule: RewardSchedule, anchor_time: int, reference_time: int) -> PhaseInfo:
    """Resolve the phase and upcoming transitions at reference_time."""
    cycles, position = cycle_position(schedule, anchor_time, reference_time)

    next_lock_at = int(anchor_time) + (cycles + 1) * schedule.cycle
    if position <= int(schedule.lock_duration):
        next_unlock_at = next_lock_at - int(schedule.unlock_duration)
    else:
        next_unlock_at = next_lock_at + int(schedule.lock_duration)

    phase = Phase.LOCKED if next_lock_at > next_unlock_at else Phase.UNLOCKED
    return PhaseInfo(next_lock_at=next_lock_at, next_unlock_at=next_unlock_at, phase=phase)


def is_unlocked(schedule: RewardSchedule, anchor_time: int, reference_time: int) -> bool:
    return resolve_phase(schedule, anchor_time, reference_time).phase is Phase.UNLOCKED


__all__ = ["cycle_position", "resolve_phase", "is_unlocked"]
