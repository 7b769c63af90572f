# src/stakelock/ledger/types.py
from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, Optional

Json = Dict[str, Any]


class Phase(str, Enum):
    LOCKED = "locked"
    UNLOCKED = "unlocked"


@dataclass(frozen=True, slots=True)
class DepositAccount:
    """One deposit account per address.

    `exists` separates "never deposited" from "drained to zero"; once an
    account exists it is never removed from the ledger.
    """

    exists: bool = False
    balance: int = 0
    anchor_time: int = 0

    def to_json(self) -> Json:
        return {"exists": bool(self.exists), "balance": int(self.balance), "anchor_time": int(self.anchor_time)}

    @classmethod
    def from_json(cls, obj: Json) -> "DepositAccount":
        return cls(
            exists=bool(obj.get("exists", False)),
            balance=int(obj.get("balance", 0)),
            anchor_time=int(obj.get("anchor_time", 0)),
        )


@dataclass(frozen=True, slots=True)
class PhaseInfo:
    next_lock_at: int
    next_unlock_at: int
    phase: Phase


@dataclass(frozen=True, slots=True)
class AccountSnapshot:
    """Read-only account view evaluated at a reference time."""

    address: str
    exists: bool
    balance: int
    lock_earnings: int
    unlock_earnings: int
    anchor_time: int
    next_lock_at: Optional[int]
    next_unlock_at: Optional[int]
    phase: Optional[Phase]
    reference_time: int

    @property
    def earnings(self) -> int:
        return self.lock_earnings + self.unlock_earnings

    def to_json(self) -> Json:
        out = asdict(self)
        out["phase"] = self.phase.value if self.phase is not None else None
        out["earnings"] = self.earnings
        return out


# ----------------------------
# Audit records
# ----------------------------


@dataclass(frozen=True, slots=True)
class DepositReplenished:
    user: str
    amount: int
    earnings: int

    kind = "deposit_replenished"

    def to_json(self) -> Json:
        return {"kind": self.kind, **asdict(self)}


@dataclass(frozen=True, slots=True)
class Withdrawal:
    user: str
    amount: int
    earnings: int

    kind = "withdrawal"

    def to_json(self) -> Json:
        return {"kind": self.kind, **asdict(self)}


@dataclass(frozen=True, slots=True)
class Transfer:
    sender: str
    recipient: str
    balance: int
    anchor_time: int

    kind = "transfer"

    def to_json(self) -> Json:
        return {"kind": self.kind, **asdict(self)}


@dataclass(frozen=True, slots=True)
class AccountChanged:
    user: str
    new_balance: int
    new_anchor_time: int
    old_balance: int
    old_anchor_time: int

    kind = "account_changed"

    def to_json(self) -> Json:
        return {"kind": self.kind, **asdict(self)}


__all__ = [
    "Json",
    "Phase",
    "DepositAccount",
    "PhaseInfo",
    "AccountSnapshot",
    "DepositReplenished",
    "Withdrawal",
    "Transfer",
    "AccountChanged",
]
