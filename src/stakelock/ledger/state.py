from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from stakelock.ledger.constants import UINT256_MAX
from stakelock.ledger.types import AccountChanged, DepositAccount
from stakelock.runtime.errors import ArithmeticOverflow, ArithmeticUnderflow


Json = Dict[str, Any]


def normalize_address(address: Any) -> str:
    s = str(address).strip() if isinstance(address, (str, int)) else ""
    if not s:
        raise ValueError("address must be a non-empty string")
    return s


def _check_uint(name: str, value: int) -> int:
    v = int(value)
    if v < 0:
        raise ArithmeticUnderflow(f"{name}_negative", {name: v})
    if v > UINT256_MAX:
        raise ArithmeticOverflow(f"{name}_out_of_range", {name: v})
    return v


@dataclass(frozen=True, slots=True)
class LedgerSnapshot:
    """Point-in-time copy used to revert a failed operation."""

    accounts: Dict[str, DepositAccount] = field(default_factory=dict)
    total_balance: int = 0
    pending: tuple = ()


class AccountLedger:
    """
    Authoritative mapping address -> DepositAccount plus the global total.

    The only mutation primitives are set_account() and adjust_total_balance().
    The total is maintained incrementally and never recomputed from accounts;
    verify_conservation() exists to detect drift.
    """

    def __init__(self, accounts: Optional[Dict[str, DepositAccount]] = None, total_balance: int = 0) -> None:
        self._accounts: Dict[str, DepositAccount] = dict(accounts or {})
        self._total_balance: int = _check_uint("total_balance", total_balance)
        self._pending: List[AccountChanged] = []

    # ----------------------------
    # Reads
    # ----------------------------

    @property
    def total_balance(self) -> int:
        return self._total_balance

    def get_account(self, address: str) -> DepositAccount:
        return self._accounts.get(normalize_address(address), DepositAccount())

    def exists(self, address: str) -> bool:
        return self.get_account(address).exists

    def accounts(self) -> Dict[str, DepositAccount]:
        return dict(self._accounts)

    def sum_balances(self) -> int:
        return sum(int(a.balance) for a in self._accounts.values() if a.exists)

    def verify_conservation(self) -> bool:
        return self.sum_balances() == self._total_balance

    # ----------------------------
    # Mutation primitives
    # ----------------------------

    def set_account(self, address: str, balance: int, anchor_time: int) -> AccountChanged:
        addr = normalize_address(address)
        new_balance = _check_uint("balance", balance)
        new_anchor = int(anchor_time)

        old = self._accounts.get(addr, DepositAccount())
        self._accounts[addr] = DepositAccount(exists=True, balance=new_balance, anchor_time=new_anchor)

        rec = AccountChanged(
            user=addr,
            new_balance=new_balance,
            new_anchor_time=new_anchor,
            old_balance=int(old.balance),
            old_anchor_time=int(old.anchor_time),
        )
        self._pending.append(rec)
        return rec

    def adjust_total_balance(self, delta: int) -> int:
        d = int(delta)
        nxt = self._total_balance + d
        if nxt < 0:
            raise ArithmeticUnderflow(
                "total_balance_underflow",
                {"total_balance": self._total_balance, "delta": d},
            )
        if nxt > UINT256_MAX:
            raise ArithmeticOverflow(
                "total_balance_overflow",
                {"total_balance": self._total_balance, "delta": d},
            )
        self._total_balance = nxt
        return nxt

    # ----------------------------
    # Change records + atomicity
    # ----------------------------

    def drain_records(self) -> List[AccountChanged]:
        out = list(self._pending)
        self._pending.clear()
        return out

    def snapshot(self) -> LedgerSnapshot:
        # DepositAccount is frozen, so a shallow dict copy is a full copy.
        return LedgerSnapshot(
            accounts=dict(self._accounts),
            total_balance=self._total_balance,
            pending=tuple(self._pending),
        )

    def restore(self, snap: LedgerSnapshot) -> None:
        self._accounts = dict(snap.accounts)
        self._total_balance = int(snap.total_balance)
        self._pending = list(snap.pending)

    # ----------------------------
    # Serialization
    # ----------------------------

    def to_json(self) -> Json:
        return {
            "version": 1,
            "total_balance": str(self._total_balance),
            "accounts": {k: _account_json(v) for k, v in sorted(self._accounts.items())},
        }

    @classmethod
    def from_json(cls, obj: Json) -> "AccountLedger":
        if not isinstance(obj, dict):
            raise ValueError("ledger state must be a JSON object")
        raw_accounts = obj.get("accounts") or {}
        if not isinstance(raw_accounts, dict):
            raise ValueError(f"ledger accounts must be an object, got {type(raw_accounts)}")

        accounts: Dict[str, DepositAccount] = {}
        for addr, rec in raw_accounts.items():
            if not isinstance(rec, dict):
                raise ValueError(f"account {addr!r} must be an object")
            acct = DepositAccount.from_json(rec)
            _check_uint("balance", acct.balance)
            if not acct.exists and acct.balance != 0:
                raise ValueError(f"account {addr!r} does not exist but holds balance {acct.balance}")
            accounts[normalize_address(addr)] = acct

        return cls(accounts=accounts, total_balance=int(obj.get("total_balance", 0)))


def _account_json(acct: DepositAccount) -> Json:
    # Balances serialize as decimal strings (256-bit range).
    j = acct.to_json()
    j["balance"] = str(acct.balance)
    return j


__all__ = ["AccountLedger", "LedgerSnapshot", "normalize_address"]
