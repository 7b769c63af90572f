# src/stakelock/runtime/staking.py
from __future__ import annotations

"""Deposit / withdraw / exit / transfer orchestration.

Every mutating operation:

  1) takes the single-writer lock for this pool
  2) checks the pause gate
  3) validates against the caller's account and the phase re-derived at `now`
  4) pulls tokens (deposit) BEFORE touching the ledger
  5) mutates the ledger via set_account / adjust_total_balance
  6) queues payouts (withdraw / exit); they are pushed after the mutation
  7) persists (when a store is attached) and publishes records

A custody that supports snapshot/restore is settled before persisting and
rolled back with the ledger on any failure. Any other custody is only paid
after the ledger is persisted: a failed save refunds the pulls and pays
nothing, and a failed payout restores the ledger and persists it again.
"""

import logging
import threading
import time
from typing import Any, Callable, List, Optional, Tuple

from stakelock.ledger.constants import UINT256_MAX
from stakelock.ledger.earnings import split_earnings, total_earnings
from stakelock.ledger.phase import resolve_phase
from stakelock.ledger.schedule import RewardSchedule
from stakelock.ledger.state import AccountLedger, normalize_address
from stakelock.ledger.types import (
    AccountSnapshot,
    DepositReplenished,
    Phase,
    Transfer,
    Withdrawal,
)
from stakelock.runtime.custody import TokenCustody
from stakelock.runtime.errors import (
    AccountExists,
    AccountLocked,
    ArithmeticOverflow,
    InsufficientBalance,
    InvalidAmount,
    NoBalance,
    SelfTransfer,
    StakeError,
)
from stakelock.runtime.events import EventLog, Record
from stakelock.runtime.gates import PauseGate, deny_if_paused
from stakelock.runtime.log import log_event
from stakelock.runtime.metrics import inc_counter, set_gauge

log = logging.getLogger("stakelock.staking")

Clock = Callable[[], int]


def _wall_clock() -> int:
    return int(time.time())


class StakingPool:
    def __init__(
        self,
        *,
        schedule: RewardSchedule,
        custody: TokenCustody,
        gate: PauseGate,
        ledger: Optional[AccountLedger] = None,
        events: Optional[EventLog] = None,
        clock: Optional[Clock] = None,
        store: Any = None,
    ) -> None:
        self.schedule = schedule
        self.custody = custody
        self.gate = gate
        self.ledger = ledger if ledger is not None else AccountLedger()
        self.events = events if events is not None else EventLog()
        self.store = store
        self._clock: Clock = clock or _wall_clock
        self._lock = threading.Lock()

    @property
    def token_address(self) -> str:
        return self.custody.token_address

    def now(self) -> int:
        return int(self._clock())

    # ----------------------------
    # Mutating operations
    # ----------------------------

    def deposit(self, user: str, amount: int) -> DepositReplenished:
        addr = normalize_address(user)
        amt = int(amount)

        def _op(now: int, moves: _CustodyMoves) -> Tuple[DepositReplenished, List[Record]]:
            deny_if_paused(self.gate, "deposit")
            if amt <= 0:
                raise InvalidAmount("amount_not_positive", {"amount": amt})

            acct = self.ledger.get_account(addr)
            earnings = 0
            if acct.exists:
                earnings = total_earnings(self.schedule, acct.balance, acct.anchor_time, now)

            credit = amt + earnings
            self._require_headroom(acct.balance + credit, credit)

            moves.pull(addr, amt)

            self.ledger.set_account(addr, acct.balance + credit, now)
            self.ledger.adjust_total_balance(credit)

            rec = DepositReplenished(user=addr, amount=amt, earnings=earnings)
            return rec, [rec]

        return self._run("deposit", _op)

    def withdraw(self, user: str, amount: int) -> Withdrawal:
        return self._withdraw("withdraw", user, int(amount), pay_earnings=True)

    def withdraw_all(self, user: str) -> Withdrawal:
        return self._withdraw("withdraw_all", user, None, pay_earnings=True)

    def exit_all(self, user: str) -> Withdrawal:
        """Full withdrawal that forfeits accrued earnings.

        Gated exactly like withdraw_all (Unlocked phase required); the only
        difference is the payout excludes earnings.
        """
        return self._withdraw("exit_all", user, None, pay_earnings=False)

    def transfer(self, sender: str, recipient: str) -> Transfer:
        src_addr = normalize_address(sender)
        dst_addr = normalize_address(recipient)

        def _op(now: int, moves: _CustodyMoves) -> Tuple[Transfer, List[Record]]:
            deny_if_paused(self.gate, "transfer")
            if src_addr == dst_addr:
                raise SelfTransfer("sender_is_recipient", {"address": src_addr})

            src = self.ledger.get_account(src_addr)
            if not src.exists or src.balance <= 0:
                raise NoBalance("sender_has_no_balance", {"sender": src_addr})
            if self.ledger.exists(dst_addr):
                raise AccountExists("recipient_account_exists", {"recipient": dst_addr})

            # The whole claim moves, accrual history (anchor) included.
            self.ledger.set_account(dst_addr, src.balance, src.anchor_time)
            self.ledger.set_account(src_addr, 0, now)

            rec = Transfer(sender=src_addr, recipient=dst_addr, balance=src.balance, anchor_time=src.anchor_time)
            return rec, [rec]

        return self._run("transfer", _op)

    # ----------------------------
    # Queries
    # ----------------------------

    def account_info(self, address: str, at: Optional[int] = None) -> AccountSnapshot:
        addr = normalize_address(address)
        with self._lock:
            ref = self.now() if at is None else int(at)
            acct = self.ledger.get_account(addr)

        if not acct.exists:
            return AccountSnapshot(
                address=addr,
                exists=False,
                balance=0,
                lock_earnings=0,
                unlock_earnings=0,
                anchor_time=0,
                next_lock_at=None,
                next_unlock_at=None,
                phase=None,
                reference_time=ref,
            )

        info = resolve_phase(self.schedule, acct.anchor_time, ref)
        lock_e, unlock_e = split_earnings(self.schedule, acct.balance, acct.anchor_time, ref)
        return AccountSnapshot(
            address=addr,
            exists=True,
            balance=acct.balance,
            lock_earnings=lock_e,
            unlock_earnings=unlock_e,
            anchor_time=acct.anchor_time,
            next_lock_at=info.next_lock_at,
            next_unlock_at=info.next_unlock_at,
            phase=info.phase,
            reference_time=ref,
        )

    def total_balance(self) -> int:
        with self._lock:
            return self.ledger.total_balance

    # ----------------------------
    # Internals
    # ----------------------------

    def _withdraw(self, op: str, user: str, amount: Optional[int], *, pay_earnings: bool) -> Withdrawal:
        addr = normalize_address(user)

        def _op(now: int, moves: _CustodyMoves) -> Tuple[Withdrawal, List[Record]]:
            deny_if_paused(self.gate, op)
            if amount is not None and amount <= 0:
                raise InvalidAmount("amount_not_positive", {"amount": amount})

            acct = self.ledger.get_account(addr)
            if not acct.exists or acct.balance <= 0:
                raise InsufficientBalance("no_balance", {"user": addr})

            info = resolve_phase(self.schedule, acct.anchor_time, now)
            if info.phase is Phase.LOCKED:
                raise AccountLocked("account_locked", {"user": addr, "unlocks_at": info.next_unlock_at})

            amt = acct.balance if amount is None else int(amount)
            if amt > acct.balance:
                raise InsufficientBalance("amount_exceeds_balance", {"amount": amt, "balance": acct.balance})

            earnings = total_earnings(self.schedule, acct.balance, acct.anchor_time, now) if pay_earnings else 0

            self.ledger.set_account(addr, acct.balance - amt, now)
            self.ledger.adjust_total_balance(-amt)

            moves.pay(addr, amt + earnings)

            rec = Withdrawal(user=addr, amount=amt, earnings=earnings)
            return rec, [rec]

        return self._run(op, _op)

    def _require_headroom(self, new_balance: int, credit: int) -> None:
        if new_balance > UINT256_MAX:
            raise ArithmeticOverflow("balance_overflow", {"balance": new_balance})
        if self.ledger.total_balance + credit > UINT256_MAX:
            raise ArithmeticOverflow("total_balance_overflow", {"credit": credit})

    def _run(self, op: str, fn: Callable[[int, "_CustodyMoves"], Tuple[Any, List[Record]]]) -> Any:
        with self._lock:
            now = self.now()
            ledger_snap = self.ledger.snapshot()
            custody_snap = self.custody.snapshot() if hasattr(self.custody, "snapshot") else None
            moves = _CustodyMoves(self.custody)

            try:
                result, records = fn(now, moves)
                changes = self.ledger.drain_records()
                if custody_snap is not None:
                    moves.settle()
                self._persist()
            except Exception as e:
                self.ledger.restore(ledger_snap)
                if custody_snap is not None:
                    self.custody.restore(custody_snap)  # type: ignore[attr-defined]
                else:
                    moves.refund()
                self._reject(op, e)
                raise

            if custody_snap is None:
                # Payouts leave only once the debited ledger is durable.
                try:
                    moves.settle()
                except Exception as e:
                    self.ledger.restore(ledger_snap)
                    self._persist_rollback(op)
                    self._reject(op, e)
                    raise

            self.events.publish([*changes, *records])
            inc_counter(f"{op}_ok")
            set_gauge("total_balance", self.ledger.total_balance)
            set_gauge("accounts", len(self.ledger.accounts()))
            return result

    def _persist(self) -> None:
        if self.store is not None:
            self.store.save(self.ledger)

    def _persist_rollback(self, op: str) -> None:
        try:
            self._persist()
        except Exception:
            log.exception("rollback_persist_failed op=%s", op)

    def _reject(self, op: str, e: Exception) -> None:
        inc_counter(f"{op}_failed")
        if isinstance(e, StakeError):
            log_event(log, "op_rejected", level=logging.WARNING, op=op, code=e.code, reason=e.reason)
        else:
            log.exception("op_failed op=%s", op)


class _CustodyMoves:
    """Token movements of one operation: pulls happen immediately, payouts are queued."""

    def __init__(self, custody: TokenCustody) -> None:
        self._custody = custody
        self.pulled: List[Tuple[str, int]] = []
        self.payouts: List[Tuple[str, int]] = []

    def pull(self, owner: str, amount: int) -> None:
        self._custody.pull_from(owner, amount)
        self.pulled.append((owner, amount))

    def pay(self, recipient: str, amount: int) -> None:
        self.payouts.append((recipient, amount))

    def settle(self) -> None:
        while self.payouts:
            recipient, amount = self.payouts.pop(0)
            self._custody.push_to(recipient, amount)

    def refund(self) -> None:
        while self.pulled:
            owner, amount = self.pulled.pop()
            try:
                self._custody.push_to(owner, amount)
            except Exception:
                log.exception("refund_failed owner=%s amount=%s", owner, amount)


__all__ = ["StakingPool", "Clock"]
