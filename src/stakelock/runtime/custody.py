# src/stakelock/runtime/custody.py
from __future__ import annotations

"""Token custody collaborator.

The staking pool never touches token balances directly. It asks a custody
object to pull deposits from a holder and to push payouts to a recipient;
either call raises TransferFailed when the token refuses the movement.

InMemoryTokenCustody models a standard fungible token (balances +
approve/allowance) together with the pool's own holdings. It is the
collaborator used by tests and by dev/test API deployments.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Protocol, runtime_checkable

from stakelock.runtime.errors import InvalidAmount, TransferFailed


@runtime_checkable
class TokenCustody(Protocol):
    token_address: str

    def pull_from(self, owner: str, amount: int) -> None: ...

    def push_to(self, recipient: str, amount: int) -> None: ...


@dataclass(frozen=True, slots=True)
class CustodySnapshot:
    balances: Dict[str, int] = field(default_factory=dict)
    allowances: Dict[str, int] = field(default_factory=dict)
    held: int = 0


class InMemoryTokenCustody:
    """Fungible token ledger plus the pool's custody account."""

    def __init__(self, token_address: str) -> None:
        addr = str(token_address or "").strip()
        if not addr:
            raise ValueError("token_address must be a non-empty string")
        self.token_address = addr
        self._balances: Dict[str, int] = {}
        # allowance granted by holder to the pool
        self._allowances: Dict[str, int] = {}
        self._held: int = 0

    # token surface

    def mint(self, holder: str, amount: int) -> None:
        amt = int(amount)
        if amt <= 0:
            raise InvalidAmount("mint_amount_not_positive", {"amount": amt})
        self._balances[holder] = self._balances.get(holder, 0) + amt

    def approve(self, holder: str, amount: int) -> None:
        amt = int(amount)
        if amt < 0:
            raise InvalidAmount("allowance_negative", {"amount": amt})
        self._allowances[holder] = amt

    def allowance(self, holder: str) -> int:
        return self._allowances.get(holder, 0)

    def balance_of(self, holder: str) -> int:
        return self._balances.get(holder, 0)

    def fund(self, holder: str, amount: int) -> None:
        """Move tokens from holder into custody as reward reserve (no allowance needed)."""
        amt = int(amount)
        bal = self._balances.get(holder, 0)
        if amt <= 0 or bal < amt:
            raise TransferFailed("fund_rejected", {"holder": holder, "amount": amt, "balance": bal})
        self._balances[holder] = bal - amt
        self._held += amt

    @property
    def held(self) -> int:
        return self._held

    # custody surface

    def pull_from(self, owner: str, amount: int) -> None:
        amt = int(amount)
        bal = self._balances.get(owner, 0)
        allowed = self._allowances.get(owner, 0)
        if amt <= 0:
            raise TransferFailed("pull_amount_not_positive", {"owner": owner, "amount": amt})
        if allowed < amt:
            raise TransferFailed("allowance_exceeded", {"owner": owner, "amount": amt, "allowance": allowed})
        if bal < amt:
            raise TransferFailed("balance_exceeded", {"owner": owner, "amount": amt, "balance": bal})
        self._balances[owner] = bal - amt
        self._allowances[owner] = allowed - amt
        self._held += amt

    def push_to(self, recipient: str, amount: int) -> None:
        amt = int(amount)
        if amt < 0:
            raise TransferFailed("push_amount_negative", {"recipient": recipient, "amount": amt})
        if self._held < amt:
            raise TransferFailed("custody_insufficient", {"recipient": recipient, "amount": amt, "held": self._held})
        self._held -= amt
        self._balances[recipient] = self._balances.get(recipient, 0) + amt

    # atomicity

    def snapshot(self) -> CustodySnapshot:
        return CustodySnapshot(balances=dict(self._balances), allowances=dict(self._allowances), held=self._held)

    def restore(self, snap: CustodySnapshot) -> None:
        self._balances = dict(snap.balances)
        self._allowances = dict(snap.allowances)
        self._held = int(snap.held)

    # persistence

    def to_json(self) -> Dict[str, Any]:
        return {
            "token_address": self.token_address,
            "held": str(self._held),
            "balances": {k: str(v) for k, v in sorted(self._balances.items())},
            "allowances": {k: str(v) for k, v in sorted(self._allowances.items())},
        }

    def load_json(self, obj: Dict[str, Any]) -> None:
        """Replace token state with a persisted copy of the same token."""
        if not isinstance(obj, dict):
            raise ValueError("custody state must be a JSON object")
        token = str(obj.get("token_address") or "")
        if token != self.token_address:
            raise ValueError(f"custody state is for token {token!r}, not {self.token_address!r}")
        self.restore(
            CustodySnapshot(
                balances={str(k): int(v) for k, v in (obj.get("balances") or {}).items()},
                allowances={str(k): int(v) for k, v in (obj.get("allowances") or {}).items()},
                held=int(obj.get("held", 0)),
            )
        )


__all__ = ["TokenCustody", "InMemoryTokenCustody", "CustodySnapshot"]
