from __future__ import annotations

from fastapi import APIRouter, Request

from stakelock.api.routes_public_parts.common import Json, _pool, _uint
from stakelock.api.schemas import AccountRequest, DepositRequest, OwnerRequest, TransferRequest, WithdrawRequest
from stakelock.ledger.types import Withdrawal

router = APIRouter()


def _withdrawal_json(rec: Withdrawal) -> Json:
    return {
        "ok": True,
        "user": rec.user,
        "amount": _uint(rec.amount),
        "earnings": _uint(rec.earnings),
        "paid": _uint(rec.amount + rec.earnings),
    }


@router.post("/deposit")
def v1_deposit(body: DepositRequest, request: Request) -> Json:
    rec = _pool(request).deposit(body.user, body.amount)
    return {"ok": True, "user": rec.user, "amount": _uint(rec.amount), "earnings": _uint(rec.earnings)}


@router.post("/withdraw")
def v1_withdraw(body: WithdrawRequest, request: Request) -> Json:
    return _withdrawal_json(_pool(request).withdraw(body.user, body.amount))


@router.post("/withdraw-all")
def v1_withdraw_all(body: AccountRequest, request: Request) -> Json:
    return _withdrawal_json(_pool(request).withdraw_all(body.user))


@router.post("/exit-all")
def v1_exit_all(body: AccountRequest, request: Request) -> Json:
    return _withdrawal_json(_pool(request).exit_all(body.user))


@router.post("/transfer")
def v1_transfer(body: TransferRequest, request: Request) -> Json:
    rec = _pool(request).transfer(body.sender, body.recipient)
    return {
        "ok": True,
        "sender": rec.sender,
        "recipient": rec.recipient,
        "balance": _uint(rec.balance),
        "anchor_time": rec.anchor_time,
    }


@router.post("/pause")
def v1_pause(body: OwnerRequest, request: Request) -> Json:
    gate = _pool(request).gate
    gate.pause(body.caller)
    return {"ok": True, "paused": gate.is_paused()}


@router.post("/unpause")
def v1_unpause(body: OwnerRequest, request: Request) -> Json:
    gate = _pool(request).gate
    gate.unpause(body.caller)
    return {"ok": True, "paused": gate.is_paused()}
