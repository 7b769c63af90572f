from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Query, Request

from stakelock.api.routes_public_parts.common import Json, _pool, _uint

router = APIRouter()


@router.get("/accounts/{address}")
def v1_account_get(address: str, request: Request, at: Optional[int] = Query(default=None, ge=0)) -> Json:
    """Account snapshot at `at` (unix seconds) or now."""
    snap = _pool(request).account_info(address, at=at)
    return {
        "ok": True,
        "account": snap.address,
        "reference_time": snap.reference_time,
        "exists": snap.exists,
        "balance": _uint(snap.balance),
        "lock_earnings": _uint(snap.lock_earnings),
        "unlock_earnings": _uint(snap.unlock_earnings),
        "earnings": _uint(snap.earnings),
        "anchor_time": snap.anchor_time,
        "next_lock_at": snap.next_lock_at,
        "next_unlock_at": snap.next_unlock_at,
        "phase": snap.phase.value if snap.phase is not None else None,
    }


@router.get("/total-balance")
def v1_total_balance(request: Request) -> Json:
    return {"ok": True, "total_balance": _uint(_pool(request).total_balance())}
