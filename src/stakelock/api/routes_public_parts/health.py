from __future__ import annotations

import time

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health")
def v1_health(request: Request) -> dict[str, object]:
    pool = getattr(request.app.state, "pool", None)
    return {
        "ok": True,
        "service": "stakelock",
        "version": "v1",
        "ts_ms": int(time.time() * 1000),
        "ready": pool is not None,
        "token_address": pool.token_address if pool is not None else None,
        "paused": pool.gate.is_paused() if pool is not None else None,
    }
