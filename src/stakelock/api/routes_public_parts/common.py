from __future__ import annotations

from typing import Any, Dict

from fastapi import Request

from stakelock.api.errors import ApiError
from stakelock.runtime.staking import StakingPool

Json = Dict[str, Any]


def _pool(request: Request) -> StakingPool:
    pool = getattr(request.app.state, "pool", None)
    if pool is None:
        raise ApiError.internal("not_ready", "staking pool not attached to app.state", {})
    return pool


def _uint(v: int) -> str:
    # 256-bit values do not fit JSON numbers
    return str(int(v))
