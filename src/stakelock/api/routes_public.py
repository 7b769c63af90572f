# src/stakelock/api/routes_public.py
from __future__ import annotations

from fastapi import APIRouter

from stakelock.api.routes_public_parts.accounts import router as accounts_router
from stakelock.api.routes_public_parts.health import router as health_router
from stakelock.api.routes_public_parts.metrics import router as metrics_router
from stakelock.api.routes_public_parts.ops import router as ops_router

public_router = APIRouter()

public_router.include_router(health_router, prefix="/v1", tags=["health"])
public_router.include_router(accounts_router, prefix="/v1", tags=["accounts"])
public_router.include_router(ops_router, prefix="/v1", tags=["staking"])

# Ops
public_router.include_router(metrics_router, prefix="/v1", tags=["metrics"])
