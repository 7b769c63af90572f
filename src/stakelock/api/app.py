from __future__ import annotations

import os
from typing import Optional

from fastapi import FastAPI

from stakelock.api.errors import ApiError, api_error_handler, stake_error_handler, value_error_handler
from stakelock.api.routes_public import public_router
from stakelock.api.structured_logging import RequestLogMiddleware
from stakelock.runtime.boot import build_pool as _build_pool
from stakelock.runtime.errors import StakeError
from stakelock.runtime.staking_config import StakingConfig, load_staking_config


def build_pool(cfg: Optional[StakingConfig] = None):
    """Build the StakingPool for API runtime.

    This wrapper exists so tests can monkeypatch `stakelock.api.app.build_pool`
    without reaching into runtime modules.
    """
    return _build_pool(cfg)


def create_app(*, boot_runtime: bool = True) -> FastAPI:
    """Create the FastAPI application.

    boot_runtime:
      - True (default): load staking config + attach app.state.pool; the
        config's mode decides whether docs are served
      - False: keep lightweight; tests attach their own pool and the mode
        comes from STAKELOCK_MODE
    """
    cfg = load_staking_config() if boot_runtime else None
    if cfg is not None:
        mode = cfg.mode.strip().lower()
    else:
        mode = os.environ.get("STAKELOCK_MODE", "prod").strip().lower()

    # Disable docs in production.
    if mode == "prod":
        app = FastAPI(title="stakelock API", docs_url=None, redoc_url=None, openapi_url=None)
    else:
        app = FastAPI(title="stakelock API")

    app.state.pool = build_pool(cfg) if cfg is not None else None

    app.add_middleware(RequestLogMiddleware)
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(StakeError, stake_error_handler)
    app.add_exception_handler(ValueError, value_error_handler)

    app.include_router(public_router)
    return app
