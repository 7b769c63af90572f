from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from fastapi import Request
from fastapi.responses import JSONResponse

from stakelock.runtime.errors import StakeError


@dataclass(frozen=True, slots=True)
class ApiError(Exception):
    status_code: int
    code: str
    message: str
    details: Dict[str, Any]

    @staticmethod
    def bad_request(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> "ApiError":
        return ApiError(400, code, message, details or {})

    @staticmethod
    def forbidden(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> "ApiError":
        return ApiError(403, code, message, details or {})

    @staticmethod
    def conflict(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> "ApiError":
        return ApiError(409, code, message, details or {})

    @staticmethod
    def bad_gateway(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> "ApiError":
        return ApiError(502, code, message, details or {})

    @staticmethod
    def internal(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> "ApiError":
        return ApiError(500, code, message, details or {})


_STATUS_BY_CODE = {
    "invalid_amount": 400,
    "invalid_time_range": 400,
    "insufficient_balance": 400,
    "no_balance": 400,
    "self_transfer": 400,
    "operation_paused": 403,
    "unauthorized": 403,
    "account_locked": 409,
    "account_exists": 409,
    "arithmetic_underflow": 409,
    "arithmetic_overflow": 409,
    "transfer_failed": 502,
}


def api_error_from_stake_error(e: StakeError) -> ApiError:
    details = e.details if isinstance(e.details, dict) else ({} if e.details is None else {"details": e.details})
    # 256-bit ints in details are stringified for JSON clients
    details = {k: (str(v) if isinstance(v, int) and not isinstance(v, bool) else v) for k, v in details.items()}
    return ApiError(_STATUS_BY_CODE.get(e.code, 400), e.code, e.reason, details)


def _error_body(err: ApiError) -> Dict[str, Any]:
    return {"ok": False, "error": {"code": err.code, "message": err.message, "details": err.details}}


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=_error_body(exc))


async def stake_error_handler(request: Request, exc: StakeError) -> JSONResponse:
    err = api_error_from_stake_error(exc)
    return JSONResponse(status_code=err.status_code, content=_error_body(err))


async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
    return JSONResponse(status_code=400, content=_error_body(ApiError.bad_request("invalid_request", str(exc))))
