from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class StakeError(Exception):
    """Canonical error type for ledger and staking operation failures."""

    code: str
    reason: str
    details: Any | None = None

    def __str__(self) -> str:  # pragma: no cover
        if self.details is None:
            return f"{self.code}:{self.reason}"
        return f"{self.code}:{self.reason}:{self.details}"


class _CodedError(StakeError):
    CODE = "stake_error"

    def __init__(self, reason: str, details: Any | None = None) -> None:
        super().__init__(self.CODE, reason, details)


class InvalidAmount(_CodedError):
    CODE = "invalid_amount"


class InvalidTimeRange(_CodedError):
    CODE = "invalid_time_range"


class AccountLocked(_CodedError):
    CODE = "account_locked"


class InsufficientBalance(_CodedError):
    CODE = "insufficient_balance"


class NoBalance(_CodedError):
    CODE = "no_balance"


class SelfTransfer(_CodedError):
    CODE = "self_transfer"


class AccountExists(_CodedError):
    CODE = "account_exists"


class ArithmeticUnderflow(_CodedError):
    CODE = "arithmetic_underflow"


class ArithmeticOverflow(_CodedError):
    CODE = "arithmetic_overflow"


class TransferFailed(_CodedError):
    CODE = "transfer_failed"


class OperationPaused(_CodedError):
    CODE = "operation_paused"


class Unauthorized(_CodedError):
    CODE = "unauthorized"


__all__ = [
    "StakeError",
    "InvalidAmount",
    "InvalidTimeRange",
    "AccountLocked",
    "InsufficientBalance",
    "NoBalance",
    "SelfTransfer",
    "AccountExists",
    "ArithmeticUnderflow",
    "ArithmeticOverflow",
    "TransferFailed",
    "OperationPaused",
    "Unauthorized",
]
