from __future__ import annotations

"""Pydantic request schemas for the public API.

Amounts are accepted as integers or decimal strings (token base units can
exceed the float-safe range).
"""

from pydantic import BaseModel, Field


class DepositRequest(BaseModel):
    user: str = Field(..., min_length=1, description="Depositor address")
    amount: int = Field(..., gt=0, description="Token base units")


class WithdrawRequest(BaseModel):
    user: str = Field(..., min_length=1, description="Account address")
    amount: int = Field(..., gt=0, description="Principal to withdraw, token base units")


class AccountRequest(BaseModel):
    user: str = Field(..., min_length=1, description="Account address")


class TransferRequest(BaseModel):
    sender: str = Field(..., min_length=1, description="Current account holder")
    recipient: str = Field(..., min_length=1, description="Fresh address receiving the account")


class OwnerRequest(BaseModel):
    caller: str = Field(..., min_length=1, description="Must be the configured owner")
