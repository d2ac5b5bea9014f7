"""Pydantic schemas for the ledger HTTP API."""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AccountCreate(BaseModel):
    owner: str = Field(..., description="Display name of the account owner")


class AccountResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    owner: str
    balance: Decimal


class AmountRequest(BaseModel):
    amount: Decimal

    @field_validator("amount", mode="before")
    @classmethod
    def _normalize_amount(cls, value: Decimal | float | int | str) -> Decimal:
        try:
            return Decimal(str(value))
        except InvalidOperation as exc:
            raise ValueError("amount must be a number") from exc


class TransferRequest(AmountRequest):
    destination_id: str


class TransactionModel(BaseModel):
    kind: str
    amount: Decimal
    timestamp: datetime
    counterparty: Optional[str] = None


class OperationResponse(BaseModel):
    account: AccountResponse
    transactions: List[TransactionModel]


class StatementLine(BaseModel):
    position: int
    kind: str
    amount: str
    timestamp: str
    counterparty: Optional[str] = None
    description: str


class StatementResponse(BaseModel):
    account_id: str
    owner: str
    currency: str
    balance: str
    history: List[StatementLine]


class ErrorResponse(BaseModel):
    detail: str
    code: str


__all__ = [
    "AccountCreate",
    "AccountResponse",
    "AmountRequest",
    "TransferRequest",
    "TransactionModel",
    "OperationResponse",
    "StatementLine",
    "StatementResponse",
    "ErrorResponse",
]
