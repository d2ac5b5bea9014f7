"""Exceptions raised by the ledger engine, repository and service."""
from __future__ import annotations


class LedgerError(Exception):
    """Base exception for all ledger-related errors."""

    code = "ledger_error"


class InvalidAmountError(LedgerError, ValueError):
    """Raised when an amount is not a positive number."""

    code = "invalid_amount"


class InsufficientFundsError(LedgerError, ValueError):
    """Raised when a withdrawal or transfer exceeds the current balance."""

    code = "insufficient_funds"


class SameAccountTransferError(LedgerError, ValueError):
    """Raised when a transfer names the same account on both sides."""

    code = "same_account_transfer"


class InvalidOwnerError(LedgerError, ValueError):
    """Raised when an account is opened without an owner name."""

    code = "invalid_owner"


class BalanceOverflowError(LedgerError, ArithmeticError):
    """Raised when a new balance cannot be represented without rounding."""

    code = "balance_overflow"


class AccountNotFoundError(LedgerError, LookupError):
    """Raised when a repository lookup has no matching account."""

    code = "account_not_found"

    def __init__(self, account_id: str) -> None:
        super().__init__(f"Account '{account_id}' not found")
        self.account_id = account_id


class PersistenceError(LedgerError, RuntimeError):
    """Raised by durable repository backends when storage I/O fails."""

    code = "persistence_error"


__all__ = [
    "LedgerError",
    "InvalidAmountError",
    "InsufficientFundsError",
    "SameAccountTransferError",
    "InvalidOwnerError",
    "BalanceOverflowError",
    "AccountNotFoundError",
    "PersistenceError",
]
