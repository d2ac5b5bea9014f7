"""Core ledger domain logic: entities, money handling and the engine."""

from .engine import LedgerEngine, hold_accounts
from .models import Account, Transaction, TransactionKind

__all__ = [
    "LedgerEngine",
    "hold_accounts",
    "Account",
    "Transaction",
    "TransactionKind",
]
