"""Entities owned by the ledger: accounts and their transaction records."""
from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional, Union

from bankledger.errors import InvalidOwnerError


class TransactionKind(str, Enum):
    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"
    TRANSFER_OUT = "transfer_out"
    TRANSFER_IN = "transfer_in"


@dataclass(frozen=True)
class Transaction:
    """One immutable entry in an account's history."""

    kind: Union[TransactionKind, str]
    amount: Decimal
    timestamp: datetime
    counterparty: Optional[str] = None


@dataclass
class Account:
    """A named balance with an append-only, chronological history.

    ``id`` stays ``None`` until a repository saves the account for the first
    time. Balances and history should only be changed through
    :class:`bankledger.accounting.engine.LedgerEngine`.
    """

    owner: str
    id: Optional[str] = None
    balance: Decimal = field(default_factory=lambda: Decimal("0.00"))
    history: List[Transaction] = field(default_factory=list)
    _lock: threading.RLock = field(
        init=False, repr=False, compare=False, default_factory=threading.RLock
    )

    def __post_init__(self) -> None:
        if not isinstance(self.owner, str):
            raise InvalidOwnerError(
                f"Owner name must be a string, got {type(self.owner).__name__}"
            )
        owner = self.owner.strip()
        if not owner:
            raise InvalidOwnerError("Owner name must not be empty")
        self.owner = owner

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    def snapshot(self) -> "Account":
        """Return a detached copy taken while holding the account lock."""
        with self._lock:
            return Account(
                owner=self.owner,
                id=self.id,
                balance=self.balance,
                history=list(self.history),
            )

    @property
    def last_timestamp(self) -> Optional[datetime]:
        if not self.history:
            return None
        return self.history[-1].timestamp


__all__ = ["TransactionKind", "Transaction", "Account"]
