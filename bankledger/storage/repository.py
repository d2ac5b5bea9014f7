"""Account repository protocol and the in-memory backend."""
from __future__ import annotations

import logging
import threading
from typing import Callable, Dict, List, Optional, Protocol

from bankledger.accounting.models import Account
from bankledger.errors import AccountNotFoundError

LOGGER = logging.getLogger(__name__)

IdFormat = Callable[[int], str]


class AccountRepository(Protocol):
    """Storage capability the ledger service depends on."""

    def save(self, account: Account) -> Account:
        """Store ``account``, assigning an id on first save."""
        ...

    def load(self, account_id: str) -> Account:
        """Return the account with ``account_id`` or raise ``AccountNotFoundError``."""
        ...

    def list_all(self) -> List[Account]:
        """Return every stored account, in no particular order."""
        ...


def sequential_id_format(prefix: str = "ACC", width: int = 4) -> IdFormat:
    """Build an id strategy producing ``ACC0001``, ``ACC0002``, ..."""

    def _format(number: int) -> str:
        return f"{prefix}{number:0{width}d}"

    return _format


class InMemoryAccountRepository:
    """Dictionary-backed repository; ids come from a per-instance counter."""

    def __init__(self, id_format: Optional[IdFormat] = None) -> None:
        self._id_format = id_format or sequential_id_format()
        self._accounts: Dict[str, Account] = {}
        self._next_id = 1
        self._lock = threading.RLock()

    def save(self, account: Account) -> Account:
        with self._lock:
            if account.id is None:
                account.id = self._allocate_id()
                LOGGER.debug("Assigned id %s to account of %s", account.id, account.owner)
            self._accounts[account.id] = account
        return account

    def load(self, account_id: str) -> Account:
        with self._lock:
            try:
                return self._accounts[account_id]
            except KeyError as exc:
                LOGGER.info("Lookup of unknown account %s", account_id)
                raise AccountNotFoundError(account_id) from exc

    def list_all(self) -> List[Account]:
        with self._lock:
            return list(self._accounts.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._accounts)

    def _allocate_id(self) -> str:
        while True:
            candidate = self._id_format(self._next_id)
            self._next_id += 1
            if candidate not in self._accounts:
                return candidate


__all__ = [
    "AccountRepository",
    "IdFormat",
    "InMemoryAccountRepository",
    "sequential_id_format",
]
