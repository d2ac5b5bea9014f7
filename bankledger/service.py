"""Id-based facade over the engine and repository used by the front ends."""
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from bankledger.accounting.engine import Clock, LedgerEngine, hold_accounts
from bankledger.accounting.models import Account, Transaction
from bankledger.config import LedgerSettings, get_settings
from bankledger.errors import SameAccountTransferError
from bankledger.money import AmountLike
from bankledger.rendering.statement import statement_to_dict
from bankledger.storage.repository import (
    AccountRepository,
    InMemoryAccountRepository,
    sequential_id_format,
)

LOGGER = logging.getLogger(__name__)


class LedgerService:
    """Resolve accounts, run one engine operation, then save what changed."""

    def __init__(
        self,
        repository: Optional[AccountRepository] = None,
        *,
        settings: Optional[LedgerSettings] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository or InMemoryAccountRepository(
            id_format=sequential_id_format(
                self._settings.account_id_prefix, self._settings.account_id_width
            )
        )
        self._clock = clock

    @property
    def repository(self) -> AccountRepository:
        return self._repository

    @property
    def settings(self) -> LedgerSettings:
        return self._settings

    # ------------------------------------------------------------------
    # Account management
    # ------------------------------------------------------------------
    def open_account(self, owner: str) -> Account:
        account = self._repository.save(Account(owner=owner))
        LOGGER.info("Opened account %s for %s", account.id, account.owner)
        return account

    def get_account(self, account_id: str) -> Account:
        return self._repository.load(account_id)

    def list_accounts(self) -> List[Account]:
        return sorted(self._repository.list_all(), key=lambda account: account.id or "")

    def snapshot(self, account_id: str) -> Account:
        """Detached copy of one account, consistent with any running transfer."""
        return self._repository.load(account_id).snapshot()

    def list_snapshots(self) -> List[Account]:
        return [account.snapshot() for account in self.list_accounts()]

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------
    def deposit(self, account_id: str, amount: AmountLike) -> Transaction:
        account = self._repository.load(account_id)
        record = self._engine(account).deposit(amount)
        self._repository.save(account)
        return record

    def withdraw(self, account_id: str, amount: AmountLike) -> Transaction:
        account = self._repository.load(account_id)
        record = self._engine(account).withdraw(amount)
        self._repository.save(account)
        return record

    def transfer(
        self, source_id: str, destination_id: str, amount: AmountLike
    ) -> Tuple[Transaction, Transaction]:
        if source_id == destination_id:
            raise SameAccountTransferError("Cannot transfer money to the same account")
        source = self._repository.load(source_id)
        destination = self._repository.load(destination_id)
        records = self._engine(source).transfer(destination, amount)
        with hold_accounts(source, destination):
            self._repository.save(destination)
            self._repository.save(source)
        LOGGER.info(
            "Transferred %s from %s to %s", records[0].amount, source.id, destination.id
        )
        return records

    def balance(self, account_id: str) -> Decimal:
        return self._engine(self._repository.load(account_id)).balance()

    def statement(self, account_id: str) -> str:
        account = self._repository.load(account_id)
        return self._engine(account).statement(self._settings)

    def statement_data(self, account_id: str) -> Dict[str, Any]:
        account = self._repository.load(account_id)
        with hold_accounts(account):
            return statement_to_dict(account, settings=self._settings)

    def _engine(self, account: Account) -> LedgerEngine:
        return LedgerEngine(
            account, clock=self._clock, places=self._settings.amount_places
        )


__all__ = ["LedgerService"]
