"""Ledger engine enforcing balance invariants on a single bound account."""
from __future__ import annotations

import logging
from contextlib import ExitStack, contextmanager
from datetime import datetime
from decimal import Decimal
from typing import Callable, Iterator, Optional, Tuple

from bankledger.accounting.models import Account, Transaction, TransactionKind
from bankledger.config import LedgerSettings
from bankledger.errors import (
    BalanceOverflowError,
    InsufficientFundsError,
    SameAccountTransferError,
)
from bankledger.money import AmountLike, add_exact, positive_amount
from bankledger.rendering.statement import render_statement

LOGGER = logging.getLogger(__name__)

Clock = Callable[[], datetime]


@contextmanager
def hold_accounts(*accounts: Account) -> Iterator[None]:
    """Lock every given account, always in ascending id order."""
    unique = {id(account): account for account in accounts}.values()
    ordered = sorted(unique, key=lambda account: (account.id or "", id(account)))
    with ExitStack() as stack:
        for account in ordered:
            stack.enter_context(account.lock)
        yield


class LedgerEngine:
    """Deposit, withdraw and transfer against one account.

    The engine borrows ``account`` from the caller and keeps no state of its
    own, so it is cheap to build one per operation.
    """

    def __init__(
        self,
        account: Account,
        *,
        clock: Optional[Clock] = None,
        places: int = 2,
    ) -> None:
        self._account = account
        self._clock = clock or datetime.now
        self._places = places

    @property
    def account(self) -> Account:
        return self._account

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------
    def deposit(self, amount: AmountLike) -> Transaction:
        account = self._account
        with hold_accounts(account):
            value = self._validate_amount(amount, TransactionKind.DEPOSIT)
            new_balance = self._new_balance(account, value)
            record = Transaction(
                kind=TransactionKind.DEPOSIT,
                amount=value,
                timestamp=self._next_timestamp(account),
            )
            account.history.append(record)
            account.balance = new_balance
        LOGGER.debug("Deposited %s to %s; balance %s", value, account.id, new_balance)
        return record

    def withdraw(self, amount: AmountLike) -> Transaction:
        account = self._account
        with hold_accounts(account):
            value = self._validate_amount(amount, TransactionKind.WITHDRAW)
            self._ensure_funds(value)
            new_balance = self._new_balance(account, -value)
            record = Transaction(
                kind=TransactionKind.WITHDRAW,
                amount=value,
                timestamp=self._next_timestamp(account),
            )
            account.history.append(record)
            account.balance = new_balance
        LOGGER.debug("Withdrew %s from %s; balance %s", value, account.id, new_balance)
        return record

    def transfer(
        self, destination: Account, amount: AmountLike
    ) -> Tuple[Transaction, Transaction]:
        """Move ``amount`` from the bound account to ``destination``.

        Returns the ``transfer_out`` and ``transfer_in`` records. Either both
        balances and both histories change, or none of them do.
        """
        source = self._account
        if destination is source or (
            source.id is not None and destination.id == source.id
        ):
            LOGGER.info("Rejected transfer from %s to itself", source.id)
            raise SameAccountTransferError("Cannot transfer money to the same account")
        with hold_accounts(source, destination):
            value = self._validate_amount(amount, TransactionKind.TRANSFER_OUT)
            self._ensure_funds(value)
            balances = (
                self._new_balance(source, -value),
                self._new_balance(destination, value),
            )
            timestamp = self._next_timestamp(source, destination)
            outgoing = Transaction(
                kind=TransactionKind.TRANSFER_OUT,
                amount=value,
                timestamp=timestamp,
                counterparty=destination.id,
            )
            incoming = Transaction(
                kind=TransactionKind.TRANSFER_IN,
                amount=value,
                timestamp=timestamp,
                counterparty=source.id,
            )
            self._commit_transfer(destination, balances, outgoing, incoming)
        LOGGER.debug(
            "Transferred %s from %s to %s", value, source.id, destination.id
        )
        return outgoing, incoming

    def balance(self) -> Decimal:
        with hold_accounts(self._account):
            return self._account.balance

    def statement(self, settings: Optional[LedgerSettings] = None) -> str:
        with hold_accounts(self._account):
            return render_statement(self._account, settings=settings)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _commit_transfer(
        self,
        destination: Account,
        balances: Tuple[Decimal, Decimal],
        outgoing: Transaction,
        incoming: Transaction,
    ) -> None:
        source = self._account
        snapshot = (
            source.balance,
            len(source.history),
            destination.balance,
            len(destination.history),
        )
        try:
            source.balance, destination.balance = balances
            source.history.append(outgoing)
            destination.history.append(incoming)
        except BaseException:
            LOGGER.exception(
                "Transfer %s -> %s failed mid-commit; rolling back",
                source.id,
                destination.id,
            )
            source.balance = snapshot[0]
            del source.history[snapshot[1]:]
            destination.balance = snapshot[2]
            del destination.history[snapshot[3]:]
            raise

    def _validate_amount(self, amount: AmountLike, kind: TransactionKind) -> Decimal:
        try:
            return positive_amount(amount, self._places)
        except ValueError:
            LOGGER.info("Rejected %s of %r on %s", kind.value, amount, self._account.id)
            raise

    def _new_balance(self, account: Account, delta: Decimal) -> Decimal:
        try:
            return add_exact(account.balance, delta)
        except BalanceOverflowError:
            LOGGER.warning(
                "Rejected change of %s on %s; balance %s", delta, account.id, account.balance
            )
            raise

    def _ensure_funds(self, value: Decimal) -> None:
        account = self._account
        if value > account.balance:
            LOGGER.info(
                "Rejected debit of %s on %s; balance %s", value, account.id, account.balance
            )
            raise InsufficientFundsError(
                f"Insufficient funds: balance {account.balance}, requested {value}"
            )

    def _next_timestamp(self, *accounts: Account) -> datetime:
        now = self._clock()
        for account in accounts:
            last = account.last_timestamp
            try:
                if last is not None and last > now:
                    now = last
            except TypeError:
                continue
        return now


__all__ = ["Clock", "LedgerEngine", "hold_accounts"]
