"""Interactive console front end for the ledger."""
from __future__ import annotations

import argparse
import json
import logging
from decimal import Decimal
from pathlib import Path
from typing import Callable, Optional

from bankledger.config import LedgerSettings, get_settings
from bankledger.errors import AccountNotFoundError, InvalidAmountError, LedgerError
from bankledger.money import format_amount, to_decimal
from bankledger.service import LedgerService

LOGGER = logging.getLogger(__name__)

InputFn = Callable[[str], str]
OutputFn = Callable[[str], None]

MAIN_MENU = (
    "\n=== Main menu ===",
    "1. Create account",
    "2. Select existing account",
    "3. List all accounts",
    "0. Exit",
)

ACCOUNT_MENU = (
    "1. Deposit",
    "2. Withdraw",
    "3. Transfer to another account",
    "4. Show balance",
    "5. Print statement",
    "6. Leave account",
    "0. Exit",
)

EXIT_CHOICES = {"0", "exit"}


class _SessionClosed(Exception):
    """Input ran out while the session was waiting for the user."""


class ConsoleSession:
    """Menu loop driving a :class:`LedgerService` from line-based input."""

    def __init__(
        self,
        service: LedgerService,
        *,
        input_fn: Optional[InputFn] = None,
        output: Optional[OutputFn] = None,
        statement_json: bool = False,
    ) -> None:
        self._service = service
        self._input = input_fn or input
        self._output = output or print
        self._statement_json = statement_json
        self._places = service.settings.amount_places
        self.current_account_id: Optional[str] = None

    def run(self) -> None:
        self._output(f"Welcome to {self._service.settings.app_name}!")
        self._output("Type 'exit' in any menu to quit.")
        try:
            while True:
                if self.current_account_id is None:
                    keep_going = self._main_menu()
                else:
                    keep_going = self._account_menu(self.current_account_id)
                if not keep_going:
                    return
        except _SessionClosed:
            LOGGER.debug("Input closed; ending session")

    # ------------------------------------------------------------------
    # Menus
    # ------------------------------------------------------------------
    def _main_menu(self) -> bool:
        for line in MAIN_MENU:
            self._output(line)
        choice = self._read("Choose an action: ").lower()
        if choice == "1":
            self._create_account()
        elif choice == "2":
            self._select_account()
        elif choice == "3":
            self._list_accounts()
        elif choice in EXIT_CHOICES:
            self._output("Thank you for using the ledger. Goodbye!")
            return False
        else:
            self._output("Invalid choice. Try again.")
        return True

    def _account_menu(self, account_id: str) -> bool:
        account = self._service.get_account(account_id)
        self._output(f"\n=== Account {account.id} ({account.owner}) ===")
        for line in ACCOUNT_MENU:
            self._output(line)
        choice = self._read("Choose an action: ").lower()
        if choice == "1":
            self._deposit(account_id)
        elif choice == "2":
            self._withdraw(account_id)
        elif choice == "3":
            self._transfer(account_id)
        elif choice == "4":
            balance = self._service.balance(account_id)
            self._output(f"Current balance: {self._money(balance)}")
        elif choice == "5":
            self._statement(account_id)
        elif choice == "6":
            self._output(f"Signed out of account {account_id}")
            self.current_account_id = None
        elif choice in EXIT_CHOICES:
            self._output("Goodbye!")
            return False
        else:
            self._output("Invalid choice.")
        return True

    # ------------------------------------------------------------------
    # Main menu actions
    # ------------------------------------------------------------------
    def _create_account(self) -> None:
        owner = self._read("Owner name: ")
        if not owner:
            self._output("Name must not be empty.")
            return
        account = self._service.open_account(owner)
        self.current_account_id = account.id
        self._output(f"Account {account.id} created for {account.owner}")

    def _select_account(self) -> None:
        account_id = self._read("Account ID (for example ACC0001): ")
        if not account_id:
            return
        try:
            account = self._service.get_account(account_id)
        except AccountNotFoundError as exc:
            self._output(str(exc))
            return
        self.current_account_id = account.id
        self._output(f"Signed in to account {account.id} ({account.owner})")

    def _list_accounts(self) -> None:
        accounts = self._service.list_snapshots()
        if not accounts:
            self._output("No accounts yet.")
            return
        self._output("\nAll accounts:")
        for account in accounts:
            self._output(
                f"  {account.id} | {account.owner} | Balance: {self._money(account.balance)}"
            )

    # ------------------------------------------------------------------
    # Account menu actions
    # ------------------------------------------------------------------
    def _deposit(self, account_id: str) -> None:
        amount = self._read_amount("Amount to deposit: ")
        if amount is None:
            return
        try:
            record = self._service.deposit(account_id, amount)
        except LedgerError as exc:
            self._output(str(exc))
            return
        balance = self._service.balance(account_id)
        self._output(
            f"Deposited {self._money(record.amount)}. New balance: {self._money(balance)}"
        )

    def _withdraw(self, account_id: str) -> None:
        amount = self._read_amount("Amount to withdraw: ")
        if amount is None:
            return
        try:
            record = self._service.withdraw(account_id, amount)
        except LedgerError as exc:
            self._output(str(exc))
            return
        balance = self._service.balance(account_id)
        self._output(
            f"Withdrew {self._money(record.amount)}. New balance: {self._money(balance)}"
        )

    def _transfer(self, account_id: str) -> None:
        destination_id = self._read("Destination account ID: ")
        if not destination_id:
            return
        try:
            self._service.get_account(destination_id)
        except AccountNotFoundError as exc:
            self._output(str(exc))
            return
        amount = self._read_amount("Amount to transfer: ")
        if amount is None:
            return
        try:
            outgoing, _ = self._service.transfer(account_id, destination_id, amount)
        except LedgerError as exc:
            self._output(str(exc))
            return
        balance = self._service.balance(account_id)
        self._output(
            f"Transferred {self._money(outgoing.amount)} to account {destination_id}. "
            f"New balance: {self._money(balance)}"
        )

    def _statement(self, account_id: str) -> None:
        if self._statement_json:
            payload = self._service.statement_data(account_id)
            self._output(json.dumps(payload, indent=2))
        else:
            self._output(self._service.statement(account_id))

    # ------------------------------------------------------------------
    # Input helpers
    # ------------------------------------------------------------------
    def _read(self, prompt: str) -> str:
        try:
            return self._input(prompt).strip()
        except EOFError as exc:
            raise _SessionClosed() from exc

    def _read_amount(self, prompt: str) -> Optional[Decimal]:
        """Prompt until a number is entered; empty input cancels."""
        while True:
            raw = self._read(prompt)
            if raw == "":
                return None
            try:
                return to_decimal(raw, self._places)
            except InvalidAmountError:
                self._output("Invalid number. Try again.")

    def _money(self, value: Decimal) -> str:
        return format_amount(value, self._places)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Interactive in-memory bank ledger")
    parser.add_argument("--config", type=Path, help="Optional settings override JSON")
    parser.add_argument(
        "--statement-json", action="store_true", help="Print statements as JSON"
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser


def load_settings(config_path: Optional[Path]) -> LedgerSettings:
    settings = get_settings()
    if config_path:
        overrides = json.loads(config_path.read_text(encoding="utf-8"))
        settings = LedgerSettings(**{**settings.model_dump(), **overrides})
    return settings


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = load_settings(args.config)
    logging.basicConfig(level=logging.DEBUG if args.debug else settings.log_level)
    service = LedgerService(settings=settings)
    ConsoleSession(service, statement_json=args.statement_json).run()
    LOGGER.debug("Session finished with %d account(s)", len(service.list_accounts()))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
