from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from bankledger.accounting import Account, LedgerEngine, TransactionKind
from bankledger.errors import (
    BalanceOverflowError,
    InsufficientFundsError,
    InvalidAmountError,
    InvalidOwnerError,
    SameAccountTransferError,
)


class StepClock:
    def __init__(self, start: datetime = datetime(2026, 10, 18, 9, 30)) -> None:
        self.current = start

    def __call__(self) -> datetime:
        value = self.current
        self.current += timedelta(minutes=1)
        return value


class ReplayClock:
    def __init__(self, *values: datetime) -> None:
        self._values = list(values)

    def __call__(self) -> datetime:
        return self._values.pop(0)


class FailingHistory(list):
    def append(self, item) -> None:
        raise RuntimeError("history store unavailable")


@pytest.fixture()
def clock() -> StepClock:
    return StepClock()


@pytest.fixture()
def anna() -> Account:
    return Account(owner="Anna", id="ACC0001")


@pytest.fixture()
def boris() -> Account:
    return Account(owner="Boris", id="ACC0002")


def test_new_account_starts_empty() -> None:
    account = Account(owner="  Anna ")
    assert account.owner == "Anna"
    assert account.id is None
    assert account.balance == Decimal("0")
    assert account.history == []


@pytest.mark.parametrize("owner", ["", "   "])
def test_account_requires_owner(owner: str) -> None:
    with pytest.raises(InvalidOwnerError):
        Account(owner=owner)


def test_deposit_increases_balance_and_records_history(anna: Account, clock: StepClock) -> None:
    record = LedgerEngine(anna, clock=clock).deposit(1000)
    assert anna.balance == Decimal("1000.00")
    assert anna.history == [record]
    assert record.kind == TransactionKind.DEPOSIT
    assert record.amount == Decimal("1000.00")
    assert record.counterparty is None
    assert record.timestamp == datetime(2026, 10, 18, 9, 30)


@pytest.mark.parametrize(
    "amount", [0, -1, Decimal("-0.01"), -0.01, "0.001", "abc", "NaN", "Infinity", True]
)
def test_deposit_rejects_non_positive_amounts(anna: Account, amount) -> None:
    engine = LedgerEngine(anna)
    with pytest.raises(InvalidAmountError):
        engine.deposit(amount)
    assert anna.balance == Decimal("0")
    assert anna.history == []


def test_float_deposits_do_not_accumulate_error(anna: Account) -> None:
    engine = LedgerEngine(anna)
    for _ in range(3):
        engine.deposit(0.1)
    assert engine.balance() == Decimal("0.30")


def test_withdraw_reduces_balance(anna: Account, clock: StepClock) -> None:
    engine = LedgerEngine(anna, clock=clock)
    engine.deposit("250.50")
    record = engine.withdraw("50.25")
    assert anna.balance == Decimal("200.25")
    assert record.kind == TransactionKind.WITHDRAW
    assert [r.kind for r in anna.history] == [TransactionKind.DEPOSIT, TransactionKind.WITHDRAW]


def test_withdraw_whole_balance_reaches_zero(anna: Account) -> None:
    engine = LedgerEngine(anna)
    engine.deposit(40)
    engine.withdraw(40)
    assert anna.balance == Decimal("0.00")


def test_withdraw_more_than_balance_changes_nothing(anna: Account) -> None:
    engine = LedgerEngine(anna)
    engine.deposit(100)
    with pytest.raises(InsufficientFundsError):
        engine.withdraw("100.01")
    assert anna.balance == Decimal("100.00")
    assert len(anna.history) == 1


def test_withdraw_checks_amount_before_funds(anna: Account) -> None:
    with pytest.raises(InvalidAmountError):
        LedgerEngine(anna).withdraw(-5)


def test_transfer_moves_money_and_links_records(
    anna: Account, boris: Account, clock: StepClock
) -> None:
    engine = LedgerEngine(anna, clock=clock)
    engine.deposit(1000)
    total_before = anna.balance + boris.balance

    outgoing, incoming = engine.transfer(boris, 500)

    assert anna.balance == Decimal("500.00")
    assert boris.balance == Decimal("500.00")
    assert anna.balance + boris.balance == total_before
    assert anna.history[-1] is outgoing
    assert boris.history == [incoming]
    assert outgoing.kind == TransactionKind.TRANSFER_OUT
    assert outgoing.counterparty == "ACC0002"
    assert incoming.kind == TransactionKind.TRANSFER_IN
    assert incoming.counterparty == "ACC0001"
    assert outgoing.timestamp == incoming.timestamp
    assert outgoing.amount == incoming.amount == Decimal("500.00")


def test_transfer_to_same_account_is_rejected_first(anna: Account) -> None:
    engine = LedgerEngine(anna)
    engine.deposit(100)
    with pytest.raises(SameAccountTransferError):
        engine.transfer(anna, 10)
    with pytest.raises(SameAccountTransferError):
        engine.transfer(anna, -10)
    twin = Account(owner="Anna again", id="ACC0001")
    with pytest.raises(SameAccountTransferError):
        engine.transfer(twin, 10)
    assert anna.balance == Decimal("100.00")
    assert len(anna.history) == 1
    assert twin.history == []


def test_transfer_checks_amount_before_funds(anna: Account, boris: Account) -> None:
    with pytest.raises(InvalidAmountError):
        LedgerEngine(anna).transfer(boris, 0)


def test_transfer_with_insufficient_funds_changes_nothing(anna: Account, boris: Account) -> None:
    engine = LedgerEngine(anna)
    engine.deposit(10)
    with pytest.raises(InsufficientFundsError):
        engine.transfer(boris, 11)
    assert anna.balance == Decimal("10.00")
    assert boris.balance == Decimal("0")
    assert len(anna.history) == 1
    assert boris.history == []


def test_transfer_rolls_back_when_commit_fails(anna: Account, boris: Account) -> None:
    engine = LedgerEngine(anna)
    engine.deposit(100)
    boris.history = FailingHistory()

    with pytest.raises(RuntimeError):
        engine.transfer(boris, 40)

    assert anna.balance == Decimal("100.00")
    assert len(anna.history) == 1
    assert boris.balance == Decimal("0")
    assert list(boris.history) == []


def test_timestamps_never_go_backwards(anna: Account) -> None:
    later = datetime(2026, 10, 18, 12, 0)
    earlier = datetime(2026, 10, 18, 11, 0)
    engine = LedgerEngine(anna, clock=ReplayClock(later, earlier))
    engine.deposit(1)
    engine.deposit(1)
    assert [r.timestamp for r in anna.history] == [later, later]


def test_transfer_timestamp_respects_both_histories(anna: Account, boris: Account) -> None:
    late = datetime(2026, 10, 18, 18, 0)
    LedgerEngine(boris, clock=ReplayClock(late)).deposit(5)
    clock = ReplayClock(datetime(2026, 10, 18, 9, 0), datetime(2026, 10, 18, 10, 0))
    engine = LedgerEngine(anna, clock=clock)
    engine.deposit(50)
    outgoing, incoming = engine.transfer(boris, 20)
    assert outgoing.timestamp == incoming.timestamp == late


def test_statement_for_empty_account_says_no_operations(anna: Account) -> None:
    text = LedgerEngine(anna).statement()
    assert "(no operations)" in text
    assert "ACC0001" in text and "Anna" in text


def test_anna_and_boris_scenario(clock: StepClock) -> None:
    anna = Account(owner="Anna", id="ACC0001")
    boris = Account(owner="Boris", id="ACC0002")
    anna_engine = LedgerEngine(anna, clock=clock)

    anna_engine.deposit(1000)
    assert anna_engine.balance() == Decimal("1000")
    assert len(anna.history) == 1

    anna_engine.transfer(boris, 500)
    assert anna.balance == Decimal("500")
    assert boris.balance == Decimal("500")
    assert [(r.kind, r.amount, r.counterparty) for r in anna.history] == [
        (TransactionKind.DEPOSIT, Decimal("1000"), None),
        (TransactionKind.TRANSFER_OUT, Decimal("500"), "ACC0002"),
    ]
    assert [(r.kind, r.amount, r.counterparty) for r in boris.history] == [
        (TransactionKind.TRANSFER_IN, Decimal("500"), "ACC0001"),
    ]

    with pytest.raises(InsufficientFundsError):
        anna_engine.withdraw(600)
    assert anna.balance == Decimal("500")


@pytest.mark.parametrize("owner", [123, None, b"Anna"])
def test_account_owner_must_be_text(owner) -> None:
    with pytest.raises(InvalidOwnerError):
        Account(owner=owner)


def test_snapshot_is_detached_from_the_account(anna: Account) -> None:
    LedgerEngine(anna).deposit(10)
    copy = anna.snapshot()
    LedgerEngine(anna).deposit(5)
    assert (copy.id, copy.owner, copy.balance) == ("ACC0001", "Anna", Decimal("10.00"))
    assert len(copy.history) == 1
    assert len(anna.history) == 2


CEILING = Decimal("99999999999999999999999999.99")


def test_transfer_that_would_round_a_balance_changes_nothing() -> None:
    source = Account(owner="Anna", id="ACC0001", balance=CEILING)
    destination = Account(owner="Boris", id="ACC0002", balance=CEILING)

    with pytest.raises(BalanceOverflowError):
        LedgerEngine(source).transfer(destination, "0.03")

    assert source.balance == destination.balance == CEILING
    assert source.history == []
    assert destination.history == []


def test_deposit_that_would_round_the_balance_changes_nothing() -> None:
    account = Account(owner="Anna", id="ACC0001", balance=CEILING)
    with pytest.raises(BalanceOverflowError):
        LedgerEngine(account).deposit("0.01")
    assert account.balance == CEILING
    assert account.history == []


def test_withdraw_near_the_precision_limit_stays_exact() -> None:
    account = Account(owner="Anna", id="ACC0001", balance=CEILING)
    LedgerEngine(account).withdraw("0.03")
    assert account.balance == Decimal("99999999999999999999999999.96")
