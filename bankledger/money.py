"""Exact decimal handling for monetary amounts."""
from __future__ import annotations

from decimal import (
    ROUND_HALF_UP,
    Decimal,
    Inexact,
    InvalidOperation,
    Rounded,
    localcontext,
)
from typing import Union

from bankledger.errors import BalanceOverflowError, InvalidAmountError

AmountLike = Union[Decimal, int, float, str]

ZERO = Decimal("0")


def quantum(places: int) -> Decimal:
    return Decimal(1).scaleb(-places)


def to_decimal(value: AmountLike, places: int = 2) -> Decimal:
    """Convert ``value`` to a ``Decimal`` rounded to ``places`` digits.

    Floats go through ``str`` first so ``0.1`` becomes ``Decimal("0.1")``
    rather than its binary expansion.
    """
    if isinstance(value, bool):
        raise InvalidAmountError(f"Amount must be a number, got {value!r}")
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value).strip())
        except (InvalidOperation, ValueError) as exc:
            raise InvalidAmountError(f"Amount must be a number, got {value!r}") from exc
    if not amount.is_finite():
        raise InvalidAmountError(f"Amount must be finite, got {value!r}")
    try:
        return amount.quantize(quantum(places), rounding=ROUND_HALF_UP)
    except InvalidOperation as exc:
        raise InvalidAmountError(f"Amount is out of range: {value!r}") from exc


def positive_amount(value: AmountLike, places: int = 2) -> Decimal:
    """Normalise ``value`` and reject anything that is not strictly positive."""
    amount = to_decimal(value, places)
    if amount <= ZERO:
        raise InvalidAmountError(f"Amount must be positive, got {value}")
    return amount


def add_exact(left: Decimal, right: Decimal) -> Decimal:
    """Add two amounts, refusing any result the decimal context would round."""
    with localcontext() as ctx:
        ctx.traps[Inexact] = ctx.traps[Rounded] = True
        try:
            return left + right
        except (Inexact, Rounded) as exc:
            raise BalanceOverflowError(
                f"Balance {left} cannot absorb {right} without losing precision"
            ) from exc


def format_amount(value: object, places: int = 2) -> str:
    """Render an amount with a fixed number of places; never raises."""
    try:
        return f"{to_decimal(value, places):.{places}f}"  # type: ignore[arg-type]
    except (InvalidAmountError, TypeError, ValueError):
        return str(value)


__all__ = [
    "AmountLike",
    "ZERO",
    "quantum",
    "to_decimal",
    "positive_amount",
    "add_exact",
    "format_amount",
]
