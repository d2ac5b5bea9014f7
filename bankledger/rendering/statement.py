"""Text and dict rendering of account statements."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, List

from jinja2 import Environment, FileSystemLoader, select_autoescape

from bankledger.config import LedgerSettings, get_settings
from bankledger.money import format_amount

if TYPE_CHECKING:
    from bankledger.accounting.models import Account, Transaction

LOGGER = logging.getLogger(__name__)

STATEMENT_TEMPLATE = "statement.txt.j2"

_DESCRIPTIONS = {
    "deposit": "Deposit: +{amount}",
    "withdraw": "Withdrawal: -{amount}",
    "transfer_out": "Transfer to account {counterparty}: -{amount}",
    "transfer_in": "Transfer from account {counterparty}: +{amount}",
}


def _build_environment(settings: LedgerSettings) -> Environment:
    loader = FileSystemLoader(str(settings.template_dir))
    return Environment(
        loader=loader,
        autoescape=select_autoescape(["html", "xml"]),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


def _kind_name(kind: Any) -> str:
    return str(getattr(kind, "value", kind))


def _format_timestamp(value: Any, fmt: str) -> str:
    if isinstance(value, datetime):
        try:
            return value.strftime(fmt)
        except ValueError:
            pass
    return str(value)


def describe_transaction(record: Transaction, places: int = 2) -> str:
    """Return the one-line description of ``record``; unknown kinds get a placeholder."""
    kind = _kind_name(getattr(record, "kind", None))
    template = _DESCRIPTIONS.get(kind)
    if template is None:
        LOGGER.debug("Rendering unrecognised transaction kind %r", kind)
        return f"Unknown operation ({kind})"
    return template.format(
        amount=format_amount(getattr(record, "amount", None), places),
        counterparty=getattr(record, "counterparty", None) or "?",
    )


def _history_lines(account: Account, settings: LedgerSettings) -> List[Dict[str, Any]]:
    lines: List[Dict[str, Any]] = []
    for position, record in enumerate(account.history, start=1):
        lines.append(
            {
                "position": position,
                "timestamp": _format_timestamp(
                    getattr(record, "timestamp", None), settings.timestamp_format
                ),
                "description": describe_transaction(record, settings.amount_places),
            }
        )
    return lines


def render_statement(account: Account, settings: LedgerSettings | None = None) -> str:
    settings = settings or get_settings()
    env = _build_environment(settings)
    template = env.get_template(STATEMENT_TEMPLATE)
    return template.render(
        account_id=account.id,
        owner=account.owner,
        balance=format_amount(account.balance, settings.amount_places),
        lines=_history_lines(account, settings),
    )


def statement_to_dict(account: Account, settings: LedgerSettings | None = None) -> Dict[str, Any]:
    settings = settings or get_settings()
    places = settings.amount_places
    return {
        "account_id": account.id,
        "owner": account.owner,
        "currency": settings.currency,
        "balance": format_amount(account.balance, places),
        "history": [
            {
                "position": position,
                "kind": _kind_name(getattr(record, "kind", None)),
                "amount": format_amount(getattr(record, "amount", None), places),
                "timestamp": (
                    record.timestamp.isoformat()
                    if isinstance(getattr(record, "timestamp", None), datetime)
                    else str(getattr(record, "timestamp", None))
                ),
                "counterparty": getattr(record, "counterparty", None),
                "description": describe_transaction(record, places),
            }
            for position, record in enumerate(account.history, start=1)
        ],
    }


__all__ = ["describe_transaction", "render_statement", "statement_to_dict"]
