"""In-memory account ledger with deposits, withdrawals and transfers."""

__version__ = "0.1.0"
