"""Account storage backends."""

from .repository import (
    AccountRepository,
    IdFormat,
    InMemoryAccountRepository,
    sequential_id_format,
)

__all__ = [
    "AccountRepository",
    "IdFormat",
    "InMemoryAccountRepository",
    "sequential_id_format",
]
