"""
Storage Layer
Durable session record.
"""

from .sqlite import (
    AccountStore,
    SQLiteAccountStore,
    InMemoryAccountStore,
    get_store,
    ACCOUNTS_KEY,
    ACTIVE_ID_KEY,
    ACTIVE_TOKEN_KEY,
)

__all__ = [
    "AccountStore",
    "SQLiteAccountStore",
    "InMemoryAccountStore",
    "get_store",
    "ACCOUNTS_KEY",
    "ACTIVE_ID_KEY",
    "ACTIVE_TOKEN_KEY",
]
