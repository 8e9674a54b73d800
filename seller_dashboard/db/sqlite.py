"""
Account Store
Durable key-value record of known accounts and the active one.

Keys:
    accounts            JSON list of serialized accounts
    active_account_id   id of the active account
    active_token        copy of the active account's token for the API client

Responsibilities:
- Read and write the three keys
- Recover from an unreadable record by purging it

NOT responsible for:
- Deciding who is logged in (SessionManager owns that)
- Locking (last writer wins, one process per store)
"""

import json
import logging
import sqlite3
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from ..errors import StorageCorruption
from ..models import Account

logger = logging.getLogger(__name__)

ACCOUNTS_KEY = "accounts"
ACTIVE_ID_KEY = "active_account_id"
ACTIVE_TOKEN_KEY = "active_token"

ALL_KEYS = (ACCOUNTS_KEY, ACTIVE_ID_KEY, ACTIVE_TOKEN_KEY)


class AccountStore:
    """
    Shared load/save logic over a raw key-value backend.

    Subclasses provide `_get`, `_set` and `_delete`.
    """

    def _get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def _set(self, key: str, value: str) -> None:
        raise NotImplementedError

    def _delete(self, *keys: str) -> None:
        raise NotImplementedError

    # =========================================================================
    # Read Operations
    # =========================================================================

    def load(self) -> Tuple[List[Account], Optional[str]]:
        """Read accounts and the active id. Never raises on bad data."""
        try:
            accounts, active_id = self._read()
        except StorageCorruption as e:
            logger.warning("Discarding unreadable session record: %s", e)
            self.clear_all()
            return [], None

        if not accounts and (active_id or self.get_token()):
            # No saved accounts means nobody can be active
            logger.info("Clearing active slot with no saved accounts")
            self.clear_active()
            return [], None
        return accounts, active_id

    def _read(self) -> Tuple[List[Account], Optional[str]]:
        raw = self._get(ACCOUNTS_KEY)
        if raw is None:
            return [], self._get(ACTIVE_ID_KEY)

        try:
            payload = json.loads(raw)
            if not isinstance(payload, list):
                raise TypeError(f"expected a list, got {type(payload).__name__}")
            accounts = [Account.from_dict(item) for item in payload]
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise StorageCorruption(str(e)) from e

        return accounts, self._get(ACTIVE_ID_KEY)

    def get_token(self) -> Optional[str]:
        """Fast-access token for outbound requests"""
        return self._get(ACTIVE_TOKEN_KEY)

    def get_active_id(self) -> Optional[str]:
        return self._get(ACTIVE_ID_KEY)

    # =========================================================================
    # Write Operations
    # =========================================================================

    def save(self, accounts: List[Account]) -> None:
        self._set(ACCOUNTS_KEY, json.dumps([a.to_dict() for a in accounts]))

    def set_active(self, account_id: str, token: str) -> None:
        self._set(ACTIVE_ID_KEY, account_id)
        self._set(ACTIVE_TOKEN_KEY, token)

    def clear_active(self) -> None:
        self._delete(ACTIVE_ID_KEY, ACTIVE_TOKEN_KEY)

    def clear_all(self) -> None:
        self._delete(*ALL_KEYS)


class SQLiteAccountStore(AccountStore):
    """
    SQLite-backed account store.

    Tables:
        - kv: one row per key
    """

    def __init__(self, db_path: str = "data/session.db"):
        self.db_path = db_path
        self._ensure_directory()
        self._init_schema()

    def _ensure_directory(self):
        """Create data directory"""
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

    def _init_schema(self):
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT DEFAULT CURRENT_TIMESTAMP
                )
            """)

    def _get(self, key: str) -> Optional[str]:
        with sqlite3.connect(self.db_path) as conn:
            row = conn.execute("SELECT value FROM kv WHERE key = ?", [key]).fetchone()
        return row[0] if row else None

    def _set(self, key: str, value: str) -> None:
        with sqlite3.connect(self.db_path) as conn:
            conn.execute(
                """INSERT OR REPLACE INTO kv (key, value, updated_at)
                   VALUES (?, ?, CURRENT_TIMESTAMP)""",
                [key, value]
            )

    def _delete(self, *keys: str) -> None:
        with sqlite3.connect(self.db_path) as conn:
            conn.executemany("DELETE FROM kv WHERE key = ?", [(k,) for k in keys])

    def keys(self) -> List[str]:
        with sqlite3.connect(self.db_path) as conn:
            return [row[0] for row in conn.execute("SELECT key FROM kv ORDER BY key")]


class InMemoryAccountStore(AccountStore):
    """Dict-backed store for tests and throwaway sessions"""

    def __init__(self, data: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(data or {})

    def _get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def _set(self, key: str, value: str) -> None:
        self.data[key] = value

    def _delete(self, *keys: str) -> None:
        for key in keys:
            self.data.pop(key, None)

    def keys(self) -> List[str]:
        return sorted(self.data)


# =============================================================================
# Singleton
# =============================================================================

_store: Optional[SQLiteAccountStore] = None


def get_store(db_path: Optional[str] = None) -> SQLiteAccountStore:
    """Get singleton store instance"""
    global _store
    if _store is None:
        from ..config import settings
        _store = SQLiteAccountStore(db_path or settings.STORAGE_PATH)
    return _store
