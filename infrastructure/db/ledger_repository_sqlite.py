from __future__ import annotations

import json
import logging
import sqlite3
from typing import Any, Dict, Optional

from domain.repositories import LedgerRepository


logger = logging.getLogger(__name__)

DEFAULT_LEDGER_KEY = "pokerCalculatorData"


class SqliteLedgerRepository(LedgerRepository):
    """
    SQLite-backed implementation of `LedgerRepository`.

    Owns a small key/value `ledger_state` table and keeps the whole ledger
    as one JSON payload under a fixed key. It is self-initialising: the
    table is created if needed.
    """

    def __init__(self, db_path: str, key: str = DEFAULT_LEDGER_KEY) -> None:
        self._db_path = db_path
        self._key = key
        self._ensure_table()

    def _get_connection(self) -> sqlite3.Connection:
        return sqlite3.connect(self._db_path)

    def _ensure_table(self) -> None:
        with self._get_connection() as conn:
            cur = conn.cursor()
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS ledger_state (
                    key TEXT PRIMARY KEY,
                    payload TEXT NOT NULL
                )
                """
            )
            conn.commit()

    def load_snapshot(self) -> Optional[Dict[str, Any]]:
        try:
            with self._get_connection() as conn:
                cur = conn.cursor()
                cur.execute("SELECT payload FROM ledger_state WHERE key = ?", (self._key,))
                row = cur.fetchone()
        except sqlite3.Error:
            logger.warning("Could not load ledger state from %s", self._db_path, exc_info=True)
            return None

        if not row:
            return None

        try:
            record = json.loads(row[0])
        except (TypeError, ValueError):
            logger.warning("Ignoring corrupt ledger state under key %r", self._key)
            return None

        if not isinstance(record, dict):
            logger.warning("Ignoring ledger state under key %r: not an object", self._key)
            return None
        return record

    def save_snapshot(self, record: Dict[str, Any]) -> None:
        try:
            payload = json.dumps(record, ensure_ascii=False, allow_nan=False)
            with self._get_connection() as conn:
                cur = conn.cursor()
                cur.execute(
                    """
                    INSERT OR REPLACE INTO ledger_state (key, payload)
                    VALUES (?, ?)
                    """,
                    (self._key, payload),
                )
                conn.commit()
        except (sqlite3.Error, TypeError, ValueError):
            logger.warning("Could not save ledger state to %s", self._db_path, exc_info=True)
