"""
SQLite-backed search history for WordSmith.

The history is a single JSON-encoded array of words kept in one named slot
of a key-value table, most recent first.

Schema
──────
table: kv
  key   TEXT PRIMARY KEY
  value TEXT NOT NULL  (JSON)
"""

from __future__ import annotations

import json
import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Optional, Union

from core.errors import StorageError

logger = logging.getLogger(__name__)

HISTORY_KEY = "searchHistory"
HISTORY_LIMIT = 5


def record(history: list[str], word: str, limit: int = HISTORY_LIMIT) -> list[str]:
    """Return *history* with *word* moved to the front.

    Earlier occurrences of *word* (exact, case-sensitive match) are dropped
    and the result is truncated to the *limit* most recent entries.

    Examples:
        >>> record(["quick", "strong"], "strong")
        ['strong', 'quick']
    """
    return [word, *(w for w in history if w != word)][:limit]


class SearchHistoryStore:
    """Persists the search history in one slot of a SQLite key-value table.

    Failures never reach the caller: ``load`` falls back to an empty list and
    ``save`` leaves the caller's in-memory history as the last known value.
    """

    def __init__(self, db_path: Union[str, Path], key: str = HISTORY_KEY) -> None:
        self.db_path = Path(db_path)
        self.key = key

    @contextmanager
    def _connect(self):
        """Yield a connected sqlite3.Connection, creating the file/dir if needed."""
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(str(self.db_path))
        except (OSError, sqlite3.Error) as exc:
            raise StorageError(f"Cannot open {self.db_path}: {exc}") from exc
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as exc:
            conn.rollback()
            raise StorageError(str(exc)) from exc
        finally:
            conn.close()

    def init_db(self) -> None:
        """Create the kv table if it doesn't exist yet."""
        try:
            with self._connect() as conn:
                conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS kv (
                        key   TEXT PRIMARY KEY,
                        value TEXT NOT NULL
                    )
                    """
                )
        except StorageError as exc:
            logger.warning("Could not initialise history DB at %s: %s", self.db_path, exc)
            return
        logger.info("History DB initialised at %s", self.db_path)

    def load(self) -> list[str]:
        """Return the stored history, or ``[]`` if it is missing or unreadable."""
        try:
            raw = self._read()
        except StorageError as exc:
            logger.warning("Error reading search history: %s", exc)
            return []

        if raw is None:
            return []

        try:
            words = json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.warning("Discarding corrupt search history %r: %s", raw, exc)
            return []

        if not isinstance(words, list) or not all(isinstance(w, str) for w in words):
            logger.warning("Discarding malformed search history %r", raw)
            return []
        return words

    def save(self, words: list[str]) -> None:
        """Write *words* to the history slot. Errors are logged, not raised."""
        try:
            with self._connect() as conn:
                conn.execute(
                    "INSERT INTO kv (key, value) VALUES (?, ?) "
                    "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                    (self.key, json.dumps(words)),
                )
        except StorageError as exc:
            logger.warning("Error writing search history: %s", exc)
            return
        logger.debug("Saved search history: %r", words)

    def _read(self) -> Optional[str]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT value FROM kv WHERE key = ?", (self.key,)
            ).fetchone()
        return row[0] if row else None
