"""
SQLite store adapter.

Each delete runs in its own transaction with foreign key enforcement on,
so a constraint violation rolls back that entity alone.
"""

import logging
import sqlite3
import threading
from pathlib import Path

from scoped_purge.engine.predicates import DeletePredicate
from scoped_purge.stores.base import StoreError

logger = logging.getLogger(__name__)


class SQLiteStore:
    """Deletes rows from a SQLite database file."""

    kind = "sqlite"

    def __init__(self, db_path: Path | str, timeout_seconds: float = 30.0):
        """
        Initialize the store.

        Args:
            db_path: Database file path, or ":memory:"
            timeout_seconds: How long to wait on a locked database
        """
        self._db_path = str(db_path)
        if self._db_path != ":memory:":
            Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(
            self._db_path,
            timeout=timeout_seconds,
            check_same_thread=False,
            isolation_level=None,
        )
        self._conn.execute("PRAGMA foreign_keys = ON")
        self._lock = threading.Lock()

    @property
    def connection(self) -> sqlite3.Connection:
        """Underlying connection, for seeding and inspection."""
        return self._conn

    def delete(self, entity_name: str, predicate: DeletePredicate) -> int:
        """Run ``DELETE FROM entity WHERE predicate`` in one transaction."""
        condition, params = predicate.to_sql()
        sql = f'DELETE FROM "{entity_name}" WHERE {condition}'

        with self._lock:
            try:
                self._conn.execute("BEGIN")
                cursor = self._conn.execute(sql, params)
                self._conn.execute("COMMIT")
            except sqlite3.Error as e:
                if self._conn.in_transaction:
                    self._conn.execute("ROLLBACK")
                raise StoreError(str(e), entity_name=entity_name) from e

        logger.debug(f"Deleted {cursor.rowcount} rows from {entity_name}")
        return cursor.rowcount

    def close(self) -> None:
        """Close the database connection."""
        with self._lock:
            self._conn.close()
