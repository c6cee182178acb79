"""Database management module for the Cashbook ledger.

The ledger is persisted as a small key-value store: each key holds one whole
collection (or one single record) serialized as JSON. There is no partial
update API; callers read a collection, change it, and write it back.
"""
import json
import logging
import sqlite3
import threading
from contextlib import contextmanager

from cashbook.exceptions import StorageError

logger = logging.getLogger(__name__)


class DatabaseManager:
    """Handles all SQLite key-value operations."""

    def __init__(self, db_name="cashbook.db"):
        self.db_name = db_name
        try:
            self.conn = sqlite3.connect(db_name, check_same_thread=False)
        except sqlite3.Error as e:
            raise StorageError(f"Could not open database: {e}", {'db_name': db_name}) from e
        self._closed = False
        # Serializes writers: every mutation is read-modify-write on a whole collection.
        self._lock = threading.RLock()
        self._depth = 0
        self.create_tables()

    def close(self):
        """Close the database connection."""
        if self.conn and not self._closed:
            self.conn.close()
            self._closed = True

    def __del__(self):
        """Ensure connection is closed on garbage collection."""
        if hasattr(self, '_closed'):
            self.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit with proper cleanup."""
        self.close()
        return False

    @contextmanager
    def transaction(self):
        """Context manager grouping several writes into one atomic commit.

        Usage:
            with db.transaction():
                db.save_collection("transactions", [])
                db.save_scalar("next_transaction_id", 0)

        If any exception occurs, every write in the block is rolled back.
        Nested blocks join the outermost one.
        """
        with self._lock:
            self._depth += 1
            try:
                yield
            except sqlite3.Error as e:
                self._depth -= 1
                if self._depth == 0:
                    self._rollback()
                logger.error("Transaction failed: %s", e)
                raise StorageError(f"Transaction failed: {e}") from e
            except Exception:
                self._depth -= 1
                if self._depth == 0:
                    self._rollback()
                raise
            else:
                self._depth -= 1
                if self._depth == 0:
                    self._commit()

    def create_tables(self):
        try:
            cursor = self.conn.cursor()
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS kv_store (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
            """)
            self.conn.commit()
        except sqlite3.Error as e:
            logger.error("Could not create tables in %s: %s", self.db_name, e)
            raise StorageError(f"Could not create tables: {e}") from e

    def _rollback(self):
        # A closed connection has nothing left to roll back
        if not self._closed:
            self.conn.rollback()

    def _commit(self):
        try:
            self.conn.commit()
        except sqlite3.Error as e:
            self._rollback()
            logger.error("Commit failed: %s", e)
            raise StorageError(f"Commit failed: {e}") from e

    def _read(self, key):
        try:
            cursor = self.conn.cursor()
            cursor.execute("SELECT value FROM kv_store WHERE key=?", (key,))
            row = cursor.fetchone()
        except sqlite3.Error as e:
            logger.error("Read of %r failed: %s", key, e)
            raise StorageError(f"Could not read '{key}': {e}", {'key': key}) from e
        if row is None:
            return None
        try:
            return json.loads(row[0])
        except ValueError as e:
            logger.error("Stored value for %r is not valid JSON", key)
            raise StorageError(f"Corrupt value stored under '{key}'", {'key': key}) from e

    def _write(self, key, value):
        payload = json.dumps(value)
        with self._lock:
            try:
                cursor = self.conn.cursor()
                cursor.execute("INSERT OR REPLACE INTO kv_store (key, value) VALUES (?, ?)", (key, payload))
            except sqlite3.Error as e:
                if self._depth == 0:
                    self._rollback()
                logger.error("Write of %r failed: %s", key, e)
                raise StorageError(f"Could not write '{key}': {e}", {'key': key}) from e
            if self._depth == 0:
                self._commit()

    # Collection operations
    def load_collection(self, key):
        value = self._read(key)
        if value is None:
            return []
        if not isinstance(value, list):
            raise StorageError(f"Value stored under '{key}' is not a collection", {'key': key})
        return value

    def save_collection(self, key, items):
        self._write(key, list(items))

    # Single-record operations
    def load_scalar(self, key, default=None):
        value = self._read(key)
        return default if value is None else value

    def save_scalar(self, key, value):
        self._write(key, value)

    def delete_keys(self, *keys):
        with self._lock:
            try:
                cursor = self.conn.cursor()
                cursor.executemany("DELETE FROM kv_store WHERE key=?", [(k,) for k in keys])
            except sqlite3.Error as e:
                if self._depth == 0:
                    self._rollback()
                logger.error("Delete of %s failed: %s", keys, e)
                raise StorageError(f"Could not delete keys: {e}", {'keys': list(keys)}) from e
            if self._depth == 0:
                self._commit()
