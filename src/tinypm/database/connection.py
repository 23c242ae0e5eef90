"""SQLite access for the vault file: one lazily opened connection per thread."""

import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path

from .schema import get_init_schema
from ..core.exceptions import StorageError


class DatabaseConnection:
    """Open the vault database, create its schema and run queries.

    Every ``sqlite3.Error`` leaves this class as a ``StorageError``.
    """

    __slots__ = ("db_path", "_local", "_lock", "_initialized")

    def __init__(self, db_path="./vault"):
        self.db_path = Path(db_path)
        self._local = threading.local()
        self._lock = threading.Lock()
        self._initialized = False

    def initialize(self):
        """Create the parent directory and schema; safe to call repeatedly."""
        with self._lock:
            if self._initialized:
                return
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            try:
                conn = self._get_connection()
                for statement in get_init_schema():
                    conn.execute(statement)
            except sqlite3.Error as e:
                raise StorageError(f"Failed to initialize database: {e}")
            self._initialized = True

    def _get_connection(self):
        conn = getattr(self._local, "connection", None)
        if conn is None:
            # Autocommit; multi-statement work goes through TransactionContext.
            conn = sqlite3.connect(str(self.db_path), isolation_level=None)
            conn.row_factory = sqlite3.Row
            self._local.connection = conn
        return conn

    @contextmanager
    def _cursor(self):
        cursor = self._get_connection().cursor()
        try:
            yield cursor
        except sqlite3.Error as e:
            raise StorageError(f"Query failed: {e}")
        finally:
            cursor.close()

    def get_transaction_context(self):
        return TransactionContext(self._get_connection())

    def execute(self, query, params=()):
        """Run one statement; returns ``lastrowid``."""
        with self._cursor() as cursor:
            cursor.execute(query, params)
            return cursor.lastrowid

    def fetch_one(self, query, params=()):
        with self._cursor() as cursor:
            row = cursor.execute(query, params).fetchone()
        return dict(row) if row is not None else None

    def fetch_all(self, query, params=()):
        with self._cursor() as cursor:
            rows = cursor.execute(query, params).fetchall()
        return [dict(row) for row in rows]

    def get_version(self):
        """Schema version, or 0 when the schema is missing."""
        try:
            row = self.fetch_one("SELECT MAX(version) AS version FROM schema_version")
        except StorageError:
            return 0
        return (row or {}).get("version") or 0

    def close(self):
        conn = getattr(self._local, "connection", None)
        if conn is not None:
            conn.close()
            self._local.connection = None
        self._initialized = False


class TransactionContext:
    """BEGIN on enter; COMMIT on success, ROLLBACK on any exception."""

    __slots__ = ("connection", "cursor")

    def __init__(self, connection):
        self.connection = connection
        self.cursor = None

    def __enter__(self):
        self.cursor = self.connection.cursor()
        self.cursor.execute("BEGIN")
        return self.cursor

    def __exit__(self, exc_type, exc_val, exc_tb):
        try:
            self.connection.execute("COMMIT" if exc_type is None else "ROLLBACK")
        finally:
            self.cursor.close()
