"""ORM-style helpers for database operations."""

import sqlite3

from .connection import DatabaseConnection
from ..core.exceptions import RecordNotFoundError, StorageError


class BaseModel:
    """Base class for DB models."""

    __slots__ = ("db",)

    def __init__(self, db: DatabaseConnection):
        """Initialize with a DatabaseConnection."""
        self.db = db


class RecordModel(BaseModel):
    """DB model for credential records. Only ever sees envelope text."""

    def fetch_all(self):
        """List all records ordered by name."""
        return self.db.fetch_all("SELECT * FROM records ORDER BY name")

    def get(self, record_id):
        """Get record by id."""
        return self.db.fetch_one("SELECT * FROM records WHERE id = ?", (record_id,))

    def insert(self, name, username, website, password):
        """Insert a record and return its id."""
        query = """
            INSERT INTO records (name, username, website, password)
            VALUES (?, ?, ?, ?)
        """
        return self.db.execute(query, (name, username, website or "", password))

    def insert_many(self, rows):
        """Insert (name, username, website, password) tuples in one transaction."""
        query = """
            INSERT INTO records (name, username, website, password)
            VALUES (?, ?, ?, ?)
        """
        params = [(n, u, w or "", p) for n, u, w, p in rows]
        try:
            with self.db.get_transaction_context() as cursor:
                cursor.executemany(query, params)
        except sqlite3.Error as e:
            raise StorageError(f"Bulk insert failed: {e}")
        return len(params)

    def update_password(self, record_id, password):
        """Replace a record's envelope wholesale."""
        if self.get(record_id) is None:
            raise RecordNotFoundError(f"Record {record_id} not found")
        self.db.execute("UPDATE records SET password = ? WHERE id = ?", (password, record_id))
        return True

    def delete(self, record_id):
        """Delete record by id."""
        self.db.execute("DELETE FROM records WHERE id = ?", (record_id,))
        return True

    def count(self):
        row = self.db.fetch_one("SELECT COUNT(*) AS n FROM records")
        return row["n"] if row else 0
