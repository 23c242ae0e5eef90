"""SQLite schema definitions for the TinyPM vault."""

SCHEMA_VERSION = 1

CREATE_TABLES = [
    # Records table - password holds envelope text only, never plaintext
    """
    CREATE TABLE IF NOT EXISTS records (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        username TEXT NOT NULL,
        password TEXT NOT NULL,
        website TEXT,
        created_at TEXT DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS schema_version (
        version INTEGER PRIMARY KEY,
        applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
]

CREATE_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_records_name ON records(name)",
]


def get_init_schema():
    """Statements that create the vault schema and stamp its version."""
    stamp = f"INSERT OR IGNORE INTO schema_version (version) VALUES ({SCHEMA_VERSION})"
    return [*CREATE_TABLES, *CREATE_INDEXES, stamp]
