"""
SQLite database integration and simple migration system.

This module provides functions for resolving the database file
(``get_database_path``), opening a connection (``get_connection``) and
applying migrations on application start (``init_db``).  The catalog
collections (``programs``, ``appointments`` and ``faqs``) are stored
as one JSON document per row so the store behaves like a document
database; ``users`` is an ordinary table because the identity
provider needs unique e‑mail lookups.

The migration mechanism stores applied migration versions in the
``migrations`` table and executes new migrations in order.
"""

import os
import sqlite3
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

# Collections that hold JSON documents.  Table names are interpolated
# into SQL, so only names listed here are accepted by the store.
COLLECTIONS = ("programs", "appointments", "faqs")

MEMORY_DATABASE = ":memory:"


def is_memory_database(db_path: str) -> bool:
    return db_path.startswith("file:") and "mode=memory" in db_path


def get_database_path(database_url: str) -> str:
    """Compute the path to the SQLite database file.

    Absolute paths are used as is and relative paths are resolved
    against the project root.  ``:memory:`` becomes a uniquely named
    shared‑cache URI, so every connection opened for one application
    sees the same in‑memory database while two applications never do.
    The database lives only while a connection to it stays open; see
    ``open_anchor``.
    """
    if database_url == MEMORY_DATABASE:
        return f"file:community_sport_{uuid.uuid4().hex}?mode=memory&cache=shared"
    if os.path.isabs(database_url):
        return database_url
    base_dir = Path(__file__).resolve().parent.parent.parent.parent
    return str((base_dir / database_url).resolve())


def get_connection(db_path: str) -> sqlite3.Connection:
    """Create and return a new SQLite connection.

    Rows are returned as ``sqlite3.Row`` so columns can be accessed by
    name.  Timestamps are stored as ISO strings and never converted by
    SQLite.
    """
    conn = sqlite3.connect(db_path, uri=db_path.startswith("file:"))
    conn.row_factory = sqlite3.Row
    return conn


def open_anchor(db_path: str) -> sqlite3.Connection | None:
    """Keep an in‑memory database alive; ``None`` for file databases."""
    if not is_memory_database(db_path):
        return None
    return get_connection(db_path)


@contextmanager
def get_cursor(db_path: str) -> Iterator[sqlite3.Cursor]:
    """Context manager that yields a cursor and closes the connection on exit."""
    conn = get_connection(db_path)
    try:
        yield conn.cursor()
        conn.commit()
    finally:
        conn.close()


def _document_table(name: str) -> str:
    return f"""
            CREATE TABLE IF NOT EXISTS {name} (
                id TEXT PRIMARY KEY,
                data TEXT NOT NULL,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            );
            """


def init_db(db_path: str) -> None:
    """Initialise the database and apply pending migrations.

    Creates the ``migrations`` table if it does not exist, checks the
    current schema version, and applies any new migrations.  To add a
    migration, append it with an incremented version number.
    """
    migrations: list[tuple[int, str]] = [
        # Migration 1: catalog collections and users
        (
            1,
            "".join(_document_table(name) for name in COLLECTIONS)
            + """
            CREATE TABLE IF NOT EXISTS users (
                uid TEXT PRIMARY KEY,
                email TEXT NOT NULL UNIQUE COLLATE NOCASE,
                password TEXT NOT NULL,
                role TEXT,
                disabled INTEGER NOT NULL DEFAULT 0,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            );
            """,
        ),
        # Migration 2: expression indices for the field queries used by the services
        (
            2,
            """
            CREATE INDEX IF NOT EXISTS idx_appointments_user_email
                ON appointments (json_extract(data, '$.user_email'));
            CREATE INDEX IF NOT EXISTS idx_programs_organizer_email
                ON programs (json_extract(data, '$.organizer_email'));
            """,
        ),
    ]

    with get_cursor(db_path) as cursor:
        cursor.execute(
            "CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)"
        )
        cursor.execute("SELECT MAX(version) as version FROM migrations")
        row = cursor.fetchone()
        current_version = row["version"] if row and row["version"] is not None else 0

        for version, sql in migrations:
            if version > current_version:
                cursor.executescript(sql)
                cursor.execute(
                    "INSERT INTO migrations (version) VALUES (?)", (version,)
                )
                current_version = version
