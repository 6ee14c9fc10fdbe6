"""
SQLite database integration and simple migration system.

This module provides functions for locating the database file
(``get_database_path``), opening connections (``get_connection``) and
applying migrations when the bucket store is opened (``init_db``).  The
tables created here are the physical representation of the hierarchical
bucket store implemented in ``core.store``:

* ``buckets`` holds one row per named container.  ``parent_id`` points at
  the enclosing bucket; ``0`` denotes the root, so top‑level buckets have
  ``parent_id = 0``.
* ``entries`` holds the key/value pairs stored inside a bucket.

Names, keys and values are stored as BLOBs so that ordering follows the
byte order of the keys.

The migration mechanism stores applied migration versions in the
``migrations`` table and executes new migrations in order.
"""

import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from .config import settings


MIGRATIONS: list[tuple[int, str]] = [
    # Migration 1: bucket tree and entries
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS buckets (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            parent_id INTEGER NOT NULL DEFAULT 0,
            name BLOB NOT NULL,
            UNIQUE(parent_id, name)
        );

        CREATE TABLE IF NOT EXISTS entries (
            bucket_id INTEGER NOT NULL,
            key BLOB NOT NULL,
            value BLOB NOT NULL,
            PRIMARY KEY (bucket_id, key),
            FOREIGN KEY(bucket_id) REFERENCES buckets(id) ON DELETE CASCADE
        );
        """,
    ),
]


def get_database_path(database_url: Optional[str] = None) -> str:
    """Compute the path to the SQLite database file.

    If the configured URL is an absolute path, use it directly.
    Otherwise resolve it relative to the project root.
    """
    db_url = database_url or settings.database_url
    if os.path.isabs(db_url):
        return db_url
    base_dir = Path(__file__).resolve().parent.parent.parent.parent
    return str((base_dir / db_url).resolve())


def get_connection(db_path: str, timeout: float = 5.0) -> sqlite3.Connection:
    """Create and return a new SQLite connection in autocommit mode.

    ``isolation_level=None`` disables the implicit transactions of the
    ``sqlite3`` module; the bucket store issues ``BEGIN`` / ``COMMIT``
    itself.  ``check_same_thread`` is disabled because FastAPI may run
    the dependency that opens a transaction and the handler that uses it
    on different worker threads; a connection is still only used by one
    transaction at a time.
    """
    conn = sqlite3.connect(
        db_path,
        timeout=timeout,
        isolation_level=None,
        check_same_thread=False,
    )
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


@contextmanager
def get_cursor(db_path: str, timeout: float = 5.0) -> Iterator[sqlite3.Cursor]:
    """Yield a cursor inside an immediate transaction and close the connection on exit."""
    conn = get_connection(db_path, timeout)
    try:
        cursor = conn.cursor()
        cursor.execute("BEGIN IMMEDIATE")
        try:
            yield cursor
        except BaseException:
            conn.execute("ROLLBACK")
            raise
        conn.execute("COMMIT")
    finally:
        conn.close()


def init_db(db_path: str, timeout: float = 5.0) -> None:
    """Initialise the database and apply pending migrations.

    Creates the parent directory and the database file if needed,
    switches the journal to WAL so readers get a stable snapshot while a
    writer is active, creates the ``migrations`` table and applies any
    migration in ``MIGRATIONS`` newer than the recorded version.
    """
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    conn = get_connection(db_path, timeout)
    try:
        conn.execute("PRAGMA journal_mode = WAL")
    finally:
        conn.close()

    with get_cursor(db_path, timeout) as cursor:
        cursor.execute(
            "CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)"
        )
        row = cursor.execute("SELECT MAX(version) FROM migrations").fetchone()
        current_version = row[0] if row and row[0] is not None else 0

        for version, sql in MIGRATIONS:
            if version > current_version:
                # ``executescript`` would commit the surrounding transaction,
                # so statements are executed one at a time instead.
                for statement in sql.split(";"):
                    if statement.strip():
                        cursor.execute(statement)
                cursor.execute(
                    "INSERT INTO migrations (version) VALUES (?)", (version,)
                )
                current_version = version
