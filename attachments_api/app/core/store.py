"""
Transactional hierarchical key/value store on top of SQLite.

The store exposes nested named containers ("buckets") addressed by
byte‑string paths.  All access happens inside a transaction:

* ``BucketStore.run_read_only(fn)`` runs ``fn(tx)`` against a read
  snapshot.  Any number of read‑only transactions may run at once and
  none of them sees the effects of a write that has not committed.
* ``BucketStore.run_read_write(fn)`` runs ``fn(tx)`` as the only writer.
  Writers are serialised by an in‑process lock and by SQLite's
  ``BEGIN IMMEDIATE``.  Every write of ``fn`` is committed when it
  returns and rolled back when it raises.

``fn`` receives a :class:`Transaction` and works with :class:`Bucket`
handles obtained from it.  A handle is only valid inside the
transaction that produced it.

Example::

    store = BucketStore("/tmp/attachments.db").open()

    def save(tx):
        books = tx.ensure_top_level_bucket("books")
        book = tx.create_nested_bucket_if_absent(books, "b1")
        tx.put(book, "ratings", b"{}")

    store.run_read_write(save)
"""

import logging
import sqlite3
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Tuple, TypeVar, Union

from .db import get_connection, init_db
from .errors import (
    IncompatibleValueError,
    InvalidNameError,
    KeyRequiredError,
    ReadOnlyTransactionError,
    StoreClosedError,
    StoreUnavailableError,
    TransactionClosedError,
)


logger = logging.getLogger(__name__)

ROOT_ID = 0

T = TypeVar("T")
Name = Union[str, bytes]


def _to_bytes(name: Name) -> bytes:
    if isinstance(name, str):
        return name.encode("utf-8")
    return bytes(name)


@dataclass(frozen=True)
class Bucket:
    """Handle on a bucket inside one transaction.

    Attributes:
        id: Row id of the bucket in the ``buckets`` table.
        path: Names of the bucket and its ancestors, outermost first.
    """

    id: int
    path: Tuple[bytes, ...]
    tx: "Transaction" = field(repr=False, compare=False)


class Transaction:
    """A single read‑only or read‑write transaction.

    Instances are created by :class:`BucketStore`; callers only receive
    them as the argument of the function passed to ``run_read_only`` or
    ``run_read_write``.
    """

    def __init__(self, conn: sqlite3.Connection, writable: bool) -> None:
        self._conn = conn
        self.writable = writable
        self._open = True

    # ------------------------------------------------------------------
    # Guards
    # ------------------------------------------------------------------
    def _check_open(self) -> None:
        if not self._open:
            raise TransactionClosedError("transaction is closed")

    def _check_writable(self) -> None:
        self._check_open()
        if not self.writable:
            raise ReadOnlyTransactionError("transaction is read-only")

    def _check_bucket(self, bucket: Bucket) -> None:
        self._check_open()
        if bucket.tx is not self:
            raise TransactionClosedError(
                f"bucket {bucket.path!r} belongs to another transaction"
            )

    def _close(self) -> None:
        self._open = False

    # ------------------------------------------------------------------
    # Bucket lookup and creation
    # ------------------------------------------------------------------
    def _lookup_bucket(
        self, parent_id: int, parent_path: Tuple[bytes, ...], name: Name
    ) -> Optional[Bucket]:
        raw = _to_bytes(name)
        if not raw:
            return None
        row = self._conn.execute(
            "SELECT id FROM buckets WHERE parent_id = ? AND name = ?",
            (parent_id, raw),
        ).fetchone()
        if row is None:
            return None
        return Bucket(id=row[0], path=parent_path + (raw,), tx=self)

    def _create_bucket_if_absent(
        self, parent_id: int, parent_path: Tuple[bytes, ...], name: Name
    ) -> Bucket:
        self._check_writable()
        raw = _to_bytes(name)
        if not raw:
            raise InvalidNameError(parent_path)
        existing = self._lookup_bucket(parent_id, parent_path, raw)
        if existing is not None:
            return existing
        if parent_id != ROOT_ID and self._has_value(parent_id, raw):
            raise IncompatibleValueError(parent_path, raw)
        cursor = self._conn.execute(
            "INSERT INTO buckets (parent_id, name) VALUES (?, ?)",
            (parent_id, raw),
        )
        logger.debug("Created bucket %r", parent_path + (raw,))
        return Bucket(id=cursor.lastrowid, path=parent_path + (raw,), tx=self)

    def _has_value(self, bucket_id: int, key: bytes) -> bool:
        row = self._conn.execute(
            "SELECT 1 FROM entries WHERE bucket_id = ? AND key = ?",
            (bucket_id, key),
        ).fetchone()
        return row is not None

    def _has_bucket(self, parent_id: int, name: bytes) -> bool:
        row = self._conn.execute(
            "SELECT 1 FROM buckets WHERE parent_id = ? AND name = ?",
            (parent_id, name),
        ).fetchone()
        return row is not None

    def top_level_bucket(self, name: Name) -> Optional[Bucket]:
        """Return the top‑level bucket called ``name`` or ``None``."""
        self._check_open()
        return self._lookup_bucket(ROOT_ID, (), name)

    def ensure_top_level_bucket(self, name: Name) -> Bucket:
        """Return the top‑level bucket called ``name``, creating it if absent."""
        return self._create_bucket_if_absent(ROOT_ID, (), name)

    def nested_bucket(self, parent: Bucket, name: Name) -> Optional[Bucket]:
        """Return the bucket called ``name`` inside ``parent`` or ``None``."""
        self._check_bucket(parent)
        return self._lookup_bucket(parent.id, parent.path, name)

    def create_nested_bucket_if_absent(self, parent: Bucket, name: Name) -> Bucket:
        """Return the bucket called ``name`` inside ``parent``, creating it if absent."""
        self._check_bucket(parent)
        return self._create_bucket_if_absent(parent.id, parent.path, name)

    # ------------------------------------------------------------------
    # Values
    # ------------------------------------------------------------------
    def get(self, bucket: Bucket, key: Name) -> Optional[bytes]:
        """Return the value stored under ``key`` or ``None``."""
        self._check_bucket(bucket)
        row = self._conn.execute(
            "SELECT value FROM entries WHERE bucket_id = ? AND key = ?",
            (bucket.id, _to_bytes(key)),
        ).fetchone()
        return bytes(row[0]) if row is not None else None

    def put(self, bucket: Bucket, key: Name, value: bytes) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        self._check_bucket(bucket)
        self._check_writable()
        raw = _to_bytes(key)
        if not raw:
            raise KeyRequiredError(bucket.path)
        if self._has_bucket(bucket.id, raw):
            raise IncompatibleValueError(bucket.path, raw)
        self._conn.execute(
            "INSERT OR REPLACE INTO entries (bucket_id, key, value) VALUES (?, ?, ?)",
            (bucket.id, raw, bytes(value)),
        )

    def delete(self, bucket: Bucket, key: Name) -> None:
        """Remove ``key`` from ``bucket``.  Missing keys are ignored."""
        self._check_bucket(bucket)
        self._check_writable()
        raw = _to_bytes(key)
        if self._has_bucket(bucket.id, raw):
            raise IncompatibleValueError(bucket.path, raw)
        self._conn.execute(
            "DELETE FROM entries WHERE bucket_id = ? AND key = ?",
            (bucket.id, raw),
        )

    def for_each(self, bucket: Bucket, visit: Callable[[bytes, Optional[bytes]], Any]) -> None:
        """Call ``visit(key, value)`` for every key of ``bucket`` in byte order.

        Nested buckets are visited with ``value=None``.  An exception
        raised by ``visit`` stops the iteration and propagates.
        """
        self._check_bucket(bucket)
        rows = self._conn.execute(
            """
            SELECT key, value FROM entries WHERE bucket_id = ?
            UNION ALL
            SELECT name, NULL FROM buckets WHERE parent_id = ?
            ORDER BY 1
            """,
            (bucket.id, bucket.id),
        ).fetchall()
        for key, value in rows:
            visit(bytes(key), bytes(value) if value is not None else None)

    def for_each_top_level(self, visit: Callable[[bytes], Any]) -> None:
        """Call ``visit(name)`` for every top‑level bucket in byte order."""
        self._check_open()
        rows = self._conn.execute(
            "SELECT name FROM buckets WHERE parent_id = ? ORDER BY name",
            (ROOT_ID,),
        ).fetchall()
        for (name,) in rows:
            visit(bytes(name))


class BucketStore:
    """SQLite backed store of nested buckets.

    The store must be opened with :meth:`open` before use.  After
    :meth:`close` every new transaction fails with
    :class:`StoreClosedError`; a write transaction already running when
    ``close`` is called finishes first.
    """

    def __init__(self, path: str, timeout: float = 5.0) -> None:
        self.path = path
        self.timeout = timeout
        self._write_lock = threading.Lock()
        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed

    def open(self) -> "BucketStore":
        try:
            init_db(self.path, self.timeout)
        except sqlite3.Error as e:
            raise StoreUnavailableError(f"failed to open store {self.path}: {e}") from e
        self._closed = False
        logger.info("Opened bucket store at %s", self.path)
        return self

    def close(self) -> None:
        with self._write_lock:
            if self._closed:
                return
            self._closed = True
        logger.info("Closed bucket store at %s", self.path)

    def _connect(self) -> sqlite3.Connection:
        if self._closed:
            raise StoreClosedError(f"store {self.path} is closed")
        try:
            return get_connection(self.path, self.timeout)
        except sqlite3.Error as e:
            raise StoreUnavailableError(str(e)) from e

    def _run(self, conn: sqlite3.Connection, fn: Callable[[Transaction], T], writable: bool) -> T:
        tx = Transaction(conn, writable)
        try:
            try:
                conn.execute("BEGIN IMMEDIATE" if writable else "BEGIN")
                result = fn(tx)
                conn.execute("COMMIT")
                return result
            except BaseException:
                if conn.in_transaction:
                    conn.execute("ROLLBACK")
                raise
        except sqlite3.Error as e:
            raise StoreUnavailableError(str(e)) from e
        finally:
            tx._close()
            conn.close()

    def run_read_only(self, fn: Callable[[Transaction], T]) -> T:
        """Run ``fn`` inside a read‑only snapshot and return its result."""
        conn = self._connect()
        try:
            conn.execute("PRAGMA query_only = ON")
        except sqlite3.Error as e:
            conn.close()
            raise StoreUnavailableError(str(e)) from e
        return self._run(conn, fn, writable=False)

    def run_read_write(self, fn: Callable[[Transaction], T]) -> T:
        """Run ``fn`` as the only writer; commit on return, roll back on error."""
        with self._write_lock:
            conn = self._connect()
            return self._run(conn, fn, writable=True)
