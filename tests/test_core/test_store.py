"""
Unit tests for the bucket store.
"""

import threading

import pytest

from attachments_api.app.core.errors import (
    IncompatibleValueError,
    InvalidNameError,
    KeyRequiredError,
    ReadOnlyTransactionError,
    StoreClosedError,
    TransactionClosedError,
)
from attachments_api.app.core.store import BucketStore


def test_store_must_be_opened(db_path):
    """Transactions on a store that was never opened fail."""
    store = BucketStore(db_path)
    assert store.closed
    with pytest.raises(StoreClosedError):
        store.run_read_only(lambda tx: None)


def test_nested_buckets_and_values(store):
    """Values written in nested buckets can be read back in a later transaction."""

    def write(tx):
        books = tx.ensure_top_level_bucket("books")
        b1 = tx.create_nested_bucket_if_absent(books, "b1")
        tx.put(b1, "ratings", b"payload")
        return b1.path

    assert store.run_read_write(write) == (b"books", b"b1")

    def read(tx):
        books = tx.top_level_bucket("books")
        b1 = tx.nested_bucket(books, b"b1")
        return tx.get(b1, b"ratings"), tx.get(b1, "missing")

    assert store.run_read_only(read) == (b"payload", None)


def test_missing_buckets_are_none(store):
    def read(tx):
        return tx.top_level_bucket("nope"), tx.top_level_bucket("")

    assert store.run_read_only(read) == (None, None)


def test_create_if_absent_is_idempotent(store):
    def create(tx):
        first = tx.ensure_top_level_bucket("books")
        second = tx.ensure_top_level_bucket("books")
        nested_a = tx.create_nested_bucket_if_absent(first, "b1")
        nested_b = tx.create_nested_bucket_if_absent(first, "b1")
        return first.id == second.id, nested_a.id == nested_b.id

    assert store.run_read_write(create) == (True, True)


def test_empty_bucket_name_is_rejected(store):
    with pytest.raises(InvalidNameError):
        store.run_read_write(lambda tx: tx.ensure_top_level_bucket(""))

    def nested(tx):
        books = tx.ensure_top_level_bucket("books")
        tx.create_nested_bucket_if_absent(books, b"")

    with pytest.raises(InvalidNameError):
        store.run_read_write(nested)


def test_empty_key_is_rejected(store):
    def write(tx):
        books = tx.ensure_top_level_bucket("books")
        tx.put(books, "", b"value")

    with pytest.raises(KeyRequiredError):
        store.run_read_write(write)


def test_key_cannot_be_value_and_bucket(store):
    def bucket_then_value(tx):
        books = tx.ensure_top_level_bucket("books")
        tx.create_nested_bucket_if_absent(books, "b1")
        tx.put(books, "b1", b"value")

    with pytest.raises(IncompatibleValueError):
        store.run_read_write(bucket_then_value)

    def value_then_bucket(tx):
        books = tx.ensure_top_level_bucket("books")
        tx.put(books, "k", b"value")
        tx.create_nested_bucket_if_absent(books, "k")

    with pytest.raises(IncompatibleValueError):
        store.run_read_write(value_then_bucket)


def test_writes_in_read_only_transaction_fail(store):
    store.run_read_write(lambda tx: tx.ensure_top_level_bucket("books"))

    with pytest.raises(ReadOnlyTransactionError):
        store.run_read_only(lambda tx: tx.ensure_top_level_bucket("authors"))

    def put(tx):
        tx.put(tx.top_level_bucket("books"), "k", b"v")

    with pytest.raises(ReadOnlyTransactionError):
        store.run_read_only(put)


def test_failed_write_transaction_is_rolled_back(store):
    """An error inside ``fn`` discards every write of the transaction."""

    def write_then_fail(tx):
        books = tx.ensure_top_level_bucket("books")
        tx.put(books, "k", b"v")
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        store.run_read_write(write_then_fail)

    assert store.run_read_only(lambda tx: tx.top_level_bucket("books")) is None


def test_delete_and_missing_delete(store):
    def write(tx):
        books = tx.ensure_top_level_bucket("books")
        tx.put(books, "k", b"v")
        tx.delete(books, "k")
        tx.delete(books, "never-stored")
        return tx.get(books, "k")

    assert store.run_read_write(write) is None


def test_for_each_visits_keys_in_byte_order(store):
    def write(tx):
        books = tx.ensure_top_level_bucket("books")
        tx.put(books, "b", b"2")
        tx.put(books, "a", b"1")
        tx.create_nested_bucket_if_absent(books, "c")

    store.run_read_write(write)

    visited = []
    store.run_read_only(
        lambda tx: tx.for_each(tx.top_level_bucket("books"), lambda k, v: visited.append((k, v)))
    )
    assert visited == [(b"a", b"1"), (b"b", b"2"), (b"c", None)]


def test_for_each_top_level(store):
    store.run_read_write(lambda tx: [tx.ensure_top_level_bucket(n) for n in ("books", "authors")])
    names = []
    store.run_read_only(lambda tx: tx.for_each_top_level(names.append))
    assert names == [b"authors", b"books"]


def test_bucket_handles_do_not_outlive_their_transaction(store):
    books = store.run_read_write(lambda tx: tx.ensure_top_level_bucket("books"))

    with pytest.raises(TransactionClosedError):
        store.run_read_only(lambda tx: tx.get(books, "k"))


def test_closed_store_rejects_transactions(store):
    store.close()
    assert store.closed
    with pytest.raises(StoreClosedError):
        store.run_read_write(lambda tx: tx.ensure_top_level_bucket("books"))
    with pytest.raises(StoreClosedError):
        store.run_read_only(lambda tx: None)


def test_reopen_keeps_data(store, db_path):
    store.run_read_write(lambda tx: tx.ensure_top_level_bucket("books"))
    store.close()

    reopened = BucketStore(db_path).open()
    try:
        assert reopened.run_read_only(lambda tx: tx.top_level_bucket("books")) is not None
    finally:
        reopened.close()


def test_reader_does_not_see_uncommitted_write(store):
    """A snapshot taken by a reader is not affected by an in-flight writer."""
    store.run_read_write(lambda tx: tx.put(tx.ensure_top_level_bucket("books"), "k", b"old"))

    written = threading.Event()
    release = threading.Event()

    def slow_write(tx):
        tx.put(tx.top_level_bucket("books"), "k", b"new")
        written.set()
        release.wait(5)

    writer = threading.Thread(target=store.run_read_write, args=(slow_write,))
    writer.start()
    try:
        assert written.wait(5)
        seen = store.run_read_only(lambda tx: tx.get(tx.top_level_bucket("books"), "k"))
        assert seen == b"old"
    finally:
        release.set()
        writer.join(5)

    assert store.run_read_only(lambda tx: tx.get(tx.top_level_bucket("books"), "k")) == b"new"


def test_close_waits_for_active_writer(store, db_path):
    """close() blocks until a running write commits; later writes are refused."""
    started = threading.Event()
    release = threading.Event()
    results = {}

    def slow_write(tx):
        tx.put(tx.ensure_top_level_bucket("books"), "k", b"committed")
        started.set()
        release.wait(5)
        return "done"

    def write():
        results["writer"] = store.run_read_write(slow_write)

    writer = threading.Thread(target=write)
    writer.start()
    assert started.wait(5)

    closer = threading.Thread(target=store.close)
    closer.start()
    closer.join(0.2)
    try:
        assert closer.is_alive()
        assert not store.closed
    finally:
        release.set()
        writer.join(5)
        closer.join(5)

    assert not closer.is_alive()
    assert results["writer"] == "done"
    assert store.closed
    with pytest.raises(StoreClosedError):
        store.run_read_write(lambda tx: tx.ensure_top_level_bucket("authors"))

    reopened = BucketStore(db_path).open()
    try:
        value = reopened.run_read_only(lambda tx: tx.get(tx.top_level_bucket("books"), "k"))
        assert value == b"committed"
    finally:
        reopened.close()
