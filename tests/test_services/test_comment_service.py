"""
Unit tests for the comment service.
"""

import pytest

from attachments_api.app.core.errors import (
    CommentNotFound,
    EmptyCommentError,
    KeyRequiredError,
    ResourceInstanceNotFound,
    ResourceTypeNotFound,
)
from attachments_api.app.schemas.comment import Comment
from attachments_api.app.services.comment_service import COMMENTS_KEY, Commentable


@pytest.fixture
def commentable(books_store):
    """Comments of book ``b1``, with the instance already provisioned."""
    c = Commentable(books_store, "books", "b1")
    c.ensure_instance()
    return c


def test_ensure_instance_requires_type(store):
    with pytest.raises(ResourceTypeNotFound):
        Commentable(store, "books", "b1").ensure_instance()


def test_ensure_instance_is_idempotent(books_store):
    c = Commentable(books_store, "books", "b1")
    assert not c.instance_exists()
    c.ensure_instance()
    c.ensure_instance()
    assert c.instance_exists()


def test_instance_exists_without_type(store):
    assert not Commentable(store, "books", "b1").instance_exists()


def test_create_then_fetch(commentable):
    created = commentable.create("great read")
    assert created.value == "great read"
    assert commentable.fetch(created.id) == created


def test_create_rejects_empty_text(commentable):
    with pytest.raises(EmptyCommentError):
        commentable.create("")


def test_replace_rejects_missing_or_empty_comment(commentable):
    with pytest.raises(EmptyCommentError):
        commentable.replace(None)
    with pytest.raises(EmptyCommentError):
        commentable.replace(Comment(id="x", value=""))


def test_replace_rejects_empty_id(commentable):
    with pytest.raises(KeyRequiredError):
        commentable.replace(Comment(id="", value="text"))


def test_create_requires_instance(books_store):
    with pytest.raises(ResourceInstanceNotFound):
        Commentable(books_store, "books", "missing").create("hello")


def test_list_on_fresh_instance_is_empty(commentable):
    assert commentable.list() == []


def test_fetch_without_comments_bucket(commentable):
    with pytest.raises(CommentNotFound):
        commentable.fetch("anything")


def test_fetch_unknown_id(commentable):
    commentable.create("first")
    with pytest.raises(CommentNotFound) as excinfo:
        commentable.fetch("unknown")
    assert excinfo.value.comment_id == "unknown"
    assert excinfo.value.resource_key == "b1"


def test_operations_on_missing_instance(books_store):
    c = Commentable(books_store, "books", "missing")
    with pytest.raises(ResourceInstanceNotFound):
        c.list()
    with pytest.raises(ResourceInstanceNotFound):
        c.fetch("x")
    with pytest.raises(ResourceInstanceNotFound):
        c.remove("x")


def test_operations_on_missing_type(store):
    c = Commentable(store, "books", "b1")
    with pytest.raises(ResourceTypeNotFound):
        c.list()
    with pytest.raises(ResourceTypeNotFound):
        c.replace(Comment(id="x", value="v"))


def test_scenario_create_list_replace_fetch(commentable):
    created = commentable.create("great read")
    assert commentable.list() == [Comment(id=created.id, value="great read")]

    edited = commentable.replace(Comment(id=created.id, value="edited"))
    assert edited == Comment(id=created.id, value="edited")
    assert commentable.fetch(created.id) == Comment(id=created.id, value="edited")
    assert len(commentable.list()) == 1


def test_remove_then_fetch_fails(commentable):
    created = commentable.create("bye")
    commentable.remove(created.id)
    with pytest.raises(CommentNotFound):
        commentable.fetch(created.id)
    assert commentable.list() == []


def test_remove_unknown_id_in_existing_bucket_succeeds(commentable):
    commentable.create("stays")
    commentable.remove("unknown")
    assert len(commentable.list()) == 1


def test_remove_without_comments_bucket_fails(commentable):
    with pytest.raises(CommentNotFound):
        commentable.remove("anything")


def test_identifiers_do_not_collide(commentable):
    ids = {commentable.create(f"comment {i}").id for i in range(1000)}
    assert len(ids) == 1000
    assert len(commentable.list()) == 1000


def test_list_follows_creation_order(commentable):
    texts = ["one", "two", "three", "four"]
    for text in texts:
        commentable.create(text)
    assert [c.value for c in commentable.list()] == texts


def test_record_layout(commentable):
    created = commentable.create("stored")

    def read(tx):
        instance = tx.nested_bucket(tx.top_level_bucket("books"), "b1")
        comments = tx.nested_bucket(instance, COMMENTS_KEY)
        return tx.get(comments, created.id.encode())

    expected = ('{"id":"%s","value":"stored"}' % created.id).encode()
    assert commentable.store.run_read_only(read) == expected
