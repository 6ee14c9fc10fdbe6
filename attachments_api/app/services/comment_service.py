"""
Business logic for comments.

Comments of a resource live in a ``comments`` bucket nested in the
resource instance bucket, one JSON record per comment keyed by its id::

    <resource type> / <resource key> / comments : <id> -> {"id": ..., "value": ...}

Unlike ratings, the resource instance bucket is never created
implicitly by a write: callers run ``ensure_instance`` first (the create
endpoint does so).  The ``comments`` bucket itself is created with the
first comment, so an instance without comments has no such bucket.
"""

import logging
from typing import List, Optional

from pydantic import ValidationError

from ..core.errors import CommentNotFound, EmptyCommentError, StoreUnavailableError
from ..core.identifiers import new_comment_id
from ..core.store import Bucket, Transaction
from ..schemas.comment import Comment
from .attachment import Attachment


logger = logging.getLogger(__name__)

COMMENTS_KEY = b"comments"


def decode_comment(data: bytes) -> Comment:
    try:
        return Comment.model_validate_json(data)
    except ValidationError as e:
        raise StoreUnavailableError(f"corrupt comment record: {e}") from e


def encode_comment(comment: Comment) -> bytes:
    return comment.model_dump_json().encode("utf-8")


class Commentable(Attachment):
    """The comment collection of one resource instance."""

    def _comments_bucket(self, tx: Transaction, comment_id: Optional[str]) -> Bucket:
        _, instance = self._resource_buckets(tx)
        comments = tx.nested_bucket(instance, COMMENTS_KEY)
        if comments is None:
            raise CommentNotFound(comment_id, self.resource_type, self.resource_key)
        return comments

    def ensure_instance(self) -> None:
        """Create the resource instance bucket if it does not exist yet."""

        def _ensure(tx):
            type_bucket = self._type_bucket(tx)
            tx.create_nested_bucket_if_absent(type_bucket, self.resource_key)

        self.store.run_read_write(_ensure)

    def instance_exists(self) -> bool:
        """Return whether both the type and the instance buckets exist."""

        def _exists(tx):
            type_bucket = tx.top_level_bucket(self.resource_type)
            if type_bucket is None:
                return False
            return tx.nested_bucket(type_bucket, self.resource_key) is not None

        return self.store.run_read_only(_exists)

    def create(self, text: str) -> Comment:
        """Store a new comment with a fresh identifier and return it."""
        if not text:
            raise EmptyCommentError()
        comment = self.replace(Comment(id=new_comment_id(), value=text))
        logger.info(
            "Created comment %s for %s %s", comment.id, self.resource_type, self.resource_key
        )
        return comment

    def replace(self, comment: Optional[Comment]) -> Comment:
        """Store ``comment`` under its id, overwriting any previous version."""
        if comment is None or not comment.value:
            raise EmptyCommentError()

        def _replace(tx):
            _, instance = self._resource_buckets(tx)
            comments = tx.create_nested_bucket_if_absent(instance, COMMENTS_KEY)
            tx.put(comments, comment.id, encode_comment(comment))

        self.store.run_read_write(_replace)
        return comment

    def fetch(self, comment_id: str) -> Comment:
        """Return the comment with ``comment_id``."""

        def _fetch(tx):
            comments = self._comments_bucket(tx, comment_id)
            data = tx.get(comments, comment_id)
            if data is None:
                raise CommentNotFound(comment_id, self.resource_type, self.resource_key)
            return decode_comment(data)

        return self.store.run_read_only(_fetch)

    def remove(self, comment_id: str) -> None:
        """Delete the comment with ``comment_id``.

        Deleting an id that is not stored succeeds silently as long as
        the resource has a comments bucket; call ``fetch`` first to
        report a missing comment.
        """

        def _remove(tx):
            comments = self._comments_bucket(tx, comment_id)
            tx.delete(comments, comment_id)

        self.store.run_read_write(_remove)
        logger.info(
            "Removed comment %s from %s %s", comment_id, self.resource_type, self.resource_key
        )

    def list(self) -> List[Comment]:
        """Return every comment of the resource in identifier order."""

        def _list(tx):
            _, instance = self._resource_buckets(tx)
            comments = tx.nested_bucket(instance, COMMENTS_KEY)
            if comments is None:
                return []
            result: List[Comment] = []

            def _visit(key, data):
                if data is not None:
                    result.append(decode_comment(data))

            tx.for_each(comments, _visit)
            return result

        return self.store.run_read_only(_list)
