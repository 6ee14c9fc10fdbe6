"""
Error taxonomy shared by the bucket store and the attachment services.

Exceptions carry the offending resource type, key or comment id as
attributes.  They are not meant to be shown to API clients as is: the
endpoint modules translate them into HTTP status codes and messages.
"""

from typing import Optional


class AttachmentsError(Exception):
    """Base class for every error raised by this package."""


# ----------------------------------------------------------------------
# Store errors
# ----------------------------------------------------------------------
class StoreError(AttachmentsError):
    """Base class for bucket store failures."""


class InvalidNameError(StoreError):
    """A bucket was created with an empty name."""

    def __init__(self, path: tuple = ()) -> None:
        self.path = path
        super().__init__(f"bucket name required (parent path {path!r})")


class KeyRequiredError(StoreError):
    """A value was written with an empty key."""

    def __init__(self, path: tuple = ()) -> None:
        self.path = path
        super().__init__(f"key required (bucket path {path!r})")


class IncompatibleValueError(StoreError):
    """A key is used both for a value and for a nested bucket."""

    def __init__(self, path: tuple, key: bytes) -> None:
        self.path = path
        self.key = key
        super().__init__(f"incompatible value for key {key!r} in bucket {path!r}")


class ReadOnlyTransactionError(StoreError):
    """A write was attempted inside a read‑only transaction."""


class TransactionClosedError(StoreError):
    """A transaction or bucket handle was used after its transaction ended."""


class StoreClosedError(StoreError):
    """The store is not open, or is shutting down."""


class StoreUnavailableError(StoreError):
    """The storage engine failed (I/O error, locked database, bad record)."""


# ----------------------------------------------------------------------
# Attachment errors
# ----------------------------------------------------------------------
class ResourceTypeNotFound(AttachmentsError):
    """No top‑level bucket exists for the resource type."""

    def __init__(self, resource_type: str) -> None:
        self.resource_type = resource_type
        super().__init__(f"resource type {resource_type!r} not found")


class ResourceInstanceNotFound(AttachmentsError):
    """The resource key has no bucket under an existing resource type."""

    def __init__(self, resource_type: str, resource_key: str) -> None:
        self.resource_type = resource_type
        self.resource_key = resource_key
        super().__init__(f"{resource_type} not found with key {resource_key!r}")


class CommentNotFound(AttachmentsError):
    """The resource has no comments bucket, or no comment with the id."""

    def __init__(
        self,
        comment_id: Optional[str],
        resource_type: str,
        resource_key: str,
    ) -> None:
        self.comment_id = comment_id
        self.resource_type = resource_type
        self.resource_key = resource_key
        super().__init__(
            f"comment {comment_id!r} not found for {resource_type} {resource_key!r}"
        )


class EmptyCommentError(AttachmentsError):
    """A comment was created or updated without any text."""

    def __init__(self) -> None:
        super().__init__("comment should not be empty")
