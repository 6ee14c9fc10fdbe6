"""
Common addressing for attachments.

Every attachment lives in the bucket chain
``<resource type> / <resource key> / ...``.  ``Attachment`` keeps the
two names and resolves the chain inside a transaction, turning missing
buckets into :class:`ResourceTypeNotFound` or
:class:`ResourceInstanceNotFound`.
"""

from typing import Tuple

from ..core.errors import ResourceInstanceNotFound, ResourceTypeNotFound
from ..core.store import Bucket, BucketStore, Transaction


class Attachment:
    """Base class for data attached to one resource instance."""

    def __init__(self, store: BucketStore, resource_type: str, resource_key: str) -> None:
        self.store = store
        self.resource_type = resource_type
        self.resource_key = resource_key

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.resource_type!r}, {self.resource_key!r})"

    def _type_bucket(self, tx: Transaction) -> Bucket:
        bucket = tx.top_level_bucket(self.resource_type)
        if bucket is None:
            raise ResourceTypeNotFound(self.resource_type)
        return bucket

    def _resource_buckets(self, tx: Transaction) -> Tuple[Bucket, Bucket]:
        """Return the resource type bucket and the resource instance bucket."""
        type_bucket = self._type_bucket(tx)
        instance = tx.nested_bucket(type_bucket, self.resource_key)
        if instance is None:
            raise ResourceInstanceNotFound(self.resource_type, self.resource_key)
        return type_bucket, instance
