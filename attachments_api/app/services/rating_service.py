"""
Business logic for star ratings.

The rating aggregate of a resource is a JSON record stored under the
``ratings`` key of the resource instance bucket::

    <resource type> / <resource key> : ratings -> {"five_stars": 3, ...}

A resource without a record has an all zero aggregate.  Merges run in a
single read‑write transaction, and the store admits one writer at a
time, so concurrent merges never lose updates.
"""

import logging
from typing import Optional

from pydantic import ValidationError

from ..core.errors import StoreUnavailableError
from ..schemas.rating import RatingAggregate
from .attachment import Attachment


logger = logging.getLogger(__name__)

RATINGS_KEY = b"ratings"


def decode_rating(data: Optional[bytes]) -> RatingAggregate:
    """Decode a stored rating record; ``None`` yields an all zero aggregate."""
    if data is None:
        return RatingAggregate()
    try:
        return RatingAggregate.model_validate_json(data)
    except ValidationError as e:
        raise StoreUnavailableError(f"corrupt rating record: {e}") from e


def encode_rating(rating: RatingAggregate) -> bytes:
    return rating.model_dump_json().encode("utf-8")


class Rateable(Attachment):
    """The rating aggregate of one resource instance."""

    def merge(self, delta: RatingAggregate) -> RatingAggregate:
        """Add ``delta`` to the stored aggregate and return the new aggregate.

        The resource instance bucket is created on first write.  Every
        counter of the result is clamped at zero before it is stored.
        """

        def _merge(tx):
            type_bucket = self._type_bucket(tx)
            instance = tx.create_nested_bucket_if_absent(type_bucket, self.resource_key)
            current = decode_rating(tx.get(instance, RATINGS_KEY))
            merged = current.merge(delta)
            tx.put(instance, RATINGS_KEY, encode_rating(merged))
            return merged

        merged = self.store.run_read_write(_merge)
        logger.info(
            "Merged rating for %s %s: %s",
            self.resource_type,
            self.resource_key,
            merged.model_dump(),
        )
        return merged

    def fetch(self) -> RatingAggregate:
        """Return the stored aggregate, all zero if nothing was rated yet."""

        def _fetch(tx):
            _, instance = self._resource_buckets(tx)
            return decode_rating(tx.get(instance, RATINGS_KEY))

        return self.store.run_read_only(_fetch)
