"""
Resource types.

Each resource type (``books``, ``authors``...) is a top‑level bucket.
The services provision the configured types at startup and use
``exists`` as the gate in front of every attachment operation.
"""

import logging
from typing import Iterable, List

from ..core.store import BucketStore


logger = logging.getLogger(__name__)


class ResourceNamespaceService:
    """Provision and look up resource types."""

    def __init__(self, store: BucketStore) -> None:
        self.store = store

    def provision(self, names: Iterable[str]) -> None:
        """Ensure a top‑level bucket exists for every name.

        Names are processed in the given order, duplicates once.  Each
        bucket is created in its own transaction.  If one creation
        fails the error propagates, but buckets created before it stay
        committed: provisioning is best effort, not atomic.
        """
        for name in dict.fromkeys(names):
            self.store.run_read_write(lambda tx: tx.ensure_top_level_bucket(name))
            logger.info("Provisioned resource type %s", name)

    def exists(self, name: str) -> bool:
        """Return whether a top‑level bucket exists for ``name``."""
        return self.store.run_read_only(lambda tx: tx.top_level_bucket(name) is not None)

    def list_types(self) -> List[str]:
        """Return the names of all provisioned resource types in byte order."""
        names: List[str] = []

        def _collect(tx):
            tx.for_each_top_level(lambda name: names.append(name.decode("utf-8", "replace")))

        self.store.run_read_only(_collect)
        return names
