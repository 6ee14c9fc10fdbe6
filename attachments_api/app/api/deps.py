"""
FastAPI dependencies.

Endpoints never look up attachments themselves.  They declare one of
the dependencies below, which checks that the resource type (and, for
comments, the resource instance) exists and passes the ready to use
attachment as a typed argument.  Requests that fail a check are
answered here:

* unknown resource type -> 406 Not Acceptable;
* resource instance not provisioned -> 404 Not Found.
"""

import logging

from fastapi import Depends, HTTPException, Request, status

from ..core.errors import AttachmentsError
from ..core.store import BucketStore
from ..services.comment_service import Commentable
from ..services.namespace_service import ResourceNamespaceService
from ..services.rating_service import Rateable


logger = logging.getLogger(__name__)


def get_store(request: Request) -> BucketStore:
    """Return the bucket store opened by the application at startup."""
    return request.app.state.store


def verify_resource_type(resource_type: str, store: BucketStore, kind: str) -> None:
    if not ResourceNamespaceService(store).exists(resource_type):
        logger.warning("Could not verify %s type %s", kind, resource_type)
        raise HTTPException(
            status_code=status.HTTP_406_NOT_ACCEPTABLE,
            detail=f"{kind} type, {resource_type}, not found",
        )


def get_rateable(
    resource_type: str,
    resource_key: str,
    store: BucketStore = Depends(get_store),
) -> Rateable:
    """Resolve the rating aggregate addressed by the request path."""
    verify_resource_type(resource_type, store, "rateable")
    return Rateable(store, resource_type, resource_key)


def _require_instance(commentable: Commentable) -> Commentable:
    if not commentable.instance_exists():
        logger.warning(
            "Commentable validation failed for %s %s",
            commentable.resource_type,
            commentable.resource_key,
        )
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{commentable.resource_type} not found with key {commentable.resource_key}",
        )
    return commentable


def get_commentable(
    resource_type: str,
    resource_key: str,
    store: BucketStore = Depends(get_store),
) -> Commentable:
    """Resolve the comment collection of an existing resource instance."""
    verify_resource_type(resource_type, store, "commentable")
    return _require_instance(Commentable(store, resource_type, resource_key))


def get_or_create_commentable(
    resource_type: str,
    resource_key: str,
    store: BucketStore = Depends(get_store),
) -> Commentable:
    """Resolve the comment collection, provisioning the resource instance first."""
    verify_resource_type(resource_type, store, "commentable")
    commentable = Commentable(store, resource_type, resource_key)
    try:
        commentable.ensure_instance()
    except AttachmentsError as e:
        logger.error(
            "Could not provision comments for %s %s: %s", resource_type, resource_key, e
        )
        raise HTTPException(
            status_code=status.HTTP_406_NOT_ACCEPTABLE,
            detail="could not provision comments",
        )
    return _require_instance(commentable)
