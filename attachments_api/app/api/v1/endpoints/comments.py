"""
API endpoints for comments.

Posting a comment provisions the resource instance if needed; every
other endpoint requires the instance to exist already.  Editing and
deleting look the comment up first so a missing id is reported as
404 rather than silently ignored.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status

from attachments_api.app.api.deps import get_commentable, get_or_create_commentable
from attachments_api.app.core.errors import (
    AttachmentsError,
    CommentNotFound,
    EmptyCommentError,
    ResourceInstanceNotFound,
)
from attachments_api.app.schemas.comment import Comment, CommentList, CommentWrite
from attachments_api.app.services.comment_service import Commentable


logger = logging.getLogger(__name__)

router = APIRouter()

COMMENTS_PATH = "/{resource_type}/{resource_key}/comments"
COMMENT_PATH = COMMENTS_PATH + "/{comment_id}"

COMMENT_INVALID = "comment could not be parsed"
COMMENT_NOT_FOUND = "comment not found"
COMMENT_LIST_ERROR = "could not load comments"
COMMENT_DELETE_ERROR = "comment could not be deleted"
COMMENT_SAVE_ERROR = "comment could not be saved"


def _fetch_or_404(commentable: Commentable, comment_id: str) -> Comment:
    try:
        return commentable.fetch(comment_id)
    except (CommentNotFound, ResourceInstanceNotFound) as e:
        logger.warning("%s: %s", COMMENT_NOT_FOUND, e)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=COMMENT_NOT_FOUND)


@router.post(
    COMMENTS_PATH,
    response_model=Comment,
    status_code=status.HTTP_201_CREATED,
    summary="Add a comment",
)
def create_comment(
    data: CommentWrite,
    commentable: Commentable = Depends(get_or_create_commentable),
) -> Comment:
    """Attach a new comment to the resource and return it with its id."""
    try:
        return commentable.create(data.value)
    except EmptyCommentError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=COMMENT_INVALID)
    except AttachmentsError as e:
        logger.error("%s (%r): %s", COMMENT_SAVE_ERROR, data.value, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=COMMENT_SAVE_ERROR
        )


@router.get(
    COMMENTS_PATH,
    response_model=CommentList,
    summary="List comments",
)
def list_comments(commentable: Commentable = Depends(get_commentable)) -> CommentList:
    """Return every comment of the resource, oldest first."""
    try:
        return CommentList(comments=commentable.list())
    except AttachmentsError as e:
        logger.error(
            "%s for %s %s: %s",
            COMMENT_LIST_ERROR,
            commentable.resource_type,
            commentable.resource_key,
            e,
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"error fetching comments: {COMMENT_LIST_ERROR}",
        )


@router.get(
    COMMENT_PATH,
    response_model=Comment,
    summary="Get a comment",
)
def get_comment(
    comment_id: str,
    commentable: Commentable = Depends(get_commentable),
) -> Comment:
    return _fetch_or_404(commentable, comment_id)


@router.patch(
    COMMENT_PATH,
    response_model=Comment,
    summary="Edit a comment",
)
def update_comment(
    comment_id: str,
    data: CommentWrite,
    commentable: Commentable = Depends(get_commentable),
) -> Comment:
    """Replace the text of an existing comment; the id does not change."""
    comment = _fetch_or_404(commentable, comment_id)
    comment.value = data.value
    try:
        return commentable.replace(comment)
    except EmptyCommentError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=COMMENT_INVALID)
    except AttachmentsError as e:
        logger.error("%s (comment %s): %s", COMMENT_SAVE_ERROR, comment_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=COMMENT_SAVE_ERROR
        )


@router.delete(
    COMMENT_PATH,
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a comment",
)
def delete_comment(
    comment_id: str,
    commentable: Commentable = Depends(get_commentable),
) -> Response:
    comment = _fetch_or_404(commentable, comment_id)
    try:
        commentable.remove(comment.id)
    except AttachmentsError as e:
        logger.error("%s (comment %s): %s", COMMENT_DELETE_ERROR, comment_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=COMMENT_DELETE_ERROR
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
