"""
Pydantic schemas for comments.

``Comment`` is both the stored record (``{"id": ..., "value": ...}``)
and the response body.  ``CommentWrite`` is the request body accepted
when a comment is created or edited; the identifier is always chosen by
the server.
"""

from typing import List

from pydantic import BaseModel, Field


class Comment(BaseModel):
    """A comment attached to a resource."""

    id: str = Field(..., description="Server generated identifier")
    value: str = Field(..., description="Comment text")


class CommentWrite(BaseModel):
    """Schema for creating or updating a comment."""

    value: str = Field(..., min_length=1, description="Comment text")


class CommentList(BaseModel):
    """All comments of a resource."""

    comments: List[Comment]
