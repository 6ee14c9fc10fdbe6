"""
Routers for version 1 of the API.

The two services are deployed separately, so instead of one router
aggregating every domain there is one router per service.  ``ROUTERS``
maps a service name to its router and to the message returned when the
request body of that service cannot be parsed.
"""

from fastapi import APIRouter

from .endpoints import comments, ratings


ratings_router = APIRouter()
ratings_router.include_router(ratings.router, tags=["ratings"])

comments_router = APIRouter()
comments_router.include_router(comments.router, tags=["comments"])

ROUTERS = {
    "ratings": (ratings_router, ratings.RATING_INVALID),
    "comments": (comments_router, comments.COMMENT_INVALID),
}
