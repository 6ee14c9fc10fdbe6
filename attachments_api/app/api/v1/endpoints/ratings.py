"""
API endpoints for star ratings.

``GET`` returns the aggregate of a resource and ``PUT`` merges a delta
into it.  The resource type must be provisioned; the resource instance
is created by its first ``PUT``.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from attachments_api.app.api.deps import get_rateable
from attachments_api.app.core.errors import (
    AttachmentsError,
    ResourceInstanceNotFound,
    ResourceTypeNotFound,
)
from attachments_api.app.schemas.rating import RatingAggregate
from attachments_api.app.services.rating_service import Rateable


logger = logging.getLogger(__name__)

router = APIRouter()

RATINGS_PATH = "/{resource_type}/{resource_key}/ratings"

RATING_INVALID = "rating could not be parsed"
RATING_NOT_FOUND = "rating not found"
RATING_FETCH_ERROR = "could not load ratings"
RATING_SAVE_ERROR = "rating could not be saved"


@router.get(
    RATINGS_PATH,
    response_model=RatingAggregate,
    summary="Get the rating of a resource",
)
def get_ratings(rateable: Rateable = Depends(get_rateable)) -> RatingAggregate:
    """Return the rating aggregate; all counters are zero until the first vote."""
    try:
        return rateable.fetch()
    except ResourceInstanceNotFound as e:
        logger.warning("%s: %s", RATING_NOT_FOUND, e)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=RATING_NOT_FOUND)
    except ResourceTypeNotFound as e:
        raise HTTPException(status_code=status.HTTP_406_NOT_ACCEPTABLE, detail=str(e))
    except AttachmentsError as e:
        logger.error(
            "%s for %s %s: %s",
            RATING_FETCH_ERROR,
            rateable.resource_type,
            rateable.resource_key,
            e,
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=RATING_FETCH_ERROR
        )


@router.put(
    RATINGS_PATH,
    response_model=RatingAggregate,
    summary="Add votes to the rating of a resource",
)
def put_ratings(
    delta: RatingAggregate,
    rateable: Rateable = Depends(get_rateable),
) -> RatingAggregate:
    """Merge the submitted counters into the stored aggregate.

    Counters may be negative to retract votes; the stored counters never
    drop below zero.
    """
    try:
        return rateable.merge(delta)
    except ResourceTypeNotFound as e:
        raise HTTPException(status_code=status.HTTP_406_NOT_ACCEPTABLE, detail=str(e))
    except AttachmentsError as e:
        logger.error("%s (%s): %s", RATING_SAVE_ERROR, delta.model_dump(), e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=RATING_SAVE_ERROR
        )
