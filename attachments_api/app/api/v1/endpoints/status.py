"""
Liveness endpoint shared by both services.
"""

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse


router = APIRouter()


@router.get("/status", response_class=PlainTextResponse, summary="Service status")
def get_status() -> str:
    """Return ``OK`` while the service is running."""
    return "OK"
