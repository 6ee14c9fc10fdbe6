"""
Endpoint subpackage for API v1.

Each module defines an APIRouter for one service.  ``status`` is shared
by both services and mounted without a version prefix.
"""
