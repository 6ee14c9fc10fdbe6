"""
Application package initializer.

The package hosts two small HTTP services that attach secondary data to
arbitrary named resources (``books``, ``authors`` and so on):

* the ratings service keeps a five‑counter star tally per resource;
* the comments service keeps a collection of comments per resource.

Both services persist their data in the same embedded hierarchical
store (``core.store``).  Each service is assembled by ``main.create_app``
and exposes its routes from ``api/v1/endpoints``.
"""

from .main import create_app  # noqa: F401
