"""Resource attachments API client.

This module wraps the HTTP interface of the ratings and comments
services.  The two services are usually deployed on different hosts or
ports, so a client instance talks to one base URL; create one client
per service when they are deployed separately.

Every public method returns a tuple ``(data, error)``.  ``data`` is the
parsed JSON response on success and ``error`` is ``None``; on failure
``data`` is ``None`` (or an empty list for listings) and ``error`` is a
dictionary with keys ``status_code`` and ``message``.

Example::

    ratings = AttachmentsAPI(base_url="http://localhost:8001")
    rating, error = ratings.rate("books", "b1", five_stars=1)
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

import requests
from requests.utils import quote


logger = logging.getLogger(__name__)

Result = Tuple[Optional[Any], Optional[Dict[str, Any]]]


class AttachmentsAPI:
    """Client for the ratings and comments services."""

    def __init__(
        self,
        *,
        base_url: str,
        api_prefix: str = "/api/v1",
        timeout: float = 15,
        session: Optional[requests.Session] = None,
    ) -> None:
        """Initialise the API client.

        Args:
            base_url: Base URL of the service, e.g. ``http://localhost:8001``.
            api_prefix: Version prefix of the resource routes.
            timeout: Seconds to wait for each response.
            session: Optional requests session.  If not supplied a
                session will be created automatically.
        """
        self.base_url = base_url.rstrip("/")
        self.api_prefix = "/" + api_prefix.strip("/") if api_prefix.strip("/") else ""
        self.timeout = timeout
        self.session = session or requests.Session()

    # ------------------------------------------------------------------
    # Low level HTTP helpers
    # ------------------------------------------------------------------
    def _path(self, resource_type: str, resource_key: str, *parts: str) -> str:
        segments = [resource_type, resource_key, *parts]
        return self.api_prefix + "/" + "/".join(quote(str(s), safe="") for s in segments)

    def _request(self, method: str, path: str, *, json_body: Any | None = None) -> Result:
        """Perform an HTTP request and return ``(data, error)``."""
        url = f"{self.base_url}{path}"
        try:
            logger.debug("Sending %s request to %s", method, url)
            response = self.session.request(
                method=method,
                url=url,
                json=json_body,
                timeout=self.timeout,
            )
            response.raise_for_status()
            if not response.content:
                return None, None
            if response.headers.get("Content-Type", "").startswith("application/json"):
                return response.json(), None
            return response.text, None
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            message = ""
            if exc.response is not None:
                try:
                    err_json = exc.response.json()
                    message = err_json.get("detail") or err_json.get("message") or str(err_json)
                except ValueError:
                    message = exc.response.text
            if not message:
                message = str(exc)
            logger.error("API request failed (%s): %s", status, message)
            return None, {"status_code": status, "message": message}
        except requests.RequestException as exc:
            logger.error("API request failed: %s", exc)
            return None, {"status_code": None, "message": str(exc)}

    # ------------------------------------------------------------------
    # Service status
    # ------------------------------------------------------------------
    def status(self) -> bool:
        """Return ``True`` if the service answers its status endpoint."""
        data, error = self._request("GET", "/status")
        return error is None and data == "OK"

    # ------------------------------------------------------------------
    # Ratings
    # ------------------------------------------------------------------
    def get_ratings(self, resource_type: str, resource_key: str) -> Result:
        """Retrieve the rating aggregate of a resource."""
        return self._request("GET", self._path(resource_type, resource_key, "ratings"))

    def rate(
        self,
        resource_type: str,
        resource_key: str,
        *,
        five_stars: int = 0,
        four_stars: int = 0,
        three_stars: int = 0,
        two_stars: int = 0,
        one_stars: int = 0,
    ) -> Result:
        """Add votes to a resource and return the new aggregate.

        Negative counts retract votes; the service never stores negative
        counters.
        """
        payload = {
            "five_stars": five_stars,
            "four_stars": four_stars,
            "three_stars": three_stars,
            "two_stars": two_stars,
            "one_stars": one_stars,
        }
        return self._request(
            "PUT", self._path(resource_type, resource_key, "ratings"), json_body=payload
        )

    # ------------------------------------------------------------------
    # Comments
    # ------------------------------------------------------------------
    def list_comments(
        self, resource_type: str, resource_key: str
    ) -> Tuple[List[Dict[str, Any]], Optional[Dict[str, Any]]]:
        """Retrieve all comments of a resource."""
        data, error = self._request("GET", self._path(resource_type, resource_key, "comments"))
        if error:
            return [], error
        if isinstance(data, dict) and isinstance(data.get("comments"), list):
            return data["comments"], None
        return [], None

    def add_comment(self, resource_type: str, resource_key: str, text: str) -> Result:
        """Attach a comment to a resource, provisioning the resource if needed."""
        return self._request(
            "POST",
            self._path(resource_type, resource_key, "comments"),
            json_body={"value": text},
        )

    def get_comment(self, resource_type: str, resource_key: str, comment_id: str) -> Result:
        return self._request(
            "GET", self._path(resource_type, resource_key, "comments", comment_id)
        )

    def update_comment(
        self, resource_type: str, resource_key: str, comment_id: str, text: str
    ) -> Result:
        """Replace the text of a comment."""
        return self._request(
            "PATCH",
            self._path(resource_type, resource_key, "comments", comment_id),
            json_body={"value": text},
        )

    def delete_comment(self, resource_type: str, resource_key: str, comment_id: str) -> Result:
        """Delete a comment.  ``data`` is ``None`` on success."""
        return self._request(
            "DELETE", self._path(resource_type, resource_key, "comments", comment_id)
        )
