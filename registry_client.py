"""Resource registry API client.

This module defines a small client wrapper around the REST API of the
resource registry.  Scripts, bots and other services use it instead of
building requests by hand.  The client uses the ``requests`` library
internally and exposes one method per operation:

* :meth:`list_resources` – return resources, optionally filtered.
* :meth:`get_resource` – fetch a single resource by its identifier.
* :meth:`create_resource` – create a new resource.
* :meth:`update_resource` – replace some fields of a resource.
* :meth:`delete_resource` – delete a resource.
* :meth:`health` – query the health probe.

Every method returns a tuple ``(result, error)``.  On success ``error``
is ``None``; on failure ``result`` is empty and ``error`` is a
dictionary with the keys ``status_code`` and ``message``.  The message
is taken from the ``error`` field of the response envelope.  Network
failures are logged and reported the same way instead of raising.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import quote

import requests


logger = logging.getLogger(__name__)

RESOURCES_PATH = "/api/v1/resources"

Error = Dict[str, Any]


class ResourceRegistryAPI:
    """Client for interacting with the resource registry API."""

    def __init__(
        self,
        *,
        base_url: str,
        session: Optional[requests.Session] = None,
        timeout: float = 15,
    ) -> None:
        """Initialise the API client.

        Args:
            base_url: Base URL for the API, e.g. ``http://localhost:4000``.
            session: Optional requests session.  If not supplied a
                session will be created automatically.
            timeout: Seconds to wait for the server before giving up.
        """
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    # ------------------------------------------------------------------
    # Low level HTTP helpers
    # ------------------------------------------------------------------
    def _request(
        self, method: str, path: str, *, params: Dict[str, Any] | None = None,
        json_body: Any | None = None
    ) -> Tuple[Optional[Any], Optional[Error]]:
        """Perform an HTTP request to the API.

        Args:
            method: HTTP method (``GET``, ``POST``, ``PUT``, ``DELETE``).
            path: Path relative to :attr:`base_url`.
            params: Query parameters to include in the request.
            json_body: JSON body to send with the request.
        Returns:
            A tuple ``(data, error)``.  ``data`` is the parsed JSON
            response (``None`` for an empty body).
        """
        url = f"{self.base_url}{path}"
        try:
            logger.debug("Sending %s request to %s", method, url)
            response = self.session.request(
                method=method,
                url=url,
                params=params,
                json=json_body,
                timeout=self.timeout,
            )
            response.raise_for_status()
            if response.content:
                return response.json(), None
            return None, None
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            message = ""
            if exc.response is not None:
                try:
                    err_json = exc.response.json()
                    if isinstance(err_json, dict):
                        message = err_json.get("error") or str(err_json)
                    else:
                        message = str(err_json)
                except ValueError:
                    message = exc.response.text
            if not message:
                message = str(exc)
            logger.error("API request failed (%s): %s", status, message)
            return None, {"status_code": status, "message": message}
        except requests.RequestException as exc:
            logger.error("API request failed: %s", exc)
            return None, {"status_code": None, "message": str(exc)}

    @staticmethod
    def _resource_path(resource_id: Any) -> str:
        return f"{RESOURCES_PATH}/{quote(str(resource_id), safe='')}"

    @staticmethod
    def _unwrap(data: Any) -> Any:
        if isinstance(data, dict) and "data" in data:
            return data["data"]
        return data

    # ------------------------------------------------------------------
    # Resource operations
    # ------------------------------------------------------------------
    def list_resources(
        self,
        *,
        search: Optional[str] = None,
        tag: Optional[str] = None,
        updated_after: Optional[datetime | str] = None,
    ) -> Tuple[List[Dict[str, Any]], Optional[Error]]:
        """Retrieve resources matching the given filters.

        Returns:
            A tuple ``(resources, error)``. ``resources`` is empty on
            failure.
        """
        params: Dict[str, Any] = {}
        if search:
            params["search"] = search
        if tag:
            params["tag"] = tag
        if updated_after:
            params["updatedAfter"] = (
                updated_after.isoformat() if isinstance(updated_after, datetime) else updated_after
            )
        data, error = self._request("GET", RESOURCES_PATH, params=params or None)
        if error:
            return [], error
        resources = self._unwrap(data)
        return (resources if isinstance(resources, list) else []), None

    def get_resource(self, resource_id: str) -> Tuple[Optional[Dict[str, Any]], Optional[Error]]:
        """Retrieve a single resource by ID."""
        data, error = self._request("GET", self._resource_path(resource_id))
        if error:
            return None, error
        return self._unwrap(data), None

    def create_resource(self, payload: Dict[str, Any]) -> Tuple[Optional[Dict[str, Any]], Optional[Error]]:
        """Create a resource.

        Args:
            payload: ``name`` (required), ``description`` and ``tags``.
        """
        data, error = self._request("POST", RESOURCES_PATH, json_body=payload)
        if error:
            return None, error
        return self._unwrap(data), None

    def update_resource(
        self, resource_id: str, payload: Dict[str, Any]
    ) -> Tuple[Optional[Dict[str, Any]], Optional[Error]]:
        """Replace the given fields of a resource."""
        data, error = self._request("PUT", self._resource_path(resource_id), json_body=payload)
        if error:
            return None, error
        return self._unwrap(data), None

    def delete_resource(self, resource_id: str) -> Tuple[bool, Optional[Error]]:
        """Delete a resource.

        Returns:
            A tuple ``(success, error)``.
        """
        _, error = self._request("DELETE", self._resource_path(resource_id))
        if error:
            return False, error
        return True, None

    def health(self) -> Tuple[Optional[Dict[str, Any]], Optional[Error]]:
        """Query the service health probe."""
        return self._request("GET", "/health")
