"""HTTP client for the PostgREST-style StoryPath API."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import requests

from .errors import StoryPathServiceError, not_found

PROJECT_ENDPOINT = "project"
LOCATION_ENDPOINT = "location"


class StoryPathRestClient:
    """Talks to ``/project`` and ``/location`` with ``?column=eq.value`` filters."""

    supports_concurrent_reads = True

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        username: Optional[str] = None,
        timeout: int = 10,
        session: Optional[requests.Session] = None,
    ):
        if not base_url:
            raise ValueError("base_url is required for the StoryPath API client.")
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.username = username
        self.timeout = timeout
        self._session = session or requests.Session()

    # Projects
    def get_projects(self) -> List[dict]:
        return self._request("GET", PROJECT_ENDPOINT) or []

    def get_project(self, project_id) -> List[dict]:
        return self._request("GET", PROJECT_ENDPOINT, params={"id": f"eq.{project_id}"}) or []

    def create_project(self, project: dict) -> dict:
        return self._single(self._request("POST", PROJECT_ENDPOINT, payload=project), "Project", None)

    def update_project(self, project_id, project: dict) -> dict:
        rows = self._request(
            "PATCH",
            PROJECT_ENDPOINT,
            params={"id": f"eq.{project_id}"},
            payload=project,
        )
        return self._single(rows, "Project", project_id)

    def delete_project(self, project_id) -> None:
        self._request("DELETE", PROJECT_ENDPOINT, params={"id": f"eq.{project_id}"})

    # Locations
    def get_locations(self) -> List[dict]:
        return self._request("GET", LOCATION_ENDPOINT) or []

    def get_locations_by_project_id(self, project_id) -> List[dict]:
        return self._request("GET", LOCATION_ENDPOINT, params={"project_id": f"eq.{project_id}"}) or []

    def get_location(self, location_id) -> List[dict]:
        return self._request("GET", LOCATION_ENDPOINT, params={"id": f"eq.{location_id}"}) or []

    def create_location(self, location: dict) -> dict:
        return self._single(self._request("POST", LOCATION_ENDPOINT, payload=location), "Location", None)

    def update_location(self, location_id, location: dict) -> dict:
        rows = self._request(
            "PATCH",
            LOCATION_ENDPOINT,
            params={"id": f"eq.{location_id}"},
            payload=location,
        )
        return self._single(rows, "Location", location_id)

    def delete_location(self, location_id) -> None:
        self._request("DELETE", LOCATION_ENDPOINT, params={"id": f"eq.{location_id}"})

    def _headers(self, method: str) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        if method in {"POST", "PATCH"}:
            headers["Prefer"] = "return=representation"
        return headers

    def _request(
        self,
        method: str,
        endpoint: str,
        *,
        params: Optional[Dict[str, str]] = None,
        payload: Optional[dict] = None,
    ) -> Any:
        url = f"{self.base_url}/{endpoint}"
        if payload is not None and self.username:
            payload = {**payload, "username": self.username}
        try:
            resp = self._session.request(
                method,
                url,
                params=params,
                json=payload,
                headers=self._headers(method),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise StoryPathServiceError(
                "StoryPath API unreachable",
                status_code=503,
                payload={"error": "api_unreachable", "detail": str(exc)},
            ) from exc

        if resp.status_code >= 400:
            raise StoryPathServiceError(
                f"StoryPath API returned {resp.status_code} for {method} /{endpoint}",
                status_code=resp.status_code,
                payload={"error": "api_error", "detail": resp.text[:300]},
            )
        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as exc:
            raise StoryPathServiceError(
                "StoryPath API returned invalid JSON",
                status_code=502,
                payload={"error": "invalid_response", "detail": resp.text[:300]},
            ) from exc

    @staticmethod
    def _single(rows: Any, kind: str, record_id) -> dict:
        # PostgREST answers writes with a list of affected rows.
        if isinstance(rows, dict):
            return rows
        if rows:
            return rows[0]
        if record_id is None:
            raise StoryPathServiceError(
                f"StoryPath API did not return the created {kind}",
                status_code=502,
                payload={"error": "invalid_response", "detail": f"empty {kind.lower()} representation"},
            )
        raise not_found(kind, record_id)
