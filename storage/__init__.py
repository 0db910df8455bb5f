"""Data access for projects and locations (StoryPath API or local SQLite)."""

from __future__ import annotations

from typing import Any, Optional, Sequence

from flask import current_app

from .errors import StoryPathServiceError
from .rest import StoryPathRestClient
from .sql import SqlStoryPathStore

CLIENT_CONFIG_KEY = "STORYPATH_API_CLIENT"


def build_storypath_client(config) -> Any:
    """Pick the REST client when an API URL is configured, else the local store."""
    base_url = config.get("STORYPATH_API_URL")
    username = config.get("STORYPATH_USERNAME")
    if base_url:
        return StoryPathRestClient(
            base_url,
            token=config.get("STORYPATH_API_TOKEN"),
            username=username,
            timeout=config.get("STORYPATH_API_TIMEOUT", 10),
        )
    return SqlStoryPathStore(username=username)


def get_storypath_client():
    client = current_app.config.get(CLIENT_CONFIG_KEY)
    if client is None:
        raise StoryPathServiceError(
            "StoryPath data store unavailable",
            status_code=503,
            payload={"error": "store_unavailable"},
        )
    return client


def first_or_none(rows: Optional[Sequence[dict]]) -> Optional[dict]:
    """Unwrap the one-element list returned by singleton lookups."""
    if not rows:
        return None
    return rows[0]


__all__ = [
    "CLIENT_CONFIG_KEY",
    "SqlStoryPathStore",
    "StoryPathRestClient",
    "StoryPathServiceError",
    "build_storypath_client",
    "first_or_none",
    "get_storypath_client",
]
