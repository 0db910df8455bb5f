"""Test configuration for the StoryPath web app."""

from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from typing import Any, Callable, Optional

import pytest

from app import create_app
from storage import StoryPathServiceError


class FakeStoryPathClient:
    """In-memory stand-in for the StoryPath API that records every call."""

    supports_concurrent_reads = False

    def __init__(self) -> None:
        self.projects: dict[int, dict] = {}
        self.locations: dict[int, dict] = {}
        self.calls: list[tuple] = []
        self.failures: dict[str, StoryPathServiceError] = {}
        self._next_id = 1

    def fail(self, method: str, status_code: int = 503) -> None:
        self.failures[method] = StoryPathServiceError(
            f"{method} failed", status_code=status_code, payload={"error": "api_unreachable"}
        )

    def _record(self, method: str, *args: Any) -> None:
        self.calls.append((method, *args))
        if method in self.failures:
            raise self.failures[method]

    def called(self, method: str) -> list[tuple]:
        return [call for call in self.calls if call[0] == method]

    def _new_id(self) -> int:
        value = self._next_id
        self._next_id += 1
        return value

    @staticmethod
    def _int(value: Any) -> Optional[int]:
        try:
            return int(value)
        except (TypeError, ValueError):
            return None

    def add_project(self, **fields: Any) -> dict:
        record = {
            "id": self._new_id(),
            "title": "Campus Tour",
            "description": "",
            "instructions": "Walk around.",
            "initial_clue": "",
            "homescreen_display": "Display all locations",
            "participant_scoring": "Not Scored",
            "is_published": False,
        }
        record.update(fields)
        self.projects[record["id"]] = record
        return record

    def add_location(self, project_id: int, **fields: Any) -> dict:
        record = {
            "id": self._new_id(),
            "project_id": project_id,
            "location_name": "Stop",
            "location_trigger": "Location Entry",
            "location_position": "-27.4975, 153.0137",
            "score_points": 0,
            "clue": "",
            "location_content": "",
        }
        record.update(fields)
        self.locations[record["id"]] = record
        return record

    def get_projects(self) -> list[dict]:
        self._record("get_projects")
        return [dict(p) for p in self.projects.values()]

    def get_project(self, project_id) -> list[dict]:
        self._record("get_project", project_id)
        project = self.projects.get(self._int(project_id))
        return [dict(project)] if project else []

    def create_project(self, project: dict) -> dict:
        self._record("create_project", project)
        return self.add_project(**project)

    def update_project(self, project_id, project: dict) -> dict:
        self._record("update_project", project_id, project)
        record = self.projects[self._int(project_id)]
        record.update(project)
        return dict(record)

    def delete_project(self, project_id) -> None:
        self._record("delete_project", project_id)
        self.projects.pop(self._int(project_id), None)

    def get_locations(self) -> list[dict]:
        self._record("get_locations")
        return [dict(loc) for loc in self.locations.values()]

    def get_locations_by_project_id(self, project_id) -> list[dict]:
        self._record("get_locations_by_project_id", project_id)
        pid = self._int(project_id)
        return [dict(loc) for loc in self.locations.values() if loc["project_id"] == pid]

    def get_location(self, location_id) -> list[dict]:
        self._record("get_location", location_id)
        location = self.locations.get(self._int(location_id))
        return [dict(location)] if location else []

    def create_location(self, location: dict) -> dict:
        self._record("create_location", location)
        fields = dict(location)
        project_id = fields.pop("project_id")
        return self.add_location(project_id, **fields)

    def update_location(self, location_id, location: dict) -> dict:
        self._record("update_location", location_id, location)
        record = self.locations[self._int(location_id)]
        record.update(location)
        return dict(record)

    def delete_location(self, location_id) -> None:
        self._record("delete_location", location_id)
        self.locations.pop(self._int(location_id), None)


def _test_config(**extra: Any) -> dict:
    config = {
        "TESTING": True,
        "SECRET_KEY": "test-secret",
        "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
        "STORYPATH_API_URL": None,
        "STORYPATH_API_CLIENT": None,
        "STORYPATH_LOCATION_DEFAULT_TO_FIRST_PROJECT": False,
    }
    config.update(extra)
    return config


@pytest.fixture
def app():
    """App backed by the local SQLite store."""
    return create_app(_test_config())


@pytest.fixture
def store(app):
    with app.app_context():
        yield app.config["STORYPATH_API_CLIENT"]


@pytest.fixture
def fake_api() -> FakeStoryPathClient:
    return FakeStoryPathClient()


@pytest.fixture
def make_fake_app(fake_api) -> Callable[..., Any]:
    def factory(**extra: Any):
        return create_app(_test_config(STORYPATH_API_CLIENT=fake_api, **extra))

    return factory


@pytest.fixture
def fake_app(make_fake_app):
    return make_fake_app()


@pytest.fixture
def client(fake_app):
    return fake_app.test_client()
