"""Local SQLAlchemy store exposing the same interface as the StoryPath API."""

from __future__ import annotations

from typing import List, Optional

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from extensions import db
from models import LOCATION_FIELDS, PROJECT_FIELDS, Location, Project, coerce_int

from .errors import StoryPathServiceError, not_found


class SqlStoryPathStore:
    """Backs the authoring screens with SQLite when no API URL is configured.

    Singleton lookups return one-element lists so callers treat both
    backends the same way.
    """

    supports_concurrent_reads = False

    def __init__(self, username: Optional[str] = None):
        self.username = username

    def get_projects(self) -> List[dict]:
        rows = Project.query.order_by(Project.id.asc()).all()
        return [row.to_dict() for row in rows]

    def get_project(self, project_id) -> List[dict]:
        project = self._get(Project, project_id)
        return [project.to_dict()] if project else []

    def create_project(self, project: dict) -> dict:
        record = Project(username=self.username)
        _apply_fields(record, project, PROJECT_FIELDS)
        db.session.add(record)
        self._commit("creating project")
        return record.to_dict()

    def update_project(self, project_id, project: dict) -> dict:
        record = self._get(Project, project_id)
        if not record:
            raise not_found("Project", project_id)
        _apply_fields(record, project, PROJECT_FIELDS)
        self._commit(f"updating project {project_id}")
        return record.to_dict()

    def delete_project(self, project_id) -> None:
        record = self._get(Project, project_id)
        if not record:
            return
        db.session.delete(record)
        self._commit(f"deleting project {project_id}")

    def get_locations(self) -> List[dict]:
        rows = Location.query.order_by(Location.id.asc()).all()
        return [row.to_dict() for row in rows]

    def get_locations_by_project_id(self, project_id) -> List[dict]:
        pid = coerce_int(project_id)
        if pid is None:
            return []
        rows = Location.query.filter_by(project_id=pid).order_by(Location.id.asc()).all()
        return [row.to_dict() for row in rows]

    def get_location(self, location_id) -> List[dict]:
        location = self._get(Location, location_id)
        return [location.to_dict()] if location else []

    def create_location(self, location: dict) -> dict:
        self._require_project(location.get("project_id"))
        record = Location(username=self.username)
        _apply_fields(record, location, LOCATION_FIELDS)
        db.session.add(record)
        self._commit("creating location")
        return record.to_dict()

    def update_location(self, location_id, location: dict) -> dict:
        record = self._get(Location, location_id)
        if not record:
            raise not_found("Location", location_id)
        if "project_id" in location:
            self._require_project(location.get("project_id"))
        _apply_fields(record, location, LOCATION_FIELDS)
        self._commit(f"updating location {location_id}")
        return record.to_dict()

    def delete_location(self, location_id) -> None:
        record = self._get(Location, location_id)
        if not record:
            return
        db.session.delete(record)
        self._commit(f"deleting location {location_id}")

    @staticmethod
    def _get(model, record_id):
        pk = coerce_int(record_id)
        if pk is None:
            return None
        return db.session.get(model, pk)

    def _require_project(self, project_id) -> None:
        if self._get(Project, project_id) is None:
            raise StoryPathServiceError(
                f"Project {project_id} does not exist",
                status_code=409,
                payload={"error": "unknown_project", "detail": f"project_id {project_id!r} does not resolve"},
            )

    @staticmethod
    def _commit(context_message: str) -> None:
        try:
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            current_app.logger.error("StoryPath store error while %s: %s", context_message, exc)
            raise StoryPathServiceError(
                "Could not save to the local store",
                status_code=500,
                payload={"error": "store_error", "detail": str(exc)},
            ) from exc


def _apply_fields(record, payload: dict, fields) -> None:
    for key in fields:
        if key not in payload:
            continue
        value = payload[key]
        if key in {"project_id", "score_points"}:
            value = coerce_int(value)
            if key == "score_points" and value is None:
                value = 0
        elif key == "is_published":
            value = bool(value)
        setattr(record, key, value)
