"""Database models for the local StoryPath store."""

from __future__ import annotations

from typing import Optional

from extensions import db

HOMESCREEN_INITIAL_CLUE = "Display initial clue"
HOMESCREEN_ALL_LOCATIONS = "Display all locations"
HOMESCREEN_CHOICES = [HOMESCREEN_INITIAL_CLUE, HOMESCREEN_ALL_LOCATIONS]

SCORING_NOT_SCORED = "Not Scored"
SCORING_QR_CODES = "Number of Scanned QR Codes"
SCORING_LOCATIONS_ENTERED = "Number of Locations Entered"
SCORING_CHOICES = [SCORING_NOT_SCORED, SCORING_QR_CODES, SCORING_LOCATIONS_ENTERED]

TRIGGER_LOCATION_ENTRY = "Location Entry"
TRIGGER_QR_CODE = "QR Code Scan"
TRIGGER_BOTH = "Both Location Entry and QR Code Scan"
TRIGGER_CHOICES = [
    (TRIGGER_LOCATION_ENTRY, "Location Entry"),
    (TRIGGER_QR_CODE, "QR Code Scan"),
    (TRIGGER_BOTH, "Both"),
]

PROJECT_FIELDS = (
    "title",
    "description",
    "instructions",
    "initial_clue",
    "homescreen_display",
    "participant_scoring",
    "is_published",
)

LOCATION_FIELDS = (
    "project_id",
    "location_name",
    "location_trigger",
    "location_position",
    "score_points",
    "clue",
    "location_content",
)


class Project(db.Model):
    """An authored tour or hunt with its participant display and scoring settings."""

    __tablename__ = "project"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    instructions = db.Column(db.Text, nullable=True)
    initial_clue = db.Column(db.Text, nullable=True)
    homescreen_display = db.Column(db.String(50), nullable=False)
    participant_scoring = db.Column(db.String(50), nullable=False)
    is_published = db.Column(db.Boolean, default=False, nullable=False)
    username = db.Column(db.String(120), nullable=True)

    def to_dict(self) -> dict:
        """Serialize to the same record shape the StoryPath API returns."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "instructions": self.instructions,
            "initial_clue": self.initial_clue,
            "homescreen_display": self.homescreen_display,
            "participant_scoring": self.participant_scoring,
            "is_published": bool(self.is_published),
            "username": self.username,
        }

    def __repr__(self) -> str:  # pragma: no cover - helper for shell debugging
        return f"<Project id={self.id} title={self.title!r}>"


class Location(db.Model):
    """A stop within a project.

    ``project_id`` is a plain indexed column rather than a foreign key:
    deleting a project leaves its locations in place.
    """

    __tablename__ = "location"

    id = db.Column(db.Integer, primary_key=True)
    project_id = db.Column(db.Integer, index=True, nullable=False)
    location_name = db.Column(db.String(200), nullable=False)
    location_trigger = db.Column(db.String(50), nullable=False)
    location_position = db.Column(db.String(100), nullable=True)
    score_points = db.Column(db.Integer, default=0, nullable=False)
    clue = db.Column(db.Text, nullable=True)
    location_content = db.Column(db.Text, nullable=True)
    username = db.Column(db.String(120), nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "project_id": self.project_id,
            "location_name": self.location_name,
            "location_trigger": self.location_trigger,
            "location_position": self.location_position,
            "score_points": self.score_points,
            "clue": self.clue,
            "location_content": self.location_content,
            "username": self.username,
        }

    def __repr__(self) -> str:  # pragma: no cover - helper for shell debugging
        return f"<Location id={self.id} project_id={self.project_id} name={self.location_name!r}>"


def coerce_int(value) -> Optional[int]:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
