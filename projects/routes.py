"""Project list and project editor screens."""

from __future__ import annotations

from typing import Optional

from flask import Blueprint, abort, current_app, flash, redirect, render_template, request, url_for

from models import HOMESCREEN_CHOICES, SCORING_CHOICES
from storage import StoryPathServiceError, first_or_none, get_storypath_client

REQUIRED_FIELDS = (
    ("title", "Title is required."),
    ("homescreen_display", "Homescreen display is required."),
    ("participant_scoring", "Participant scoring is required."),
)
TEXT_FIELDS = (
    "title",
    "description",
    "instructions",
    "initial_clue",
    "homescreen_display",
    "participant_scoring",
)

projects_bp = Blueprint("projects", __name__)


@projects_bp.get("/project")
def list_projects():
    projects: list[dict] = []
    try:
        projects = get_storypath_client().get_projects()
    except StoryPathServiceError as exc:
        current_app.logger.error("Failed to fetch projects: %s", exc)
        flash("Could not load your projects. Please try again.", "error")
    return render_template("projects/list.html", projects=projects)


@projects_bp.post("/project/<project_id>/delete")
def delete_project(project_id: str):
    try:
        get_storypath_client().delete_project(project_id)
        flash("Project deleted.", "success")
    except StoryPathServiceError as exc:
        current_app.logger.error("Failed to delete project %s: %s", project_id, exc)
        flash("Could not delete the project. Please try again.", "error")
    return redirect(url_for("projects.list_projects"))


@projects_bp.route("/edit", methods=["GET", "POST"])
@projects_bp.route("/edit/<project_id>", methods=["GET", "POST"])
def edit_project(project_id: Optional[str] = None):
    client = get_storypath_client()
    form_values = _empty_form_values()
    errors: list[str] = []
    status_code = 200

    if request.method == "GET" and project_id:
        try:
            project = first_or_none(client.get_project(project_id))
        except StoryPathServiceError as exc:
            current_app.logger.error("Failed to fetch project %s: %s", project_id, exc)
            errors.append("Could not load this project. Please try again.")
            status_code = 502
        else:
            if project is None:
                abort(404)
            form_values = _form_values_from_project(project)

    if request.method == "POST":
        form_values = _form_values_from_request()
        payload, errors = _validate_and_normalize(form_values)
        if errors:
            status_code = 400
        else:
            try:
                if project_id:
                    client.update_project(project_id, payload)
                else:
                    client.create_project(payload)
            except StoryPathServiceError as exc:
                current_app.logger.error("Failed to save the project %s: %s", project_id or "(new)", exc)
                errors.append("Could not save the project. Please try again.")
                status_code = 502
            else:
                flash("Project saved.", "success")
                return redirect(url_for("projects.list_projects"))

    return (
        render_template(
            "projects/form.html",
            form_values=form_values,
            errors=errors,
            project_id=project_id,
            is_edit=bool(project_id),
            homescreen_choices=HOMESCREEN_CHOICES,
            scoring_choices=SCORING_CHOICES,
        ),
        status_code,
    )


def _empty_form_values() -> dict:
    return {
        "title": "",
        "description": "",
        "instructions": "",
        "initial_clue": "",
        "homescreen_display": "",
        "participant_scoring": "",
        "is_published": False,
    }


def _form_values_from_project(project: dict) -> dict:
    values = _empty_form_values()
    for key in TEXT_FIELDS:
        values[key] = project.get(key) or ""
    values["is_published"] = bool(project.get("is_published"))
    return values


def _form_values_from_request() -> dict:
    values = _empty_form_values()
    for key in TEXT_FIELDS:
        values[key] = request.form.get(key, "").strip()
    values["is_published"] = bool(request.form.get("is_published"))
    return values


def _validate_and_normalize(form_values: dict):
    errors = [message for key, message in REQUIRED_FIELDS if not form_values[key]]
    payload = {key: form_values[key] for key in TEXT_FIELDS}
    payload["is_published"] = bool(form_values["is_published"])
    return payload, errors
