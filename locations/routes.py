"""Location list, location editor and QR code screens."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Optional, Tuple

from flask import (
    Blueprint,
    Response,
    abort,
    current_app,
    flash,
    redirect,
    render_template,
    request,
    url_for,
)

from content_sanitizer import sanitize_location_content
from models import TRIGGER_CHOICES, coerce_int
from storage import StoryPathServiceError, first_or_none, get_storypath_client

from .qr import QR_DISPLAY_SIZE, qr_payload, render_location_qr_png

REQUIRED_FIELDS = (
    ("location_name", "Location name is required."),
    ("location_trigger", "Location trigger is required."),
    ("location_position", "Location position is required."),
)
TEXT_FIELDS = (
    "location_name",
    "location_trigger",
    "location_position",
    "clue",
    "location_content",
)
MISSING_PROJECT_MESSAGE = "Project ID is missing! Choose the project this location belongs to."
ORPHANED_LOCATION_MESSAGE = "This location's project no longer exists. Choose another project before saving."

locations_bp = Blueprint("locations", __name__)


@locations_bp.get("/locations")
def locations_without_project():
    project_id = (request.args.get("project_id") or "").strip()
    if project_id:
        return redirect(url_for("locations.list_locations", project_id=project_id))
    flash("Choose a project to see its locations.", "warning")
    return redirect(url_for("projects.list_projects"))


@locations_bp.get("/project/<project_id>/locations")
def list_locations(project_id: str):
    client = get_storypath_client()

    def fetch_locations():
        return client.get_locations_by_project_id(project_id)

    def fetch_project_name():
        project = first_or_none(client.get_project(project_id))
        return (project or {}).get("title") or ""

    (locations, locations_error), (project_name, project_error) = _fetch_pair(
        client,
        (fetch_locations, "Failed to load locations."),
        (fetch_project_name, "Failed to load project details."),
    )
    errors = [message for message in (locations_error, project_error) if message]

    qr_location = None
    qr_id = (request.args.get("qr") or "").strip()
    if qr_id:
        qr_location = next((loc for loc in locations or [] if str(loc.get("id")) == qr_id), None)

    return render_template(
        "locations/list.html",
        project_id=project_id,
        project_name=project_name or "",
        locations=locations or [],
        errors=errors,
        qr_location=qr_location,
        qr_payload=qr_payload(qr_location["id"]) if qr_location else None,
        qr_size=QR_DISPLAY_SIZE,
    )


@locations_bp.post("/location/<location_id>/delete")
def delete_location(location_id: str):
    project_id = (request.form.get("project_id") or "").strip()
    try:
        get_storypath_client().delete_location(location_id)
        flash("Location deleted.", "success")
    except StoryPathServiceError as exc:
        current_app.logger.error("Failed to delete location %s: %s", location_id, exc)
        flash("Failed to delete location.", "error")
    if project_id:
        return redirect(url_for("locations.list_locations", project_id=project_id))
    return redirect(url_for("projects.list_projects"))


@locations_bp.get("/location/<location_id>/qr.png")
def location_qr_code(location_id: str):
    png = render_location_qr_png(location_id)
    response = Response(png, mimetype="image/png")
    response.headers["Cache-Control"] = "no-store"
    return response


@locations_bp.route("/editlocations", methods=["GET", "POST"])
@locations_bp.route("/edit-location/<location_id>", methods=["GET", "POST"])
def edit_location(location_id: Optional[str] = None):
    client = get_storypath_client()
    form_values = _empty_form_values()
    errors: list[str] = []
    status_code = 200
    choose_project = False

    if request.method == "GET":
        if location_id:
            try:
                location = first_or_none(client.get_location(location_id))
            except StoryPathServiceError as exc:
                current_app.logger.error("Failed to fetch location %s: %s", location_id, exc)
                errors.append("Could not load this location. Please try again.")
                status_code = 502
            else:
                if location is None:
                    abort(404)
                form_values = _form_values_from_location(location)
                if not form_values["project_id"] or not _project_resolves(client, form_values["project_id"]):
                    current_app.logger.warning("Location %s belongs to a missing project", location_id)
                    errors.append(ORPHANED_LOCATION_MESSAGE)
                    choose_project = True
        else:
            form_values["project_id"] = (request.args.get("project_id") or "").strip()

    if request.method == "POST":
        form_values = _form_values_from_request()
        payload, errors = _validate_and_normalize(form_values)
        if not form_values["project_id"]:
            choose_project = True
        elif not errors and not _project_resolves(client, payload["project_id"]):
            errors.append("The selected project no longer exists.")
            choose_project = True
        if errors:
            status_code = 400
        else:
            try:
                if location_id:
                    client.update_location(location_id, payload)
                else:
                    client.create_location(payload)
            except StoryPathServiceError as exc:
                current_app.logger.error("Failed to save location %s: %s", location_id or "(new)", exc)
                errors.append("Could not save the location. Please try again.")
                status_code = 502
            else:
                flash("Location saved.", "success")
                return redirect(url_for("locations.list_locations", project_id=payload["project_id"]))

    projects = []
    new_without_project = not form_values["project_id"] and not location_id
    if choose_project or new_without_project:
        projects = _project_choices(client)
        if (
            new_without_project
            and projects
            and current_app.config.get("STORYPATH_LOCATION_DEFAULT_TO_FIRST_PROJECT")
        ):
            form_values["project_id"] = str(projects[0].get("id"))

    return (
        render_template(
            "locations/form.html",
            form_values=form_values,
            errors=errors,
            location_id=location_id,
            is_edit=bool(location_id),
            projects=projects,
            trigger_choices=TRIGGER_CHOICES,
        ),
        status_code,
    )


def _fetch_pair(client, first: Tuple[Callable, str], second: Tuple[Callable, str]):
    """Run two independent reads, concurrently when the client allows it.

    Each result is ``(value, error_message)``; one failing read does not
    discard the other.
    """

    def guarded(fetch: Callable, message: str):
        try:
            return fetch(), None
        except StoryPathServiceError as exc:
            return None, (message, exc)

    if getattr(client, "supports_concurrent_reads", False):
        with ThreadPoolExecutor(max_workers=2) as pool:
            futures = [pool.submit(guarded, fetch, message) for fetch, message in (first, second)]
            results = [future.result() for future in futures]
    else:
        results = [guarded(fetch, message) for fetch, message in (first, second)]

    # Log from the request thread; worker threads have no app context.
    resolved = []
    for value, failure in results:
        if failure:
            message, exc = failure
            current_app.logger.error("%s %s", message, exc)
            resolved.append((value, message))
        else:
            resolved.append((value, None))
    return resolved


def _project_choices(client) -> list[dict]:
    try:
        return client.get_projects()
    except StoryPathServiceError as exc:
        current_app.logger.error("Failed to fetch projects for location editor: %s", exc)
        return []


def _project_resolves(client, project_id) -> bool:
    try:
        return first_or_none(client.get_project(project_id)) is not None
    except StoryPathServiceError as exc:
        current_app.logger.error("Failed to verify project %s: %s", project_id, exc)
        return False


def _empty_form_values() -> dict:
    return {
        "project_id": "",
        "location_name": "",
        "location_trigger": "",
        "location_position": "",
        "score_points": "0",
        "clue": "",
        "location_content": "",
    }


def _form_values_from_location(location: dict) -> dict:
    values = _empty_form_values()
    for key in TEXT_FIELDS:
        values[key] = location.get(key) or ""
    project_id = location.get("project_id")
    values["project_id"] = "" if project_id is None else str(project_id)
    values["score_points"] = str(coerce_int(location.get("score_points")) or 0)
    return values


def _form_values_from_request() -> dict:
    values = _empty_form_values()
    for key in values:
        values[key] = request.form.get(key, "").strip()
    return values


def _validate_and_normalize(form_values: dict):
    errors: list[str] = []
    if not form_values["project_id"]:
        current_app.logger.error("Project ID is missing! Location was not saved.")
        errors.append(MISSING_PROJECT_MESSAGE)
    errors.extend(message for key, message in REQUIRED_FIELDS if not form_values[key])

    score_points = coerce_int(form_values["score_points"])
    if score_points is None:
        errors.append("Points for reaching the location are required.")
    elif score_points < 0:
        errors.append("Points for reaching the location cannot be negative.")

    project_id = coerce_int(form_values["project_id"])
    payload = {
        "project_id": project_id if project_id is not None else form_values["project_id"],
        "location_name": form_values["location_name"],
        "location_trigger": form_values["location_trigger"],
        "location_position": form_values["location_position"],
        "score_points": score_points or 0,
        "clue": form_values["clue"],
        "location_content": sanitize_location_content(form_values["location_content"]),
    }
    return payload, errors
