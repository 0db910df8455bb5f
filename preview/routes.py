from __future__ import annotations

from typing import Optional, Tuple

from flask import Blueprint, current_app, jsonify, render_template, request, session

from storage import StoryPathServiceError, first_or_none, get_storypath_client

from .simulator import PlaythroughSimulator, SessionState

SESSION_KEY_PREFIX = "preview_state"

preview_bp = Blueprint("preview", __name__)


def _scope_key(project_id: Optional[str]) -> str:
    return f"{SESSION_KEY_PREFIX}:{project_id or 'all'}"


def _load_preview_data(project_id: Optional[str]) -> Tuple[Optional[dict], list]:
    """Fetch the previewed project and its locations; failures leave them empty."""
    client = get_storypath_client()
    project = None
    locations: list = []
    try:
        if project_id:
            project = first_or_none(client.get_project(project_id))
        else:
            project = first_or_none(client.get_projects())
    except StoryPathServiceError as exc:
        current_app.logger.warning("Preview could not load project %s: %s", project_id or "(first)", exc)

    try:
        if project_id:
            locations = client.get_locations_by_project_id(project_id)
        else:
            locations = client.get_locations()
    except StoryPathServiceError as exc:
        current_app.logger.warning("Preview could not load locations for %s: %s", project_id or "(all)", exc)
    return project, locations or []


def _wants_json() -> bool:
    accepts = request.accept_mimetypes
    return (
        request.headers.get("X-Requested-With") == "XMLHttpRequest"
        or accepts["application/json"] > accepts["text/html"]
    )


def _render(simulator: PlaythroughSimulator, project_id: Optional[str]):
    if not simulator.is_ready:
        return render_template("preview/loading.html")
    return render_template(
        "preview/preview.html",
        project=simulator.project,
        project_id=project_id,
        locations=simulator.locations,
        home=simulator.home_screen(),
        active=simulator.active_location(),
        summary=simulator.summary(),
    )


@preview_bp.get("/preview")
def preview():
    # A fresh GET is a new session: visits and score start over.
    project_id = (request.args.get("project_id") or "").strip() or None
    project, locations = _load_preview_data(project_id)
    simulator = PlaythroughSimulator(project, locations)
    if simulator.is_ready:
        session[_scope_key(project_id)] = simulator.state.to_dict()
    return _render(simulator, project_id)


@preview_bp.post("/preview")
def select_location():
    project_id = (request.values.get("project_id") or "").strip() or None
    location_id = (request.form.get("location_id") or "").strip()
    if not location_id:
        payload = request.get_json(silent=True) or {}
        location_id = str(payload.get("location_id") or "").strip()

    project, locations = _load_preview_data(project_id)
    key = _scope_key(project_id)
    simulator = PlaythroughSimulator(project, locations, SessionState.from_dict(session.get(key)))

    if simulator.is_ready:
        if not simulator.select_location(location_id):
            current_app.logger.info("Preview ignored unknown location id %r", location_id)
        session[key] = simulator.state.to_dict()

    if _wants_json():
        status_code = 200 if simulator.is_ready else 503
        return jsonify(simulator.summary()), status_code
    return _render(simulator, project_id)
