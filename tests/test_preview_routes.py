from __future__ import annotations

import pytest


@pytest.fixture
def qr_project(fake_api):
    project = fake_api.add_project(
        title="Treasure Hunt",
        instructions="Find the chests.",
        initial_clue="Under the bridge.",
        homescreen_display="Display initial clue",
        participant_scoring="Number of Scanned QR Codes",
    )
    a = fake_api.add_location(
        project["id"],
        location_name="Bridge",
        clue="Listen for water.",
        location_content="<p><strong>Chest one</strong></p>",
    )
    b = fake_api.add_location(project["id"], location_name="Mill")
    return project, a, b


def _select(client, location_id, **extra):
    data = {"location_id": location_id, **extra}
    return client.post("/preview", data=data, headers={"Accept": "application/json"})


def test_preview_loading_without_data(client) -> None:
    resp = client.get("/preview")

    assert resp.status_code == 200
    assert b"Loading..." in resp.data


def test_preview_loading_when_fetch_fails(client, fake_api, qr_project) -> None:
    fake_api.fail("get_locations")

    resp = client.get("/preview")

    assert b"Loading..." in resp.data


def test_preview_renders_home_and_first_location(client, qr_project) -> None:
    resp = client.get("/preview")

    body = resp.get_data(as_text=True)
    assert "Treasure Hunt - Preview" in body
    assert "Find the chests." in body
    assert "Under the bridge." in body
    assert "Listen for water." in body
    assert "<p><strong>Chest one</strong></p>" in body
    assert 'id="preview-score">0<' in body
    assert 'id="preview-visited">0/2<' in body


def test_all_locations_home_screen(client, fake_api) -> None:
    project = fake_api.add_project(title="List Home", homescreen_display="Display all locations")
    fake_api.add_location(project["id"], location_name="North Gate")
    fake_api.add_location(project["id"], location_name="South Gate")

    body = client.get("/preview").get_data(as_text=True)

    assert "All Locations:" in body
    assert "<li>North Gate</li>" in body
    assert "<li>South Gate</li>" in body
    assert "Initial Clue:" not in body


def test_selecting_locations_scores_once_per_location(client, qr_project) -> None:
    _, a, b = qr_project
    client.get("/preview")

    _select(client, a["id"])
    _select(client, b["id"])
    resp = _select(client, a["id"])

    summary = resp.get_json()
    assert summary["score"] == 2
    assert summary["visited_count"] == 2
    assert summary["total_locations"] == 2
    assert summary["current_location_id"] == str(a["id"])


def test_locations_entered_scoring_uses_points(client, fake_api) -> None:
    project = fake_api.add_project(participant_scoring="Number of Locations Entered")
    a = fake_api.add_location(project["id"], location_name="A", score_points=10)
    b = fake_api.add_location(project["id"], location_name="B", score_points=5)
    client.get("/preview")

    _select(client, a["id"])
    assert _select(client, b["id"]).get_json()["score"] == 15
    assert _select(client, a["id"]).get_json()["score"] == 15


def test_unknown_location_leaves_session_unchanged(client, qr_project) -> None:
    _, a, _ = qr_project
    client.get("/preview")
    _select(client, a["id"])

    summary = _select(client, "does-not-exist").get_json()

    assert summary["score"] == 1
    assert summary["current_location_id"] == str(a["id"])


def test_fresh_preview_resets_the_session(client, qr_project) -> None:
    _, a, b = qr_project
    client.get("/preview")
    _select(client, a["id"])
    _select(client, b["id"])

    client.get("/preview")
    summary = _select(client, a["id"]).get_json()

    assert summary["score"] == 1
    assert summary["visited_count"] == 1


def test_html_select_renders_new_location(client, qr_project) -> None:
    _, _, b = qr_project
    client.get("/preview")

    resp = client.post("/preview", data={"location_id": b["id"]})

    body = resp.get_data(as_text=True)
    assert resp.status_code == 200
    assert "<h3>Mill</h3>" in body
    assert 'id="preview-score">1<' in body
    assert 'id="preview-visited">1/2<' in body


def test_scoped_preview_uses_project_locations(client, fake_api, qr_project) -> None:
    other = fake_api.add_project(title="Other Tour", participant_scoring="Number of Locations Entered")
    stop = fake_api.add_location(other["id"], location_name="Only Stop", score_points=4)

    body = client.get(f"/preview?project_id={other['id']}").get_data(as_text=True)
    assert "Other Tour - Preview" in body
    assert "Bridge" not in body

    summary = _select(client, stop["id"], project_id=other["id"]).get_json()
    assert summary["score"] == 4
    assert summary["total_locations"] == 1
    assert ("get_locations_by_project_id", str(other["id"])) in fake_api.calls


def test_scopes_keep_separate_sessions(client, fake_api, qr_project) -> None:
    project, a, _ = qr_project
    client.get("/preview")
    client.get(f"/preview?project_id={project['id']}")

    _select(client, a["id"])
    scoped = _select(client, a["id"], project_id=project["id"]).get_json()

    assert scoped["score"] == 1
    assert scoped["visited_count"] == 1


def test_json_select_while_loading_reports_unavailable(client) -> None:
    resp = _select(client, 1)

    assert resp.status_code == 503
    assert resp.get_json()["status"] == "loading"


def test_deleting_a_visited_location_mid_session(client, fake_api, qr_project) -> None:
    _, a, b = qr_project
    client.get("/preview")
    _select(client, b["id"])
    fake_api.delete_location(b["id"])

    summary = _select(client, a["id"]).get_json()

    assert summary["visited_count"] == 1
    assert summary["total_locations"] == 1
    assert summary["score"] == 1
