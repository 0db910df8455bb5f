from __future__ import annotations

import argparse
import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from storage import StoryPathServiceError, first_or_none
from storage.rest import StoryPathRestClient

from .simulator import PlaythroughSimulator


def load_export(path: Path) -> Tuple[Optional[dict], List[dict]]:
    """Read ``{"project": {...}, "locations": [...]}`` from a JSON export."""
    if not path.exists():
        raise FileNotFoundError(f"Export file not found: {path}")
    with path.open("r", encoding="utf-8") as handle:
        payload: Dict[str, Any] = json.load(handle)
    project = payload.get("project")
    if isinstance(project, list):
        project = first_or_none(project)
    return project, list(payload.get("locations") or [])


def load_from_api(client: StoryPathRestClient, project_id: Optional[str]) -> Tuple[Optional[dict], List[dict]]:
    if project_id:
        return first_or_none(client.get_project(project_id)), client.get_locations_by_project_id(project_id)
    return first_or_none(client.get_projects()), client.get_locations()


def command_summary(simulator: PlaythroughSimulator) -> None:
    home = simulator.home_screen()
    project = simulator.project or {}
    print("== StoryPath Project Summary ==")
    print(f"Title: {home['title'] or 'Unknown'}")
    print(f"Scoring: {project.get('participant_scoring') or 'Not Scored'}")
    print(f"Home screen: {project.get('homescreen_display') or 'n/a'}")
    if home["show_initial_clue"]:
        print(f"Initial clue: {home['initial_clue'] or '(none)'}")
    print(f"Locations: {len(simulator.locations)}")
    for location in simulator.locations:
        print(
            f"  - [{location.get('id')}] {location.get('location_name')} "
            f"({location.get('location_trigger')}, {location.get('score_points') or 0} pts)"
        )


def command_replay(simulator: PlaythroughSimulator, location_ids: Sequence[str]) -> int:
    if not location_ids:
        print("Nothing to replay: pass one or more location ids.")
        return 1
    for location_id in location_ids:
        before = simulator.score
        if not simulator.select_location(location_id):
            print(f"  ? {location_id}: unknown location, ignored")
            continue
        location = simulator.current_location or {}
        gained = simulator.score - before
        print(f"  • {location.get('location_name')} (+{gained}) -> score {simulator.score}")

    summary = simulator.summary()
    print()
    print(f"Final score: {summary['score']}")
    print(f"Locations visited: {summary['visited_count']}/{summary['total_locations']}")
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Replay a StoryPath project the way a participant would.")
    parser.add_argument("command", choices=["summary", "replay"], help="Command to run")
    parser.add_argument("location_ids", nargs="*", help="Location ids to visit, in order (replay only)")
    parser.add_argument("--export", type=Path, help="JSON export with 'project' and 'locations' keys")
    parser.add_argument("--project-id", help="Preview a single project and only its locations")
    parser.add_argument("--api-url", default=os.environ.get("STORYPATH_API_URL"), help="StoryPath API base URL")
    parser.add_argument("--token", default=os.environ.get("STORYPATH_API_TOKEN"), help="API bearer token")
    args = parser.parse_args(argv)

    if args.export:
        project, locations = load_export(args.export)
    elif args.api_url:
        client = StoryPathRestClient(args.api_url, token=args.token)
        try:
            project, locations = load_from_api(client, args.project_id)
        except StoryPathServiceError as exc:
            print(f"❌ Could not load project data: {exc}")
            return 2
    else:
        parser.error("either --export or --api-url (or STORYPATH_API_URL) is required")

    simulator = PlaythroughSimulator(project, locations)
    if not simulator.is_ready:
        print("⚠️ Project or locations missing; nothing to preview.")
        return 2

    if args.command == "summary":
        command_summary(simulator)
        return 0
    return command_replay(simulator, args.location_ids)


if __name__ == "__main__":
    raise SystemExit(main())
