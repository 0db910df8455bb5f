"""Participant playthrough simulation used by the Preview screen.

A preview session tracks which locations the author has "visited", keeps a
running score under the project's scoring policy, and remembers which
location is on screen. Session state is an immutable :class:`SessionState`;
every transition builds a new value, so a visit and its score contribution
are always applied together and only once per location id.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Sequence, Tuple

from models import (
    HOMESCREEN_INITIAL_CLUE,
    SCORING_LOCATIONS_ENTERED,
    SCORING_QR_CODES,
    coerce_int,
)

STATUS_LOADING = "loading"
STATUS_READY = "ready"


def _key(location_id: Any) -> str:
    # Ids arrive as ints from the store and as strings from form posts.
    return str(location_id)


@dataclass(frozen=True)
class SessionState:
    current_location_id: Optional[str] = None
    visited_location_ids: Tuple[str, ...] = field(default_factory=tuple)
    score: int = 0

    def to_dict(self) -> dict:
        return {
            "current_location_id": self.current_location_id,
            "visited_location_ids": list(self.visited_location_ids),
            "score": self.score,
        }

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> Optional["SessionState"]:
        if not isinstance(data, dict):
            return None
        visited = data.get("visited_location_ids") or []
        current = data.get("current_location_id")
        return cls(
            current_location_id=_key(current) if current is not None else None,
            visited_location_ids=tuple(dict.fromkeys(_key(v) for v in visited)),
            score=max(0, coerce_int(data.get("score")) or 0),
        )


def score_for_visit(scoring_policy: Optional[str], location: dict) -> int:
    """Points a first visit to ``location`` earns under ``scoring_policy``."""
    if scoring_policy == SCORING_QR_CODES:
        return 1
    if scoring_policy == SCORING_LOCATIONS_ENTERED:
        # The editor rejects negative points; rows stored before that check may still hold them.
        return max(0, coerce_int(location.get("score_points")) or 0)
    return 0


class PlaythroughSimulator:
    """Replays a project's locations the way a participant would reach them."""

    def __init__(
        self,
        project: Optional[dict],
        locations: Optional[Sequence[dict]],
        state: Optional[SessionState] = None,
    ):
        self.project = project
        self.locations: List[dict] = list(locations or [])
        self._by_id: Dict[str, dict] = {_key(loc.get("id")): loc for loc in self.locations}
        self.state = self._restore(state)

    def _restore(self, state: Optional[SessionState]) -> SessionState:
        if not self.locations:
            return SessionState()
        first_id = _key(self.locations[0].get("id"))
        if state is None:
            return SessionState(current_location_id=first_id)
        known = tuple(v for v in state.visited_location_ids if v in self._by_id)
        if known != state.visited_location_ids:
            # Locations deleted mid-session take their visits and points with them.
            scoring = (self.project or {}).get("participant_scoring")
            state = replace(
                state,
                visited_location_ids=known,
                score=sum(score_for_visit(scoring, self._by_id[v]) for v in known),
            )
        if state.current_location_id in self._by_id:
            return state
        return replace(state, current_location_id=first_id)

    @property
    def status(self) -> str:
        if not self.project or not self.locations:
            return STATUS_LOADING
        return STATUS_READY

    @property
    def is_ready(self) -> bool:
        return self.status == STATUS_READY

    @property
    def score(self) -> int:
        return self.state.score

    @property
    def visited_location_ids(self) -> Tuple[str, ...]:
        return self.state.visited_location_ids

    @property
    def current_location(self) -> Optional[dict]:
        if self.state.current_location_id is None:
            return None
        return self._by_id.get(self.state.current_location_id)

    def find_location(self, location_id: Any) -> Optional[dict]:
        if location_id is None:
            return None
        return self._by_id.get(_key(location_id))

    def select_location(self, location_id: Any) -> bool:
        """Show the chosen location and record the visit.

        Returns False, leaving the session untouched, when the id is unknown.
        """
        location = self.find_location(location_id)
        if location is None:
            return False
        selected = replace(self.state, current_location_id=_key(location.get("id")))
        self.state = self._visit(selected, location)
        return True

    def track_visit(self, location: dict) -> bool:
        """Record a visit; returns True only for a location's first visit."""
        before = self.state
        self.state = self._visit(before, location)
        return self.state is not before

    def _visit(self, state: SessionState, location: dict) -> SessionState:
        location_id = _key(location.get("id"))
        if location_id in state.visited_location_ids:
            return state
        scoring = (self.project or {}).get("participant_scoring")
        return replace(
            state,
            visited_location_ids=state.visited_location_ids + (location_id,),
            score=state.score + score_for_visit(scoring, location),
        )

    def home_screen(self) -> dict:
        project = self.project or {}
        show_clue = project.get("homescreen_display") == HOMESCREEN_INITIAL_CLUE
        return {
            "title": project.get("title") or "",
            "instructions": project.get("instructions") or "",
            "show_initial_clue": show_clue,
            "initial_clue": project.get("initial_clue") if show_clue else None,
            "location_names": [] if show_clue else [loc.get("location_name") for loc in self.locations],
        }

    def active_location(self) -> Optional[dict]:
        location = self.current_location
        if location is None:
            return None
        return {
            "id": location.get("id"),
            "location_name": location.get("location_name"),
            "location_trigger": location.get("location_trigger"),
            "location_position": location.get("location_position"),
            "clue": location.get("clue") or None,
            "location_content": location.get("location_content") or "",
        }

    def summary(self) -> dict:
        return {
            "status": self.status,
            "score": self.state.score,
            "visited_count": len(self.state.visited_location_ids),
            "total_locations": len(self.locations),
            "visited_location_ids": list(self.state.visited_location_ids),
            "current_location_id": self.state.current_location_id,
        }
