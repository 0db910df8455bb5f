from __future__ import annotations

from typing import Any, Dict, Optional


class StoryPathServiceError(Exception):
    """Raised when a StoryPath data operation fails."""

    def __init__(self, message: str, status_code: int = 400, payload: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload or {"error": message}


def not_found(kind: str, record_id) -> StoryPathServiceError:
    return StoryPathServiceError(
        f"{kind} {record_id} not found",
        status_code=404,
        payload={"error": "not_found", "detail": f"{kind} {record_id} not found"},
    )
