"""Preview package: the playthrough simulator and its screen."""

from .routes import preview_bp
from .simulator import PlaythroughSimulator, SessionState

__all__ = ["PlaythroughSimulator", "SessionState", "preview_bp"]
