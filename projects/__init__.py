"""Project authoring screens."""

from .routes import projects_bp

__all__ = ["projects_bp"]
