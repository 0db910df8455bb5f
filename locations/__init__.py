"""Location authoring screens and QR codes."""

from .qr import qr_payload, render_location_qr_png
from .routes import locations_bp

__all__ = ["locations_bp", "qr_payload", "render_location_qr_png"]
