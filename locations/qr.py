from __future__ import annotations

import io

import qrcode
from PIL import Image

QR_PAYLOAD_TEMPLATE = "Location ID: {location_id}"
QR_DISPLAY_SIZE = 150


def qr_payload(location_id) -> str:
    return QR_PAYLOAD_TEMPLATE.format(location_id=location_id)


def render_location_qr_png(location_id, size: int = QR_DISPLAY_SIZE) -> bytes:
    """Encode the location's QR payload as a square PNG of ``size`` pixels."""
    qr = qrcode.QRCode(error_correction=qrcode.constants.ERROR_CORRECT_L, border=2)
    qr.add_data(qr_payload(location_id))
    qr.make(fit=True)

    raw = io.BytesIO()
    qr.make_image(fill_color="black", back_color="white").save(raw)
    raw.seek(0)

    with Image.open(raw) as img:
        scaled = img.convert("L").resize((size, size), Image.Resampling.NEAREST)
        buffer = io.BytesIO()
        scaled.save(buffer, format="PNG")
    return buffer.getvalue()
