"""
QR code rendering for shuttle boarding passes.
"""

import base64
import json
from io import BytesIO
from typing import Any, Dict

import qrcode


def render_qr_data_url(payload: Dict[str, Any]) -> str:
    """
    Render ``payload`` as JSON inside a QR code.

    Returns:
        ``data:image/png;base64,...`` string suitable for an <img> src
    """
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=8,
        border=4,
    )
    qr.add_data(json.dumps(payload, separators=(",", ":"), default=str))
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")

    img_io = BytesIO()
    img.save(img_io, "PNG")
    encoded = base64.b64encode(img_io.getvalue()).decode("ascii")
    return f"data:image/png;base64,{encoded}"


def boarding_pass_payload(booking_id, route_id, booking_date, seats: int) -> Dict[str, Any]:
    return {
        "bookingId": str(booking_id),
        "routeId": str(route_id),
        "date": booking_date.isoformat(),
        "seats": seats,
    }
