"""
Ticket code and QR helpers.
"""
import base64
import io
import json
import secrets
import time

import qrcode


def generate_ticket_code() -> str:
    return f"TKT-{int(time.time() * 1000)}-{secrets.token_hex(4).upper()}"


def build_qr_payload(*, ticket_code, owner_id, event_id, order_tracking_id, issued_at) -> str:
    """The string encoded in the QR image. Unique because the ticket code is."""
    return json.dumps(
        {
            "ticketCode": ticket_code,
            "userId": str(owner_id),
            "eventId": str(event_id),
            "orderTrackingId": order_tracking_id,
            "purchasedAt": issued_at.isoformat(),
        },
        separators=(",", ":"),
    )


def render_qr_data_url(payload: str) -> str:
    qr = qrcode.QRCode(version=None, box_size=10, border=2)
    qr.add_data(payload)
    qr.make(fit=True)

    qr_img = qr.make_image(fill_color="#1D4ED8", back_color="white").get_image()
    buffer = io.BytesIO()
    qr_img.save(buffer, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buffer.getvalue()).decode("ascii")
