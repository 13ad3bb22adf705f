"""QR code references for label rendering."""

from __future__ import annotations

import os
from io import BytesIO
from urllib.parse import quote

import qrcode

DEFAULT_QR_SERVICE_URL = "https://api.qrserver.com/v1/create-qr-code/"
DEFAULT_QR_SIZE = 100

PREVIEW_PAYLOAD = "PREVIEW - Etiqueta de exemplo"


def qr_service_url() -> str:
    return (
        os.getenv("ASSET_LABELS_QR_SERVICE_URL", "").strip()
        or DEFAULT_QR_SERVICE_URL
    )


def qr_payload(code: str, name: str) -> str:
    """Return the text encoded in an item's QR code."""

    return f"{code} - {name}"


def qr_reference(text: str, size: int = DEFAULT_QR_SIZE) -> str:
    """Return an image URL for a QR code encoding ``text``.

    Only the reference is built here; the image is fetched by whoever
    renders the label.
    """

    return f"{qr_service_url()}?size={size}x{size}&data={quote(text, safe='')}"


def qr_png(text: str) -> bytes:
    """Encode ``text`` locally and return the QR code as PNG bytes."""

    buffer = BytesIO()
    qr = qrcode.QRCode(border=0)
    qr.add_data(text)
    qr_img = qr.make_image()
    qr_img.save(buffer, kind="PNG")
    return buffer.getvalue()
