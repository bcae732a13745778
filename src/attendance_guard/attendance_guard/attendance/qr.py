from __future__ import annotations

import json
from dataclasses import dataclass
from typing import BinaryIO, Optional

from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class QrPayload:
    session_code: str
    session_id: Optional[str] = None


def decode_payload(qr_data: str) -> QrPayload:
    """Decode scanned QR text.

    Session QR codes carry JSON like {"sessionCode": "...", "sessionId": "..."};
    anything else is treated as a bare session code.
    """
    text = (qr_data or "").strip()
    if not text:
        raise ValidationError("QR code is empty")

    try:
        info = json.loads(text)
    except ValueError:
        return QrPayload(session_code=text)

    if not isinstance(info, dict):
        return QrPayload(session_code=text)

    code = str(info.get("sessionCode") or "").strip() or text
    session_id = info.get("sessionId")
    return QrPayload(session_code=code, session_id=str(session_id) if session_id else None)


def decode_image(stream: BinaryIO) -> str:
    """Read the first QR code found in an uploaded image."""
    # zbar is a native library; load it only for image check-ins.
    from PIL import Image, UnidentifiedImageError
    from pyzbar.pyzbar import decode as pyzbar_decode

    try:
        img = Image.open(stream)
    except UnidentifiedImageError:
        raise ValidationError("Uploaded file is not an image")

    decoded = pyzbar_decode(img)
    if not decoded:
        raise ValidationError("No QR code found in image")
    return decoded[0].data.decode("utf-8")
