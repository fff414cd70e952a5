from __future__ import annotations

import io
from dataclasses import dataclass
from datetime import datetime

import qrcode

from ..core.exceptions import ValidationError
from .datetime_utils import parse_iso_datetime


@dataclass(frozen=True)
class QRTokenPolicy:
    suffix: str
    validity_minutes: int = 5


class QRTokenCodec:
    """QR token = ISO-8601 timestamp immediately followed by a fixed suffix.

    A token is accepted when its embedded timestamp lies within
    `validity_minutes` of the claimed operation time.
    """

    def __init__(self, policy: QRTokenPolicy):
        self._policy = policy

    def generate(self, moment: datetime) -> str:
        return moment.isoformat() + self._policy.suffix

    def validate(self, token: str, claimed: datetime) -> datetime:
        value = (token or "").strip()
        suffix = self._policy.suffix
        if not value.endswith(suffix):
            raise ValidationError(f'Invalid QR code: must end with "{suffix}"')

        embedded = value[: -len(suffix)]
        if not embedded:
            raise ValidationError("Invalid QR code: missing timestamp")
        try:
            issued_at = parse_iso_datetime(embedded)
        except ValidationError:
            raise ValidationError("Invalid QR code: bad timestamp")

        drift = abs((issued_at - claimed).total_seconds())
        if drift > self._policy.validity_minutes * 60:
            raise ValidationError(
                f"Invalid QR code: timestamp differs from the claimed time by {int(drift)} seconds"
            )
        return issued_at

    def render_png(self, token: str) -> io.BytesIO:
        qr = qrcode.QRCode(
            version=1,
            error_correction=qrcode.constants.ERROR_CORRECT_L,
            box_size=10,
            border=2,
        )
        qr.add_data(token)
        qr.make(fit=True)

        img = qr.make_image(fill_color="black", back_color="white")
        buf = io.BytesIO()
        img.save(buf, format="PNG")
        buf.seek(0)
        return buf


def decode_qr_image(stream) -> str:
    """Return the text of the first QR code found in an uploaded image."""
    # pyzbar loads the zbar shared library on import; only the upload route needs it.
    from PIL import Image
    from pyzbar.pyzbar import decode as pyzbar_decode

    try:
        img = Image.open(stream).convert("RGB")
    except OSError:
        raise ValidationError("Uploaded file is not an image")
    decoded = pyzbar_decode(img)
    if not decoded:
        raise ValidationError("No QR code found in the image")
    return decoded[0].data.decode("utf-8").strip()
