import secrets
import string
import time
from decimal import ROUND_HALF_UP, Decimal
from io import BytesIO

import qrcode
from django.conf import settings

QR_TOKEN_ALPHABET = string.ascii_uppercase + string.digits


def generate_qr_token() -> str:
    """Generate the opaque check-in token printed on a ticket.

    The format is ``<prefix>-<unix millis>-<9 random chars>``, e.g. ``EVT-1718000000000-K3J9Q2XZA``.
    Uniqueness is enforced by the database; the random part makes collisions practically impossible.
    """
    random_part = "".join(secrets.choice(QR_TOKEN_ALPHABET) for _ in range(9))
    return f"{settings.QR_CODE_PREFIX}-{int(time.time() * 1000)}-{random_part}"


def create_ticket_qr_png(qr_code: str) -> bytes:
    """Render a check-in token as a PNG image.

    Args:
        qr_code: The registration's check-in token.

    Returns:
        The PNG content as bytes.
    """
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=10,
        border=4,
    )
    qr.add_data(qr_code)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")

    buffered = BytesIO()
    img.save(buffered, "PNG")
    return buffered.getvalue()


def to_minor_units(amount: Decimal) -> int:
    """Convert a price to the smallest currency unit, e.g. rupees to paise."""
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_minor_units(amount: int) -> Decimal:
    return (Decimal(amount) / 100).quantize(Decimal("0.01"))
