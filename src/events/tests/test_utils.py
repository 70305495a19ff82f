from decimal import Decimal

import pytest
from pytest_django.fixtures import SettingsWrapper

from events.utils import create_ticket_qr_png, from_minor_units, generate_qr_token, to_minor_units


def test_qr_token_uses_configured_prefix(settings: SettingsWrapper) -> None:
    settings.QR_CODE_PREFIX = "TKT"

    token = generate_qr_token()

    prefix, millis, random_part = token.split("-")
    assert prefix == "TKT"
    assert millis.isdigit()
    assert len(random_part) == 9


def test_qr_tokens_differ() -> None:
    assert len({generate_qr_token() for _ in range(50)}) == 50


def test_ticket_qr_is_a_png() -> None:
    png = create_ticket_qr_png("EVT-1718000000000-K3J9Q2XZA")

    assert png.startswith(b"\x89PNG\r\n\x1a\n")


@pytest.mark.parametrize(
    "amount,minor",
    [
        (Decimal("499.00"), 49900),
        (Decimal("0.01"), 1),
        (Decimal("10.005"), 1001),
        (Decimal("0"), 0),
    ],
)
def test_to_minor_units(amount: Decimal, minor: int) -> None:
    assert to_minor_units(amount) == minor


def test_from_minor_units() -> None:
    assert from_minor_units(49900) == Decimal("499.00")
    assert from_minor_units(1) == Decimal("0.01")
