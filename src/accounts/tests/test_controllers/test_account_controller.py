"""test_account_controller.py: Integration tests for the AccountController."""

import orjson
import pytest
from django.shortcuts import reverse  # type: ignore[attr-defined]
from django.test.client import Client

from accounts.models import TicketboothUser

pytestmark = pytest.mark.django_db


def test_me_requires_authentication(client: Client) -> None:
    response = client.get(reverse("api:me"))
    assert response.status_code == 401


def test_me_returns_profile(auth_client: Client, user: TicketboothUser) -> None:
    response = auth_client.get(reverse("api:me"))

    assert response.status_code == 200
    data = response.json()
    assert data["id"] == str(user.id)
    assert data["email"] == user.email
    assert data["display_name"] == "Test User"


def test_update_profile(auth_client: Client, user: TicketboothUser) -> None:
    payload = {"preferred_name": "  Testy ", "first_name": "Test", "last_name": "User"}

    response = auth_client.put(
        reverse("api:update-profile"), data=orjson.dumps(payload), content_type="application/json"
    )

    assert response.status_code == 200
    user.refresh_from_db()
    assert user.preferred_name == "Testy"
    assert response.json()["display_name"] == "Testy"
