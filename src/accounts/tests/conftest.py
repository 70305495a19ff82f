# src/accounts/tests/conftest.py
import typing as t

import pytest
from django.test.client import Client
from ninja_jwt.tokens import RefreshToken

from accounts.models import TicketboothUser


@pytest.fixture
def user(django_user_model: t.Type[TicketboothUser]) -> TicketboothUser:
    """A standard, non-privileged user."""
    return django_user_model.objects.create_user(
        username="testuser@example.com",
        email="testuser@example.com",
        password="strong-password-123!",
        first_name="Test",
        last_name="User",
    )


@pytest.fixture
def auth_client(user: TicketboothUser) -> Client:
    """A client authenticated as the standard user."""
    refresh = RefreshToken.for_user(user)
    return Client(HTTP_AUTHORIZATION=f"Bearer {refresh.access_token}")  # type: ignore[attr-defined]
