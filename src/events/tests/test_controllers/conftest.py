import typing as t

import pytest
from django.test.client import Client
from ninja_jwt.tokens import RefreshToken

from accounts.models import TicketboothUser


def _client_for(user: TicketboothUser) -> Client:
    refresh = RefreshToken.for_user(user)
    return Client(HTTP_AUTHORIZATION=f"Bearer {refresh.access_token}")  # type: ignore[attr-defined]


@pytest.fixture
def organizer_client(organizer: TicketboothUser) -> Client:
    """API client for the organizer of the test events."""
    return _client_for(organizer)


@pytest.fixture
def attendee_client(attendee: TicketboothUser) -> Client:
    return _client_for(attendee)


@pytest.fixture
def other_attendee_client(other_attendee: TicketboothUser) -> Client:
    return _client_for(other_attendee)


@pytest.fixture
def client_for() -> t.Callable[[TicketboothUser], Client]:
    """Build an authenticated client for any user."""
    return _client_for
