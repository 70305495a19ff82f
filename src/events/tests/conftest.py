from datetime import datetime
from decimal import Decimal

import pytest

from accounts.models import TicketboothUser
from conftest import TicketboothUserFactory
from events.models import Event, Registration
from events.service import registration_service


@pytest.fixture
def organizer(user_factory: TicketboothUserFactory) -> TicketboothUser:
    return user_factory(username="organizer@example.com", email="organizer@example.com")


@pytest.fixture
def attendee(user_factory: TicketboothUserFactory) -> TicketboothUser:
    return user_factory(username="attendee@example.com", email="attendee@example.com")


@pytest.fixture
def other_attendee(user_factory: TicketboothUserFactory) -> TicketboothUser:
    return user_factory(username="other@example.com", email="other@example.com")


@pytest.fixture
def free_event(organizer: TicketboothUser, next_week: datetime) -> Event:
    """A free event with two seats."""
    return Event.objects.create(
        organizer=organizer,
        title="Community Meetup",
        start=next_week,
        venue="Town Hall",
        city="Pune",
        capacity=2,
    )


@pytest.fixture
def paid_event(organizer: TicketboothUser, next_week: datetime) -> Event:
    """A paid event with two seats at 499.00 per ticket."""
    return Event.objects.create(
        organizer=organizer,
        title="Paid Workshop",
        start=next_week,
        capacity=2,
        ticket_type=Event.TicketType.PAID,
        ticket_price=Decimal("499.00"),
    )


def fill(event: Event, user_factory: TicketboothUserFactory) -> list[Registration]:
    """Register fresh users until the event is full."""
    event.refresh_from_db()
    registrations = []
    while not event.is_full:
        registrations.append(registration_service.register(event, user_factory()))
    return registrations


@pytest.fixture
def full_free_event(free_event: Event, user_factory: TicketboothUserFactory) -> Event:
    fill(free_event, user_factory)
    return free_event


@pytest.fixture
def full_paid_event(paid_event: Event, user_factory: TicketboothUserFactory) -> Event:
    fill(paid_event, user_factory)
    return paid_event

