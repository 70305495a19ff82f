import typing as t

import structlog
from django.db import transaction

from events.models import Event
from events.schema import EventCreateSchema

if t.TYPE_CHECKING:
    from accounts.models import TicketboothUser

logger = structlog.get_logger(__name__)


@transaction.atomic
def create_event(organizer: "TicketboothUser", payload: EventCreateSchema) -> Event:
    """Create an event organized by the given user."""
    event = Event.objects.create(organizer=organizer, **payload.model_dump())
    logger.info(
        "event_created",
        event_id=str(event.pk),
        organizer_id=str(organizer.pk),
        capacity=event.capacity,
        ticket_type=event.ticket_type,
    )
    return event
