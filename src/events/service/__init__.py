import typing as t

from events.exceptions import UnauthorizedError
from events.models import Event

if t.TYPE_CHECKING:
    from accounts.models import TicketboothUser


def ensure_organizer(event: Event, user: "TicketboothUser") -> None:
    """Raise unless the user organizes the event."""
    if event.organizer_id != user.pk:
        raise UnauthorizedError()


def lock_event(event: Event) -> Event:
    """Reload the event under a row lock. Must be called inside a transaction."""
    return Event.objects.select_for_update().get(pk=event.pk)
