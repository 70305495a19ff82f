"""Seat accounting for events.

``Event.registration_count`` caches the number of confirmed registrations. Every function here must run
inside the same transaction as the registration change it accounts for.
"""

import structlog
from django.db import transaction
from django.db.models import F
from django.db.models.functions import Greatest

from events.exceptions import CapacityExceededError
from events.models import Event, Registration

logger = structlog.get_logger(__name__)


def reserve_seat(event: Event) -> None:
    """Take one seat, or fail if none is left.

    The check and the increment are a single conditional UPDATE, so two requests racing for the
    last seat cannot both succeed.

    Raises:
        CapacityExceededError: If the event is already full.
    """
    updated = Event.objects.filter(pk=event.pk, registration_count__lt=F("capacity")).update(
        registration_count=F("registration_count") + 1
    )
    if not updated:
        logger.info("capacity_exceeded", event_id=str(event.pk), capacity=event.capacity)
        raise CapacityExceededError()
    event.refresh_from_db(fields=["registration_count"])


def release_seat(event: Event) -> None:
    """Give one seat back. The counter never drops below zero."""
    Event.objects.filter(pk=event.pk).update(registration_count=Greatest(F("registration_count") - 1, 0))
    event.refresh_from_db(fields=["registration_count"])


def count_confirmed(event: Event) -> int:
    return Registration.objects.filter(event=event, status=Registration.Status.CONFIRMED).count()


@transaction.atomic
def reconcile(event: Event) -> tuple[int, int]:
    """Recompute the cached counter from the confirmed registrations.

    Returns:
        A ``(previous, actual)`` tuple. They differ only if the counter had drifted.
    """
    locked = Event.objects.select_for_update().get(pk=event.pk)
    previous = locked.registration_count
    actual = count_confirmed(locked)
    if previous != actual:
        Event.objects.filter(pk=locked.pk).update(registration_count=actual)
        logger.warning(
            "registration_count_drift_corrected",
            event_id=str(locked.pk),
            previous=previous,
            actual=actual,
        )
    event.refresh_from_db(fields=["registration_count"])
    return previous, actual
