"""Celery tasks for registrations and waitlists.

This module contains asynchronous tasks for:
- Sending attendee notification emails
- Reconciling the cached registration counters
- Expiring unanswered waitlist offers
"""

from datetime import timedelta

import structlog
from celery import shared_task
from django.conf import settings
from django.db import transaction
from django.utils import timezone

from common.tasks import send_email

from .models import Event, Registration, WaitlistEntry
from .service import capacity, lock_event
from .service.notification_service import NotificationType, build_email
from .service.promotion_service import promote_next

logger = structlog.get_logger(__name__)


@shared_task
def send_ticketing_notification(
    notification_type: str,
    registration_id: str | None = None,
    entry_id: str | None = None,
    position: int | None = None,
) -> None:
    """Render and send one attendee email.

    Objects are passed by id and loaded here, so the message reflects the committed state.
    """
    registration = (
        Registration.objects.select_related("event").get(pk=registration_id) if registration_id else None
    )
    entry = WaitlistEntry.objects.select_related("event").get(pk=entry_id) if entry_id else None
    message = build_email(
        NotificationType(notification_type), registration=registration, entry=entry, position=position
    )
    send_email(**message)
    logger.info(
        "ticketing_notification_sent",
        notification_type=notification_type,
        registration_id=registration_id,
        entry_id=entry_id,
    )


@shared_task
def reconcile_registration_counts() -> int:
    """Recompute every event's counter from its confirmed registrations.

    Returns:
        The number of events whose counter had drifted.
    """
    drifted = 0
    for event in Event.objects.only("id", "registration_count").iterator():
        previous, actual = capacity.reconcile(event)
        if previous != actual:
            drifted += 1
    logger.info("registration_counts_reconciled", drifted=drifted)
    return drifted


@shared_task
def expire_waitlist_offers() -> int:
    """Expire offers nobody claimed in time and pass the seat on.

    Does nothing unless ``WAITLIST_OFFER_EXPIRY_HOURS`` is positive. Claimed offers are never expired,
    their seat is already counted.

    Returns:
        The number of expired offers.
    """
    hours = settings.WAITLIST_OFFER_EXPIRY_HOURS
    if hours <= 0:
        return 0
    cutoff = timezone.now() - timedelta(hours=hours)
    stale = WaitlistEntry.objects.filter(
        status=WaitlistEntry.Status.OFFERED, offered_at__lt=cutoff, registration__isnull=True
    ).values_list("id", "event_id")

    expired = 0
    for entry_id, event_id in list(stale):
        with transaction.atomic():
            event = lock_event(Event(pk=event_id))
            entry = WaitlistEntry.objects.select_for_update().get(pk=entry_id)
            if entry.status != WaitlistEntry.Status.OFFERED or entry.registration_id is not None:
                continue
            entry.expire()
            expired += 1
            outcome = promote_next(event)
            logger.info(
                "waitlist_offer_expired",
                entry_id=str(entry_id),
                event_id=str(event_id),
                next_promoted=outcome.promoted,
            )
    return expired
