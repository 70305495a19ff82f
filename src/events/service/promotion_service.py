"""Hands freed seats to the waitlist.

Free events promote the next entry straight into a registration. Paid events only offer the seat;
the offeree claims it with ``registration_service.register_from_waitlist`` and then pays.
"""

import typing as t
from decimal import Decimal

import structlog
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DatabaseError, transaction

from events.exceptions import TicketingError
from events.models import Event, Registration, WaitlistEntry
from events.service import capacity, ensure_organizer, lock_event
from events.service.notification_service import NotificationType, notify
from events.service.types import PromotionOutcome

if t.TYPE_CHECKING:
    from accounts.models import TicketboothUser

logger = structlog.get_logger(__name__)


def next_in_line(event: Event) -> WaitlistEntry | None:
    """The earliest waiting entry, locked for update."""
    return (
        WaitlistEntry.objects.select_for_update()
        .select_related("user")
        .filter(event=event, status=WaitlistEntry.Status.WAITING)
        .in_queue_order()
        .first()
    )


def unclaimed_offers(event: Event) -> int:
    """Offers still waiting for their holder to claim the seat. Each one earmarks a free seat."""
    return WaitlistEntry.objects.filter(
        event=event, status=WaitlistEntry.Status.OFFERED, registration__isnull=True
    ).count()


def promote_next(event: Event) -> PromotionOutcome:
    """Give a free seat to the front of the queue, if there is both a seat and a queue.

    Must run inside the transaction that freed the seat, with the event row locked.
    """
    event.refresh_from_db(fields=["registration_count", "capacity"])
    if event.is_full:
        return PromotionOutcome(promoted=False, reason="event_full")

    if not event.is_free and unclaimed_offers(event) >= event.spots_left:
        return PromotionOutcome(promoted=False, reason="offers_pending")

    entry = next_in_line(event)
    if entry is None:
        return PromotionOutcome(promoted=False, reason="queue_empty")

    if event.is_free:
        capacity.reserve_seat(event)
        registration = Registration.objects.create(
            event=event,
            user=entry.user,
            attendee_name=entry.attendee_name,
            attendee_email=entry.attendee_email,
            payment_method=Registration.PaymentMethod.FREE,
            payment_status=Registration.PaymentStatus.FREE,
            amount_paid=Decimal("0"),
        )
        entry.promote(registration)
        logger.info(
            "waitlist_entry_promoted",
            event_id=str(event.pk),
            entry_id=str(entry.pk),
            registration_id=str(registration.pk),
        )
        notify(NotificationType.WAITLIST_PROMOTED, registration=registration, entry=entry)
        return PromotionOutcome(promoted=True, kind="free", entry=entry, registration=registration)

    entry.offer()
    logger.info("waitlist_entry_offered", event_id=str(event.pk), entry_id=str(entry.pk))
    notify(NotificationType.WAITLIST_OFFERED, entry=entry)
    return PromotionOutcome(promoted=True, kind="paid", entry=entry)


def promote_after_cancellation(event: Event) -> PromotionOutcome:
    """Run ``promote_next`` in a savepoint so its failure leaves the cancellation intact."""
    try:
        with transaction.atomic():
            return promote_next(event)
    except (DatabaseError, DjangoValidationError, TicketingError) as e:
        logger.exception("waitlist_promotion_failed", event_id=str(event.pk))
        event.refresh_from_db(fields=["registration_count"])
        return PromotionOutcome(promoted=False, reason="failed", error=str(e))


@transaction.atomic
def trigger_promotion(event: Event, organizer: "TicketboothUser") -> PromotionOutcome:
    """Promote on the organizer's request, e.g. after raising the capacity."""
    ensure_organizer(event, organizer)
    locked = lock_event(event)
    outcome = promote_next(locked)
    logger.info(
        "waitlist_promotion_triggered",
        event_id=str(event.pk),
        organizer_id=str(organizer.pk),
        promoted=outcome.promoted,
        reason=outcome.reason,
    )
    return outcome
