"""Registration lifecycle: register, pay, cancel and check in."""

import typing as t
from decimal import Decimal

import structlog
from django.db import IntegrityError, transaction
from django.db.models import QuerySet
from django.utils import timezone

from events.exceptions import (
    AlreadyRegisteredError,
    NoActiveOfferError,
    NotFoundError,
    RegistrationNotActiveError,
    UnauthorizedError,
)
from events.models import Event, Registration, WaitlistEntry
from events.service import capacity, ensure_organizer, lock_event
from events.service.notification_service import NotificationType, notify
from events.service.promotion_service import promote_after_cancellation
from events.service.types import CancellationResult, CheckInResult

if t.TYPE_CHECKING:
    from accounts.models import TicketboothUser

logger = structlog.get_logger(__name__)


def _settle_waitlist_entry(entry: WaitlistEntry, registration: Registration) -> None:
    """Resolve the registrant's place in line now that they hold a seat.

    A waiting entry is no longer needed. An offered entry is promoted once nothing is left to pay;
    until then it stays offered and remembers the registration that claimed it.
    """
    if entry.status == WaitlistEntry.Status.WAITING:
        entry.cancel()
    elif registration.payment_status == Registration.PaymentStatus.PENDING:
        entry.registration = registration
        entry.save(update_fields=["registration", "updated_at"])
    else:
        entry.promote(registration)


def _create_registration(
    event: Event,
    user: "TicketboothUser",
    *,
    attendee_name: str,
    attendee_email: str,
    payment_method: str,
    entry: WaitlistEntry | None,
) -> Registration:
    if Registration.objects.confirmed().filter(event=event, user=user).exists():
        raise AlreadyRegisteredError()

    if event.is_free:
        payment_method = Registration.PaymentMethod.FREE
    payment_status = Registration.payment_status_for(event, payment_method)

    capacity.reserve_seat(event)
    try:
        registration = Registration.objects.create(
            event=event,
            user=user,
            attendee_name=attendee_name or user.get_display_name(),
            attendee_email=attendee_email or user.email,
            payment_method=payment_method,
            payment_status=payment_status,
            amount_paid=Decimal("0") if payment_status == Registration.PaymentStatus.FREE else None,
        )
    except IntegrityError as e:
        raise AlreadyRegisteredError() from e

    if entry is not None:
        _settle_waitlist_entry(entry, registration)

    logger.info(
        "registration_created",
        event_id=str(event.pk),
        registration_id=str(registration.pk),
        user_id=str(user.pk),
        payment_method=payment_method,
        payment_status=payment_status,
        waitlist_entry_id=str(entry.pk) if entry else None,
    )
    notify(NotificationType.REGISTRATION_CONFIRMED, registration=registration)
    return registration


@transaction.atomic
def register(
    event: Event,
    user: "TicketboothUser",
    *,
    attendee_name: str = "",
    attendee_email: str = "",
    payment_method: str = Registration.PaymentMethod.ONLINE,
) -> Registration:
    """Register a user for an event, taking one seat.

    Raises:
        AlreadyRegisteredError: If the user already holds a confirmed registration.
        CapacityExceededError: If no seat is left. The caller should offer the waitlist.
    """
    locked = lock_event(event)
    entry = WaitlistEntry.objects.select_for_update().active().filter(event=locked, user=user).first()
    registration = _create_registration(
        locked,
        user,
        attendee_name=attendee_name,
        attendee_email=attendee_email,
        payment_method=payment_method,
        entry=entry,
    )
    event.registration_count = locked.registration_count
    return registration


@transaction.atomic
def register_from_waitlist(
    event: Event,
    user: "TicketboothUser",
    *,
    payment_method: str = Registration.PaymentMethod.ONLINE,
) -> Registration:
    """Claim the seat offered to the user on a paid event.

    The seat is counted from now on. The offer turns into a promotion when the payment completes.

    Raises:
        NoActiveOfferError: If the user holds no offered entry for the event.
        CapacityExceededError: If the seat was taken by a direct registration in the meantime.
    """
    locked = lock_event(event)
    entry = (
        WaitlistEntry.objects.select_for_update()
        .filter(event=locked, user=user, status=WaitlistEntry.Status.OFFERED)
        .first()
    )
    if entry is None:
        raise NoActiveOfferError()
    registration = _create_registration(
        locked,
        user,
        attendee_name=entry.attendee_name,
        attendee_email=entry.attendee_email,
        payment_method=payment_method,
        entry=entry,
    )
    event.registration_count = locked.registration_count
    return registration


@transaction.atomic
def mark_paid(
    registration: Registration, *, payment_reference: str = "", amount: Decimal | None = None
) -> Registration:
    """Record the payment of a pending registration.

    Safe to call any number of times for the same registration: only the first call changes
    anything, later calls return the registration as it is.
    """
    locked = Registration.objects.select_for_update().select_related("event").get(pk=registration.pk)
    if locked.payment_status == Registration.PaymentStatus.PAID:
        logger.warning(
            "registration_payment_duplicate",
            registration_id=str(locked.pk),
            payment_reference=payment_reference,
        )
        return locked
    if locked.payment_status == Registration.PaymentStatus.FREE:
        logger.warning("registration_payment_not_required", registration_id=str(locked.pk))
        return locked
    if not locked.is_confirmed:
        logger.warning("registration_payment_after_cancellation", registration_id=str(locked.pk))

    locked.payment_status = Registration.PaymentStatus.PAID
    locked.payment_reference = payment_reference
    locked.amount_paid = amount if amount is not None else locked.event.ticket_price
    locked.paid_at = timezone.now()
    locked.save(update_fields=["payment_status", "payment_reference", "amount_paid", "paid_at", "updated_at"])

    entry = WaitlistEntry.objects.select_for_update().filter(registration=locked).first()
    if entry is not None and entry.status == WaitlistEntry.Status.OFFERED:
        entry.promote(locked)
        logger.info("waitlist_entry_promoted", event_id=str(locked.event_id), entry_id=str(entry.pk))

    logger.info(
        "registration_paid",
        registration_id=str(locked.pk),
        event_id=str(locked.event_id),
        amount=str(locked.amount_paid),
        payment_reference=payment_reference,
    )
    if locked.is_confirmed:
        notify(NotificationType.PAYMENT_CONFIRMED, registration=locked)
    return locked


@transaction.atomic
def mark_offline_paid(registration: Registration, organizer: "TicketboothUser") -> Registration:
    """Record a payment the organizer collected outside the payment provider."""
    ensure_organizer(registration.event, organizer)
    return mark_paid(
        registration,
        payment_reference=f"offline:{organizer.pk}",
        amount=registration.event.ticket_price,
    )


@transaction.atomic
def cancel(registration: Registration, requesting_user: "TicketboothUser") -> CancellationResult:
    """Cancel the user's own registration, free its seat and hand it to the waitlist.

    The promotion runs in the same transaction, but its failure never undoes the cancellation.

    Raises:
        UnauthorizedError: If the registration belongs to someone else.
        RegistrationNotActiveError: If it is already cancelled.
    """
    if registration.user_id != requesting_user.pk:
        raise UnauthorizedError()
    event = lock_event(registration.event)
    locked = Registration.objects.select_for_update().get(pk=registration.pk)
    if not locked.is_confirmed:
        raise RegistrationNotActiveError()

    locked.status = Registration.Status.CANCELLED
    locked.cancelled_at = timezone.now()
    locked.save(update_fields=["status", "cancelled_at", "updated_at"])
    capacity.release_seat(event)

    # a claimed but unpaid offer is declined together with its registration
    claimed = WaitlistEntry.objects.select_for_update().filter(registration=locked).first()
    if claimed is not None and claimed.status == WaitlistEntry.Status.OFFERED:
        claimed.cancel()

    logger.info(
        "registration_cancelled",
        registration_id=str(locked.pk),
        event_id=str(event.pk),
        user_id=str(requesting_user.pk),
        registration_count=event.registration_count,
    )
    notify(NotificationType.REGISTRATION_CANCELLED, registration=locked)

    promotion = promote_after_cancellation(event)
    registration.event.registration_count = event.registration_count
    return CancellationResult(registration=locked, promotion=promotion)


def check_in(qr_code: str, organizer: "TicketboothUser", event: Event | None = None) -> CheckInResult:
    """Admit the holder of a ticket at the door.

    Scanning the same ticket twice is expected: the second scan returns an unsuccessful result
    and leaves ``checked_in_at`` untouched.

    Raises:
        NotFoundError: If no registration carries this token, or it belongs to another event than ``event``.
        UnauthorizedError: If the scanner does not organize the event.
    """
    registration = Registration.objects.select_related("event").filter(qr_code=qr_code).first()
    if registration is None or (event is not None and registration.event_id != event.pk):
        raise NotFoundError()
    ensure_organizer(registration.event, organizer)
    if not registration.is_confirmed:
        return CheckInResult(success=False, registration=registration, reason="registration_cancelled")

    now = timezone.now()
    updated = Registration.objects.filter(pk=registration.pk, checked_in=False).update(
        checked_in=True, checked_in_at=now, updated_at=now
    )
    registration.refresh_from_db(fields=["checked_in", "checked_in_at"])
    if not updated:
        logger.info("check_in_repeated", registration_id=str(registration.pk), event_id=str(registration.event_id))
        return CheckInResult(success=False, registration=registration, reason="already_checked_in")

    logger.info("check_in_completed", registration_id=str(registration.pk), event_id=str(registration.event_id))
    return CheckInResult(success=True, registration=registration)


def get_for_user(registration_id: t.Any, user: "TicketboothUser") -> Registration:
    """Fetch one of the user's registrations."""
    registration = Registration.objects.with_event().filter(pk=registration_id, user=user).first()
    if registration is None:
        raise NotFoundError()
    return registration


def list_for_user(user: "TicketboothUser") -> QuerySet[Registration]:
    """The user's registrations, newest first."""
    return Registration.objects.with_event().filter(user=user).order_by("-created_at")


def list_for_event(event: Event, organizer: "TicketboothUser") -> QuerySet[Registration]:
    ensure_organizer(event, organizer)
    return Registration.objects.with_user().filter(event=event).order_by("-created_at")


def confirmed_registration(event: Event, user: "TicketboothUser") -> Registration | None:
    return Registration.objects.confirmed().filter(event=event, user=user).first()
