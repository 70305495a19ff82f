"""Attendee emails for registration and waitlist events.

Messages are queued after the surrounding transaction commits. Building or queueing a message never
fails the operation that triggered it.
"""

import typing as t
from enum import Enum

import structlog
from django.db import transaction
from django.template.loader import render_to_string

from events.models import Registration, WaitlistEntry
from events.utils import create_ticket_qr_png

logger = structlog.get_logger(__name__)


class NotificationType(Enum):
    """Types of notifications that can be sent."""

    REGISTRATION_CONFIRMED = "registration_confirmed"
    PAYMENT_CONFIRMED = "payment_confirmed"
    REGISTRATION_CANCELLED = "registration_cancelled"
    WAITLIST_JOINED = "waitlist_joined"
    WAITLIST_PROMOTED = "waitlist_promoted"
    WAITLIST_OFFERED = "waitlist_offered"


def _subject(notification_type: NotificationType, context: dict[str, t.Any]) -> str:
    title = context["event"].title
    match notification_type:
        case NotificationType.REGISTRATION_CONFIRMED:
            return f'Your ticket for "{title}": registration confirmed'
        case NotificationType.PAYMENT_CONFIRMED:
            return f'Payment received for "{title}"'
        case NotificationType.REGISTRATION_CANCELLED:
            suffix = ": refund initiated" if context.get("was_paid_online") else ""
            return f"Registration cancelled for {title}{suffix}"
        case NotificationType.WAITLIST_JOINED:
            return f"You're #{context['position']} on the waitlist for {title}"
        case NotificationType.WAITLIST_PROMOTED:
            return f"You're registered for {title}!"
        case NotificationType.WAITLIST_OFFERED:
            return f"Spot opened for {title}: pay now to confirm!"


def build_email(
    notification_type: NotificationType,
    *,
    registration: Registration | None = None,
    entry: WaitlistEntry | None = None,
    position: int | None = None,
) -> dict[str, t.Any]:
    """Render the keyword arguments for ``common.tasks.send_email``.

    Tickets (confirmation, payment, free promotion) carry the check-in token as a PNG attachment.
    """
    holder: Registration | WaitlistEntry | None = registration or entry
    if holder is None:
        raise ValueError("A registration or a waitlist entry is required.")
    event = holder.event
    context: dict[str, t.Any] = {
        "event": event,
        "attendee_name": holder.attendee_name,
        "registration": registration,
        "entry": entry,
        "position": position,
        "was_paid_online": bool(
            registration
            and registration.payment_method == Registration.PaymentMethod.ONLINE
            and registration.payment_status == Registration.PaymentStatus.PAID
        ),
    }
    attachments = []
    if registration is not None and notification_type in {
        NotificationType.REGISTRATION_CONFIRMED,
        NotificationType.PAYMENT_CONFIRMED,
        NotificationType.WAITLIST_PROMOTED,
    }:
        attachments.append(
            {
                "filename": f"ticket-{registration.qr_code}.png",
                "content": create_ticket_qr_png(registration.qr_code).decode("latin-1"),
                "mimetype": "image/png",
            }
        )
    return {
        "to": holder.attendee_email,
        "subject": _subject(notification_type, context),
        "body": render_to_string(f"events/emails/{notification_type.value}.txt", context),
        "attachments": attachments,
    }


def notify(
    notification_type: NotificationType,
    *,
    registration: Registration | None = None,
    entry: WaitlistEntry | None = None,
    position: int | None = None,
) -> None:
    """Queue a notification once the current transaction commits."""
    from events import tasks

    def _dispatch() -> None:
        try:
            tasks.send_ticketing_notification.delay(
                notification_type.value,
                registration_id=str(registration.pk) if registration else None,
                entry_id=str(entry.pk) if entry else None,
                position=position,
            )
        except Exception:
            logger.exception(
                "notification_dispatch_failed",
                notification_type=notification_type.value,
                registration_id=str(registration.pk) if registration else None,
                entry_id=str(entry.pk) if entry else None,
            )

    transaction.on_commit(_dispatch)
