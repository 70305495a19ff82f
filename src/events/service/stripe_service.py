import typing as t
from decimal import Decimal

import stripe
import structlog
from django.conf import settings
from django.db import transaction
from stripe.checkout import Session

from events.exceptions import PaymentNotCompletedError, PaymentNotRequiredError, RegistrationNotActiveError
from events.models import Registration
from events.service import registration_service
from events.service.stripe_webhooks import TICKET_METADATA_TYPE, StripeEventHandler
from events.utils import from_minor_units, to_minor_units

logger = structlog.get_logger(__name__)

stripe.api_key = settings.STRIPE_SECRET_KEY

__all__ = [
    "StripeEventHandler",
    "create_ticket_checkout_session",
    "verify_ticket_payment",
]


def _ensure_payable(registration: Registration) -> None:
    if not registration.is_confirmed:
        raise RegistrationNotActiveError()
    if registration.payment_status != Registration.PaymentStatus.PENDING:
        raise PaymentNotRequiredError()


@transaction.atomic
def create_ticket_checkout_session(registration: Registration) -> str:
    """Create a Stripe Checkout Session for a pending registration.

    Args:
        registration: A confirmed registration that still has to be paid.

    Returns:
        The URL of the hosted checkout page.

    Raises:
        RegistrationNotActiveError: If the registration was cancelled.
        PaymentNotRequiredError: If it is free or already paid.
    """
    registration = Registration.objects.select_for_update().select_related("event").get(pk=registration.pk)
    _ensure_payable(registration)
    event = registration.event
    frontend_base_url = settings.FRONTEND_BASE_URL
    session = Session.create(
        customer_email=registration.attendee_email,
        line_items=[
            {
                "price_data": {
                    "currency": settings.DEFAULT_CURRENCY.lower(),
                    "product_data": {
                        "name": f"Ticket: {event.title}",
                        "description": f"Registration for {registration.attendee_name}",
                    },
                    "unit_amount": to_minor_units(t.cast(Decimal, event.ticket_price)),
                },
                "quantity": 1,
            }
        ],
        mode="payment",
        success_url=(
            f"{frontend_base_url}/events/{event.slug}"
            f"?payment_success=true&registration_id={registration.pk}&session_id={{CHECKOUT_SESSION_ID}}"
        ),
        cancel_url=f"{frontend_base_url}/events/{event.slug}?payment_cancelled=true",
        metadata={
            "type": TICKET_METADATA_TYPE,
            "registration_id": str(registration.pk),
            "event_id": str(event.pk),
            "user_id": str(registration.user_id),
            "ticket_price": str(event.ticket_price),
        },
    )
    registration.stripe_session_id = session["id"]
    registration.save(update_fields=["stripe_session_id", "updated_at"])
    logger.info(
        "stripe_ticket_checkout_created",
        registration_id=str(registration.pk),
        event_id=str(event.pk),
        session_id=session["id"],
    )
    return t.cast(str, session["url"])


def _matches(session: t.Any, registration: Registration) -> bool:
    metadata = session.get("metadata") or {}
    return bool(
        metadata.get("type") == TICKET_METADATA_TYPE and metadata.get("registration_id") == str(registration.pk)
    )


def _find_session(registration: Registration, session_id: str | None) -> t.Any | None:
    """Retrieve the session by id, else look for it among the most recent completed sessions."""
    if known_id := session_id or registration.stripe_session_id:
        session = Session.retrieve(known_id)
        if _matches(session, registration):
            return session
        logger.warning(
            "stripe_session_metadata_mismatch",
            registration_id=str(registration.pk),
            session_id=known_id,
        )
    sessions = Session.list(limit=settings.STRIPE_SESSION_LOOKUP_LIMIT, status="complete")
    return next((s for s in sessions["data"] if _matches(s, registration)), None)


def verify_ticket_payment(registration: Registration, session_id: str | None = None) -> Registration:
    """Confirm a payment by asking Stripe, for when the webhook has not arrived yet.

    Ends up in the same ``mark_paid`` as the webhook, so both may fire for the same payment.

    Raises:
        PaymentNotCompletedError: If no paid session exists for this registration.
    """
    if registration.payment_status == Registration.PaymentStatus.PAID:
        return registration
    _ensure_payable(registration)
    session = _find_session(registration, session_id)
    if session is None or session["payment_status"] != "paid":
        logger.info(
            "stripe_ticket_payment_not_completed",
            registration_id=str(registration.pk),
            session_id=session["id"] if session else None,
        )
        raise PaymentNotCompletedError()
    amount_total = session.get("amount_total")
    return registration_service.mark_paid(
        registration,
        payment_reference=session.get("payment_intent") or session["id"],
        amount=from_minor_units(amount_total) if amount_total is not None else None,
    )
