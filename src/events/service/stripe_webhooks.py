"""Stripe webhook event handlers."""

import uuid

import stripe
import structlog

from events.models import Registration
from events.service import registration_service
from events.utils import from_minor_units

logger = structlog.get_logger(__name__)

TICKET_METADATA_TYPE = "event_ticket"


class StripeEventHandler:
    """Handles the business logic for different types of Stripe webhook events."""

    def __init__(self, event: stripe.Event):
        """Initialize the Stripe event handler."""
        self.event = event

    def handle(self) -> None:
        """Routes the event to the appropriate handler based on its type."""
        event_type = self.event.type
        handler_method = getattr(self, f"handle_{event_type.replace('.', '_')}", self.handle_unknown_event)
        handler_method(self.event)

    def handle_unknown_event(self, event: stripe.Event) -> None:
        """Log unhandled event types for future development."""
        logger.info("stripe_webhook_unhandled_event", event_type=event.type, event_id=event.id)

    def handle_checkout_session_completed(self, event: stripe.Event) -> None:
        """Mark the registration behind a completed ticket checkout as paid.

        Stripe delivers at least once; ``mark_paid`` makes redelivery harmless.
        """
        session = event.data.object
        session_id = session["id"]
        metadata = session.get("metadata") or {}

        if metadata.get("type") != TICKET_METADATA_TYPE:
            logger.info("stripe_session_not_a_ticket", session_id=session_id, metadata_type=metadata.get("type"))
            return

        if session["payment_status"] not in {"paid", "no_payment_required"}:
            logger.warning(
                "stripe_session_unresolved_payment",
                session_id=session_id,
                payment_status=session["payment_status"],
            )
            return

        try:
            registration_id = uuid.UUID(str(metadata.get("registration_id")))
        except ValueError:
            registration_id = None
        registration = Registration.objects.filter(pk=registration_id).first() if registration_id else None
        if registration is None:
            logger.warning(
                "stripe_session_unknown_registration",
                session_id=session_id,
                registration_id=metadata.get("registration_id"),
            )
            return

        amount_total = session.get("amount_total")
        registration_service.mark_paid(
            registration,
            payment_reference=session.get("payment_intent") or session_id,
            amount=from_minor_units(amount_total) if amount_total is not None else None,
        )
