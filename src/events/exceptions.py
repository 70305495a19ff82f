import typing as t

from django.utils.translation import gettext_lazy as _


class TicketingError(Exception):
    """Base class for the failures of registration, waitlist and payment operations.

    Every subclass maps to a single HTTP status and a stable machine readable ``code``.
    """

    status_code: int = 400
    code: str = "ticketing_error"
    default_message: t.Any = _("The request could not be completed.")

    def __init__(self, message: str | None = None) -> None:
        self.message = str(message or self.default_message)
        super().__init__(self.message)


class NotFoundError(TicketingError):
    status_code = 404
    code = "not_found"
    default_message = _("Not found.")


class UnauthorizedError(TicketingError):
    """Raised when the actor is neither the owner nor the organizer of the target."""

    status_code = 403
    code = "unauthorized"
    default_message = _("You are not allowed to perform this action.")


class CapacityExceededError(TicketingError):
    code = "capacity_exceeded"
    default_message = _("This event is full. Join the waitlist instead.")


class AlreadyRegisteredError(TicketingError):
    code = "already_registered"
    default_message = _("You are already registered for this event.")


class AlreadyOnWaitlistError(TicketingError):
    code = "already_on_waitlist"
    default_message = _("You are already on the waitlist for this event.")


class EventNotFullError(TicketingError):
    code = "event_not_full"
    default_message = _("This event still has spots available. Register directly.")


class NoActiveOfferError(TicketingError):
    code = "no_active_offer"
    default_message = _("You have no active spot offer for this event.")


class NoActiveWaitlistEntryError(TicketingError):
    code = "not_on_waitlist"
    default_message = _("You are not on the waitlist for this event.")


class OfferAlreadyClaimedError(TicketingError):
    code = "offer_already_claimed"
    default_message = _("You already claimed this spot. Cancel your registration instead.")


class RegistrationNotActiveError(TicketingError):
    code = "registration_not_active"
    default_message = _("This registration has been cancelled.")


class PaymentNotRequiredError(TicketingError):
    code = "payment_not_required"
    default_message = _("This registration has nothing left to pay.")


class PaymentNotCompletedError(TicketingError):
    code = "payment_not_completed"
    default_message = _("The payment has not been completed.")


class InvalidWaitlistTransitionError(TicketingError):
    code = "invalid_waitlist_transition"

    def __init__(self, current: str, target: str) -> None:
        self.current = current
        self.target = target
        super().__init__(f"Waitlist entry cannot move from {current} to {target}.")
