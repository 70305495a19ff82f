from uuid import UUID

from django.db.models import QuerySet
from ninja_extra import api_controller, route
from ninja_extra.pagination import PageNumberPaginationExtra, PaginatedResponseSchema, paginate

from common.authentication import I18nJWTAuth
from common.controllers import UserAwareController
from common.throttling import UserDefaultThrottle, WriteThrottle
from events import models, schema
from events.service import registration_service, stripe_service
from events.service.types import CancellationResult


@api_controller("/registrations", auth=I18nJWTAuth(), tags=["Registrations"], throttle=WriteThrottle())
class RegistrationController(UserAwareController):
    """The authenticated user's own tickets."""

    @route.get(
        "/",
        url_name="list_my_registrations",
        response=PaginatedResponseSchema[schema.UserRegistrationSchema],
        throttle=UserDefaultThrottle(),
    )
    @paginate(PageNumberPaginationExtra, page_size=20)
    def list_registrations(self) -> QuerySet[models.Registration]:
        """All registrations of the user, newest first, cancelled ones included."""
        return registration_service.list_for_user(self.user())

    @route.post(
        "/{uuid:registration_id}/cancel",
        url_name="cancel_registration",
        response=schema.CancellationResponseSchema,
    )
    def cancel(self, registration_id: UUID) -> CancellationResult:
        """Cancel a registration and free its seat.

        The seat goes to the waitlist right away: on free events the next person is registered, on paid
        events they are offered the spot. The response reports what happened.
        """
        registration = registration_service.get_for_user(registration_id, self.user())
        return registration_service.cancel(registration, self.user())

    @route.post(
        "/{uuid:registration_id}/checkout",
        url_name="registration_checkout",
        response=schema.CheckoutResponseSchema,
    )
    def checkout(self, registration_id: UUID) -> dict[str, str]:
        """Start an online payment for a pending registration and get the hosted checkout URL."""
        registration = registration_service.get_for_user(registration_id, self.user())
        return {"checkout_url": stripe_service.create_ticket_checkout_session(registration)}

    @route.post(
        "/{uuid:registration_id}/verify-payment",
        url_name="verify_registration_payment",
        response=schema.RegistrationSchema,
    )
    def verify_payment(self, registration_id: UUID, payload: schema.VerifyPaymentSchema) -> models.Registration:
        """Check with the payment provider whether the registration was paid.

        Use this after returning from checkout if the confirmation has not arrived yet.
        """
        registration = registration_service.get_for_user(registration_id, self.user())
        return stripe_service.verify_ticket_payment(registration, session_id=payload.session_id)
