from uuid import UUID

from django.db.models import QuerySet
from django.shortcuts import get_object_or_404
from ninja_extra import api_controller, route
from ninja_extra.pagination import PageNumberPaginationExtra, PaginatedResponseSchema, paginate
from ninja_extra.searching import Searching, searching

from common.authentication import I18nJWTAuth
from common.throttling import UserDefaultThrottle, WriteThrottle
from events import models, schema
from events.controllers.permissions import EventOrganizerPermission
from events.service import registration_service

from .base import EventAdminBaseController


@api_controller(
    "/event-admin/{event_id}",
    auth=I18nJWTAuth(),
    permissions=[EventOrganizerPermission()],
    tags=["Event Admin"],
    throttle=WriteThrottle(),
)
class EventAdminRegistrationsController(EventAdminBaseController):
    """Attendee list and offline payments."""

    @route.get(
        "/registrations",
        url_name="list_event_registrations",
        response=PaginatedResponseSchema[schema.RegistrationSchema],
        throttle=UserDefaultThrottle(),
    )
    @paginate(PageNumberPaginationExtra, page_size=50)
    @searching(Searching, search_fields=["attendee_name", "attendee_email", "qr_code"])
    def list_registrations(self, event_id: UUID) -> QuerySet[models.Registration]:
        """List every registration of the event, newest first, cancelled ones included."""
        return registration_service.list_for_event(self.get_one(event_id), self.user())

    @route.post(
        "/registrations/{uuid:registration_id}/mark-paid",
        url_name="mark_registration_paid",
        response=schema.RegistrationSchema,
    )
    def mark_paid(self, event_id: UUID, registration_id: UUID) -> models.Registration:
        """Record that the attendee paid the ticket price in person.

        Marking an already paid registration again changes nothing.
        """
        event = self.get_one(event_id)
        registration = get_object_or_404(
            models.Registration.objects.select_related("event"), pk=registration_id, event=event
        )
        return registration_service.mark_offline_paid(registration, self.user())
