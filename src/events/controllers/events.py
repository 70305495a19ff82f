import typing as t
from uuid import UUID

from ninja_extra import api_controller, route

from common.authentication import I18nJWTAuth, OptionalAuth
from common.controllers import UserAwareController
from common.throttling import AnonDefaultThrottle, WriteThrottle
from events import models, schema
from events.exceptions import NotFoundError
from events.service import event_service, registration_service, waitlist_service
from events.service.types import WaitlistJoinResult


@api_controller("/events", auth=I18nJWTAuth(), tags=["Events"], throttle=WriteThrottle())
class EventController(UserAwareController):
    """Public event details, registration and the attendee side of the waitlist."""

    def get_one(self, event_id: UUID) -> models.Event:
        """Wrapper helper."""
        return t.cast(models.Event, self.get_object_or_exception(models.Event.objects.with_organizer(), pk=event_id))

    @route.post("/", url_name="create_event", response={201: schema.EventDetailSchema})
    def create_event(self, payload: schema.EventCreateSchema) -> tuple[int, models.Event]:
        """Create an event. The authenticated user becomes its organizer."""
        return 201, event_service.create_event(self.user(), payload)

    @route.get(
        "/{uuid:event_id}",
        url_name="event_detail",
        response=schema.EventDetailSchema,
        auth=OptionalAuth(),
        throttle=AnonDefaultThrottle(),
    )
    def get_event(self, event_id: UUID) -> models.Event:
        """Event details, including remaining seats and the length of the waitlist."""
        return self.get_one(event_id)

    @route.post("/{uuid:event_id}/register", url_name="register", response={201: schema.RegistrationSchema})
    def register(self, event_id: UUID, payload: schema.RegisterSchema) -> tuple[int, models.Registration]:
        """Register for the event.

        Free events confirm immediately. Paid events create a pending registration: pay online through
        the checkout endpoint, or at the venue for `offline`. Fails with `capacity_exceeded` when the
        event is full; join the waitlist instead.
        """
        registration = registration_service.register(
            self.get_one(event_id),
            self.user(),
            attendee_name=payload.attendee_name or "",
            attendee_email=payload.attendee_email or "",
            payment_method=payload.payment_method,
        )
        return 201, registration

    @route.get("/{uuid:event_id}/my-registration", url_name="my_registration", response=schema.RegistrationSchema)
    def my_registration(self, event_id: UUID) -> models.Registration:
        """The authenticated user's confirmed registration for this event."""
        registration = registration_service.confirmed_registration(self.get_one(event_id), self.user())
        if registration is None:
            raise NotFoundError()
        return registration

    @route.post(
        "/{uuid:event_id}/waitlist",
        url_name="join_waitlist",
        response={201: schema.WaitlistJoinResponseSchema},
    )
    def join_waitlist(
        self, event_id: UUID, payload: schema.JoinWaitlistSchema
    ) -> tuple[int, WaitlistJoinResult]:
        """Join the waitlist of a full event.

        Only possible while the event is full. The returned position is an estimate at the time of joining.
        """
        result = waitlist_service.join(
            self.get_one(event_id),
            self.user(),
            attendee_name=payload.attendee_name or "",
            attendee_email=payload.attendee_email or "",
        )
        return 201, result

    @route.delete("/{uuid:event_id}/waitlist", url_name="leave_waitlist", response=schema.WaitlistEntrySchema)
    def leave_waitlist(self, event_id: UUID) -> models.WaitlistEntry:
        """Leave the waitlist, or decline a spot that was offered."""
        return waitlist_service.leave(self.get_one(event_id), self.user())

    @route.get(
        "/{uuid:event_id}/waitlist/position",
        url_name="waitlist_position",
        response=schema.WaitlistPositionSchema | None,
    )
    def waitlist_position(self, event_id: UUID) -> dict[str, t.Any] | None:
        """The user's current place in line, or null when not on the waitlist.

        A user who has been offered a spot is reported at position 0 with `is_offered` set.
        """
        position = waitlist_service.position(self.get_one(event_id), self.user())
        if position is None:
            return None
        return {
            "position": position.position,
            "is_offered": position.is_offered,
            "total_waiting": position.total_waiting,
            "status": position.entry.status,
        }

    @route.get(
        "/{uuid:event_id}/waitlist/count",
        url_name="waitlist_count",
        response=schema.WaitlistCountSchema,
        auth=OptionalAuth(),
        throttle=AnonDefaultThrottle(),
    )
    def waitlist_count(self, event_id: UUID) -> dict[str, int]:
        """How many people are waiting for a spot."""
        return {"count": waitlist_service.count_waiting(self.get_one(event_id))}

    @route.post(
        "/{uuid:event_id}/waitlist/claim",
        url_name="claim_waitlist_offer",
        response={201: schema.RegistrationSchema},
    )
    def claim_offer(self, event_id: UUID, payload: schema.ClaimOfferSchema) -> tuple[int, models.Registration]:
        """Claim the spot offered from the waitlist of a paid event.

        Creates a pending registration holding the seat. The offer counts as accepted once it is paid.
        """
        registration = registration_service.register_from_waitlist(
            self.get_one(event_id), self.user(), payment_method=payload.payment_method
        )
        return 201, registration
