from uuid import UUID

from ninja_extra import api_controller, route

from common.authentication import I18nJWTAuth
from common.throttling import CheckInThrottle, WriteThrottle
from events import schema
from events.controllers.permissions import EventOrganizerPermission
from events.service import capacity, registration_service
from events.service.types import CheckInResult

from .base import EventAdminBaseController


@api_controller(
    "/event-admin/{event_id}",
    auth=I18nJWTAuth(),
    permissions=[EventOrganizerPermission()],
    tags=["Event Admin"],
    throttle=WriteThrottle(),
)
class EventAdminCoreController(EventAdminBaseController):
    """Door check-in and counter maintenance."""

    @route.post(
        "/check-in",
        url_name="check_in",
        response=schema.CheckInResponseSchema,
        throttle=CheckInThrottle(),
    )
    def check_in(self, event_id: UUID, payload: schema.CheckInRequestSchema) -> CheckInResult:
        """Check in the holder of a scanned ticket.

        A ticket scanned a second time is not an error: the response has `success` false and
        `reason` `already_checked_in`, and the original check-in time is kept.
        """
        event = self.get_one(event_id)
        return registration_service.check_in(payload.qr_code, self.user(), event=event)

    @route.post("/reconcile", url_name="reconcile_registration_count", response=schema.ReconcileResponseSchema)
    def reconcile(self, event_id: UUID) -> dict[str, int | bool]:
        """Recount the confirmed registrations and fix the event's counter if it drifted."""
        previous, actual = capacity.reconcile(self.get_one(event_id))
        return {"previous": previous, "actual": actual, "drifted": previous != actual}
