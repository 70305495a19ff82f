from uuid import UUID

from django.db.models import QuerySet
from ninja_extra import api_controller, route
from ninja_extra.pagination import PageNumberPaginationExtra, PaginatedResponseSchema, paginate

from common.authentication import I18nJWTAuth
from common.throttling import UserDefaultThrottle, WriteThrottle
from events import models, schema
from events.controllers.permissions import EventOrganizerPermission
from events.service import promotion_service, waitlist_service
from events.service.types import PromotionOutcome

from .base import EventAdminBaseController


@api_controller(
    "/event-admin/{event_id}",
    auth=I18nJWTAuth(),
    permissions=[EventOrganizerPermission()],
    tags=["Event Admin"],
    throttle=WriteThrottle(),
)
class EventAdminWaitlistController(EventAdminBaseController):
    """Event waitlist management endpoints."""

    @route.get(
        "/waitlist",
        url_name="list_waitlist",
        response=PaginatedResponseSchema[schema.WaitlistEntrySchema],
        throttle=UserDefaultThrottle(),
    )
    @paginate(PageNumberPaginationExtra, page_size=50)
    def list_waitlist(self, event_id: UUID) -> QuerySet[models.WaitlistEntry]:
        """List all waitlist entries of the event.

        Entries still waiting come first, in queue order. Offered, promoted, expired and cancelled
        entries follow by join time.
        """
        return waitlist_service.list_for_organizer(self.get_one(event_id), self.user())

    @route.post("/waitlist/promote", url_name="promote_waitlist", response=schema.PromotionOutcomeSchema)
    def promote(self, event_id: UUID) -> PromotionOutcome:
        """Hand a free seat to the next person in line, e.g. after raising the capacity.

        Nothing happens if the event is full or nobody is waiting.
        """
        return promotion_service.trigger_promotion(self.get_one(event_id), self.user())
