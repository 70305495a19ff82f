from django.db.models import QuerySet
from ninja_extra import api_controller, route

from common.authentication import I18nJWTAuth
from common.controllers import UserAwareController
from common.throttling import UserDefaultThrottle
from events import models, schema
from events.service import waitlist_service


@api_controller("/me", auth=I18nJWTAuth(), tags=["Me"], throttle=UserDefaultThrottle())
class MeController(UserAwareController):
    @route.get("/waitlist", url_name="my_waitlist_entries", response=list[schema.UserWaitlistEntrySchema])
    def my_waitlist(self) -> QuerySet[models.WaitlistEntry]:
        """The user's waitlist entries that are still waiting or hold an offer."""
        return waitlist_service.entries_for_user(self.user())
