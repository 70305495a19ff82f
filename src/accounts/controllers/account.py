"""This module contains the controllers for the accounts app."""

from ninja_extra import api_controller, route

from accounts.models import TicketboothUser
from accounts.schema import ProfileUpdateSchema, TicketboothUserSchema
from common.authentication import I18nJWTAuth
from common.controllers import UserAwareController
from common.throttling import UserDefaultThrottle


@api_controller("/account", tags=["Account"], auth=I18nJWTAuth(), throttle=UserDefaultThrottle())
class AccountController(UserAwareController):
    @route.get("/me", response=TicketboothUserSchema, url_name="me")
    def me(self) -> TicketboothUser:
        """Retrieve the authenticated user's profile information."""
        return self.user()

    @route.put("/me", response=TicketboothUserSchema, url_name="update-profile")
    def update_profile(self, payload: ProfileUpdateSchema) -> TicketboothUser:
        """Update the authenticated user's name fields.

        The preferred name is the attendee name used on new registrations and waitlist entries.
        """
        user = self.user()
        for key, value in payload.dict().items():
            setattr(user, key, value)
        user.save(update_fields=list(payload.dict().keys()))
        return user
