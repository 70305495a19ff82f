import typing as t

from django.contrib.auth.models import AnonymousUser
from ninja_extra import ControllerBase

from accounts.models import TicketboothUser


class UserAwareController(ControllerBase):
    def maybe_user(self) -> TicketboothUser | AnonymousUser:
        """Get the user for this request."""
        return t.cast(TicketboothUser | AnonymousUser, self.context.request.user)  # type: ignore[union-attr]

    def user(self) -> TicketboothUser:
        """Get the user for this request."""
        return t.cast(TicketboothUser, self.context.request.user)  # type: ignore[union-attr]
