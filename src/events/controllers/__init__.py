from .event_admin import EVENT_ADMIN_CONTROLLERS
from .events import EventController
from .me import MeController
from .registrations import RegistrationController
from .stripe_webhook import StripeWebhookController

EVENT_CONTROLLERS: list[type] = [
    EventController,
    RegistrationController,
    MeController,
    *EVENT_ADMIN_CONTROLLERS,
    StripeWebhookController,
]

__all__ = ["EVENT_CONTROLLERS"]
