"""Event admin controllers package.

This package splits the event admin endpoints into logical groupings.
"""

from .core import EventAdminCoreController
from .registrations import EventAdminRegistrationsController
from .waitlist import EventAdminWaitlistController

EVENT_ADMIN_CONTROLLERS: list[type] = [
    EventAdminCoreController,
    EventAdminRegistrationsController,
    EventAdminWaitlistController,
]

__all__ = [
    "EventAdminCoreController",
    "EventAdminRegistrationsController",
    "EventAdminWaitlistController",
    "EVENT_ADMIN_CONTROLLERS",
]
