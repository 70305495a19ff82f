from .event import Event
from .registration import Registration
from .waitlist import WaitlistEntry

__all__ = ["Event", "Registration", "WaitlistEntry"]
