"""Events schema package.

This package contains all schema definitions for the events app,
organized into modules that mirror the models package structure.
"""

from .event import (
    EventCreateSchema,
    EventDetailSchema,
    MinimalEventSchema,
    OrganizerSchema,
    ReconcileResponseSchema,
)
from .registration import (
    CancellationResponseSchema,
    CheckInRequestSchema,
    CheckInResponseSchema,
    CheckoutResponseSchema,
    ClaimOfferSchema,
    RegisterSchema,
    RegistrationSchema,
    UserRegistrationSchema,
    VerifyPaymentSchema,
)
from .waitlist import (
    JoinWaitlistSchema,
    PromotionOutcomeSchema,
    UserWaitlistEntrySchema,
    WaitlistCountSchema,
    WaitlistEntrySchema,
    WaitlistJoinResponseSchema,
    WaitlistPositionSchema,
)

__all__ = [
    "CancellationResponseSchema",
    "CheckInRequestSchema",
    "CheckInResponseSchema",
    "CheckoutResponseSchema",
    "ClaimOfferSchema",
    "EventCreateSchema",
    "EventDetailSchema",
    "JoinWaitlistSchema",
    "MinimalEventSchema",
    "OrganizerSchema",
    "PromotionOutcomeSchema",
    "ReconcileResponseSchema",
    "RegisterSchema",
    "RegistrationSchema",
    "UserRegistrationSchema",
    "UserWaitlistEntrySchema",
    "VerifyPaymentSchema",
    "WaitlistCountSchema",
    "WaitlistEntrySchema",
    "WaitlistJoinResponseSchema",
    "WaitlistPositionSchema",
]
