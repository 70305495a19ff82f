"""Registration-related schemas."""

import typing as t
from uuid import UUID

from ninja import ModelSchema, Schema
from pydantic import EmailStr

from common.schema import OneToOneFiftyString, StrippedString
from events.models import Registration

from .event import MinimalEventSchema
from .waitlist import PromotionOutcomeSchema


class RegisterSchema(Schema):
    attendee_name: OneToOneFiftyString | None = None
    attendee_email: EmailStr | None = None
    payment_method: t.Literal["online", "offline"] = "online"


class ClaimOfferSchema(Schema):
    payment_method: t.Literal["online", "offline"] = "online"


class RegistrationSchema(ModelSchema):
    id: UUID
    event_id: UUID
    amount_paid: float | None = None

    class Meta:
        model = Registration
        fields = [
            "id",
            "attendee_name",
            "attendee_email",
            "qr_code",
            "checked_in",
            "checked_in_at",
            "payment_method",
            "payment_status",
            "paid_at",
            "status",
            "cancelled_at",
            "created_at",
        ]


class UserRegistrationSchema(RegistrationSchema):
    """A registration together with the event it is for, for the user's ticket list."""

    event: MinimalEventSchema


class CancellationResponseSchema(Schema):
    registration: RegistrationSchema
    promotion: PromotionOutcomeSchema


class CheckoutResponseSchema(Schema):
    checkout_url: str


class VerifyPaymentSchema(Schema):
    session_id: StrippedString | None = None


class CheckInRequestSchema(Schema):
    """Schema for ticket check-in requests."""

    qr_code: StrippedString


class CheckInResponseSchema(Schema):
    success: bool
    reason: t.Literal["already_checked_in", "registration_cancelled"] | None = None
    registration: RegistrationSchema
