"""Waitlist-related schemas."""

import typing as t
from uuid import UUID

from ninja import ModelSchema, Schema
from pydantic import EmailStr

from common.schema import OneToOneFiftyString
from events.models import WaitlistEntry

from .event import MinimalEventSchema


class JoinWaitlistSchema(Schema):
    attendee_name: OneToOneFiftyString | None = None
    attendee_email: EmailStr | None = None


class WaitlistEntrySchema(ModelSchema):
    """Schema for waitlist entry details in admin views."""

    id: UUID
    event_id: UUID
    user_id: UUID
    registration_id: UUID | None = None

    class Meta:
        model = WaitlistEntry
        fields = [
            "id",
            "attendee_name",
            "attendee_email",
            "status",
            "joined_at",
            "offered_at",
            "promoted_at",
            "closed_at",
        ]


class UserWaitlistEntrySchema(WaitlistEntrySchema):
    event: MinimalEventSchema


class WaitlistJoinResponseSchema(Schema):
    entry: WaitlistEntrySchema
    position: int


class WaitlistPositionSchema(Schema):
    position: int
    is_offered: bool
    total_waiting: int
    status: WaitlistEntry.Status


class WaitlistCountSchema(Schema):
    count: int


class PromotionOutcomeSchema(Schema):
    promoted: bool
    kind: t.Literal["free", "paid"] | None = None
    entry_id: UUID | None = None
    registration_id: UUID | None = None
    reason: str | None = None

    @staticmethod
    def resolve_entry_id(obj: t.Any) -> UUID | None:
        return obj.entry.pk if obj.entry else None

    @staticmethod
    def resolve_registration_id(obj: t.Any) -> UUID | None:
        return obj.registration.pk if obj.registration else None
