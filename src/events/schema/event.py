"""Event-related schemas."""

import typing as t
from decimal import Decimal
from uuid import UUID

from ninja import ModelSchema, Schema
from pydantic import AwareDatetime, Field, model_validator

from common.schema import OneToOneFiftyString, OneToTwoFiftyFiveString, StrippedString
from events.models import Event, WaitlistEntry


class EventCreateSchema(Schema):
    title: OneToTwoFiftyFiveString
    description: StrippedString = ""
    category: StrippedString = ""
    start: AwareDatetime
    end: AwareDatetime | None = None
    location_type: Event.LocationType = Event.LocationType.PHYSICAL
    venue: StrippedString = ""
    address: StrippedString = ""
    city: StrippedString = ""
    country: StrippedString = ""
    capacity: int = Field(..., ge=1, description="Maximum number of confirmed registrations")
    ticket_type: Event.TicketType = Event.TicketType.FREE
    ticket_price: Decimal | None = Field(None, gt=0, max_digits=10, decimal_places=2)

    @model_validator(mode="after")
    def check_price(self) -> t.Self:
        """Paid events need a price, free events must not have one."""
        if self.ticket_type == Event.TicketType.PAID and self.ticket_price is None:
            raise ValueError("Paid events require a ticket price.")
        if self.ticket_type == Event.TicketType.FREE:
            self.ticket_price = None
        return self


class OrganizerSchema(Schema):
    id: UUID
    display_name: str


class EventDetailSchema(ModelSchema):
    id: UUID
    organizer: OrganizerSchema
    spots_left: int
    ticket_price: float | None = None
    waitlist_count: int = 0

    @staticmethod
    def resolve_waitlist_count(obj: Event) -> int:
        return WaitlistEntry.objects.filter(event=obj, status=WaitlistEntry.Status.WAITING).count()

    class Meta:
        model = Event
        fields = [
            "id",
            "title",
            "slug",
            "description",
            "category",
            "start",
            "end",
            "location_type",
            "venue",
            "address",
            "city",
            "country",
            "capacity",
            "registration_count",
            "ticket_type",
            "ticket_price",
        ]


class MinimalEventSchema(ModelSchema):
    id: UUID
    ticket_price: float | None = None

    class Meta:
        model = Event
        fields = ["id", "title", "slug", "start", "ticket_type", "ticket_price"]


class ReconcileResponseSchema(Schema):
    previous: int
    actual: int
    drifted: bool

