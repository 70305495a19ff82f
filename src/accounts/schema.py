"""Schema for accounts module."""

from ninja import ModelSchema, Schema
from pydantic import UUID4, EmailStr, Field

from common.schema import OneToTwoFiftyFiveString, StrippedString

from .models import TicketboothUser


class TicketboothUserSchema(ModelSchema):
    id: UUID4
    display_name: str

    class Meta:
        model = TicketboothUser
        fields = ["email", "first_name", "last_name", "preferred_name", "language"]


class MinimalUserSchema(ModelSchema):
    display_name: str

    class Meta:
        model = TicketboothUser
        fields = ["id", "email"]


class ProfileUpdateSchema(Schema):
    preferred_name: StrippedString = ""
    first_name: StrippedString = ""
    last_name: StrippedString = ""


class IdentityExchangeSchema(Schema):
    external_id: OneToTwoFiftyFiveString = Field(..., description="Subject of the user at the identity provider.")
    email: EmailStr | None = None
    name: StrippedString = ""
