import re
import typing as t
import uuid

from django.conf import settings
from django.contrib.auth.models import AbstractUser, UserManager
from django.db import models

ISSUER_PREFIX_RE = re.compile(r"^https?://[^|]*\|")


def normalize_external_id(raw: str) -> str:
    """Return the canonical form of an identity provider subject.

    Whitespace is stripped, an issuer prefix of the form ``https://issuer|`` is dropped
    and the remainder is lowercased.
    """
    return ISSUER_PREFIX_RE.sub("", raw.strip()).lower()


class TicketboothUserQueryset(models.QuerySet["TicketboothUser"]):
    """Queryset for TicketboothUser."""

    def by_external_id(self, external_id: str) -> "TicketboothUserQueryset":
        return self.filter(external_id=normalize_external_id(external_id))


class TicketboothUserManager(UserManager["TicketboothUser"]):
    def get_queryset(self) -> TicketboothUserQueryset:
        """Get queryset for TicketboothUser."""
        return TicketboothUserQueryset(self.model)


class TicketboothUser(AbstractUser):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    external_id = models.CharField(
        max_length=255,
        unique=True,
        null=True,
        blank=True,
        help_text="Subject of the user at the external identity provider, normalized",
    )
    preferred_name = models.CharField(max_length=255, blank=True, help_text="Preferred name")
    language = models.CharField(
        max_length=7,
        choices=settings.LANGUAGES,
        default=settings.LANGUAGE_CODE,
        help_text="User's preferred language",
    )

    objects = TicketboothUserManager()  # type: ignore[misc]

    class Meta:
        ordering = ["username"]

    def save(self, *args: t.Any, **kwargs: t.Any) -> None:
        """Store the external id in canonical form."""
        if self.external_id:
            self.external_id = normalize_external_id(self.external_id)
        else:
            self.external_id = None
        super().save(*args, **kwargs)

    @property
    def display_name(self) -> str:
        """Display name."""
        return self.get_display_name()

    def get_display_name(self) -> str:
        """Returns the user's preferred name, or their full name as a fallback."""
        return (
            self.preferred_name or self.get_full_name() or re.sub(r"(\W|_)+", " ", self.username.split("@")[0]).title()
        )
