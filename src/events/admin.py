import typing as t

from django.contrib import admin
from django.urls import reverse
from django.utils.html import format_html

from . import models


class UserLinkMixin:
    """Mixin to add a link to a user."""

    def user_link(self, obj: t.Any) -> str:
        url = reverse("admin:accounts_ticketboothuser_change", args=[obj.user.id])
        return format_html('<a href="{}">{}</a>', url, obj.user.username)

    user_link.short_description = "User"  # type: ignore[attr-defined]


class EventLinkMixin:
    """Mixin to add a link to an event."""

    def event_link(self, obj: t.Any) -> str:
        url = reverse("admin:events_event_change", args=[obj.event.id])
        return format_html('<a href="{}">{}</a>', url, obj.event.title)

    event_link.short_description = "Event"  # type: ignore[attr-defined]


@admin.register(models.Event)
class EventAdmin(admin.ModelAdmin):  # type: ignore[type-arg]
    list_display = ["title", "start", "ticket_type", "ticket_price", "capacity", "registration_count", "spots_left"]
    list_filter = ["ticket_type", "location_type", "start"]
    search_fields = ["title", "slug", "organizer__username", "organizer__email"]
    autocomplete_fields = ["organizer"]
    readonly_fields = ["id", "slug", "registration_count", "created_at", "updated_at"]
    date_hierarchy = "start"

    @admin.display(description="Spots left")
    def spots_left(self, obj: models.Event) -> int:
        return obj.spots_left


@admin.register(models.Registration)
class RegistrationAdmin(admin.ModelAdmin, UserLinkMixin, EventLinkMixin):  # type: ignore[type-arg]
    """Registrations are edited through the API only; the admin is for inspection."""

    list_display = [
        "attendee_name",
        "event_link",
        "user_link",
        "status",
        "payment_method",
        "payment_status",
        "checked_in",
        "created_at",
    ]
    list_filter = ["status", "payment_status", "payment_method", "checked_in"]
    search_fields = ["attendee_name", "attendee_email", "qr_code", "user__username", "event__title"]
    readonly_fields = [
        "id",
        "event",
        "user",
        "qr_code",
        "status",
        "payment_status",
        "checked_in",
        "checked_in_at",
        "stripe_session_id",
        "payment_reference",
        "amount_paid",
        "paid_at",
        "cancelled_at",
        "created_at",
        "updated_at",
    ]
    date_hierarchy = "created_at"


@admin.register(models.WaitlistEntry)
class WaitlistEntryAdmin(admin.ModelAdmin, UserLinkMixin, EventLinkMixin):  # type: ignore[type-arg]
    list_display = ["attendee_name", "event_link", "user_link", "status", "position_display", "joined_at"]
    list_filter = ["status", "joined_at"]
    search_fields = ["attendee_name", "attendee_email", "user__username", "event__title"]
    readonly_fields = [
        "id",
        "event",
        "user",
        "status",
        "joined_at",
        "offered_at",
        "promoted_at",
        "closed_at",
        "registration",
        "position_display",
    ]
    ordering = ["event", "joined_at", "id"]

    @admin.display(description="Position")
    def position_display(self, obj: models.WaitlistEntry) -> int | None:
        if obj.status != models.WaitlistEntry.Status.WAITING:
            return None
        earlier = models.WaitlistEntry.objects.filter(
            event_id=obj.event_id, status=models.WaitlistEntry.Status.WAITING, joined_at__lt=obj.joined_at
        ).count()
        return earlier + 1
