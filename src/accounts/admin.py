"""Admin interface for accounts app."""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin

from accounts.models import TicketboothUser


@admin.register(TicketboothUser)
class TicketboothUserAdmin(UserAdmin):  # type: ignore[type-arg]
    list_display = ["username", "email", "preferred_name", "external_id", "is_staff", "date_joined"]
    search_fields = ["username", "email", "preferred_name", "external_id"]
    fieldsets = (
        *UserAdmin.fieldsets,  # type: ignore[misc]
        ("Identity", {"fields": ("external_id", "preferred_name", "language")}),
    )
