import typing as t

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone

from common.models import TimeStampedModel
from events.exceptions import InvalidWaitlistTransitionError

from .event import Event
from .registration import Registration


class WaitlistEntryQuerySet(models.QuerySet["WaitlistEntry"]):
    def active(self) -> t.Self:
        """Entries still holding a place in line, i.e. waiting or offered."""
        return self.filter(status__in=WaitlistEntry.ACTIVE_STATUSES)

    def waiting(self) -> t.Self:
        return self.filter(status=WaitlistEntry.Status.WAITING)

    def in_queue_order(self) -> t.Self:
        """Earliest joined first; the primary key breaks ties between identical timestamps."""
        return self.order_by("joined_at", "id")


class WaitlistEntryManager(models.Manager["WaitlistEntry"]):
    def get_queryset(self) -> WaitlistEntryQuerySet:
        return WaitlistEntryQuerySet(self.model, using=self._db)

    def active(self) -> WaitlistEntryQuerySet:
        return self.get_queryset().active()


class WaitlistEntry(TimeStampedModel):
    """A place in an event's waitlist.

    The rank in line is never stored; it is derived from ``joined_at`` whenever it is read.
    """

    class Status(models.TextChoices):
        WAITING = "waiting"
        OFFERED = "offered"
        PROMOTED = "promoted"
        EXPIRED = "expired"
        CANCELLED = "cancelled"

    ACTIVE_STATUSES = (Status.WAITING, Status.OFFERED)

    TRANSITIONS: dict[str, frozenset[str]] = {
        Status.WAITING: frozenset({Status.OFFERED, Status.PROMOTED, Status.CANCELLED}),
        Status.OFFERED: frozenset({Status.PROMOTED, Status.CANCELLED, Status.EXPIRED}),
        Status.PROMOTED: frozenset(),
        Status.EXPIRED: frozenset(),
        Status.CANCELLED: frozenset(),
    }

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="waitlist_entries")
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="waitlist_entries")
    attendee_name = models.CharField(max_length=255)
    attendee_email = models.EmailField()
    status = models.CharField(choices=Status.choices, max_length=10, default=Status.WAITING, db_index=True)
    joined_at = models.DateTimeField(default=timezone.now, db_index=True)
    offered_at = models.DateTimeField(null=True, blank=True)
    promoted_at = models.DateTimeField(null=True, blank=True)
    closed_at = models.DateTimeField(null=True, blank=True, help_text="When the entry was cancelled or expired.")
    registration = models.OneToOneField(
        Registration,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="waitlist_entry",
        help_text="The registration this entry led to, once claimed or promoted.",
    )

    objects = WaitlistEntryManager()

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["event", "user"],
                condition=Q(status__in=["waiting", "offered"]),
                name="unique_active_waitlist_entry_per_event_user",
                violation_error_message="You are already on the waitlist for this event.",
            ),
        ]
        indexes = [
            models.Index(fields=["event", "status", "joined_at"], name="idx_waitlist_queue"),
        ]
        ordering = ["joined_at", "id"]
        verbose_name_plural = "waitlist entries"

    def __str__(self) -> str:
        return f"{self.attendee_name} waiting for {self.event_id} ({self.status})"

    @property
    def is_active(self) -> bool:
        return self.status in self.ACTIVE_STATUSES

    def can_transition(self, target: str) -> bool:
        return target in self.TRANSITIONS[self.status]

    def _transition(self, target: "WaitlistEntry.Status", **fields: t.Any) -> None:
        if not self.can_transition(target):
            raise InvalidWaitlistTransitionError(current=self.status, target=target)
        self.status = target
        for name, value in fields.items():
            setattr(self, name, value)
        self.save(update_fields=["status", *fields.keys(), "updated_at"])

    def offer(self) -> None:
        """Select this entry for a freed seat on a paid event."""
        self._transition(self.Status.OFFERED, offered_at=timezone.now())

    def promote(self, registration: Registration) -> None:
        """Mark the seat as obtained through the given registration."""
        self._transition(self.Status.PROMOTED, promoted_at=timezone.now(), registration=registration)

    def cancel(self) -> None:
        self._transition(self.Status.CANCELLED, closed_at=timezone.now())

    def expire(self) -> None:
        self._transition(self.Status.EXPIRED, closed_at=timezone.now())
