import typing as t
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.db.models import Q

from common.models import TimeStampedModel
from events.utils import generate_qr_token

from .event import Event


class RegistrationQuerySet(models.QuerySet["Registration"]):
    def confirmed(self) -> t.Self:
        return self.filter(status=Registration.Status.CONFIRMED)

    def with_event(self) -> t.Self:
        return self.select_related("event", "event__organizer")

    def with_user(self) -> t.Self:
        return self.select_related("user")


class RegistrationManager(models.Manager["Registration"]):
    def get_queryset(self) -> RegistrationQuerySet:
        return RegistrationQuerySet(self.model, using=self._db)

    def confirmed(self) -> RegistrationQuerySet:
        return self.get_queryset().confirmed()

    def with_event(self) -> RegistrationQuerySet:
        return self.get_queryset().with_event()

    def with_user(self) -> RegistrationQuerySet:
        return self.get_queryset().with_user()


class Registration(TimeStampedModel):
    """A ticket for a specific user to a specific event.

    A confirmed registration occupies one seat of its event. Cancellation is terminal for the record.
    """

    class Status(models.TextChoices):
        CONFIRMED = "confirmed"
        CANCELLED = "cancelled"

    class PaymentMethod(models.TextChoices):
        ONLINE = "online"
        OFFLINE = "offline"
        FREE = "free"

    class PaymentStatus(models.TextChoices):
        PAID = "paid"
        PENDING = "pending"
        FREE = "free"

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="registrations")
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="registrations")
    attendee_name = models.CharField(max_length=255)
    attendee_email = models.EmailField()
    qr_code = models.CharField(max_length=64, unique=True, default=generate_qr_token, editable=False)
    checked_in = models.BooleanField(default=False)
    checked_in_at = models.DateTimeField(null=True, blank=True, editable=False)
    payment_method = models.CharField(choices=PaymentMethod.choices, max_length=10, default=PaymentMethod.FREE)
    payment_status = models.CharField(
        choices=PaymentStatus.choices, max_length=10, default=PaymentStatus.FREE, db_index=True
    )
    stripe_session_id = models.CharField(max_length=255, blank=True, db_index=True)
    payment_reference = models.CharField(
        max_length=255, blank=True, help_text="Provider payment id, or a marker for payments collected offline."
    )
    amount_paid = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)
    status = models.CharField(choices=Status.choices, max_length=10, default=Status.CONFIRMED, db_index=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)

    objects = RegistrationManager()

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["event", "user"],
                condition=Q(status="confirmed"),
                name="unique_confirmed_registration_per_event_user",
                violation_error_message="You are already registered for this event.",
            ),
        ]
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.attendee_name} @ {self.event_id} ({self.status})"

    @classmethod
    def payment_status_for(cls, event: Event, payment_method: str) -> "Registration.PaymentStatus":
        """Free events and free payments need no confirmation, everything else starts pending."""
        if event.is_free or payment_method == cls.PaymentMethod.FREE:
            return cls.PaymentStatus.FREE
        return cls.PaymentStatus.PENDING

    @property
    def is_confirmed(self) -> bool:
        return self.status == self.Status.CONFIRMED

    @property
    def is_payable(self) -> bool:
        return self.is_confirmed and self.payment_status == self.PaymentStatus.PENDING

    @property
    def amount_due(self) -> Decimal:
        if self.payment_status != self.PaymentStatus.PENDING:
            return Decimal("0")
        return self.event.ticket_price or Decimal("0")
