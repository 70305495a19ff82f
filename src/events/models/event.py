import typing as t
from datetime import timedelta

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import F, Q
from django.utils.text import slugify

from common.models import TimeStampedModel

if t.TYPE_CHECKING:
    from accounts.models import TicketboothUser


class EventQuerySet(models.QuerySet["Event"]):
    def with_organizer(self) -> t.Self:
        return self.select_related("organizer")

    def organized_by(self, user: "TicketboothUser") -> t.Self:
        return self.filter(organizer=user)


class EventManager(models.Manager["Event"]):
    def get_queryset(self) -> EventQuerySet:
        return EventQuerySet(self.model, using=self._db)

    def with_organizer(self) -> EventQuerySet:
        return self.get_queryset().with_organizer()


class Event(TimeStampedModel):
    class TicketType(models.TextChoices):
        FREE = "free"
        PAID = "paid"

    class LocationType(models.TextChoices):
        PHYSICAL = "physical"
        ONLINE = "online"

    organizer = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="organized_events")
    title = models.CharField(max_length=255, db_index=True)
    slug = models.SlugField(max_length=255, unique=True)
    description = models.TextField(blank=True)
    category = models.CharField(max_length=100, blank=True)
    start = models.DateTimeField(db_index=True)
    end = models.DateTimeField()
    location_type = models.CharField(choices=LocationType.choices, max_length=10, default=LocationType.PHYSICAL)
    venue = models.CharField(max_length=255, blank=True)
    address = models.CharField(max_length=255, blank=True)
    city = models.CharField(max_length=100, blank=True)
    country = models.CharField(max_length=100, blank=True)
    capacity = models.PositiveIntegerField()
    ticket_type = models.CharField(choices=TicketType.choices, max_length=10, default=TicketType.FREE)
    ticket_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(0)],
        help_text="Price of one ticket, in the major currency unit. Required for paid events.",
    )

    registration_count = models.PositiveIntegerField(default=0, editable=False)

    objects = EventManager()

    class Meta:
        constraints = [
            models.CheckConstraint(
                condition=Q(registration_count__lte=F("capacity")),
                name="event_registration_count_within_capacity",
            ),
        ]
        ordering = ["start"]

    def save(self, *args: t.Any, **kwargs: t.Any) -> None:
        """Derive a unique slug and a default end when missing."""
        if not self.slug:
            self.slug = self._unique_slug()
        if self.start and not self.end:
            self.end = self.start + timedelta(hours=2)
        super().save(*args, **kwargs)

    def _unique_slug(self) -> str:
        base = slugify(self.title)[:240] or "event"
        slug, n = base, 1
        while Event.objects.filter(slug=slug).exclude(pk=self.pk).exists():
            n += 1
            slug = f"{base}-{n}"
        return slug

    def __str__(self) -> str:
        return self.title

    def clean(self) -> None:
        """Validate pricing and the time window."""
        super().clean()
        if self.ticket_type == self.TicketType.PAID and not self.ticket_price:
            raise DjangoValidationError({"ticket_price": "Paid events require a ticket price greater than zero."})
        if self.start and self.end and self.end < self.start:
            raise DjangoValidationError({"end": "The event cannot end before it starts."})

    @property
    def is_free(self) -> bool:
        return self.ticket_type == self.TicketType.FREE

    @property
    def is_full(self) -> bool:
        return self.registration_count >= self.capacity

    @property
    def spots_left(self) -> int:
        return max(self.capacity - self.registration_count, 0)
