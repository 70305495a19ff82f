"""Waitlist queue operations.

Positions are never stored. They are derived from the join order of the ``waiting`` entries every
time they are read, so leaving the queue costs a single write.
"""

import typing as t
from collections.abc import Iterable

import structlog
from django.db import IntegrityError, transaction
from django.db.models import Case, IntegerField, QuerySet, Value, When

from events.exceptions import (
    AlreadyOnWaitlistError,
    AlreadyRegisteredError,
    EventNotFullError,
    NoActiveWaitlistEntryError,
    OfferAlreadyClaimedError,
)
from events.models import Event, Registration, WaitlistEntry
from events.service import ensure_organizer, lock_event
from events.service.notification_service import NotificationType, notify
from events.service.types import WaitlistJoinResult, WaitlistPosition

if t.TYPE_CHECKING:
    from accounts.models import TicketboothUser

logger = structlog.get_logger(__name__)


def rank(waiting: Iterable[WaitlistEntry], entry: WaitlistEntry) -> int | None:
    """1-based rank of ``entry`` among ``waiting``, ordered by join time then id.

    Returns None if the entry is not part of the snapshot.
    """
    ordered = sorted(waiting, key=lambda e: (e.joined_at, e.pk))
    for index, candidate in enumerate(ordered, start=1):
        if candidate.pk == entry.pk:
            return index
    return None


@transaction.atomic
def join(
    event: Event,
    user: "TicketboothUser",
    *,
    attendee_name: str = "",
    attendee_email: str = "",
) -> WaitlistJoinResult:
    """Put the user at the back of the queue of a full event.

    The returned position is a point-in-time estimate; entries ahead may leave later.

    Raises:
        EventNotFullError: If a seat is still available.
        AlreadyRegisteredError: If the user already holds a confirmed registration.
        AlreadyOnWaitlistError: If the user is already waiting or holds an offer.
    """
    locked = lock_event(event)
    if not locked.is_full:
        raise EventNotFullError()
    if Registration.objects.confirmed().filter(event=locked, user=user).exists():
        raise AlreadyRegisteredError()
    if WaitlistEntry.objects.active().filter(event=locked, user=user).exists():
        raise AlreadyOnWaitlistError()

    position = WaitlistEntry.objects.filter(event=locked, status=WaitlistEntry.Status.WAITING).count() + 1
    try:
        entry = WaitlistEntry.objects.create(
            event=locked,
            user=user,
            attendee_name=attendee_name or user.get_display_name(),
            attendee_email=attendee_email or user.email,
        )
    except IntegrityError as e:
        raise AlreadyOnWaitlistError() from e

    logger.info("waitlist_joined", event_id=str(locked.pk), entry_id=str(entry.pk), position=position)
    notify(NotificationType.WAITLIST_JOINED, entry=entry, position=position)
    return WaitlistJoinResult(entry=entry, position=position)


def position(event: Event, user: "TicketboothUser") -> WaitlistPosition | None:
    """Where the user currently stands, or None without an active entry."""
    entry = WaitlistEntry.objects.active().filter(event=event, user=user).first()
    if entry is None:
        return None
    waiting = list(
        WaitlistEntry.objects.filter(event=event, status=WaitlistEntry.Status.WAITING).only("id", "joined_at")
    )
    if entry.status == WaitlistEntry.Status.OFFERED:
        return WaitlistPosition(entry=entry, position=0, is_offered=True, total_waiting=len(waiting))
    return WaitlistPosition(
        entry=entry,
        position=t.cast(int, rank(waiting, entry)),
        is_offered=False,
        total_waiting=len(waiting),
    )


@transaction.atomic
def leave(event: Event, user: "TicketboothUser") -> WaitlistEntry:
    """Leave the queue or decline an offer. No seat is freed, so nobody is promoted.

    Raises:
        NoActiveWaitlistEntryError: If the user is neither waiting nor holding an offer.
        OfferAlreadyClaimedError: If the offer was claimed. The seat is released by cancelling the registration.
    """
    entry = WaitlistEntry.objects.select_for_update().active().filter(event=event, user=user).first()
    if entry is None:
        raise NoActiveWaitlistEntryError()
    if entry.registration_id is not None:
        raise OfferAlreadyClaimedError()
    previous = entry.status
    entry.cancel()
    logger.info("waitlist_left", event_id=str(event.pk), entry_id=str(entry.pk), previous_status=previous)
    return entry


def list_for_organizer(event: Event, organizer: "TicketboothUser") -> QuerySet[WaitlistEntry]:
    """Every entry of the event: waiting ones first in queue order, then the rest by join time."""
    ensure_organizer(event, organizer)
    return (
        WaitlistEntry.objects.select_related("user")
        .filter(event=event)
        .annotate(
            queue_group=Case(
                When(status=WaitlistEntry.Status.WAITING, then=Value(0)),
                default=Value(1),
                output_field=IntegerField(),
            )
        )
        .order_by("queue_group", "joined_at", "id")
    )


def count_waiting(event: Event) -> int:
    return WaitlistEntry.objects.filter(event=event, status=WaitlistEntry.Status.WAITING).count()


def entries_for_user(user: "TicketboothUser") -> QuerySet[WaitlistEntry]:
    """The user's active entries across all events."""
    return WaitlistEntry.objects.active().select_related("event").filter(user=user).order_by("joined_at")
