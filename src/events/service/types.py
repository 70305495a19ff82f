import typing as t
from dataclasses import dataclass

from events.models import Registration, WaitlistEntry


@dataclass
class PromotionOutcome:
    """What happened to the waitlist when a seat was freed.

    Attributes:
        promoted: True if a waiting entry was promoted or offered the seat.
        kind: ``"free"`` when a registration was created right away, ``"paid"`` when the seat was offered.
        reason: Why nothing was promoted, e.g. ``"event_full"``, ``"offers_pending"``,
            ``"queue_empty"`` or ``"failed"``.
    """

    promoted: bool
    kind: t.Literal["free", "paid"] | None = None
    entry: WaitlistEntry | None = None
    registration: Registration | None = None
    reason: str | None = None
    error: str | None = None


@dataclass
class CancellationResult:
    registration: Registration
    promotion: PromotionOutcome


@dataclass
class CheckInResult:
    """Outcome of scanning a ticket. A repeated scan is a normal, unsuccessful result."""

    success: bool
    registration: Registration
    reason: t.Literal["already_checked_in", "registration_cancelled"] | None = None


@dataclass
class WaitlistJoinResult:
    entry: WaitlistEntry
    position: int


@dataclass
class WaitlistPosition:
    """A user's place in line, computed at read time.

    An offered entry is at the front of the line: ``position`` is 0 and ``is_offered`` is True.
    """

    entry: WaitlistEntry
    position: int
    is_offered: bool
    total_waiting: int
