from datetime import datetime, timedelta
from types import SimpleNamespace
from uuid import UUID

import pytest
from freezegun import freeze_time

from accounts.models import TicketboothUser
from conftest import TicketboothUserFactory
from events.exceptions import (
    AlreadyOnWaitlistError,
    AlreadyRegisteredError,
    EventNotFullError,
    NoActiveWaitlistEntryError,
    OfferAlreadyClaimedError,
    UnauthorizedError,
)
from events.models import Event, Registration, WaitlistEntry
from events.service import registration_service, waitlist_service

pytestmark = pytest.mark.django_db


def _join_at(event: Event, user: TicketboothUser, when: str) -> WaitlistEntry:
    with freeze_time(when):
        return waitlist_service.join(event, user).entry


class TestRank:
    def test_orders_by_join_time(self) -> None:
        now = datetime(2030, 1, 1, 10, 0)
        a = SimpleNamespace(pk=UUID(int=3), joined_at=now)
        b = SimpleNamespace(pk=UUID(int=1), joined_at=now + timedelta(minutes=1))

        assert waitlist_service.rank([b, a], a) == 1  # type: ignore[list-item,arg-type]
        assert waitlist_service.rank([b, a], b) == 2  # type: ignore[list-item,arg-type]

    def test_ties_are_broken_by_id(self) -> None:
        now = datetime(2030, 1, 1, 10, 0)
        a = SimpleNamespace(pk=UUID(int=2), joined_at=now)
        b = SimpleNamespace(pk=UUID(int=1), joined_at=now)

        assert waitlist_service.rank([a, b], b) == 1  # type: ignore[list-item,arg-type]
        assert waitlist_service.rank([a, b], a) == 2  # type: ignore[list-item,arg-type]

    def test_missing_entry(self) -> None:
        entry = SimpleNamespace(pk=UUID(int=1), joined_at=datetime(2030, 1, 1))

        assert waitlist_service.rank([], entry) is None  # type: ignore[arg-type]


class TestJoin:
    def test_join_full_event(self, full_free_event: Event, attendee: TicketboothUser) -> None:
        result = waitlist_service.join(full_free_event, attendee)

        assert result.position == 1
        assert result.entry.status == WaitlistEntry.Status.WAITING
        assert result.entry.attendee_email == attendee.email

    def test_positions_follow_join_order(
        self, full_free_event: Event, attendee: TicketboothUser, other_attendee: TicketboothUser
    ) -> None:
        assert waitlist_service.join(full_free_event, attendee).position == 1
        assert waitlist_service.join(full_free_event, other_attendee).position == 2

    def test_event_not_full(self, free_event: Event, attendee: TicketboothUser) -> None:
        with pytest.raises(EventNotFullError):
            waitlist_service.join(free_event, attendee)

    def test_already_registered(self, free_event: Event, attendee: TicketboothUser) -> None:
        registration_service.register(free_event, attendee)
        Event.objects.filter(pk=free_event.pk).update(capacity=1)

        with pytest.raises(AlreadyRegisteredError):
            waitlist_service.join(free_event, attendee)

    def test_already_on_waitlist(self, full_free_event: Event, attendee: TicketboothUser) -> None:
        waitlist_service.join(full_free_event, attendee)

        with pytest.raises(AlreadyOnWaitlistError):
            waitlist_service.join(full_free_event, attendee)

        assert WaitlistEntry.objects.filter(event=full_free_event, user=attendee).count() == 1

    def test_holder_of_an_offer_cannot_join_again(
        self, full_paid_event: Event, attendee: TicketboothUser
    ) -> None:
        entry = waitlist_service.join(full_paid_event, attendee).entry
        entry.offer()

        with pytest.raises(AlreadyOnWaitlistError):
            waitlist_service.join(full_paid_event, attendee)

    def test_can_rejoin_after_leaving(self, full_free_event: Event, attendee: TicketboothUser) -> None:
        waitlist_service.join(full_free_event, attendee)
        waitlist_service.leave(full_free_event, attendee)

        result = waitlist_service.join(full_free_event, attendee)

        assert result.position == 1
        assert WaitlistEntry.objects.filter(event=full_free_event, user=attendee).count() == 2


class TestPosition:
    def test_not_on_waitlist(self, full_free_event: Event, attendee: TicketboothUser) -> None:
        assert waitlist_service.position(full_free_event, attendee) is None

    def test_position_is_recomputed_when_someone_ahead_leaves(
        self,
        full_free_event: Event,
        attendee: TicketboothUser,
        other_attendee: TicketboothUser,
        user_factory: TicketboothUserFactory,
    ) -> None:
        # Arrange
        _join_at(full_free_event, attendee, "2030-01-01 10:00:00")
        _join_at(full_free_event, other_attendee, "2030-01-01 10:01:00")
        third = user_factory()
        _join_at(full_free_event, third, "2030-01-01 10:02:00")
        before = waitlist_service.position(full_free_event, third)
        assert before is not None and before.position == 3

        # Act
        waitlist_service.leave(full_free_event, attendee)

        # Assert
        after = waitlist_service.position(full_free_event, third)
        assert after is not None
        assert after.position == 2
        assert after.total_waiting == 2
        assert after.is_offered is False

    def test_offered_entry_is_at_position_zero(
        self, full_paid_event: Event, attendee: TicketboothUser, other_attendee: TicketboothUser
    ) -> None:
        _join_at(full_paid_event, attendee, "2030-01-01 10:00:00")
        _join_at(full_paid_event, other_attendee, "2030-01-01 10:01:00")
        holder = Registration.objects.filter(event=full_paid_event).first()
        assert holder is not None
        registration_service.cancel(holder, holder.user)

        offered = waitlist_service.position(full_paid_event, attendee)
        waiting = waitlist_service.position(full_paid_event, other_attendee)

        assert offered is not None
        assert offered.position == 0
        assert offered.is_offered is True
        assert waiting is not None
        assert waiting.position == 1
        assert waiting.total_waiting == 1

    def test_closed_entries_have_no_position(self, full_free_event: Event, attendee: TicketboothUser) -> None:
        waitlist_service.join(full_free_event, attendee)
        waitlist_service.leave(full_free_event, attendee)

        assert waitlist_service.position(full_free_event, attendee) is None


class TestLeave:
    def test_leave_does_not_promote(
        self, full_free_event: Event, attendee: TicketboothUser, other_attendee: TicketboothUser
    ) -> None:
        waitlist_service.join(full_free_event, attendee)
        waitlist_service.join(full_free_event, other_attendee)

        entry = waitlist_service.leave(full_free_event, attendee)

        assert entry.status == WaitlistEntry.Status.CANCELLED
        assert entry.closed_at is not None
        other = WaitlistEntry.objects.get(event=full_free_event, user=other_attendee)
        assert other.status == WaitlistEntry.Status.WAITING
        full_free_event.refresh_from_db()
        assert full_free_event.registration_count == full_free_event.capacity

    def test_decline_an_offer(self, full_paid_event: Event, attendee: TicketboothUser) -> None:
        entry = waitlist_service.join(full_paid_event, attendee).entry
        entry.offer()

        declined = waitlist_service.leave(full_paid_event, attendee)

        assert declined.status == WaitlistEntry.Status.CANCELLED

    def test_claimed_offer_cannot_be_left(self, full_paid_event: Event, attendee: TicketboothUser) -> None:
        # Arrange
        entry = waitlist_service.join(full_paid_event, attendee).entry
        entry.offer()
        Event.objects.filter(pk=full_paid_event.pk).update(capacity=3)
        registration = registration_service.register_from_waitlist(full_paid_event, attendee)

        # Act
        with pytest.raises(OfferAlreadyClaimedError):
            waitlist_service.leave(full_paid_event, attendee)

        # Assert
        entry.refresh_from_db()
        assert entry.status == WaitlistEntry.Status.OFFERED
        registration_service.mark_paid(registration, payment_reference="pi_123")
        entry.refresh_from_db()
        assert entry.status == WaitlistEntry.Status.PROMOTED
        assert entry.registration_id == registration.pk

    def test_not_on_waitlist(self, full_free_event: Event, attendee: TicketboothUser) -> None:
        with pytest.raises(NoActiveWaitlistEntryError):
            waitlist_service.leave(full_free_event, attendee)


class TestListForOrganizer:
    def test_waiting_first_then_the_rest(
        self,
        full_free_event: Event,
        organizer: TicketboothUser,
        user_factory: TicketboothUserFactory,
    ) -> None:
        # Arrange
        users = [user_factory() for _ in range(3)]
        early = _join_at(full_free_event, users[0], "2030-01-01 10:00:00")
        middle = _join_at(full_free_event, users[1], "2030-01-01 10:01:00")
        late = _join_at(full_free_event, users[2], "2030-01-01 10:02:00")
        waitlist_service.leave(full_free_event, users[0])

        # Act
        entries = list(waitlist_service.list_for_organizer(full_free_event, organizer))

        # Assert
        assert [e.pk for e in entries] == [middle.pk, late.pk, early.pk]

    def test_requires_organizer(self, full_free_event: Event, attendee: TicketboothUser) -> None:
        with pytest.raises(UnauthorizedError):
            waitlist_service.list_for_organizer(full_free_event, attendee)


class TestCounts:
    def test_count_waiting_ignores_closed_entries(
        self, full_free_event: Event, attendee: TicketboothUser, other_attendee: TicketboothUser
    ) -> None:
        waitlist_service.join(full_free_event, attendee)
        waitlist_service.join(full_free_event, other_attendee)
        waitlist_service.leave(full_free_event, attendee)

        assert waitlist_service.count_waiting(full_free_event) == 1

    def test_entries_for_user(
        self, full_free_event: Event, full_paid_event: Event, attendee: TicketboothUser
    ) -> None:
        waitlist_service.join(full_free_event, attendee)
        waitlist_service.join(full_paid_event, attendee)
        waitlist_service.leave(full_free_event, attendee)

        entries = list(waitlist_service.entries_for_user(attendee))

        assert [e.event for e in entries] == [full_paid_event]
