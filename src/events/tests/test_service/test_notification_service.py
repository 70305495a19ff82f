import typing as t
from unittest.mock import MagicMock, patch

import pytest
from django.core import mail

from accounts.models import TicketboothUser
from events.models import Event, Registration
from events.service import registration_service, waitlist_service
from events.service.notification_service import NotificationType, build_email, notify

pytestmark = pytest.mark.django_db


class TestBuildEmail:
    def test_confirmation_carries_the_ticket(self, free_event: Event, attendee: TicketboothUser) -> None:
        registration = registration_service.register(free_event, attendee)

        message = build_email(NotificationType.REGISTRATION_CONFIRMED, registration=registration)

        assert message["to"] == attendee.email
        assert message["subject"] == 'Your ticket for "Community Meetup": registration confirmed'
        assert registration.qr_code in message["body"]
        assert "Town Hall" in message["body"]
        [attachment] = message["attachments"]
        assert attachment["filename"] == f"ticket-{registration.qr_code}.png"
        assert attachment["mimetype"] == "image/png"
        assert attachment["content"].encode("latin-1").startswith(b"\x89PNG")

    def test_pending_payment_is_mentioned(self, paid_event: Event, attendee: TicketboothUser) -> None:
        registration = registration_service.register(
            paid_event, attendee, payment_method=Registration.PaymentMethod.OFFLINE
        )

        message = build_email(NotificationType.REGISTRATION_CONFIRMED, registration=registration)

        assert "Payment pending: 499.00 (to be paid at the venue)" in message["body"]

    def test_waitlist_joined_reports_position(self, full_free_event: Event, attendee: TicketboothUser) -> None:
        result = waitlist_service.join(full_free_event, attendee)

        message = build_email(NotificationType.WAITLIST_JOINED, entry=result.entry, position=result.position)

        assert message["subject"] == "You're #1 on the waitlist for Community Meetup"
        assert "Your current position: #1" in message["body"]
        assert message["attachments"] == []

    def test_refund_mentioned_for_online_payment(self, paid_event: Event, attendee: TicketboothUser) -> None:
        registration = registration_service.register(paid_event, attendee)
        registration = registration_service.mark_paid(registration, payment_reference="pi_1")
        result = registration_service.cancel(registration, attendee)

        message = build_email(NotificationType.REGISTRATION_CANCELLED, registration=result.registration)

        assert message["subject"] == "Registration cancelled for Paid Workshop: refund initiated"
        assert "A refund of 499.00 has been initiated." in message["body"]

    def test_requires_a_recipient(self) -> None:
        with pytest.raises(ValueError):
            build_email(NotificationType.WAITLIST_OFFERED)


class TestNotify:
    def test_email_is_sent_after_commit(
        self,
        free_event: Event,
        attendee: TicketboothUser,
        django_capture_on_commit_callbacks: t.Any,
    ) -> None:
        with django_capture_on_commit_callbacks(execute=True):
            registration = registration_service.register(free_event, attendee)

        assert len(mail.outbox) == 1
        assert mail.outbox[0].to == [attendee.email]
        assert registration.qr_code in mail.outbox[0].body
        assert len(mail.outbox[0].attachments) == 1

    def test_nothing_is_sent_before_commit(self, free_event: Event, attendee: TicketboothUser) -> None:
        registration_service.register(free_event, attendee)

        assert mail.outbox == []

    def test_cancellation_with_promotion_notifies_both_attendees(
        self,
        full_free_event: Event,
        attendee: TicketboothUser,
        django_capture_on_commit_callbacks: t.Any,
    ) -> None:
        waitlist_service.join(full_free_event, attendee)
        holder = Registration.objects.filter(event=full_free_event).select_related("user").first()
        assert holder is not None

        with django_capture_on_commit_callbacks(execute=True):
            registration_service.cancel(holder, holder.user)

        recipients = {m.to[0] for m in mail.outbox}
        assert recipients == {holder.attendee_email, attendee.email}
        subjects = {m.subject for m in mail.outbox}
        assert "You're registered for Community Meetup!" in subjects

    @patch("events.tasks.send_ticketing_notification.delay")
    def test_dispatch_failure_is_swallowed(
        self,
        mock_delay: MagicMock,
        free_event: Event,
        attendee: TicketboothUser,
        django_capture_on_commit_callbacks: t.Any,
    ) -> None:
        mock_delay.side_effect = RuntimeError("broker down")
        registration = registration_service.register(free_event, attendee)

        with django_capture_on_commit_callbacks(execute=True):
            notify(NotificationType.PAYMENT_CONFIRMED, registration=registration)

        mock_delay.assert_called_once()
        assert mail.outbox == []
