"""Tests for the attendee's own registration endpoints."""

import typing as t
from unittest.mock import MagicMock, patch

import orjson
import pytest
from django.test.client import Client
from django.urls import reverse

from accounts.models import TicketboothUser
from events.models import Event, Registration, WaitlistEntry
from events.service import registration_service, waitlist_service

pytestmark = pytest.mark.django_db


class TestListMyRegistrations:
    def test_lists_own_registrations(
        self,
        attendee_client: Client,
        free_event: Event,
        paid_event: Event,
        attendee: TicketboothUser,
        other_attendee: TicketboothUser,
    ) -> None:
        registration_service.register(free_event, attendee)
        registration_service.register(paid_event, attendee)
        registration_service.register(free_event, other_attendee)

        response = attendee_client.get(reverse("api:list_my_registrations"))

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 2
        assert {r["event"]["id"] for r in data["results"]} == {str(free_event.pk), str(paid_event.pk)}


class TestCancelRegistration:
    def test_cancel_reports_promotion(
        self,
        full_free_event: Event,
        attendee: TicketboothUser,
        client_for: t.Callable[[TicketboothUser], Client],
    ) -> None:
        # Arrange
        entry = waitlist_service.join(full_free_event, attendee).entry
        holder = Registration.objects.filter(event=full_free_event).select_related("user").first()
        assert holder is not None
        holder_client = client_for(holder.user)

        # Act
        response = holder_client.post(reverse("api:cancel_registration", kwargs={"registration_id": holder.pk}))

        # Assert
        assert response.status_code == 200
        data = response.json()
        assert data["registration"]["status"] == "cancelled"
        assert data["promotion"]["promoted"] is True
        assert data["promotion"]["kind"] == "free"
        assert data["promotion"]["entry_id"] == str(entry.pk)
        assert data["promotion"]["registration_id"] is not None

    def test_cannot_cancel_someone_elses_registration(
        self, other_attendee_client: Client, free_event: Event, attendee: TicketboothUser
    ) -> None:
        registration = registration_service.register(free_event, attendee)

        response = other_attendee_client.post(
            reverse("api:cancel_registration", kwargs={"registration_id": registration.pk})
        )

        assert response.status_code == 404
        registration.refresh_from_db()
        assert registration.is_confirmed

    def test_cancel_twice(self, attendee_client: Client, free_event: Event, attendee: TicketboothUser) -> None:
        registration = registration_service.register(free_event, attendee)
        url = reverse("api:cancel_registration", kwargs={"registration_id": registration.pk})
        attendee_client.post(url)

        response = attendee_client.post(url)

        assert response.status_code == 400
        assert response.json()["code"] == "registration_not_active"


class TestCheckout:
    @patch("events.service.stripe_service.Session")
    def test_checkout_url(
        self, mock_session: MagicMock, attendee_client: Client, paid_event: Event, attendee: TicketboothUser
    ) -> None:
        mock_session.create.return_value = {"id": "cs_test_1", "url": "https://checkout.stripe.com/c/pay/cs_test_1"}
        registration = registration_service.register(paid_event, attendee)

        url = reverse("api:registration_checkout", kwargs={"registration_id": registration.pk})

        response = attendee_client.post(url)

        assert response.status_code == 200
        assert response.json() == {"checkout_url": "https://checkout.stripe.com/c/pay/cs_test_1"}

    def test_checkout_for_free_registration(
        self, attendee_client: Client, free_event: Event, attendee: TicketboothUser
    ) -> None:
        registration = registration_service.register(free_event, attendee)

        url = reverse("api:registration_checkout", kwargs={"registration_id": registration.pk})

        response = attendee_client.post(url)

        assert response.status_code == 400
        assert response.json()["code"] == "payment_not_required"

    @patch("events.service.stripe_service.Session")
    def test_verify_payment_promotes_claimed_offer(
        self,
        mock_session: MagicMock,
        attendee_client: Client,
        full_paid_event: Event,
        attendee: TicketboothUser,
    ) -> None:
        # Arrange
        waitlist_service.join(full_paid_event, attendee)
        holder = Registration.objects.filter(event=full_paid_event).first()
        assert holder is not None
        registration_service.cancel(holder, holder.user)
        registration = registration_service.register_from_waitlist(full_paid_event, attendee)
        mock_session.retrieve.return_value = {
            "id": "cs_test_1",
            "payment_status": "paid",
            "payment_intent": "pi_test_1",
            "amount_total": 49900,
            "metadata": {"type": "event_ticket", "registration_id": str(registration.pk)},
        }
        url = reverse("api:verify_registration_payment", kwargs={"registration_id": registration.pk})

        # Act
        response = attendee_client.post(
            url, data=orjson.dumps({"session_id": "cs_test_1"}), content_type="application/json"
        )

        # Assert
        assert response.status_code == 200
        assert response.json()["payment_status"] == "paid"
        entry = WaitlistEntry.objects.get(event=full_paid_event, user=attendee)
        assert entry.status == WaitlistEntry.Status.PROMOTED

    @patch("events.service.stripe_service.Session")
    def test_verify_unpaid(
        self, mock_session: MagicMock, attendee_client: Client, paid_event: Event, attendee: TicketboothUser
    ) -> None:
        registration = registration_service.register(paid_event, attendee)
        mock_session.list.return_value = {"data": []}
        url = reverse("api:verify_registration_payment", kwargs={"registration_id": registration.pk})

        response = attendee_client.post(url, data=orjson.dumps({}), content_type="application/json")

        assert response.status_code == 400
        assert response.json()["code"] == "payment_not_completed"
