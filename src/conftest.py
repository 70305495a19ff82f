"""Shared fixtures for the whole test suite."""

import secrets
import string
import typing as t
from datetime import datetime, time, timedelta

import faker
import pytest
from django.utils import timezone
from pytest import MonkeyPatch

from accounts.models import TicketboothUser
from ticketbooth import celery_app


@pytest.fixture(autouse=True)
def disable_throttling(monkeypatch: MonkeyPatch) -> None:
    """Let every request through the rate limiters, whose history lives in a shared cache."""
    monkeypatch.setattr("ninja_extra.throttling.SimpleRateThrottle.allow_request", lambda self, request: True)


@pytest.fixture(autouse=True)
def enable_celery_eager_mode(settings: t.Any) -> None:
    """Enable Celery eager mode for tests so tasks execute synchronously.

    This ensures that Celery tasks run immediately in the same process,
    allowing tests to verify their side effects without async complications.
    """
    settings.CELERY_TASK_ALWAYS_EAGER = True
    settings.CELERY_TASK_EAGER_PROPAGATES = True
    celery_app.conf.task_always_eager = True
    celery_app.conf.task_eager_propagates = True


@pytest.fixture(autouse=True)
def locmem_email_backend(settings: t.Any) -> None:
    settings.EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"


class TicketboothUserFactory:
    """Factory for creating TicketboothUser instances for testing."""

    fake = faker.Faker()

    def create_user(self, **kwargs: t.Any) -> TicketboothUser:
        username = kwargs.pop(
            "username", "".join(secrets.choice(string.ascii_lowercase) for _ in range(8)) + "@user.test"
        )
        email = kwargs.pop("email", username + ("@test.com" if "@" not in username else ""))
        password = kwargs.pop("password", "password")
        first_name = kwargs.pop("first_name", self.fake.first_name())
        last_name = kwargs.pop("last_name", self.fake.last_name())
        preferred_name = kwargs.pop("preferred_name", f"{first_name} {last_name}")
        return TicketboothUser.objects.create_user(
            username=username,
            email=email,
            password=password,
            preferred_name=preferred_name,
            first_name=first_name,
            last_name=last_name,
            **kwargs,
        )

    def __call__(self, **kwargs: t.Any) -> TicketboothUser:
        return self.create_user(**kwargs)


@pytest.fixture
def user_factory() -> TicketboothUserFactory:
    return TicketboothUserFactory()


@pytest.fixture
def superuser(user_factory: TicketboothUserFactory) -> TicketboothUser:
    """A superuser."""
    return user_factory(is_superuser=True, is_staff=True)


@pytest.fixture
def next_week() -> datetime:
    today = timezone.now()
    same_time_next_week = today + timedelta(days=7)
    noon = time(hour=12, minute=0)
    return timezone.make_aware(
        datetime.combine(same_time_next_week.date(), noon),
        timezone.get_current_timezone(),
    )
