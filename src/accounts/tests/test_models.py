"""test_models.py: Unit tests for the accounts models."""

import pytest

from accounts.models import TicketboothUser, TicketboothUserQueryset, normalize_external_id

pytestmark = pytest.mark.django_db


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("user_2abcDEF", "user_2abcdef"),
        ("  user_2abc  ", "user_2abc"),
        ("https://clerk.example.com|user_2ABC", "user_2abc"),
        ("http://issuer|Sub", "sub"),
    ],
)
def test_normalize_external_id(raw: str, expected: str) -> None:
    assert normalize_external_id(raw) == expected


def test_save_normalizes_external_id() -> None:
    """Test that saving a user stores the canonical external id."""
    user = TicketboothUser(username="test_user", external_id="https://issuer.test|USER_1")
    user.save()
    assert user.external_id == "user_1"


def test_blank_external_id_is_stored_as_null() -> None:
    """Several users without an external id must not collide on the unique column."""
    first = TicketboothUser.objects.create_user(username="first", external_id="")
    second = TicketboothUser.objects.create_user(username="second")
    assert first.external_id is None
    assert second.external_id is None


def test_by_external_id_matches_any_spelling() -> None:
    user = TicketboothUser.objects.create_user(username="test_user", external_id="user_abc")
    assert TicketboothUser.objects.get_queryset().by_external_id(" https://issuer|USER_ABC ").get() == user


def test_manager_get_queryset() -> None:
    """Test that TicketboothUserManager.get_queryset() returns a TicketboothUserQueryset."""
    queryset = TicketboothUser.objects.get_queryset()
    assert isinstance(queryset, TicketboothUserQueryset)


def test_get_display_name_with_preferred_name() -> None:
    """Test that get_display_name() returns preferred_name when available."""
    user = TicketboothUser.objects.create_user(
        username="test_user", first_name="John", last_name="Doe", preferred_name="Johnny", password="password"
    )
    assert user.get_display_name() == "Johnny"


def test_get_display_name_without_preferred_name() -> None:
    """Test that get_display_name() returns full name when preferred_name is not set."""
    user = TicketboothUser.objects.create_user(username="test_user", first_name="John", last_name="Doe")
    assert user.get_display_name() == "John Doe"


def test_get_display_name_falls_back_to_username() -> None:
    user = TicketboothUser.objects.create_user(username="jane_doe@example.com")
    assert user.display_name == "Jane Doe"
