"""Resolution of identity provider subjects to local users."""

import structlog
from django.db import IntegrityError, transaction
from django.utils import timezone
from ninja_jwt.schema import TokenObtainPairOutputSchema
from ninja_jwt.tokens import RefreshToken

from accounts.models import TicketboothUser, normalize_external_id

logger = structlog.get_logger(__name__)


def resolve_user(external_id: str, email: str = "", name: str = "") -> TicketboothUser:
    """Return the user for an identity provider subject, creating it on first sight.

    The lookup is an exact match on the normalized, unique ``external_id`` column.
    New users get the canonical subject as username and no usable password.

    Args:
        external_id: The subject as sent by the identity provider, in any casing or with an issuer prefix.
        email: The email address reported by the provider, used when creating the user.
        name: The display name reported by the provider, used when creating the user.

    Returns:
        TicketboothUser: The existing or newly created user.
    """
    canonical = normalize_external_id(external_id)
    if not canonical:
        raise ValueError("external_id must not be blank")
    if user := TicketboothUser.objects.filter(external_id=canonical).first():
        return user
    try:
        with transaction.atomic():
            user = TicketboothUser.objects.create_user(
                username=canonical,
                email=email,
                external_id=canonical,
                preferred_name=name,
            )
    except IntegrityError:
        # a concurrent request created the same subject first
        return TicketboothUser.objects.get(external_id=canonical)
    logger.info("user_created_from_identity", user_id=str(user.id), external_id=canonical)
    return user


def get_token_pair_for_user(user: TicketboothUser) -> TokenObtainPairOutputSchema:
    """Get a token pair for the user."""
    user.last_login = timezone.now()
    user.save(update_fields=["last_login"])

    logger.info("token_pair_generated", user_id=str(user.id))
    token = RefreshToken.for_user(user)
    token.payload.update({"sub": str(user.id), "external_id": user.external_id})
    return TokenObtainPairOutputSchema(
        username=user.username,
        access=str(token.access_token),  # type: ignore[attr-defined]
        refresh=str(token),
    )


def exchange_identity(external_id: str, email: str = "", name: str = "") -> TokenObtainPairOutputSchema:
    """Log in the user behind an identity provider subject, registering them on first sight."""
    user = resolve_user(external_id, email=email, name=name)
    logger.info("identity_exchanged", user_id=str(user.id))
    return get_token_pair_for_user(user)
