"""Token issuance for users of the external identity provider."""

import secrets

import structlog
from django.conf import settings
from django.http import HttpRequest
from django.utils.translation import gettext_lazy as _
from ninja.errors import HttpError
from ninja_extra import api_controller, route
from ninja_jwt.schema import TokenObtainPairOutputSchema

from accounts import schema
from accounts.service import identity
from common.throttling import AuthThrottle

logger = structlog.get_logger(__name__)

IDENTITY_SECRET_HEADER = "X-Identity-Exchange-Secret"


@api_controller("/auth", auth=None, tags=["Auth"], throttle=AuthThrottle())
class AuthController:
    @route.post("/identity/exchange", response=TokenObtainPairOutputSchema, url_name="identity_exchange")
    def exchange_identity(
        self, request: HttpRequest, payload: schema.IdentityExchangeSchema
    ) -> TokenObtainPairOutputSchema:
        """Exchange an identity provider subject for JWT access/refresh tokens.

        Called by the identity provider backend after it authenticated the user, with the shared secret
        in the ``X-Identity-Exchange-Secret`` header. The subject is matched exactly against the
        normalized external id; a user is created the first time a subject is seen.
        """
        expected = settings.IDENTITY_EXCHANGE_SECRET
        provided = request.headers.get(IDENTITY_SECRET_HEADER, "")
        if not expected or not secrets.compare_digest(provided.encode(), expected.encode()):
            logger.warning("identity_exchange_rejected")
            raise HttpError(401, str(_("Invalid identity exchange secret.")))
        try:
            return identity.exchange_identity(payload.external_id, email=payload.email or "", name=payload.name)
        except ValueError as e:
            raise HttpError(400, str(_("Invalid external id."))) from e
