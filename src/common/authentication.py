import typing as t

import structlog
from django.conf import settings
from django.contrib.auth.models import AnonymousUser
from django.http import HttpRequest
from django.utils import translation
from ninja_jwt.authentication import JWTAuth

logger = structlog.get_logger(__name__)


class I18nJWTAuth(JWTAuth):
    """JWT authentication that activates the user's preferred language.

    The language is activated right after the token is validated, before the
    view handler executes, so error messages and emails triggered by the
    request are rendered in the attendee's language.

    Usage:
        @route.get("/endpoint", auth=I18nJWTAuth())
        def my_endpoint(request):
            return {"message": str(_("Hello!"))}
    """

    def authenticate(self, request: HttpRequest, token: str) -> t.Any:
        """Authenticate the request and activate user's language preference.

        Raises:
            AuthenticationFailed: If authentication fails
            InvalidToken: If the token is invalid
        """
        user = super().authenticate(request, token)

        user_language = getattr(user, "language", None)
        if user_language:
            translation.activate(user_language)
            request.LANGUAGE_CODE = user_language

        if settings.ENABLE_OBSERVABILITY and user is not None:
            structlog.contextvars.bind_contextvars(user_id=str(user.pk))

        return user


class OptionalAuth(I18nJWTAuth):
    """Optional JWT authentication with i18n support.

    - If a JWT token is present: authenticates the user and activates their language
    - If no JWT token: sets request.user to AnonymousUser and continues

    Used by public endpoints such as event details and waitlist counts.
    """

    def __call__(self, request: HttpRequest) -> t.Any | None:
        """Overrides I18nJWTAuth __call__ to provide optional auth."""
        auth_value = request.headers.get(self.header)
        if not auth_value:
            request.user = AnonymousUser()
            return request.user
        parts = auth_value.split(" ")

        if parts[0].lower() != self.openapi_scheme:
            if settings.DEBUG:
                logger.error("unexpected_auth_scheme", scheme=parts[0])
            return None
        token = " ".join(parts[1:])
        return self.authenticate(request, token)
