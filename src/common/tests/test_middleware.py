import typing as t

import structlog
from django.http import HttpRequest, HttpResponse
from django.test import RequestFactory

from common.middleware import StructlogContextMiddleware


def _capture_context(captured: dict[str, t.Any]) -> t.Callable[[HttpRequest], HttpResponse]:
    def get_response(request: HttpRequest) -> HttpResponse:
        captured.update(structlog.contextvars.get_contextvars())
        return HttpResponse("ok")

    return get_response


class TestStructlogContextMiddleware:
    def test_binds_request_context_and_echoes_request_id(self, rf: RequestFactory, settings: t.Any) -> None:
        settings.ENABLE_OBSERVABILITY = True
        captured: dict[str, t.Any] = {}
        middleware = StructlogContextMiddleware(_capture_context(captured))
        request = rf.get("/api/version", HTTP_X_REQUEST_ID="req-123", HTTP_X_FORWARDED_FOR="10.0.0.1, 10.0.0.2")

        response = middleware(request)

        assert response["X-Request-ID"] == "req-123"
        assert captured["request_id"] == "req-123"
        assert captured["method"] == "GET"
        assert captured["path"] == "/api/version"
        assert captured["ip_address"] == "10.0.0.1"
        assert structlog.contextvars.get_contextvars() == {}

    def test_generates_request_id_when_missing(self, rf: RequestFactory, settings: t.Any) -> None:
        settings.ENABLE_OBSERVABILITY = True
        middleware = StructlogContextMiddleware(_capture_context({}))

        response = middleware(rf.get("/"))

        assert len(response["X-Request-ID"]) == 36

    def test_passthrough_when_disabled(self, rf: RequestFactory, settings: t.Any) -> None:
        settings.ENABLE_OBSERVABILITY = False
        captured: dict[str, t.Any] = {}
        middleware = StructlogContextMiddleware(_capture_context(captured))

        response = middleware(rf.get("/"))

        assert "X-Request-ID" not in response
        assert "request_id" not in captured
