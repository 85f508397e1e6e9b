"""Unit tests for core.middleware and core.wide_event.

Tests ASGI middleware:
- SecurityHeadersMiddleware adds security headers to HTTP responses
- Both middlewares skip non-HTTP scopes
- RequestContextMiddleware echoes or generates a request id and emits
  one request.completed line with the accumulated wide event
"""

from unittest.mock import patch

import pytest

from core.middleware import RequestContextMiddleware, SecurityHeadersMiddleware
from core.wide_event import (
    clear_wide_event,
    get_wide_event,
    init_wide_event,
    set_wide_event_fields,
    set_wide_event_nested,
)


async def _noop_receive():
    return {"type": "http.request", "body": b""}


async def _make_app_that_sends_response(scope, receive, send):
    """Simulate an ASGI app that sends a response."""
    await send({"type": "http.response.start", "status": 200, "headers": []})
    await send({"type": "http.response.body", "body": b"OK"})


def _headers(message: dict) -> dict[bytes, bytes]:
    return dict(message["headers"])


@pytest.mark.unit
class TestSecurityHeadersMiddleware:
    """Test SecurityHeadersMiddleware adds expected headers."""

    async def test_adds_security_headers(self):
        middleware = SecurityHeadersMiddleware(_make_app_that_sends_response)
        sent = []

        async def mock_send(message):
            sent.append(message)

        await middleware({"type": "http", "path": "/api/x"}, _noop_receive, mock_send)

        headers = _headers(sent[0])
        assert headers[b"x-content-type-options"] == b"nosniff"
        assert headers[b"x-frame-options"] == b"DENY"
        assert b"content-security-policy" in headers
        assert b"strict-transport-security" in headers

    async def test_skips_non_http_scopes(self):
        called = False

        async def inner_app(scope, receive, send):
            nonlocal called
            called = True

        middleware = SecurityHeadersMiddleware(inner_app)
        await middleware({"type": "lifespan"}, _noop_receive, None)

        assert called


@pytest.mark.unit
class TestRequestContextMiddleware:
    async def test_generates_request_id(self):
        middleware = RequestContextMiddleware(_make_app_that_sends_response)
        sent = []

        async def mock_send(message):
            sent.append(message)

        scope = {"type": "http", "method": "GET", "path": "/health", "headers": []}
        await middleware(scope, _noop_receive, mock_send)

        headers = _headers(sent[0])
        assert len(headers[b"x-request-id"]) == 32
        assert b"x-request-duration-ms" in headers

    async def test_echoes_incoming_request_id(self):
        middleware = RequestContextMiddleware(_make_app_that_sends_response)
        sent = []

        async def mock_send(message):
            sent.append(message)

        scope = {
            "type": "http",
            "method": "GET",
            "path": "/health",
            "headers": [(b"x-request-id", b"abc-123")],
        }
        await middleware(scope, _noop_receive, mock_send)

        assert _headers(sent[0])[b"x-request-id"] == b"abc-123"

    async def test_rejects_oversized_request_id(self):
        middleware = RequestContextMiddleware(_make_app_that_sends_response)
        sent = []

        async def mock_send(message):
            sent.append(message)

        scope = {
            "type": "http",
            "method": "GET",
            "path": "/health",
            "headers": [(b"x-request-id", b"x" * 200)],
        }
        await middleware(scope, _noop_receive, mock_send)

        assert _headers(sent[0])[b"x-request-id"] != b"x" * 200

    async def test_emits_wide_event_once(self):
        async def app(scope, receive, send):
            set_wide_event_fields(id_organizacion="org-1")
            await _make_app_that_sends_response(scope, receive, send)

        middleware = RequestContextMiddleware(app)

        async def mock_send(message):
            pass

        scope = {"type": "http", "method": "POST", "path": "/api/x", "headers": []}
        with patch("core.middleware.logger") as mock_logger:
            await middleware(scope, _noop_receive, mock_send)

        mock_logger.info.assert_called_once()
        args, kwargs = mock_logger.info.call_args
        assert args == ("request.completed",)
        assert kwargs["status_code"] == 200
        assert kwargs["id_organizacion"] == "org-1"
        assert get_wide_event() == {}

    async def test_server_errors_logged_as_warning(self):
        async def app(scope, receive, send):
            await send({"type": "http.response.start", "status": 503, "headers": []})
            await send({"type": "http.response.body", "body": b""})

        middleware = RequestContextMiddleware(app)

        async def mock_send(message):
            pass

        scope = {"type": "http", "method": "GET", "path": "/ready", "headers": []}
        with patch("core.middleware.logger") as mock_logger:
            await middleware(scope, _noop_receive, mock_send)

        mock_logger.warning.assert_called_once()


@pytest.mark.unit
class TestWideEvent:
    def test_fields_and_nested(self):
        init_wide_event()
        set_wide_event_fields(a=1)
        set_wide_event_nested("actor", user_id="u1")
        set_wide_event_nested("actor", role="gerente")

        assert get_wide_event() == {
            "a": 1,
            "actor": {"user_id": "u1", "role": "gerente"},
        }

    def test_empty_event_still_records(self):
        init_wide_event()
        set_wide_event_fields(first=True)
        assert get_wide_event() == {"first": True}

    def test_noop_outside_context(self):
        clear_wide_event()
        set_wide_event_fields(a=1)
        set_wide_event_nested("actor", user_id="u1")
        assert get_wide_event() == {}
