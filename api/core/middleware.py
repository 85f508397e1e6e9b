"""ASGI middleware: security headers and per-request log context."""

from __future__ import annotations

import time
import uuid

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from core.logger import bind_contextvars, clear_contextvars, get_logger
from core.wide_event import clear_wide_event, get_wide_event, init_wide_event

logger = get_logger("request")


class SecurityHeadersMiddleware:
    """Adds security headers for a JSON-only API."""

    SECURITY_HEADERS: list[tuple[bytes, bytes]] = [
        (b"x-content-type-options", b"nosniff"),
        (b"x-frame-options", b"DENY"),
        (b"referrer-policy", b"strict-origin-when-cross-origin"),
        (b"content-security-policy", b"default-src 'none'; frame-ancestors 'none'"),
        (b"strict-transport-security", b"max-age=31536000; includeSubDomains"),
    ]

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_wrapper(message: Message) -> None:
            if message.get("type") == "http.response.start":
                headers: list[tuple[bytes, bytes]] = list(message.get("headers", []))
                headers.extend(self.SECURITY_HEADERS)
                message["headers"] = headers
            await send(message)

        await self.app(scope, receive, send_wrapper)


class RequestContextMiddleware:
    """Binds request_id/method/path to the log context and emits one
    ``request.completed`` line per request with the accumulated wide event.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = _incoming_request_id(scope) or uuid.uuid4().hex
        method = scope.get("method", "")
        path = scope.get("path", "")

        clear_contextvars()
        bind_contextvars(request_id=request_id, method=method, path=path)
        init_wide_event()

        start = time.perf_counter()
        status_code = 500

        async def send_wrapper(message: Message) -> None:
            nonlocal status_code
            if message.get("type") == "http.response.start":
                status_code = message["status"]
                headers: list[tuple[bytes, bytes]] = list(message.get("headers", []))
                headers.append((b"x-request-id", request_id.encode("latin-1")))
                duration_ms = (time.perf_counter() - start) * 1000
                headers.append(
                    (b"x-request-duration-ms", f"{duration_ms:.1f}".encode("latin-1"))
                )
                message["headers"] = headers
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            duration_ms = round((time.perf_counter() - start) * 1000, 2)
            event = get_wide_event()
            log = logger.warning if status_code >= 500 else logger.info
            log(
                "request.completed",
                status_code=status_code,
                duration_ms=duration_ms,
                **event,
            )
            clear_wide_event()
            clear_contextvars()


def _incoming_request_id(scope: Scope) -> str | None:
    for name, value in scope.get("headers", []):
        if name == b"x-request-id":
            candidate = value.decode("latin-1").strip()
            # Reject anything that would bloat or break log lines
            if 0 < len(candidate) <= 64 and candidate.isprintable():
                return candidate
    return None
