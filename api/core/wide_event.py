"""Request-scoped context for the canonical per-request log line.

RequestContextMiddleware initializes the dict at request start and emits it
as a single ``request.completed`` entry at request end. Anything along the
call chain may add fields to it.

Usage:
    from core.wide_event import set_wide_event_fields

    set_wide_event_fields(id_organizacion=str(org.id_organizacion))
    set_wide_event_nested("actor", user_id=user.user_id, role=user.role)
"""

from contextvars import ContextVar
from typing import Any

_wide_event: ContextVar[dict[str, Any] | None] = ContextVar("wide_event")


def init_wide_event(**initial: Any) -> dict[str, Any]:
    """Start a fresh event dict for the current async context."""
    event: dict[str, Any] = dict(initial)
    _wide_event.set(event)
    return event


def get_wide_event() -> dict[str, Any]:
    """Get the current wide event dict. Returns empty dict if not initialized."""
    return _wide_event.get(None) or {}


def set_wide_event_fields(**kwargs: Any) -> None:
    """Set fields on the current wide event.

    No-op outside a request context (CLI, migrations, most unit tests).
    """
    event = _wide_event.get(None)
    if event is not None:
        event.update(kwargs)


def set_wide_event_nested(category: str, **kwargs: Any) -> None:
    """Set fields in a nested category.

    Example:
        set_wide_event_nested("actor", user_id="123", role="gerente")
        # Results in: {"actor": {"user_id": "123", "role": "gerente"}}
    """
    event = _wide_event.get(None)
    if event is None:
        return
    event.setdefault(category, {}).update(kwargs)


def clear_wide_event() -> None:
    _wide_event.set(None)
