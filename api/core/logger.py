"""Structured logging for the APROMAM API, built on structlog.

Output is JSON when LOG_FORMAT=json and coloured console lines otherwise.
uvicorn and sqlalchemy records go through the same processor chain, so
every line carries the request context bound by the middleware.

Credential fields (passwords, hashes, tokens) are masked before rendering.

Usage:
    from core import get_logger
    logger = get_logger(__name__)
    logger.info("organizacion.created", id_organizacion="...", actor="admin")
"""

import logging
import os
import sys

import structlog
from structlog.contextvars import bind_contextvars, clear_contextvars
from structlog.types import EventDict, Processor

__all__ = [
    "REDACTED",
    "bind_contextvars",
    "clear_contextvars",
    "configure_logging",
    "get_logger",
    "redact_credentials",
]

SERVICE_NAME = "apromam-api"

REDACTED = "***"

_CREDENTIAL_KEYS = frozenset(
    {
        "password",
        "password_hash",
        "token",
        "access_token",
        "refresh_token",
        "authorization",
        "jwt_secret",
    }
)

_QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access", "aiosqlite", "asyncio")


def redact_credentials(
    _logger: logging.Logger, _method_name: str, event_dict: EventDict
) -> EventDict:
    for key in _CREDENTIAL_KEYS.intersection(event_dict):
        if event_dict[key] is not None:
            event_dict[key] = REDACTED
    return event_dict


def _add_service(
    _logger: logging.Logger, _method_name: str, event_dict: EventDict
) -> EventDict:
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def _log_level() -> int:
    level_name = os.environ.get("LOG_LEVEL", "INFO").upper()
    return getattr(logging, level_name, logging.INFO)


def _renderer() -> Processor:
    if os.environ.get("LOG_FORMAT", "").lower() == "json":
        return structlog.processors.JSONRenderer(ensure_ascii=False)
    return structlog.dev.ConsoleRenderer(
        colors=sys.stdout.isatty(), exception_formatter=structlog.dev.plain_traceback
    )


def _shared_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.ExtraAdder(),
        structlog.stdlib.PositionalArgumentsFormatter(),
        _add_service,
        redact_credentials,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def configure_logging() -> None:
    """Configure structlog and stdlib logging. Call once at startup."""
    shared = _shared_processors()

    structlog.configure(
        processors=[
            *shared,
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.processors.format_exc_info,
                _renderer(),
            ],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(_log_level())

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Structured logger for ``name`` (usually ``__name__``).

    Example:
        logger = get_logger(__name__)
        logger.info("gestion.activated", anio_gestion=2025)
        logger.warning("auth.login.failed", username="tecnico1")
    """
    return structlog.stdlib.get_logger(name)
