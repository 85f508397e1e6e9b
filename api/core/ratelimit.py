"""Rate limiting configuration using slowapi.

memory:// storage does NOT work with multiple workers/replicas; set
RATELIMIT_STORAGE_URI to a Redis URL in production.
"""

import logging

from fastapi import Request, Response
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.responses import JSONResponse

from core.config import get_settings
from core.errors import error_body

logger = logging.getLogger(__name__)

settings = get_settings()

if (
    settings.environment != "development"
    and settings.ratelimit_storage_uri == "memory://"
):
    logger.warning(
        "ratelimit.storage.in_memory",
        extra={"environment": settings.environment},
    )


def _get_request_identifier(request: Request) -> str:
    """Authenticated user id when available, otherwise client IP.

    user_id is only set once get_current_user has run, so pre-auth
    endpoints (login) fall back to IP-based limiting.
    """
    user_id = getattr(request.state, "user_id", None)
    if user_id:
        return f"user:{user_id}"
    return get_remote_address(request)


_using_redis = settings.ratelimit_storage_uri.startswith("redis://")

limiter = Limiter(
    key_func=_get_request_identifier,
    default_limits=["100/minute"],
    storage_uri=settings.ratelimit_storage_uri,
    in_memory_fallback_enabled=_using_redis,
    key_prefix="apromam:",
)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> Response:
    logger.warning(
        "ratelimit.exceeded",
        extra={"identifier": _get_request_identifier(request), "limit": exc.detail},
    )
    return JSONResponse(
        status_code=429,
        content=error_body(
            "rate_limited",
            "Demasiadas solicitudes. Intenta nuevamente más tarde",
            retry_after=exc.detail,
        ),
        headers={"Retry-After": str(getattr(exc, "retry_after", 60))},
    )


AUTH_LIMIT = "20/minute"

REPORT_LIMIT = "10/minute"
