"""FastAPI application for the APROMAM certification API."""

import asyncio
import logging
from contextlib import asynccontextmanager

import fastapi
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.config import get_settings
from core.database import create_engine, create_session_maker, dispose_engine, init_db
from core.errors import DomainError, ErrorKind, error_body
from core.logger import configure_logging
from core.middleware import RequestContextMiddleware, SecurityHeadersMiddleware
from core.ratelimit import limiter, rate_limit_exceeded_handler
from core.wide_event import set_wide_event_fields
from routes import (
    auth_router,
    catalogos_router,
    fichas_router,
    gestiones_router,
    health_router,
    organizaciones_router,
    productores_router,
    reportes_router,
    usuarios_router,
)

configure_logging()
logger = logging.getLogger(__name__)

_HTTP_ERROR_CODES: dict[int, str] = {
    400: ErrorKind.BAD_REQUEST,
    401: ErrorKind.UNAUTHORIZED,
    403: ErrorKind.FORBIDDEN,
    404: ErrorKind.NOT_FOUND,
    405: "method_not_allowed",
    409: ErrorKind.CONFLICT,
    503: "service_unavailable",
}


async def domain_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Map a tagged DomainError to its status code and the uniform body."""
    if not isinstance(exc, DomainError):
        return await global_exception_handler(request, exc)

    set_wide_event_fields(error_kind=exc.kind.value, error_code=exc.code)
    if exc.kind is ErrorKind.INTERNAL:
        logger.error(
            "domain.internal_error",
            extra={"code": exc.code, "path": request.url.path},
        )
        extra = {}
    else:
        extra = {"field": exc.field} if getattr(exc, "field", None) else {}

    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.code, exc.message, **extra),
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler for unhandled exceptions."""
    logger.exception(
        "unhandled.exception",
        extra={
            "exc_type": type(exc).__name__,
            "path": request.url.path,
            "method": request.method,
        },
    )
    return JSONResponse(
        status_code=500,
        content=error_body(
            ErrorKind.INTERNAL, "Error interno del servidor. Intenta nuevamente."
        ),
    )


async def validation_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    """Handler for request validation errors."""
    if not isinstance(exc, RequestValidationError):
        return await global_exception_handler(request, exc)

    logger.warning(
        "request.validation_error",
        extra={
            "path": request.url.path,
            "method": request.method,
            "error_count": len(exc.errors()),
        },
    )
    details = [
        {
            "field": ".".join(str(p) for p in err.get("loc", ())[1:]),
            "message": err.get("msg", ""),
            "type": err.get("type", ""),
        }
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=422,
        content=error_body(
            ErrorKind.VALIDATION_ERROR,
            "Datos de entrada inválidos",
            details=details,
        ),
    )


async def http_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render Starlette/FastAPI HTTPExceptions (404 routes, 405, 503) uniformly."""
    if not isinstance(exc, StarletteHTTPException):
        return await global_exception_handler(request, exc)

    error = _HTTP_ERROR_CODES.get(exc.status_code, "http_error")
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(str(error), str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


@asynccontextmanager
async def lifespan(app: fastapi.FastAPI):
    """Create DB engine at startup, dispose on shutdown.

    Schema changes are applied out of band with ``alembic upgrade head``.
    """
    app.state.engine = create_engine()
    app.state.session_maker = create_session_maker(app.state.engine)

    app.state.init_done = False
    app.state.init_error = None

    try:
        async with asyncio.timeout(60):
            await init_db(app.state.engine)
        app.state.init_done = True
        logger.info("init.complete")
    except TimeoutError:
        logger.error(
            "init.timeout",
            extra={"hint": "Startup hung: check DB connectivity"},
        )
        raise RuntimeError("Application startup timed out")
    except Exception as e:
        app.state.init_error = str(e)
        logger.error("init.failed", extra={"error": str(e)}, exc_info=True)
        raise

    try:
        yield
    finally:
        await dispose_engine(app.state.engine)


_settings = get_settings()

app = fastapi.FastAPI(
    title="APROMAM Certification API",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs" if _settings.enable_docs or _settings.debug else None,
    redoc_url="/redoc" if _settings.enable_docs or _settings.debug else None,
    openapi_url=("/openapi.json" if _settings.enable_docs or _settings.debug else None),
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
app.add_exception_handler(DomainError, domain_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)

app.add_middleware(GZipMiddleware, minimum_size=500)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
    expose_headers=["Content-Disposition", "X-Request-Duration-Ms", "X-Request-Id"],
    max_age=600,
)
# Outermost, so every log line of the request carries request_id
app.add_middleware(RequestContextMiddleware)

app.include_router(health_router)
app.include_router(auth_router)
app.include_router(usuarios_router)
app.include_router(organizaciones_router)
app.include_router(productores_router)
app.include_router(catalogos_router)
app.include_router(gestiones_router)
app.include_router(fichas_router)
app.include_router(reportes_router)
