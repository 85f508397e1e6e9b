"""Health check endpoints."""

from fastapi import APIRouter, HTTPException, Request
from starlette import status

from core.database import check_db_connection, get_pool_status
from core.logger import get_logger
from core.ratelimit import limiter
from repositories.gestion_repository import GestionRepository
from schemas import DetailedHealthResponse, HealthResponse, PoolStatusResponse

logger = get_logger(__name__)

SERVICE_NAME = "apromam-api"

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Liveness: the process is up. Does not touch the database."""
    return HealthResponse(status="healthy", service=SERVICE_NAME)


@router.get("/health/detailed", response_model=DetailedHealthResponse)
@limiter.limit("30/minute")
async def health_detailed(request: Request) -> DetailedHealthResponse:
    """Component status: database, active period and pool metrics.

    Always returns 200; check the individual fields.
    """
    engine = request.app.state.engine
    database_ok = True
    gestion_anio = None
    try:
        await check_db_connection(engine)
        async with request.app.state.session_maker() as session:
            activa = await GestionRepository(session).get_gestion_activa()
            gestion_anio = activa.anio_gestion if activa else None
    except Exception as e:
        logger.warning("health.database.failed", error=str(e))
        database_ok = False

    pool = get_pool_status(engine)
    return DetailedHealthResponse(
        status="healthy" if database_ok else "unhealthy",
        service=SERVICE_NAME,
        database=database_ok,
        gestion_activa=gestion_anio,
        pool=PoolStatusResponse(**pool._asdict()) if pool else None,
    )


@router.get(
    "/ready",
    response_model=HealthResponse,
    responses={503: {"description": "Initialization pending or DB unreachable"}},
)
@limiter.limit("30/minute")
async def ready(request: Request) -> HealthResponse:
    """Readiness endpoint.

    Returns 200 only when:
    - Startup initialization has completed successfully
    - The database is reachable
    """
    init_error = getattr(request.app.state, "init_error", None)
    if init_error:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Initialization failed: {init_error}",
        )

    if not getattr(request.app.state, "init_done", False):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Starting",
        )

    try:
        await check_db_connection(request.app.state.engine)
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database unavailable",
        ) from e

    return HealthResponse(status="ready", service=SERVICE_NAME)
