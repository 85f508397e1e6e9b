"""Report downloads."""

from fastapi import APIRouter, Request, Response

from core.auth import ManagerUser
from core.database import DbSession
from core.gestion_context import ActiveGestion
from core.ratelimit import REPORT_LIMIT, limiter
from services.reporte_service import XLSX_MEDIA_TYPE, build_productores_organicos

router = APIRouter(prefix="/api/reportes", tags=["reportes"])


@router.get(
    "/productores-organicos",
    response_class=Response,
    responses={
        200: {"content": {XLSX_MEDIA_TYPE: {}}},
        500: {"description": "No active period configured"},
    },
)
@limiter.limit(REPORT_LIMIT)
async def productores_organicos(
    request: Request,
    user: ManagerUser,
    gestion: ActiveGestion,
    db: DbSession,
) -> Response:
    """Spreadsheet of active producers for the active period."""
    report = await build_productores_organicos(db, gestion)
    return Response(
        content=report.content,
        media_type=XLSX_MEDIA_TYPE,
        headers={
            "Content-Disposition": f'attachment; filename="{report.filename}"',
            "Cache-Control": "no-store",
        },
    )
