"""Management period endpoints.

Route ordering note: ``/activa`` is declared before ``/{id_gestion}`` so it
is not parsed as an id.
"""

import uuid

from fastapi import APIRouter, Query, Response

from core.auth import AdminUser, CurrentUserDep
from core.database import DbSession
from schemas import (
    GestionActivarResponse,
    GestionCreate,
    GestionDetailResponse,
    GestionListResponse,
    GestionMutationResponse,
    GestionResponse,
    GestionUpdate,
)
from services import gestiones_service

router = APIRouter(prefix="/api/gestiones", tags=["gestiones"])


@router.get("", response_model=GestionListResponse)
async def list_gestiones(
    user: CurrentUserDep,
    db: DbSession,
    activo: bool = Query(True, description="false returns inactive rows too"),
) -> GestionListResponse:
    gestiones = await gestiones_service.list_gestiones(db, only_active=activo)
    return GestionListResponse(
        gestiones=[GestionResponse.model_validate(g) for g in gestiones],
        total=len(gestiones),
    )


@router.get(
    "/activa",
    response_model=GestionDetailResponse,
    responses={404: {"description": "No active period configured"}},
)
async def get_gestion_activa(
    user: CurrentUserDep, db: DbSession
) -> GestionDetailResponse:
    gestion = await gestiones_service.get_gestion_activa(db)
    return GestionDetailResponse(gestion=GestionResponse.model_validate(gestion))


@router.get(
    "/{id_gestion}",
    response_model=GestionDetailResponse,
    responses={404: {"description": "Period not found"}},
)
async def get_gestion(
    id_gestion: uuid.UUID, user: CurrentUserDep, db: DbSession
) -> GestionDetailResponse:
    gestion = await gestiones_service.get_gestion(db, id_gestion)
    return GestionDetailResponse(gestion=GestionResponse.model_validate(gestion))


@router.post(
    "",
    response_model=GestionMutationResponse,
    status_code=201,
    responses={409: {"description": "A period already exists for that year"}},
)
async def create_gestion(
    body: GestionCreate, user: AdminUser, db: DbSession
) -> GestionMutationResponse:
    gestion = await gestiones_service.create_gestion(db, user, body)
    return GestionMutationResponse(
        gestion=GestionResponse.model_validate(gestion),
        message="Gestión creada exitosamente",
    )


@router.put(
    "/{id_gestion}",
    response_model=GestionMutationResponse,
    responses={
        404: {"description": "Period not found"},
        409: {"description": "Duplicate year or system-active period"},
    },
)
async def update_gestion(
    id_gestion: uuid.UUID, body: GestionUpdate, user: AdminUser, db: DbSession
) -> GestionMutationResponse:
    gestion = await gestiones_service.update_gestion(db, user, id_gestion, body)
    return GestionMutationResponse(
        gestion=GestionResponse.model_validate(gestion),
        message="Gestión actualizada exitosamente",
    )


@router.delete(
    "/{id_gestion}",
    status_code=204,
    responses={
        404: {"description": "Period not found"},
        409: {"description": "Period is the system-active one"},
    },
)
async def delete_gestion(
    id_gestion: uuid.UUID, user: AdminUser, db: DbSession
) -> Response:
    await gestiones_service.delete_gestion(db, user, id_gestion)
    return Response(status_code=204)


@router.post(
    "/{id_gestion}/activar",
    response_model=GestionActivarResponse,
    responses={
        400: {"description": "Period is deactivated"},
        404: {"description": "Period not found"},
    },
)
async def activar_gestion(
    id_gestion: uuid.UUID, user: AdminUser, db: DbSession
) -> GestionActivarResponse:
    gestion, previous = await gestiones_service.activar_gestion(db, user, id_gestion)
    return GestionActivarResponse(
        gestion=GestionResponse.model_validate(gestion),
        message=f"Gestión {gestion.anio_gestion} activada como gestión del sistema",
        gestion_anterior=previous.anio_gestion if previous else None,
    )
