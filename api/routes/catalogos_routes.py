"""Catalog endpoints: crop types."""

import uuid

from fastapi import APIRouter, Query, Response

from core.auth import AdminUser, CurrentUserDep
from core.database import DbSession
from schemas import (
    TipoCultivoCreate,
    TipoCultivoDetailResponse,
    TipoCultivoListResponse,
    TipoCultivoMutationResponse,
    TipoCultivoResponse,
    TipoCultivoUpdate,
)
from services import tipos_cultivo_service

router = APIRouter(prefix="/api/catalogos", tags=["catalogos"])


@router.get("/tipos-cultivo", response_model=TipoCultivoListResponse)
async def list_tipos_cultivo(
    user: CurrentUserDep,
    db: DbSession,
    activo: bool = Query(True, description="false returns inactive rows too"),
) -> TipoCultivoListResponse:
    tipos = await tipos_cultivo_service.list_tipos_cultivo(db, only_active=activo)
    return TipoCultivoListResponse(
        tipos_cultivo=[TipoCultivoResponse.model_validate(t) for t in tipos],
        total=len(tipos),
    )


@router.get(
    "/tipos-cultivo/{id_tipo_cultivo}",
    response_model=TipoCultivoDetailResponse,
    responses={404: {"description": "Crop type not found"}},
)
async def get_tipo_cultivo(
    id_tipo_cultivo: uuid.UUID, user: CurrentUserDep, db: DbSession
) -> TipoCultivoDetailResponse:
    tipo = await tipos_cultivo_service.get_tipo_cultivo(db, id_tipo_cultivo)
    return TipoCultivoDetailResponse(
        tipo_cultivo=TipoCultivoResponse.model_validate(tipo)
    )


@router.post(
    "/tipos-cultivo",
    response_model=TipoCultivoMutationResponse,
    status_code=201,
    responses={409: {"description": "Name already in use"}},
)
async def create_tipo_cultivo(
    body: TipoCultivoCreate, user: AdminUser, db: DbSession
) -> TipoCultivoMutationResponse:
    tipo = await tipos_cultivo_service.create_tipo_cultivo(db, user, body)
    return TipoCultivoMutationResponse(
        tipo_cultivo=TipoCultivoResponse.model_validate(tipo),
        message="Tipo de cultivo creado exitosamente",
    )


@router.put(
    "/tipos-cultivo/{id_tipo_cultivo}",
    response_model=TipoCultivoMutationResponse,
    responses={
        404: {"description": "Crop type not found"},
        409: {"description": "Name already in use, or crop type in use"},
    },
)
async def update_tipo_cultivo(
    id_tipo_cultivo: uuid.UUID,
    body: TipoCultivoUpdate,
    user: AdminUser,
    db: DbSession,
) -> TipoCultivoMutationResponse:
    tipo = await tipos_cultivo_service.update_tipo_cultivo(
        db, user, id_tipo_cultivo, body
    )
    return TipoCultivoMutationResponse(
        tipo_cultivo=TipoCultivoResponse.model_validate(tipo),
        message="Tipo de cultivo actualizado exitosamente",
    )


@router.delete(
    "/tipos-cultivo/{id_tipo_cultivo}",
    status_code=204,
    responses={
        404: {"description": "Crop type not found"},
        409: {"description": "Crop type in use"},
    },
)
async def delete_tipo_cultivo(
    id_tipo_cultivo: uuid.UUID, user: AdminUser, db: DbSession
) -> Response:
    await tipos_cultivo_service.delete_tipo_cultivo(db, user, id_tipo_cultivo)
    return Response(status_code=204)
