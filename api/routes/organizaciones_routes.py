"""Organization endpoints.

Reads are open to any authenticated user; writes require gerente or
administrador.
"""

import uuid

from fastapi import APIRouter, Query, Response

from core.auth import CurrentUserDep, ManagerUser
from core.database import DbSession
from schemas import (
    OrganizacionCreate,
    OrganizacionDetailResponse,
    OrganizacionListResponse,
    OrganizacionMutationResponse,
    OrganizacionResponse,
    OrganizacionUpdate,
)
from services import organizaciones_service

router = APIRouter(prefix="/api/organizaciones", tags=["organizaciones"])


@router.get("", response_model=OrganizacionListResponse)
async def list_organizaciones(
    user: CurrentUserDep,
    db: DbSession,
    activo: bool = Query(True, description="false returns inactive rows too"),
) -> OrganizacionListResponse:
    orgs = await organizaciones_service.list_organizaciones(db, only_active=activo)
    return OrganizacionListResponse(
        organizaciones=[OrganizacionResponse.model_validate(o) for o in orgs],
        total=len(orgs),
    )


@router.get(
    "/{id_organizacion}",
    response_model=OrganizacionDetailResponse,
    responses={404: {"description": "Organization not found or inactive"}},
)
async def get_organizacion(
    id_organizacion: uuid.UUID, user: CurrentUserDep, db: DbSession
) -> OrganizacionDetailResponse:
    org = await organizaciones_service.get_organizacion(db, id_organizacion)
    return OrganizacionDetailResponse(
        organizacion=OrganizacionResponse.model_validate(org)
    )


@router.post(
    "",
    response_model=OrganizacionMutationResponse,
    status_code=201,
    responses={409: {"description": "Name or abbreviation already in use"}},
)
async def create_organizacion(
    body: OrganizacionCreate, user: ManagerUser, db: DbSession
) -> OrganizacionMutationResponse:
    org = await organizaciones_service.create_organizacion(db, user, body)
    return OrganizacionMutationResponse(
        organizacion=OrganizacionResponse.model_validate(org),
        message="Organización creada exitosamente",
    )


@router.put(
    "/{id_organizacion}",
    response_model=OrganizacionMutationResponse,
    responses={
        404: {"description": "Organization not found"},
        409: {"description": "Duplicate name/abbreviation or has producers"},
    },
)
async def update_organizacion(
    id_organizacion: uuid.UUID,
    body: OrganizacionUpdate,
    user: ManagerUser,
    db: DbSession,
) -> OrganizacionMutationResponse:
    org = await organizaciones_service.update_organizacion(
        db, user, id_organizacion, body
    )
    return OrganizacionMutationResponse(
        organizacion=OrganizacionResponse.model_validate(org),
        message="Organización actualizada exitosamente",
    )


@router.delete(
    "/{id_organizacion}",
    status_code=204,
    responses={
        404: {"description": "Organization not found"},
        409: {"description": "Organization has producers"},
    },
)
async def delete_organizacion(
    id_organizacion: uuid.UUID, user: ManagerUser, db: DbSession
) -> Response:
    await organizaciones_service.delete_organizacion(db, user, id_organizacion)
    return Response(status_code=204)
