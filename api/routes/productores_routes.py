"""Producer endpoints.

Listing and registration are open to field staff; deletion requires gerente
or administrador.
"""

import uuid

from fastapi import APIRouter, Query, Response

from core.auth import ManagerUser, StaffUser
from core.database import DbSession
from schemas import (
    ProductorCreate,
    ProductorDetailResponse,
    ProductorListResponse,
    ProductorMutationResponse,
    ProductorResponse,
)
from services import productores_service

router = APIRouter(prefix="/api/productores", tags=["productores"])


@router.get("", response_model=ProductorListResponse)
async def list_productores(
    user: StaffUser,
    db: DbSession,
    activo: bool = Query(True, description="false returns inactive rows too"),
    id_organizacion: uuid.UUID | None = Query(None),
) -> ProductorListResponse:
    productores = await productores_service.list_productores(
        db, only_active=activo, id_organizacion=id_organizacion
    )
    return ProductorListResponse(
        productores=[ProductorResponse.model_validate(p) for p in productores],
        total=len(productores),
    )


@router.get(
    "/{codigo_productor}",
    response_model=ProductorDetailResponse,
    responses={404: {"description": "Producer not found or inactive"}},
)
async def get_productor(
    codigo_productor: str, user: StaffUser, db: DbSession
) -> ProductorDetailResponse:
    productor = await productores_service.get_productor(db, codigo_productor)
    return ProductorDetailResponse(
        productor=ProductorResponse.model_validate(productor)
    )


@router.post(
    "",
    response_model=ProductorMutationResponse,
    status_code=201,
    responses={
        404: {"description": "Organization not found or inactive"},
        409: {"description": "Organization ran out of producer codes"},
    },
)
async def create_productor(
    body: ProductorCreate, user: StaffUser, db: DbSession
) -> ProductorMutationResponse:
    productor = await productores_service.create_productor(db, user, body)
    return ProductorMutationResponse(
        productor=ProductorResponse.model_validate(productor),
        message="Productor creado exitosamente",
    )


@router.delete(
    "/{codigo_productor}",
    status_code=204,
    responses={404: {"description": "Producer not found"}},
)
async def delete_productor(
    codigo_productor: str, user: ManagerUser, db: DbSession
) -> Response:
    await productores_service.delete_productor(db, user, codigo_productor)
    return Response(status_code=204)
