"""User administration endpoints."""

import uuid

from fastapi import APIRouter, Response

from core.auth import ManagerUser
from core.database import DbSession
from schemas import UsuarioCreate, UsuarioListResponse, UsuarioMutationResponse
from services import usuarios_service

router = APIRouter(prefix="/api/usuarios", tags=["usuarios"])


@router.get("", response_model=UsuarioListResponse)
async def list_usuarios(user: ManagerUser, db: DbSession) -> UsuarioListResponse:
    """Users the caller is allowed to manage."""
    usuarios = await usuarios_service.list_usuarios(db, user)
    return UsuarioListResponse(usuarios=usuarios, total=len(usuarios))


@router.post(
    "",
    response_model=UsuarioMutationResponse,
    status_code=201,
    responses={
        403: {"description": "Caller cannot create users with that role"},
        404: {"description": "Role not found"},
        409: {"description": "Username already exists"},
    },
)
async def create_usuario(
    body: UsuarioCreate, user: ManagerUser, db: DbSession
) -> UsuarioMutationResponse:
    usuario = await usuarios_service.create_usuario(db, user, body)
    return UsuarioMutationResponse(
        usuario=usuario, message="Usuario creado exitosamente"
    )


@router.delete(
    "/{id_usuario}",
    status_code=204,
    responses={
        400: {"description": "Cannot deactivate yourself"},
        403: {"description": "Caller cannot manage that user"},
        404: {"description": "User not found"},
    },
)
async def deactivate_usuario(
    id_usuario: uuid.UUID, user: ManagerUser, db: DbSession
) -> Response:
    await usuarios_service.deactivate_usuario(db, user, id_usuario)
    return Response(status_code=204)
