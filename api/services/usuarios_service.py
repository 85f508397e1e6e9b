"""User administration governed by the role hierarchy.

An actor only sees and manages users whose role ranks strictly below its
own. The administrador additionally sees other administradores.
"""

import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from core.audit import audit
from core.auth import CurrentUser
from core.errors import (
    BadRequestError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
)
from core.roles import (
    Role,
    can_create_users,
    can_manage,
    is_administrador,
    manageable_roles,
    normalize_role,
)
from repositories.usuario_repository import RolRepository, UsuarioRepository
from schemas import UsuarioCreate, UsuarioResponse
from services.auth_service import hash_password, to_usuario_response


async def list_usuarios(db: AsyncSession, actor: CurrentUser) -> list[UsuarioResponse]:
    visible = manageable_roles(actor.role)
    if is_administrador(actor.role):
        visible.add(str(Role.ADMINISTRADOR))

    users = await UsuarioRepository(db).find_by_roles(visible)
    return [to_usuario_response(u) for u in users]


async def create_usuario(
    db: AsyncSession, actor: CurrentUser, data: UsuarioCreate
) -> UsuarioResponse:
    """Create an account for a role the actor outranks.

    Raises:
        ForbiddenError: actor cannot create users, or cannot manage the role.
        NotFoundError: the role does not exist.
        ConflictError: the username is taken.
    """
    target_role = normalize_role(data.rol)
    if not can_create_users(actor.role):
        raise ForbiddenError("No tienes permisos para crear usuarios")
    if not can_manage(actor.role, target_role):
        raise ForbiddenError(f"No puedes crear usuarios con rol '{target_role}'")

    rol = await RolRepository(db).find_by_nombre(target_role)
    if rol is None:
        raise NotFoundError(f"Rol '{target_role}' no encontrado")

    repo = UsuarioRepository(db)
    if await repo.find_by_username(data.username) is not None:
        raise ConflictError(f"El usuario '{data.username}' ya existe")

    user = await repo.create(
        username=data.username,
        email=data.email.strip().lower(),
        password_hash=hash_password(data.password),
        nombre_completo=data.nombre_completo.strip(),
        id_rol=rol.id_rol,
    )
    # RETURNING does not load the joined role
    await db.refresh(user, attribute_names=["rol"])

    audit(
        "usuario.created",
        actor,
        id_usuario=user.id_usuario,
        username=user.username,
        rol=target_role,
    )
    return to_usuario_response(user)


async def deactivate_usuario(
    db: AsyncSession, actor: CurrentUser, id_usuario: uuid.UUID
) -> None:
    if str(id_usuario) == actor.user_id:
        raise BadRequestError("No puedes desactivar tu propio usuario")

    repo = UsuarioRepository(db)
    user = await repo.find_by_id(id_usuario)
    if user is None or not user.activo:
        raise NotFoundError("Usuario no encontrado")
    if not can_manage(actor.role, user.rol.nombre_rol):
        raise ForbiddenError("No puedes desactivar usuarios de este rol")

    if not await repo.deactivate(id_usuario):
        raise NotFoundError("Usuario no encontrado")

    audit(
        "usuario.deactivated",
        actor,
        id_usuario=id_usuario,
        username=user.username,
    )
