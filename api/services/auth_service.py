"""Login, token refresh and password hashing."""

import uuid

import bcrypt
from sqlalchemy.ext.asyncio import AsyncSession

from core.audit import audit
from core.auth import (
    CurrentUser,
    create_access_token,
    create_refresh_token,
    decode_token,
)
from core.config import get_settings
from core.errors import DomainValidationError, NotFoundError, UnauthorizedError
from core.logger import get_logger
from models import Usuario
from repositories.usuario_repository import UsuarioRepository
from schemas import LoginResponse, UsuarioResponse

logger = get_logger(__name__)

BCRYPT_MAX_BYTES = 72
_INVALID_CREDENTIALS = "Credenciales inválidas"


def hash_password(password: str) -> str:
    raw = password.encode("utf-8")
    if len(raw) > BCRYPT_MAX_BYTES:
        raise DomainValidationError(
            "La contraseña es demasiado larga", field="password"
        )
    return bcrypt.hashpw(raw, bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    raw = password.encode("utf-8")
    if len(raw) > BCRYPT_MAX_BYTES:
        return False
    try:
        return bcrypt.checkpw(raw, password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        logger.warning("auth.password_hash.invalid")
        return False


def to_usuario_response(user: Usuario) -> UsuarioResponse:
    return UsuarioResponse(
        id_usuario=user.id_usuario,
        username=user.username,
        email=user.email,
        nombre_completo=user.nombre_completo,
        rol=user.rol.nombre_rol,
        activo=user.activo,
        last_login=user.last_login,
        created_at=user.created_at,
    )


def _issue_tokens(user: Usuario) -> LoginResponse:
    user_id = str(user.id_usuario)
    role = user.rol.nombre_rol
    return LoginResponse(
        access_token=create_access_token(user_id, user.username, role),
        refresh_token=create_refresh_token(user_id, user.username, role),
        expires_in=get_settings().jwt_expires_minutes * 60,
        user=to_usuario_response(user),
    )


async def login(db: AsyncSession, username: str, password: str) -> LoginResponse:
    """Authenticate by username and password.

    Unknown users and wrong passwords get the same message.
    """
    repo = UsuarioRepository(db)
    user = await repo.find_by_username(username)
    if user is None or not verify_password(password, user.password_hash):
        logger.warning("auth.login.failed", username=username.strip().lower())
        raise UnauthorizedError(_INVALID_CREDENTIALS)
    if not user.activo:
        logger.warning("auth.login.inactive", username=user.username)
        raise UnauthorizedError("Usuario desactivado", code="user_inactive")

    await repo.touch_last_login(user.id_usuario)
    await db.refresh(user)

    actor = CurrentUser(
        user_id=str(user.id_usuario),
        username=user.username,
        role=user.rol.nombre_rol,
    )
    audit("auth.login", actor)
    return _issue_tokens(user)


async def refresh(db: AsyncSession, refresh_token: str) -> LoginResponse:
    """Trade a refresh token for a new token pair.

    The account is re-read so a deactivated user cannot keep refreshing.
    """
    claims = decode_token(refresh_token, expected_type="refresh")
    try:
        user_id = uuid.UUID(claims.user_id)
    except ValueError as e:
        raise UnauthorizedError("Token inválido", code="invalid_token") from e

    user = await UsuarioRepository(db).find_by_id(user_id)
    if user is None or not user.activo:
        raise UnauthorizedError("Usuario no encontrado o desactivado")
    return _issue_tokens(user)


async def get_profile(db: AsyncSession, actor: CurrentUser) -> UsuarioResponse:
    try:
        user_id = uuid.UUID(actor.user_id)
    except ValueError as e:
        raise NotFoundError("Usuario no encontrado") from e

    user = await UsuarioRepository(db).find_by_id(user_id)
    if user is None:
        raise NotFoundError("Usuario no encontrado")
    return to_usuario_response(user)
