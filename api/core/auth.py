"""JWT bearer authentication and role-based authorization.

Provides:
- HS256 access/refresh token issuing and verification (PyJWT)
- FastAPI dependencies for authenticated routes
- ``require_roles`` dependency factory for role allow-lists

Usage:
    @router.post("")
    async def create(body: Body, user: ManagerUser, db: DbSession): ...
"""

import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Annotated, Any, Literal

import jwt
from fastapi import Depends, Request
from jwt.exceptions import ExpiredSignatureError, InvalidTokenError

from core.config import get_settings
from core.errors import ForbiddenError, UnauthorizedError
from core.logger import bind_contextvars, get_logger
from core.roles import Role, normalize_role
from core.wide_event import set_wide_event_nested

logger = get_logger(__name__)

TokenType = Literal["access", "refresh"]


@dataclass(frozen=True, slots=True)
class CurrentUser:
    """Identity extracted from a verified access token."""

    user_id: str
    username: str
    role: str


def _create_token(
    user_id: str,
    username: str,
    role: str,
    token_type: TokenType,
    expires_in: timedelta,
) -> str:
    settings = get_settings()
    now = datetime.now(UTC)
    payload: dict[str, Any] = {
        "sub": str(user_id),
        "username": username,
        "role": normalize_role(role),
        "type": token_type,
        "iat": now,
        "exp": now + expires_in,
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
        "jti": uuid.uuid4().hex,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def create_access_token(user_id: str, username: str, role: str) -> str:
    settings = get_settings()
    return _create_token(
        user_id,
        username,
        role,
        "access",
        timedelta(minutes=settings.jwt_expires_minutes),
    )


def create_refresh_token(user_id: str, username: str, role: str) -> str:
    settings = get_settings()
    return _create_token(
        user_id,
        username,
        role,
        "refresh",
        timedelta(days=settings.jwt_refresh_expires_days),
    )


def decode_token(token: str, expected_type: TokenType = "access") -> CurrentUser:
    """Verify signature, expiry, issuer, audience and token type.

    Raises:
        UnauthorizedError: with code ``token_expired`` or ``invalid_token``.
    """
    settings = get_settings()
    try:
        claims = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            issuer=settings.jwt_issuer,
            audience=settings.jwt_audience,
            options={"require": ["exp", "iat", "sub"]},
        )
    except ExpiredSignatureError as e:
        raise UnauthorizedError(
            "Token expirado. Por favor, inicia sesión nuevamente",
            code="token_expired",
        ) from e
    except InvalidTokenError as e:
        raise UnauthorizedError("Token inválido", code="invalid_token") from e

    if claims.get("type") != expected_type:
        raise UnauthorizedError("Tipo de token inválido", code="invalid_token")

    return CurrentUser(
        user_id=claims["sub"],
        username=claims.get("username", ""),
        role=normalize_role(claims.get("role")),
    )


def _extract_bearer_token(request: Request) -> str | None:
    auth_header = request.headers.get("Authorization", "")
    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def get_current_user(request: Request) -> CurrentUser:
    """Resolve the authenticated user or raise 401."""
    token = _extract_bearer_token(request)
    if token is None:
        logger.warning(
            "auth.token.missing", method=request.method, path=request.url.path
        )
        raise UnauthorizedError("Token de autenticación requerido")

    try:
        user = decode_token(token)
    except UnauthorizedError as e:
        logger.warning("auth.token.rejected", reason=e.code, path=request.url.path)
        raise

    # Rate limiter keys on this
    request.state.user_id = user.user_id
    bind_contextvars(user_id=user.user_id, role=user.role)
    set_wide_event_nested("actor", user_id=user.user_id, role=user.role)
    return user


CurrentUserDep = Annotated[CurrentUser, Depends(get_current_user)]


def require_roles(*roles: str) -> Callable[[CurrentUser], CurrentUser]:
    """Build a dependency that only admits users whose role is in ``roles``."""
    allowed = frozenset(normalize_role(r) for r in roles)
    required = " o ".join(normalize_role(r) for r in roles)

    def _check_role(user: CurrentUserDep) -> CurrentUser:
        if user.role not in allowed:
            logger.warning(
                "auth.forbidden",
                user_id=user.user_id,
                role=user.role,
                required=sorted(allowed),
            )
            raise ForbiddenError(f"Acceso denegado. Se requiere rol: {required}")
        return user

    return _check_role


AdminUser = Annotated[CurrentUser, Depends(require_roles(Role.ADMINISTRADOR))]
ManagerUser = Annotated[
    CurrentUser, Depends(require_roles(Role.GERENTE, Role.ADMINISTRADOR))
]
StaffUser = Annotated[
    CurrentUser,
    Depends(require_roles(Role.TECNICO, Role.GERENTE, Role.ADMINISTRADOR)),
]
