"""Authentication endpoints: login, token refresh and current profile."""

from fastapi import APIRouter, Request

from core.auth import CurrentUserDep
from core.database import DbSession
from core.ratelimit import AUTH_LIMIT, limiter
from schemas import LoginRequest, LoginResponse, MeResponse, RefreshRequest
from services.auth_service import get_profile, login, refresh

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={401: {"description": "Invalid credentials or inactive user"}},
)
@limiter.limit(AUTH_LIMIT)
async def login_endpoint(
    request: Request, body: LoginRequest, db: DbSession
) -> LoginResponse:
    return await login(db, body.username, body.password)


@router.post(
    "/refresh",
    response_model=LoginResponse,
    responses={401: {"description": "Invalid or expired refresh token"}},
)
@limiter.limit(AUTH_LIMIT)
async def refresh_endpoint(
    request: Request, body: RefreshRequest, db: DbSession
) -> LoginResponse:
    return await refresh(db, body.refresh_token)


@router.get(
    "/me",
    response_model=MeResponse,
    responses={401: {"description": "Not authenticated"}},
)
async def me_endpoint(user: CurrentUserDep, db: DbSession) -> MeResponse:
    """Current user's profile."""
    return MeResponse(user=await get_profile(db, user))
