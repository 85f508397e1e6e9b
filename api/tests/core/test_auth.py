"""Unit tests for core.auth module.

Tests bearer-token authentication utilities:
- access/refresh token round trip and claim checks
- expired, tampered and wrong-type tokens
- get_current_user header parsing
- require_roles allow-lists
"""

from datetime import timedelta
from unittest.mock import MagicMock, patch

import jwt
import pytest
from fastapi import Request

from core.auth import (
    CurrentUser,
    _create_token,
    create_access_token,
    create_refresh_token,
    decode_token,
    get_current_user,
    require_roles,
)
from core.config import get_settings
from core.errors import ForbiddenError, UnauthorizedError


def _make_request(headers: dict | None = None) -> Request:
    request = MagicMock(spec=Request)
    request.headers = headers or {}
    request.state = MagicMock()
    request.method = "GET"
    request.url = MagicMock(path="/api/test")
    return request


@pytest.mark.unit
class TestTokens:
    def test_access_token_round_trip(self):
        token = create_access_token("u-1", "gerente1", "Gerente")
        user = decode_token(token)
        assert user == CurrentUser(user_id="u-1", username="gerente1", role="gerente")

    def test_refresh_token_requires_refresh_type(self):
        token = create_refresh_token("u-1", "gerente1", "gerente")
        assert decode_token(token, expected_type="refresh").user_id == "u-1"

    def test_refresh_token_rejected_as_access(self):
        token = create_refresh_token("u-1", "gerente1", "gerente")
        with pytest.raises(UnauthorizedError) as exc_info:
            decode_token(token)
        assert exc_info.value.code == "invalid_token"

    def test_access_token_rejected_as_refresh(self):
        token = create_access_token("u-1", "gerente1", "gerente")
        with pytest.raises(UnauthorizedError):
            decode_token(token, expected_type="refresh")

    def test_expired_token(self):
        token = _create_token(
            "u-1", "gerente1", "gerente", "access", timedelta(seconds=-5)
        )
        with pytest.raises(UnauthorizedError) as exc_info:
            decode_token(token)
        assert exc_info.value.code == "token_expired"

    def test_wrong_secret(self):
        settings = get_settings()
        token = jwt.encode(
            {
                "sub": "u-1",
                "type": "access",
                "iat": 0,
                "exp": 9999999999,
                "iss": settings.jwt_issuer,
                "aud": settings.jwt_audience,
            },
            "another-secret-that-is-also-long-enough-for-hs256",
            algorithm="HS256",
        )
        with pytest.raises(UnauthorizedError) as exc_info:
            decode_token(token)
        assert exc_info.value.code == "invalid_token"

    def test_wrong_audience(self):
        settings = get_settings()
        token = jwt.encode(
            {
                "sub": "u-1",
                "type": "access",
                "iat": 0,
                "exp": 9999999999,
                "iss": settings.jwt_issuer,
                "aud": "someone-else",
            },
            settings.jwt_secret,
            algorithm="HS256",
        )
        with pytest.raises(UnauthorizedError):
            decode_token(token)

    def test_garbage(self):
        with pytest.raises(UnauthorizedError):
            decode_token("not-a-jwt")


@pytest.mark.unit
class TestGetCurrentUser:
    def test_missing_header(self):
        with pytest.raises(UnauthorizedError):
            get_current_user(_make_request())

    def test_non_bearer_scheme(self):
        with pytest.raises(UnauthorizedError):
            get_current_user(_make_request({"Authorization": "Basic abc"}))

    def test_valid_token_sets_state(self):
        token = create_access_token("u-9", "tecnico1", "tecnico")
        request = _make_request({"Authorization": f"Bearer {token}"})

        user = get_current_user(request)

        assert user.user_id == "u-9"
        assert user.role == "tecnico"
        assert request.state.user_id == "u-9"

    def test_binds_log_context(self):
        token = create_access_token("u-9", "tecnico1", "tecnico")
        request = _make_request({"Authorization": f"Bearer {token}"})

        with patch("core.auth.bind_contextvars") as mock_bind:
            get_current_user(request)

        mock_bind.assert_called_once_with(user_id="u-9", role="tecnico")


@pytest.mark.unit
class TestRequireRoles:
    def test_allows_listed_role(self):
        check = require_roles("gerente", "administrador")
        user = CurrentUser(user_id="1", username="g", role="gerente")
        assert check(user) is user

    def test_rejects_unlisted_role(self):
        check = require_roles("administrador")
        user = CurrentUser(user_id="1", username="g", role="gerente")
        with pytest.raises(ForbiddenError, match="administrador"):
            check(user)

    def test_role_names_are_normalized(self):
        check = require_roles("GERENTE")
        user = CurrentUser(user_id="1", username="g", role="gerente")
        assert check(user) is user
