"""Pytest configuration and shared fixtures.

This module provides:
- A throwaway database per test (in-memory SQLite by default, or
  TEST_DATABASE_URL for a real PostgreSQL)
- Async session fixtures for repository/service tests
- FastAPI test client for route tests
- Seeded roles and users plus bearer-token helpers per role
"""

# Set environment variables BEFORE any imports that trigger Settings validation
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault(
    "JWT_SECRET", "test-jwt-secret-that-is-long-enough-for-hs256-keys"
)

import uuid
from collections.abc import AsyncGenerator, Callable, Generator

import bcrypt
import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool, StaticPool

import models  # noqa: F401
from core.auth import create_access_token
from core.config import clear_settings_cache
from core.database import Base, create_session_maker
from core.wide_event import clear_wide_event, init_wide_event
from models import Rol, Usuario

# =============================================================================
# Test Settings
# =============================================================================

TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite://")

TEST_PASSWORD = "Secreta123"

ROLES = [
    (1, "administrador", 1),
    (2, "gerente", 2),
    (3, "tecnico", 3),
    (4, "invitado", 4),
]

ADMIN_ID = uuid.UUID("00000000-0000-4000-8000-000000000001")
GERENTE_ID = uuid.UUID("00000000-0000-4000-8000-000000000002")
TECNICO_ID = uuid.UUID("00000000-0000-4000-8000-000000000003")
INVITADO_ID = uuid.UUID("00000000-0000-4000-8000-000000000004")

SEED_USERS = {
    "administrador": (ADMIN_ID, "admin", 1),
    "gerente": (GERENTE_ID, "gerente1", 2),
    "tecnico": (TECNICO_ID, "tecnico1", 3),
    "invitado": (INVITADO_ID, "invitado1", 4),
}


@pytest.fixture(autouse=True)
def setup_wide_event():
    """Initialize wide_event context for all tests.

    Services use set_wide_event_fields(), which is a no-op without a context.
    """
    init_wide_event()
    yield
    clear_wide_event()


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None]:
    """Each test starts from settings built out of the current environment."""
    clear_settings_cache()
    yield
    clear_settings_cache()


# =============================================================================
# Database Fixtures
# =============================================================================


def _enable_sqlite_savepoints(engine: AsyncEngine) -> None:
    """Let pysqlite hand transaction control to SQLAlchemy.

    Without this, SAVEPOINT (begin_nested) does not work and foreign keys
    are not enforced.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_conn, _record):
        dbapi_conn.isolation_level = None
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


@pytest_asyncio.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine]:
    """Fresh schema per test."""
    if TEST_DATABASE_URL.startswith("sqlite"):
        engine = create_async_engine(
            TEST_DATABASE_URL,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        _enable_sqlite_savepoints(engine)
    else:
        engine = create_async_engine(TEST_DATABASE_URL, poolclass=NullPool)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    session_maker = create_session_maker(engine)
    async with session_maker() as session:
        session.add_all(
            Rol(id_rol=id_rol, nombre_rol=nombre, nivel=nivel, activo=True)
            for id_rol, nombre, nivel in ROLES
        )
        await session.commit()

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_maker(test_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_session_maker(test_engine)


@pytest_asyncio.fixture
async def db_session(
    session_maker: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession]:
    """Session for repository/service tests.

    Never committed; the schema is dropped after the test anyway.
    """
    async with session_maker() as session:
        yield session
        await session.rollback()


# =============================================================================
# Users and Tokens
# =============================================================================


def _fast_hash(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=4)).decode()


@pytest_asyncio.fixture
async def seed_usuarios(
    session_maker: async_sessionmaker[AsyncSession],
) -> dict[str, Usuario]:
    """One committed, active user per role, all with TEST_PASSWORD."""
    password_hash = _fast_hash(TEST_PASSWORD)
    users: dict[str, Usuario] = {}
    async with session_maker() as session:
        for role, (user_id, username, id_rol) in SEED_USERS.items():
            user = Usuario(
                id_usuario=user_id,
                username=username,
                email=f"{username}@apromam.test",
                password_hash=password_hash,
                nombre_completo=f"Usuario {username.title()}",
                id_rol=id_rol,
                activo=True,
            )
            session.add(user)
            users[role] = user
        await session.commit()
    return users


def token_for(role: str) -> str:
    user_id, username, _ = SEED_USERS[role]
    return create_access_token(str(user_id), username, role)


@pytest.fixture
def auth_headers() -> Callable[[str], dict[str, str]]:
    """``auth_headers("gerente")`` -> Authorization header for that role."""

    def _headers(role: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {token_for(role)}"}

    return _headers


# =============================================================================
# App / Client Fixtures
# =============================================================================


@pytest.fixture
def app(
    test_engine: AsyncEngine, session_maker: async_sessionmaker[AsyncSession]
) -> Generator[FastAPI]:
    """The real app wired to the test database.

    ASGITransport does not run the lifespan, so the state it would set is
    filled in here.
    """
    from main import app as fastapi_app

    fastapi_app.state.engine = test_engine
    fastapi_app.state.session_maker = session_maker
    fastapi_app.state.init_done = True
    fastapi_app.state.init_error = None
    yield fastapi_app


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac


@pytest_asyncio.fixture
async def admin_client(
    app: FastAPI, seed_usuarios: dict[str, Usuario]
) -> AsyncGenerator[AsyncClient]:
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers={"Authorization": f"Bearer {token_for('administrador')}"},
    ) as ac:
        yield ac


@pytest_asyncio.fixture
async def gerente_client(
    app: FastAPI, seed_usuarios: dict[str, Usuario]
) -> AsyncGenerator[AsyncClient]:
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers={"Authorization": f"Bearer {token_for('gerente')}"},
    ) as ac:
        yield ac


@pytest_asyncio.fixture
async def tecnico_client(
    app: FastAPI, seed_usuarios: dict[str, Usuario]
) -> AsyncGenerator[AsyncClient]:
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers={"Authorization": f"Bearer {token_for('tecnico')}"},
    ) as ac:
        yield ac
