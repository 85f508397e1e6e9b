"""Tests for the maintenance CLI."""

from datetime import UTC, datetime, timedelta
from unittest.mock import patch

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

import cli
from core.config import clear_settings_cache
from core.errors import ConflictError
from models import FichaDraft
from repositories.usuario_repository import UsuarioRepository
from services.auth_service import verify_password
from tests.factories import FichaDraftFactory


@pytest.mark.integration
class TestPurgeDrafts:
    async def test_deletes_only_stale_drafts(
        self, session_maker: async_sessionmaker[AsyncSession]
    ):
        now = datetime.now(UTC)
        async with session_maker() as session:
            session.add_all(
                [
                    FichaDraftFactory.build(updated_at=now - timedelta(days=40)),
                    FichaDraftFactory.build(updated_at=now - timedelta(days=31)),
                    FichaDraftFactory.build(updated_at=now - timedelta(days=2)),
                ]
            )
            await session.commit()

        deleted = await cli.purge_drafts(session_maker, days=30)

        assert deleted == 2
        async with session_maker() as session:
            remaining = await session.scalar(
                select(func.count()).select_from(FichaDraft)
            )
        assert remaining == 1

    async def test_default_retention_from_settings(
        self, session_maker: async_sessionmaker[AsyncSession], monkeypatch
    ):
        monkeypatch.setenv("DRAFT_RETENTION_DAYS", "1")
        clear_settings_cache()
        async with session_maker() as session:
            session.add(
                FichaDraftFactory.build(
                    updated_at=datetime.now(UTC) - timedelta(days=2)
                )
            )
            await session.commit()

        assert await cli.purge_drafts(session_maker) == 1


@pytest.mark.integration
class TestCreateAdmin:
    async def test_creates_administrador(
        self, session_maker: async_sessionmaker[AsyncSession]
    ):
        user = await cli.create_admin(
            session_maker,
            username="Root",
            email="ROOT@apromam.test",
            nombre_completo=" Administración Central ",
            password="Secreta123",
        )

        async with session_maker() as session:
            stored = await UsuarioRepository(session).find_by_id(user.id_usuario)
        assert stored.username == "root"
        assert stored.email == "root@apromam.test"
        assert stored.rol.nombre_rol == "administrador"
        assert verify_password("Secreta123", stored.password_hash)

    async def test_duplicate_username(
        self, session_maker: async_sessionmaker[AsyncSession]
    ):
        kwargs = {
            "username": "root",
            "email": "root@apromam.test",
            "nombre_completo": "Administración",
            "password": "Secreta123",
        }
        await cli.create_admin(session_maker, **kwargs)

        with pytest.raises(ConflictError):
            await cli.create_admin(session_maker, **kwargs)


@pytest.mark.unit
class TestMain:
    def test_no_command_prints_help(self, capsys):
        assert cli.main([]) == 1
        assert "purge-drafts" in capsys.readouterr().out

    def test_migrate_dispatch(self):
        with patch("cli.cmd_migrate", autospec=True, return_value=0) as mock:
            assert cli.main(["migrate"]) == 0

        mock.assert_called_once_with("head")

    def test_purge_dispatch(self):
        with patch("cli.cmd_purge_drafts", autospec=True, return_value=0) as mock:
            cli.main(["purge-drafts", "--days", "45"])

        mock.assert_called_once_with(45)

    def test_create_admin_password_mismatch(self):
        with patch("cli.getpass.getpass", side_effect=["una", "otra"]):
            assert cli.cmd_create_admin("root", "root@x.test", "Root") == 1
