#!/usr/bin/env python3
"""CLI for APROMAM API maintenance tasks.

Usage:
    python -m cli <command>

Commands:
    migrate        Apply database migrations (default target: head)
    purge-drafts   Delete ficha drafts untouched for N days
    create-admin   Create an administrador account
"""

import argparse
import asyncio
import getpass
import sys
from pathlib import Path

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.logger import configure_logging, get_logger
from models import Usuario

logger = get_logger(__name__)

API_DIR = Path(__file__).resolve().parent


def cmd_migrate(target: str = "head") -> int:
    """Run ``alembic upgrade`` from any working directory."""
    from alembic import command
    from alembic.config import Config

    cfg = Config(str(API_DIR / "alembic.ini"))
    cfg.set_main_option("script_location", str(API_DIR / "alembic"))

    logger.info("cli.migrate.start", target=target)
    command.upgrade(cfg, target)
    logger.info("cli.migrate.complete", target=target)
    return 0


async def purge_drafts(
    session_maker: async_sessionmaker[AsyncSession], days: int | None = None
) -> int:
    from core.database import session_scope
    from services.ficha_drafts_service import purge_old_drafts

    async with session_scope(session_maker) as session:
        return await purge_old_drafts(session, days)


async def create_admin(
    session_maker: async_sessionmaker[AsyncSession],
    *,
    username: str,
    email: str,
    nombre_completo: str,
    password: str,
) -> Usuario:
    """Bootstrap account; the API only lets an administrador create another.

    Raises:
        ConflictError: the username is taken.
        NotFoundError: the roles table was not seeded.
    """
    from core.database import session_scope
    from core.errors import NotFoundError
    from core.roles import Role
    from repositories.usuario_repository import RolRepository, UsuarioRepository
    from services.auth_service import hash_password

    async with session_scope(session_maker) as session:
        rol = await RolRepository(session).find_by_nombre(Role.ADMINISTRADOR)
        if rol is None:
            raise NotFoundError("Rol 'administrador' no encontrado")
        user = await UsuarioRepository(session).create(
            username=username,
            email=email.strip().lower(),
            password_hash=hash_password(password),
            nombre_completo=nombre_completo.strip(),
            id_rol=rol.id_rol,
        )
    logger.info("cli.create_admin.created", username=user.username)
    return user


async def _with_database(func, *args, **kwargs):
    from core.database import create_engine, create_session_maker, dispose_engine

    engine = create_engine()
    try:
        return await func(create_session_maker(engine), *args, **kwargs)
    finally:
        await dispose_engine(engine)


def cmd_purge_drafts(days: int | None) -> int:
    deleted = asyncio.run(_with_database(purge_drafts, days))
    logger.info("cli.purge_drafts.complete", deleted=deleted)
    return 0


def cmd_create_admin(username: str, email: str, nombre_completo: str) -> int:
    from core.errors import DomainError

    password = getpass.getpass("Contraseña: ")
    if password != getpass.getpass("Repetir contraseña: "):
        logger.error("cli.create_admin.password_mismatch")
        return 1

    try:
        asyncio.run(
            _with_database(
                create_admin,
                username=username,
                email=email,
                nombre_completo=nombre_completo,
                password=password,
            )
        )
    except DomainError as e:
        logger.error("cli.create_admin.failed", error=e.code, message=e.message)
        return 1
    return 0


def main(argv: list[str] | None = None) -> int:
    configure_logging()
    parser = argparse.ArgumentParser(
        description="APROMAM API CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    migrate = subparsers.add_parser("migrate", help="Run database migrations")
    migrate.add_argument("target", nargs="?", default="head")

    purge = subparsers.add_parser(
        "purge-drafts", help="Delete drafts untouched for N days"
    )
    purge.add_argument(
        "--days", type=int, default=None, help="Default: DRAFT_RETENTION_DAYS"
    )

    admin = subparsers.add_parser("create-admin", help="Create an administrador")
    admin.add_argument("--username", required=True)
    admin.add_argument("--email", required=True)
    admin.add_argument("--nombre", required=True, help="Full name")

    args = parser.parse_args(argv)

    if args.command == "migrate":
        return cmd_migrate(args.target)
    elif args.command == "purge-drafts":
        return cmd_purge_drafts(args.days)
    elif args.command == "create-admin":
        return cmd_create_admin(args.username, args.email, args.nombre)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
