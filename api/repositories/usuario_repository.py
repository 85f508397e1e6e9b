"""Usuario and Rol repositories."""

import uuid

from sqlalchemy import func, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from models import Rol, Usuario, utcnow
from repositories.utils import execute_unique, log_slow_query


class RolRepository:
    """Read-only access to the fixed role table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_nombre(self, nombre_rol: str) -> Rol | None:
        result = await self.db.execute(
            select(Rol).where(
                func.lower(Rol.nombre_rol) == nombre_rol.strip().lower(),
                Rol.activo.is_(True),
            )
        )
        return result.scalar_one_or_none()

    async def find_all(self) -> list[Rol]:
        result = await self.db.execute(
            select(Rol).where(Rol.activo.is_(True)).order_by(Rol.nivel)
        )
        return list(result.scalars().all())


class UsuarioRepository:
    """Repository for Usuario database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_id(self, id_usuario: uuid.UUID) -> Usuario | None:
        result = await self.db.execute(
            select(Usuario).where(Usuario.id_usuario == id_usuario)
        )
        return result.scalar_one_or_none()

    async def find_by_username(self, username: str) -> Usuario | None:
        """Case-insensitive; usernames are stored lowercase."""
        result = await self.db.execute(
            select(Usuario).where(Usuario.username == username.strip().lower())
        )
        return result.scalar_one_or_none()

    @log_slow_query("usuario.find_by_roles")
    async def find_by_roles(self, roles: set[str]) -> list[Usuario]:
        if not roles:
            return []
        result = await self.db.execute(
            select(Usuario)
            .join(Rol, Usuario.id_rol == Rol.id_rol)
            .where(Rol.nombre_rol.in_(sorted(roles)), Usuario.activo.is_(True))
            .order_by(Usuario.username)
        )
        return list(result.scalars().all())

    async def create(
        self,
        *,
        username: str,
        email: str,
        password_hash: str,
        nombre_completo: str,
        id_rol: int,
    ) -> Usuario:
        stmt = (
            insert(Usuario)
            .values(
                id_usuario=uuid.uuid4(),
                username=username.strip().lower(),
                email=email,
                password_hash=password_hash,
                nombre_completo=nombre_completo,
                id_rol=id_rol,
                activo=True,
            )
            .returning(Usuario)
        )

        async def _insert() -> Usuario:
            return (await self.db.execute(stmt)).scalar_one()

        return await execute_unique(
            self.db, _insert, f"El usuario '{username}' ya existe"
        )

    async def touch_last_login(self, id_usuario: uuid.UUID) -> None:
        await self.db.execute(
            update(Usuario)
            .where(Usuario.id_usuario == id_usuario)
            .values(last_login=utcnow())
            .execution_options(synchronize_session=False)
        )

    async def deactivate(self, id_usuario: uuid.UUID) -> bool:
        result = await self.db.execute(
            update(Usuario)
            .where(Usuario.id_usuario == id_usuario, Usuario.activo.is_(True))
            .values(activo=False)
            .returning(Usuario.id_usuario)
            .execution_options(synchronize_session="fetch")
        )
        return result.scalar_one_or_none() is not None
