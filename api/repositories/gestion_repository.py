"""Gestion repository.

The single system-active period is guarded by a partial unique index on
``activo_sistema``; ``set_gestion_activa`` clears the old flag before setting
the new one so the index never sees two rows.
"""

import uuid

from sqlalchemy import exists, func, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import ConflictError, NotFoundError
from domain.gestion import Gestion
from models import Gestion as GestionRow
from repositories.utils import execute_unique, log_slow_query


class GestionRepository:
    """Repository for Gestion database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    @log_slow_query("gestion.find_all")
    async def find_all(self, only_active: bool = True) -> list[Gestion]:
        stmt = select(GestionRow).order_by(GestionRow.anio_gestion.desc())
        if only_active:
            stmt = stmt.where(GestionRow.activo.is_(True))
        result = await self.db.execute(stmt)
        return [Gestion.from_row(row) for row in result.scalars().all()]

    async def find_by_id(self, id_gestion: uuid.UUID) -> Gestion | None:
        row = await self.db.scalar(
            select(GestionRow).where(GestionRow.id_gestion == id_gestion)
        )
        return Gestion.from_row(row) if row else None

    async def find_by_anio(self, anio: int) -> Gestion | None:
        row = await self.db.scalar(
            select(GestionRow).where(GestionRow.anio_gestion == anio)
        )
        return Gestion.from_row(row) if row else None

    @log_slow_query("gestion.get_activa")
    async def get_gestion_activa(self) -> Gestion | None:
        row = await self.db.scalar(
            select(GestionRow).where(GestionRow.activo_sistema.is_(True))
        )
        return Gestion.from_row(row) if row else None

    async def exists_by_anio(
        self, anio: int, exclude_id: uuid.UUID | None = None
    ) -> bool:
        conditions = [GestionRow.anio_gestion == anio]
        if exclude_id is not None:
            conditions.append(GestionRow.id_gestion != exclude_id)
        return bool(await self.db.scalar(select(exists().where(*conditions))))

    @log_slow_query("gestion.create")
    async def create(self, gestion: Gestion) -> Gestion:
        conflict = f"Ya existe una gestión para el año {gestion.anio_gestion}"
        if await self.exists_by_anio(gestion.anio_gestion):
            raise ConflictError(conflict)

        stmt = (
            insert(GestionRow)
            .values(
                anio_gestion=gestion.anio_gestion,
                nombre_gestion=gestion.nombre_gestion,
                activo=True,
                activo_sistema=False,
            )
            .returning(GestionRow)
        )

        async def _insert() -> GestionRow:
            return (await self.db.execute(stmt)).scalar_one()

        return Gestion.from_row(await execute_unique(self.db, _insert, conflict))

    @log_slow_query("gestion.update")
    async def update(self, gestion: Gestion) -> Gestion | None:
        if gestion.id_gestion is None:
            raise ValueError("Cannot update a gestion without id")

        conflict = f"Ya existe una gestión para el año {gestion.anio_gestion}"
        if await self.exists_by_anio(gestion.anio_gestion, gestion.id_gestion):
            raise ConflictError(conflict)

        stmt = (
            update(GestionRow)
            .where(GestionRow.id_gestion == gestion.id_gestion)
            .values(
                anio_gestion=gestion.anio_gestion,
                nombre_gestion=gestion.nombre_gestion,
                activo=gestion.activo,
            )
            .returning(GestionRow)
            .execution_options(synchronize_session=False, populate_existing=True)
        )

        async def _update() -> GestionRow | None:
            return (await self.db.execute(stmt)).scalar_one_or_none()

        row = await execute_unique(self.db, _update, conflict)
        return Gestion.from_row(row) if row else None

    @log_slow_query("gestion.soft_delete")
    async def soft_delete(self, id_gestion: uuid.UUID) -> None:
        """Deactivate unless it is the current system period.

        Raises:
            NotFoundError: no active gestion with that id.
            ConflictError: the gestion is the system-active period.
        """
        stmt = (
            update(GestionRow)
            .where(
                GestionRow.id_gestion == id_gestion,
                GestionRow.activo.is_(True),
                GestionRow.activo_sistema.is_(False),
            )
            .values(activo=False)
            .returning(GestionRow.id_gestion)
            .execution_options(synchronize_session="fetch")
        )
        result = await self.db.execute(stmt)
        if result.scalar_one_or_none() is not None:
            return

        current = await self.find_by_id(id_gestion)
        if current is None or not current.activo:
            raise NotFoundError("Gestión no encontrada")
        raise ConflictError("No se puede eliminar la gestión activa del sistema")

    @log_slow_query("gestion.set_activa")
    async def set_gestion_activa(self, id_gestion: uuid.UUID) -> Gestion | None:
        """Make ``id_gestion`` the only system-active period.

        Returns None when no active row with that id exists. A concurrent
        activation that slips past the clear step is rejected by the
        partial unique index and surfaces as ConflictError.
        """
        clear_previous = (
            update(GestionRow)
            .where(
                GestionRow.activo_sistema.is_(True),
                GestionRow.id_gestion != id_gestion,
            )
            .values(activo_sistema=False)
            .execution_options(synchronize_session="fetch")
        )
        set_new = (
            update(GestionRow)
            .where(GestionRow.id_gestion == id_gestion, GestionRow.activo.is_(True))
            .values(activo_sistema=True)
            .returning(GestionRow)
            .execution_options(synchronize_session=False, populate_existing=True)
        )

        async def _swap() -> GestionRow | None:
            await self.db.execute(clear_previous)
            return (await self.db.execute(set_new)).scalar_one_or_none()

        row = await execute_unique(
            self.db, _swap, "Otra gestión fue activada simultáneamente"
        )
        return Gestion.from_row(row) if row else None

    async def count(self) -> int:
        stmt = (
            select(func.count())
            .select_from(GestionRow)
            .where(GestionRow.activo.is_(True))
        )
        return int(await self.db.scalar(stmt) or 0)
