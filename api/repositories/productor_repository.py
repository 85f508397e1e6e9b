"""Productor repository for database operations."""

import uuid

from sqlalchemy import insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import NotFoundError
from domain.productor import Productor
from models import Productor as ProductorRow
from repositories.utils import execute_unique, log_slow_query


class ProductorRepository:
    """Repository for Productor database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    @log_slow_query("productor.find_all")
    async def find_all(
        self,
        only_active: bool = True,
        id_organizacion: uuid.UUID | None = None,
    ) -> list[Productor]:
        stmt = select(ProductorRow).order_by(ProductorRow.codigo_productor)
        if only_active:
            stmt = stmt.where(ProductorRow.activo.is_(True))
        if id_organizacion is not None:
            stmt = stmt.where(ProductorRow.id_organizacion == id_organizacion)
        result = await self.db.execute(stmt)
        return [Productor.from_row(row) for row in result.scalars().all()]

    @log_slow_query("productor.find_by_codigo")
    async def find_by_codigo(
        self, codigo_productor: str, only_active: bool = True
    ) -> Productor | None:
        stmt = select(ProductorRow).where(
            ProductorRow.codigo_productor == codigo_productor
        )
        if only_active:
            stmt = stmt.where(ProductorRow.activo.is_(True))
        row = (await self.db.execute(stmt)).scalar_one_or_none()
        return Productor.from_row(row) if row is not None else None

    async def codigos_with_prefix(self, prefix: str) -> list[str]:
        """Every issued code starting with ``prefix``, deactivated ones included."""
        stmt = select(ProductorRow.codigo_productor).where(
            ProductorRow.codigo_productor.startswith(prefix, autoescape=True)
        )
        return list((await self.db.scalars(stmt)).all())

    @log_slow_query("productor.create")
    async def create(self, productor: Productor, codigo_productor: str) -> Productor:
        """Insert under ``codigo_productor`` and return the stored row.

        Raises:
            ConflictError: the code was taken by a concurrent insert.
        """
        stmt = (
            insert(ProductorRow)
            .values(
                codigo_productor=codigo_productor,
                nombre_productor=productor.nombre_productor,
                ci_documento=productor.ci_documento,
                id_organizacion=productor.id_organizacion,
                anio_ingreso_programa=productor.anio_ingreso_programa,
                categoria_actual=productor.categoria_actual,
                activo=True,
            )
            .returning(ProductorRow)
        )

        async def _insert() -> ProductorRow:
            return (await self.db.execute(stmt)).scalar_one()

        row = await execute_unique(
            self.db,
            _insert,
            f"Ya existe un productor con el código '{codigo_productor}'",
        )
        return Productor.from_row(row)

    @log_slow_query("productor.soft_delete")
    async def soft_delete(self, codigo_productor: str) -> None:
        """Raises NotFoundError when no active producer has that code."""
        stmt = (
            update(ProductorRow)
            .where(
                ProductorRow.codigo_productor == codigo_productor,
                ProductorRow.activo.is_(True),
            )
            .values(activo=False)
            .returning(ProductorRow.codigo_productor)
            .execution_options(synchronize_session="fetch")
        )
        result = await self.db.execute(stmt)
        if result.scalar_one_or_none() is None:
            raise NotFoundError("Productor no encontrado")
