"""TipoCultivo catalog repository."""

import uuid

from sqlalchemy import exists, func, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import ConflictError, NotFoundError
from domain.tipo_cultivo import TipoCultivo
from models import DetalleCultivoParcela
from models import TipoCultivo as TipoCultivoRow
from repositories.utils import execute_unique, log_slow_query


class TipoCultivoRepository:
    """Repository for TipoCultivo database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    @log_slow_query("tipo_cultivo.find_all")
    async def find_all(self, only_active: bool = True) -> list[TipoCultivo]:
        stmt = select(TipoCultivoRow).order_by(TipoCultivoRow.nombre_cultivo)
        if only_active:
            stmt = stmt.where(TipoCultivoRow.activo.is_(True))
        result = await self.db.execute(stmt)
        return [TipoCultivo.from_row(row) for row in result.scalars().all()]

    @log_slow_query("tipo_cultivo.find_by_id")
    async def find_by_id(self, id_tipo_cultivo: uuid.UUID) -> TipoCultivo | None:
        """Returns inactive rows too; callers see ``activo=False``."""
        row = await self.db.scalar(
            select(TipoCultivoRow).where(
                TipoCultivoRow.id_tipo_cultivo == id_tipo_cultivo
            )
        )
        return TipoCultivo.from_row(row) if row else None

    async def exists_by_nombre(
        self, nombre: str, exclude_id: uuid.UUID | None = None
    ) -> bool:
        conditions = [
            func.lower(TipoCultivoRow.nombre_cultivo) == nombre.strip().lower()
        ]
        if exclude_id is not None:
            conditions.append(TipoCultivoRow.id_tipo_cultivo != exclude_id)
        return bool(await self.db.scalar(select(exists().where(*conditions))))

    @log_slow_query("tipo_cultivo.create")
    async def create(self, tipo: TipoCultivo) -> TipoCultivo:
        if await self.exists_by_nombre(tipo.nombre_cultivo):
            raise ConflictError(
                f"Ya existe un tipo de cultivo con el nombre '{tipo.nombre_cultivo}'"
            )

        stmt = (
            insert(TipoCultivoRow)
            .values(
                nombre_cultivo=tipo.nombre_cultivo,
                descripcion=tipo.descripcion,
                es_principal_certificable=tipo.es_principal_certificable,
                rendimiento_promedio_qq_ha=tipo.rendimiento_promedio_qq_ha,
                activo=True,
            )
            .returning(TipoCultivoRow)
        )

        async def _insert() -> TipoCultivoRow:
            return (await self.db.execute(stmt)).scalar_one()

        row = await execute_unique(
            self.db,
            _insert,
            f"Ya existe un tipo de cultivo con el nombre '{tipo.nombre_cultivo}'",
        )
        return TipoCultivo.from_row(row)

    @log_slow_query("tipo_cultivo.update")
    async def update(self, tipo: TipoCultivo) -> TipoCultivo | None:
        if tipo.id_tipo_cultivo is None:
            raise ValueError("Cannot update a tipo cultivo without id")

        if await self.exists_by_nombre(
            tipo.nombre_cultivo, exclude_id=tipo.id_tipo_cultivo
        ):
            raise ConflictError(
                f"Ya existe un tipo de cultivo con el nombre '{tipo.nombre_cultivo}'"
            )

        stmt = (
            update(TipoCultivoRow)
            .where(TipoCultivoRow.id_tipo_cultivo == tipo.id_tipo_cultivo)
            .values(
                nombre_cultivo=tipo.nombre_cultivo,
                descripcion=tipo.descripcion,
                es_principal_certificable=tipo.es_principal_certificable,
                rendimiento_promedio_qq_ha=tipo.rendimiento_promedio_qq_ha,
                activo=tipo.activo,
            )
            .returning(TipoCultivoRow)
            .execution_options(synchronize_session=False, populate_existing=True)
        )

        async def _update() -> TipoCultivoRow | None:
            return (await self.db.execute(stmt)).scalar_one_or_none()

        row = await execute_unique(
            self.db,
            _update,
            f"Ya existe un tipo de cultivo con el nombre '{tipo.nombre_cultivo}'",
        )
        return TipoCultivo.from_row(row) if row else None

    @log_slow_query("tipo_cultivo.soft_delete")
    async def soft_delete(self, id_tipo_cultivo: uuid.UUID) -> None:
        """Deactivate unless some parcel detail still references the crop type.

        Raises:
            NotFoundError: no active crop type with that id.
            ConflictError: the crop type is in use.
        """
        in_use = exists().where(
            DetalleCultivoParcela.id_tipo_cultivo == TipoCultivoRow.id_tipo_cultivo
        )
        stmt = (
            update(TipoCultivoRow)
            .where(
                TipoCultivoRow.id_tipo_cultivo == id_tipo_cultivo,
                TipoCultivoRow.activo.is_(True),
                ~in_use,
            )
            .values(activo=False)
            .returning(TipoCultivoRow.id_tipo_cultivo)
            .execution_options(synchronize_session="fetch")
        )
        result = await self.db.execute(stmt)
        if result.scalar_one_or_none() is not None:
            return

        current = await self.find_by_id(id_tipo_cultivo)
        if current is None or not current.activo:
            raise NotFoundError("Tipo de cultivo no encontrado")
        raise ConflictError(
            "No se puede eliminar el tipo de cultivo: "
            "está en uso en fichas de inspección"
        )

    async def count(self, only_active: bool = True) -> int:
        stmt = select(func.count()).select_from(TipoCultivoRow)
        if only_active:
            stmt = stmt.where(TipoCultivoRow.activo.is_(True))
        return int(await self.db.scalar(stmt) or 0)
