"""Inspection record (ficha) repository."""

import uuid
from datetime import date

from sqlalchemy import insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from domain.ficha import EstadoFicha
from models import CosechaVentas, DetalleCultivoParcela, FichaInspeccion
from repositories.utils import execute_unique, log_slow_query


class FichaRepository:
    """Repository for FichaInspeccion database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_id(self, id_ficha: uuid.UUID) -> FichaInspeccion | None:
        result = await self.db.execute(
            select(FichaInspeccion).where(FichaInspeccion.id_ficha == id_ficha)
        )
        return result.scalar_one_or_none()

    async def find_by_productor_gestion(
        self, codigo_productor: str, gestion: int
    ) -> FichaInspeccion | None:
        result = await self.db.execute(
            select(FichaInspeccion).where(
                FichaInspeccion.codigo_productor == codigo_productor,
                FichaInspeccion.gestion == gestion,
            )
        )
        return result.scalar_one_or_none()

    @log_slow_query("ficha.create")
    async def create(
        self,
        *,
        codigo_productor: str,
        gestion: int,
        fecha_inspeccion: date,
        inspector_interno: str,
        created_by: uuid.UUID,
        detalles: list[tuple[uuid.UUID, float]],
        cosechas: list[tuple[float, float]],
    ) -> FichaInspeccion:
        """Insert a borrador ficha with its parcel and harvest rows.

        ``detalles`` holds ``(id_tipo_cultivo, superficie_ha)`` pairs and
        ``cosechas`` holds ``(cosecha_estimada_qq, produccion_real_mani)``.

        Raises:
            ConflictError: the producer already has a ficha for ``gestion``.
        """
        stmt = (
            insert(FichaInspeccion)
            .values(
                codigo_productor=codigo_productor,
                gestion=gestion,
                fecha_inspeccion=fecha_inspeccion,
                inspector_interno=inspector_interno,
                estado_ficha=EstadoFicha.BORRADOR,
                created_by=created_by,
            )
            .returning(FichaInspeccion)
        )

        async def _insert() -> FichaInspeccion:
            ficha = (await self.db.execute(stmt)).scalar_one()
            if detalles:
                await self.db.execute(
                    insert(DetalleCultivoParcela),
                    [
                        {
                            "id_ficha": ficha.id_ficha,
                            "id_tipo_cultivo": id_tipo_cultivo,
                            "superficie_ha": superficie_ha,
                        }
                        for id_tipo_cultivo, superficie_ha in detalles
                    ],
                )
            if cosechas:
                await self.db.execute(
                    insert(CosechaVentas),
                    [
                        {
                            "id_ficha": ficha.id_ficha,
                            "cosecha_estimada_qq": estimada,
                            "produccion_real_mani": real,
                        }
                        for estimada, real in cosechas
                    ],
                )
            return ficha

        return await execute_unique(
            self.db,
            _insert,
            "Ya existe una ficha para este productor en la gestión",
        )

    @log_slow_query("ficha.update_estado")
    async def update_estado(
        self,
        id_ficha: uuid.UUID,
        expected: EstadoFicha,
        target: EstadoFicha,
        comentarios: str | None = None,
    ) -> FichaInspeccion | None:
        """Compare-and-set the workflow state.

        Returns None when the ficha is gone or no longer in ``expected``, so
        two reviewers racing on the same ficha cannot both win.
        """
        values: dict = {"estado_ficha": target}
        if comentarios is not None:
            values["comentarios_evaluacion"] = comentarios

        stmt = (
            update(FichaInspeccion)
            .where(
                FichaInspeccion.id_ficha == id_ficha,
                FichaInspeccion.estado_ficha == expected,
            )
            .values(**values)
            .returning(FichaInspeccion)
            .execution_options(synchronize_session=False, populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()
