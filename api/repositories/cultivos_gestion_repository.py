"""Per-producer, per-period crop summary (``cultivos_gestion``).

Rows are rebuilt from an approved ficha: total parcel surface, estimated and
actual peanut yield, and the crop type that covers the most surface.
"""

import uuid

from sqlalchemy import (
    DateTime,
    Uuid,
    and_,
    case,
    delete,
    exists,
    func,
    literal,
    select,
)
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from core.logger import get_logger
from domain.ficha import EstadoFicha
from models import (
    CosechaVentas,
    CultivoGestion,
    CultivoPrincipal,
    DetalleCultivoParcela,
    FichaInspeccion,
    TipoCultivo,
    utcnow,
)
from repositories.utils import dialect_insert, log_slow_query

logger = get_logger(__name__)

# Catalog name -> summary code; anything else is "otros"
CULTIVO_CODES: dict[str, str] = {
    "Maní": CultivoPrincipal.MANI,
    "Maíz": CultivoPrincipal.MAIZ,
    "Papa": CultivoPrincipal.PAPA,
    "Ají": CultivoPrincipal.AJI,
    "Leguminosa": CultivoPrincipal.LEGUMINOSA,
}

_SUMMARY_COLUMNS = [
    "id_cultivo_gestion",
    "codigo_productor",
    "gestion",
    "superficie_total",
    "produccion_estimada_mani",
    "produccion_real_mani",
    "cultivo_principal",
    "updated_at",
]


def _ficha_sum(column, ficha_fk):
    return (
        select(func.coalesce(func.sum(column), 0))
        .where(ficha_fk == FichaInspeccion.id_ficha)
        .correlate(FichaInspeccion)
        .scalar_subquery()
    )


def _cultivo_principal():
    """Code of the crop with the largest summed surface on the ficha.

    Ties go to the alphabetically first crop name.
    """
    detalle = aliased(DetalleCultivoParcela)
    tipo = aliased(TipoCultivo)
    dominant = (
        select(
            case(CULTIVO_CODES, value=tipo.nombre_cultivo, else_=CultivoPrincipal.OTROS)
        )
        .select_from(detalle)
        .join(tipo, detalle.id_tipo_cultivo == tipo.id_tipo_cultivo)
        .where(detalle.id_ficha == FichaInspeccion.id_ficha)
        .group_by(tipo.nombre_cultivo)
        .order_by(func.sum(detalle.superficie_ha).desc(), tipo.nombre_cultivo.asc())
        .limit(1)
        .correlate(FichaInspeccion)
        .scalar_subquery()
    )
    return func.coalesce(dominant, CultivoPrincipal.MANI.value)


class CultivosGestionRepository:
    """Repository for the cultivos_gestion summary table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    @log_slow_query("cultivos_gestion.sync_from_ficha")
    async def sync_from_ficha(self, id_ficha: uuid.UUID) -> int:
        """Upsert the summary row for the ficha's (producer, period).

        Only approved fichas produce a row; any other state is a no-op and
        returns 0. Re-running for the same ficha rewrites the same figures.
        """
        source = select(
            literal(uuid.uuid4(), Uuid),
            FichaInspeccion.codigo_productor,
            FichaInspeccion.gestion,
            _ficha_sum(
                DetalleCultivoParcela.superficie_ha, DetalleCultivoParcela.id_ficha
            ),
            _ficha_sum(CosechaVentas.cosecha_estimada_qq, CosechaVentas.id_ficha),
            _ficha_sum(CosechaVentas.produccion_real_mani, CosechaVentas.id_ficha),
            _cultivo_principal(),
            literal(utcnow(), DateTime(timezone=True)),
        ).where(
            and_(
                FichaInspeccion.id_ficha == id_ficha,
                FichaInspeccion.estado_ficha == EstadoFicha.APROBADO,
            )
        )

        table = CultivoGestion.__table__
        stmt = dialect_insert(self.db, table).from_select(_SUMMARY_COLUMNS, source)
        stmt = stmt.on_conflict_do_update(
            index_elements=["codigo_productor", "gestion"],
            set_={
                "superficie_total": stmt.excluded.superficie_total,
                "produccion_estimada_mani": stmt.excluded.produccion_estimada_mani,
                "produccion_real_mani": stmt.excluded.produccion_real_mani,
                "cultivo_principal": stmt.excluded.cultivo_principal,
                "updated_at": stmt.excluded.updated_at,
            },
        ).returning(table.c.id_cultivo_gestion)

        result = await self.db.execute(stmt)
        affected = len(result.all())
        logger.info("cultivos_gestion.synced", id_ficha=str(id_ficha), rows=affected)
        return affected

    async def find_by_productor_gestion(
        self, codigo_productor: str, gestion: int
    ) -> CultivoGestion | None:
        # Rows are rewritten by Core upserts the identity map never sees
        stmt = (
            select(CultivoGestion)
            .where(
                CultivoGestion.codigo_productor == codigo_productor,
                CultivoGestion.gestion == gestion,
            )
            .execution_options(populate_existing=True)
        )
        return await self.db.scalar(stmt)

    async def delete_by_productor_gestion(
        self, codigo_productor: str, gestion: int
    ) -> int:
        stmt = (
            delete(CultivoGestion)
            .where(
                CultivoGestion.codigo_productor == codigo_productor,
                CultivoGestion.gestion == gestion,
            )
            .returning(CultivoGestion.id_cultivo_gestion)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        deleted = len(result.all())
        logger.info(
            "cultivos_gestion.deleted",
            codigo_productor=codigo_productor,
            gestion=gestion,
            rows=deleted,
        )
        return deleted

    async def exists(self, codigo_productor: str, gestion: int) -> bool:
        stmt = select(
            exists().where(
                CultivoGestion.codigo_productor == codigo_productor,
                CultivoGestion.gestion == gestion,
            )
        )
        return bool(await self.db.scalar(stmt))
