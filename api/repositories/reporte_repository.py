"""Read-only queries behind the spreadsheet reports."""

from dataclasses import dataclass

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from models import CultivoGestion, Organizacion, Productor
from repositories.utils import log_slow_query


@dataclass(frozen=True, slots=True)
class ProductorOrganicoRow:
    codigo_productor: str
    nombre_productor: str
    ci_documento: str | None
    organizacion: str
    abreviatura: str
    categoria: str
    anio_ingreso_programa: int
    superficie_total: float
    produccion_estimada_mani: float
    produccion_real_mani: float
    cultivo_principal: str | None


class ReporteRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    @log_slow_query("reporte.productores_organicos")
    async def productores_organicos(self, gestion: int) -> list[ProductorOrganicoRow]:
        """Active producers with their period summary, if one was synced.

        Producers without an approved ficha for ``gestion`` still appear,
        with zero figures.
        """
        stmt = (
            select(
                Productor.codigo_productor,
                Productor.nombre_productor,
                Productor.ci_documento,
                Organizacion.nombre_organizacion,
                Organizacion.abreviatura_organizacion,
                Productor.categoria_actual,
                Productor.anio_ingreso_programa,
                CultivoGestion.superficie_total,
                CultivoGestion.produccion_estimada_mani,
                CultivoGestion.produccion_real_mani,
                CultivoGestion.cultivo_principal,
            )
            .join(
                Organizacion,
                Productor.id_organizacion == Organizacion.id_organizacion,
            )
            .outerjoin(
                CultivoGestion,
                and_(
                    CultivoGestion.codigo_productor == Productor.codigo_productor,
                    CultivoGestion.gestion == gestion,
                ),
            )
            .where(Productor.activo.is_(True))
            .order_by(Organizacion.nombre_organizacion, Productor.codigo_productor)
        )
        result = await self.db.execute(stmt)
        return [
            ProductorOrganicoRow(
                codigo_productor=r.codigo_productor,
                nombre_productor=r.nombre_productor,
                ci_documento=r.ci_documento,
                organizacion=r.nombre_organizacion,
                abreviatura=r.abreviatura_organizacion,
                categoria=str(r.categoria_actual),
                anio_ingreso_programa=r.anio_ingreso_programa,
                superficie_total=r.superficie_total or 0.0,
                produccion_estimada_mani=r.produccion_estimada_mani or 0.0,
                produccion_real_mani=r.produccion_real_mani or 0.0,
                cultivo_principal=r.cultivo_principal,
            )
            for r in result.all()
        ]
