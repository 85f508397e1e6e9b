"""Inspection records: creation, submission, approval and rejection.

Approving a ficha rebuilds the producer's crop summary for that period in
the same transaction, so the summary never lags behind an approval.
"""

import uuid
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from core.audit import audit
from core.auth import CurrentUser
from core.errors import BadRequestError, ConflictError, NotFoundError
from core.gestion_context import GestionActiva
from core.logger import get_logger
from domain.ficha import (
    EstadoFicha,
    transition_ficha,
    validate_cantidad_qq,
    validate_inspector,
    validate_superficie,
)
from models import FichaInspeccion
from repositories.cultivos_gestion_repository import CultivosGestionRepository
from repositories.ficha_repository import FichaRepository
from repositories.productor_repository import ProductorRepository
from repositories.tipo_cultivo_repository import TipoCultivoRepository
from schemas import FichaCreate

logger = get_logger(__name__)


@dataclass(frozen=True)
class FichaReviewResult:
    ficha: FichaInspeccion
    cultivos_sincronizados: int = 0


async def _transition(
    db: AsyncSession,
    id_ficha: uuid.UUID,
    target: EstadoFicha,
    comentarios: str | None,
) -> FichaInspeccion:
    repo = FichaRepository(db)
    ficha = await repo.find_by_id(id_ficha)
    if ficha is None:
        raise NotFoundError("Ficha no encontrada")

    current = EstadoFicha(ficha.estado_ficha)
    transition_ficha(current, target)

    updated = await repo.update_estado(id_ficha, current, target, comentarios)
    if updated is None:
        # Another reviewer moved it between the read and the write
        raise BadRequestError("La ficha fue modificada por otro usuario")
    return updated


async def get_ficha(db: AsyncSession, id_ficha: uuid.UUID) -> FichaInspeccion:
    ficha = await FichaRepository(db).find_by_id(id_ficha)
    if ficha is None:
        raise NotFoundError("Ficha no encontrada")
    return ficha


async def crear_ficha(
    db: AsyncSession, actor: CurrentUser, gestion: GestionActiva, data: FichaCreate
) -> FichaInspeccion:
    """Register a borrador ficha for an active producer in the active period."""
    inspector = validate_inspector(data.inspector_interno)
    detalles = [
        (d.id_tipo_cultivo, validate_superficie(d.superficie_ha))
        for d in data.detalle_cultivos_parcelas
    ]
    cosechas = [
        (
            validate_cantidad_qq(c.cosecha_estimada_qq, "cosecha_estimada_qq"),
            validate_cantidad_qq(c.produccion_real_mani, "produccion_real_mani"),
        )
        for c in data.cosecha_ventas
    ]

    productor = await ProductorRepository(db).find_by_codigo(data.codigo_productor)
    if productor is None:
        raise NotFoundError("Productor no encontrado")

    tipos = TipoCultivoRepository(db)
    for id_tipo_cultivo in {id_tipo for id_tipo, _ in detalles}:
        tipo = await tipos.find_by_id(id_tipo_cultivo)
        if tipo is None or not tipo.activo:
            raise NotFoundError("Tipo de cultivo no encontrado")

    repo = FichaRepository(db)
    if await repo.find_by_productor_gestion(data.codigo_productor, gestion.anio):
        raise ConflictError("Ya existe una ficha para este productor en la gestión")

    ficha = await repo.create(
        codigo_productor=data.codigo_productor,
        gestion=gestion.anio,
        fecha_inspeccion=data.fecha_inspeccion,
        inspector_interno=inspector,
        created_by=uuid.UUID(actor.user_id),
        detalles=detalles,
        cosechas=cosechas,
    )

    audit(
        "ficha.created",
        actor,
        id_ficha=ficha.id_ficha,
        codigo_productor=ficha.codigo_productor,
        gestion=ficha.gestion,
        parcelas=len(detalles),
    )
    return ficha


async def enviar_revision(
    db: AsyncSession, actor: CurrentUser, id_ficha: uuid.UUID
) -> FichaReviewResult:
    """borrador -> revision."""
    ficha = await _transition(db, id_ficha, EstadoFicha.REVISION, None)
    audit(
        "ficha.submitted",
        actor,
        id_ficha=id_ficha,
        codigo_productor=ficha.codigo_productor,
        gestion=ficha.gestion,
    )
    return FichaReviewResult(ficha=ficha)


async def aprobar_ficha(
    db: AsyncSession,
    actor: CurrentUser,
    id_ficha: uuid.UUID,
    comentarios: str | None = None,
) -> FichaReviewResult:
    """revision -> aprobado, then sync cultivos_gestion."""
    ficha = await _transition(db, id_ficha, EstadoFicha.APROBADO, comentarios)
    synced = await CultivosGestionRepository(db).sync_from_ficha(id_ficha)

    audit(
        "ficha.approved",
        actor,
        id_ficha=id_ficha,
        codigo_productor=ficha.codigo_productor,
        gestion=ficha.gestion,
        cultivos_sincronizados=synced,
    )
    return FichaReviewResult(ficha=ficha, cultivos_sincronizados=synced)


async def rechazar_ficha(
    db: AsyncSession, actor: CurrentUser, id_ficha: uuid.UUID, motivo: str
) -> FichaReviewResult:
    ficha = await _transition(db, id_ficha, EstadoFicha.RECHAZADO, motivo.strip())
    audit(
        "ficha.rejected",
        actor,
        id_ficha=id_ficha,
        codigo_productor=ficha.codigo_productor,
        gestion=ficha.gestion,
    )
    return FichaReviewResult(ficha=ficha)
