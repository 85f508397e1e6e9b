"""Crop-type catalog business rules."""

import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from core.audit import audit
from core.auth import CurrentUser
from core.errors import NotFoundError
from domain.tipo_cultivo import TipoCultivo
from repositories.tipo_cultivo_repository import TipoCultivoRepository
from schemas import TipoCultivoCreate, TipoCultivoUpdate


async def list_tipos_cultivo(
    db: AsyncSession, *, only_active: bool = True
) -> list[TipoCultivo]:
    return await TipoCultivoRepository(db).find_all(only_active=only_active)


async def get_tipo_cultivo(
    db: AsyncSession, id_tipo_cultivo: uuid.UUID
) -> TipoCultivo:
    """Inactive crop types are returned too, flagged ``activo=False``."""
    tipo = await TipoCultivoRepository(db).find_by_id(id_tipo_cultivo)
    if tipo is None:
        raise NotFoundError("Tipo de cultivo no encontrado")
    return tipo


async def create_tipo_cultivo(
    db: AsyncSession, actor: CurrentUser, data: TipoCultivoCreate
) -> TipoCultivo:
    candidate = TipoCultivo.create(
        data.nombre_cultivo,
        data.descripcion,
        data.es_principal_certificable,
        data.rendimiento_promedio_qq_ha,
    )
    tipo = await TipoCultivoRepository(db).create(candidate)
    audit(
        "tipo_cultivo.created",
        actor,
        id_tipo_cultivo=tipo.id_tipo_cultivo,
        nombre=tipo.nombre_cultivo,
    )
    return tipo


async def update_tipo_cultivo(
    db: AsyncSession,
    actor: CurrentUser,
    id_tipo_cultivo: uuid.UUID,
    data: TipoCultivoUpdate,
) -> TipoCultivo:
    repo = TipoCultivoRepository(db)
    tipo = await repo.find_by_id(id_tipo_cultivo)
    if tipo is None:
        raise NotFoundError("Tipo de cultivo no encontrado")

    changes = data.model_dump(exclude_unset=True)
    if changes.get("nombre_cultivo") is not None:
        tipo.rename(changes["nombre_cultivo"])
    if "descripcion" in changes:
        tipo.describe(changes["descripcion"])
    if changes.get("es_principal_certificable") is not None:
        tipo.set_principal_certificable(changes["es_principal_certificable"])
    if "rendimiento_promedio_qq_ha" in changes:
        tipo.set_rendimiento(changes["rendimiento_promedio_qq_ha"])
    if changes.get("activo") is True:
        tipo.activar()
    elif changes.get("activo") is False and tipo.activo:
        tipo.desactivar()
        await repo.soft_delete(id_tipo_cultivo)

    updated = await repo.update(tipo)
    if updated is None:
        raise NotFoundError("Tipo de cultivo no encontrado")

    audit(
        "tipo_cultivo.updated",
        actor,
        id_tipo_cultivo=id_tipo_cultivo,
        fields=",".join(sorted(changes)),
    )
    return updated


async def delete_tipo_cultivo(
    db: AsyncSession, actor: CurrentUser, id_tipo_cultivo: uuid.UUID
) -> None:
    await TipoCultivoRepository(db).soft_delete(id_tipo_cultivo)
    audit("tipo_cultivo.deleted", actor, id_tipo_cultivo=id_tipo_cultivo)
