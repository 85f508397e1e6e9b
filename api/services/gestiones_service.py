"""Management period (gestión) business rules."""

import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from core.audit import audit
from core.auth import CurrentUser
from core.errors import ConflictError, NotFoundError
from domain.gestion import Gestion
from repositories.gestion_repository import GestionRepository
from schemas import GestionCreate, GestionUpdate


async def list_gestiones(
    db: AsyncSession, *, only_active: bool = True
) -> list[Gestion]:
    return await GestionRepository(db).find_all(only_active=only_active)


async def get_gestion(db: AsyncSession, id_gestion: uuid.UUID) -> Gestion:
    gestion = await GestionRepository(db).find_by_id(id_gestion)
    if gestion is None:
        raise NotFoundError("Gestión no encontrada")
    return gestion


async def get_gestion_activa(db: AsyncSession) -> Gestion:
    gestion = await GestionRepository(db).get_gestion_activa()
    if gestion is None:
        raise NotFoundError("No hay gestión activa configurada")
    return gestion


async def create_gestion(
    db: AsyncSession, actor: CurrentUser, data: GestionCreate
) -> Gestion:
    candidate = Gestion.create(data.anio_gestion, data.nombre_gestion)
    gestion = await GestionRepository(db).create(candidate)
    audit(
        "gestion.created",
        actor,
        id_gestion=gestion.id_gestion,
        anio=gestion.anio_gestion,
    )
    return gestion


async def update_gestion(
    db: AsyncSession, actor: CurrentUser, id_gestion: uuid.UUID, data: GestionUpdate
) -> Gestion:
    repo = GestionRepository(db)
    gestion = await repo.find_by_id(id_gestion)
    if gestion is None:
        raise NotFoundError("Gestión no encontrada")

    changes = data.model_dump(exclude_unset=True)
    if changes.get("anio_gestion") is not None:
        if gestion.activo_sistema and changes["anio_gestion"] != gestion.anio_gestion:
            raise ConflictError(
                "No se puede cambiar el año de la gestión activa del sistema"
            )
        gestion.set_anio(changes["anio_gestion"])
    if changes.get("nombre_gestion") is not None:
        gestion.rename(changes["nombre_gestion"])
    if changes.get("activo") is True:
        gestion.activar()
    elif changes.get("activo") is False and gestion.activo:
        gestion.desactivar()

    updated = await repo.update(gestion)
    if updated is None:
        raise NotFoundError("Gestión no encontrada")

    audit(
        "gestion.updated",
        actor,
        id_gestion=id_gestion,
        fields=",".join(sorted(changes)),
    )
    return updated


async def delete_gestion(
    db: AsyncSession, actor: CurrentUser, id_gestion: uuid.UUID
) -> None:
    """Soft delete; the system-active period can never be deleted."""
    await GestionRepository(db).soft_delete(id_gestion)
    audit("gestion.deleted", actor, id_gestion=id_gestion)


async def activar_gestion(
    db: AsyncSession, actor: CurrentUser, id_gestion: uuid.UUID
) -> tuple[Gestion, Gestion | None]:
    """Switch the system-active period.

    Returns the new active period and the one it replaced (None if there
    was none). Switching changes which period every period-scoped endpoint
    reads and writes, so it is audited at warning level.
    """
    repo = GestionRepository(db)
    target = await repo.find_by_id(id_gestion)
    if target is None:
        raise NotFoundError("Gestión no encontrada")
    target.ensure_activable()

    previous = await repo.get_gestion_activa()
    if previous is not None and previous.id_gestion == target.id_gestion:
        return target, previous

    activated = await repo.set_gestion_activa(id_gestion)
    if activated is None:
        raise NotFoundError("Gestión no encontrada")

    audit(
        "gestion.activated",
        actor,
        level=logging.WARNING,
        id_gestion=activated.id_gestion,
        anio=activated.anio_gestion,
        anio_anterior=previous.anio_gestion if previous else None,
    )
    return activated, previous
