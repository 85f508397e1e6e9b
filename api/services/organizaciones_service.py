"""Organization business rules.

Routes -> this module -> OrganizacionRepository. Every mutation is audited
after the write succeeds.
"""

import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from core.audit import audit
from core.auth import CurrentUser
from core.errors import NotFoundError
from core.logger import get_logger
from domain.organizacion import Organizacion
from repositories.organizacion_repository import OrganizacionRepository
from schemas import OrganizacionCreate, OrganizacionUpdate

logger = get_logger(__name__)


async def list_organizaciones(
    db: AsyncSession, *, only_active: bool = True
) -> list[Organizacion]:
    return await OrganizacionRepository(db).find_all(only_active=only_active)


async def get_organizacion(
    db: AsyncSession, id_organizacion: uuid.UUID
) -> Organizacion:
    org = await OrganizacionRepository(db).find_by_id(id_organizacion)
    if org is None:
        raise NotFoundError("Organización no encontrada")
    return org


async def create_organizacion(
    db: AsyncSession, actor: CurrentUser, data: OrganizacionCreate
) -> Organizacion:
    candidate = Organizacion.create(
        data.nombre_organizacion, data.abreviatura_organizacion
    )
    org = await OrganizacionRepository(db).create(candidate)

    audit(
        "organizacion.created",
        actor,
        id_organizacion=org.id_organizacion,
        nombre=org.nombre_organizacion,
        abreviatura=org.abreviatura_organizacion,
    )
    return org


async def update_organizacion(
    db: AsyncSession,
    actor: CurrentUser,
    id_organizacion: uuid.UUID,
    data: OrganizacionUpdate,
) -> Organizacion:
    """Apply only the fields present in ``data``.

    Inactive organizations can be loaded here so ``activo: true`` brings one
    back; uniqueness is re-checked against the other active rows.
    """
    repo = OrganizacionRepository(db)
    org = await repo.find_by_id(id_organizacion, only_active=False)
    if org is None:
        raise NotFoundError("Organización no encontrada")

    changes = data.model_dump(exclude_unset=True)
    if changes.get("nombre_organizacion") is not None:
        org.rename(changes["nombre_organizacion"])
    if changes.get("abreviatura_organizacion") is not None:
        org.re_abbreviate(changes["abreviatura_organizacion"])
    if changes.get("activo") is not None and changes["activo"] != org.activo:
        org.set_active(changes["activo"])
        if not org.activo:
            # Guarded write; the in-memory count may be stale
            await repo.soft_delete(id_organizacion)

    updated = await repo.update(org)
    if updated is None:
        raise NotFoundError("Organización no encontrada")

    audit(
        "organizacion.updated",
        actor,
        id_organizacion=id_organizacion,
        fields=",".join(sorted(changes)),
    )
    return updated


async def delete_organizacion(
    db: AsyncSession, actor: CurrentUser, id_organizacion: uuid.UUID
) -> None:
    """Soft delete; refused while active producers belong to it."""
    await OrganizacionRepository(db).soft_delete(id_organizacion)
    audit("organizacion.deleted", actor, id_organizacion=id_organizacion)
