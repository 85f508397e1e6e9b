"""Inspection drafts saved step by step from the ficha form.

A draft belongs to its author. The period is always the system-active one,
taken from the request's ``GestionActiva``.
"""

import uuid
from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from core.audit import audit
from core.auth import CurrentUser
from core.config import get_settings
from core.errors import ForbiddenError, NotFoundError
from core.gestion_context import GestionActiva
from core.logger import get_logger
from domain.draft import DraftDocument
from models import FichaDraft, utcnow
from repositories.ficha_draft_repository import FichaDraftRepository

logger = get_logger(__name__)


def _actor_id(actor: CurrentUser) -> uuid.UUID:
    return uuid.UUID(actor.user_id)


async def save_draft(
    db: AsyncSession,
    actor: CurrentUser,
    gestion: GestionActiva,
    codigo_productor: str,
    document: DraftDocument,
) -> FichaDraft:
    draft = await FichaDraftRepository(db).upsert(
        codigo_productor.strip(), gestion.anio, _actor_id(actor), document
    )
    audit(
        "ficha_draft.saved",
        actor,
        id_draft=draft.id_draft,
        codigo_productor=draft.codigo_productor,
        gestion=draft.gestion,
        step_actual=draft.step_actual,
    )
    return draft


async def list_my_drafts(db: AsyncSession, actor: CurrentUser) -> list[FichaDraft]:
    return await FichaDraftRepository(db).list_by_user(_actor_id(actor))


async def get_draft(
    db: AsyncSession, actor: CurrentUser, codigo_productor: str, gestion: int
) -> FichaDraft:
    draft = await FichaDraftRepository(db).find(
        codigo_productor, gestion, _actor_id(actor)
    )
    if draft is None:
        raise NotFoundError("Borrador no encontrado")
    return draft


async def delete_draft(
    db: AsyncSession, actor: CurrentUser, id_draft: uuid.UUID
) -> None:
    repo = FichaDraftRepository(db)
    draft = await repo.find_by_id(id_draft)
    if draft is None:
        raise NotFoundError("Borrador no encontrado")
    if draft.created_by != _actor_id(actor):
        raise ForbiddenError("Solo el autor puede eliminar este borrador")

    await repo.delete(id_draft)
    audit(
        "ficha_draft.deleted",
        actor,
        id_draft=id_draft,
        codigo_productor=draft.codigo_productor,
    )


async def purge_old_drafts(db: AsyncSession, days: int | None = None) -> int:
    """Delete drafts untouched for ``days`` (default from settings)."""
    days = days if days is not None else get_settings().draft_retention_days
    cutoff = utcnow() - timedelta(days=days)
    deleted = await FichaDraftRepository(db).delete_older_than(cutoff)
    logger.info("ficha_draft.purged", days=days, deleted=deleted)
    return deleted
