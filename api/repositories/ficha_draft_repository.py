"""Ficha draft repository.

One draft per (producer, period, author). Saving again overwrites it.
"""

import uuid
from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from domain.draft import DraftDocument
from models import FichaDraft, utcnow
from repositories.utils import log_slow_query, upsert_on_conflict


class FichaDraftRepository:
    """Repository for FichaDraft database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    @log_slow_query("ficha_draft.upsert")
    async def upsert(
        self,
        codigo_productor: str,
        gestion: int,
        created_by: uuid.UUID,
        document: DraftDocument,
    ) -> FichaDraft:
        now = utcnow()
        return await upsert_on_conflict(
            self.db,
            FichaDraft,
            values={
                "id_draft": uuid.uuid4(),
                "codigo_productor": codigo_productor,
                "gestion": gestion,
                "created_by": created_by,
                "draft_data": document.model_dump(mode="json"),
                "schema_version": document.version,
                "step_actual": document.step_actual,
                "created_at": now,
                "updated_at": now,
            },
            index_elements=["codigo_productor", "gestion", "created_by"],
            update_fields=["draft_data", "schema_version", "step_actual", "updated_at"],
        )

    async def find(
        self, codigo_productor: str, gestion: int, created_by: uuid.UUID
    ) -> FichaDraft | None:
        result = await self.db.execute(
            select(FichaDraft).where(
                FichaDraft.codigo_productor == codigo_productor,
                FichaDraft.gestion == gestion,
                FichaDraft.created_by == created_by,
            )
        )
        return result.scalar_one_or_none()

    async def find_by_id(self, id_draft: uuid.UUID) -> FichaDraft | None:
        result = await self.db.execute(
            select(FichaDraft).where(FichaDraft.id_draft == id_draft)
        )
        return result.scalar_one_or_none()

    async def list_by_user(self, created_by: uuid.UUID) -> list[FichaDraft]:
        result = await self.db.execute(
            select(FichaDraft)
            .where(FichaDraft.created_by == created_by)
            .order_by(FichaDraft.updated_at.desc())
        )
        return list(result.scalars().all())

    async def delete(self, id_draft: uuid.UUID) -> bool:
        result = await self.db.execute(
            delete(FichaDraft)
            .where(FichaDraft.id_draft == id_draft)
            .returning(FichaDraft.id_draft)
            .execution_options(synchronize_session=False)
        )
        return result.scalar_one_or_none() is not None

    @log_slow_query("ficha_draft.delete_older_than")
    async def delete_older_than(self, cutoff: datetime) -> int:
        result = await self.db.execute(
            delete(FichaDraft)
            .where(FichaDraft.updated_at < cutoff)
            .returning(FichaDraft.id_draft)
            .execution_options(synchronize_session=False)
        )
        return len(result.all())
