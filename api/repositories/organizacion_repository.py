"""Organizacion repository for database operations."""

import uuid

from sqlalchemy import exists, func, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import ConflictError, NotFoundError
from domain.organizacion import Organizacion
from models import Organizacion as OrganizacionRow
from models import Productor
from repositories.utils import execute_unique, log_slow_query


def _cantidad_productores():
    return (
        select(func.count(Productor.codigo_productor))
        .where(
            Productor.id_organizacion == OrganizacionRow.id_organizacion,
            Productor.activo.is_(True),
        )
        .correlate(OrganizacionRow)
        .scalar_subquery()
        .label("cantidad_productores")
    )


def _has_active_productores():
    return exists().where(
        Productor.id_organizacion == OrganizacionRow.id_organizacion,
        Productor.activo.is_(True),
    )


class OrganizacionRepository:
    """Repository for Organizacion database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    @log_slow_query("organizacion.find_all")
    async def find_all(self, only_active: bool = True) -> list[Organizacion]:
        stmt = select(OrganizacionRow, _cantidad_productores()).order_by(
            OrganizacionRow.nombre_organizacion
        )
        if only_active:
            stmt = stmt.where(OrganizacionRow.activo.is_(True))
        result = await self.db.execute(stmt)
        return [Organizacion.from_row(row, count) for row, count in result.all()]

    @log_slow_query("organizacion.find_by_id")
    async def find_by_id(
        self, id_organizacion: uuid.UUID, only_active: bool = True
    ) -> Organizacion | None:
        stmt = select(OrganizacionRow, _cantidad_productores()).where(
            OrganizacionRow.id_organizacion == id_organizacion
        )
        if only_active:
            stmt = stmt.where(OrganizacionRow.activo.is_(True))
        result = await self.db.execute(stmt)
        found = result.one_or_none()
        if found is None:
            return None
        row, count = found
        return Organizacion.from_row(row, count)

    async def exists_by_nombre(
        self, nombre: str, exclude_id: uuid.UUID | None = None
    ) -> bool:
        """Case-insensitive match among active organizations."""
        conditions = [
            func.lower(OrganizacionRow.nombre_organizacion) == nombre.strip().lower(),
            OrganizacionRow.activo.is_(True),
        ]
        if exclude_id is not None:
            conditions.append(OrganizacionRow.id_organizacion != exclude_id)
        return bool(await self.db.scalar(select(exists().where(*conditions))))

    async def exists_by_abreviatura(
        self, abreviatura: str, exclude_id: uuid.UUID | None = None
    ) -> bool:
        conditions = [
            func.upper(OrganizacionRow.abreviatura_organizacion)
            == abreviatura.strip().upper(),
            OrganizacionRow.activo.is_(True),
        ]
        if exclude_id is not None:
            conditions.append(OrganizacionRow.id_organizacion != exclude_id)
        return bool(await self.db.scalar(select(exists().where(*conditions))))

    async def _ensure_unique(
        self, org: Organizacion, exclude_id: uuid.UUID | None = None
    ) -> None:
        if await self.exists_by_nombre(org.nombre_organizacion, exclude_id):
            raise ConflictError(
                f"Ya existe una organización con el nombre "
                f"'{org.nombre_organizacion}'"
            )
        if await self.exists_by_abreviatura(org.abreviatura_organizacion, exclude_id):
            raise ConflictError(
                f"Ya existe una organización con la abreviatura "
                f"'{org.abreviatura_organizacion}'"
            )

    @log_slow_query("organizacion.create")
    async def create(self, org: Organizacion) -> Organizacion:
        """Insert and return the stored row, including generated id and timestamp.

        Raises:
            ConflictError: name or abbreviation already used by an active row.
        """
        await self._ensure_unique(org)

        stmt = (
            insert(OrganizacionRow)
            .values(
                nombre_organizacion=org.nombre_organizacion,
                abreviatura_organizacion=org.abreviatura_organizacion,
                activo=True,
            )
            .returning(OrganizacionRow)
        )

        async def _insert() -> OrganizacionRow:
            return (await self.db.execute(stmt)).scalar_one()

        row = await execute_unique(
            self.db,
            _insert,
            "Ya existe una organización con ese nombre o abreviatura",
        )
        return Organizacion.from_row(row)

    @log_slow_query("organizacion.update")
    async def update(self, org: Organizacion) -> Organizacion | None:
        """Persist the full entity state. Returns None if the row is gone."""
        if org.id_organizacion is None:
            raise ValueError("Cannot update an organization without id")

        if org.activo:
            await self._ensure_unique(org, exclude_id=org.id_organizacion)

        stmt = (
            update(OrganizacionRow)
            .where(OrganizacionRow.id_organizacion == org.id_organizacion)
            .values(
                nombre_organizacion=org.nombre_organizacion,
                abreviatura_organizacion=org.abreviatura_organizacion,
                activo=org.activo,
            )
            .returning(OrganizacionRow)
            .execution_options(synchronize_session=False, populate_existing=True)
        )

        async def _update() -> OrganizacionRow | None:
            return (await self.db.execute(stmt)).scalar_one_or_none()

        row = await execute_unique(
            self.db,
            _update,
            "Ya existe una organización con ese nombre o abreviatura",
        )
        if row is None:
            return None
        return Organizacion.from_row(row, org.cantidad_productores)

    @log_slow_query("organizacion.soft_delete")
    async def soft_delete(self, id_organizacion: uuid.UUID) -> None:
        """Deactivate in a single statement guarded by the producer check.

        Raises:
            NotFoundError: no active organization with that id.
            ConflictError: the organization still has active producers.
        """
        stmt = (
            update(OrganizacionRow)
            .where(
                OrganizacionRow.id_organizacion == id_organizacion,
                OrganizacionRow.activo.is_(True),
                ~_has_active_productores(),
            )
            .values(activo=False)
            .returning(OrganizacionRow.id_organizacion)
            .execution_options(synchronize_session="fetch")
        )
        result = await self.db.execute(stmt)
        if result.scalar_one_or_none() is not None:
            return

        # Zero rows: tell "missing" apart from "has dependents"
        current = await self.find_by_id(id_organizacion)
        if current is None:
            raise NotFoundError("Organización no encontrada")
        raise ConflictError(
            f"No se puede eliminar la organización: tiene "
            f"{current.cantidad_productores} productor(es) asociado(s)"
        )

    async def count(self) -> int:
        stmt = select(func.count()).where(OrganizacionRow.activo.is_(True))
        return int(await self.db.scalar(stmt.select_from(OrganizacionRow)) or 0)
