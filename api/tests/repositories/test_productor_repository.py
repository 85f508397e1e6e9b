"""Tests for ProductorRepository against a real schema."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import ConflictError, NotFoundError
from domain.productor import Productor
from repositories.productor_repository import ProductorRepository
from tests.factories import OrganizacionFactory, ProductorFactory, create_async

pytestmark = pytest.mark.integration


class TestCreate:
    async def test_stores_under_given_code(self, db_session: AsyncSession):
        org = await create_async(OrganizacionFactory, db_session)
        repo = ProductorRepository(db_session)

        productor = await repo.create(
            Productor.create("Juan Mamani", org.id_organizacion, 2019), "VSAA001"
        )

        assert productor.codigo_productor == "VSAA001"
        assert productor.created_at is not None
        assert await repo.find_by_codigo("VSAA001") is not None

    async def test_taken_code_is_conflict(self, db_session: AsyncSession):
        org = await create_async(OrganizacionFactory, db_session)
        repo = ProductorRepository(db_session)
        candidate = Productor.create("Juan Mamani", org.id_organizacion, 2019)
        await repo.create(candidate, "VSAA001")

        with pytest.raises(ConflictError):
            await repo.create(candidate, "VSAA001")


class TestCodigosWithPrefix:
    async def test_includes_inactive_and_escapes_wildcards(
        self, db_session: AsyncSession
    ):
        org = await create_async(OrganizacionFactory, db_session)
        codigos = [("VSAB001", True), ("VSAB002", False), ("VSAC001", True)]
        for codigo, activo in codigos:
            await create_async(
                ProductorFactory,
                db_session,
                codigo_productor=codigo,
                id_organizacion=org.id_organizacion,
                activo=activo,
            )
        repo = ProductorRepository(db_session)

        assert sorted(await repo.codigos_with_prefix("VSAB")) == ["VSAB001", "VSAB002"]
        assert await repo.codigos_with_prefix("VSA_") == []


class TestSoftDelete:
    async def test_deactivates_once(self, db_session: AsyncSession):
        org = await create_async(OrganizacionFactory, db_session)
        row = await create_async(
            ProductorFactory, db_session, id_organizacion=org.id_organizacion
        )
        repo = ProductorRepository(db_session)

        await repo.soft_delete(row.codigo_productor)

        assert await repo.find_by_codigo(row.codigo_productor) is None
        stored = await repo.find_by_codigo(row.codigo_productor, only_active=False)
        assert stored is not None and stored.activo is False
        with pytest.raises(NotFoundError):
            await repo.soft_delete(row.codigo_productor)
