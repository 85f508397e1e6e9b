"""Producer business rules.

Codes are issued per organization from its abbreviation; the producer can
only be registered under an active organization.
"""

import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from core.audit import audit
from core.auth import CurrentUser
from core.errors import NotFoundError
from core.logger import get_logger
from domain.productor import Productor, codigo_prefix, next_codigo
from repositories.organizacion_repository import OrganizacionRepository
from repositories.productor_repository import ProductorRepository
from schemas import ProductorCreate

logger = get_logger(__name__)


async def list_productores(
    db: AsyncSession,
    *,
    only_active: bool = True,
    id_organizacion: uuid.UUID | None = None,
) -> list[Productor]:
    return await ProductorRepository(db).find_all(
        only_active=only_active, id_organizacion=id_organizacion
    )


async def get_productor(db: AsyncSession, codigo_productor: str) -> Productor:
    productor = await ProductorRepository(db).find_by_codigo(codigo_productor)
    if productor is None:
        raise NotFoundError("Productor no encontrado")
    return productor


async def create_productor(
    db: AsyncSession, actor: CurrentUser, data: ProductorCreate
) -> Productor:
    candidate = Productor.create(
        data.nombre_productor,
        data.id_organizacion,
        data.anio_ingreso_programa,
        ci_documento=data.ci_documento,
        categoria=data.categoria_actual,
    )

    org = await OrganizacionRepository(db).find_by_id(data.id_organizacion)
    if org is None:
        raise NotFoundError("Organización no encontrada")

    repo = ProductorRepository(db)
    existing = await repo.codigos_with_prefix(
        codigo_prefix(org.abreviatura_organizacion)
    )
    codigo = next_codigo(org.abreviatura_organizacion, existing)
    productor = await repo.create(candidate, codigo)

    audit(
        "productor.created",
        actor,
        codigo_productor=productor.codigo_productor,
        id_organizacion=productor.id_organizacion,
    )
    return productor


async def delete_productor(
    db: AsyncSession, actor: CurrentUser, codigo_productor: str
) -> None:
    await ProductorRepository(db).soft_delete(codigo_productor)
    audit("productor.deleted", actor, codigo_productor=codigo_productor)
