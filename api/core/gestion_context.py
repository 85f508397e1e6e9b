"""Per-request resolution of the system-active management period.

The active period lives only in the database (one row with
``activo_sistema``). Each request that needs it declares ``ActiveGestion``
and receives an immutable snapshot, which is then passed explicitly to the
services that depend on the period.
"""

import uuid
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Request

from core.database import DbSession
from core.errors import DomainError, ErrorKind
from core.logger import bind_contextvars, get_logger
from repositories.gestion_repository import GestionRepository

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class GestionActiva:
    id_gestion: uuid.UUID
    anio: int


async def get_active_gestion(request: Request, db: DbSession) -> GestionActiva:
    """Resolve the active period or fail with ``no_active_gestion`` (500)."""
    gestion = await GestionRepository(db).get_gestion_activa()
    if gestion is None or gestion.id_gestion is None:
        logger.error("gestion.activa.missing", path=request.url.path)
        raise DomainError(
            "No hay gestión activa configurada en el sistema",
            kind=ErrorKind.INTERNAL,
            code="no_active_gestion",
        )

    activa = GestionActiva(id_gestion=gestion.id_gestion, anio=gestion.anio_gestion)
    request.state.gestion_activa = activa
    bind_contextvars(gestion=activa.anio)
    return activa


ActiveGestion = Annotated[GestionActiva, Depends(get_active_gestion)]
