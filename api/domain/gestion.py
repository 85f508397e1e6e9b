"""Gestion (yearly certification period) entity."""

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Self

from core.errors import BadRequestError, ConflictError, DomainValidationError

ANIO_MIN = 2000
ANIO_MAX = 2100
NOMBRE_MIN = 4


def validate_anio(anio: int) -> int:
    if anio is None:
        raise DomainValidationError(
            "Año de gestión es requerido", field="anio_gestion"
        )
    if not ANIO_MIN <= anio <= ANIO_MAX:
        raise DomainValidationError(
            f"Año debe estar entre {ANIO_MIN} y {ANIO_MAX}", field="anio_gestion"
        )
    return anio


def validate_nombre(nombre: str) -> str:
    nombre = (nombre or "").strip()
    if len(nombre) < NOMBRE_MIN:
        raise DomainValidationError(
            f"Nombre de gestión debe tener al menos {NOMBRE_MIN} caracteres",
            field="nombre_gestion",
        )
    return nombre


@dataclass(slots=True)
class Gestion:
    anio_gestion: int
    nombre_gestion: str
    activo: bool = True
    activo_sistema: bool = False
    id_gestion: uuid.UUID | None = None
    created_at: datetime | None = None

    @classmethod
    def create(cls, anio: int, nombre: str | None = None) -> Self:
        anio = validate_anio(anio)
        return cls(
            anio_gestion=anio,
            nombre_gestion=validate_nombre(nombre or f"Gestión {anio}"),
        )

    @classmethod
    def from_row(cls, row: Any) -> Self:
        return cls(
            id_gestion=row.id_gestion,
            anio_gestion=row.anio_gestion,
            nombre_gestion=row.nombre_gestion or f"Gestión {row.anio_gestion}",
            activo=row.activo,
            activo_sistema=row.activo_sistema,
            created_at=row.created_at,
        )

    def rename(self, nombre: str) -> None:
        self.nombre_gestion = validate_nombre(nombre)

    def set_anio(self, anio: int) -> None:
        self.anio_gestion = validate_anio(anio)

    def activar(self) -> None:
        self.activo = True

    def desactivar(self) -> None:
        if not self.activo:
            raise ConflictError("La gestión ya está inactiva")
        if self.activo_sistema:
            raise ConflictError(
                "No se puede desactivar la gestión activa del sistema"
            )
        self.activo = False

    def ensure_activable(self) -> None:
        """A soft-deleted period can never become the system period."""
        if not self.activo:
            raise BadRequestError(
                f"La gestión {self.anio_gestion} está desactivada y no puede "
                "activarse como gestión del sistema"
            )
