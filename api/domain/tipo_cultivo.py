"""TipoCultivo catalog entity."""

import math
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Self

from core.errors import ConflictError, DomainValidationError

NOMBRE_MIN = 2
NOMBRE_MAX = 100
DESCRIPCION_MIN = 3
DESCRIPCION_MAX = 500


def validate_nombre(nombre: str) -> str:
    nombre = (nombre or "").strip()
    if len(nombre) < NOMBRE_MIN:
        raise DomainValidationError(
            f"Nombre de tipo cultivo debe tener al menos {NOMBRE_MIN} caracteres",
            field="nombre_cultivo",
        )
    if len(nombre) > NOMBRE_MAX:
        raise DomainValidationError(
            f"Nombre de tipo cultivo no puede exceder {NOMBRE_MAX} caracteres",
            field="nombre_cultivo",
        )
    return nombre


def validate_descripcion(descripcion: str | None) -> str | None:
    if descripcion is None:
        return None
    descripcion = descripcion.strip()
    if not descripcion:
        return None
    if not DESCRIPCION_MIN <= len(descripcion) <= DESCRIPCION_MAX:
        raise DomainValidationError(
            f"Descripción debe tener entre {DESCRIPCION_MIN} y "
            f"{DESCRIPCION_MAX} caracteres",
            field="descripcion",
        )
    return descripcion


def validate_rendimiento(rendimiento: float | None) -> float | None:
    if rendimiento is None:
        return None
    if not math.isfinite(rendimiento) or rendimiento <= 0:
        raise DomainValidationError(
            "Rendimiento promedio debe ser un número positivo",
            field="rendimiento_promedio_qq_ha",
        )
    return float(rendimiento)


@dataclass(slots=True)
class TipoCultivo:
    nombre_cultivo: str
    descripcion: str | None = None
    es_principal_certificable: bool = False
    rendimiento_promedio_qq_ha: float | None = None
    activo: bool = True
    id_tipo_cultivo: uuid.UUID | None = None
    created_at: datetime | None = None

    @classmethod
    def create(
        cls,
        nombre: str,
        descripcion: str | None = None,
        es_principal_certificable: bool = False,
        rendimiento_promedio_qq_ha: float | None = None,
    ) -> Self:
        return cls(
            nombre_cultivo=validate_nombre(nombre),
            descripcion=validate_descripcion(descripcion),
            es_principal_certificable=bool(es_principal_certificable),
            rendimiento_promedio_qq_ha=validate_rendimiento(
                rendimiento_promedio_qq_ha
            ),
        )

    @classmethod
    def from_row(cls, row: Any) -> Self:
        return cls(
            id_tipo_cultivo=row.id_tipo_cultivo,
            nombre_cultivo=row.nombre_cultivo,
            descripcion=row.descripcion,
            es_principal_certificable=row.es_principal_certificable,
            rendimiento_promedio_qq_ha=row.rendimiento_promedio_qq_ha,
            activo=row.activo,
            created_at=row.created_at,
        )

    def rename(self, nombre: str) -> None:
        self.nombre_cultivo = validate_nombre(nombre)

    def describe(self, descripcion: str | None) -> None:
        self.descripcion = validate_descripcion(descripcion)

    def set_principal_certificable(self, value: bool) -> None:
        self.es_principal_certificable = bool(value)

    def set_rendimiento(self, rendimiento: float | None) -> None:
        self.rendimiento_promedio_qq_ha = validate_rendimiento(rendimiento)

    def activar(self) -> None:
        self.activo = True

    def desactivar(self) -> None:
        if not self.activo:
            raise ConflictError("El tipo cultivo ya está inactivo")
        self.activo = False
