"""Organizacion entity."""

import re
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Self

from core.errors import ConflictError, DomainValidationError

NOMBRE_MIN = 3
NOMBRE_MAX = 100
ABREVIATURA_MIN = 2
ABREVIATURA_MAX = 5

_FORBIDDEN_CHARS = re.compile(r"[<>{}\[\]\\]")
_ABREVIATURA_RE = re.compile(r"^[A-Z]+$")


def validate_nombre(nombre: str) -> str:
    nombre = (nombre or "").strip()
    if len(nombre) < NOMBRE_MIN:
        raise DomainValidationError(
            f"Nombre de organización debe tener al menos {NOMBRE_MIN} caracteres",
            field="nombre_organizacion",
        )
    if len(nombre) > NOMBRE_MAX:
        raise DomainValidationError(
            f"Nombre de organización no puede exceder {NOMBRE_MAX} caracteres",
            field="nombre_organizacion",
        )
    if _FORBIDDEN_CHARS.search(nombre):
        raise DomainValidationError(
            "Nombre de organización contiene caracteres no permitidos",
            field="nombre_organizacion",
        )
    return nombre


def validate_abreviatura(abreviatura: str) -> str:
    abreviatura = (abreviatura or "").strip().upper()
    if not ABREVIATURA_MIN <= len(abreviatura) <= ABREVIATURA_MAX:
        raise DomainValidationError(
            f"Abreviatura debe tener entre {ABREVIATURA_MIN} y "
            f"{ABREVIATURA_MAX} caracteres",
            field="abreviatura_organizacion",
        )
    if not _ABREVIATURA_RE.match(abreviatura):
        raise DomainValidationError(
            "Abreviatura debe contener solo letras mayúsculas",
            field="abreviatura_organizacion",
        )
    return abreviatura


@dataclass(slots=True)
class Organizacion:
    nombre_organizacion: str
    abreviatura_organizacion: str
    activo: bool = True
    id_organizacion: uuid.UUID | None = None
    created_at: datetime | None = None
    cantidad_productores: int = 0

    @classmethod
    def create(cls, nombre: str, abreviatura: str) -> Self:
        """Validated factory for a new, active organization."""
        return cls(
            nombre_organizacion=validate_nombre(nombre),
            abreviatura_organizacion=validate_abreviatura(abreviatura),
        )

    @classmethod
    def from_row(cls, row: Any, cantidad_productores: int = 0) -> Self:
        return cls(
            id_organizacion=row.id_organizacion,
            nombre_organizacion=row.nombre_organizacion,
            abreviatura_organizacion=row.abreviatura_organizacion,
            activo=row.activo,
            created_at=row.created_at,
            cantidad_productores=cantidad_productores or 0,
        )

    @property
    def tiene_productores(self) -> bool:
        return self.cantidad_productores > 0

    def rename(self, nombre: str) -> None:
        self.nombre_organizacion = validate_nombre(nombre)

    def re_abbreviate(self, abreviatura: str) -> None:
        self.abreviatura_organizacion = validate_abreviatura(abreviatura)

    def puede_desactivar(self) -> str | None:
        """Return the reason deactivation is refused, or None if allowed."""
        if not self.activo:
            return "La organización ya está inactiva"
        if self.tiene_productores:
            return (
                f"La organización tiene {self.cantidad_productores} "
                "productor(es) asociado(s)"
            )
        return None

    def set_active(self, activo: bool) -> None:
        if activo:
            self.activo = True
            return
        reason = self.puede_desactivar()
        if reason is not None:
            raise ConflictError(reason)
        self.activo = False

    def resumen(self) -> str:
        return f"{self.nombre_organizacion} ({self.abreviatura_organizacion})"
