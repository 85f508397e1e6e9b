"""Productor entity.

Producer codes are assigned from the organization abbreviation: ``VS`` +
abbreviation + a three-digit sequence (``VSCN001``, ``VSCN002`` ...).
"""

import re
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any, Self

from core.errors import ConflictError, DomainValidationError

NOMBRE_MIN = 3
NOMBRE_MAX = 200
CI_MIN = 6
CI_MAX = 20
ANIO_INGRESO_MIN = 2000
CODIGO_PREFIX = "VS"
CODIGO_DIGITS = 3
CODIGO_MAX_SEQUENCE = 10**CODIGO_DIGITS - 1

_CI_RE = re.compile(r"^[0-9A-Za-z-]+$")


class CategoriaProductor(StrEnum):
    E = "E"
    T2 = "2T"
    T1 = "1T"
    T0 = "0T"


def validate_nombre(nombre: str) -> str:
    nombre = (nombre or "").strip()
    if not NOMBRE_MIN <= len(nombre) <= NOMBRE_MAX:
        raise DomainValidationError(
            f"Nombre debe tener entre {NOMBRE_MIN} y {NOMBRE_MAX} caracteres",
            field="nombre_productor",
        )
    return nombre


def validate_ci(ci_documento: str | None) -> str | None:
    if ci_documento is None or not ci_documento.strip():
        return None
    ci_documento = ci_documento.strip()
    if not CI_MIN <= len(ci_documento) <= CI_MAX:
        raise DomainValidationError(
            f"CI debe tener entre {CI_MIN} y {CI_MAX} caracteres",
            field="ci_documento",
        )
    if not _CI_RE.match(ci_documento):
        raise DomainValidationError(
            "CI solo puede contener numeros, letras y guiones",
            field="ci_documento",
        )
    return ci_documento


def validate_anio_ingreso(anio: int, today: datetime | None = None) -> int:
    max_anio = (today or datetime.now(UTC)).year + 1
    if not ANIO_INGRESO_MIN <= anio <= max_anio:
        raise DomainValidationError(
            f"Año de ingreso debe estar entre {ANIO_INGRESO_MIN} y {max_anio}",
            field="anio_ingreso_programa",
        )
    return anio


def codigo_prefix(abreviatura_organizacion: str) -> str:
    return f"{CODIGO_PREFIX}{abreviatura_organizacion.strip().upper()}"


def next_codigo(abreviatura_organizacion: str, existing: list[str]) -> str:
    """Next free code for an organization given the codes already issued.

    Codes that do not end in a number are ignored.
    """
    prefix = codigo_prefix(abreviatura_organizacion)
    highest = 0
    for codigo in existing:
        suffix = codigo[len(prefix) :]
        if codigo.startswith(prefix) and suffix.isdigit():
            highest = max(highest, int(suffix))

    sequence = highest + 1
    if sequence > CODIGO_MAX_SEQUENCE:
        raise ConflictError(
            f"La organización {abreviatura_organizacion} alcanzó el límite de "
            f"{CODIGO_MAX_SEQUENCE} productores"
        )
    return f"{prefix}{sequence:0{CODIGO_DIGITS}d}"


@dataclass(slots=True)
class Productor:
    nombre_productor: str
    id_organizacion: uuid.UUID
    anio_ingreso_programa: int
    ci_documento: str | None = None
    categoria_actual: CategoriaProductor = CategoriaProductor.E
    activo: bool = True
    codigo_productor: str | None = None
    created_at: datetime | None = None

    @classmethod
    def create(
        cls,
        nombre: str,
        id_organizacion: uuid.UUID,
        anio_ingreso_programa: int,
        ci_documento: str | None = None,
        categoria: CategoriaProductor | str = CategoriaProductor.E,
    ) -> Self:
        """Validated factory; the code is assigned when the row is stored."""
        return cls(
            nombre_productor=validate_nombre(nombre),
            id_organizacion=id_organizacion,
            anio_ingreso_programa=validate_anio_ingreso(anio_ingreso_programa),
            ci_documento=validate_ci(ci_documento),
            categoria_actual=CategoriaProductor(categoria),
        )

    @classmethod
    def from_row(cls, row: Any) -> Self:
        return cls(
            codigo_productor=row.codigo_productor,
            nombre_productor=row.nombre_productor,
            id_organizacion=row.id_organizacion,
            anio_ingreso_programa=row.anio_ingreso_programa,
            ci_documento=row.ci_documento,
            categoria_actual=CategoriaProductor(row.categoria_actual),
            activo=row.activo,
            created_at=row.created_at,
        )
