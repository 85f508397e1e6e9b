"""Inspection record (ficha) workflow and field rules."""

import math
from enum import StrEnum

from core.errors import BadRequestError, DomainValidationError

INSPECTOR_MIN = 3
INSPECTOR_MAX = 100
SUPERFICIE_MAX_HA = 10_000
COSECHA_MAX_QQ = 1_000_000


class EstadoFicha(StrEnum):
    BORRADOR = "borrador"
    REVISION = "revision"
    APROBADO = "aprobado"
    RECHAZADO = "rechazado"


FICHA_TRANSITIONS: dict[EstadoFicha, frozenset[EstadoFicha]] = {
    EstadoFicha.BORRADOR: frozenset({EstadoFicha.REVISION}),
    EstadoFicha.REVISION: frozenset({EstadoFicha.APROBADO, EstadoFicha.RECHAZADO}),
    EstadoFicha.RECHAZADO: frozenset({EstadoFicha.BORRADOR}),
    EstadoFicha.APROBADO: frozenset(),
}


def transition_ficha(current: EstadoFicha | str, target: EstadoFicha) -> EstadoFicha:
    """Validate a workflow move and return the new state."""
    current = EstadoFicha(current)
    if target not in FICHA_TRANSITIONS[current]:
        raise BadRequestError(
            f"No se puede cambiar la ficha de '{current.value}' a '{target.value}'"
        )
    return target


def validate_inspector(inspector: str) -> str:
    inspector = (inspector or "").strip()
    if not INSPECTOR_MIN <= len(inspector) <= INSPECTOR_MAX:
        raise DomainValidationError(
            f"Inspector debe tener entre {INSPECTOR_MIN} y {INSPECTOR_MAX} "
            "caracteres",
            field="inspector_interno",
        )
    return inspector


def validate_superficie(superficie_ha: float) -> float:
    if not math.isfinite(superficie_ha) or not 0 < superficie_ha <= SUPERFICIE_MAX_HA:
        raise DomainValidationError(
            f"Superficie debe ser mayor a 0 y hasta {SUPERFICIE_MAX_HA} ha",
            field="superficie_ha",
        )
    return float(superficie_ha)


def validate_cantidad_qq(cantidad: float, field: str) -> float:
    if not math.isfinite(cantidad) or not 0 <= cantidad <= COSECHA_MAX_QQ:
        raise DomainValidationError(
            f"Cantidad debe estar entre 0 y {COSECHA_MAX_QQ} qq",
            field=field,
        )
    return float(cantidad)
