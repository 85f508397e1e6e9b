"""Versioned inspection-draft document.

A draft is the partially filled ficha form, saved step by step from the
client. Only its envelope is structured: a schema version, the current step
and one JSON object per form section. Section contents stay opaque until the
ficha itself is submitted.
"""

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, JsonValue, field_validator

DRAFT_SCHEMA_VERSION = 1
MAX_STEP = 12

SECTION_NAMES = frozenset(
    {
        "ficha",
        "revision_documentacion",
        "acciones_correctivas",
        "no_conformidades",
        "evaluacion_mitigacion",
        "evaluacion_poscosecha",
        "evaluacion_conocimiento",
        "actividades_pecuarias",
        "detalles_cultivo",
        "cosecha_ventas",
        "planificacion_siembras",
        "archivos",
    }
)


class DraftDocument(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    version: Literal[1] = DRAFT_SCHEMA_VERSION
    step_actual: Annotated[int, Field(ge=1, le=MAX_STEP)] = 1
    secciones: dict[str, dict[str, JsonValue]] = Field(default_factory=dict)

    @field_validator("secciones")
    @classmethod
    def known_sections(
        cls, value: dict[str, dict[str, JsonValue]]
    ) -> dict[str, dict[str, JsonValue]]:
        unknown = set(value) - SECTION_NAMES
        if unknown:
            raise ValueError(f"Secciones desconocidas: {', '.join(sorted(unknown))}")
        return value
