"""Pydantic schemas for API request/response validation.

Request schemas check shape and types only. Entity invariants (name
lengths, abbreviation charset, year range) live in ``domain`` so the same
rules apply no matter how an entity is built.
"""

import uuid
from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from domain.draft import DraftDocument
from domain.productor import CategoriaProductor


class ErrorResponse(BaseModel):
    """Uniform error body."""

    error: str
    message: str
    timestamp: datetime
    details: list[dict[str, Any]] | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    service: str


class PoolStatusResponse(BaseModel):
    pool_size: int
    checked_out: int
    overflow: int
    checked_in: int


class DetailedHealthResponse(BaseModel):
    status: str
    service: str
    database: bool
    gestion_activa: int | None = None
    pool: PoolStatusResponse | None = None


# --- Auth / usuarios ---


class LoginRequest(BaseModel):
    username: str = Field(min_length=1, max_length=50)
    password: str = Field(min_length=1, max_length=128)


class RefreshRequest(BaseModel):
    refresh_token: str = Field(min_length=1)


class UsuarioResponse(BaseModel):
    """Public view of a user account; never carries the password hash."""

    id_usuario: uuid.UUID
    username: str
    email: str
    nombre_completo: str
    rol: str
    activo: bool
    last_login: datetime | None = None
    created_at: datetime | None = None


class LoginResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "Bearer"
    expires_in: int
    user: UsuarioResponse


class MeResponse(BaseModel):
    user: UsuarioResponse


class UsuarioCreate(BaseModel):
    username: str = Field(min_length=3, max_length=50, pattern=r"^[A-Za-z0-9_.]+$")
    email: str = Field(max_length=255, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    password: str = Field(min_length=8, max_length=72)
    nombre_completo: str = Field(min_length=3, max_length=150)
    rol: str = Field(min_length=1, max_length=50)


class UsuarioListResponse(BaseModel):
    usuarios: list[UsuarioResponse]
    total: int


class UsuarioMutationResponse(BaseModel):
    usuario: UsuarioResponse
    message: str


# --- Organizaciones ---


class OrganizacionCreate(BaseModel):
    nombre_organizacion: str = Field(max_length=200)
    abreviatura_organizacion: str = Field(max_length=20)


class OrganizacionUpdate(BaseModel):
    """Partial update; only fields present in the body are applied."""

    nombre_organizacion: str | None = Field(default=None, max_length=200)
    abreviatura_organizacion: str | None = Field(default=None, max_length=20)
    activo: bool | None = None


class OrganizacionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id_organizacion: uuid.UUID
    nombre_organizacion: str
    abreviatura_organizacion: str
    activo: bool
    created_at: datetime | None = None
    cantidad_productores: int = 0


class OrganizacionListResponse(BaseModel):
    organizaciones: list[OrganizacionResponse]
    total: int


class OrganizacionDetailResponse(BaseModel):
    organizacion: OrganizacionResponse


class OrganizacionMutationResponse(BaseModel):
    organizacion: OrganizacionResponse
    message: str


# --- Productores ---


class ProductorCreate(BaseModel):
    nombre_productor: str = Field(max_length=200)
    ci_documento: str | None = Field(default=None, max_length=20)
    id_organizacion: uuid.UUID
    anio_ingreso_programa: int
    categoria_actual: CategoriaProductor = CategoriaProductor.E


class ProductorResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    codigo_productor: str
    nombre_productor: str
    ci_documento: str | None = None
    id_organizacion: uuid.UUID
    anio_ingreso_programa: int
    categoria_actual: CategoriaProductor
    activo: bool
    created_at: datetime | None = None


class ProductorListResponse(BaseModel):
    productores: list[ProductorResponse]
    total: int


class ProductorDetailResponse(BaseModel):
    productor: ProductorResponse


class ProductorMutationResponse(BaseModel):
    productor: ProductorResponse
    message: str


# --- Tipos de cultivo ---


class TipoCultivoCreate(BaseModel):
    nombre_cultivo: str = Field(max_length=200)
    descripcion: str | None = Field(default=None, max_length=1000)
    es_principal_certificable: bool = False
    rendimiento_promedio_qq_ha: float | None = None


class TipoCultivoUpdate(BaseModel):
    nombre_cultivo: str | None = Field(default=None, max_length=200)
    descripcion: str | None = Field(default=None, max_length=1000)
    es_principal_certificable: bool | None = None
    rendimiento_promedio_qq_ha: float | None = None
    activo: bool | None = None


class TipoCultivoResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id_tipo_cultivo: uuid.UUID
    nombre_cultivo: str
    descripcion: str | None = None
    es_principal_certificable: bool
    rendimiento_promedio_qq_ha: float | None = None
    activo: bool
    created_at: datetime | None = None


class TipoCultivoListResponse(BaseModel):
    tipos_cultivo: list[TipoCultivoResponse]
    total: int


class TipoCultivoDetailResponse(BaseModel):
    tipo_cultivo: TipoCultivoResponse


class TipoCultivoMutationResponse(BaseModel):
    tipo_cultivo: TipoCultivoResponse
    message: str


# --- Gestiones ---


class GestionCreate(BaseModel):
    anio_gestion: int
    nombre_gestion: str | None = Field(default=None, max_length=100)


class GestionUpdate(BaseModel):
    anio_gestion: int | None = None
    nombre_gestion: str | None = Field(default=None, max_length=100)
    activo: bool | None = None


class GestionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id_gestion: uuid.UUID
    anio_gestion: int
    nombre_gestion: str
    activo: bool
    activo_sistema: bool
    created_at: datetime | None = None


class GestionListResponse(BaseModel):
    gestiones: list[GestionResponse]
    total: int


class GestionDetailResponse(BaseModel):
    gestion: GestionResponse


class GestionMutationResponse(BaseModel):
    gestion: GestionResponse
    message: str


class GestionActivarResponse(GestionMutationResponse):
    gestion_anterior: int | None = None


# --- Fichas ---


class FichaResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id_ficha: uuid.UUID
    codigo_productor: str
    gestion: int
    fecha_inspeccion: date
    inspector_interno: str
    estado_ficha: str
    comentarios_evaluacion: str | None = None


class DetalleCultivoInput(BaseModel):
    id_tipo_cultivo: uuid.UUID
    superficie_ha: float


class CosechaInput(BaseModel):
    cosecha_estimada_qq: float = 0
    produccion_real_mani: float = 0


class FichaCreate(BaseModel):
    codigo_productor: str = Field(max_length=20)
    fecha_inspeccion: date
    inspector_interno: str = Field(max_length=200)
    detalle_cultivos_parcelas: list[DetalleCultivoInput] = Field(
        default_factory=list, max_length=200
    )
    cosecha_ventas: list[CosechaInput] = Field(default_factory=list, max_length=50)


class FichaDetailResponse(BaseModel):
    ficha: FichaResponse


class FichaMutationResponse(BaseModel):
    ficha: FichaResponse
    message: str


class AprobarFichaRequest(BaseModel):
    comentarios: str | None = Field(default=None, max_length=2000)


class RechazarFichaRequest(BaseModel):
    motivo: str = Field(min_length=5, max_length=2000)


class FichaEstadoResponse(BaseModel):
    ficha: FichaResponse
    message: str
    cultivos_sincronizados: int = 0


class DraftSaveRequest(BaseModel):
    codigo_productor: str = Field(min_length=1, max_length=20)
    draft: DraftDocument


class DraftResponse(BaseModel):
    id_draft: uuid.UUID
    codigo_productor: str
    gestion: int
    step_actual: int
    schema_version: int
    draft: DraftDocument
    created_at: datetime | None = None
    updated_at: datetime | None = None


class DraftListResponse(BaseModel):
    drafts: list[DraftResponse]
    total: int
