"""SQLAlchemy models for APROMAM certification tracking."""

import uuid
from datetime import UTC, date, datetime
from enum import StrEnum

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    func,
    text,
)
from sqlalchemy.orm import Mapped, declared_attr, mapped_column, relationship

from core.database import Base
from domain.ficha import EstadoFicha
from domain.productor import CategoriaProductor


def utcnow() -> datetime:
    """Return current UTC time (timezone-aware)."""
    return datetime.now(UTC)


class TimestampMixin:
    """Mixin that adds created_at and updated_at timestamp columns."""

    @declared_attr
    def created_at(cls) -> Mapped[datetime]:
        return mapped_column(DateTime(timezone=True), default=utcnow)

    @declared_attr
    def updated_at(cls) -> Mapped[datetime]:
        return mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


class CreatedAtMixin:
    @declared_attr
    def created_at(cls) -> Mapped[datetime]:
        return mapped_column(DateTime(timezone=True), default=utcnow)


def _active_only(column: str = "activo") -> dict:
    """Partial-index predicate for both production and test dialects."""
    return {
        "postgresql_where": text(column),
        "sqlite_where": text(f"{column} = 1"),
    }


class CultivoPrincipal(StrEnum):
    MANI = "mani"
    MAIZ = "maiz"
    PAPA = "papa"
    AJI = "aji"
    LEGUMINOSA = "leguminosa"
    OTROS = "otros"


class Rol(Base):
    """Fixed reference data; seeded by the baseline migration."""

    __tablename__ = "roles"

    id_rol: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    nombre_rol: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    nivel: Mapped[int] = mapped_column(Integer, nullable=False)
    descripcion: Mapped[str | None] = mapped_column(String(255), nullable=True)
    activo: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class Usuario(TimestampMixin, Base):
    __tablename__ = "usuarios"

    id_usuario: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    username: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    nombre_completo: Mapped[str] = mapped_column(String(150), nullable=False)
    id_rol: Mapped[int] = mapped_column(ForeignKey("roles.id_rol"), nullable=False)
    activo: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    last_login: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    rol: Mapped[Rol] = relationship(lazy="joined")


class Organizacion(CreatedAtMixin, Base):
    """Producer organization.

    Name and abbreviation are unique among active rows only; soft-deleted
    rows keep their values so history stays readable.
    """

    __tablename__ = "organizaciones"
    __table_args__ = (
        Index(
            "uq_organizaciones_abreviatura_activo",
            "abreviatura_organizacion",
            unique=True,
            **_active_only(),
        ),
    )

    id_organizacion: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    nombre_organizacion: Mapped[str] = mapped_column(String(100), nullable=False)
    abreviatura_organizacion: Mapped[str] = mapped_column(String(5), nullable=False)
    activo: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


Index(
    "uq_organizaciones_nombre_activo",
    func.lower(Organizacion.nombre_organizacion),
    unique=True,
    **_active_only(),
)


class Productor(TimestampMixin, Base):
    __tablename__ = "productores"

    codigo_productor: Mapped[str] = mapped_column(String(20), primary_key=True)
    nombre_productor: Mapped[str] = mapped_column(String(200), nullable=False)
    ci_documento: Mapped[str | None] = mapped_column(String(20), nullable=True)
    id_organizacion: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("organizaciones.id_organizacion"), nullable=False, index=True
    )
    anio_ingreso_programa: Mapped[int] = mapped_column(Integer, nullable=False)
    categoria_actual: Mapped[CategoriaProductor] = mapped_column(
        Enum(
            CategoriaProductor,
            name="categoria_productor",
            native_enum=False,
            values_callable=lambda e: [m.value for m in e],
        ),
        default=CategoriaProductor.E,
        nullable=False,
    )
    activo: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class TipoCultivo(CreatedAtMixin, Base):
    __tablename__ = "tipos_cultivo"
    __table_args__ = (
        CheckConstraint(
            "rendimiento_promedio_qq_ha IS NULL OR rendimiento_promedio_qq_ha > 0",
            name="ck_tipos_cultivo_rendimiento_positivo",
        ),
    )

    id_tipo_cultivo: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    nombre_cultivo: Mapped[str] = mapped_column(String(100), nullable=False)
    descripcion: Mapped[str | None] = mapped_column(Text, nullable=True)
    es_principal_certificable: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    rendimiento_promedio_qq_ha: Mapped[float | None] = mapped_column(
        Float, nullable=True
    )
    activo: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


Index(
    "uq_tipos_cultivo_nombre",
    func.lower(TipoCultivo.nombre_cultivo),
    unique=True,
)


class Gestion(CreatedAtMixin, Base):
    """Yearly certification period.

    At most one row may have ``activo_sistema`` set; the partial unique
    index is the authority for that rule.
    """

    __tablename__ = "gestiones"
    __table_args__ = (
        UniqueConstraint("anio_gestion", name="uq_gestiones_anio"),
        CheckConstraint(
            "anio_gestion BETWEEN 2000 AND 2100", name="ck_gestiones_anio_rango"
        ),
        Index(
            "uq_gestiones_activo_sistema",
            "activo_sistema",
            unique=True,
            **_active_only("activo_sistema"),
        ),
    )

    id_gestion: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    anio_gestion: Mapped[int] = mapped_column(Integer, nullable=False)
    nombre_gestion: Mapped[str | None] = mapped_column(String(100), nullable=True)
    activo: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    activo_sistema: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )


class FichaInspeccion(TimestampMixin, Base):
    __tablename__ = "ficha_inspeccion"
    __table_args__ = (
        UniqueConstraint(
            "codigo_productor", "gestion", name="uq_ficha_productor_gestion"
        ),
    )

    id_ficha: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    codigo_productor: Mapped[str] = mapped_column(
        ForeignKey("productores.codigo_productor"), nullable=False, index=True
    )
    gestion: Mapped[int] = mapped_column(Integer, nullable=False)
    fecha_inspeccion: Mapped[date] = mapped_column(Date, nullable=False)
    inspector_interno: Mapped[str] = mapped_column(String(200), nullable=False)
    estado_ficha: Mapped[EstadoFicha] = mapped_column(
        Enum(
            EstadoFicha,
            name="estado_ficha",
            native_enum=False,
            values_callable=lambda e: [m.value for m in e],
        ),
        default=EstadoFicha.BORRADOR,
        nullable=False,
    )
    comentarios_evaluacion: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_by: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)


class DetalleCultivoParcela(CreatedAtMixin, Base):
    __tablename__ = "detalle_cultivo_parcela"

    id_detalle: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    id_ficha: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("ficha_inspeccion.id_ficha", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    id_tipo_cultivo: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("tipos_cultivo.id_tipo_cultivo"), nullable=False, index=True
    )
    superficie_ha: Mapped[float] = mapped_column(Float, nullable=False)


class CosechaVentas(CreatedAtMixin, Base):
    __tablename__ = "cosecha_ventas"

    id_cosecha: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    id_ficha: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("ficha_inspeccion.id_ficha", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    cosecha_estimada_qq: Mapped[float] = mapped_column(Float, default=0, nullable=False)
    produccion_real_mani: Mapped[float] = mapped_column(
        Float, default=0, nullable=False
    )


class CultivoGestion(Base):
    """Per-producer, per-period crop summary rebuilt from approved fichas."""

    __tablename__ = "cultivos_gestion"
    __table_args__ = (
        UniqueConstraint(
            "codigo_productor", "gestion", name="uq_cultivos_gestion_productor"
        ),
    )

    id_cultivo_gestion: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    codigo_productor: Mapped[str] = mapped_column(String(20), nullable=False)
    gestion: Mapped[int] = mapped_column(Integer, nullable=False)
    superficie_total: Mapped[float] = mapped_column(Float, default=0, nullable=False)
    produccion_estimada_mani: Mapped[float] = mapped_column(
        Float, default=0, nullable=False
    )
    produccion_real_mani: Mapped[float] = mapped_column(
        Float, default=0, nullable=False
    )
    cultivo_principal: Mapped[str] = mapped_column(
        String(20), default=CultivoPrincipal.MANI, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )


class FichaDraft(TimestampMixin, Base):
    __tablename__ = "fichas_draft"
    __table_args__ = (
        UniqueConstraint(
            "codigo_productor",
            "gestion",
            "created_by",
            name="uq_fichas_draft_productor_gestion_usuario",
        ),
    )

    id_draft: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    codigo_productor: Mapped[str] = mapped_column(String(20), nullable=False)
    gestion: Mapped[int] = mapped_column(Integer, nullable=False)
    created_by: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    draft_data: Mapped[dict] = mapped_column(JSON, nullable=False)
    schema_version: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    step_actual: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
