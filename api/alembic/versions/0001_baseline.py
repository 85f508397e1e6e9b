"""baseline schema

Revision ID: 0001_baseline
Revises:
Create Date: 2026-10-18

Roles, users, organizations, producers, crop catalog, management periods,
inspection records with their crop/harvest details, the per-period crop
summary and inspection drafts. Seeds the four fixed roles.
"""

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "0001_baseline"
down_revision = None
branch_labels = None
depends_on = None

ROLES = [
    (1, "administrador", 1, "Acceso total al sistema"),
    (2, "gerente", 2, "Gestión de organizaciones, fichas y reportes"),
    (3, "tecnico", 3, "Registro de fichas de inspección"),
    (4, "invitado", 4, "Solo lectura"),
]


def _uuid_pk(name: str) -> sa.Column:
    return sa.Column(name, sa.Uuid(), primary_key=True, nullable=False)


def _ts(name: str) -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), nullable=True)


def upgrade() -> None:
    roles = op.create_table(
        "roles",
        sa.Column("id_rol", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("nombre_rol", sa.String(50), nullable=False),
        sa.Column("nivel", sa.Integer(), nullable=False),
        sa.Column("descripcion", sa.String(255), nullable=True),
        sa.Column("activo", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.PrimaryKeyConstraint("id_rol"),
        sa.UniqueConstraint("nombre_rol", name="uq_roles_nombre_rol"),
    )
    op.bulk_insert(
        roles,
        [
            {
                "id_rol": id_rol,
                "nombre_rol": nombre,
                "nivel": nivel,
                "descripcion": descripcion,
                "activo": True,
            }
            for id_rol, nombre, nivel, descripcion in ROLES
        ],
    )

    op.create_table(
        "usuarios",
        _uuid_pk("id_usuario"),
        sa.Column("username", sa.String(50), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("nombre_completo", sa.String(150), nullable=False),
        sa.Column("id_rol", sa.Integer(), nullable=False),
        sa.Column("activo", sa.Boolean(), nullable=False, server_default=sa.true()),
        _ts("last_login"),
        _ts("created_at"),
        _ts("updated_at"),
        sa.ForeignKeyConstraint(["id_rol"], ["roles.id_rol"]),
        sa.UniqueConstraint("username", name="uq_usuarios_username"),
    )

    op.create_table(
        "organizaciones",
        _uuid_pk("id_organizacion"),
        sa.Column("nombre_organizacion", sa.String(100), nullable=False),
        sa.Column("abreviatura_organizacion", sa.String(5), nullable=False),
        sa.Column("activo", sa.Boolean(), nullable=False, server_default=sa.true()),
        _ts("created_at"),
    )
    op.create_index(
        "uq_organizaciones_abreviatura_activo",
        "organizaciones",
        ["abreviatura_organizacion"],
        unique=True,
        postgresql_where=sa.text("activo"),
        sqlite_where=sa.text("activo = 1"),
    )
    op.create_index(
        "uq_organizaciones_nombre_activo",
        "organizaciones",
        [sa.text("lower(nombre_organizacion)")],
        unique=True,
        postgresql_where=sa.text("activo"),
        sqlite_where=sa.text("activo = 1"),
    )

    op.create_table(
        "productores",
        sa.Column("codigo_productor", sa.String(20), nullable=False),
        sa.Column("nombre_productor", sa.String(200), nullable=False),
        sa.Column("ci_documento", sa.String(20), nullable=True),
        sa.Column("id_organizacion", sa.Uuid(), nullable=False),
        sa.Column("anio_ingreso_programa", sa.Integer(), nullable=False),
        sa.Column(
            "categoria_actual",
            sa.Enum(
                "E", "2T", "1T", "0T", name="categoria_productor", native_enum=False
            ),
            nullable=False,
        ),
        sa.Column("activo", sa.Boolean(), nullable=False, server_default=sa.true()),
        _ts("created_at"),
        _ts("updated_at"),
        sa.PrimaryKeyConstraint("codigo_productor"),
        sa.ForeignKeyConstraint(
            ["id_organizacion"], ["organizaciones.id_organizacion"]
        ),
    )
    op.create_index(
        "ix_productores_id_organizacion", "productores", ["id_organizacion"]
    )

    op.create_table(
        "tipos_cultivo",
        _uuid_pk("id_tipo_cultivo"),
        sa.Column("nombre_cultivo", sa.String(100), nullable=False),
        sa.Column("descripcion", sa.Text(), nullable=True),
        sa.Column(
            "es_principal_certificable",
            sa.Boolean(),
            nullable=False,
            server_default=sa.false(),
        ),
        sa.Column("rendimiento_promedio_qq_ha", sa.Float(), nullable=True),
        sa.Column("activo", sa.Boolean(), nullable=False, server_default=sa.true()),
        _ts("created_at"),
        sa.CheckConstraint(
            "rendimiento_promedio_qq_ha IS NULL OR rendimiento_promedio_qq_ha > 0",
            name="ck_tipos_cultivo_rendimiento_positivo",
        ),
    )
    op.create_index(
        "uq_tipos_cultivo_nombre",
        "tipos_cultivo",
        [sa.text("lower(nombre_cultivo)")],
        unique=True,
    )

    op.create_table(
        "gestiones",
        _uuid_pk("id_gestion"),
        sa.Column("anio_gestion", sa.Integer(), nullable=False),
        sa.Column("nombre_gestion", sa.String(100), nullable=True),
        sa.Column("activo", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column(
            "activo_sistema", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        _ts("created_at"),
        sa.UniqueConstraint("anio_gestion", name="uq_gestiones_anio"),
        sa.CheckConstraint(
            "anio_gestion BETWEEN 2000 AND 2100", name="ck_gestiones_anio_rango"
        ),
    )
    # At most one row may be the system-active period
    op.create_index(
        "uq_gestiones_activo_sistema",
        "gestiones",
        ["activo_sistema"],
        unique=True,
        postgresql_where=sa.text("activo_sistema"),
        sqlite_where=sa.text("activo_sistema = 1"),
    )

    op.create_table(
        "ficha_inspeccion",
        _uuid_pk("id_ficha"),
        sa.Column("codigo_productor", sa.String(20), nullable=False),
        sa.Column("gestion", sa.Integer(), nullable=False),
        sa.Column("fecha_inspeccion", sa.Date(), nullable=False),
        sa.Column("inspector_interno", sa.String(200), nullable=False),
        sa.Column(
            "estado_ficha",
            sa.Enum(
                "borrador",
                "revision",
                "aprobado",
                "rechazado",
                name="estado_ficha",
                native_enum=False,
            ),
            nullable=False,
        ),
        sa.Column("comentarios_evaluacion", sa.Text(), nullable=True),
        sa.Column("created_by", sa.Uuid(), nullable=False),
        _ts("created_at"),
        _ts("updated_at"),
        sa.ForeignKeyConstraint(
            ["codigo_productor"], ["productores.codigo_productor"]
        ),
        sa.UniqueConstraint(
            "codigo_productor", "gestion", name="uq_ficha_productor_gestion"
        ),
    )
    op.create_index(
        "ix_ficha_inspeccion_codigo_productor", "ficha_inspeccion", ["codigo_productor"]
    )

    op.create_table(
        "detalle_cultivo_parcela",
        _uuid_pk("id_detalle"),
        sa.Column("id_ficha", sa.Uuid(), nullable=False),
        sa.Column("id_tipo_cultivo", sa.Uuid(), nullable=False),
        sa.Column("superficie_ha", sa.Float(), nullable=False),
        _ts("created_at"),
        sa.ForeignKeyConstraint(
            ["id_ficha"], ["ficha_inspeccion.id_ficha"], ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(
            ["id_tipo_cultivo"], ["tipos_cultivo.id_tipo_cultivo"]
        ),
    )
    op.create_index(
        "ix_detalle_cultivo_parcela_id_ficha", "detalle_cultivo_parcela", ["id_ficha"]
    )
    op.create_index(
        "ix_detalle_cultivo_parcela_id_tipo_cultivo",
        "detalle_cultivo_parcela",
        ["id_tipo_cultivo"],
    )

    op.create_table(
        "cosecha_ventas",
        _uuid_pk("id_cosecha"),
        sa.Column("id_ficha", sa.Uuid(), nullable=False),
        sa.Column("cosecha_estimada_qq", sa.Float(), nullable=False),
        sa.Column("produccion_real_mani", sa.Float(), nullable=False),
        _ts("created_at"),
        sa.ForeignKeyConstraint(
            ["id_ficha"], ["ficha_inspeccion.id_ficha"], ondelete="CASCADE"
        ),
    )
    op.create_index("ix_cosecha_ventas_id_ficha", "cosecha_ventas", ["id_ficha"])

    op.create_table(
        "cultivos_gestion",
        _uuid_pk("id_cultivo_gestion"),
        sa.Column("codigo_productor", sa.String(20), nullable=False),
        sa.Column("gestion", sa.Integer(), nullable=False),
        sa.Column("superficie_total", sa.Float(), nullable=False),
        sa.Column("produccion_estimada_mani", sa.Float(), nullable=False),
        sa.Column("produccion_real_mani", sa.Float(), nullable=False),
        sa.Column("cultivo_principal", sa.String(20), nullable=False),
        _ts("updated_at"),
        sa.UniqueConstraint(
            "codigo_productor", "gestion", name="uq_cultivos_gestion_productor"
        ),
    )

    op.create_table(
        "fichas_draft",
        _uuid_pk("id_draft"),
        sa.Column("codigo_productor", sa.String(20), nullable=False),
        sa.Column("gestion", sa.Integer(), nullable=False),
        sa.Column("created_by", sa.Uuid(), nullable=False),
        sa.Column("draft_data", sa.JSON(), nullable=False),
        sa.Column("schema_version", sa.Integer(), nullable=False),
        sa.Column("step_actual", sa.Integer(), nullable=False),
        _ts("created_at"),
        _ts("updated_at"),
        sa.UniqueConstraint(
            "codigo_productor",
            "gestion",
            "created_by",
            name="uq_fichas_draft_productor_gestion_usuario",
        ),
    )
    op.create_index("ix_fichas_draft_created_by", "fichas_draft", ["created_by"])


def downgrade() -> None:
    op.drop_table("fichas_draft")
    op.drop_table("cultivos_gestion")
    op.drop_table("cosecha_ventas")
    op.drop_table("detalle_cultivo_parcela")
    op.drop_table("ficha_inspeccion")
    op.drop_index("uq_gestiones_activo_sistema", table_name="gestiones")
    op.drop_table("gestiones")
    op.drop_index("uq_tipos_cultivo_nombre", table_name="tipos_cultivo")
    op.drop_table("tipos_cultivo")
    op.drop_table("productores")
    op.drop_index("uq_organizaciones_nombre_activo", table_name="organizaciones")
    op.drop_index("uq_organizaciones_abreviatura_activo", table_name="organizaciones")
    op.drop_table("organizaciones")
    op.drop_table("usuarios")
    op.drop_table("roles")
