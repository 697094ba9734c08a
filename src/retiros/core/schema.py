"""
Table definitions for the retreat ledger database.

Timestamps are stored as text. Rows written by older releases use SQLite's
"YYYY-MM-DD HH:MM:SS" form; current writers always emit RFC 3339.
"""

from sqlalchemy import (
    CheckConstraint,
    Column,
    Float,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Table,
    Text,
    text,
)

metadata = MetaData()

_SQLITE_NOW = text("(datetime('now'))")

categorias = Table(
    "categorias",
    metadata,
    Column("id", Text, primary_key=True, nullable=False),
    Column("nombre", Text, nullable=False),
    Column("tipo", Text, nullable=False),
    Column("color", Text, nullable=False),
    Column("created_at", Text, nullable=False, server_default=_SQLITE_NOW),
    Column("updated_at", Text, nullable=False, server_default=_SQLITE_NOW),
    CheckConstraint("tipo IN ('Ingreso', 'Gasto')", name="ck_categorias_tipo"),
    CheckConstraint(
        "LENGTH(color) = 7 AND color LIKE '#%'", name="ck_categorias_color"
    ),
)

Index("idx_categorias_tipo", categorias.c.tipo)
Index("idx_categorias_nombre", categorias.c.nombre)

retiros = Table(
    "retiros",
    metadata,
    Column("id", Text, primary_key=True, nullable=False),
    Column("nombre", Text, nullable=False),
    Column("descripcion", Text, nullable=True),
    Column("fecha_inicio", Text, nullable=False),
    Column("fecha_fin", Text, nullable=False),
    Column("ubicacion", Text, nullable=True),
    Column("numero_participantes", Integer, nullable=False),
    Column(
        "estado",
        Text,
        nullable=False,
        server_default=text("'Planificacion'"),
    ),
    Column("created_at", Text, nullable=False, server_default=_SQLITE_NOW),
    Column("updated_at", Text, nullable=False, server_default=_SQLITE_NOW),
    CheckConstraint(
        "numero_participantes > 0", name="ck_retiros_numero_participantes"
    ),
    CheckConstraint(
        "estado IN ('Planificacion', 'Activo', 'Finalizado')",
        name="ck_retiros_estado",
    ),
)

Index("idx_retiros_estado", retiros.c.estado)
Index("idx_retiros_fecha_inicio", retiros.c.fecha_inicio)
Index("idx_retiros_nombre", retiros.c.nombre)

transacciones = Table(
    "transacciones",
    metadata,
    Column("id", Text, primary_key=True, nullable=False),
    Column(
        "retiro_id",
        Text,
        ForeignKey("retiros.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column(
        "categoria_id",
        Text,
        ForeignKey("categorias.id", ondelete="RESTRICT"),
        nullable=False,
    ),
    Column("tipo", Text, nullable=False),
    Column("monto", Float, nullable=False),
    Column("descripcion", Text, nullable=False),
    Column("fecha", Text, nullable=False),
    Column("created_at", Text, nullable=False, server_default=_SQLITE_NOW),
    Column("updated_at", Text, nullable=False, server_default=_SQLITE_NOW),
    CheckConstraint("tipo IN ('Ingreso', 'Gasto')", name="ck_transacciones_tipo"),
    CheckConstraint("monto > 0", name="ck_transacciones_monto"),
)

Index("idx_transacciones_retiro_id", transacciones.c.retiro_id)
Index("idx_transacciones_categoria_id", transacciones.c.categoria_id)
Index("idx_transacciones_tipo", transacciones.c.tipo)
Index("idx_transacciones_fecha", transacciones.c.fecha)
Index("idx_transacciones_monto", transacciones.c.monto)
Index(
    "idx_transacciones_retiro_tipo",
    transacciones.c.retiro_id,
    transacciones.c.tipo,
)
