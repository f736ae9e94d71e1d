"""Doctor accounts table using SQLAlchemy Core."""

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Integer,
    String,
    Table,
    func,
    text,
)

from app.models.base import metadata

doctors = Table(
    "doctors",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("nom", String(100), nullable=False),
    Column("prenom", String(100), nullable=False),
    Column("email", String(150), nullable=False, unique=True, index=True),
    Column("password_hash", String(255), nullable=False),
    Column("telephone", String(20), nullable=True),
    Column("specialite", String(100), nullable=True, index=True),
    # Availability, set only by the doctor
    Column("statut", String(10), nullable=False, server_default=text("'libre'")),
    # Audit
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    CheckConstraint("statut IN ('libre', 'occupe')", name="doctors_statut_check"),
)
