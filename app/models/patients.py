"""Patient accounts table using SQLAlchemy Core."""

from sqlalchemy import Column, Date, DateTime, Integer, String, Table, func

from app.models.base import metadata

patients = Table(
    "patients",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("nom", String(100), nullable=False),
    Column("prenom", String(100), nullable=False),
    Column("email", String(150), nullable=False, unique=True, index=True),
    Column("password_hash", String(255), nullable=False),
    Column("telephone", String(20), nullable=True),
    Column("date_naissance", Date, nullable=True),
    # Audit
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
)
