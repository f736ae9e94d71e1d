"""Appointments table model using SQLAlchemy Core."""

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Table,
    Text,
    func,
    text,
)

from app.models.base import metadata

# Appointments table
appointments = Table(
    "appointments",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    # Ownership / references
    Column(
        "patient_id",
        Integer,
        ForeignKey("patients.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    Column(
        "docteur_id",
        Integer,
        ForeignKey("doctors.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    ),
    # Appointment details
    Column("date", Date, nullable=False),
    Column("heure", String(5), nullable=False),
    Column("symptomes", Text, nullable=True),
    # Status management
    Column(
        "statut",
        String(30),
        nullable=False,
        server_default=text("'en_attente_secretaire'"),
        index=True,
    ),
    # Audit fields
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    # Constraints
    CheckConstraint(
        "statut IN ('en_attente_secretaire', 'en_attente_docteur', 'accepte', 'refuse', 'annule')",
        name="appointments_statut_check",
    ),
    CheckConstraint(
        "docteur_id IS NOT NULL OR statut IN ('en_attente_secretaire', 'annule')",
        name="appointments_doctor_required_check",
    ),
)
