"""Append-only appointment status history using SQLAlchemy Core."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Table, func

from app.models.base import metadata

appointment_status_history = Table(
    "appointment_status_history",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "appointment_id",
        Integer,
        ForeignKey("appointments.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    # NULL when the row records the creation
    Column("from_statut", String(30), nullable=True),
    Column("to_statut", String(30), nullable=False),
    Column("action", String(20), nullable=False),
    Column("actor_role", String(20), nullable=False),
    Column("actor_id", Integer, nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
)
