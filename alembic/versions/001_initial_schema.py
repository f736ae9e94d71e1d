"""Initial schema: role account tables, appointments and status history

Revision ID: 001
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _account_columns() -> list[sa.Column]:
    """Columns shared by every role table."""
    return [
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("nom", sa.String(100), nullable=False),
        sa.Column("prenom", sa.String(100), nullable=False),
        sa.Column("email", sa.String(150), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("telephone", sa.String(20), nullable=True),
    ]


def _audit_columns() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    ]


def upgrade() -> None:
    """Create account, appointment and history tables."""

    # ===================================================================
    # ACCOUNTS - one table per role
    # ===================================================================
    op.create_table(
        "admins",
        *_account_columns(),
        # Unique and always TRUE: a second admin row cannot be inserted
        sa.Column(
            "singleton",
            sa.Boolean(),
            nullable=False,
            unique=True,
            server_default=sa.true(),
        ),
        *_audit_columns(),
    )

    op.create_table(
        "patients",
        *_account_columns(),
        sa.Column("date_naissance", sa.Date(), nullable=True),
        *_audit_columns(),
    )

    op.create_table(
        "doctors",
        *_account_columns(),
        sa.Column("specialite", sa.String(100), nullable=True),
        sa.Column("statut", sa.String(10), nullable=False, server_default=sa.text("'libre'")),
        *_audit_columns(),
        sa.CheckConstraint("statut IN ('libre', 'occupe')", name="doctors_statut_check"),
    )
    op.create_index("ix_doctors_specialite", "doctors", ["specialite"])

    op.create_table(
        "secretaries",
        *_account_columns(),
        *_audit_columns(),
    )

    for table in ("admins", "patients", "doctors", "secretaries"):
        op.create_index(f"ix_{table}_email", table, ["email"], unique=True)

    # ===================================================================
    # APPOINTMENTS
    # ===================================================================
    op.create_table(
        "appointments",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "patient_id",
            sa.Integer(),
            sa.ForeignKey("patients.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "docteur_id",
            sa.Integer(),
            sa.ForeignKey("doctors.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("heure", sa.String(5), nullable=False),
        sa.Column("symptomes", sa.Text(), nullable=True),
        sa.Column(
            "statut",
            sa.String(30),
            nullable=False,
            server_default=sa.text("'en_attente_secretaire'"),
        ),
        *_audit_columns(),
        sa.CheckConstraint(
            "statut IN ('en_attente_secretaire', 'en_attente_docteur', "
            "'accepte', 'refuse', 'annule')",
            name="appointments_statut_check",
        ),
        sa.CheckConstraint(
            "docteur_id IS NOT NULL OR statut IN ('en_attente_secretaire', 'annule')",
            name="appointments_doctor_required_check",
        ),
    )
    op.create_index("ix_appointments_patient_id", "appointments", ["patient_id"])
    op.create_index("ix_appointments_docteur_id", "appointments", ["docteur_id"])
    op.create_index("ix_appointments_statut", "appointments", ["statut"])

    # ===================================================================
    # STATUS HISTORY - append only
    # ===================================================================
    op.create_table(
        "appointment_status_history",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "appointment_id",
            sa.Integer(),
            sa.ForeignKey("appointments.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("from_statut", sa.String(30), nullable=True),
        sa.Column("to_statut", sa.String(30), nullable=False),
        sa.Column("action", sa.String(20), nullable=False),
        sa.Column("actor_role", sa.String(20), nullable=False),
        sa.Column("actor_id", sa.Integer(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_index(
        "ix_appointment_status_history_appointment_id",
        "appointment_status_history",
        ["appointment_id"],
    )


def downgrade() -> None:
    """Drop every table in reverse dependency order."""
    op.drop_table("appointment_status_history")
    op.drop_table("appointments")
    op.drop_table("secretaries")
    op.drop_table("doctors")
    op.drop_table("patients")
    op.drop_table("admins")
