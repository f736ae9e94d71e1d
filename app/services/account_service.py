"""Account service: the four role partitions and their lifecycle."""

from datetime import UTC, datetime
from typing import Any

import structlog
from sqlalchemy import Table, case, delete, func, insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import AuthorizationException, ConflictException, NotFoundException
from app.core.permissions import Role
from app.core.security import get_password_hash
from app.models.admins import admins
from app.models.appointment_history import appointment_status_history
from app.models.appointments import appointments
from app.models.doctors import doctors
from app.models.patients import patients
from app.models.secretaries import secretaries
from app.schemas.accounts import (
    AccountCreate,
    DoctorAvailability,
    DoctorCreate,
    PatientCreate,
)
from app.schemas.appointments import AppointmentStatus
from app.services.appointment_workflow import DOCTOR_REQUIRED, Action

logger = structlog.get_logger()

ACCOUNT_TABLES: dict[Role, Table] = {
    Role.ADMIN: admins,
    Role.PATIENT: patients,
    Role.DOCTOR: doctors,
    Role.SECRETARY: secretaries,
}

# Columns that never leave the service
_PRIVATE_COLUMNS = frozenset({"password_hash", "singleton"})


def to_profile(role: Role, row: Any) -> dict:
    """Convert an account row into a public profile dict."""
    profile = {key: value for key, value in dict(row).items() if key not in _PRIVATE_COLUMNS}
    profile["role"] = role.value
    return profile


class AccountService:
    """Service for account operations."""

    def __init__(self, db: AsyncSession):
        """Initialize service with database session."""
        self.db = db

    async def get_account(self, role: Role, account_id: int) -> dict | None:
        """Get an account profile by id within a role partition."""
        table = ACCOUNT_TABLES[role]
        result = await self.db.execute(select(table).where(table.c.id == account_id))
        row = result.mappings().first()
        return to_profile(role, row) if row else None

    async def get_by_email(self, role: Role, email: str) -> dict | None:
        """Get a full account row, password hash included, by email."""
        table = ACCOUNT_TABLES[role]
        result = await self.db.execute(select(table).where(table.c.email == email))
        row = result.mappings().first()
        return dict(row) if row else None

    async def exists(self, role: Role, account_id: int) -> bool:
        """Check whether an account exists."""
        table = ACCOUNT_TABLES[role]
        result = await self.db.execute(select(table.c.id).where(table.c.id == account_id))
        return result.first() is not None

    async def _insert_account(self, role: Role, values: dict[str, Any]) -> dict:
        """Insert an account row and return its profile."""
        table = ACCOUNT_TABLES[role]
        try:
            result = await self.db.execute(insert(table).values(**values).returning(table))
            row = result.mappings().first()
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise ConflictException("This email is already in use") from e

        logger.info("account_created", role=role.value, account_id=row["id"])
        return to_profile(role, row)

    @staticmethod
    def _account_values(data: AccountCreate) -> dict[str, Any]:
        """Build insert values shared by every role."""
        return {
            "nom": data.nom,
            "prenom": data.prenom,
            "email": data.email,
            "password_hash": get_password_hash(data.mot_de_passe),
            "telephone": data.telephone,
        }

    async def register_admin(self, data: AccountCreate) -> dict:
        """
        Register the one and only administrator.

        Raises:
            AuthorizationException: If an administrator already exists
        """
        count_result = await self.db.execute(select(func.count()).select_from(admins))
        if (count_result.scalar() or 0) > 0:
            raise AuthorizationException(
                "An administrator already exists. Admin registration is closed."
            )

        values = self._account_values(data)
        values["singleton"] = True

        try:
            result = await self.db.execute(insert(admins).values(**values).returning(admins))
            row = result.mappings().first()
            await self.db.commit()
        except IntegrityError as e:
            # Only a concurrent registration can collide here
            await self.db.rollback()
            raise AuthorizationException(
                "An administrator already exists. Admin registration is closed."
            ) from e

        logger.info("admin_registered", account_id=row["id"])
        return to_profile(Role.ADMIN, row)

    async def register_patient(self, data: PatientCreate) -> dict:
        """Register a patient account."""
        values = self._account_values(data)
        values["date_naissance"] = data.date_naissance
        return await self._insert_account(Role.PATIENT, values)

    async def create_doctor(self, data: DoctorCreate) -> dict:
        """Create a doctor account. New doctors start free."""
        values = self._account_values(data)
        values["specialite"] = data.specialite
        values["statut"] = DoctorAvailability.FREE.value
        return await self._insert_account(Role.DOCTOR, values)

    async def create_secretary(self, data: AccountCreate) -> dict:
        """Create a secretary account."""
        return await self._insert_account(Role.SECRETARY, self._account_values(data))

    async def list_accounts(self, role: Role) -> list[dict]:
        """List all accounts of a role, oldest first."""
        table = ACCOUNT_TABLES[role]
        result = await self.db.execute(select(table).order_by(table.c.id))
        return [to_profile(role, row) for row in result.mappings().all()]

    async def doctor_directory(self) -> dict:
        """List doctors, free ones first, with availability counts."""
        free_first = case((doctors.c.statut == DoctorAvailability.FREE.value, 0), else_=1)
        result = await self.db.execute(
            select(doctors).order_by(free_first, doctors.c.nom, doctors.c.prenom)
        )
        docteurs = [to_profile(Role.DOCTOR, row) for row in result.mappings().all()]
        libres = sum(1 for d in docteurs if d["statut"] == DoctorAvailability.FREE.value)

        return {
            "total": len(docteurs),
            "libres": libres,
            "occupes": len(docteurs) - libres,
            "docteurs": docteurs,
        }

    async def set_availability(self, doctor_id: int, statut: DoctorAvailability) -> dict:
        """
        Set a doctor's availability.

        Raises:
            NotFoundException: If the doctor does not exist
        """
        stmt = (
            update(doctors)
            .where(doctors.c.id == doctor_id)
            .values(statut=statut.value, updated_at=datetime.now(UTC))
            .returning(doctors)
        )
        result = await self.db.execute(stmt)
        row = result.mappings().first()
        await self.db.commit()

        if not row:
            raise NotFoundException("Doctor not found")

        logger.info("doctor_availability_changed", doctor_id=doctor_id, statut=statut.value)
        return to_profile(Role.DOCTOR, row)

    async def delete_doctor(self, doctor_id: int, admin_id: int) -> int:
        """
        Delete a doctor without orphaning their appointments.

        Appointments in a doctor-bound status go back to the secretary queue;
        every appointment loses its doctor reference.

        Returns:
            Number of appointments that were unassigned

        Raises:
            NotFoundException: If the doctor does not exist
        """
        if not await self.exists(Role.DOCTOR, doctor_id):
            raise NotFoundException("Doctor not found")

        now = datetime.now(UTC)
        bound_statuses = [status.value for status in DOCTOR_REQUIRED]

        result = await self.db.execute(
            select(appointments.c.id, appointments.c.statut).where(
                appointments.c.docteur_id == doctor_id,
                appointments.c.statut.in_(bound_statuses),
            )
        )
        requeued = result.all()

        await self.db.execute(
            update(appointments)
            .where(
                appointments.c.docteur_id == doctor_id,
                appointments.c.statut.in_(bound_statuses),
            )
            .values(
                docteur_id=None,
                statut=AppointmentStatus.REQUESTED.value,
                updated_at=now,
            )
        )
        await self.db.execute(
            update(appointments)
            .where(appointments.c.docteur_id == doctor_id)
            .values(docteur_id=None, updated_at=now)
        )

        if requeued:
            await self.db.execute(
                insert(appointment_status_history),
                [
                    {
                        "appointment_id": row.id,
                        "from_statut": row.statut,
                        "to_statut": AppointmentStatus.REQUESTED.value,
                        "action": Action.UNASSIGN.value,
                        "actor_role": Role.ADMIN.value,
                        "actor_id": admin_id,
                    }
                    for row in requeued
                ],
            )

        await self.db.execute(delete(doctors).where(doctors.c.id == doctor_id))
        await self.db.commit()

        logger.info("doctor_deleted", doctor_id=doctor_id, requeued=len(requeued))
        return len(requeued)

    async def delete_secretary(self, secretary_id: int) -> None:
        """
        Delete a secretary account.

        Raises:
            NotFoundException: If the secretary does not exist
        """
        result = await self.db.execute(
            delete(secretaries).where(secretaries.c.id == secretary_id).returning(secretaries.c.id)
        )
        deleted = result.first()
        await self.db.commit()

        if deleted is None:
            raise NotFoundException("Secretary not found")

        logger.info("secretary_deleted", secretary_id=secretary_id)
