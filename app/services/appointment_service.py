"""Appointment service for business logic."""

from datetime import UTC, date, datetime
from typing import Any

import structlog
from sqlalchemy import func, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    ConflictException,
    InvalidTransitionException,
    NotFoundException,
)
from app.core.permissions import Role
from app.models.appointment_history import appointment_status_history
from app.models.appointments import appointments
from app.models.doctors import doctors
from app.models.patients import patients
from app.schemas.accounts import DoctorAvailability
from app.schemas.appointments import (
    AppointmentEdit,
    AppointmentHistoryEntry,
    AppointmentRequest,
    AppointmentResponse,
    AppointmentSchedule,
    AppointmentStatistics,
    AppointmentStatus,
    DoctorAssignment,
    PersonSummary,
)
from app.services.appointment_workflow import (
    Action,
    Transition,
    check_doctor_invariant,
    check_source,
    get_transition,
)

logger = structlog.get_logger()


class AppointmentService:
    """Service for managing appointments."""

    def __init__(self, db: AsyncSession):
        """Initialize service with database session."""
        self.db = db

    async def _get_row(self, appointment_id: int, *conditions: Any) -> Any:
        """Fetch an appointment row, optionally restricted by extra conditions."""
        stmt = select(appointments).where(appointments.c.id == appointment_id, *conditions)
        result = await self.db.execute(stmt)
        return result.mappings().first()

    async def _exists(self, table: Any, row_id: int) -> bool:
        result = await self.db.execute(select(table.c.id).where(table.c.id == row_id))
        return result.first() is not None

    async def _record_history(
        self,
        appointment_id: int,
        from_statut: AppointmentStatus | None,
        to_statut: AppointmentStatus,
        action: Action,
        actor_role: Role,
        actor_id: int,
    ) -> None:
        """Append a status history row. Caller commits."""
        await self.db.execute(
            insert(appointment_status_history).values(
                appointment_id=appointment_id,
                from_statut=from_statut.value if from_statut else None,
                to_statut=to_statut.value,
                action=action.value,
                actor_role=actor_role.value,
                actor_id=actor_id,
            )
        )

    async def _create(
        self,
        transition: Transition,
        values: dict[str, Any],
        actor_role: Role,
        actor_id: int,
    ) -> AppointmentResponse:
        """Insert a new appointment in the transition's target status."""
        now = datetime.now(UTC)
        stmt = (
            insert(appointments)
            .values(**values, statut=transition.target.value, created_at=now, updated_at=now)
            .returning(appointments)
        )
        result = await self.db.execute(stmt)
        row = result.mappings().first()

        await self._record_history(
            row["id"], None, transition.target, transition.action, actor_role, actor_id
        )
        await self.db.commit()

        return AppointmentResponse.model_validate(dict(row))

    async def _apply(
        self,
        appointment_id: int,
        transition: Transition,
        actor_role: Role,
        actor_id: int,
        ownership: tuple = (),
        values: dict[str, Any] | None = None,
    ) -> AppointmentResponse:
        """
        Apply a guarded transition as a compare-and-swap write.

        The update only matches while the appointment still holds the status
        that was read, so a concurrent transition makes it match nothing.

        Args:
            appointment_id: Appointment to transition
            transition: Row of the transition table
            actor_role: Role recorded in the history
            actor_id: Account recorded in the history
            ownership: Extra conditions the caller must satisfy (404 otherwise)
            values: Extra columns written together with the status

        Returns:
            Updated appointment

        Raises:
            NotFoundException: If the appointment is missing or not the caller's
            InvalidTransitionException: If the current status is not a source
            AlreadyCancelledException: If cancelling a cancelled appointment
        """
        row = await self._get_row(appointment_id, *ownership)
        if not row:
            raise NotFoundException("Appointment not found")

        current = AppointmentStatus(row["statut"])
        target = check_source(transition, current)

        stmt = (
            update(appointments)
            .where(
                appointments.c.id == appointment_id,
                appointments.c.statut == current.value,
                appointments.c.statut.in_([s.value for s in transition.sources]),
                *ownership,
            )
            .values(**(values or {}), statut=target.value, updated_at=datetime.now(UTC))
            .returning(appointments)
        )
        result = await self.db.execute(stmt)
        updated = result.mappings().first()

        if not updated:
            await self.db.rollback()
            await self._raise_lost_race(appointment_id, transition, ownership)

        await self._record_history(
            appointment_id, current, target, transition.action, actor_role, actor_id
        )
        await self.db.commit()

        return AppointmentResponse.model_validate(dict(updated))

    async def _raise_lost_race(
        self, appointment_id: int, transition: Transition, ownership: tuple
    ) -> None:
        """Re-read an appointment whose conditional write matched nothing and explain why."""
        row = await self._get_row(appointment_id, *ownership)
        if not row:
            raise NotFoundException("Appointment not found")

        # Raises AlreadyCancelled or InvalidTransition when the status moved away
        check_source(transition, AppointmentStatus(row["statut"]))
        raise ConflictException("Appointment was modified concurrently, please retry")

    async def request_appointment(
        self, patient_id: int, data: AppointmentRequest
    ) -> AppointmentResponse:
        """
        Create an appointment request waiting for a secretary.

        Args:
            patient_id: ID of the requesting patient
            data: Requested date, time and symptoms

        Returns:
            Created appointment in status en_attente_secretaire
        """
        transition = get_transition(Action.REQUEST, Role.PATIENT)
        appointment = await self._create(
            transition,
            {
                "patient_id": patient_id,
                "docteur_id": None,
                "date": data.date,
                "heure": data.heure,
                "symptomes": data.symptomes,
            },
            Role.PATIENT,
            patient_id,
        )

        logger.info(
            "appointment_requested", appointment_id=appointment.id, patient_id=patient_id
        )
        return appointment

    async def _select_with_people(self, stmt: Any) -> list[AppointmentResponse]:
        """Run an appointment query, attaching patient and doctor names."""
        result = await self.db.execute(stmt)
        listed = []
        for row in result.mappings().all():
            appointment = {column.name: row[column] for column in appointments.c}
            appointment["patient"] = PersonSummary(
                id=row[appointments.c.patient_id],
                nom=row[patients.c.nom],
                prenom=row[patients.c.prenom],
            )
            if row[appointments.c.docteur_id] is not None:
                appointment["docteur"] = PersonSummary(
                    id=row[appointments.c.docteur_id],
                    nom=row[doctors.c.nom],
                    prenom=row[doctors.c.prenom],
                )
            listed.append(AppointmentResponse.model_validate(appointment))
        return listed

    def _people_query(self) -> Any:
        return select(
            appointments, patients.c.nom, patients.c.prenom, doctors.c.nom, doctors.c.prenom
        ).select_from(
            appointments.join(patients, appointments.c.patient_id == patients.c.id).outerjoin(
                doctors, appointments.c.docteur_id == doctors.c.id
            )
        )

    async def _list(self, *conditions: Any) -> list[AppointmentResponse]:
        stmt = (
            self._people_query()
            .where(*conditions)
            .order_by(appointments.c.date, appointments.c.heure, appointments.c.id)
        )
        return await self._select_with_people(stmt)

    async def list_for_patient(
        self, patient_id: int, statut: AppointmentStatus | None = None
    ) -> list[AppointmentResponse]:
        """List a patient's appointments ordered by date then time."""
        conditions = [appointments.c.patient_id == patient_id]
        if statut:
            conditions.append(appointments.c.statut == statut.value)
        return await self._list(*conditions)

    async def list_for_doctor(
        self, doctor_id: int, statut: AppointmentStatus | None = None
    ) -> list[AppointmentResponse]:
        """List appointments assigned to a doctor ordered by date then time."""
        conditions = [appointments.c.docteur_id == doctor_id]
        if statut:
            conditions.append(appointments.c.statut == statut.value)
        return await self._list(*conditions)

    async def cancel_by_patient(self, appointment_id: int, patient_id: int) -> AppointmentResponse:
        """
        Cancel one of the patient's own appointments.

        Raises:
            NotFoundException: If the appointment is missing or belongs to someone else
            AlreadyCancelledException: If it is already cancelled
        """
        appointment = await self._apply(
            appointment_id,
            get_transition(Action.CANCEL, Role.PATIENT),
            Role.PATIENT,
            patient_id,
            ownership=(appointments.c.patient_id == patient_id,),
        )
        logger.info(
            "appointment_cancelled",
            appointment_id=appointment_id,
            actor_role=Role.PATIENT.value,
            actor_id=patient_id,
        )
        return appointment

    async def list_requests(self) -> list[AppointmentResponse]:
        """List appointments waiting for a secretary, oldest request first."""
        stmt = (
            self._people_query()
            .where(appointments.c.statut == AppointmentStatus.REQUESTED.value)
            .order_by(appointments.c.created_at, appointments.c.id)
        )
        return await self._select_with_people(stmt)

    async def list_all(
        self,
        statut: AppointmentStatus | None = None,
        on_date: date | None = None,
    ) -> list[AppointmentResponse]:
        """List every appointment, optionally filtered by status and day."""
        conditions = []
        if statut:
            conditions.append(appointments.c.statut == statut.value)
        if on_date:
            conditions.append(appointments.c.date == on_date)
        return await self._list(*conditions)

    async def schedule_direct(
        self, secretary_id: int, data: AppointmentSchedule
    ) -> AppointmentResponse:
        """
        Create an appointment with a doctor already chosen.

        Raises:
            NotFoundException: If the patient or the doctor does not exist
        """
        transition = get_transition(Action.SCHEDULE, Role.SECRETARY)

        if not await self._exists(patients, data.patient_id):
            raise NotFoundException("Patient not found")
        if not await self._exists(doctors, data.docteur_id):
            raise NotFoundException("Doctor not found")

        appointment = await self._create(
            transition,
            {
                "patient_id": data.patient_id,
                "docteur_id": data.docteur_id,
                "date": data.date,
                "heure": data.heure,
                "symptomes": data.symptomes,
            },
            Role.SECRETARY,
            secretary_id,
        )

        logger.info(
            "appointment_scheduled",
            appointment_id=appointment.id,
            patient_id=data.patient_id,
            docteur_id=data.docteur_id,
            secretary_id=secretary_id,
        )
        return appointment

    async def assign_doctor(
        self, appointment_id: int, secretary_id: int, data: DoctorAssignment
    ) -> AppointmentResponse:
        """
        Assign a doctor to a requested appointment.

        Raises:
            NotFoundException: If the appointment or the doctor does not exist
            InvalidTransitionException: If the appointment is not waiting for a secretary
        """
        transition = get_transition(Action.ASSIGN, Role.SECRETARY)

        row = await self._get_row(appointment_id)
        if not row:
            raise NotFoundException("Appointment not found")
        check_source(transition, AppointmentStatus(row["statut"]))

        if not await self._exists(doctors, data.docteur_id):
            raise NotFoundException("Doctor not found")

        values: dict[str, Any] = {"docteur_id": data.docteur_id}
        if data.date is not None:
            values["date"] = data.date
        if data.heure is not None:
            values["heure"] = data.heure

        appointment = await self._apply(
            appointment_id, transition, Role.SECRETARY, secretary_id, values=values
        )

        logger.info(
            "appointment_assigned",
            appointment_id=appointment_id,
            docteur_id=data.docteur_id,
            secretary_id=secretary_id,
        )
        return appointment

    async def cancel_by_secretary(
        self, appointment_id: int, secretary_id: int
    ) -> AppointmentResponse:
        """Cancel any appointment that is not already cancelled."""
        appointment = await self._apply(
            appointment_id,
            get_transition(Action.CANCEL, Role.SECRETARY),
            Role.SECRETARY,
            secretary_id,
        )
        logger.info(
            "appointment_cancelled",
            appointment_id=appointment_id,
            actor_role=Role.SECRETARY.value,
            actor_id=secretary_id,
        )
        return appointment

    async def edit(
        self, appointment_id: int, secretary_id: int, data: AppointmentEdit
    ) -> AppointmentResponse:
        """
        Correct an appointment outside the transition table.

        Any combination of date, time, doctor and status may be changed. A
        status change is audited in the history and logged as a warning.

        Raises:
            NotFoundException: If the appointment or the new doctor does not exist
            ValidationException: If the result would be doctor-bound without a doctor
            InvalidTransitionException: If it would reopen a cancelled appointment
            ConflictException: If the appointment changed status meanwhile
        """
        row = await self._get_row(appointment_id)
        if not row:
            raise NotFoundException("Appointment not found")

        current = AppointmentStatus(row["statut"])
        new_statut = data.statut or current
        new_doctor = data.docteur_id if data.docteur_id is not None else row["docteur_id"]

        if data.docteur_id is not None and not await self._exists(doctors, data.docteur_id):
            raise NotFoundException("Doctor not found")

        if current is AppointmentStatus.CANCELLED and new_statut is not current:
            raise InvalidTransitionException("A cancelled appointment cannot be reopened")

        check_doctor_invariant(new_statut, new_doctor)

        values: dict[str, Any] = {"statut": new_statut.value, "updated_at": datetime.now(UTC)}
        if data.date is not None:
            values["date"] = data.date
        if data.heure is not None:
            values["heure"] = data.heure
        if data.docteur_id is not None:
            values["docteur_id"] = data.docteur_id

        stmt = (
            update(appointments)
            .where(
                appointments.c.id == appointment_id,
                appointments.c.statut == current.value,
            )
            .values(**values)
            .returning(appointments)
        )
        result = await self.db.execute(stmt)
        updated = result.mappings().first()

        if not updated:
            await self.db.rollback()
            raise ConflictException("Appointment was modified concurrently, please retry")

        if new_statut is not current:
            await self._record_history(
                appointment_id, current, new_statut, Action.EDIT, Role.SECRETARY, secretary_id
            )
            logger.warning(
                "appointment_status_overridden",
                appointment_id=appointment_id,
                from_statut=current.value,
                to_statut=new_statut.value,
                secretary_id=secretary_id,
            )

        await self.db.commit()

        logger.info("appointment_edited", appointment_id=appointment_id, secretary_id=secretary_id)
        return AppointmentResponse.model_validate(dict(updated))

    async def history(self, appointment_id: int) -> list[AppointmentHistoryEntry]:
        """
        Get the status history of an appointment, oldest first.

        Raises:
            NotFoundException: If the appointment does not exist
        """
        if not await self._exists(appointments, appointment_id):
            raise NotFoundException("Appointment not found")

        stmt = (
            select(appointment_status_history)
            .where(appointment_status_history.c.appointment_id == appointment_id)
            .order_by(appointment_status_history.c.created_at, appointment_status_history.c.id)
        )
        result = await self.db.execute(stmt)
        return [
            AppointmentHistoryEntry.model_validate(dict(row)) for row in result.mappings().all()
        ]

    async def statistics(self) -> AppointmentStatistics:
        """Count appointments per status, patients and doctors by availability."""
        result = await self.db.execute(
            select(appointments.c.statut, func.count()).group_by(appointments.c.statut)
        )
        per_status = {statut: count for statut, count in result.all()}

        result = await self.db.execute(
            select(doctors.c.statut, func.count()).group_by(doctors.c.statut)
        )
        per_availability = {statut: count for statut, count in result.all()}

        result = await self.db.execute(select(func.count()).select_from(patients))
        total_patients = result.scalar() or 0

        return AppointmentStatistics(
            total_rendez_vous=sum(per_status.values()),
            en_attente_secretaire=per_status.get(AppointmentStatus.REQUESTED.value, 0),
            en_attente_docteur=per_status.get(AppointmentStatus.PENDING_DOCTOR.value, 0),
            acceptes=per_status.get(AppointmentStatus.ACCEPTED.value, 0),
            refuses=per_status.get(AppointmentStatus.REFUSED.value, 0),
            annules=per_status.get(AppointmentStatus.CANCELLED.value, 0),
            total_patients=total_patients,
            total_docteurs=sum(per_availability.values()),
            docteurs_libres=per_availability.get(DoctorAvailability.FREE.value, 0),
            docteurs_occupes=per_availability.get(DoctorAvailability.BUSY.value, 0),
        )

    async def _decide(
        self, appointment_id: int, doctor_id: int, action: Action
    ) -> AppointmentResponse:
        appointment = await self._apply(
            appointment_id,
            get_transition(action, Role.DOCTOR),
            Role.DOCTOR,
            doctor_id,
            ownership=(appointments.c.docteur_id == doctor_id,),
        )
        logger.info(
            "appointment_accepted" if action is Action.ACCEPT else "appointment_refused",
            appointment_id=appointment_id,
            docteur_id=doctor_id,
        )
        return appointment

    async def accept(self, appointment_id: int, doctor_id: int) -> AppointmentResponse:
        """
        Accept an appointment assigned to this doctor.

        Raises:
            NotFoundException: If the appointment is not assigned to this doctor
            InvalidTransitionException: If it is not waiting for the doctor
        """
        return await self._decide(appointment_id, doctor_id, Action.ACCEPT)

    async def refuse(self, appointment_id: int, doctor_id: int) -> AppointmentResponse:
        """
        Refuse an appointment assigned to this doctor.

        Raises:
            NotFoundException: If the appointment is not assigned to this doctor
            InvalidTransitionException: If it is not waiting for the doctor
        """
        return await self._decide(appointment_id, doctor_id, Action.REFUSE)

    async def calendar(
        self,
        doctor_id: int,
        date_debut: date | None = None,
        date_fin: date | None = None,
    ) -> list[AppointmentResponse]:
        """List a doctor's accepted appointments, optionally within a date range."""
        conditions = [
            appointments.c.docteur_id == doctor_id,
            appointments.c.statut == AppointmentStatus.ACCEPTED.value,
        ]
        if date_debut:
            conditions.append(appointments.c.date >= date_debut)
        if date_fin:
            conditions.append(appointments.c.date <= date_fin)
        return await self._list(*conditions)
