"""Appointment status state machine.

The transition table below is the single source of truth for which role
may move an appointment between which states. ``AppointmentService``
consults it before every conditional write; the secretary override is
not part of it.
"""

from dataclasses import dataclass
from enum import Enum

from app.core.exceptions import (
    AlreadyCancelledException,
    AuthorizationException,
    InvalidTransitionException,
    ValidationException,
)
from app.core.permissions import Role
from app.schemas.appointments import AppointmentStatus


class Action(str, Enum):
    """Workflow actions, also recorded in the status history."""

    REQUEST = "request"
    SCHEDULE = "schedule"
    ASSIGN = "assign"
    ACCEPT = "accept"
    REFUSE = "refuse"
    CANCEL = "cancel"
    EDIT = "edit"
    UNASSIGN = "unassign"


@dataclass(frozen=True)
class Transition:
    """One row of the transition table. Empty sources means creation."""

    action: Action
    sources: frozenset[AppointmentStatus]
    target: AppointmentStatus
    actors: frozenset[Role]


# Statuses that require an assigned doctor
DOCTOR_REQUIRED = frozenset(
    {
        AppointmentStatus.PENDING_DOCTOR,
        AppointmentStatus.ACCEPTED,
        AppointmentStatus.REFUSED,
    }
)

TRANSITIONS: dict[Action, Transition] = {
    Action.REQUEST: Transition(
        Action.REQUEST,
        frozenset(),
        AppointmentStatus.REQUESTED,
        frozenset({Role.PATIENT}),
    ),
    Action.SCHEDULE: Transition(
        Action.SCHEDULE,
        frozenset(),
        AppointmentStatus.PENDING_DOCTOR,
        frozenset({Role.SECRETARY}),
    ),
    Action.ASSIGN: Transition(
        Action.ASSIGN,
        frozenset({AppointmentStatus.REQUESTED}),
        AppointmentStatus.PENDING_DOCTOR,
        frozenset({Role.SECRETARY}),
    ),
    Action.ACCEPT: Transition(
        Action.ACCEPT,
        frozenset({AppointmentStatus.PENDING_DOCTOR}),
        AppointmentStatus.ACCEPTED,
        frozenset({Role.DOCTOR}),
    ),
    Action.REFUSE: Transition(
        Action.REFUSE,
        frozenset({AppointmentStatus.PENDING_DOCTOR}),
        AppointmentStatus.REFUSED,
        frozenset({Role.DOCTOR}),
    ),
    Action.CANCEL: Transition(
        Action.CANCEL,
        frozenset(set(AppointmentStatus) - {AppointmentStatus.CANCELLED}),
        AppointmentStatus.CANCELLED,
        frozenset({Role.PATIENT, Role.SECRETARY}),
    ),
}


def get_transition(action: Action, actor: Role) -> Transition:
    """
    Look up the transition for an action and check the actor's role.

    Raises:
        AuthorizationException: If the role may not perform the action
        ValueError: If the action has no table entry (EDIT, UNASSIGN)
    """
    try:
        transition = TRANSITIONS[action]
    except KeyError:
        raise ValueError(f"{action.value} is not a guarded transition")

    if actor not in transition.actors:
        raise AuthorizationException(f"Role {actor.value} cannot {action.value} an appointment")

    return transition


def check_source(transition: Transition, current: AppointmentStatus) -> AppointmentStatus:
    """
    Check that an appointment in ``current`` may take the transition.

    Returns:
        The resulting status

    Raises:
        AlreadyCancelledException: If cancelling a cancelled appointment
        InvalidTransitionException: If current is not an allowed source
    """
    if current in transition.sources:
        return transition.target

    if transition.action is Action.CANCEL and current is AppointmentStatus.CANCELLED:
        raise AlreadyCancelledException()

    raise InvalidTransitionException(
        f"Cannot {transition.action.value} this appointment. Current status: {current.value}"
    )


def check_doctor_invariant(statut: AppointmentStatus, docteur_id: int | None) -> None:
    """Reject a doctor-bound status on an appointment without a doctor."""
    if statut in DOCTOR_REQUIRED and docteur_id is None:
        raise ValidationException(f"Status {statut.value} requires an assigned doctor")
