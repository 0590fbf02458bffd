"""
Appointment lifecycle.

Owns the status state machine and who may trigger each transition. Each
transition locks the appointment row, applies exactly one status change,
commits, and then dispatches a notification.

    SCHEDULED   -> CONFIRMED | CANCELLED | NO_SHOW
    CONFIRMED   -> IN_PROGRESS | CANCELLED | NO_SHOW
    IN_PROGRESS -> COMPLETED

COMPLETED, CANCELLED and NO_SHOW are terminal.
"""

import logging
from datetime import datetime
from typing import Dict, FrozenSet, Optional

from fastapi import BackgroundTasks
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from core.constants import (
    STATUS_SCHEDULED, STATUS_CONFIRMED, STATUS_IN_PROGRESS,
    STATUS_COMPLETED, STATUS_CANCELLED, STATUS_NO_SHOW,
    TERMINAL_STATUSES,
)
from core.exceptions import ForbiddenTransitionError, InvalidTransitionError, NotFoundError
from models import Appointment
from services.notification_service import NotificationService
from shared_types import Actor, CenterStaffActor, PatientActor
from utils.datetime_utils import clinic_now, ensure_clinic_tz

logger = logging.getLogger(__name__)


ALLOWED_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    STATUS_SCHEDULED: frozenset({STATUS_CONFIRMED, STATUS_CANCELLED, STATUS_NO_SHOW}),
    STATUS_CONFIRMED: frozenset({STATUS_IN_PROGRESS, STATUS_CANCELLED, STATUS_NO_SHOW}),
    STATUS_IN_PROGRESS: frozenset({STATUS_COMPLETED}),
}


class AppointmentLifecycle:
    """
    Service class for appointment status transitions.
    """

    @staticmethod
    def can_transition(current_status: str, target_status: str) -> bool:
        """Check whether `current_status -> target_status` is a declared edge."""
        return target_status in ALLOWED_TRANSITIONS.get(current_status, frozenset())

    @staticmethod
    def validate_transition(appointment: Appointment, target_status: str, now: datetime) -> None:
        """
        Validate a transition against the state machine and the time rules.

        Pure function - no database access, nothing is mutated.

        Raises:
            InvalidTransitionError: If the transition is not allowed now
        """
        current_status = appointment.status

        if current_status in TERMINAL_STATUSES:
            raise InvalidTransitionError(
                f"Appointment is already {current_status}",
                current_status=current_status,
                target_status=target_status,
            )

        if not AppointmentLifecycle.can_transition(current_status, target_status):
            raise InvalidTransitionError(
                f"Cannot change appointment from {current_status} to {target_status}",
                current_status=current_status,
                target_status=target_status,
            )

        if target_status == STATUS_COMPLETED and now < appointment.start_datetime:
            raise InvalidTransitionError(
                "An appointment cannot be completed before it starts",
                current_status=current_status,
                target_status=target_status,
            )

        if target_status == STATUS_NO_SHOW and now < appointment.end_datetime:
            raise InvalidTransitionError(
                "An appointment can only be marked as no-show after it has ended",
                current_status=current_status,
                target_status=target_status,
            )

    @staticmethod
    def check_permission(actor: Actor, appointment: Appointment, target_status: str) -> None:
        """
        Check that the actor may trigger the transition.

        Patients may only cancel their own appointments. Center staff may
        trigger every transition on their center's appointments.

        Raises:
            ForbiddenTransitionError: If the actor may not trigger it
        """
        if isinstance(actor, PatientActor):
            if appointment.patient_id != actor.patient_id:
                raise ForbiddenTransitionError(
                    "Patients may only change their own appointments",
                    appointment_id=appointment.id,
                )
            if target_status != STATUS_CANCELLED:
                raise ForbiddenTransitionError(
                    "Patients may only cancel appointments",
                    appointment_id=appointment.id,
                    target_status=target_status,
                )
            return

        if isinstance(actor, CenterStaffActor):
            if appointment.center_id != actor.center_id:
                raise ForbiddenTransitionError(
                    "Staff may only change appointments of their own center",
                    appointment_id=appointment.id,
                )
            return

        raise TypeError(f"Unsupported actor: {actor!r}")

    @staticmethod
    def transition(
        db: Session,
        actor: Actor,
        appointment_id: int,
        target_status: str,
        now: Optional[datetime] = None,
        background_tasks: Optional[BackgroundTasks] = None
    ) -> Appointment:
        """
        Move an appointment to `target_status`.

        Args:
            db: Database session
            actor: Who is triggering the transition
            appointment_id: Appointment ID
            target_status: Desired status
            now: Reference time; read once from the clinic clock if omitted

        Returns:
            The updated appointment

        Raises:
            NotFoundError: If the appointment does not exist
            ForbiddenTransitionError: If the actor may not trigger the transition
            InvalidTransitionError: If the state machine or time rules forbid it,
                or another operation holds the row
        """
        reference_now = ensure_clinic_tz(now or clinic_now())
        assert reference_now is not None

        # Lock the row so concurrent transitions on it are serialized
        try:
            appointment = db.query(Appointment).filter(
                Appointment.id == appointment_id
            ).populate_existing().with_for_update(nowait=True).first()
        except OperationalError:
            db.rollback()
            raise InvalidTransitionError(
                "This appointment is being modified by another operation, please retry",
                appointment_id=appointment_id,
            )

        if not appointment:
            raise NotFoundError("Appointment not found", appointment_id=appointment_id)

        AppointmentLifecycle.check_permission(actor, appointment, target_status)
        AppointmentLifecycle.validate_transition(appointment, target_status, reference_now)

        previous_status = appointment.status
        appointment.status = target_status
        if target_status == STATUS_CANCELLED:
            appointment.cancelled_at = reference_now

        db.commit()
        logger.info(
            f"Appointment {appointment.id} moved from {previous_status} to {target_status} "
            f"by {type(actor).__name__}"
        )

        NotificationService.notify(appointment, target_status.lower(), background_tasks=background_tasks)
        return appointment

    @staticmethod
    def confirm(
        db: Session,
        actor: Actor,
        appointment_id: int,
        now: Optional[datetime] = None,
        background_tasks: Optional[BackgroundTasks] = None
    ) -> Appointment:
        return AppointmentLifecycle.transition(db, actor, appointment_id, STATUS_CONFIRMED, now, background_tasks)

    @staticmethod
    def start(
        db: Session,
        actor: Actor,
        appointment_id: int,
        now: Optional[datetime] = None,
        background_tasks: Optional[BackgroundTasks] = None
    ) -> Appointment:
        return AppointmentLifecycle.transition(db, actor, appointment_id, STATUS_IN_PROGRESS, now, background_tasks)

    @staticmethod
    def complete(
        db: Session,
        actor: Actor,
        appointment_id: int,
        now: Optional[datetime] = None,
        background_tasks: Optional[BackgroundTasks] = None
    ) -> Appointment:
        return AppointmentLifecycle.transition(db, actor, appointment_id, STATUS_COMPLETED, now, background_tasks)

    @staticmethod
    def mark_no_show(
        db: Session,
        actor: Actor,
        appointment_id: int,
        now: Optional[datetime] = None,
        background_tasks: Optional[BackgroundTasks] = None
    ) -> Appointment:
        return AppointmentLifecycle.transition(db, actor, appointment_id, STATUS_NO_SHOW, now, background_tasks)

    @staticmethod
    def cancel(
        db: Session,
        actor: Actor,
        appointment_id: int,
        now: Optional[datetime] = None,
        background_tasks: Optional[BackgroundTasks] = None
    ) -> Appointment:
        return AppointmentLifecycle.transition(db, actor, appointment_id, STATUS_CANCELLED, now, background_tasks)
