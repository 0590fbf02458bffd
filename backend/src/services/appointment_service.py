"""
Appointment service for shared appointment business logic.

This module contains the booking, editing and listing logic for
appointments. Bookings and edits validate linkage first, then the time
range, then re-check conflicts inside the write transaction while holding
the practitioner's and the patient's row locks and schedule_version tokens.
"""

import logging
from bisect import bisect_left
from datetime import datetime, date as date_type, time
from typing import Dict, List, Optional, Tuple, Type, Union

from fastapi import BackgroundTasks
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from core.constants import APPOINTMENT_TYPES, EVENT_CREATED, EVENT_UPDATED, STATUS_SCHEDULED
from core.exceptions import (
    InvalidTimeRangeError, InvalidTransitionError, NotFoundError, SchedulingError, SlotConflictError
)
from models import Appointment, CenterPatientLink, Patient, Practitioner
from services.appointment_lifecycle import AppointmentLifecycle
from services.availability_service import AvailabilityService
from services.linkage_service import LinkageService
from services.notification_service import NotificationService
from shared_types import (
    Actor, AppointmentRequest, CenterAppointmentRow, CenterStaffActor, PatientActor
)
from utils.datetime_utils import clinic_now, ensure_clinic_tz

logger = logging.getLogger(__name__)


class AppointmentService:
    """
    Service class for appointment operations.

    Contains business logic for appointment booking, editing and listing
    that is shared across the patient and center-staff endpoints.
    """

    @staticmethod
    def book(
        db: Session,
        actor: Actor,
        request: AppointmentRequest,
        now: Optional[datetime] = None,
        background_tasks: Optional[BackgroundTasks] = None
    ) -> Appointment:
        """
        Book a new appointment.

        Validation order (first failure wins): linkage, time range, then
        conflicts. Nothing is written unless every check passes.

        Args:
            db: Database session
            actor: Patient booking for themselves, or center staff
            request: Booking fields
            now: Reference time; read once from the clinic clock if omitted
            background_tasks: Request's task queue; webhook delivery runs there
                after the response when given

        Returns:
            The created appointment (status SCHEDULED)

        Raises:
            UnauthorizedLinkageError: If the combination is outside the permitted set
            InconsistentLinkageError: If a fixed patient's linkage is broken
            InvalidTimeRangeError: If the interval is invalid or in the past
            SlotConflictError: If the interval is taken or a concurrent booking won
        """
        reference_now = ensure_clinic_tz(now or clinic_now())
        assert reference_now is not None

        try:
            LinkageService.validate_booking_linkage(
                db, actor, request.center_id, request.patient_id, request.practitioner_id
            )
        except SchedulingError as e:
            logger.warning(f"Booking rejected for patient {request.patient_id}: {e}")
            raise

        day, start_time, end_time = AppointmentService._validate_time_range(request, reference_now)
        AppointmentService._validate_type(request.type)

        try:
            AppointmentService._reserve_interval(
                db,
                practitioner_id=request.practitioner_id,
                patient_id=request.patient_id,
                day=day,
                start_time=start_time,
                end_time=end_time,
            )

            appointment = Appointment(
                center_id=request.center_id,
                patient_id=request.patient_id,
                practitioner_id=request.practitioner_id,
                title=request.title,
                description=request.description,
                date=day,
                start_time=start_time,
                end_time=end_time,
                type=request.type,
                status=STATUS_SCHEDULED,
                notes=request.notes,
            )
            db.add(appointment)
            db.commit()

        except SchedulingError:
            db.rollback()
            raise
        except IntegrityError as e:
            logger.warning(f"Appointment booking conflict: {e}")
            db.rollback()
            raise SlotConflictError(
                "This time slot was just taken, please choose another",
                practitioner_id=request.practitioner_id,
            )
        except Exception as e:
            logger.exception(f"Failed to create appointment: {e}")
            db.rollback()
            raise

        logger.info(
            f"Created appointment {appointment.id} for patient {appointment.patient_id} with "
            f"practitioner {appointment.practitioner_id} on {appointment.date} "
            f"{appointment.start_time}-{appointment.end_time}"
        )

        NotificationService.notify(appointment, EVENT_CREATED, background_tasks=background_tasks)
        return appointment

    @staticmethod
    def update(
        db: Session,
        actor: Actor,
        appointment_id: int,
        request: AppointmentRequest,
        now: Optional[datetime] = None,
        background_tasks: Optional[BackgroundTasks] = None
    ) -> Appointment:
        """
        Edit an existing appointment.

        Linkage, time range and conflicts are re-validated for the new values,
        excluding the appointment itself. The status is left unchanged.

        Raises:
            NotFoundError: If the appointment does not exist or is not visible to the actor
            InvalidTransitionError: If the appointment is no longer editable
            UnauthorizedLinkageError: If the new combination is outside the permitted set
            InvalidTimeRangeError: If the new interval is invalid or in the past
            SlotConflictError: If the new interval is taken, a concurrent booking
                won, or another operation holds the row
        """
        reference_now = ensure_clinic_tz(now or clinic_now())
        assert reference_now is not None

        # Lock the appointment to prevent concurrent edits and transitions
        try:
            appointment = db.query(Appointment).filter(
                Appointment.id == appointment_id
            ).populate_existing().with_for_update(nowait=True).first()
        except OperationalError:
            db.rollback()
            raise SlotConflictError(
                "This appointment is being modified by another operation, please retry",
                appointment_id=appointment_id,
            )

        if not appointment or not AppointmentService.can_view(actor, appointment):
            raise NotFoundError("Appointment not found", appointment_id=appointment_id)

        if not appointment.is_editable:
            raise InvalidTransitionError(
                f"A {appointment.status} appointment can no longer be edited",
                current_status=appointment.status,
            )

        try:
            LinkageService.validate_booking_linkage(
                db, actor, request.center_id, request.patient_id, request.practitioner_id
            )
        except SchedulingError as e:
            logger.warning(f"Edit of appointment {appointment_id} rejected: {e}")
            raise

        day, start_time, end_time = AppointmentService._validate_time_range(request, reference_now)
        AppointmentService._validate_type(request.type)

        try:
            AppointmentService._reserve_interval(
                db,
                practitioner_id=request.practitioner_id,
                patient_id=request.patient_id,
                day=day,
                start_time=start_time,
                end_time=end_time,
                exclude_appointment_id=appointment.id,
            )

            appointment.center_id = request.center_id
            appointment.patient_id = request.patient_id
            appointment.practitioner_id = request.practitioner_id
            appointment.title = request.title
            appointment.description = request.description
            appointment.date = day
            appointment.start_time = start_time
            appointment.end_time = end_time
            appointment.type = request.type
            appointment.notes = request.notes
            db.commit()

        except SchedulingError:
            db.rollback()
            raise
        except IntegrityError as e:
            logger.warning(f"Appointment edit conflict: {e}")
            db.rollback()
            raise SlotConflictError(
                "This time slot was just taken, please choose another",
                appointment_id=appointment_id,
            )

        logger.info(f"Updated appointment {appointment_id}")

        NotificationService.notify(appointment, EVENT_UPDATED, background_tasks=background_tasks)
        return appointment

    @staticmethod
    def cancel(
        db: Session,
        actor: Actor,
        appointment_id: int,
        now: Optional[datetime] = None,
        background_tasks: Optional[BackgroundTasks] = None
    ) -> Appointment:
        """Cancel an appointment; see AppointmentLifecycle.transition."""
        return AppointmentLifecycle.cancel(db, actor, appointment_id, now, background_tasks)

    @staticmethod
    def can_view(actor: Actor, appointment: Appointment) -> bool:
        """Patients see their own appointments; staff see their center's."""
        if isinstance(actor, PatientActor):
            return appointment.patient_id == actor.patient_id
        if isinstance(actor, CenterStaffActor):
            return appointment.center_id == actor.center_id
        return False

    @staticmethod
    def get_for_actor(db: Session, actor: Actor, appointment_id: int) -> Appointment:
        """
        Get an appointment visible to the actor.

        Raises:
            NotFoundError: If it does not exist or belongs to someone else
        """
        appointment = db.query(Appointment).filter(Appointment.id == appointment_id).first()
        if not appointment or not AppointmentService.can_view(actor, appointment):
            raise NotFoundError("Appointment not found", appointment_id=appointment_id)
        return appointment

    @staticmethod
    def list_for_patient(db: Session, patient_id: int) -> List[Appointment]:
        """List a patient's appointments, newest first."""
        return db.query(Appointment).filter(
            Appointment.patient_id == patient_id
        ).order_by(
            Appointment.date.desc(), Appointment.start_time.desc(), Appointment.id.desc()
        ).all()

    @staticmethod
    def list_for_center(
        db: Session,
        center_id: int,
        on_date: Optional[date_type] = None
    ) -> List[CenterAppointmentRow]:
        """
        List a center's appointments in chronological order.

        Only patients actively linked to the center are included. Each row
        carries the patient's latest earlier appointment (any center, any
        status), which staff use to review the previous session's notes.

        Args:
            db: Database session
            center_id: Center ID
            on_date: Restrict to one calendar date

        Returns:
            List of CenterAppointmentRow
        """
        query = db.query(Appointment).join(
            CenterPatientLink,
            (CenterPatientLink.patient_id == Appointment.patient_id)
            & (CenterPatientLink.center_id == Appointment.center_id)
        ).filter(
            Appointment.center_id == center_id,
            CenterPatientLink.is_active == True,
        )
        if on_date is not None:
            query = query.filter(Appointment.date == on_date)

        appointments = query.order_by(
            Appointment.date, Appointment.start_time, Appointment.id
        ).all()

        history = AppointmentService._patient_histories(db, appointments)

        rows: List[CenterAppointmentRow] = []
        for appointment in appointments:
            timeline, keys = history[appointment.patient_id]
            # Appointments strictly earlier than this one sort before this index
            index = bisect_left(keys, (appointment.date, appointment.start_time))
            previous = timeline[index - 1] if index else None
            rows.append(CenterAppointmentRow(appointment=appointment, previous_appointment=previous))

        return rows

    @staticmethod
    def _patient_histories(
        db: Session,
        appointments: List[Appointment]
    ) -> Dict[int, Tuple[List[Appointment], List[Tuple[date_type, time]]]]:
        """
        Load the appointment history of every listed patient in one query.

        Returns:
            patient_id -> (appointments in chronological order, their (date, start_time) keys)
        """
        if not appointments:
            return {}

        patient_ids = {appointment.patient_id for appointment in appointments}
        latest_day = max(appointment.date for appointment in appointments)

        # 1 query instead of N
        earlier = db.query(Appointment).filter(
            Appointment.patient_id.in_(patient_ids),
            Appointment.date <= latest_day,
        ).order_by(
            Appointment.patient_id, Appointment.date, Appointment.start_time, Appointment.id
        ).all()

        history: Dict[int, Tuple[List[Appointment], List[Tuple[date_type, time]]]] = {
            patient_id: ([], []) for patient_id in patient_ids
        }
        for appointment in earlier:
            timeline, keys = history[appointment.patient_id]
            timeline.append(appointment)
            keys.append((appointment.date, appointment.start_time))
        return history

    @staticmethod
    def _validate_time_range(
        request: AppointmentRequest,
        now: datetime
    ) -> Tuple[date_type, time, time]:
        """
        Validate the requested interval and split it into stored date/times.

        The interval must be non-empty, fall on one clinic-local calendar day,
        lie inside that day's working hours, and not start in the past.

        Returns:
            (date, start_time, end_time) in clinic-local wall time

        Raises:
            InvalidTimeRangeError: If any rule is violated
        """
        start = ensure_clinic_tz(request.start_time)
        end = ensure_clinic_tz(request.end_time)
        assert start is not None and end is not None

        if start >= end:
            raise InvalidTimeRangeError("Start time must be before end time")

        if start.date() != end.date():
            raise InvalidTimeRangeError("Appointments must start and end on the same day")

        day = start.date()
        start_time = start.time().replace(tzinfo=None)
        end_time = end.time().replace(tzinfo=None)

        working_hours = AvailabilityService.get_working_hours(day)
        if not working_hours.contains(start_time, end_time):
            raise InvalidTimeRangeError(
                f"Appointments must be within working hours "
                f"({working_hours.start.strftime('%H:%M')}-{working_hours.end.strftime('%H:%M')})"
            )

        if start < now:
            raise InvalidTimeRangeError("Cannot book an appointment in the past")

        return day, start_time, end_time

    @staticmethod
    def _validate_type(appointment_type: str) -> None:
        if appointment_type not in APPOINTMENT_TYPES:
            raise ValueError(f"Invalid appointment type: {appointment_type}")

    @staticmethod
    def _lock_practitioner(db: Session, practitioner_id: int) -> Practitioner:
        """
        Lock the practitioner row and read its current schedule_version.

        populate_existing() makes sure the version is re-read from the
        database even if the practitioner is already in the identity map.
        """
        try:
            practitioner = db.query(Practitioner).filter(
                Practitioner.id == practitioner_id
            ).populate_existing().with_for_update().first()
        except OperationalError:
            db.rollback()
            raise SlotConflictError(
                "The practitioner's schedule is being modified, please retry",
                practitioner_id=practitioner_id,
            )

        if not practitioner or not practitioner.is_active:
            raise NotFoundError("Practitioner not found", practitioner_id=practitioner_id)
        return practitioner

    @staticmethod
    def _lock_patient(db: Session, patient_id: int) -> Patient:
        """Lock the patient row and read its current schedule_version."""
        try:
            patient = db.query(Patient).filter(
                Patient.id == patient_id
            ).populate_existing().with_for_update().first()
        except OperationalError:
            db.rollback()
            raise SlotConflictError(
                "The patient's schedule is being modified, please retry",
                patient_id=patient_id,
            )

        if not patient:
            raise NotFoundError("Patient not found", patient_id=patient_id)
        return patient

    @staticmethod
    def _check_conflicts(
        db: Session,
        practitioner_id: int,
        patient_id: int,
        day: date_type,
        start_time: time,
        end_time: time,
        exclude_appointment_id: Optional[int] = None
    ) -> None:
        """
        Reject the interval if it overlaps the practitioner's or the patient's appointments.

        Raises:
            SlotConflictError: If any non-cancelled appointment overlaps
        """
        conflicts = AvailabilityService.find_conflicting_appointments(
            db,
            day,
            start_time,
            end_time,
            practitioner_id=practitioner_id,
            patient_id=patient_id,
            exclude_appointment_id=exclude_appointment_id,
        )
        if not conflicts:
            return

        conflict = conflicts[0]
        if conflict.practitioner_id == practitioner_id:
            logger.warning(
                f"Slot conflict for practitioner {practitioner_id} on {day} "
                f"{start_time}-{end_time} with appointment {conflict.id}"
            )
            raise SlotConflictError(
                "The practitioner already has an appointment at this time",
                practitioner_id=practitioner_id,
                conflicting_appointment_id=conflict.id,
            )

        logger.warning(
            f"Slot conflict for patient {patient_id} on {day} "
            f"{start_time}-{end_time} with appointment {conflict.id}"
        )
        raise SlotConflictError(
            "The patient already has an appointment at this time",
            patient_id=patient_id,
            conflicting_appointment_id=conflict.id,
        )

    @staticmethod
    def _bump_schedule_version(
        db: Session,
        model: Union[Type[Practitioner], Type[Patient]],
        row_id: int,
        expected_version: int
    ) -> None:
        """
        Advance a practitioner's or patient's schedule_version with a compare-and-swap.

        Raises:
            SlotConflictError: If another booking changed the schedule since it was read
        """
        result = db.execute(
            update(model)
            .where(
                model.id == row_id,
                model.schedule_version == expected_version,
            )
            .values(schedule_version=expected_version + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            owner = "practitioner" if model is Practitioner else "patient"
            logger.warning(
                f"Concurrent booking detected for {owner} {row_id} "
                f"(expected schedule_version {expected_version})"
            )
            raise SlotConflictError(
                "This time slot was just taken, please choose another",
                **{f"{owner}_id": row_id},
            )

    @staticmethod
    def _reserve_interval(
        db: Session,
        practitioner_id: int,
        patient_id: int,
        day: date_type,
        start_time: time,
        end_time: time,
        exclude_appointment_id: Optional[int] = None
    ) -> None:
        """
        Lock, conflict-check and version-bump inside the caller's transaction.

        Both schedules are claimed: the practitioner's guards against a second
        patient taking the slot, the patient's against a second practitioner
        booking them at the same time. Rows are always locked practitioner
        first so concurrent reservations cannot deadlock.
        """
        practitioner = AppointmentService._lock_practitioner(db, practitioner_id)
        patient = AppointmentService._lock_patient(db, patient_id)
        practitioner_version = practitioner.schedule_version
        patient_version = patient.schedule_version

        AppointmentService._check_conflicts(
            db, practitioner_id, patient_id, day, start_time, end_time,
            exclude_appointment_id=exclude_appointment_id,
        )
        AppointmentService._bump_schedule_version(db, Practitioner, practitioner_id, practitioner_version)
        AppointmentService._bump_schedule_version(db, Patient, patient_id, patient_version)
