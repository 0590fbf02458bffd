"""
Availability service for shared scheduling and availability logic.

This module contains the slot calculation and interval-overlap logic shared
by the availability endpoint and the booking service. Everything here is
read-only; the booking service re-runs the same overlap test inside its
write transaction rather than trusting a slot list the client fetched earlier.
"""

import logging
from datetime import datetime, date as date_type, time
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from core.config import (
    SLOT_DURATION_MINUTES,
    WORKING_HOURS_START, WORKING_HOURS_END,
    WEEKEND_WORKING_HOURS_START, WEEKEND_WORKING_HOURS_END,
)
from core.constants import STATUS_CANCELLED
from core.exceptions import NotFoundError
from models import Appointment, Practitioner
from shared_types import TimeSlot, WorkingHours
from utils.datetime_utils import add_minutes, clinic_now, combine_clinic, ensure_clinic_tz, is_weekend

logger = logging.getLogger(__name__)


class AvailabilityService:
    """
    Service class for availability operations.

    Contains business logic for availability checking that is shared
    across the availability endpoint and the booking service.
    """

    @staticmethod
    def get_working_hours(day: date_type) -> WorkingHours:
        """
        Get the configured working hours for a calendar date.

        Weekends use the separately configurable weekend window, which
        defaults to the weekday window.
        """
        if is_weekend(day):
            return WorkingHours(start=WEEKEND_WORKING_HOURS_START, end=WEEKEND_WORKING_HOURS_END)
        return WorkingHours(start=WORKING_HOURS_START, end=WORKING_HOURS_END)

    @staticmethod
    def get_active_practitioner(db: Session, practitioner_id: int) -> Practitioner:
        """
        Get an active practitioner by ID.

        Raises:
            NotFoundError: If the practitioner does not exist or is inactive
        """
        practitioner = db.query(Practitioner).filter(
            Practitioner.id == practitioner_id,
            Practitioner.is_active == True
        ).first()

        if not practitioner:
            raise NotFoundError("Practitioner not found", practitioner_id=practitioner_id)

        return practitioner

    @staticmethod
    def get_available_slots(
        db: Session,
        practitioner_id: int,
        date: date_type,
        slot_duration_minutes: Optional[int] = None,
        working_hours: Optional[WorkingHours] = None,
        now: Optional[datetime] = None
    ) -> List[TimeSlot]:
        """
        Get the bookable slots for a practitioner on a date.

        Tiles the working hours into consecutive slots of the configured
        duration, drops every slot overlapping a non-cancelled appointment,
        and drops slots starting before `now`.

        Args:
            db: Database session
            practitioner_id: Practitioner ID
            date: Calendar date (clinic time zone)
            slot_duration_minutes: Slot length; SLOT_DURATION_MINUTES if omitted
            working_hours: Bookable window; the configured hours for `date` if omitted
            now: Reference time; read once from the clinic clock if omitted

        Returns:
            Chronologically ordered list of TimeSlot (possibly empty)

        Raises:
            NotFoundError: If the practitioner does not exist or is inactive
            ValueError: If slot_duration_minutes is not positive
        """
        duration = slot_duration_minutes if slot_duration_minutes is not None else SLOT_DURATION_MINUTES
        if duration <= 0:
            raise ValueError("Slot duration must be positive")

        hours = working_hours or AvailabilityService.get_working_hours(date)
        reference_now = ensure_clinic_tz(now or clinic_now())
        assert reference_now is not None

        AvailabilityService.get_active_practitioner(db, practitioner_id)

        booked = AvailabilityService.fetch_booked_appointments(db, practitioner_id, date)
        candidate_slots = AvailabilityService._generate_candidate_slots(hours, duration)

        available_slots: List[TimeSlot] = []
        for slot_start, slot_end in candidate_slots:
            if AvailabilityService.has_slot_conflicts(booked, slot_start, slot_end):
                continue

            slot = TimeSlot(
                start_time=combine_clinic(date, slot_start),
                end_time=combine_clinic(date, slot_end),
            )
            # Past slots are not bookable (covers both earlier today and past dates)
            if slot.start_time < reference_now:
                continue

            available_slots.append(slot)

        return sorted(available_slots)

    @staticmethod
    def _generate_candidate_slots(
        working_hours: WorkingHours,
        duration_minutes: int
    ) -> List[tuple[time, time]]:
        """
        Generate consecutive candidate slots within the working hours.

        Slots are back-to-back starting at the window start; a trailing
        remainder shorter than one slot is not offered.

        Args:
            working_hours: Bookable window for the day
            duration_minutes: Duration of each slot in minutes

        Returns:
            List of (start_time, end_time) tuples for candidate slots
        """
        candidate_slots: List[tuple[time, time]] = []

        current_time = working_hours.start
        while current_time < working_hours.end:
            slot_end_time = add_minutes(current_time, duration_minutes)

            # Check if slot fits within the window (and does not cross midnight)
            if slot_end_time is None or slot_end_time > working_hours.end:
                break

            candidate_slots.append((current_time, slot_end_time))
            current_time = slot_end_time

        return candidate_slots

    @staticmethod
    def fetch_booked_appointments(
        db: Session,
        practitioner_id: int,
        date: date_type,
        exclude_appointment_id: Optional[int] = None
    ) -> List[Appointment]:
        """
        Fetch all non-cancelled appointments of a practitioner on a date.

        Args:
            db: Database session
            practitioner_id: Practitioner ID
            date: Calendar date
            exclude_appointment_id: Appointment to leave out (when editing it)

        Returns:
            Appointments ordered by start time
        """
        query = db.query(Appointment).filter(
            Appointment.practitioner_id == practitioner_id,
            Appointment.date == date,
            Appointment.status != STATUS_CANCELLED
        )
        if exclude_appointment_id is not None:
            query = query.filter(Appointment.id != exclude_appointment_id)

        return query.order_by(Appointment.start_time).all()

    @staticmethod
    def find_conflicting_appointments(
        db: Session,
        date: date_type,
        start_time: time,
        end_time: time,
        practitioner_id: Optional[int] = None,
        patient_id: Optional[int] = None,
        exclude_appointment_id: Optional[int] = None
    ) -> List[Appointment]:
        """
        Find non-cancelled appointments overlapping [start_time, end_time) on a date.

        Matches appointments of the given practitioner and/or the given patient.

        Returns:
            Overlapping appointments (empty when the interval is free)
        """
        if practitioner_id is None and patient_id is None:
            return []

        owners = []
        if practitioner_id is not None:
            owners.append(Appointment.practitioner_id == practitioner_id)
        if patient_id is not None:
            owners.append(Appointment.patient_id == patient_id)

        # Half-open overlap, same rule as _check_time_overlap
        query = db.query(Appointment).filter(
            or_(*owners),
            Appointment.date == date,
            Appointment.status != STATUS_CANCELLED,
            Appointment.start_time < end_time,
            Appointment.end_time > start_time,
        )
        if exclude_appointment_id is not None:
            query = query.filter(Appointment.id != exclude_appointment_id)

        return query.order_by(Appointment.start_time).all()

    @staticmethod
    def has_slot_conflicts(
        appointments: List[Appointment],
        start_time: time,
        end_time: time
    ) -> bool:
        """
        Check if a time slot conflicts with any of the given appointments.

        Pure function - no database queries. Uses pre-fetched data.
        """
        for appointment in appointments:
            if AvailabilityService._check_time_overlap(
                start_time, end_time,
                appointment.start_time, appointment.end_time
            ):
                return True

        return False

    @staticmethod
    def _check_time_overlap(
        start1: time,
        end1: time,
        start2: time,
        end2: time
    ) -> bool:
        """Check if two half-open time intervals overlap."""
        return start1 < end2 and start2 < end1
