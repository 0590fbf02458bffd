"""
Integration tests for practitioner availability.
"""

import pytest
from datetime import date, time

from core.constants import STATUS_CANCELLED, STATUS_COMPLETED
from core.exceptions import NotFoundError
from services.availability_service import AvailabilityService
from shared_types import WorkingHours
from tests.conftest import (
    clinic_datetime, create_appointment, create_center, create_patient, create_practitioner
)

DAY = date(2024, 6, 10)
HOURS = WorkingHours(time(9, 0), time(17, 0))
EARLY_MORNING = clinic_datetime(DAY, time(7, 0))


def _starts(slots):
    return [slot.start_time.time() for slot in slots]


@pytest.fixture
def setup(db_session):
    center = create_center(db_session)
    practitioner = create_practitioner(db_session)
    patient = create_patient(db_session)
    return center, practitioner, patient


class TestAvailableSlots:
    """Test slot calculation against stored appointments."""

    def test_booked_slot_excluded(self, db_session, setup):
        center, practitioner, patient = setup
        create_appointment(db_session, center, patient, practitioner, DAY, time(10, 0), time(11, 0))

        slots = AvailabilityService.get_available_slots(
            db_session, practitioner.id, DAY,
            slot_duration_minutes=60, working_hours=HOURS, now=EARLY_MORNING,
        )

        starts = _starts(slots)
        assert time(10, 0) not in starts
        assert time(9, 0) in starts
        assert time(11, 0) in starts
        assert len(slots) == 7

    def test_slot_bounds_are_clinic_aware(self, db_session, setup):
        _, practitioner, _ = setup

        slots = AvailabilityService.get_available_slots(
            db_session, practitioner.id, DAY,
            slot_duration_minutes=60, working_hours=HOURS, now=EARLY_MORNING,
        )

        assert slots[0].start_time == clinic_datetime(DAY, time(9, 0))
        assert slots[0].end_time == clinic_datetime(DAY, time(10, 0))
        assert slots == sorted(slots)

    def test_cancelled_appointment_frees_slot(self, db_session, setup):
        center, practitioner, patient = setup
        create_appointment(
            db_session, center, patient, practitioner, DAY, time(10, 0), time(11, 0), status=STATUS_CANCELLED
        )

        slots = AvailabilityService.get_available_slots(
            db_session, practitioner.id, DAY,
            slot_duration_minutes=60, working_hours=HOURS, now=EARLY_MORNING,
        )

        assert time(10, 0) in _starts(slots)

    def test_terminal_non_cancelled_appointment_still_blocks(self, db_session, setup):
        center, practitioner, patient = setup
        create_appointment(
            db_session, center, patient, practitioner, DAY, time(10, 0), time(11, 0), status=STATUS_COMPLETED
        )

        slots = AvailabilityService.get_available_slots(
            db_session, practitioner.id, DAY,
            slot_duration_minutes=60, working_hours=HOURS, now=EARLY_MORNING,
        )

        assert time(10, 0) not in _starts(slots)

    def test_partial_overlap_blocks_both_neighbours(self, db_session, setup):
        center, practitioner, patient = setup
        create_appointment(db_session, center, patient, practitioner, DAY, time(10, 30), time(11, 30))

        slots = AvailabilityService.get_available_slots(
            db_session, practitioner.id, DAY,
            slot_duration_minutes=60, working_hours=HOURS, now=EARLY_MORNING,
        )

        starts = _starts(slots)
        assert time(10, 0) not in starts
        assert time(11, 0) not in starts
        assert time(12, 0) in starts

    def test_other_practitioner_does_not_block(self, db_session, setup):
        center, practitioner, patient = setup
        other = create_practitioner(db_session, first_name="Bob", last_name="Brace")
        create_appointment(db_session, center, patient, other, DAY, time(10, 0), time(11, 0))

        slots = AvailabilityService.get_available_slots(
            db_session, practitioner.id, DAY,
            slot_duration_minutes=60, working_hours=HOURS, now=EARLY_MORNING,
        )

        assert len(slots) == 8

    def test_started_slots_are_dropped(self, db_session, setup):
        _, practitioner, _ = setup

        slots = AvailabilityService.get_available_slots(
            db_session, practitioner.id, DAY,
            slot_duration_minutes=60, working_hours=HOURS, now=clinic_datetime(DAY, time(10, 30)),
        )

        assert _starts(slots)[0] == time(11, 0)

    def test_past_date_is_empty(self, db_session, setup):
        _, practitioner, _ = setup

        slots = AvailabilityService.get_available_slots(
            db_session, practitioner.id, DAY,
            slot_duration_minutes=60, working_hours=HOURS, now=clinic_datetime(date(2024, 6, 11), time(7, 0)),
        )

        assert slots == []

    def test_fully_booked_day_is_empty(self, db_session, setup):
        center, practitioner, patient = setup
        create_appointment(db_session, center, patient, practitioner, DAY, time(9, 0), time(17, 0))

        slots = AvailabilityService.get_available_slots(
            db_session, practitioner.id, DAY,
            slot_duration_minutes=60, working_hours=HOURS, now=EARLY_MORNING,
        )

        assert slots == []

    def test_configured_defaults(self, db_session, setup, monkeypatch):
        _, practitioner, _ = setup
        monkeypatch.setattr("services.availability_service.SLOT_DURATION_MINUTES", 30)
        monkeypatch.setattr("services.availability_service.WORKING_HOURS_START", time(9, 0))
        monkeypatch.setattr("services.availability_service.WORKING_HOURS_END", time(11, 0))

        slots = AvailabilityService.get_available_slots(db_session, practitioner.id, DAY, now=EARLY_MORNING)

        assert _starts(slots) == [time(9, 0), time(9, 30), time(10, 0), time(10, 30)]

    def test_non_positive_duration(self, db_session, setup):
        _, practitioner, _ = setup

        with pytest.raises(ValueError):
            AvailabilityService.get_available_slots(
                db_session, practitioner.id, DAY, slot_duration_minutes=0, now=EARLY_MORNING
            )

    def test_inactive_practitioner(self, db_session):
        practitioner = create_practitioner(db_session, is_active=False)

        with pytest.raises(NotFoundError):
            AvailabilityService.get_available_slots(db_session, practitioner.id, DAY, now=EARLY_MORNING)

    def test_unknown_practitioner(self, db_session):
        with pytest.raises(NotFoundError):
            AvailabilityService.get_available_slots(db_session, 404, DAY, now=EARLY_MORNING)


class TestFindConflictingAppointments:
    """Test the overlap query used inside the booking transaction."""

    def test_only_overlapping_appointments_of_the_owners(self, db_session, setup):
        center, practitioner, patient = setup
        other_practitioner = create_practitioner(db_session, first_name="Bob", last_name="Brace")
        other_patient = create_patient(db_session, first_name="Other")
        same_practitioner = create_appointment(
            db_session, center, other_patient, practitioner, DAY, time(9, 30), time(10, 30)
        )
        same_patient = create_appointment(
            db_session, center, patient, other_practitioner, DAY, time(10, 30), time(11, 30)
        )
        create_appointment(db_session, center, other_patient, other_practitioner, DAY, time(10, 0), time(11, 0))
        create_appointment(db_session, center, other_patient, practitioner, DAY, time(9, 0), time(9, 30))
        create_appointment(db_session, center, other_patient, practitioner, DAY, time(11, 0), time(12, 0))
        create_appointment(
            db_session, center, other_patient, practitioner, DAY, time(10, 0), time(11, 0), status=STATUS_CANCELLED
        )
        create_appointment(db_session, center, patient, practitioner, date(2024, 6, 11), time(10, 0), time(11, 0))

        conflicts = AvailabilityService.find_conflicting_appointments(
            db_session, DAY, time(10, 0), time(11, 0),
            practitioner_id=practitioner.id, patient_id=patient.id,
        )

        assert [a.id for a in conflicts] == [same_practitioner.id, same_patient.id]

    def test_excluded_appointment_is_ignored(self, db_session, setup):
        center, practitioner, patient = setup
        appointment = create_appointment(db_session, center, patient, practitioner, DAY, time(10, 0), time(11, 0))

        conflicts = AvailabilityService.find_conflicting_appointments(
            db_session, DAY, time(10, 30), time(11, 30),
            practitioner_id=practitioner.id, exclude_appointment_id=appointment.id,
        )

        assert conflicts == []

    def test_no_owner_matches_nothing(self, db_session, setup):
        center, practitioner, patient = setup
        create_appointment(db_session, center, patient, practitioner, DAY, time(10, 0), time(11, 0))

        assert AvailabilityService.find_conflicting_appointments(db_session, DAY, time(10, 0), time(11, 0)) == []
