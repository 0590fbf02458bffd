"""
Integration tests for the status CHECK constraints on stored rows.
"""

import pytest
from datetime import date, time

from sqlalchemy.exc import IntegrityError

from core.constants import APPOINTMENT_STATUSES, PRESCRIPTION_STATUSES
from tests.conftest import (
    create_appointment, create_center, create_patient, create_practitioner, create_prescription
)

DAY = date(2024, 6, 10)


@pytest.fixture
def people(db_session):
    return create_center(db_session), create_practitioner(db_session), create_patient(db_session)


class TestPrescriptionStatus:
    @pytest.mark.parametrize("status", PRESCRIPTION_STATUSES)
    def test_declared_statuses_accepted(self, db_session, people, status):
        _, practitioner, patient = people

        prescription = create_prescription(db_session, patient, practitioner, DAY, date(2024, 9, 10), status=status)

        assert prescription.id is not None

    def test_unknown_status_rejected(self, db_session, people):
        _, practitioner, patient = people

        with pytest.raises(IntegrityError):
            create_prescription(db_session, patient, practitioner, DAY, date(2024, 9, 10), status="ARCHIVED")
        db_session.rollback()


class TestAppointmentStatus:
    @pytest.mark.parametrize("status", APPOINTMENT_STATUSES)
    def test_declared_statuses_accepted(self, db_session, people, status):
        center, practitioner, patient = people

        appointment = create_appointment(
            db_session, center, patient, practitioner, DAY, time(10, 0), time(11, 0), status=status
        )

        assert appointment.id is not None

    def test_unknown_status_rejected(self, db_session, people):
        center, practitioner, patient = people

        with pytest.raises(IntegrityError):
            create_appointment(
                db_session, center, patient, practitioner, DAY, time(10, 0), time(11, 0), status="RESCHEDULED"
            )
        db_session.rollback()
