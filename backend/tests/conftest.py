"""
Test configuration and shared fixtures for the Rehab Scheduler test suite.

Uses in-memory SQLite by default (TEST_DATABASE_URL overrides it). The
schema is created from the model metadata for each test and dropped
afterwards, so every test starts from an empty database.
"""

import os
from datetime import date, datetime, time
from typing import Generator, Optional

os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from core.constants import PRESCRIPTION_ACTIVE, STATUS_SCHEDULED
from core.database import Base
from models import (
    Appointment, Center, CenterPatientLink, CenterPractitionerLink, Patient, Practitioner, Prescription
)
from utils.datetime_utils import CLINIC_TZ


# Test database URL
TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite://")

LINKED_AT = datetime(2024, 1, 1, 9, 0, tzinfo=CLINIC_TZ)


@pytest.fixture(scope="session")
def db_engine():
    """
    Create a database engine for the test session.

    In-memory SQLite needs a StaticPool so every session (and the TestClient
    thread) sees the same database.
    """
    if TEST_DATABASE_URL.startswith("sqlite"):
        engine = create_engine(
            TEST_DATABASE_URL,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=False,
        )
    else:
        engine = create_engine(TEST_DATABASE_URL, echo=False)

    yield engine

    engine.dispose()


@pytest.fixture(scope="function")
def db_session(db_engine) -> Generator[Session, None, None]:
    """
    Provide a database session on a freshly created schema.

    Application code commits normally; the tables are dropped at teardown.
    """
    Base.metadata.create_all(bind=db_engine)

    TestSession = sessionmaker(bind=db_engine, autoflush=False, expire_on_commit=False)
    session = TestSession()

    yield session

    session.close()
    Base.metadata.drop_all(bind=db_engine)


@pytest.fixture
def client(db_session):
    """TestClient whose requests share the test's database session."""
    from fastapi.testclient import TestClient
    from core.database import get_db
    from main import app

    def override_get_db() -> Generator[Session, None, None]:
        try:
            yield db_session
        finally:
            # Don't close the session as it's managed by the test fixture
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def no_webhook(monkeypatch):
    """Keep notification delivery log-only unless a test opts in."""
    monkeypatch.setattr("services.notification_service.NOTIFICATION_WEBHOOK_URL", "")


# Helper functions for creating test data

def create_center(db_session: Session, name: str = "Riverside Rehab", is_active: bool = True) -> Center:
    center = Center(name=name, is_active=is_active)
    db_session.add(center)
    db_session.commit()
    return center


def create_practitioner(
    db_session: Session,
    first_name: str = "Ada",
    last_name: str = "Physio",
    email: Optional[str] = None,
    specialization: Optional[str] = "Sports rehabilitation",
    is_active: bool = True
) -> Practitioner:
    practitioner = Practitioner(
        first_name=first_name,
        last_name=last_name,
        email=email or f"{first_name.lower()}.{last_name.lower()}@example.com",
        specialization=specialization,
        is_active=is_active,
    )
    db_session.add(practitioner)
    db_session.commit()
    return practitioner


def create_patient(
    db_session: Session,
    first_name: str = "Pat",
    last_name: str = "Ient",
    assigned_practitioner: Optional[Practitioner] = None
) -> Patient:
    patient = Patient(
        first_name=first_name,
        last_name=last_name,
        email=f"{first_name.lower()}.{last_name.lower()}@example.com",
        assigned_practitioner_id=assigned_practitioner.id if assigned_practitioner else None,
    )
    db_session.add(patient)
    db_session.commit()
    return patient


def link_practitioner(
    db_session: Session,
    center: Center,
    practitioner: Practitioner,
    is_active: bool = True
) -> CenterPractitionerLink:
    link = CenterPractitionerLink(
        center_id=center.id,
        practitioner_id=practitioner.id,
        is_active=is_active,
        linked_at=LINKED_AT,
    )
    db_session.add(link)
    db_session.commit()
    return link


def link_patient(
    db_session: Session,
    center: Center,
    patient: Patient,
    is_active: bool = True
) -> CenterPatientLink:
    link = CenterPatientLink(
        center_id=center.id,
        patient_id=patient.id,
        is_active=is_active,
        linked_at=LINKED_AT,
    )
    db_session.add(link)
    db_session.commit()
    return link


def create_appointment(
    db_session: Session,
    center: Center,
    patient: Patient,
    practitioner: Practitioner,
    day: date,
    start: time,
    end: time,
    status: str = STATUS_SCHEDULED,
    notes: Optional[str] = None
) -> Appointment:
    appointment = Appointment(
        center_id=center.id,
        patient_id=patient.id,
        practitioner_id=practitioner.id,
        title="Knee rehab session",
        date=day,
        start_time=start,
        end_time=end,
        type="TREATMENT",
        status=status,
        notes=notes,
    )
    db_session.add(appointment)
    db_session.commit()
    return appointment


def create_prescription(
    db_session: Session,
    patient: Patient,
    practitioner: Practitioner,
    start_date: date,
    end_date: date,
    status: str = PRESCRIPTION_ACTIVE
) -> Prescription:
    prescription = Prescription(
        patient_id=patient.id,
        practitioner_id=practitioner.id,
        start_date=start_date,
        end_date=end_date,
        status=status,
    )
    db_session.add(prescription)
    db_session.commit()
    return prescription


def clinic_datetime(day: date, at: time) -> datetime:
    """Aware datetime in the clinic time zone."""
    return datetime.combine(day, at).replace(tzinfo=CLINIC_TZ)
