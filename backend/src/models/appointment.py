"""
Appointment model representing scheduled sessions between patients and practitioners.

Appointments are the core scheduling record. Timing is stored as a calendar
date plus naive start/end times interpreted in the clinic time zone, which
keeps per-day availability queries simple (a single indexed date filter).
Appointments are never physically deleted: cancellation is a status change,
so the full history stays auditable.
"""

from datetime import date as date_type, datetime, time
from typing import Optional

from sqlalchemy import String, ForeignKey, Index, TIMESTAMP, Date, Time, Text, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.database import Base
from core.constants import APPOINTMENT_STATUSES, EDITABLE_STATUSES
from utils.datetime_utils import combine_clinic


class Appointment(Base):
    """
    Appointment entity representing a booked session.

    Created only by the booking service and mutated only through the
    appointment lifecycle. Two non-cancelled appointments of the same
    practitioner never overlap on their [start_time, end_time) interval.
    """

    __tablename__ = "appointments"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    """Unique identifier for the appointment."""

    center_id: Mapped[int] = mapped_column(ForeignKey("centers.id"))
    """Center where the appointment takes place."""

    patient_id: Mapped[int] = mapped_column(ForeignKey("patients.id"))
    """Patient attending the appointment."""

    practitioner_id: Mapped[int] = mapped_column(ForeignKey("practitioners.id"))
    """Practitioner whose calendar the appointment occupies."""

    title: Mapped[str] = mapped_column(String(200))
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    date: Mapped[date_type] = mapped_column(Date)
    """Calendar date of the appointment (clinic time zone)."""

    start_time: Mapped[time] = mapped_column(Time)
    end_time: Mapped[time] = mapped_column(Time)

    type: Mapped[str] = mapped_column(String(30))
    """One of 'CONSULTATION', 'FOLLOW_UP', 'ASSESSMENT', 'TREATMENT', 'EMERGENCY'."""

    status: Mapped[str] = mapped_column(String(20))
    """
    Lifecycle status: 'SCHEDULED' (initial), 'CONFIRMED', 'IN_PROGRESS',
    'COMPLETED', 'CANCELLED' or 'NO_SHOW'. The last three are terminal.
    """

    notes: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)
    """Optional notes, e.g. the practitioner's feedback after the session."""

    meeting_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    """Video-call link for remote sessions, provisioned outside this service."""

    cancelled_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    """Timestamp when the appointment was cancelled (if applicable)."""

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)

    # Relationships
    center = relationship("Center", back_populates="appointments")
    patient = relationship("Patient", back_populates="appointments")
    practitioner = relationship("Practitioner", back_populates="appointments")

    @property
    def start_datetime(self) -> datetime:
        """Aware start of the appointment in the clinic time zone."""
        return combine_clinic(self.date, self.start_time)

    @property
    def end_datetime(self) -> datetime:
        """Aware end of the appointment in the clinic time zone."""
        return combine_clinic(self.date, self.end_time)

    @property
    def is_editable(self) -> bool:
        return self.status in EDITABLE_STATUSES

    # Table constraints and indexes
    __table_args__ = (
        CheckConstraint('start_time < end_time', name='check_appointment_time_range'),
        CheckConstraint(
            f"status IN ({', '.join(repr(s) for s in APPOINTMENT_STATUSES)})",
            name='check_valid_appointment_status'
        ),
        # Availability and conflict queries: one practitioner, one day, non-cancelled
        Index('idx_appointments_practitioner_date_status', 'practitioner_id', 'date', 'status'),
        Index('idx_appointments_patient_date', 'patient_id', 'date'),
        Index('idx_appointments_center_date', 'center_id', 'date'),
    )

    def __repr__(self) -> str:
        return (
            f"<Appointment(id={self.id}, practitioner_id={self.practitioner_id}, "
            f"date={self.date}, time={self.start_time}-{self.end_time}, status={self.status})>"
        )
