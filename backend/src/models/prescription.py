"""
Prescription model representing an exercise plan assigned to a patient.

Only the assignment header is modelled here (who, by whom, and for which
period); the individual exercises are managed elsewhere. Scheduling reads
prescriptions to compute practitioner workload.
"""

from datetime import date, datetime
from typing import Optional

from sqlalchemy import String, ForeignKey, TIMESTAMP, Date, Index, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.database import Base
from core.constants import PRESCRIPTION_STATUSES


class Prescription(Base):
    """Exercise plan assignment from a practitioner to a patient."""

    __tablename__ = "prescriptions"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)

    patient_id: Mapped[int] = mapped_column(ForeignKey("patients.id"))
    practitioner_id: Mapped[int] = mapped_column(ForeignKey("practitioners.id"))

    start_date: Mapped[date] = mapped_column(Date)
    end_date: Mapped[date] = mapped_column(Date)
    """Last day of the plan. A plan is current while end_date >= today."""

    status: Mapped[str] = mapped_column(String(20), default="ACTIVE")
    """One of 'ACTIVE', 'COMPLETED', 'PAUSED', 'CANCELLED'."""

    notes: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)

    # Relationships
    patient = relationship("Patient", back_populates="prescriptions")
    practitioner = relationship("Practitioner", back_populates="prescriptions")

    __table_args__ = (
        CheckConstraint(
            f"status IN ({', '.join(repr(s) for s in PRESCRIPTION_STATUSES)})",
            name='check_valid_prescription_status'
        ),
        # Workload queries filter by practitioner, status and end date
        Index('idx_prescriptions_practitioner_status_end', 'practitioner_id', 'status', 'end_date'),
        Index('idx_prescriptions_patient', 'patient_id'),
    )
