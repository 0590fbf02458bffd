"""
Patient model representing individuals who receive rehabilitation care.

A patient can be linked to any number of centers. When a single-practitioner
relationship is enforced (for example through the link-and-assign flow that
opens an exercise plan), `assigned_practitioner_id` fixes the patient to that
practitioner for booking purposes.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import String, ForeignKey, TIMESTAMP, Index, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.database import Base


class Patient(Base):
    """Patient entity who books appointments and follows exercise plans."""

    __tablename__ = "patients"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    """Unique identifier for the patient."""

    first_name: Mapped[str] = mapped_column(String(100))
    last_name: Mapped[str] = mapped_column(String(100))

    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    assigned_practitioner_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("practitioners.id"), nullable=True
    )
    """
    Practitioner this patient is fixed to.

    NULL means the patient may choose among the practitioners of every center
    they are actively linked to.
    """

    schedule_version: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    """
    Incremented on every appointment write for this patient.

    Bookings with different practitioners lock different practitioner rows,
    so the patient's own token is what serializes them.
    """

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)

    # Relationships
    assigned_practitioner = relationship("Practitioner", foreign_keys=[assigned_practitioner_id])
    center_links = relationship("CenterPatientLink", back_populates="patient")
    appointments = relationship("Appointment", back_populates="patient")
    prescriptions = relationship("Prescription", back_populates="patient")

    __table_args__ = (
        Index('idx_patients_assigned_practitioner', 'assigned_practitioner_id'),
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def is_fixed(self) -> bool:
        """True when the patient is restricted to a single practitioner."""
        return self.assigned_practitioner_id is not None
