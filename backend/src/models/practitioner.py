"""
Practitioner model representing physiotherapists and other specialists.

Practitioners are created at registration/approval and are never hard-deleted:
removing a practitioner from service clears `is_active`.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import String, TIMESTAMP, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.database import Base


class Practitioner(Base):
    """
    Practitioner entity who can be booked for appointments.

    `schedule_version` is the optimistic-concurrency token for the
    practitioner's calendar. Every booking mutation bumps it with a
    compare-and-swap update, so two transactions that both passed the
    conflict check against the same snapshot cannot both commit.
    """

    __tablename__ = "practitioners"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    """Unique identifier for the practitioner."""

    first_name: Mapped[str] = mapped_column(String(100))
    last_name: Mapped[str] = mapped_column(String(100))

    email: Mapped[str] = mapped_column(String(255), unique=True)
    """Login/contact email, unique across practitioners."""

    specialization: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    license: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    is_active: Mapped[bool] = mapped_column(default=True)
    """False once the practitioner has been removed from service."""

    schedule_version: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    """Incremented on every appointment write for this practitioner."""

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)

    # Relationships
    center_links = relationship("CenterPractitionerLink", back_populates="practitioner")
    appointments = relationship("Appointment", back_populates="practitioner")
    prescriptions = relationship("Prescription", back_populates="practitioner")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self) -> str:
        return f"<Practitioner(id={self.id}, name={self.full_name!r}, active={self.is_active})>"
