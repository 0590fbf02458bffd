"""
Center model representing a rehabilitation center.

Centers are linked to practitioners and patients through explicit link
records (see center_link.py) rather than direct foreign keys, so that a
practitioner or patient can be associated with several centers and links
can be deactivated without losing history.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import String, TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.database import Base


class Center(Base):
    """Rehabilitation center entity."""

    __tablename__ = "centers"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    """Unique identifier for the center."""

    name: Mapped[str] = mapped_column(String(255))
    """Display name of the center."""

    address: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    is_active: Mapped[bool] = mapped_column(default=True)
    """Whether the center is currently operating."""

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)

    # Relationships
    practitioner_links = relationship("CenterPractitionerLink", back_populates="center")
    """All practitioner link rows, including deactivated ones."""

    patient_links = relationship("CenterPatientLink", back_populates="center")
    """All patient link rows, including deactivated ones."""

    appointments = relationship("Appointment", back_populates="center")

    def __repr__(self) -> str:
        return f"<Center(id={self.id}, name={self.name!r})>"
