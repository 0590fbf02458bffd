"""
Center link models.

Centers relate to practitioners and patients through explicit join rows that
carry their own `is_active` flag and `linked_at` timestamp. Links are
soft-deactivated, never deleted, and there is at most one row per
(center, practitioner) or (center, patient) pair: reactivating a link updates
the existing row instead of inserting a new one.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import ForeignKey, TIMESTAMP, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.database import Base


class CenterPractitionerLink(Base):
    """Association of a practitioner with a center."""

    __tablename__ = "center_practitioner_links"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)

    center_id: Mapped[int] = mapped_column(ForeignKey("centers.id", ondelete="CASCADE"))
    practitioner_id: Mapped[int] = mapped_column(ForeignKey("practitioners.id", ondelete="CASCADE"))

    is_active: Mapped[bool] = mapped_column(default=True)
    """Inactive links are invisible to patients and to booking validation."""

    linked_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    """When the link was created or last reactivated."""

    notes: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)

    # Relationships
    center = relationship("Center", back_populates="practitioner_links")
    practitioner = relationship("Practitioner", back_populates="center_links")

    __table_args__ = (
        Index('uq_center_practitioner', 'center_id', 'practitioner_id', unique=True),
        Index('idx_center_practitioner_links_practitioner', 'practitioner_id', 'is_active'),
    )


class CenterPatientLink(Base):
    """Association of a patient with a center."""

    __tablename__ = "center_patient_links"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)

    center_id: Mapped[int] = mapped_column(ForeignKey("centers.id", ondelete="CASCADE"))
    patient_id: Mapped[int] = mapped_column(ForeignKey("patients.id", ondelete="CASCADE"))

    is_active: Mapped[bool] = mapped_column(default=True)

    linked_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    """When the link was created or last reactivated."""

    notes: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)

    # Relationships
    center = relationship("Center", back_populates="patient_links")
    patient = relationship("Patient", back_populates="center_links")

    __table_args__ = (
        Index('uq_center_patient', 'center_id', 'patient_id', unique=True),
        Index('idx_center_patient_links_patient', 'patient_id', 'is_active'),
    )
