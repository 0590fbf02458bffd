"""
Shared types for booking requests and appointment listings.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from models import Appointment


@dataclass(frozen=True)
class AppointmentRequest:
    """
    The caller-supplied fields of a booking or an edit.

    `start_time` and `end_time` are aware datetimes; naive values are
    interpreted in the clinic time zone by the booking service.
    """
    center_id: int
    patient_id: int
    practitioner_id: int
    title: str
    start_time: datetime
    end_time: datetime
    type: str
    description: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class CenterAppointmentRow:
    """An appointment in a center listing, with the patient's previous visit."""
    appointment: "Appointment"
    previous_appointment: Optional["Appointment"] = None
