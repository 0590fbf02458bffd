"""Shared data classes used across scheduling services."""

from .availability import TimeSlot, WorkingHours
from .linkage import LinkageMode, LinkageResult, LinkedCenter, LinkedPractitioner
from .actors import Actor, PatientActor, CenterStaffActor
from .booking import AppointmentRequest, CenterAppointmentRow

__all__ = [
    "TimeSlot",
    "WorkingHours",
    "LinkageMode",
    "LinkageResult",
    "LinkedCenter",
    "LinkedPractitioner",
    "Actor",
    "PatientActor",
    "CenterStaffActor",
    "AppointmentRequest",
    "CenterAppointmentRow",
]
