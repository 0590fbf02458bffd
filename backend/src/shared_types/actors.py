"""
Booking actors.

Booking rules differ between patients booking for themselves and center staff
booking on a patient's behalf. Services receive one of these variants and
dispatch on its type instead of branching on role strings.
"""

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class PatientActor:
    """A patient acting for themselves."""
    patient_id: int


@dataclass(frozen=True)
class CenterStaffActor:
    """A staff member acting for the center they belong to."""
    center_id: int


Actor = Union[PatientActor, CenterStaffActor]
