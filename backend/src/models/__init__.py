# Package initialization
# Import all models to ensure relationships are properly established
from .center import Center
from .practitioner import Practitioner
from .patient import Patient
from .center_link import CenterPractitionerLink, CenterPatientLink
from .prescription import Prescription
from .appointment import Appointment

__all__ = [
    "Center",
    "Practitioner",
    "Patient",
    "CenterPractitionerLink",
    "CenterPatientLink",
    "Prescription",
    "Appointment",
]
