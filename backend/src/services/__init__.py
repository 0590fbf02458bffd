"""
Services package for shared business logic.

This package contains service classes that encapsulate business logic
shared across multiple API endpoints.
"""

from .linkage_service import LinkageService
from .workload_service import WorkloadService, PractitionerWorkload
from .availability_service import AvailabilityService
from .appointment_lifecycle import AppointmentLifecycle
from .appointment_service import AppointmentService
from .link_service import LinkService
from .notification_service import NotificationService
from .jwt_service import JWTService, TokenPayload

__all__ = [
    "LinkageService",
    "WorkloadService",
    "PractitionerWorkload",
    "AvailabilityService",
    "AppointmentLifecycle",
    "AppointmentService",
    "LinkService",
    "NotificationService",
    "JWTService",
    "TokenPayload",
]
