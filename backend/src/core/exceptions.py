"""
Scheduling-specific exceptions.

These are raised by the services and translated to JSON responses by the
exception handler registered in main.py. Every error is terminal for the
request that raised it; retrying is left to the client.
"""

from typing import Any, Dict, Optional


class SchedulingError(Exception):
    """Base exception for all scheduling errors."""

    status_code: int = 400
    error_type: str = "scheduling_error"

    def __init__(self, message: str, **context: Any):
        self.message = message
        self.context: Dict[str, Any] = context
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"detail": self.message, "type": self.error_type}
        if self.context:
            result["context"] = self.context
        return result


class InconsistentLinkageError(SchedulingError):
    """A fixed patient's center cannot be determined from the active links."""
    status_code = 409
    error_type = "inconsistent_linkage"


class UnauthorizedLinkageError(SchedulingError):
    """The caller tried to book outside their permitted practitioner/center set."""
    status_code = 403
    error_type = "unauthorized_linkage"


class SlotConflictError(SchedulingError):
    """The interval overlaps an existing appointment or a concurrent booking won."""
    status_code = 409
    error_type = "slot_conflict"


class InvalidTimeRangeError(SchedulingError):
    status_code = 400
    error_type = "invalid_time_range"


class InvalidTransitionError(SchedulingError):
    """The appointment's current status does not allow the requested change."""
    status_code = 409
    error_type = "invalid_transition"

    def __init__(self, message: str, current_status: Optional[str] = None, **context: Any):
        self.current_status = current_status
        if current_status is not None:
            context["current_status"] = current_status
        super().__init__(message, **context)


class ForbiddenTransitionError(SchedulingError):
    """The caller's role may not trigger this transition."""
    status_code = 403
    error_type = "forbidden_transition"


class NotFoundError(SchedulingError):
    status_code = 404
    error_type = "not_found"


class DuplicateLinkError(SchedulingError):
    status_code = 409
    error_type = "duplicate_link"


class AssignmentConflictError(SchedulingError):
    """The patient is already fixed to a different practitioner."""
    status_code = 409
    error_type = "assignment_conflict"
