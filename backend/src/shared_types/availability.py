"""
Shared types for availability-related functionality.

This module contains shared data classes used by the availability and
booking services to ensure a consistent slot representation.
"""

from dataclasses import dataclass
from datetime import datetime, time


@dataclass(frozen=True)
class WorkingHours:
    """
    A practitioner's bookable window for one day, in clinic-local wall time.
    """
    start: time
    end: time

    def __post_init__(self) -> None:
        if self.start >= self.end:
            raise ValueError(f"Working hours start {self.start} must be before end {self.end}")

    def contains(self, start: time, end: time) -> bool:
        """True if [start, end) lies entirely inside the window."""
        return self.start <= start and end <= self.end


@dataclass(frozen=True, order=True)
class TimeSlot:
    """
    A bookable interval with half-open [start_time, end_time) semantics.

    Ordering is chronological, so sorted() on a list of slots gives the
    order clients expect.
    """
    start_time: datetime
    end_time: datetime
