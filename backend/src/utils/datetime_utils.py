"""
Datetime utilities for consistent timezone handling across the application.

All centers operate in a single configured time zone (CLINIC_TIMEZONE).
Appointment dates and times are stored naive and interpreted in that zone;
everything that compares against "now" goes through these helpers.
"""

import logging
from datetime import datetime, date, time
from typing import Optional
from zoneinfo import ZoneInfo

from core.config import CLINIC_TIMEZONE

logger = logging.getLogger(__name__)

CLINIC_TZ = ZoneInfo(CLINIC_TIMEZONE)


def clinic_now() -> datetime:
    """
    Get the current datetime in the clinic time zone.

    Services take `now` as a parameter; request handlers call this once and
    pass the value down so a single operation never reads the clock twice.
    """
    return datetime.now(CLINIC_TZ)


def ensure_clinic_tz(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Ensure a datetime is timezone-aware in the clinic time zone.

    Naive datetimes are assumed to already be clinic-local.
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=CLINIC_TZ)
    return dt.astimezone(CLINIC_TZ)


def combine_clinic(day: date, at: time) -> datetime:
    """Combine a stored date and naive time into an aware clinic datetime."""
    return datetime.combine(day, at).replace(tzinfo=CLINIC_TZ)


def parse_datetime_to_clinic(v: str | datetime) -> datetime:
    """
    Parse datetime from string or return datetime object, ensuring clinic timezone.

    Handles:
    - ISO format with offset (e.g., "2024-06-10T09:00:00+02:00")
    - ISO format with Z (UTC) (e.g., "2024-06-10T07:00:00Z")
    - ISO format without offset (assumed clinic-local)

    Raises:
        ValueError: If datetime string cannot be parsed
    """
    if isinstance(v, str):
        try:
            parsed = datetime.fromisoformat(v.strip().replace('Z', '+00:00'))
        except ValueError as e:
            raise ValueError(f"Invalid datetime string format: {v}") from e
    else:
        parsed = v

    result = ensure_clinic_tz(parsed)
    if result is None:
        raise ValueError("Cannot parse None datetime")
    return result


def parse_date_string(date_str: str) -> date:
    """
    Parse a date string in YYYY-MM-DD or YYYY/MM/DD format.

    Automatically normalizes single-digit months/days.

    Raises:
        ValueError: If date string cannot be parsed
    """
    if not date_str or not date_str.strip():
        raise ValueError("Date string cannot be empty")

    date_str = date_str.strip()

    if '/' in date_str:
        parts = date_str.split('/')
    elif '-' in date_str:
        parts = date_str.split('-')
    else:
        raise ValueError(f"Invalid date format (expected YYYY-MM-DD or YYYY/MM/DD): {date_str}")

    if len(parts) != 3:
        raise ValueError(f"Invalid date format (expected YYYY-MM-DD or YYYY/MM/DD): {date_str}")

    normalized = f"{parts[0].zfill(4)}-{parts[1].zfill(2)}-{parts[2].zfill(2)}"

    try:
        return datetime.strptime(normalized, '%Y-%m-%d').date()
    except ValueError as e:
        raise ValueError(f"Invalid date format (expected YYYY-MM-DD or YYYY/MM/DD): {date_str}") from e


def minutes_since_midnight(t: time) -> int:
    return t.hour * 60 + t.minute


def add_minutes(t: time, minutes: int) -> Optional[time]:
    """
    Add minutes to a wall-clock time.

    Returns None when the result would cross midnight, since slots never span days.
    """
    total = minutes_since_midnight(t) + minutes
    if total >= 24 * 60:
        return None
    return time(total // 60, total % 60)


def is_weekend(day: date) -> bool:
    return day.weekday() >= 5
