"""
Application configuration using python-dotenv.

This module loads environment variables from .env file into os.environ
for use throughout the application.
"""

import os
import pathlib
from datetime import time

from dotenv import load_dotenv


# Determine if we're running in a test environment
# Don't load .env file during testing to ensure predictable test behavior
is_testing = os.getenv("PYTEST_VERSION") is not None or any("pytest" in str(frame) for frame in __import__('inspect').stack(0))

# Load .env file into os.environ (only outside of testing)
if not is_testing:
    # Try multiple possible locations for .env file
    possible_paths = [
        pathlib.Path(__file__).parent.parent.parent / ".env",  # backend/.env (when run from backend/src)
        pathlib.Path(__file__).parent.parent.parent.parent / ".env",  # .env (when run from src)
        pathlib.Path.cwd() / ".env",  # .env in current directory
        pathlib.Path.cwd().parent / ".env",  # .env in parent directory
    ]

    for env_path in possible_paths:
        if env_path.exists():
            load_dotenv(env_path)
            break


def parse_hhmm(value: str, name: str) -> time:
    """
    Parse an HH:MM configuration value.

    Raises:
        ValueError: If the value is not a valid HH:MM string
    """
    try:
        hour_str, minute_str = value.strip().split(":")
        return time(int(hour_str), int(minute_str))
    except ValueError:
        raise ValueError(f"{name} must be in HH:MM format, got {value!r}")


def _working_hours(start_name: str, end_name: str, start_default: str, end_default: str) -> tuple[time, time]:
    start = parse_hhmm(os.getenv(start_name, start_default), start_name)
    end = parse_hhmm(os.getenv(end_name, end_default), end_name)
    if start >= end:
        raise ValueError(f"{start_name} must be before {end_name}")
    return start, end


# Configuration constants with defaults
# These match the environment variables defined in .env.example
def get_database_url():
    """Get the database URL from environment."""
    return os.getenv(
        "DATABASE_URL",
        "postgresql://localhost/rehab_scheduler_dev"
    )

DATABASE_URL = get_database_url()
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Authentication
JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "dev-secret-key-change-in-production")
JWT_ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("JWT_ACCESS_TOKEN_EXPIRE_MINUTES", "60"))
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")

# Scheduling
# All centers share one time zone; stored appointment times are naive in this zone
CLINIC_TIMEZONE = os.getenv("CLINIC_TIMEZONE", "UTC")
SLOT_DURATION_MINUTES = int(os.getenv("SLOT_DURATION_MINUTES", "60"))
if SLOT_DURATION_MINUTES <= 0:
    raise ValueError("SLOT_DURATION_MINUTES must be positive")

WORKING_HOURS_START, WORKING_HOURS_END = _working_hours(
    "WORKING_HOURS_START", "WORKING_HOURS_END", "09:00", "17:00"
)
WEEKEND_WORKING_HOURS_START, WEEKEND_WORKING_HOURS_END = _working_hours(
    "WEEKEND_WORKING_HOURS_START", "WEEKEND_WORKING_HOURS_END",
    WORKING_HOURS_START.strftime("%H:%M"), WORKING_HOURS_END.strftime("%H:%M")
)

# Notifications
NOTIFICATION_WEBHOOK_URL = os.getenv("NOTIFICATION_WEBHOOK_URL", "")
NOTIFICATION_TIMEOUT_SECONDS = float(os.getenv("NOTIFICATION_TIMEOUT_SECONDS", "5"))
