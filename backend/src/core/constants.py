"""Application constants and configuration values."""

from core.config import FRONTEND_URL

# Database field lengths
MAX_TITLE_LENGTH = 200
MAX_NOTES_LENGTH = 1000

# Database connection settings
DB_POOL_RECYCLE_SECONDS = 300  # 5 minutes

# CORS origins for development and production
_CORS_ORIGINS_RAW = [
    "http://localhost:3000",      # Next.js dev server
    "http://localhost:5173",      # Vite dev server
    FRONTEND_URL,
]

# Filter out None values and empty strings to avoid CORS errors
CORS_ORIGINS = [origin for origin in _CORS_ORIGINS_RAW if origin and origin.strip()]

# Roles carried in the session token
ROLE_PATIENT = "PATIENT"
ROLE_CENTER_STAFF = "CENTER_STAFF"

# Appointment statuses
STATUS_SCHEDULED = "SCHEDULED"
STATUS_CONFIRMED = "CONFIRMED"
STATUS_IN_PROGRESS = "IN_PROGRESS"
STATUS_COMPLETED = "COMPLETED"
STATUS_CANCELLED = "CANCELLED"
STATUS_NO_SHOW = "NO_SHOW"

APPOINTMENT_STATUSES = (
    STATUS_SCHEDULED,
    STATUS_CONFIRMED,
    STATUS_IN_PROGRESS,
    STATUS_COMPLETED,
    STATUS_CANCELLED,
    STATUS_NO_SHOW,
)
TERMINAL_STATUSES = frozenset({STATUS_COMPLETED, STATUS_CANCELLED, STATUS_NO_SHOW})
EDITABLE_STATUSES = frozenset({STATUS_SCHEDULED, STATUS_CONFIRMED})

# Appointment types
APPOINTMENT_TYPES = ("CONSULTATION", "FOLLOW_UP", "ASSESSMENT", "TREATMENT", "EMERGENCY")

# Prescription (exercise plan) statuses
PRESCRIPTION_ACTIVE = "ACTIVE"
PRESCRIPTION_STATUSES = (PRESCRIPTION_ACTIVE, "COMPLETED", "PAUSED", "CANCELLED")

# Notification event types
EVENT_CREATED = "created"
EVENT_UPDATED = "updated"
