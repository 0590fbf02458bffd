"""
Test utilities for rehab scheduler tests.
"""

import jwt
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

from core.config import JWT_SECRET_KEY
from core.constants import ROLE_CENTER_STAFF, ROLE_PATIENT


def create_jwt_token(
    role: str,
    patient_id: Optional[int] = None,
    center_id: Optional[int] = None,
    sub: str = "test-subject",
    expires_in: timedelta = timedelta(hours=1)
) -> str:
    """Create a session JWT the way the platform issues them."""
    now = datetime.now(timezone.utc)
    payload = {
        "sub": sub,
        "role": role,
        "patient_id": patient_id,
        "center_id": center_id,
        "exp": now + expires_in,
        "iat": now,
    }
    return jwt.encode(payload, JWT_SECRET_KEY, algorithm="HS256")


def patient_headers(patient_id: int) -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_jwt_token(ROLE_PATIENT, patient_id=patient_id)}"}


def staff_headers(center_id: int) -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_jwt_token(ROLE_CENTER_STAFF, center_id=center_id)}"}
