# pyright: reportMissingTypeStubs=false
"""
Authentication and authorization dependencies for FastAPI.

Provides dependency injection functions that turn a bearer token into an
authenticated user context, and role checks for center-staff routes.
"""

import logging
from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from core.constants import ROLE_CENTER_STAFF, ROLE_PATIENT
from core.database import get_db
from models import Center, Patient
from services.jwt_service import JWTService, TokenPayload
from shared_types import Actor, CenterStaffActor, PatientActor

logger = logging.getLogger(__name__)


class UserContext:
    """Authenticated user context extracted from JWT token."""

    def __init__(
        self,
        role: str,
        subject: str,
        patient_id: Optional[int] = None,
        center_id: Optional[int] = None
    ):
        self.role = role  # "PATIENT" or "CENTER_STAFF"
        self.subject = subject
        self.patient_id = patient_id
        self.center_id = center_id

    def is_patient(self) -> bool:
        return self.role == ROLE_PATIENT

    def is_center_staff(self) -> bool:
        return self.role == ROLE_CENTER_STAFF

    def to_actor(self) -> Actor:
        """Convert to the actor variant the scheduling services dispatch on."""
        if self.is_patient() and self.patient_id is not None:
            return PatientActor(patient_id=self.patient_id)
        if self.is_center_staff() and self.center_id is not None:
            return CenterStaffActor(center_id=self.center_id)
        raise ValueError(f"Cannot derive an actor from {self!r}")

    def __repr__(self) -> str:
        return (
            f"UserContext(role='{self.role}', subject='{self.subject}', "
            f"patient_id={self.patient_id}, center_id={self.center_id})"
        )


# HTTP Bearer token security scheme
security = HTTPBearer(auto_error=False)


def get_token_payload(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Optional[TokenPayload]:
    """Extract and validate JWT token payload."""
    if not credentials:
        return None

    return JWTService.verify_token(credentials.credentials)


def get_current_user(
    payload: Optional[TokenPayload] = Depends(get_token_payload),
    db: Session = Depends(get_db)
) -> UserContext:
    """Get authenticated user context from JWT token."""
    if not payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication credentials not provided"
        )

    if payload.role == ROLE_PATIENT:
        if payload.patient_id is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid token"
            )

        patient = db.query(Patient).filter(Patient.id == payload.patient_id).first()
        if not patient:
            logger.warning(f"Token for unknown patient {payload.patient_id}")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="User not found"
            )

        return UserContext(role=ROLE_PATIENT, subject=payload.sub, patient_id=patient.id)

    if payload.role == ROLE_CENTER_STAFF:
        if payload.center_id is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid token"
            )

        center = db.query(Center).filter(Center.id == payload.center_id).first()
        if not center or not center.is_active:
            logger.warning(f"Token for unknown or inactive center {payload.center_id}")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Center not found or inactive"
            )

        return UserContext(role=ROLE_CENTER_STAFF, subject=payload.sub, center_id=center.id)

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid user role"
    )


def require_center_staff(user: UserContext = Depends(get_current_user)) -> UserContext:
    """Require center staff access."""
    if not user.is_center_staff():
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Center staff access required"
        )
    return user
