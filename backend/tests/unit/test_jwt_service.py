"""
Tests for JWT service functionality.
"""

import jwt
from datetime import timedelta

from core.config import JWT_SECRET_KEY
from core.constants import ROLE_CENTER_STAFF, ROLE_PATIENT
from services.jwt_service import JWTService, TokenPayload


class TestJWTService:
    """Test JWT token creation and validation."""

    def test_round_trip_patient_token(self):
        """Test that a patient token decodes to the same claims."""
        token = JWTService.create_access_token(TokenPayload(sub="pat-1", role=ROLE_PATIENT, patient_id=3))

        payload = JWTService.verify_token(token)

        assert payload is not None
        assert payload.role == ROLE_PATIENT
        assert payload.patient_id == 3
        assert payload.center_id is None
        assert payload.exp is not None and payload.iat is not None
        assert payload.exp > payload.iat

    def test_staff_token_carries_center(self):
        token = JWTService.create_access_token(TokenPayload(sub="staff-1", role=ROLE_CENTER_STAFF, center_id=9))

        payload = JWTService.verify_token(token)

        assert payload is not None
        assert payload.center_id == 9

    def test_expired_token(self):
        """Test that an expired token is rejected."""
        token = JWTService.create_access_token(
            TokenPayload(sub="pat-1", role=ROLE_PATIENT, patient_id=3),
            expires_delta=timedelta(seconds=-1),
        )

        assert JWTService.verify_token(token) is None

    def test_wrong_secret(self):
        token = jwt.encode({"sub": "x", "role": ROLE_PATIENT, "patient_id": 1}, "other-secret", algorithm="HS256")

        assert JWTService.verify_token(token) is None

    def test_garbage_token(self):
        assert JWTService.verify_token("not-a-jwt") is None

    def test_signed_with_configured_secret(self):
        token = JWTService.create_access_token(TokenPayload(sub="pat-1", role=ROLE_PATIENT, patient_id=3))

        decoded = jwt.decode(token, JWT_SECRET_KEY, algorithms=["HS256"])

        assert decoded["sub"] == "pat-1"
