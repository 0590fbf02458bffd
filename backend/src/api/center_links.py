# pyright: reportMissingTypeStubs=false
"""
Center link management API endpoints.

Staff-only endpoints that link and unlink practitioners and patients to the
caller's center, and fix a patient to a practitioner (link-and-assign).
Unlinking is a soft deactivation; linking again reactivates the same record.
"""

import logging
from typing import Union

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from api.responses import (
    AssignRequest, LinkResponse, PatientAssignmentResponse, PatientLinkRequest,
    PractitionerLinkRequest, PrescriptionResponse,
)
from auth.dependencies import UserContext, require_center_staff
from core.database import get_db
from models import CenterPatientLink, CenterPractitionerLink
from services import LinkService
from utils.datetime_utils import clinic_now

logger = logging.getLogger(__name__)

router = APIRouter()


def _link_response(link: Union[CenterPractitionerLink, CenterPatientLink]) -> LinkResponse:
    member_id = link.practitioner_id if isinstance(link, CenterPractitionerLink) else link.patient_id
    return LinkResponse(
        id=link.id,
        center_id=link.center_id,
        member_id=member_id,
        is_active=link.is_active,
        linked_at=link.linked_at,
        notes=link.notes,
    )


@router.post(
    "/practitioners",
    response_model=LinkResponse,
    response_model_by_alias=True,
    status_code=status.HTTP_201_CREATED,
)
async def link_practitioner(
    request: PractitionerLinkRequest,
    current_user: UserContext = Depends(require_center_staff),
    db: Session = Depends(get_db)
):
    """Link a practitioner to the caller's center; 409 if already linked."""
    assert current_user.center_id is not None
    link = LinkService.link_practitioner(
        db, current_user.center_id, request.practitioner_id, notes=request.notes, now=clinic_now()
    )
    return _link_response(link)


@router.delete("/practitioners/{practitioner_id}", response_model=LinkResponse, response_model_by_alias=True)
async def unlink_practitioner(
    practitioner_id: int,
    current_user: UserContext = Depends(require_center_staff),
    db: Session = Depends(get_db)
):
    """Soft-unlink a practitioner from the caller's center."""
    assert current_user.center_id is not None
    link = LinkService.unlink_practitioner(db, current_user.center_id, practitioner_id)
    return _link_response(link)


@router.post(
    "/patients",
    response_model=LinkResponse,
    response_model_by_alias=True,
    status_code=status.HTTP_201_CREATED,
)
async def link_patient(
    request: PatientLinkRequest,
    current_user: UserContext = Depends(require_center_staff),
    db: Session = Depends(get_db)
):
    """Link a patient to the caller's center; 409 if already linked."""
    assert current_user.center_id is not None
    link = LinkService.link_patient(
        db, current_user.center_id, request.patient_id, notes=request.notes, now=clinic_now()
    )
    return _link_response(link)


@router.delete("/patients/{patient_id}", response_model=LinkResponse, response_model_by_alias=True)
async def unlink_patient(
    patient_id: int,
    current_user: UserContext = Depends(require_center_staff),
    db: Session = Depends(get_db)
):
    """Soft-unlink a patient from the caller's center."""
    assert current_user.center_id is not None
    link = LinkService.unlink_patient(db, current_user.center_id, patient_id)
    return _link_response(link)


@router.post(
    "/patients/{patient_id}/assign",
    response_model=PrescriptionResponse,
    response_model_by_alias=True,
    status_code=status.HTTP_201_CREATED,
)
async def link_and_assign(
    patient_id: int,
    request: AssignRequest,
    current_user: UserContext = Depends(require_center_staff),
    db: Session = Depends(get_db)
):
    """
    Link a patient to the center, assign a practitioner, and open an exercise plan.

    Returns the created plan. 409 if the patient is already assigned to a
    different practitioner.
    """
    assert current_user.center_id is not None
    prescription = LinkService.link_and_assign(
        db,
        center_id=current_user.center_id,
        patient_id=patient_id,
        practitioner_id=request.practitioner_id,
        start_date=request.start_date,
        end_date=request.end_date,
        notes=request.notes,
        now=clinic_now(),
    )
    return PrescriptionResponse(
        id=prescription.id,
        patient_id=prescription.patient_id,
        practitioner_id=prescription.practitioner_id,
        start_date=prescription.start_date,
        end_date=prescription.end_date,
        status=prescription.status,
        notes=prescription.notes,
    )


@router.delete(
    "/patients/{patient_id}/assign",
    response_model=PatientAssignmentResponse,
    response_model_by_alias=True,
)
async def release_assignment(
    patient_id: int,
    current_user: UserContext = Depends(require_center_staff),
    db: Session = Depends(get_db)
):
    """Clear a patient's fixed practitioner so they can choose freely again."""
    assert current_user.center_id is not None
    patient = LinkService.release_assignment(db, current_user.center_id, patient_id)
    return PatientAssignmentResponse(
        patient_id=patient.id,
        assigned_practitioner_id=patient.assigned_practitioner_id,
    )
