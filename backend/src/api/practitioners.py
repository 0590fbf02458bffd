# pyright: reportMissingTypeStubs=false
"""
Practitioner listing API endpoint.

Lists a center's actively linked practitioners together with their
current workload, for the booking UI and the center dashboard.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from api.responses import PractitionerListResponse, PractitionerResponse
from auth.dependencies import UserContext, get_current_user
from core.database import get_db
from models import CenterPractitionerLink, Practitioner
from services import LinkageService, WorkloadService
from utils.datetime_utils import clinic_now

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/practitioners", response_model=PractitionerListResponse, response_model_by_alias=True)
async def list_practitioners(
    center_id: Optional[int] = Query(None, alias="centerId"),
    current_user: UserContext = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    List the active practitioners linked to a center, with workload figures.

    Patients must pass a centerId from their resolved linkage. Staff default
    to their own center and may not list another center.
    """
    if current_user.is_patient():
        if center_id is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="centerId is required"
            )
        assert current_user.patient_id is not None
        linkage = LinkageService.resolve(db, current_user.patient_id)
        if center_id not in linkage.center_ids():
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You are not linked to this center"
            )
    else:
        if center_id is not None and center_id != current_user.center_id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Access denied to this center"
            )
        center_id = current_user.center_id

    practitioners = db.query(Practitioner).join(
        CenterPractitionerLink, CenterPractitionerLink.practitioner_id == Practitioner.id
    ).filter(
        CenterPractitionerLink.center_id == center_id,
        CenterPractitionerLink.is_active == True,
        Practitioner.is_active == True,
    ).order_by(Practitioner.last_name, Practitioner.first_name, Practitioner.id).all()

    workloads = WorkloadService.aggregate_many(db, [p.id for p in practitioners], now=clinic_now())

    return PractitionerListResponse(
        practitioners=[
            PractitionerResponse.from_model(practitioner, workloads[practitioner.id])
            for practitioner in practitioners
        ]
    )
