# pyright: reportMissingTypeStubs=false
"""
Linkage API endpoint.

Tells the booking UI which centers and practitioners a patient may book with.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from api.responses import LinkageResponse
from auth.dependencies import UserContext, get_current_user
from core.database import get_db
from services import LinkageService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/linkage", response_model=LinkageResponse, response_model_by_alias=True)
async def get_linkage(
    patient_id: Optional[int] = Query(None, alias="patientId"),
    current_user: UserContext = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Resolve a patient's booking linkage.

    Patients always get their own linkage. Center staff must name a patient
    linked to their center.
    """
    if current_user.is_patient():
        assert current_user.patient_id is not None
        target_patient_id = current_user.patient_id
    else:
        if patient_id is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="patientId is required"
            )
        assert current_user.center_id is not None
        if not LinkageService.is_patient_linked(db, current_user.center_id, patient_id):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Patient not found"
            )
        target_patient_id = patient_id

    result = LinkageService.resolve(db, target_patient_id)
    return LinkageResponse.from_result(result)
