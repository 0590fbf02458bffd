# pyright: reportMissingTypeStubs=false
"""
Availability API endpoints.

Read-only slot queries used by both patients and center staff before booking.
"""

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from api.responses import AvailabilityResponse, AvailabilitySlot
from auth.dependencies import UserContext, get_current_user
from core.database import get_db
from services import AvailabilityService
from utils.datetime_utils import clinic_now, parse_date_string

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/availability", response_model=AvailabilityResponse, response_model_by_alias=True)
async def get_availability(
    practitioner_id: int = Query(..., alias="practitionerId"),
    date: str = Query(..., description="Date in YYYY-MM-DD format"),
    current_user: UserContext = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Get available time slots for a practitioner on a date.

    Slots already taken by non-cancelled appointments, and slots that have
    already started, are not returned. An empty list is a valid answer.
    """
    requested_date = parse_date_string(date)

    slots = AvailabilityService.get_available_slots(
        db=db,
        practitioner_id=practitioner_id,
        date=requested_date,
        now=clinic_now(),
    )

    return AvailabilityResponse(
        date=requested_date,
        practitioner_id=practitioner_id,
        slots=[AvailabilitySlot.from_slot(slot) for slot in slots],
    )
