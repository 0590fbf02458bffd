# pyright: reportMissingTypeStubs=false
"""
Appointment API endpoints.

Booking, editing, status transitions and listings. Patients act on their
own appointments; center staff act on their center's appointments. All
business rules live in AppointmentService and AppointmentLifecycle.
"""

import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlalchemy.orm import Session

from api.responses import AppointmentCreateRequest, AppointmentListResponse, AppointmentResponse
from auth.dependencies import UserContext, get_current_user
from core.database import get_db
from services import AppointmentLifecycle, AppointmentService
from utils.datetime_utils import clinic_now, parse_date_string

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/appointments", response_model=AppointmentListResponse, response_model_by_alias=True)
async def list_appointments(
    date: Optional[str] = Query(None, description="Staff only: restrict to one date (YYYY-MM-DD)"),
    current_user: UserContext = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    List appointments.

    Patients get their own appointments, newest first. Staff get their
    center's appointments in chronological order, each with the patient's
    previous appointment.
    """
    if current_user.is_patient():
        assert current_user.patient_id is not None
        appointments = AppointmentService.list_for_patient(db, current_user.patient_id)
        return AppointmentListResponse(
            appointments=[AppointmentResponse.from_model(a) for a in appointments]
        )

    assert current_user.center_id is not None
    on_date = parse_date_string(date) if date else None
    rows = AppointmentService.list_for_center(db, current_user.center_id, on_date=on_date)
    return AppointmentListResponse(
        appointments=[AppointmentResponse.from_row(row) for row in rows]
    )


@router.get("/appointments/{appointment_id}", response_model=AppointmentResponse, response_model_by_alias=True)
async def get_appointment(
    appointment_id: int,
    current_user: UserContext = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get one appointment visible to the caller."""
    appointment = AppointmentService.get_for_actor(db, current_user.to_actor(), appointment_id)
    return AppointmentResponse.from_model(appointment)


@router.post(
    "/appointments",
    response_model=AppointmentResponse,
    response_model_by_alias=True,
    status_code=status.HTTP_201_CREATED,
)
async def create_appointment(
    request: AppointmentCreateRequest,
    background_tasks: BackgroundTasks,
    current_user: UserContext = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Book an appointment.

    Returns 403 when the patient/practitioner/center combination is not
    permitted, 400 for an invalid time range, and 409 when the slot is taken.
    """
    appointment = AppointmentService.book(
        db, current_user.to_actor(), request.to_request(), now=clinic_now(),
        background_tasks=background_tasks,
    )
    return AppointmentResponse.from_model(appointment)


@router.put("/appointments/{appointment_id}", response_model=AppointmentResponse, response_model_by_alias=True)
async def update_appointment(
    appointment_id: int,
    request: AppointmentCreateRequest,
    background_tasks: BackgroundTasks,
    current_user: UserContext = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Edit a SCHEDULED or CONFIRMED appointment; 409 otherwise."""
    appointment = AppointmentService.update(
        db, current_user.to_actor(), appointment_id, request.to_request(), now=clinic_now(),
        background_tasks=background_tasks,
    )
    return AppointmentResponse.from_model(appointment)


@router.post("/appointments/{appointment_id}/cancel", response_model=AppointmentResponse, response_model_by_alias=True)
async def cancel_appointment(
    appointment_id: int,
    background_tasks: BackgroundTasks,
    current_user: UserContext = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Cancel an appointment. Patients may cancel their own; staff their center's."""
    appointment = AppointmentService.cancel(
        db, current_user.to_actor(), appointment_id, now=clinic_now(), background_tasks=background_tasks
    )
    return AppointmentResponse.from_model(appointment)


@router.post("/appointments/{appointment_id}/confirm", response_model=AppointmentResponse, response_model_by_alias=True)
async def confirm_appointment(
    appointment_id: int,
    background_tasks: BackgroundTasks,
    current_user: UserContext = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    appointment = AppointmentLifecycle.confirm(
        db, current_user.to_actor(), appointment_id, now=clinic_now(), background_tasks=background_tasks
    )
    return AppointmentResponse.from_model(appointment)


@router.post("/appointments/{appointment_id}/start", response_model=AppointmentResponse, response_model_by_alias=True)
async def start_appointment(
    appointment_id: int,
    background_tasks: BackgroundTasks,
    current_user: UserContext = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    appointment = AppointmentLifecycle.start(
        db, current_user.to_actor(), appointment_id, now=clinic_now(), background_tasks=background_tasks
    )
    return AppointmentResponse.from_model(appointment)


@router.post("/appointments/{appointment_id}/complete", response_model=AppointmentResponse, response_model_by_alias=True)
async def complete_appointment(
    appointment_id: int,
    background_tasks: BackgroundTasks,
    current_user: UserContext = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    appointment = AppointmentLifecycle.complete(
        db, current_user.to_actor(), appointment_id, now=clinic_now(), background_tasks=background_tasks
    )
    return AppointmentResponse.from_model(appointment)


@router.post("/appointments/{appointment_id}/no-show", response_model=AppointmentResponse, response_model_by_alias=True)
async def mark_no_show(
    appointment_id: int,
    background_tasks: BackgroundTasks,
    current_user: UserContext = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    appointment = AppointmentLifecycle.mark_no_show(
        db, current_user.to_actor(), appointment_id, now=clinic_now(), background_tasks=background_tasks
    )
    return AppointmentResponse.from_model(appointment)
