"""
Shared request/response models for API endpoints.

This module contains Pydantic models that are shared across multiple API
endpoints to ensure consistency and reduce duplication. JSON keys are
camelCase; Python attributes stay snake_case.
"""

from datetime import datetime, date as date_type
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from core.constants import APPOINTMENT_TYPES, MAX_NOTES_LENGTH, MAX_TITLE_LENGTH
from models import Appointment, Practitioner
from services.workload_service import PractitionerWorkload
from shared_types import AppointmentRequest, CenterAppointmentRow, LinkageResult, TimeSlot
from utils.datetime_utils import parse_datetime_to_clinic


class CamelModel(BaseModel):
    """Base model serializing to camelCase and accepting either naming on input."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ===== Availability =====

class AvailabilitySlot(CamelModel):
    """Response model for an available time slot."""
    start_time: datetime
    end_time: datetime

    @classmethod
    def from_slot(cls, slot: TimeSlot) -> "AvailabilitySlot":
        return cls(start_time=slot.start_time, end_time=slot.end_time)


class AvailabilityResponse(CamelModel):
    """Response model for availability query."""
    date: date_type
    practitioner_id: int
    slots: List[AvailabilitySlot]


# ===== Linkage =====

class LinkedPractitionerResponse(CamelModel):
    id: int
    name: str
    specialization: Optional[str] = None


class LinkedCenterResponse(CamelModel):
    id: int
    name: str
    practitioners: List[LinkedPractitionerResponse]


class LinkageResponse(CamelModel):
    """Response model for a patient's resolved booking linkage."""
    patient_id: int
    mode: str  # "FIXED" or "SELECTABLE"
    centers: List[LinkedCenterResponse]

    @classmethod
    def from_result(cls, result: LinkageResult) -> "LinkageResponse":
        return cls(
            patient_id=result.patient_id,
            mode=result.mode.value,
            centers=[
                LinkedCenterResponse(
                    id=center.id,
                    name=center.name,
                    practitioners=[
                        LinkedPractitionerResponse(
                            id=p.id, name=p.name, specialization=p.specialization
                        )
                        for p in center.practitioners
                    ],
                )
                for center in result.centers
            ],
        )


# ===== Appointments =====

class AppointmentCreateRequest(CamelModel):
    """Request model for booking or editing an appointment."""
    title: str = Field(min_length=1, max_length=MAX_TITLE_LENGTH)
    description: Optional[str] = None
    patient_id: int
    practitioner_id: int
    center_id: int
    start_time: datetime
    end_time: datetime
    type: str
    notes: Optional[str] = Field(default=None, max_length=MAX_NOTES_LENGTH)

    @field_validator('start_time', 'end_time', mode='before')
    @classmethod
    def parse_datetime(cls, v: str | datetime) -> datetime:
        """Parse datetime string to clinic timezone."""
        if not isinstance(v, (str, datetime)):
            raise ValueError("Expected an ISO 8601 datetime")
        return parse_datetime_to_clinic(v)

    @field_validator('type')
    @classmethod
    def validate_type(cls, v: str) -> str:
        if v not in APPOINTMENT_TYPES:
            raise ValueError(f"type must be one of {', '.join(APPOINTMENT_TYPES)}")
        return v

    @model_validator(mode='after')
    def strip_title(self) -> "AppointmentCreateRequest":
        self.title = self.title.strip()
        if not self.title:
            raise ValueError("Title is required")
        return self

    def to_request(self) -> AppointmentRequest:
        return AppointmentRequest(
            center_id=self.center_id,
            patient_id=self.patient_id,
            practitioner_id=self.practitioner_id,
            title=self.title,
            start_time=self.start_time,
            end_time=self.end_time,
            type=self.type,
            description=self.description,
            notes=self.notes,
        )


class PreviousAppointmentResponse(CamelModel):
    """The patient's latest earlier appointment, shown in center listings."""
    id: int
    start_time: datetime
    notes: Optional[str] = None


class AppointmentResponse(CamelModel):
    """Response model for appointment details."""
    id: int
    center_id: int
    patient_id: int
    practitioner_id: int
    title: str
    description: Optional[str] = None
    start_time: datetime
    end_time: datetime
    type: str
    status: str
    notes: Optional[str] = None
    meeting_url: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    previous_appointment: Optional[PreviousAppointmentResponse] = None

    @classmethod
    def from_model(
        cls,
        appointment: Appointment,
        previous: Optional[Appointment] = None
    ) -> "AppointmentResponse":
        return cls(
            id=appointment.id,
            center_id=appointment.center_id,
            patient_id=appointment.patient_id,
            practitioner_id=appointment.practitioner_id,
            title=appointment.title,
            description=appointment.description,
            start_time=appointment.start_datetime,
            end_time=appointment.end_datetime,
            type=appointment.type,
            status=appointment.status,
            notes=appointment.notes,
            meeting_url=appointment.meeting_url,
            cancelled_at=appointment.cancelled_at,
            created_at=appointment.created_at,
            updated_at=appointment.updated_at,
            previous_appointment=PreviousAppointmentResponse(
                id=previous.id,
                start_time=previous.start_datetime,
                notes=previous.notes,
            ) if previous else None,
        )

    @classmethod
    def from_row(cls, row: CenterAppointmentRow) -> "AppointmentResponse":
        return cls.from_model(row.appointment, row.previous_appointment)


class AppointmentListResponse(CamelModel):
    """Response model for listing appointments."""
    appointments: List[AppointmentResponse]


# ===== Practitioners =====

class WorkloadResponse(CamelModel):
    current_patients: int
    active_plans: int
    total_patients_served: int


class PractitionerResponse(CamelModel):
    """Response model for practitioner information with current workload."""
    id: int
    full_name: str
    email: str
    specialization: Optional[str] = None
    workload: WorkloadResponse

    @classmethod
    def from_model(cls, practitioner: Practitioner, workload: PractitionerWorkload) -> "PractitionerResponse":
        return cls(
            id=practitioner.id,
            full_name=practitioner.full_name,
            email=practitioner.email,
            specialization=practitioner.specialization,
            workload=WorkloadResponse(
                current_patients=workload.current_patients,
                active_plans=workload.active_plans,
                total_patients_served=workload.total_patients_served,
            ),
        )


class PractitionerListResponse(CamelModel):
    """Response model for listing practitioners."""
    practitioners: List[PractitionerResponse]


# ===== Center links =====

class PractitionerLinkRequest(CamelModel):
    practitioner_id: int
    notes: Optional[str] = Field(default=None, max_length=MAX_NOTES_LENGTH)


class PatientLinkRequest(CamelModel):
    patient_id: int
    notes: Optional[str] = Field(default=None, max_length=MAX_NOTES_LENGTH)


class LinkResponse(CamelModel):
    """Response model for a center link record."""
    id: int
    center_id: int
    member_id: int
    is_active: bool
    linked_at: datetime
    notes: Optional[str] = None


class AssignRequest(CamelModel):
    """Request model for linking a patient and assigning a practitioner."""
    practitioner_id: int
    start_date: date_type
    end_date: date_type
    notes: Optional[str] = Field(default=None, max_length=MAX_NOTES_LENGTH)


class PrescriptionResponse(CamelModel):
    id: int
    patient_id: int
    practitioner_id: int
    start_date: date_type
    end_date: date_type
    status: str
    notes: Optional[str] = None


class PatientAssignmentResponse(CamelModel):
    patient_id: int
    assigned_practitioner_id: Optional[int] = None
