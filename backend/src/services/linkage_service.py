"""
Linkage service.

Resolves which centers and practitioners a patient is permitted to book with,
and validates booking requests against that set. All methods are read-only.
"""

import logging
from typing import Dict, List

from sqlalchemy.orm import Session

from core.exceptions import InconsistentLinkageError, NotFoundError, UnauthorizedLinkageError
from models import Center, CenterPatientLink, CenterPractitionerLink, Patient, Practitioner
from shared_types import (
    Actor, CenterStaffActor, LinkageMode, LinkageResult, LinkedCenter, LinkedPractitioner, PatientActor
)

logger = logging.getLogger(__name__)


def _linked_practitioner(practitioner: Practitioner) -> LinkedPractitioner:
    return LinkedPractitioner(
        id=practitioner.id,
        name=practitioner.full_name,
        specialization=practitioner.specialization,
    )


class LinkageService:
    """
    Service class for patient booking linkage.
    """

    @staticmethod
    def resolve(db: Session, patient_id: int) -> LinkageResult:
        """
        Resolve the booking linkage for a patient.

        A patient with `assigned_practitioner_id` is FIXED to that practitioner
        and to the one center where both the patient's and the practitioner's
        links are active. Otherwise the patient may choose among all actively
        linked centers and their actively linked, active practitioners.

        Args:
            db: Database session
            patient_id: Patient ID

        Returns:
            LinkageResult

        Raises:
            NotFoundError: If the patient does not exist
            InconsistentLinkageError: If a fixed patient's center cannot be
                uniquely determined
        """
        patient = db.query(Patient).filter(Patient.id == patient_id).first()
        if not patient:
            raise NotFoundError("Patient not found", patient_id=patient_id)

        if patient.assigned_practitioner_id is not None:
            return LinkageService._resolve_fixed(db, patient)

        return LinkageService._resolve_selectable(db, patient)

    @staticmethod
    def _resolve_fixed(db: Session, patient: Patient) -> LinkageResult:
        practitioner_id = patient.assigned_practitioner_id
        practitioner = db.query(Practitioner).filter(Practitioner.id == practitioner_id).first()
        if not practitioner or not practitioner.is_active:
            logger.error(
                f"Patient {patient.id} is assigned to practitioner {practitioner_id}, "
                f"who is missing or inactive"
            )
            raise InconsistentLinkageError(
                "Assigned practitioner is no longer available",
                patient_id=patient.id,
                practitioner_id=practitioner_id,
            )

        # Centers where both links are active
        centers = db.query(Center).join(
            CenterPatientLink, CenterPatientLink.center_id == Center.id
        ).join(
            CenterPractitionerLink, CenterPractitionerLink.center_id == Center.id
        ).filter(
            CenterPatientLink.patient_id == patient.id,
            CenterPatientLink.is_active == True,
            CenterPractitionerLink.practitioner_id == practitioner.id,
            CenterPractitionerLink.is_active == True,
        ).order_by(Center.id).all()

        if len(centers) != 1:
            logger.error(
                f"Cannot determine center for patient {patient.id} fixed to practitioner "
                f"{practitioner.id}: {len(centers)} candidate centers"
            )
            raise InconsistentLinkageError(
                "Cannot determine the center for the assigned practitioner",
                patient_id=patient.id,
                practitioner_id=practitioner.id,
                candidate_center_ids=[c.id for c in centers],
            )

        center = centers[0]
        return LinkageResult(
            patient_id=patient.id,
            mode=LinkageMode.FIXED,
            centers=[LinkedCenter(
                id=center.id,
                name=center.name,
                practitioners=[_linked_practitioner(practitioner)],
            )],
        )

    @staticmethod
    def _resolve_selectable(db: Session, patient: Patient) -> LinkageResult:
        centers = db.query(Center).join(
            CenterPatientLink, CenterPatientLink.center_id == Center.id
        ).filter(
            CenterPatientLink.patient_id == patient.id,
            CenterPatientLink.is_active == True,
        ).order_by(Center.name, Center.id).all()

        if not centers:
            return LinkageResult(patient_id=patient.id, mode=LinkageMode.SELECTABLE, centers=[])

        # Batch fetch practitioners for all centers (1 query instead of N)
        center_ids = [c.id for c in centers]
        rows = db.query(CenterPractitionerLink.center_id, Practitioner).join(
            Practitioner, Practitioner.id == CenterPractitionerLink.practitioner_id
        ).filter(
            CenterPractitionerLink.center_id.in_(center_ids),
            CenterPractitionerLink.is_active == True,
            Practitioner.is_active == True,
        ).order_by(Practitioner.last_name, Practitioner.first_name, Practitioner.id).all()

        practitioners_by_center: Dict[int, List[LinkedPractitioner]] = {}
        for center_id, practitioner in rows:
            practitioners_by_center.setdefault(center_id, []).append(_linked_practitioner(practitioner))

        return LinkageResult(
            patient_id=patient.id,
            mode=LinkageMode.SELECTABLE,
            centers=[
                LinkedCenter(
                    id=center.id,
                    name=center.name,
                    practitioners=practitioners_by_center.get(center.id, []),
                )
                for center in centers
            ],
        )

    @staticmethod
    def is_practitioner_linked(db: Session, center_id: int, practitioner_id: int) -> bool:
        """Check for an active link to an active practitioner."""
        link = db.query(CenterPractitionerLink).join(
            Practitioner, Practitioner.id == CenterPractitionerLink.practitioner_id
        ).filter(
            CenterPractitionerLink.center_id == center_id,
            CenterPractitionerLink.practitioner_id == practitioner_id,
            CenterPractitionerLink.is_active == True,
            Practitioner.is_active == True,
        ).first()
        return link is not None

    @staticmethod
    def is_patient_linked(db: Session, center_id: int, patient_id: int) -> bool:
        link = db.query(CenterPatientLink).filter(
            CenterPatientLink.center_id == center_id,
            CenterPatientLink.patient_id == patient_id,
            CenterPatientLink.is_active == True,
        ).first()
        return link is not None

    @staticmethod
    def validate_booking_linkage(
        db: Session,
        actor: Actor,
        center_id: int,
        patient_id: int,
        practitioner_id: int
    ) -> None:
        """
        Validate that the actor may book this center/patient/practitioner combination.

        Patients are held to the resolved linkage set. Center staff may book any
        patient and practitioner that are actively linked to their own center.

        Raises:
            UnauthorizedLinkageError: If the combination is outside the permitted set
            InconsistentLinkageError: If a patient's fixed linkage is broken
        """
        if isinstance(actor, PatientActor):
            if patient_id != actor.patient_id:
                raise UnauthorizedLinkageError(
                    "Patients may only book appointments for themselves",
                    patient_id=patient_id,
                )
            linkage = LinkageService.resolve(db, actor.patient_id)
            if not linkage.allows(center_id, practitioner_id):
                raise UnauthorizedLinkageError(
                    "You are not linked to this practitioner at this center",
                    center_id=center_id,
                    practitioner_id=practitioner_id,
                )
            return

        if isinstance(actor, CenterStaffActor):
            if center_id != actor.center_id:
                raise UnauthorizedLinkageError(
                    "Staff may only book appointments at their own center",
                    center_id=center_id,
                )
            if not LinkageService.is_patient_linked(db, center_id, patient_id):
                raise UnauthorizedLinkageError(
                    "Patient is not linked to this center",
                    center_id=center_id,
                    patient_id=patient_id,
                )
            if not LinkageService.is_practitioner_linked(db, center_id, practitioner_id):
                raise UnauthorizedLinkageError(
                    "Practitioner is not linked to this center",
                    center_id=center_id,
                    practitioner_id=practitioner_id,
                )
            return

        raise TypeError(f"Unsupported actor: {actor!r}")
