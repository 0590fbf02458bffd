"""
Link management service.

Centers are linked to practitioners and patients through link records that
are soft-deactivated, never deleted. Linking again reactivates the existing
row (one row per center/practitioner or center/patient pair).
"""

import logging
from datetime import date, datetime
from typing import Optional, Type, TypeVar

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.constants import PRESCRIPTION_ACTIVE
from core.exceptions import (
    AssignmentConflictError, DuplicateLinkError, InvalidTimeRangeError, NotFoundError
)
from models import Center, CenterPatientLink, CenterPractitionerLink, Patient, Practitioner, Prescription
from services.linkage_service import LinkageService
from utils.datetime_utils import clinic_now, ensure_clinic_tz

logger = logging.getLogger(__name__)

LinkT = TypeVar("LinkT", CenterPractitionerLink, CenterPatientLink)


class LinkService:
    """
    Service class for center link operations.
    """

    @staticmethod
    def link_practitioner(
        db: Session,
        center_id: int,
        practitioner_id: int,
        notes: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> CenterPractitionerLink:
        """
        Link a practitioner to a center, reactivating a previous link if one exists.

        Raises:
            NotFoundError: If the center or practitioner does not exist
            DuplicateLinkError: If the link is already active
        """
        LinkService._get_center(db, center_id)
        practitioner = db.query(Practitioner).filter(Practitioner.id == practitioner_id).first()
        if not practitioner:
            raise NotFoundError("Practitioner not found", practitioner_id=practitioner_id)

        link = LinkService._upsert_link(
            db, CenterPractitionerLink, center_id,
            CenterPractitionerLink.practitioner_id, practitioner_id, notes, now,
        )
        LinkService._commit_link(db, center_id, practitioner_id=practitioner_id)

        logger.info(f"Linked practitioner {practitioner_id} to center {center_id}")
        return link

    @staticmethod
    def link_patient(
        db: Session,
        center_id: int,
        patient_id: int,
        notes: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> CenterPatientLink:
        """
        Link a patient to a center, reactivating a previous link if one exists.

        Raises:
            NotFoundError: If the center or patient does not exist
            DuplicateLinkError: If the link is already active
        """
        LinkService._get_center(db, center_id)
        LinkService._get_patient(db, patient_id)

        link = LinkService._upsert_link(
            db, CenterPatientLink, center_id,
            CenterPatientLink.patient_id, patient_id, notes, now,
        )
        LinkService._commit_link(db, center_id, patient_id=patient_id)

        logger.info(f"Linked patient {patient_id} to center {center_id}")
        return link

    @staticmethod
    def unlink_practitioner(db: Session, center_id: int, practitioner_id: int) -> CenterPractitionerLink:
        """
        Soft-deactivate a practitioner's link to a center.

        Raises:
            NotFoundError: If there is no active link
        """
        link = db.query(CenterPractitionerLink).filter(
            CenterPractitionerLink.center_id == center_id,
            CenterPractitionerLink.practitioner_id == practitioner_id,
            CenterPractitionerLink.is_active == True,
        ).first()
        if not link:
            raise NotFoundError(
                "Practitioner is not linked to this center",
                center_id=center_id,
                practitioner_id=practitioner_id,
            )

        link.is_active = False
        db.commit()

        logger.info(f"Unlinked practitioner {practitioner_id} from center {center_id}")
        return link

    @staticmethod
    def unlink_patient(db: Session, center_id: int, patient_id: int) -> CenterPatientLink:
        """
        Soft-deactivate a patient's link to a center.

        Raises:
            NotFoundError: If there is no active link
        """
        link = db.query(CenterPatientLink).filter(
            CenterPatientLink.center_id == center_id,
            CenterPatientLink.patient_id == patient_id,
            CenterPatientLink.is_active == True,
        ).first()
        if not link:
            raise NotFoundError(
                "Patient is not linked to this center",
                center_id=center_id,
                patient_id=patient_id,
            )

        link.is_active = False
        db.commit()

        logger.info(f"Unlinked patient {patient_id} from center {center_id}")
        return link

    @staticmethod
    def link_and_assign(
        db: Session,
        center_id: int,
        patient_id: int,
        practitioner_id: int,
        start_date: date,
        end_date: date,
        notes: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> Prescription:
        """
        Link a patient to the center, fix them to a practitioner, and open an exercise plan.

        All three writes happen in one transaction. An already active patient
        link is kept (its notes are refreshed when new notes are given).

        Args:
            db: Database session
            center_id: Center ID
            patient_id: Patient ID
            practitioner_id: Practitioner to assign
            start_date: First day of the exercise plan
            end_date: Last day of the exercise plan
            notes: Optional link notes

        Returns:
            The created ACTIVE prescription

        Raises:
            NotFoundError: If the practitioner is not actively linked to the center,
                or the patient does not exist
            AssignmentConflictError: If the patient is fixed to a different practitioner
            InvalidTimeRangeError: If end_date is before start_date
        """
        if not LinkageService.is_practitioner_linked(db, center_id, practitioner_id):
            raise NotFoundError(
                "Practitioner not found or not linked to this center",
                center_id=center_id,
                practitioner_id=practitioner_id,
            )

        patient = LinkService._get_patient(db, patient_id)

        if patient.assigned_practitioner_id is not None and patient.assigned_practitioner_id != practitioner_id:
            raise AssignmentConflictError(
                "Patient is already assigned to a different practitioner",
                patient_id=patient_id,
                assigned_practitioner_id=patient.assigned_practitioner_id,
            )

        if end_date < start_date:
            raise InvalidTimeRangeError("Plan end date must not be before its start date")

        try:
            link = db.query(CenterPatientLink).filter(
                CenterPatientLink.center_id == center_id,
                CenterPatientLink.patient_id == patient_id,
            ).first()
            linked_at = ensure_clinic_tz(now or clinic_now())
            if not link:
                db.add(CenterPatientLink(
                    center_id=center_id,
                    patient_id=patient_id,
                    is_active=True,
                    linked_at=linked_at,
                    notes=notes,
                ))
            else:
                if not link.is_active:
                    link.is_active = True
                    link.linked_at = linked_at
                if notes:
                    link.notes = notes

            patient.assigned_practitioner_id = practitioner_id

            prescription = Prescription(
                patient_id=patient_id,
                practitioner_id=practitioner_id,
                start_date=start_date,
                end_date=end_date,
                status=PRESCRIPTION_ACTIVE,
                notes=f"Initial exercise plan created for {patient.full_name}",
            )
            db.add(prescription)
            db.commit()

        except IntegrityError as e:
            logger.warning(f"Link-and-assign conflict for patient {patient_id}: {e}")
            db.rollback()
            raise DuplicateLinkError(
                "Patient link was modified concurrently, please retry",
                center_id=center_id,
                patient_id=patient_id,
            )

        logger.info(
            f"Linked patient {patient_id} to center {center_id}, assigned practitioner "
            f"{practitioner_id}, created prescription {prescription.id}"
        )
        return prescription

    @staticmethod
    def release_assignment(db: Session, center_id: int, patient_id: int) -> Patient:
        """
        Clear a patient's fixed practitioner assignment.

        The patient then books in SELECTABLE mode. Prescriptions are kept.

        Raises:
            NotFoundError: If the patient is not linked to the center or has no assignment
        """
        if not LinkageService.is_patient_linked(db, center_id, patient_id):
            raise NotFoundError(
                "Patient is not linked to this center",
                center_id=center_id,
                patient_id=patient_id,
            )

        patient = LinkService._get_patient(db, patient_id)
        if patient.assigned_practitioner_id is None:
            raise NotFoundError("Patient has no assigned practitioner", patient_id=patient_id)

        previous_practitioner_id = patient.assigned_practitioner_id
        patient.assigned_practitioner_id = None
        db.commit()

        logger.info(
            f"Released patient {patient_id} from practitioner {previous_practitioner_id} "
            f"at center {center_id}"
        )
        return patient

    @staticmethod
    def _get_center(db: Session, center_id: int) -> Center:
        center = db.query(Center).filter(Center.id == center_id).first()
        if not center:
            raise NotFoundError("Center not found", center_id=center_id)
        return center

    @staticmethod
    def _get_patient(db: Session, patient_id: int) -> Patient:
        patient = db.query(Patient).filter(Patient.id == patient_id).first()
        if not patient:
            raise NotFoundError("Patient not found", patient_id=patient_id)
        return patient

    @staticmethod
    def _upsert_link(
        db: Session,
        model: Type[LinkT],
        center_id: int,
        member_column,
        member_id: int,
        notes: Optional[str],
        now: Optional[datetime]
    ) -> LinkT:
        """
        Insert or reactivate the link row for (center_id, member_id).

        Raises:
            DuplicateLinkError: If the row exists and is already active
        """
        link = db.query(model).filter(
            model.center_id == center_id,
            member_column == member_id,
        ).first()
        linked_at = ensure_clinic_tz(now or clinic_now())

        if link is None:
            link = model(
                center_id=center_id,
                is_active=True,
                linked_at=linked_at,
                notes=notes,
            )
            setattr(link, member_column.key, member_id)
            db.add(link)
            return link

        if link.is_active:
            raise DuplicateLinkError(
                "Link already exists",
                center_id=center_id,
                member_id=member_id,
            )

        link.is_active = True
        link.linked_at = linked_at
        if notes is not None:
            link.notes = notes
        return link

    @staticmethod
    def _commit_link(db: Session, center_id: int, **member: int) -> None:
        """Commit a link upsert, mapping a racing duplicate insert to DuplicateLinkError."""
        try:
            db.commit()
        except IntegrityError as e:
            logger.warning(f"Duplicate link for center {center_id}: {e}")
            db.rollback()
            raise DuplicateLinkError("Link already exists", center_id=center_id, **member)
