"""
Practitioner workload aggregation.

Computes the load figures shown next to practitioners in booking and
center-management listings. Read-only; nothing is cached.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import func, distinct
from sqlalchemy.orm import Session

from core.constants import PRESCRIPTION_ACTIVE
from models import Prescription
from utils.datetime_utils import clinic_now, ensure_clinic_tz

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PractitionerWorkload:
    current_patients: int
    """Distinct patients with an ACTIVE plan ending today or later."""

    active_plans: int
    """ACTIVE plans ending today or later (rows, not patients)."""

    total_patients_served: int
    """Distinct patients across every plan ever created."""


class WorkloadService:
    """
    Service class for practitioner workload figures.
    """

    @staticmethod
    def aggregate(db: Session, practitioner_id: int, now: Optional[datetime] = None) -> PractitionerWorkload:
        """
        Aggregate workload figures for one practitioner.

        Args:
            db: Database session
            practitioner_id: Practitioner ID
            now: Reference time; read once from the clinic clock if omitted

        Returns:
            PractitionerWorkload
        """
        return WorkloadService.aggregate_many(db, [practitioner_id], now=now)[practitioner_id]

    @staticmethod
    def aggregate_many(
        db: Session,
        practitioner_ids: List[int],
        now: Optional[datetime] = None
    ) -> Dict[int, PractitionerWorkload]:
        """
        Aggregate workload figures for several practitioners with grouped queries.

        `current_patients` and `active_plans` share one filter and one query, so
        both are evaluated against the same `today` and the same snapshot.

        Returns:
            Dict mapping every requested practitioner_id to its workload
        """
        if not practitioner_ids:
            return {}

        today = ensure_clinic_tz(now or clinic_now()).date()  # type: ignore[union-attr]

        current_rows = db.query(
            Prescription.practitioner_id,
            func.count(distinct(Prescription.patient_id)),
            func.count(Prescription.id),
        ).filter(
            Prescription.practitioner_id.in_(practitioner_ids),
            Prescription.status == PRESCRIPTION_ACTIVE,
            Prescription.end_date >= today,
        ).group_by(Prescription.practitioner_id).all()

        total_rows = db.query(
            Prescription.practitioner_id,
            func.count(distinct(Prescription.patient_id)),
        ).filter(
            Prescription.practitioner_id.in_(practitioner_ids),
        ).group_by(Prescription.practitioner_id).all()

        current = {row[0]: (int(row[1]), int(row[2])) for row in current_rows}
        totals = {row[0]: int(row[1]) for row in total_rows}

        result: Dict[int, PractitionerWorkload] = {}
        for practitioner_id in practitioner_ids:
            current_patients, active_plans = current.get(practitioner_id, (0, 0))
            result[practitioner_id] = PractitionerWorkload(
                current_patients=current_patients,
                active_plans=active_plans,
                total_patients_served=totals.get(practitioner_id, 0),
            )
        return result
