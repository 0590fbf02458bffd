"""
Integration tests for practitioner workload aggregation.
"""

import itertools
from datetime import date, time, timedelta

from hypothesis import HealthCheck, given, settings, strategies as st

from models import Prescription
from services.workload_service import PractitionerWorkload, WorkloadService
from tests.conftest import clinic_datetime, create_patient, create_practitioner, create_prescription

TODAY = date(2024, 6, 10)
NOW = clinic_datetime(TODAY, time(12, 0))

_emails = itertools.count()


class TestWorkloadAggregation:
    """Test workload figures against known plans."""

    def test_no_plans(self, db_session):
        practitioner = create_practitioner(db_session)

        assert WorkloadService.aggregate(db_session, practitioner.id, now=NOW) == PractitionerWorkload(0, 0, 0)

    def test_counts(self, db_session):
        practitioner = create_practitioner(db_session)
        alice = create_patient(db_session, first_name="Alice")
        bruno = create_patient(db_session, first_name="Bruno")
        carla = create_patient(db_session, first_name="Carla")

        # Alice: two current plans
        create_prescription(db_session, alice, practitioner, TODAY - timedelta(days=30), TODAY + timedelta(days=30))
        create_prescription(db_session, alice, practitioner, TODAY - timedelta(days=5), TODAY)
        # Bruno: ended yesterday
        create_prescription(db_session, bruno, practitioner, TODAY - timedelta(days=60), TODAY - timedelta(days=1))
        # Carla: paused
        create_prescription(
            db_session, carla, practitioner, TODAY, TODAY + timedelta(days=10), status="PAUSED"
        )

        workload = WorkloadService.aggregate(db_session, practitioner.id, now=NOW)

        assert workload.current_patients == 1
        assert workload.active_plans == 2
        assert workload.total_patients_served == 3

    def test_aggregate_many_covers_every_requested_id(self, db_session):
        busy = create_practitioner(db_session)
        idle = create_practitioner(db_session, first_name="Idle", last_name="Hands")
        patient = create_patient(db_session)
        create_prescription(db_session, patient, busy, TODAY, TODAY + timedelta(days=7))

        result = WorkloadService.aggregate_many(db_session, [busy.id, idle.id], now=NOW)

        assert result[busy.id] == PractitionerWorkload(1, 1, 1)
        assert result[idle.id] == PractitionerWorkload(0, 0, 0)

    def test_aggregate_many_empty(self, db_session):
        assert WorkloadService.aggregate_many(db_session, [], now=NOW) == {}


_plan = st.tuples(
    st.integers(min_value=0, max_value=4),  # patient index
    st.integers(min_value=-20, max_value=20),  # end date offset from today
    st.sampled_from(["ACTIVE", "ACTIVE", "COMPLETED", "PAUSED", "CANCELLED"]),
)


class TestWorkloadProperties:
    """Property-based checks on workload invariants."""

    @settings(max_examples=25, deadline=None, suppress_health_check=[HealthCheck.function_scoped_fixture])
    @given(plans=st.lists(_plan, max_size=12))
    def test_current_patients_never_exceed_active_plans(self, db_session, plans):
        db_session.query(Prescription).delete()
        db_session.commit()
        practitioner = create_practitioner(db_session, email=f"prop-{next(_emails)}@example.com")
        patients = [create_patient(db_session, first_name=f"P{i}") for i in range(5)]

        for patient_index, end_offset, status in plans:
            end = TODAY + timedelta(days=end_offset)
            create_prescription(
                db_session, patients[patient_index], practitioner, end - timedelta(days=30), end, status=status
            )

        workload = WorkloadService.aggregate(db_session, practitioner.id, now=NOW)

        assert workload.current_patients <= workload.active_plans
        assert workload.current_patients <= workload.total_patients_served
        assert workload.total_patients_served == len({p[0] for p in plans})
