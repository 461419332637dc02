"""Tests für Bedarfs- und Quoten-Policy."""

from datetime import date, time

import pytest

from config.schema import CapacityConfig
from engine.ledger import AssignmentLedger
from engine.policies import ExamCountNeedsPolicy, SurveillanceQuotaPolicy
from models.session import Exam, Session
from models.subject import Subject
from models.supervision_data import SupervisionData
from models.teacher import Teacher

DAY = date(2025, 1, 6)

MATH = Subject(id="MAT1", name="Mathématiques 1")
STAT = Subject(id="STAT", name="Statistique")
ECO = Subject(id="ECO1", name="Microéconomie")


def _session(sid: str, start: str, *subjects: Subject, required: int = 0) -> Session:
    h, m = map(int, start.split(":"))
    return Session(
        id=sid,
        date=DAY,
        start=time(h, m),
        end=time(h + 1, m),
        exams=[
            Exam(id=f"{sid}-E{i}", session_id=sid, subject=s)
            for i, s in enumerate(subjects, start=1)
        ],
        required=required,
    )


def _make_ledger() -> AssignmentLedger:
    sessions = [
        _session("S1", "08:00", MATH, STAT),
        _session("S2", "10:00", MATH),
        _session("S3", "13:00", ECO, ECO, STAT, required=6),
        _session("S4", "15:00", required=3),
    ]
    teachers = [
        Teacher(id="T1", name="A", subjects=[MATH], teaching_load=50.0),
        Teacher(id="T2", name="B", subjects=[ECO], teaching_load=10.0, quota=7),
        Teacher(id="T3", name="C", subjects=[STAT], quota=4),
    ]
    return AssignmentLedger(SupervisionData(teachers=teachers, sessions=sessions))


class TestExamCountNeedsPolicy:
    def test_required_for(self):
        policy = ExamCountNeedsPolicy(supervisors_per_exam=2)
        assert policy.required_for(_session("X", "08:00", MATH, STAT)) == 4
        assert policy.required_for(_session("Y", "08:00")) == 0

    def test_apply_reports_only_changes(self):
        ledger = _make_ledger()
        changed = ExamCountNeedsPolicy(supervisors_per_exam=2).apply(ledger)
        assert changed == {"S1": 4, "S2": 2, "S4": 0}
        assert ledger.session("S3").required == 6

    def test_apply_subset(self):
        ledger = _make_ledger()
        changed = ExamCountNeedsPolicy(supervisors_per_exam=1).apply(ledger, ["S2"])
        assert changed == {"S2": 1}
        assert ledger.session("S1").required == 0

    def test_apply_never_evicts(self):
        ledger = _make_ledger()
        ledger.confirm_assignment("T3", "S4")
        ExamCountNeedsPolicy().apply(ledger)
        session = ledger.session("S4")
        assert session.required == 0
        assert session.registered == 1
        assert session.is_over_capacity

    def test_from_config(self):
        policy = ExamCountNeedsPolicy.from_config(CapacityConfig(supervisors_per_exam=3))
        assert policy.supervisors_per_exam == 3

    def test_negative_rejected(self):
        with pytest.raises(ValueError):
            ExamCountNeedsPolicy(supervisors_per_exam=-1)


class TestSurveillanceQuotaPolicy:
    def test_sessions_in_subjects(self):
        ledger = _make_ledger()
        policy = SurveillanceQuotaPolicy()
        assert policy.sessions_in_subjects(ledger.teacher("T1"), ledger.sessions) == 2
        assert policy.sessions_in_subjects(ledger.teacher("T3"), ledger.sessions) == 2

    def test_quota_formula(self):
        """50 / 10 + 0.1 × 2 = 5.2 → 6."""
        ledger = _make_ledger()
        policy = SurveillanceQuotaPolicy(min_quota=3, teaching_load_divisor=10.0,
                                         subject_session_weight=0.1)
        assert policy.quota_for(ledger.teacher("T1"), ledger.sessions) == 6

    def test_fractional_value_rounds_up(self):
        """34 / 10 = 3,4: abgelehnt wird erst ab vier Aufsichten."""
        policy = SurveillanceQuotaPolicy(min_quota=3)
        teacher = Teacher(id="T9", name="X", teaching_load=34.0)
        assert policy.quota_for(teacher, []) == 4

    def test_whole_value_not_rounded_up(self):
        policy = SurveillanceQuotaPolicy(min_quota=0, teaching_load_divisor=10.0,
                                         subject_session_weight=0.1)
        teacher = Teacher(id="T9", name="X", subjects=[ECO], teaching_load=27.0)
        sessions = [_session(f"X{i}", f"{8 + i}:00", ECO) for i in range(3)]
        # 2,7 + 0,1 × 3 liegt in Gleitkomma knapp über 3
        assert policy.quota_for(teacher, sessions) == 3

    def test_session_with_two_own_subjects_counts_twice(self):
        teacher = Teacher(id="T9", name="X", subjects=[MATH, STAT], teaching_load=30.0)
        sessions = [_session("X1", "08:00", MATH, STAT)]
        policy = SurveillanceQuotaPolicy(min_quota=0, subject_session_weight=0.5)
        assert policy.sessions_in_subjects(teacher, sessions) == 2
        assert policy.quota_for(teacher, sessions) == 4

    def test_min_quota_applies(self):
        ledger = _make_ledger()
        policy = SurveillanceQuotaPolicy(min_quota=3)
        assert policy.quota_for(ledger.teacher("T2"), ledger.sessions) == 3

    def test_teacher_without_load_keeps_quota(self):
        ledger = _make_ledger()
        policy = SurveillanceQuotaPolicy()
        assert policy.quota_for(ledger.teacher("T3"), ledger.sessions) == 4

    def test_apply_writes_through_ledger(self):
        ledger = _make_ledger()
        changed = SurveillanceQuotaPolicy().apply(ledger)
        assert changed == {"T1": 6, "T2": 3}
        assert ledger.teacher("T1").quota == 6
        assert ledger.teacher("T3").quota == 4

    def test_from_config(self):
        capacity = CapacityConfig(min_quota=1, teaching_load_divisor=20.0,
                                  subject_session_weight=0.5)
        policy = SurveillanceQuotaPolicy.from_config(capacity, name_fallback=False)
        assert policy.min_quota == 1
        assert policy.teaching_load_divisor == 20.0
        assert policy.name_fallback is False

    def test_invalid_divisor(self):
        with pytest.raises(ValueError):
            SurveillanceQuotaPolicy(teaching_load_divisor=0)
