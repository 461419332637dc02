"""Bedarfs- und Quoten-Policies.

Die Policies gehören nicht zum Kern: sie berechnen Zahlen und schreiben sie
ausschließlich über die Hooks des Ledgers (``revise_required_count`` bzw.
``revise_quota``) zurück.
"""

import logging
import math
from typing import Optional

from config.schema import CapacityConfig
from engine.conflicts import find_subject_match
from engine.ledger import AssignmentLedger
from models.session import Session
from models.teacher import Teacher

logger = logging.getLogger(__name__)


class ExamCountNeedsPolicy:
    """Soll-Aufsichten = Anzahl Prüfungen × Aufsichten pro Prüfung."""

    def __init__(self, supervisors_per_exam: int = 2) -> None:
        if supervisors_per_exam < 0:
            raise ValueError("supervisors_per_exam muss ≥ 0 sein.")
        self.supervisors_per_exam = supervisors_per_exam

    @classmethod
    def from_config(cls, capacity: CapacityConfig) -> "ExamCountNeedsPolicy":
        return cls(supervisors_per_exam=capacity.supervisors_per_exam)

    def required_for(self, session: Session) -> int:
        return len(session.exams) * self.supervisors_per_exam

    def apply(self, ledger: AssignmentLedger, session_ids: Optional[list[str]] = None) -> dict[str, int]:
        """Berechnet den Bedarf und schreibt ihn über den Ledger-Hook zurück.

        Gibt nur die tatsächlich geänderten Sitzungen zurück (ID → neuer Wert).
        """
        changed: dict[str, int] = {}
        targets = (
            [ledger.session(sid) for sid in session_ids]
            if session_ids is not None else ledger.sessions
        )
        for session in targets:
            required = self.required_for(session)
            if required != session.required:
                ledger.revise_required_count(session.id, required)
                changed[session.id] = required
        logger.info(f"Bedarfs-Policy: {len(changed)} Sitzung(en) angepasst")
        return changed


class SurveillanceQuotaPolicy:
    """Aufsichtsquote aus Lehrdeputat und Anzahl Sitzungen mit eigenen Fächern.

    quota = max(min_quota, ceil(teaching_load / divisor + weight × n))

    n = Summe über die Fächer der Lehrkraft der Sitzungen, in denen das Fach
    geprüft wird. Eine Sitzung mit zwei eigenen Fächern zählt also doppelt.
    Aufgerundet, da eine Lehrkraft erst bei Erreichen des Rohwerts abgelehnt
    wird (3,4 erlaubt vier Aufsichten). Lehrkräfte ohne Deputatsangabe
    behalten ihre Quote.
    """

    def __init__(
        self,
        min_quota: int = 3,
        teaching_load_divisor: float = 10.0,
        subject_session_weight: float = 0.1,
        name_fallback: bool = True,
    ) -> None:
        if teaching_load_divisor <= 0:
            raise ValueError("teaching_load_divisor muss > 0 sein.")
        self.min_quota = min_quota
        self.teaching_load_divisor = teaching_load_divisor
        self.subject_session_weight = subject_session_weight
        self.name_fallback = name_fallback

    @classmethod
    def from_config(
        cls, capacity: CapacityConfig, name_fallback: bool = True
    ) -> "SurveillanceQuotaPolicy":
        return cls(
            min_quota=capacity.min_quota,
            teaching_load_divisor=capacity.teaching_load_divisor,
            subject_session_weight=capacity.subject_session_weight,
            name_fallback=name_fallback,
        )

    def sessions_in_subjects(self, teacher: Teacher, sessions: list[Session]) -> int:
        return sum(
            1
            for subject in teacher.subjects
            for s in sessions
            if find_subject_match([subject], s.subjects, self.name_fallback)
        )

    def quota_for(self, teacher: Teacher, sessions: list[Session]) -> Optional[int]:
        if teacher.teaching_load is None:
            return teacher.quota
        raw = (
            teacher.teaching_load / self.teaching_load_divisor
            + self.sessions_in_subjects(teacher, sessions) * self.subject_session_weight
        )
        # Rundungsrauschen (0.1 × 3 = 0.30000000000000004) nicht aufrunden
        return max(self.min_quota, math.ceil(round(raw, 9)))

    def apply(self, ledger: AssignmentLedger) -> dict[str, Optional[int]]:
        """Berechnet alle Quoten und schreibt Änderungen über ``revise_quota`` zurück."""
        sessions = ledger.sessions
        changed: dict[str, Optional[int]] = {}
        for teacher in ledger.teachers:
            quota = self.quota_for(teacher, sessions)
            if quota != teacher.quota:
                ledger.revise_quota(teacher.id, quota)
                changed[teacher.id] = quota
        logger.info(f"Quoten-Policy: {len(changed)} Lehrkraft/-kräfte angepasst")
        return changed
