"""Eignungsprüfung: ein Urteil pro (Lehrkraft, Sitzung).

Die Reihenfolge der Prüfungen ist fest (erster Treffer gewinnt), damit
dem Nutzer der spezifischste Grund angezeigt wird:

1. ALREADY_ASSIGNED   – Zuweisung existiert bereits
2. SUBJECT_CONFLICT   – eigenes Fach wird in der Sitzung geprüft
3. TEACHING_OVERLAP   – zeitgleich eigene Prüfung in anderer Sitzung
4. QUOTA_EXCEEDED     – Aufsichtsquote erreicht
5. SCHEDULE_OVERLAP   – zeitgleich bereits eine andere Aufsicht
6. SESSION_FULL       – Sitzung ist saturiert
7. ELIGIBLE

Alle Funktionen sind rein und verändern nichts.
"""

from enum import Enum
from typing import Iterable, Optional

from pydantic import BaseModel

from engine.conflicts import (
    conflicting_assignment,
    conflicting_teaching_session,
    subject_conflict_match,
)
from models.session import Session
from models.teacher import Teacher


class Verdict(str, Enum):
    ELIGIBLE = "eligible"
    ALREADY_ASSIGNED = "already_assigned"
    SUBJECT_CONFLICT = "subject_conflict"
    TEACHING_OVERLAP = "teaching_overlap"
    QUOTA_EXCEEDED = "quota_exceeded"
    SCHEDULE_OVERLAP = "schedule_overlap"
    SESSION_FULL = "session_full"

    @property
    def label(self) -> str:
        """Deutscher Anzeigetext für den Nutzer."""
        return _VERDICT_LABELS[self]

    @property
    def is_eligible(self) -> bool:
        return self is Verdict.ELIGIBLE


_VERDICT_LABELS: dict[Verdict, str] = {
    Verdict.ELIGIBLE: "Geeignet",
    Verdict.ALREADY_ASSIGNED: "Bereits zugewiesen",
    Verdict.SUBJECT_CONFLICT: "Fachkonflikt: eigenes Fach wird geprüft",
    Verdict.TEACHING_OVERLAP: "Zeitgleich eigene Prüfung in anderer Sitzung",
    Verdict.QUOTA_EXCEEDED: "Aufsichtsquote erreicht",
    Verdict.SCHEDULE_OVERLAP: "Terminüberschneidung mit bestehender Aufsicht",
    Verdict.SESSION_FULL: "Sitzung ist bereits voll besetzt",
}


class EligibilityReport(BaseModel):
    """Urteil mit erläuterndem Detail (für CLI und Dashboards)."""

    teacher_id: str
    session_id: str
    verdict: Verdict
    detail: str = ""
    degraded_match: bool = False   # Fachkonflikt nur per Namensabgleich


def explain(
    teacher: Teacher,
    session: Session,
    all_sessions: Iterable[Session],
    name_fallback: bool = True,
) -> EligibilityReport:
    """Wie ``evaluate``, liefert zusätzlich den konkreten Grund."""

    def report(verdict: Verdict, detail: str = "", degraded: bool = False) -> EligibilityReport:
        return EligibilityReport(
            teacher_id=teacher.id, session_id=session.id,
            verdict=verdict, detail=detail, degraded_match=degraded,
        )

    if teacher.is_assigned_to(session.id):
        return report(Verdict.ALREADY_ASSIGNED)

    match = subject_conflict_match(teacher, session, name_fallback)
    if match is not None:
        how = "per Name (ID fehlt)" if match.is_degraded else "per ID"
        return report(
            Verdict.SUBJECT_CONFLICT,
            f"Fach '{match.exam_subject.name}' {how}",
            degraded=match.is_degraded,
        )

    other = conflicting_teaching_session(teacher, session, all_sessions, name_fallback)
    if other is not None:
        return report(Verdict.TEACHING_OVERLAP, f"Prüfung in {other}")

    if teacher.quota_reached:
        return report(
            Verdict.QUOTA_EXCEEDED, f"{teacher.load}/{teacher.quota} Aufsichten"
        )

    clash = conflicting_assignment(teacher, session)
    if clash is not None:
        return report(
            Verdict.SCHEDULE_OVERLAP,
            f"Aufsicht in Sitzung {clash.session_id} ({clash.window})",
        )

    if session.is_full:
        return report(
            Verdict.SESSION_FULL, f"{session.registered}/{session.required} besetzt"
        )

    return report(Verdict.ELIGIBLE)


def evaluate(
    teacher: Teacher,
    session: Session,
    all_sessions: Iterable[Session],
    name_fallback: bool = True,
) -> Verdict:
    """Eignungsurteil für eine Lehrkraft und eine Sitzung."""
    return explain(teacher, session, all_sessions, name_fallback).verdict


def eligible_teachers(
    session: Session,
    teachers: Iterable[Teacher],
    all_sessions: Iterable[Session],
    name_fallback: bool = True,
) -> list[Teacher]:
    """Alle Lehrkräfte, die der Sitzung jetzt zugewiesen werden könnten."""
    all_sessions = list(all_sessions)
    return [
        t for t in teachers
        if evaluate(t, session, all_sessions, name_fallback) is Verdict.ELIGIBLE
    ]


def verdicts_for_teacher(
    teacher: Teacher,
    sessions: Iterable[Session],
    name_fallback: bool = True,
    all_sessions: Optional[Iterable[Session]] = None,
) -> dict[str, Verdict]:
    """Urteil pro Sitzung für eine Lehrkraft (Sitzungs-ID → Verdict)."""
    sessions = list(sessions)
    universe = list(all_sessions) if all_sessions is not None else sessions
    return {
        s.id: evaluate(teacher, s, universe, name_fallback)
        for s in sessions
    }
