"""Konfliktprüfung für Aufsichtszuweisungen.

Reine, zustandslose Prädikate über Schnappschüsse von Lehrkraft und Sitzung:

- Fachkonflikt: Lehrkraft unterrichtet ein in der Sitzung geprüftes Fach.
- Terminüberschneidung: eine bestehende Zuweisung überlappt die Sitzung.
- Unterrichtsüberschneidung: die Lehrkraft ist zeitgleich in einer ANDEREN
  Sitzung gebunden, in der eines ihrer Fächer geprüft wird.

Die Prädikate werfen bei wohlgeformter Eingabe nie. Fehlende optionale
Felder bedeuten "kein Konflikt".

Zeitintervalle sind halboffen: [08:00, 10:00) und [10:00, 12:00) überlappen
NICHT. Fehlt eine Endzeit, wird nur auf gleiche Beginnzeit geprüft
(``OverlapMode.START_ONLY``). Die Warnung dazu erscheint einmal pro Sitzung
beim Laden des Ledgers, nicht bei jedem Vergleich.
"""

import logging
from datetime import time
from enum import Enum
from typing import Iterable, Optional

from pydantic import BaseModel

from models.assignment import Assignment
from models.session import Session
from models.subject import Subject
from models.teacher import Teacher
from models.timewindow import TimeWindow

logger = logging.getLogger(__name__)


class MatchKind(str, Enum):
    """Wie zwei Fächer als gleich erkannt wurden."""
    ID = "id"
    NAME = "name"   # degradierter Modus (Namensgleichheit, verlustbehaftet)


class OverlapMode(str, Enum):
    """Wie zwei Zeitfenster verglichen werden."""
    INTERVAL = "interval"       # halboffene Intervalle
    START_ONLY = "start_only"   # Endzeit fehlt → nur gleiche Beginnzeit


class SubjectMatch(BaseModel):
    """Ein gefundener Fachkonflikt mit Art des Abgleichs."""

    kind: MatchKind
    teacher_subject: Subject
    exam_subject: Subject

    @property
    def is_degraded(self) -> bool:
        return self.kind == MatchKind.NAME


# ─── Zeit ─────────────────────────────────────────────────────────────────────

def to_minutes(t: time) -> int:
    """Uhrzeit → Minuten seit Mitternacht (Sekunden werden ignoriert)."""
    return t.hour * 60 + t.minute


def overlap_mode(a: TimeWindow, b: TimeWindow) -> OverlapMode:
    if a.end is None or b.end is None:
        return OverlapMode.START_ONLY
    return OverlapMode.INTERVAL


def windows_overlap(a: TimeWindow, b: TimeWindow) -> bool:
    """True wenn beide Fenster am selben Tag liegen und sich überschneiden."""
    if a.date != b.date:
        return False
    if overlap_mode(a, b) == OverlapMode.START_ONLY:
        logger.debug(
            f"Endzeit fehlt ({a} / {b}) – Überschneidung nur über Beginnzeit geprüft."
        )
        return to_minutes(a.start) == to_minutes(b.start)
    return (
        to_minutes(a.start) < to_minutes(b.end)
        and to_minutes(b.start) < to_minutes(a.end)
    )


# ─── Fächer ───────────────────────────────────────────────────────────────────

def match_subjects(
    a: Subject, b: Subject, name_fallback: bool = True
) -> Optional[MatchKind]:
    """Vergleicht zwei Fächer.

    Tragen beide eine ID, entscheidet allein die ID. Nur wenn auf einer
    Seite die ID fehlt, wird (optional) auf Namensgleichheit zurückgegriffen.
    """
    if a.id is not None and b.id is not None:
        return MatchKind.ID if a.id == b.id else None
    if name_fallback and a.name_key and a.name_key == b.name_key:
        return MatchKind.NAME
    return None


def find_subject_match(
    teacher_subjects: Iterable[Subject],
    exam_subjects: Iterable[Subject],
    name_fallback: bool = True,
) -> Optional[SubjectMatch]:
    """Erster Treffer zwischen zwei Fächermengen; ID-Treffer haben Vorrang."""
    teacher_subjects = list(teacher_subjects)
    exam_subjects = list(exam_subjects)
    if not teacher_subjects or not exam_subjects:
        return None

    degraded: Optional[SubjectMatch] = None
    for ts in teacher_subjects:
        for es in exam_subjects:
            kind = match_subjects(ts, es, name_fallback)
            if kind == MatchKind.ID:
                return SubjectMatch(kind=kind, teacher_subject=ts, exam_subject=es)
            if kind == MatchKind.NAME and degraded is None:
                degraded = SubjectMatch(kind=kind, teacher_subject=ts, exam_subject=es)

    if degraded is not None:
        logger.debug(
            f"Fach '{degraded.exam_subject.name}' nur per Namen abgeglichen (ID fehlt)."
        )
    return degraded


def subject_conflict_match(
    teacher: Teacher, session: Session, name_fallback: bool = True
) -> Optional[SubjectMatch]:
    return find_subject_match(teacher.subjects, session.subjects, name_fallback)


def subject_conflict(
    teacher: Teacher, session: Session, name_fallback: bool = True
) -> bool:
    """True wenn die Lehrkraft ein in der Sitzung geprüftes Fach unterrichtet."""
    return subject_conflict_match(teacher, session, name_fallback) is not None


# ─── Termine ──────────────────────────────────────────────────────────────────

def conflicting_assignment(teacher: Teacher, session: Session) -> Optional[Assignment]:
    """Erste bestehende Zuweisung, die das Zeitfenster der Sitzung überlappt."""
    window = session.window
    for a in teacher.assignments:
        if windows_overlap(a.window, window):
            return a
    return None


def schedule_overlap(teacher: Teacher, session: Session) -> bool:
    """True wenn die Lehrkraft zur Sitzungszeit bereits eine Aufsicht hat."""
    return conflicting_assignment(teacher, session) is not None


def conflicting_teaching_session(
    teacher: Teacher,
    session: Session,
    all_sessions: Iterable[Session],
    name_fallback: bool = True,
) -> Optional[Session]:
    """Andere, zeitgleiche Sitzung, in der ein Fach der Lehrkraft geprüft wird."""
    if not teacher.subjects:
        return None
    window = session.window
    for other in all_sessions:
        if other.id == session.id:
            continue
        if other.date != session.date:
            continue
        if not windows_overlap(other.window, window):
            continue
        if find_subject_match(teacher.subjects, other.subjects, name_fallback):
            return other
    return None


def teaching_overlap(
    teacher: Teacher,
    session: Session,
    all_sessions: Iterable[Session],
    name_fallback: bool = True,
) -> bool:
    """True wenn die Lehrkraft zur Sitzungszeit eine eigene Prüfung betreut."""
    return conflicting_teaching_session(
        teacher, session, all_sessions, name_fallback
    ) is not None
