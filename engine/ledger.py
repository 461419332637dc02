"""AssignmentLedger – einziger Schreiber von Wünschen, Zuweisungen und Zählern.

Zustandsautomat pro (Lehrkraft, Sitzung)::

    NONE ──submit_wish──▶ WISHED ──confirm_assignment──▶ ASSIGNED
      ▲                     │                                │
      └────withdraw_wish────┘                                │
      └───────────────────cancel_assignment──────────────────┘

    NONE ──confirm_assignment (Direktzuweisung)──▶ ASSIGNED

Nur ASSIGNED belegt einen Aufsichtsplatz. Es gibt keinen Übergang von
ASSIGNED zurück nach WISHED.

Nebenläufigkeit: Jede Mutation läuft unter einem Lock pro Lehrkraft und
einem Lock pro Sitzung, immer in dieser Reihenfolge. Die Eignung wird
innerhalb des kritischen Abschnitts erneut geprüft, bevor geschrieben wird.
"""

import logging
import threading
import uuid
from contextlib import ExitStack, contextmanager
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Iterator, Optional

from config.schema import EngineConfig
from engine.eligibility import EligibilityReport, Verdict, explain
from engine.errors import (
    DuplicateWishError,
    IneligibleError,
    InvalidQuotaError,
    InvalidRequiredCountError,
    NotAssignedError,
    UnknownSessionError,
    UnknownTeacherError,
    WishNotFoundError,
)
from models.assignment import Assignment, CancellationReceipt, Wish
from models.session import Session
from models.supervision_data import SupervisionData
from models.teacher import Teacher

logger = logging.getLogger(__name__)


class PairState(str, Enum):
    NONE = "none"
    WISHED = "wished"
    ASSIGNED = "assigned"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AssignmentLedger:
    """Verwaltet Wünsche und Zuweisungen auf einem SupervisionData-Datensatz.

    Lehrkräfte und Sitzungen werden per ID indiziert; die Objekte selbst
    bleiben die des Datensatzes und werden hier in-place verändert.
    """

    def __init__(
        self,
        data: SupervisionData,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._data = data
        self._clock = clock
        self._name_fallback = data.config.matching.subject_name_fallback

        self._teachers: dict[str, Teacher] = {t.id: t for t in data.teachers}
        self._sessions: dict[str, Session] = {s.id: s for s in data.sessions}
        self._wishes: dict[tuple[str, str], Wish] = {}
        for w in data.wishes:
            key = (w.teacher_id, w.session_id)
            if key in self._wishes:
                raise ValueError(
                    f"Datensatz enthält mehrere Wünsche für {w.teacher_id} / {w.session_id}."
                )
            self._wishes[key] = w

        self._registry_lock = threading.Lock()
        self._wishes_lock = threading.Lock()
        self._teacher_locks: dict[str, threading.RLock] = {}
        self._session_locks: dict[str, threading.RLock] = {}

        report = data.check_consistency()
        for err in report.errors:
            logger.warning(f"Inkonsistenter Datensatz: {err}")
        for warning in report.warnings:
            logger.warning(warning)

    # ─── Locks ────────────────────────────────────────────────────────────────

    def _lock_for(self, registry: dict[str, threading.RLock], key: str) -> threading.RLock:
        with self._registry_lock:
            lock = registry.get(key)
            if lock is None:
                lock = registry[key] = threading.RLock()
            return lock

    @contextmanager
    def _locked(
        self, teacher_id: Optional[str] = None, session_id: Optional[str] = None
    ) -> Iterator[None]:
        """Kritischer Abschnitt: erst Lehrkraft-, dann Sitzungs-Lock."""
        with ExitStack() as stack:
            if teacher_id is not None:
                stack.enter_context(self._lock_for(self._teacher_locks, teacher_id))
            if session_id is not None:
                stack.enter_context(self._lock_for(self._session_locks, session_id))
            yield

    # ─── Lookup ───────────────────────────────────────────────────────────────

    def teacher(self, teacher_id: str) -> Teacher:
        try:
            return self._teachers[teacher_id]
        except KeyError:
            raise UnknownTeacherError(teacher_id) from None

    def session(self, session_id: str) -> Session:
        try:
            return self._sessions[session_id]
        except KeyError:
            raise UnknownSessionError(session_id) from None

    @property
    def config(self) -> EngineConfig:
        return self._data.config

    @property
    def teachers(self) -> list[Teacher]:
        return list(self._teachers.values())

    @property
    def sessions(self) -> list[Session]:
        return list(self._sessions.values())

    # ─── Abfragen (ohne Mutation) ─────────────────────────────────────────────

    def explain(self, teacher_id: str, session_id: str) -> EligibilityReport:
        return explain(
            self.teacher(teacher_id), self.session(session_id),
            self.sessions, self._name_fallback,
        )

    def evaluate(self, teacher_id: str, session_id: str) -> Verdict:
        """Eignungsurteil auf dem aktuellen Stand (zur Anzeige/Filterung)."""
        return self.explain(teacher_id, session_id).verdict

    def eligible_teachers(self, session_id: str) -> list[Teacher]:
        session = self.session(session_id)
        sessions = self.sessions
        return [
            t for t in self.teachers
            if explain(t, session, sessions, self._name_fallback).verdict is Verdict.ELIGIBLE
        ]

    def wish_state(self, teacher_id: str, session_id: str) -> PairState:
        if self.teacher(teacher_id).is_assigned_to(session_id):
            return PairState.ASSIGNED
        if (teacher_id, session_id) in self._wishes:
            return PairState.WISHED
        return PairState.NONE

    def wishes_for_session(self, session_id: str) -> list[Wish]:
        """Wünsche einer Sitzung, älteste zuerst."""
        with self._wishes_lock:
            wishes = [w for w in self._wishes.values() if w.session_id == session_id]
        return sorted(wishes, key=lambda w: w.submitted_at)

    def wishes_for_teacher(self, teacher_id: str) -> list[Wish]:
        with self._wishes_lock:
            wishes = [w for w in self._wishes.values() if w.teacher_id == teacher_id]
        return sorted(wishes, key=lambda w: w.submitted_at)

    def assignments_for_session(self, session_id: str) -> list[Assignment]:
        self.session(session_id)
        return [
            a for t in self.teachers for a in t.assignments
            if a.session_id == session_id
        ]

    def assignments_for_teacher(self, teacher_id: str) -> list[Assignment]:
        return list(self.teacher(teacher_id).assignments)

    def over_capacity_sessions(self) -> list[Session]:
        """Sitzungen mit registered > required (nach Bedarfssenkung)."""
        return [s for s in self.sessions if s.is_over_capacity]

    # ─── Mutationen ───────────────────────────────────────────────────────────

    def _require_eligible(self, teacher: Teacher, session: Session) -> None:
        report = explain(teacher, session, self.sessions, self._name_fallback)
        if report.verdict is not Verdict.ELIGIBLE:
            logger.info(
                f"Abgelehnt: {teacher.id} → {session.id}: {report.verdict.label}"
                + (f" ({report.detail})" if report.detail else "")
            )
            raise IneligibleError(teacher.id, session.id, report.verdict)

    def submit_wish(self, teacher_id: str, session_id: str) -> str:
        """Legt einen Wunsch an. Belegt keinen Platz. Gibt die Wunsch-ID zurück."""
        teacher = self.teacher(teacher_id)
        session = self.session(session_id)
        key = (teacher_id, session_id)

        with self._locked(teacher_id, session_id):
            if key in self._wishes:
                raise DuplicateWishError(teacher_id, session_id)
            self._require_eligible(teacher, session)

            wish = Wish(
                id=f"W-{uuid.uuid4().hex[:12]}",
                teacher_id=teacher_id,
                session_id=session_id,
                submitted_at=self._clock(),
            )
            with self._wishes_lock:
                self._wishes[key] = wish

        logger.info(f"Wunsch {wish.id}: {teacher_id} → {session_id}")
        return wish.id

    def withdraw_wish(self, teacher_id: str, session_id: str) -> Wish:
        """Zieht einen noch nicht bestätigten Wunsch zurück (WISHED → NONE)."""
        self.teacher(teacher_id)
        self.session(session_id)
        key = (teacher_id, session_id)

        with self._locked(teacher_id, session_id):
            with self._wishes_lock:
                wish = self._wishes.pop(key, None)
            if wish is None:
                raise WishNotFoundError(teacher_id, session_id)

        logger.info(f"Wunsch {wish.id} zurückgezogen: {teacher_id} → {session_id}")
        return wish

    def confirm_assignment(self, teacher_id: str, session_id: str) -> str:
        """Bestätigt eine Zuweisung (aus Wunsch oder direkt durch die Verwaltung).

        Prüft die Eignung im kritischen Abschnitt erneut. Ist der letzte
        Platz inzwischen vergeben, schlägt der Aufruf mit SESSION_FULL fehl.
        """
        teacher = self.teacher(teacher_id)
        session = self.session(session_id)
        key = (teacher_id, session_id)

        with self._locked(teacher_id, session_id):
            self._require_eligible(teacher, session)

            with self._wishes_lock:
                wish = self._wishes.pop(key, None)
            assignment = Assignment(
                id=f"A-{uuid.uuid4().hex[:12]}",
                teacher_id=teacher_id,
                session_id=session_id,
                window=session.window,
                origin="wish" if wish is not None else "direct",
                confirmed_at=self._clock(),
            )
            teacher.assignments.append(assignment)
            session.registered += 1
            registered = session.registered

        logger.info(
            f"Zuweisung {assignment.id} ({assignment.origin}): {teacher_id} → {session_id} "
            f"[{registered}/{session.required}]"
        )
        return assignment.id

    def cancel_assignment(self, teacher_id: str, session_id: str) -> CancellationReceipt:
        """Storniert eine Zuweisung und gibt den Aufsichtsplatz frei."""
        teacher = self.teacher(teacher_id)
        session = self.session(session_id)
        key = (teacher_id, session_id)

        with self._locked(teacher_id, session_id):
            assignment = next(
                (a for a in teacher.assignments if a.session_id == session_id), None
            )
            if assignment is None:
                raise NotAssignedError(teacher_id, session_id)

            teacher.assignments = [
                a for a in teacher.assignments if a.id != assignment.id
            ]
            session.registered = max(0, session.registered - 1)
            with self._wishes_lock:
                wish = self._wishes.pop(key, None)

            receipt = CancellationReceipt(
                assignment_id=assignment.id,
                teacher_id=teacher_id,
                session_id=session_id,
                registered_after=session.registered,
                wish_removed=wish is not None,
                cancelled_at=self._clock(),
            )

        logger.info(
            f"Zuweisung {assignment.id} storniert: {teacher_id} → {session_id} "
            f"[{receipt.registered_after}/{session.required}]"
        )
        return receipt

    def revise_required_count(self, session_id: str, new_required: int) -> None:
        """Setzt die Soll-Aufsichten einer Sitzung (Hook für die Bedarfs-Policy).

        Bestehende Zuweisungen bleiben erhalten, auch wenn die Sitzung
        dadurch überbesetzt ist.
        """
        if isinstance(new_required, bool) or not isinstance(new_required, int) or new_required < 0:
            raise InvalidRequiredCountError(
                f"Soll-Aufsichten für {session_id} müssen eine ganze Zahl ≥ 0 sein "
                f"(erhalten: {new_required!r})."
            )
        session = self.session(session_id)

        with self._locked(session_id=session_id):
            old = session.required
            session.required = new_required
            registered = session.registered

        logger.info(f"Sitzung {session_id}: Soll-Aufsichten {old} → {new_required}")
        if registered > new_required:
            logger.warning(
                f"Sitzung {session_id} ist überbesetzt ({registered}/{new_required}) – "
                f"keine automatische Entfernung."
            )

    def revise_quota(self, teacher_id: str, quota: Optional[int]) -> None:
        """Setzt die Aufsichtsquote einer Lehrkraft (Hook für die Quoten-Policy)."""
        if quota is not None and (isinstance(quota, bool) or not isinstance(quota, int) or quota < 0):
            raise InvalidQuotaError(
                f"Quote für {teacher_id} muss eine ganze Zahl ≥ 0 oder None sein "
                f"(erhalten: {quota!r})."
            )
        teacher = self.teacher(teacher_id)

        with self._locked(teacher_id=teacher_id):
            old = teacher.quota
            teacher.quota = quota
            load = teacher.load

        logger.info(f"Lehrkraft {teacher_id}: Quote {old} → {quota}")
        if quota is not None and load > quota:
            logger.warning(
                f"Lehrkraft {teacher_id} liegt über der neuen Quote ({load}/{quota})."
            )

    # ─── Schnappschuss ────────────────────────────────────────────────────────

    def snapshot(self) -> SupervisionData:
        """Konsistente Kopie des aktuellen Stands (z.B. zum Speichern)."""
        with ExitStack() as stack:
            for tid in sorted(self._teachers):
                stack.enter_context(self._lock_for(self._teacher_locks, tid))
            for sid in sorted(self._sessions):
                stack.enter_context(self._lock_for(self._session_locks, sid))
            with self._wishes_lock:
                wishes = sorted(self._wishes.values(), key=lambda w: w.submitted_at)
            return self._data.model_copy(update={
                "teachers": [t.model_copy(deep=True) for t in self._teachers.values()],
                "sessions": [s.model_copy(deep=True) for s in self._sessions.values()],
                "wishes": [w.model_copy() for w in wishes],
            })
