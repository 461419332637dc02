"""Kandidatensuche: geeignete Aufsichten für eine Sitzung.

Listet nur Lehrkräfte mit Urteil ELIGIBLE und sortiert sie für die
Verwaltung vor. Das ist eine Anzeigehilfe, keine Optimierung: zugewiesen
wird weiterhin einzeln über ``AssignmentLedger.confirm_assignment``.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from engine.eligibility import Verdict, evaluate
from engine.ledger import AssignmentLedger


class SupervisionCandidate(BaseModel):
    """Ein Kandidat für eine Aufsicht."""

    teacher_id: str
    name: str
    has_wish: bool                    # Lehrkraft hat die Sitzung gewünscht
    wish_submitted_at: Optional[datetime] = None
    current_load: int                 # Bestätigte Aufsichten
    quota: Optional[int]
    load_ratio: float                 # load / quota (0.0 bei unbegrenzter Quote)
    score: float                      # 0–100 (höher = besser)


class CandidateFinder:
    """Findet und bewertet geeignete Aufsichten."""

    def find_candidates(
        self, session_id: str, ledger: AssignmentLedger
    ) -> list[SupervisionCandidate]:
        """Alle geeigneten Lehrkräfte für eine Sitzung, beste zuerst.

        Sortierung: Score absteigend, bei Gleichstand älterer Wunsch zuerst,
        dann Lehrkraft-ID.
        """
        session = ledger.session(session_id)
        sessions = ledger.sessions
        name_fallback = ledger.config.matching.subject_name_fallback
        wishes = {w.teacher_id: w for w in ledger.wishes_for_session(session_id)}

        candidates: list[SupervisionCandidate] = []
        for teacher in ledger.teachers:
            if evaluate(teacher, session, sessions, name_fallback) is not Verdict.ELIGIBLE:
                continue

            wish = wishes.get(teacher.id)
            load_ratio = teacher.load / teacher.quota if teacher.quota else 0.0
            score = self._compute_score(has_wish=wish is not None, load_ratio=load_ratio)
            candidates.append(SupervisionCandidate(
                teacher_id=teacher.id,
                name=teacher.name,
                has_wish=wish is not None,
                wish_submitted_at=wish.submitted_at if wish else None,
                current_load=teacher.load,
                quota=teacher.quota,
                load_ratio=round(load_ratio, 3),
                score=round(score, 1),
            ))

        candidates.sort(key=lambda c: (
            -c.score,
            c.wish_submitted_at.timestamp() if c.wish_submitted_at else float("inf"),
            c.teacher_id,
        ))
        return candidates

    # ── Score-Berechnung ──────────────────────────────────────────────────────

    def _compute_score(self, has_wish: bool, load_ratio: float) -> float:
        """Berechnet den Score eines Kandidaten (0–100).

        Zusammensetzung:
        - Wunsch vorhanden: 60 Punkte
        - Auslastung: bis 40 Punkte ((1 - load_ratio) × 40)
        """
        wish_score = 60.0 if has_wish else 0.0
        load_score = max(0.0, 1.0 - load_ratio) * 40.0
        return wish_score + load_score
