"""Testdaten-Generator für den Aufsichtsplaner.

Erzeugt eine Prüfungsperiode mit Sitzungen, Prüfungen und Lehrkräften.

Absichtliche Engpässe:
  1. Fach-Engpass: Mathématiques 1 wird in vielen Sitzungen geprüft →
     MAT1-Lehrkräfte sind für einen Großteil der Sitzungen gesperrt.
  2. Altdaten: ein Teil der Fächer der Lehrkräfte trägt keine ID
     → Konfliktprüfung nur per Namensabgleich (degradierter Modus).
  3. Letzte Sitzung jedes Tages ohne Endzeit (optional) → Überschneidung
     nur per Beginnzeit prüfbar.
"""

import random
from datetime import date, timedelta
from typing import Optional

from config.defaults import DEFAULT_SESSION_WINDOWS, GRADE_TEACHING_LOAD, SUBJECT_CATALOG
from config.schema import EngineConfig
from engine.policies import ExamCountNeedsPolicy, SurveillanceQuotaPolicy
from models.session import Exam, Session
from models.subject import Subject
from models.supervision_data import SupervisionData
from models.teacher import Teacher

# ─── Namens-Listen ────────────────────────────────────────────────────────────

_FIRST_NAMES = [
    "Amira", "Mohamed", "Sana", "Karim", "Leila", "Hatem", "Rim", "Sami",
    "Ines", "Walid", "Nour", "Anis", "Emna", "Yassine", "Salma", "Mehdi",
    "Olfa", "Hichem", "Asma", "Nizar", "Hela", "Fares", "Mouna", "Bilel",
]

_LAST_NAMES = [
    "Ben Salah", "Trabelsi", "Jaziri", "Gharbi", "Masmoudi", "Ayadi",
    "Chaabane", "Hamdi", "Mejri", "Ben Ammar", "Ellouze", "Kammoun",
    "Bouzid", "Sellami", "Fourati", "Karray", "Abid", "Zouari",
    "Feki", "Baccouche", "Hadj Taieb", "Rekik", "Turki", "Mahfoudh",
]

_PROGRAMS = ["LFG", "LFE", "LFIG", "MPC"]
_LEVELS = ["L1", "L2", "L3"]

# Gewichtung der Dienstgrade
_GRADE_WEIGHTS: list[tuple[str, int]] = [
    ("PES", 1),
    ("MC", 3),
    ("MA", 5),
    ("AS", 4),
    ("PTC", 2),
]


class FakeDataGenerator:
    """Generiert eine vollständige Prüfungsperiode auf Basis der EngineConfig."""

    def __init__(
        self,
        config: EngineConfig,
        seed: Optional[int] = None,
        num_days: int = 5,
        num_teachers: int = 30,
        start_date: date = date(2025, 1, 6),
        legacy_share: float = 0.15,
        open_ended_last_session: bool = False,
    ) -> None:
        self.config = config
        self.rng = random.Random(seed)
        self.num_days = num_days
        self.num_teachers = num_teachers
        self.start_date = start_date
        self.legacy_share = legacy_share
        self.open_ended_last_session = open_ended_last_session

    # ─── Fächer ───────────────────────────────────────────────────────────────

    def _generate_subjects(self) -> list[Subject]:
        return [Subject(id=code, name=name) for code, name in SUBJECT_CATALOG.items()]

    # ─── Sitzungen ────────────────────────────────────────────────────────────

    def _exam_days(self) -> list[date]:
        """Werktage ab start_date (Samstag/Sonntag übersprungen)."""
        days: list[date] = []
        d = self.start_date
        while len(days) < self.num_days:
            if d.weekday() < 5:
                days.append(d)
            d += timedelta(days=1)
        return days

    def _generate_sessions(self, subjects: list[Subject]) -> list[Session]:
        """Erzeugt pro Prüfungstag eine Sitzung je Zeitfenster mit 1–3 Prüfungen."""
        sessions: list[Session] = []
        bottleneck = subjects[0]
        exam_no = 0

        for day_idx, day in enumerate(self._exam_days(), start=1):
            for slot_idx, (start, end) in enumerate(DEFAULT_SESSION_WINDOWS, start=1):
                session_id = f"S{day_idx:02d}-{slot_idx}"
                n_exams = self.rng.randint(1, 3)
                pool = [s for s in subjects if s.id != bottleneck.id]
                chosen = self.rng.sample(pool, k=n_exams)
                # Engpass: das erste Fach taucht in jeder zweiten Sitzung auf
                if slot_idx % 2 == 1:
                    chosen[0] = bottleneck

                exams = []
                for subject in chosen:
                    exam_no += 1
                    exams.append(Exam(
                        id=f"E{exam_no:03d}",
                        session_id=session_id,
                        subject=subject,
                        program=self.rng.choice(_PROGRAMS),
                        class_group=f"{self.rng.choice(_LEVELS)}-G{self.rng.randint(1, 4)}",
                    ))

                last_of_day = slot_idx == len(DEFAULT_SESSION_WINDOWS)
                sessions.append(Session(
                    id=session_id,
                    date=day,
                    start=start,
                    end=None if (self.open_ended_last_session and last_of_day) else end,
                    exams=exams,
                ))
        return sessions

    # ─── Lehrkräfte ───────────────────────────────────────────────────────────

    def _make_teacher(self, idx: int, subjects: list[Subject]) -> Teacher:
        grades = [g for g, _ in _GRADE_WEIGHTS]
        weights = [w for _, w in _GRADE_WEIGHTS]
        grade = self.rng.choices(grades, weights=weights, k=1)[0]

        n_subjects = self.rng.randint(1, 3)
        taught = []
        for s in self.rng.sample(subjects, k=n_subjects):
            if self.rng.random() < self.legacy_share:
                # Altdatensatz: Fach nur per Name erfasst
                taught.append(Subject(name=s.name))
            else:
                taught.append(s.model_copy())

        name = f"{self.rng.choice(_LAST_NAMES)}, {self.rng.choice(_FIRST_NAMES)}"
        return Teacher(
            id=f"T{idx:03d}",
            name=name,
            grade=grade,
            subjects=taught,
            teaching_load=GRADE_TEACHING_LOAD[grade],
            quota=self.config.capacity.default_quota,
        )

    def _generate_teachers(self, subjects: list[Subject]) -> list[Teacher]:
        return [self._make_teacher(i, subjects) for i in range(1, self.num_teachers + 1)]

    # ─── Vollständiger Datensatz ──────────────────────────────────────────────

    def generate(self) -> SupervisionData:
        """Erzeugt den vollständigen Datensatz als SupervisionData-Objekt.

        Bedarf und Quoten werden direkt über die Policies berechnet; ein
        frisch generierter Datensatz enthält weder Wünsche noch Zuweisungen.
        """
        subjects = self._generate_subjects()
        sessions = self._generate_sessions(subjects)
        teachers = self._generate_teachers(subjects)

        needs = ExamCountNeedsPolicy.from_config(self.config.capacity)
        for session in sessions:
            session.required = needs.required_for(session)

        quotas = SurveillanceQuotaPolicy.from_config(
            self.config.capacity, self.config.matching.subject_name_fallback
        )
        for teacher in teachers:
            teacher.quota = quotas.quota_for(teacher, sessions)

        return SupervisionData(
            subjects=subjects,
            teachers=teachers,
            sessions=sessions,
            config=self.config,
        )

    # ─── Ausgabe ──────────────────────────────────────────────────────────────

    def print_summary(self, data: SupervisionData) -> None:
        """Gibt eine Rich-Tabelle mit Übersicht der erzeugten Daten aus."""
        from rich.console import Console
        from rich.table import Table
        from rich import box

        console = Console()
        table = Table(title="Erzeugte Testdaten", box=box.ROUNDED)
        table.add_column("Kategorie", style="bold cyan")
        table.add_column("Anzahl", justify="right")
        table.add_column("Details")

        days = len({s.date for s in data.sessions})
        exams = sum(len(s.exams) for s in data.sessions)
        required = sum(s.required for s in data.sessions)
        legacy = sum(1 for t in data.teachers for s in t.subjects if s.id is None)
        capacity = sum(t.quota or 0 for t in data.teachers)

        table.add_row("Fächer", str(len(data.subjects)), "")
        table.add_row("Sitzungen", str(len(data.sessions)), f"{days} Prüfungstage")
        table.add_row("Prüfungen", str(exams), "")
        table.add_row("Soll-Aufsichten", str(required), f"Quoten gesamt: {capacity}")
        table.add_row("Lehrkräfte", str(len(data.teachers)),
                      f"{legacy} Fach-Einträge ohne ID")

        console.print(table)
