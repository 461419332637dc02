"""Datenmodelle für Prüfungssitzung und Prüfung (Pydantic v2)."""

from datetime import date as date_type, time
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from models.subject import Subject
from models.timewindow import TimeWindow


class Exam(BaseModel):
    """Eine Prüfung (Épreuve) innerhalb genau einer Sitzung."""

    id: str
    session_id: str
    subject: Subject
    program: Optional[str] = None       # Studiengang (Filière), z.B. "LFG"
    class_group: Optional[str] = None   # Klasse/Gruppe, z.B. "L1-G2"


class Session(BaseModel):
    """Prüfungssitzung (Séance) mit Zeitfenster und Aufsichtszählern.

    ``registered`` wird ausschließlich vom AssignmentLedger geschrieben.
    ``required`` kommt von außen (Bedarfs-Policy) und ist revidierbar.
    """

    id: str
    date: date_type
    start: time
    end: Optional[time] = None
    exams: list[Exam] = []
    registered: int = Field(0, ge=0)   # bestätigte Aufsichten
    required: int = Field(0, ge=0)     # Soll-Aufsichten

    @model_validator(mode="after")
    def _check_window(self):
        if self.end is not None and self.start >= self.end:
            raise ValueError(
                f"Sitzung {self.id}: Beginn ({self.start:%H:%M}) muss vor "
                f"Ende ({self.end:%H:%M}) liegen."
            )
        for exam in self.exams:
            if exam.session_id != self.id:
                raise ValueError(
                    f"Prüfung {exam.id} gehört zu Sitzung {exam.session_id}, "
                    f"nicht zu {self.id}."
                )
        return self

    @property
    def window(self) -> TimeWindow:
        return TimeWindow(date=self.date, start=self.start, end=self.end)

    @property
    def subjects(self) -> list[Subject]:
        """Alle in dieser Sitzung geprüften Fächer."""
        return [e.subject for e in self.exams]

    @property
    def is_full(self) -> bool:
        """True wenn keine Aufsicht mehr benötigt wird (saturiert)."""
        return self.registered >= self.required

    @property
    def is_over_capacity(self) -> bool:
        """True wenn nach einer Bedarfssenkung mehr Aufsichten als nötig eingetragen sind."""
        return self.registered > self.required

    @property
    def open_slots(self) -> int:
        return max(0, self.required - self.registered)

    def __str__(self) -> str:
        return f"Sitzung {self.id} ({self.window})"
