"""Datenmodell für eine Lehrkraft (Pydantic v2)."""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from models.assignment import Assignment
from models.subject import Subject


class Teacher(BaseModel):
    """Aufsichtsberechtigte Lehrkraft (Enseignant)."""

    id: str
    name: str                                  # "Ben Salah, Amira"
    grade: Optional[str] = None                # Dienstgrad, z.B. "MA", "PES"
    subjects: list[Subject] = []               # Unterrichtete Fächer
    teaching_load: Optional[float] = None      # Lehrdeputat (h/Woche), Input der Quoten-Policy
    quota: Optional[int] = Field(None, ge=0)   # Max. Aufsichten; None = unbegrenzt
    assignments: list[Assignment] = []         # Nur vom Ledger verändert

    @field_validator("id")
    @classmethod
    def strip_id(cls, v: str) -> str:
        return v.strip()

    @property
    def load(self) -> int:
        """Aktuelle Anzahl bestätigter Aufsichten."""
        return len(self.assignments)

    @property
    def quota_reached(self) -> bool:
        return self.quota is not None and self.load >= self.quota

    @property
    def remaining_quota(self) -> Optional[int]:
        if self.quota is None:
            return None
        return max(0, self.quota - self.load)

    def is_assigned_to(self, session_id: str) -> bool:
        return any(a.session_id == session_id for a in self.assignments)
