"""Datenmodell für ein Prüfungsfach (Pydantic v2)."""

from typing import Optional

from pydantic import BaseModel, field_validator


class Subject(BaseModel):
    """Repräsentiert ein Fach (Matière).

    Primärer Abgleich-Schlüssel ist die ``id``. Der Name dient nur als
    Ersatzschlüssel für denormalisierte Daten ohne IDs.
    """

    id: Optional[str] = None   # "MAT-101"; fehlt bei manchen Altdaten
    name: str                  # "Mathématiques 1"

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return v.strip()

    @property
    def name_key(self) -> str:
        """Normalisierter Name für den (verlustbehafteten) Namensabgleich."""
        return self.name.casefold()

    def __str__(self) -> str:
        return self.name
