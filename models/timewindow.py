"""Zeitfenster einer Prüfungssitzung (Datum + Uhrzeit, Pydantic v2)."""

from datetime import date as date_type, time
from typing import Optional

from pydantic import BaseModel, model_validator


class TimeWindow(BaseModel):
    """Datum mit Beginn und (optionalem) Ende am selben Tag.

    Immutable, damit Zuweisungen einen stabilen Schnappschuss der
    Sitzungszeit halten können.
    """

    model_config = {"frozen": True}

    date: date_type
    start: time
    end: Optional[time] = None   # fehlt bei unvollständigen Altdaten

    @model_validator(mode="after")
    def _check_order(self):
        if self.end is not None and self.start >= self.end:
            raise ValueError(
                f"Beginn ({self.start:%H:%M}) muss vor Ende ({self.end:%H:%M}) liegen."
            )
        return self

    @property
    def has_end(self) -> bool:
        return self.end is not None

    def __str__(self) -> str:
        end = f"{self.end:%H:%M}" if self.end else "?"
        return f"{self.date.isoformat()} {self.start:%H:%M}–{end}"
