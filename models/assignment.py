"""Datenmodelle für Wunsch, Zuweisung und Stornobeleg (Pydantic v2)."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel

from models.timewindow import TimeWindow


class Wish(BaseModel):
    """Aufsichtswunsch (Vœu) einer Lehrkraft für eine Sitzung.

    Beratend: ein Wunsch belegt keinen Aufsichtsplatz.
    """

    id: str
    teacher_id: str
    session_id: str
    submitted_at: datetime


class Assignment(BaseModel):
    """Bestätigte Aufsichtszuweisung (Affectation).

    ``window`` ist ein Schnappschuss des Sitzungs-Zeitfensters und wird für
    die Überschneidungsprüfung ohne Sitzungs-Lookup benötigt.
    """

    id: str
    teacher_id: str
    session_id: str
    window: TimeWindow
    origin: Literal["wish", "direct"] = "direct"
    confirmed_at: datetime


class CancellationReceipt(BaseModel):
    """Beleg über eine stornierte Zuweisung."""

    assignment_id: str
    teacher_id: str
    session_id: str
    registered_after: int    # Zähler der Sitzung nach dem Storno
    wish_removed: bool       # True wenn ein Rest-Wunsch mit entfernt wurde
    cancelled_at: datetime
