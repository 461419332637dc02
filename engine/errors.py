"""Fehlerklassen des Zuweisungs-Ledgers.

Alle Fehler sind lokal behandelbar: der Aufrufer fragt ``evaluate`` erneut
ab und bietet dem Nutzer neue Optionen an. Es gibt keine internen Retries.
"""

from engine.eligibility import Verdict


class LedgerError(Exception):
    """Basisklasse aller Ledger-Fehler."""


class IneligibleError(LedgerError):
    """Die Lehrkraft darf die Sitzung (aktuell) nicht beaufsichtigen."""

    def __init__(self, teacher_id: str, session_id: str, verdict: Verdict) -> None:
        self.teacher_id = teacher_id
        self.session_id = session_id
        self.verdict = verdict
        super().__init__(
            f"{teacher_id} → {session_id}: {verdict.label}"
        )


class DuplicateWishError(LedgerError):
    """Für dieses Paar existiert bereits ein aktiver Wunsch."""

    def __init__(self, teacher_id: str, session_id: str) -> None:
        self.teacher_id = teacher_id
        self.session_id = session_id
        super().__init__(
            f"{teacher_id} hat für Sitzung {session_id} bereits einen Wunsch abgegeben."
        )


class WishNotFoundError(LedgerError):
    """Kein aktiver Wunsch für dieses Paar."""

    def __init__(self, teacher_id: str, session_id: str) -> None:
        self.teacher_id = teacher_id
        self.session_id = session_id
        super().__init__(
            f"Kein Wunsch von {teacher_id} für Sitzung {session_id} vorhanden."
        )


class NotAssignedError(LedgerError):
    """Keine Zuweisung für dieses Paar."""

    def __init__(self, teacher_id: str, session_id: str) -> None:
        self.teacher_id = teacher_id
        self.session_id = session_id
        super().__init__(
            f"{teacher_id} ist der Sitzung {session_id} nicht zugewiesen."
        )


class UnknownTeacherError(LedgerError, KeyError):
    def __init__(self, teacher_id: str) -> None:
        self.teacher_id = teacher_id
        super().__init__(f"Unbekannte Lehrkraft: {teacher_id}")

    def __str__(self) -> str:
        return self.args[0]


class UnknownSessionError(LedgerError, KeyError):
    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(f"Unbekannte Sitzung: {session_id}")

    def __str__(self) -> str:
        return self.args[0]


class InvalidRequiredCountError(LedgerError, ValueError):
    """Soll-Aufsichten müssen ≥ 0 sein."""


class InvalidQuotaError(LedgerError, ValueError):
    """Aufsichtsquote muss ≥ 0 oder None sein."""
