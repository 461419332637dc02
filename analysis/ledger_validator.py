"""Nachträgliche Validierung eines Zuweisungs-Schnappschusses.

Prüft einen gespeicherten Stand unabhängig vom Ledger auf verletzte
Invarianten – z.B. nach manuellem Editieren der JSON-Datei.
"""

from collections import defaultdict
from typing import Literal

from pydantic import BaseModel

from engine.conflicts import find_subject_match, windows_overlap
from models.supervision_data import SupervisionData


class ValidationViolation(BaseModel):
    """Eine einzelne Invarianten-Verletzung."""

    severity: Literal["error", "warning"]
    constraint: str      # z.B. "registered_mismatch"
    description: str
    entity: str          # teacher_id / session_id


class ValidationReport(BaseModel):
    """Ergebnis der Validierung."""

    violations: list[ValidationViolation]
    is_valid: bool       # True wenn keine Errors (Warnings ok)

    def by_constraint(self, constraint: str) -> list[ValidationViolation]:
        return [v for v in self.violations if v.constraint == constraint]

    def print_rich(self) -> None:
        """Gibt den Report formatiert über Rich aus."""
        from rich.console import Console
        from rich.panel import Panel
        from rich.table import Table
        from rich import box

        console = Console()
        errors = [v for v in self.violations if v.severity == "error"]
        warnings = [v for v in self.violations if v.severity == "warning"]

        status = (
            "[bold green]✓ VALIDE[/bold green]"
            if self.is_valid
            else "[bold red]✗ VERLETZUNGEN GEFUNDEN[/bold red]"
        )
        lines = [status, f"Fehler: {len(errors)} | Warnungen: {len(warnings)}"]
        console.print(Panel("\n".join(lines), title="Ledger-Validierung", border_style="cyan"))

        if not self.violations:
            console.print("[dim]Keine Verletzungen gefunden.[/dim]")
            return

        table = Table(box=box.ROUNDED, show_lines=True)
        table.add_column("Typ", width=8)
        table.add_column("Regel", width=24)
        table.add_column("Entität", width=12)
        table.add_column("Beschreibung")

        for v in self.violations:
            color = "red" if v.severity == "error" else "yellow"
            table.add_row(
                f"[{color}]{v.severity.upper()}[/{color}]",
                v.constraint,
                v.entity,
                v.description,
            )
        console.print(table)


class LedgerValidator:
    """Prüft einen SupervisionData-Stand auf Invarianten-Verletzungen."""

    def validate(self, data: SupervisionData) -> ValidationReport:
        """Führt alle Prüfungen durch und gibt einen ValidationReport zurück."""
        violations: list[ValidationViolation] = []
        name_fallback = data.config.matching.subject_name_fallback

        violations.extend(self._check_registered_counters(data))
        violations.extend(self._check_duplicate_pairs(data))
        violations.extend(self._check_over_capacity(data))
        violations.extend(self._check_quota(data))
        violations.extend(self._check_subject_conflicts(data, name_fallback))
        violations.extend(self._check_double_booking(data))
        violations.extend(self._check_residual_wishes(data))
        violations.extend(self._check_degraded_windows(data))

        has_errors = any(v.severity == "error" for v in violations)
        return ValidationReport(violations=violations, is_valid=not has_errors)

    # ── Einzelne Prüfungen ────────────────────────────────────────────────────

    def _check_registered_counters(self, data: SupervisionData) -> list[ValidationViolation]:
        """registered muss ≥ 0 sein und der Anzahl Zuweisungen entsprechen."""
        violations: list[ValidationViolation] = []
        counts: dict[str, int] = defaultdict(int)
        for t in data.teachers:
            for a in t.assignments:
                counts[a.session_id] += 1

        for s in data.sessions:
            if s.registered < 0:
                violations.append(ValidationViolation(
                    severity="error", constraint="negative_registered", entity=s.id,
                    description=f"registered={s.registered} ist negativ.",
                ))
            if s.registered != counts.get(s.id, 0):
                violations.append(ValidationViolation(
                    severity="error", constraint="registered_mismatch", entity=s.id,
                    description=(
                        f"registered={s.registered}, aber {counts.get(s.id, 0)} "
                        f"Zuweisung(en) gefunden."
                    ),
                ))
        return violations

    def _check_duplicate_pairs(self, data: SupervisionData) -> list[ValidationViolation]:
        """Höchstens eine Zuweisung und ein Wunsch pro (Lehrkraft, Sitzung)."""
        violations: list[ValidationViolation] = []
        for t in data.teachers:
            per_session: dict[str, int] = defaultdict(int)
            for a in t.assignments:
                per_session[a.session_id] += 1
            for sid, n in per_session.items():
                if n > 1:
                    violations.append(ValidationViolation(
                        severity="error", constraint="duplicate_assignment", entity=t.id,
                        description=f"{n} Zuweisungen für Sitzung {sid}.",
                    ))

        wish_counts: dict[tuple[str, str], int] = defaultdict(int)
        for w in data.wishes:
            wish_counts[(w.teacher_id, w.session_id)] += 1
        for (tid, sid), n in wish_counts.items():
            if n > 1:
                violations.append(ValidationViolation(
                    severity="error", constraint="duplicate_wish", entity=tid,
                    description=f"{n} Wünsche für Sitzung {sid}.",
                ))
        return violations

    def _check_over_capacity(self, data: SupervisionData) -> list[ValidationViolation]:
        """Überbesetzung ist zulässig (nach Bedarfssenkung), wird aber gemeldet."""
        return [
            ValidationViolation(
                severity="warning", constraint="over_capacity", entity=s.id,
                description=f"{s.registered} Aufsichten bei Soll {s.required}.",
            )
            for s in data.sessions if s.is_over_capacity
        ]

    def _check_quota(self, data: SupervisionData) -> list[ValidationViolation]:
        """Mehr Aufsichten als Quote (z.B. nach Quotensenkung) → Warnung."""
        return [
            ValidationViolation(
                severity="warning", constraint="quota_exceeded", entity=t.id,
                description=f"{t.load} Aufsichten bei Quote {t.quota}.",
            )
            for t in data.teachers
            if t.quota is not None and t.load > t.quota
        ]

    def _check_subject_conflicts(
        self, data: SupervisionData, name_fallback: bool
    ) -> list[ValidationViolation]:
        """Keine Lehrkraft darf eine Sitzung mit eigenem Fach beaufsichtigen."""
        violations: list[ValidationViolation] = []
        sessions = {s.id: s for s in data.sessions}
        for t in data.teachers:
            for a in t.assignments:
                session = sessions.get(a.session_id)
                if session is None:
                    continue
                match = find_subject_match(t.subjects, session.subjects, name_fallback)
                if match is not None:
                    violations.append(ValidationViolation(
                        severity="error", constraint="subject_conflict", entity=t.id,
                        description=(
                            f"Beaufsichtigt Sitzung {session.id} mit eigenem Fach "
                            f"'{match.exam_subject.name}' (Abgleich: {match.kind.value})."
                        ),
                    ))
        return violations

    def _check_double_booking(self, data: SupervisionData) -> list[ValidationViolation]:
        """Keine zwei Zuweisungen einer Lehrkraft dürfen sich zeitlich überschneiden."""
        violations: list[ValidationViolation] = []
        for t in data.teachers:
            items = sorted(t.assignments, key=lambda a: (a.window.date, a.window.start))
            for i, a in enumerate(items):
                for b in items[i + 1:]:
                    if a.session_id == b.session_id:
                        continue
                    if windows_overlap(a.window, b.window):
                        violations.append(ValidationViolation(
                            severity="error", constraint="schedule_overlap", entity=t.id,
                            description=(
                                f"Sitzungen {a.session_id} ({a.window}) und "
                                f"{b.session_id} ({b.window}) überschneiden sich."
                            ),
                        ))
        return violations

    def _check_residual_wishes(self, data: SupervisionData) -> list[ValidationViolation]:
        """Ein Wunsch neben einer bestätigten Zuweisung ist ein Rest-Wunsch."""
        assigned = {
            (t.id, a.session_id) for t in data.teachers for a in t.assignments
        }
        return [
            ValidationViolation(
                severity="warning", constraint="residual_wish", entity=w.teacher_id,
                description=f"Wunsch {w.id} für bereits zugewiesene Sitzung {w.session_id}.",
            )
            for w in data.wishes if (w.teacher_id, w.session_id) in assigned
        ]

    def _check_degraded_windows(self, data: SupervisionData) -> list[ValidationViolation]:
        """Sitzungen ohne Endzeit schwächen die Überschneidungsprüfung."""
        return [
            ValidationViolation(
                severity="warning", constraint="missing_end_time", entity=s.id,
                description="Keine Endzeit – Überschneidung nur per Beginnzeit prüfbar.",
            )
            for s in data.sessions if s.end is None
        ]
