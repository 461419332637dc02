"""SupervisionData: Vollständiger Datensatz + Konsistenz-Check (Pydantic v2)."""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

from models.assignment import Wish
from models.session import Session
from models.subject import Subject
from models.teacher import Teacher
from config.schema import EngineConfig


class ConsistencyReport(BaseModel):
    """Ergebnis des Konsistenz-Checks."""

    is_consistent: bool
    errors: list[str]      # Verletzte Invarianten
    warnings: list[str]    # Zulässige, aber auffällige Zustände

    def print_rich(self) -> None:
        """Gibt den Report formatiert über Rich aus."""
        from rich.console import Console
        from rich.panel import Panel

        console = Console()
        if self.is_consistent:
            status = "[bold green]✓ KONSISTENT[/bold green]"
        else:
            status = "[bold red]✗ INKONSISTENT[/bold red]"

        lines = [status]
        if self.errors:
            lines.append("\n[red bold]Fehler:[/red bold]")
            for e in self.errors:
                lines.append(f"  [red]• {e}[/red]")
        if self.warnings:
            lines.append("\n[yellow bold]Warnungen:[/yellow bold]")
            for w in self.warnings:
                lines.append(f"  [yellow]• {w}[/yellow]")
        if not self.errors and not self.warnings:
            lines.append("[dim]Keine Probleme gefunden.[/dim]")

        console.print(Panel("\n".join(lines), title="Konsistenz-Check", border_style="cyan"))


class SupervisionData(BaseModel):
    """Vollständiger Datensatz: Fächer, Lehrkräfte, Sitzungen, Wünsche.

    Zuweisungen hängen an den Lehrkräften (``Teacher.assignments``).
    """

    subjects: list[Subject] = []
    teachers: list[Teacher]
    sessions: list[Session]
    wishes: list[Wish] = []
    config: EngineConfig = Field(default_factory=EngineConfig)
    created_at: Optional[datetime] = None
    modified_at: Optional[datetime] = None
    data_version: str = "1.0"

    # ─── Übersicht ───

    def summary(self) -> str:
        """Kurze Übersicht über den Datensatz."""
        total_required = sum(s.required for s in self.sessions)
        total_registered = sum(s.registered for s in self.sessions)
        num_exams = sum(len(s.exams) for s in self.sessions)
        days = {s.date for s in self.sessions}
        lines = [
            f"Einrichtung: {self.config.institution_name} ({self.config.exam_period})",
            f"Sitzungen: {len(self.sessions)} an {len(days)} Prüfungstagen "
            f"({num_exams} Prüfungen)",
            f"Lehrkräfte: {len(self.teachers)}",
            f"Fächer: {len(self.subjects)}",
            f"Aufsichten: {total_registered}/{total_required} besetzt",
            f"Offene Wünsche: {len(self.wishes)}",
        ]
        return "\n".join(lines)

    # ─── Konsistenz-Check ───

    def check_consistency(self) -> ConsistencyReport:
        """Prüft die Zähler und Verknüpfungen des Datensatzes.

        Prüfungen:
        1. Eindeutige IDs für Lehrkräfte und Sitzungen
        2. registered == Anzahl Zuweisungen pro Sitzung
        3. Zuweisungen und Wünsche verweisen auf existierende Sitzungen
        4. Höchstens eine Zuweisung / ein Wunsch pro (Lehrkraft, Sitzung)
        5. Überbesetzte Sitzungen und fehlende Endzeiten (nur Warnung)
        """
        errors: list[str] = []
        warnings: list[str] = []

        teacher_ids = [t.id for t in self.teachers]
        session_ids = [s.id for s in self.sessions]
        for label, ids in (("Lehrkraft", teacher_ids), ("Sitzung", session_ids)):
            dupes = sorted({i for i in ids if ids.count(i) > 1})
            for d in dupes:
                errors.append(f"{label}-ID '{d}' ist mehrfach vergeben.")

        known_sessions = set(session_ids)
        assigned_count: dict[str, int] = {}
        for teacher in self.teachers:
            seen: set[str] = set()
            for a in teacher.assignments:
                if a.teacher_id != teacher.id:
                    errors.append(
                        f"Zuweisung {a.id} hängt an {teacher.id}, verweist aber auf {a.teacher_id}."
                    )
                if a.session_id not in known_sessions:
                    errors.append(
                        f"Zuweisung {a.id} ({teacher.id}) verweist auf unbekannte Sitzung {a.session_id}."
                    )
                if a.session_id in seen:
                    errors.append(
                        f"Lehrkraft {teacher.id} ist mehrfach der Sitzung {a.session_id} zugewiesen."
                    )
                seen.add(a.session_id)
                assigned_count[a.session_id] = assigned_count.get(a.session_id, 0) + 1

        for session in self.sessions:
            count = assigned_count.get(session.id, 0)
            if session.registered != count:
                errors.append(
                    f"Sitzung {session.id}: registered={session.registered}, "
                    f"aber {count} Zuweisung(en) vorhanden."
                )
            if session.is_over_capacity:
                warnings.append(
                    f"Sitzung {session.id} ist überbesetzt "
                    f"({session.registered}/{session.required})."
                )
            if session.end is None:
                warnings.append(
                    f"Sitzung {session.id} hat keine Endzeit – Überschneidungen "
                    f"werden nur über gleiche Beginnzeit erkannt."
                )

        known_teachers = set(teacher_ids)
        wish_pairs: set[tuple[str, str]] = set()
        for w in self.wishes:
            pair = (w.teacher_id, w.session_id)
            if w.teacher_id not in known_teachers or w.session_id not in known_sessions:
                errors.append(f"Wunsch {w.id} verweist auf unbekannte Lehrkraft/Sitzung {pair}.")
            if pair in wish_pairs:
                errors.append(f"Mehrere Wünsche für {w.teacher_id} / {w.session_id}.")
            wish_pairs.add(pair)

        return ConsistencyReport(
            is_consistent=len(errors) == 0,
            errors=errors,
            warnings=warnings,
        )

    # ─── Persistenz ────────────────────────────────────────────────────────

    def save_json(self, path: Path) -> None:
        """Speichert den kompletten Datensatz als JSON-Datei."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        now = datetime.now(timezone.utc)
        updated = self.model_copy(update={
            "modified_at": now,
            "created_at": self.created_at or now,
        })
        with open(path, "w", encoding="utf-8") as f:
            f.write(updated.model_dump_json(indent=2))

    @classmethod
    def load_json(cls, path: Path) -> "SupervisionData":
        """Lädt einen Datensatz aus einer JSON-Datei."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"JSON-Datei nicht gefunden: {path}")
        with open(path, "r", encoding="utf-8") as f:
            return cls.model_validate_json(f.read())
