"""Aufsichtsplaner — Haupt-CLI.

Verwendung:
  python main.py config init                 Standard-Konfiguration anlegen
  python main.py config show                 Konfiguration anzeigen
  python main.py generate                    Testdaten erzeugen und speichern
  python main.py status                      Besetzung aller Sitzungen
  python main.py check <lehrkraft> <sitzung> Eignung prüfen (mit Begründung)
  python main.py eligible <sitzung>          Geeignete Lehrkräfte einer Sitzung
  python main.py sessions <lehrkraft>        Dashboard einer Lehrkraft
  python main.py wish <lehrkraft> <sitzung>  Wunsch abgeben
  python main.py withdraw <l> <s>            Wunsch zurückziehen
  python main.py confirm <l> <s>             Zuweisung bestätigen
  python main.py cancel <l> <s>              Zuweisung stornieren
  python main.py revise <sitzung> <n>        Soll-Aufsichten setzen
  python main.py recalc                      Bedarf (und Quoten) neu berechnen
  python main.py validate                    Datensatz validieren
  python main.py candidates <sitzung>        Kandidaten-Rangliste
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich import box

console = Console()
logger = logging.getLogger("aufsicht")


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


class AppContext:
    """Gemeinsamer Zustand der Befehle (Pfade, Konfiguration)."""

    def __init__(self, config_path: Optional[Path], data_path: Optional[Path]) -> None:
        from config.manager import ConfigManager
        self.manager = ConfigManager(config_path)
        self.config = self.manager.load_or_default()
        self.data_path = data_path or Path(self.config.storage.data_path)

    def load_data(self):
        """Lädt den Datensatz; die aktive YAML-Konfiguration ersetzt die im JSON."""
        from models.supervision_data import SupervisionData
        try:
            data = SupervisionData.load_json(self.data_path)
        except FileNotFoundError as e:
            console.print(
                f"[red]{e}[/red]\n"
                "Erzeugen Sie zunächst Daten mit [bold]python main.py generate[/bold]."
            )
            sys.exit(1)
        return data.model_copy(update={"config": self.config})

    def load_ledger(self):
        from engine.ledger import AssignmentLedger
        return AssignmentLedger(self.load_data())

    def save(self, ledger) -> None:
        ledger.snapshot().save_json(self.data_path)
        logger.debug(f"Datensatz gespeichert: {self.data_path}")


pass_app = click.make_pass_decorator(AppContext)


def _run_ledger_op(app: AppContext, op):
    """Führt eine Ledger-Mutation aus, speichert bei Erfolg, beendet bei Fehler."""
    from engine.errors import LedgerError

    ledger = app.load_ledger()
    try:
        result = op(ledger)
    except LedgerError as e:
        console.print(f"[red bold]Abgelehnt:[/red bold] {e}")
        sys.exit(1)
    app.save(ledger)
    return ledger, result


# ─── CONFIG ───────────────────────────────────────────────────────────────────

@click.group("config")
def cmd_config():
    """Konfiguration anlegen oder anzeigen."""


@cmd_config.command("init")
@click.option("--force", is_flag=True, default=False, help="Bestehende Datei überschreiben.")
@pass_app
def config_init(app: AppContext, force: bool):
    """Legt die Standard-Konfiguration als YAML an."""
    from config.defaults import default_engine_config

    if not app.manager.first_run_check() and not force:
        console.print(
            f"[yellow]Konfiguration existiert bereits: {app.manager.path}[/yellow]\n"
            "Mit [bold]--force[/bold] überschreiben."
        )
        return
    app.manager.save(default_engine_config())


@cmd_config.command("show")
@pass_app
def config_show(app: AppContext):
    """Zeigt die aktive Konfiguration an."""
    config = app.config
    source = "Standard" if app.manager.first_run_check() else str(app.manager.path)
    console.print(Panel(
        f"[bold]{config.institution_name}[/bold]  |  {config.exam_period}\n"
        f"[dim]Quelle: {source}[/dim]",
        title="Konfiguration",
        border_style="cyan",
    ))

    cap = config.capacity
    table = Table(box=box.ROUNDED)
    table.add_column("Einstellung", style="bold")
    table.add_column("Wert")
    table.add_row("Namensabgleich Fächer", "an" if config.matching.subject_name_fallback else "aus")
    table.add_row("Standard-Quote", "unbegrenzt" if cap.default_quota is None else str(cap.default_quota))
    table.add_row("Aufsichten pro Prüfung", str(cap.supervisors_per_exam))
    table.add_row("Mindestquote", str(cap.min_quota))
    table.add_row("Deputat-Divisor", str(cap.teaching_load_divisor))
    table.add_row("Gewicht Fach-Sitzungen", str(cap.subject_session_weight))
    table.add_row("Log-Level", config.logging.level)
    table.add_row("Datendatei", config.storage.data_path)
    console.print(table)


# ─── GENERATE ─────────────────────────────────────────────────────────────────

@click.command("generate")
@click.option("--seed", default=42, help="Zufalls-Seed für reproduzierbare Daten.")
@click.option("--days", default=5, help="Anzahl Prüfungstage.")
@click.option("--teachers", "num_teachers", default=30, help="Anzahl Lehrkräfte.")
@click.option("--open-ended", is_flag=True, default=False,
              help="Letzte Sitzung jedes Tages ohne Endzeit erzeugen.")
@pass_app
def cmd_generate(app: AppContext, seed: int, days: int, num_teachers: int, open_ended: bool):
    """Erzeugt Testdaten (Sitzungen, Prüfungen, Lehrkräfte) und speichert sie."""
    from data.fake_data import FakeDataGenerator

    console.print("[bold]Testdaten werden generiert...[/bold]")
    gen = FakeDataGenerator(
        app.config, seed=seed, num_days=days, num_teachers=num_teachers,
        open_ended_last_session=open_ended,
    )
    data = gen.generate()
    gen.print_summary(data)
    console.print(f"\n[dim]{data.summary()}[/dim]")
    data.check_consistency().print_rich()

    data.save_json(app.data_path)
    console.print(f"[green]✓[/green] JSON gespeichert: {app.data_path}")


# ─── ABFRAGEN ─────────────────────────────────────────────────────────────────

@click.command("status")
@click.option("--open-only", is_flag=True, default=False, help="Nur unterbesetzte Sitzungen.")
@pass_app
def cmd_status(app: AppContext, open_only: bool):
    """Besetzung aller Sitzungen (registered / required)."""
    ledger = app.load_ledger()
    table = Table(title="Sitzungen", box=box.ROUNDED)
    table.add_column("Sitzung", style="bold")
    table.add_column("Termin")
    table.add_column("Prüfungen", justify="right")
    table.add_column("Besetzt", justify="right")
    table.add_column("Wünsche", justify="right")
    table.add_column("Status")

    for s in sorted(ledger.sessions, key=lambda s: (s.date, s.start, s.id)):
        if open_only and s.is_full:
            continue
        if s.is_over_capacity:
            state = "[yellow]überbesetzt[/yellow]"
        elif s.is_full:
            state = "[green]voll[/green]"
        else:
            state = f"[red]{s.open_slots} offen[/red]"
        table.add_row(
            s.id, str(s.window), str(len(s.exams)),
            f"{s.registered}/{s.required}",
            str(len(ledger.wishes_for_session(s.id))),
            state,
        )
    console.print(table)


@click.command("check")
@click.argument("teacher_id")
@click.argument("session_id")
@pass_app
def cmd_check(app: AppContext, teacher_id: str, session_id: str):
    """Prüft, ob eine Lehrkraft eine Sitzung beaufsichtigen darf."""
    from engine.errors import LedgerError

    ledger = app.load_ledger()
    try:
        report = ledger.explain(teacher_id, session_id)
        state = ledger.wish_state(teacher_id, session_id)
    except LedgerError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    color = "green" if report.verdict.is_eligible else "red"
    console.print(f"[{color} bold]{report.verdict.label}[/{color} bold]"
                  + (f"  ({report.detail})" if report.detail else ""))
    console.print(f"[dim]Status: {state.value}[/dim]")
    if report.degraded_match:
        console.print("[yellow]Hinweis: Fachabgleich nur per Name.[/yellow]")


@click.command("eligible")
@click.argument("session_id")
@pass_app
def cmd_eligible(app: AppContext, session_id: str):
    """Listet alle Lehrkräfte, die der Sitzung zugewiesen werden könnten."""
    from engine.errors import LedgerError

    ledger = app.load_ledger()
    try:
        teachers = ledger.eligible_teachers(session_id)
    except LedgerError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    if not teachers:
        console.print("[dim]Keine geeigneten Lehrkräfte.[/dim]")
        return
    table = Table(title=f"Geeignet für {session_id}", box=box.ROUNDED)
    table.add_column("ID", style="bold")
    table.add_column("Name")
    table.add_column("Aufsichten", justify="right")
    for t in teachers:
        quota = "∞" if t.quota is None else str(t.quota)
        table.add_row(t.id, t.name, f"{t.load}/{quota}")
    console.print(table)


@click.command("sessions")
@click.argument("teacher_id")
@pass_app
def cmd_sessions(app: AppContext, teacher_id: str):
    """Dashboard einer Lehrkraft: Profil und Status aller Sitzungen."""
    from analysis.teacher_overview import print_overview
    from engine.errors import LedgerError

    ledger = app.load_ledger()
    try:
        print_overview(ledger, teacher_id)
    except LedgerError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)


@click.command("candidates")
@click.argument("session_id")
@click.option("--top", default=10, help="Anzahl angezeigter Kandidaten.")
@pass_app
def cmd_candidates(app: AppContext, session_id: str, top: int):
    """Rangliste geeigneter Aufsichten (Wunsch zuerst, dann geringe Auslastung)."""
    from analysis.candidate_finder import CandidateFinder
    from engine.errors import LedgerError

    ledger = app.load_ledger()
    try:
        candidates = CandidateFinder().find_candidates(session_id, ledger)
    except LedgerError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    table = Table(title=f"Kandidaten für {session_id}", box=box.ROUNDED)
    table.add_column("#", justify="right")
    table.add_column("ID", style="bold")
    table.add_column("Name")
    table.add_column("Wunsch")
    table.add_column("Aufsichten", justify="right")
    table.add_column("Score", justify="right")
    for i, c in enumerate(candidates[:top], start=1):
        quota = "∞" if c.quota is None else str(c.quota)
        table.add_row(
            str(i), c.teacher_id, c.name,
            "[green]✓[/green]" if c.has_wish else "",
            f"{c.current_load}/{quota}", f"{c.score:.1f}",
        )
    console.print(table)


# ─── MUTATIONEN ───────────────────────────────────────────────────────────────

@click.command("wish")
@click.argument("teacher_id")
@click.argument("session_id")
@pass_app
def cmd_wish(app: AppContext, teacher_id: str, session_id: str):
    """Gibt einen Aufsichtswunsch ab."""
    _, wish_id = _run_ledger_op(app, lambda l: l.submit_wish(teacher_id, session_id))
    console.print(f"[green]✓[/green] Wunsch {wish_id} gespeichert.")


@click.command("withdraw")
@click.argument("teacher_id")
@click.argument("session_id")
@pass_app
def cmd_withdraw(app: AppContext, teacher_id: str, session_id: str):
    """Zieht einen offenen Wunsch zurück."""
    _, wish = _run_ledger_op(app, lambda l: l.withdraw_wish(teacher_id, session_id))
    console.print(f"[green]✓[/green] Wunsch {wish.id} zurückgezogen.")


@click.command("confirm")
@click.argument("teacher_id")
@click.argument("session_id")
@pass_app
def cmd_confirm(app: AppContext, teacher_id: str, session_id: str):
    """Bestätigt eine Zuweisung (aus Wunsch oder direkt)."""
    ledger, assignment_id = _run_ledger_op(
        app, lambda l: l.confirm_assignment(teacher_id, session_id)
    )
    session = ledger.session(session_id)
    console.print(
        f"[green]✓[/green] Zuweisung {assignment_id} bestätigt "
        f"[{session.registered}/{session.required}]."
    )


@click.command("cancel")
@click.argument("teacher_id")
@click.argument("session_id")
@pass_app
def cmd_cancel(app: AppContext, teacher_id: str, session_id: str):
    """Storniert eine Zuweisung und gibt den Platz frei."""
    _, receipt = _run_ledger_op(app, lambda l: l.cancel_assignment(teacher_id, session_id))
    console.print(
        f"[green]✓[/green] Zuweisung {receipt.assignment_id} storniert "
        f"(jetzt {receipt.registered_after} besetzt)."
    )


@click.command("revise")
@click.argument("session_id")
@click.argument("required", type=int)
@pass_app
def cmd_revise(app: AppContext, session_id: str, required: int):
    """Setzt die Soll-Aufsichten einer Sitzung. Entfernt keine Zuweisungen."""
    ledger, _ = _run_ledger_op(app, lambda l: l.revise_required_count(session_id, required))
    session = ledger.session(session_id)
    console.print(f"[green]✓[/green] {session_id}: Soll = {session.required}")
    if session.is_over_capacity:
        console.print(
            f"[yellow]Überbesetzt: {session.registered}/{session.required}. "
            f"Zuweisungen bleiben bestehen.[/yellow]"
        )


@click.command("recalc")
@click.option("--quotas/--no-quotas", default=False,
              help="Zusätzlich die Aufsichtsquoten neu berechnen.")
@pass_app
def cmd_recalc(app: AppContext, quotas: bool):
    """Berechnet den Bedarf aller Sitzungen aus der Prüfungsanzahl neu."""
    from engine.policies import ExamCountNeedsPolicy, SurveillanceQuotaPolicy

    def recalc(ledger):
        config = ledger.config
        needs = ExamCountNeedsPolicy.from_config(config.capacity).apply(ledger)
        changed_quotas = {}
        if quotas:
            changed_quotas = SurveillanceQuotaPolicy.from_config(
                config.capacity, config.matching.subject_name_fallback
            ).apply(ledger)
        return needs, changed_quotas

    ledger, (needs, changed_quotas) = _run_ledger_op(app, recalc)
    console.print(f"[green]✓[/green] Bedarf angepasst: {len(needs)} Sitzung(en)")
    if quotas:
        console.print(f"[green]✓[/green] Quoten angepasst: {len(changed_quotas)} Lehrkraft/-kräfte")
    over = ledger.over_capacity_sessions()
    if over:
        console.print(
            f"[yellow]Überbesetzt: {', '.join(s.id for s in over)}[/yellow]"
        )


# ─── VALIDATE ─────────────────────────────────────────────────────────────────

@click.command("validate")
@pass_app
def cmd_validate(app: AppContext):
    """Prüft den gespeicherten Datensatz auf verletzte Invarianten."""
    from analysis.ledger_validator import LedgerValidator

    data = app.load_data()
    console.print(f"[bold]Lade Datensatz:[/bold] {app.data_path}")
    console.print(f"\n{data.summary()}\n")
    report = LedgerValidator().validate(data)
    report.print_rich()

    sys.exit(0 if report.is_valid else 1)


# ─── HAUPT-CLI ────────────────────────────────────────────────────────────────

@click.group()
@click.option("--config", "config_path", type=click.Path(path_type=Path), default=None,
              help="Pfad zur YAML-Konfiguration.")
@click.option("--data", "data_path", type=click.Path(path_type=Path), default=None,
              help="Pfad zur JSON-Datendatei.")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Debug-Ausgaben.")
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path], data_path: Optional[Path], verbose: bool):
    """Aufsichtsplaner: Prüfungsaufsichten verwalten.

    Starten Sie mit: python main.py generate
    """
    try:
        app = AppContext(config_path, data_path)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)
    _setup_logging("DEBUG" if verbose else app.config.logging.level)
    ctx.obj = app


def main():
    cli()


# Befehle registrieren
cli.add_command(cmd_config)
cli.add_command(cmd_generate)
cli.add_command(cmd_status)
cli.add_command(cmd_check)
cli.add_command(cmd_eligible)
cli.add_command(cmd_sessions)
cli.add_command(cmd_candidates)
cli.add_command(cmd_wish)
cli.add_command(cmd_withdraw)
cli.add_command(cmd_confirm)
cli.add_command(cmd_cancel)
cli.add_command(cmd_revise)
cli.add_command(cmd_recalc)
cli.add_command(cmd_validate)


if __name__ == "__main__":
    main()
