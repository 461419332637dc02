"""Lehrkraft-Übersicht: Profil und Sitzungsstatus für das Lehrkraft-Dashboard.

Liest ausschließlich über den Ledger; verändert nichts.
"""

from datetime import date as date_type, time
from enum import Enum
from typing import Optional

from pydantic import BaseModel

from engine.eligibility import Verdict
from engine.ledger import AssignmentLedger, PairState


class DashboardStatus(str, Enum):
    """Anzeigestatus einer Sitzung aus Sicht einer Lehrkraft."""

    ASSIGNED = "assigned"   # bestätigte Aufsicht
    WISHED = "wished"       # Wunsch offen
    OPEN = "open"           # Wunsch möglich
    CONFLICT = "conflict"   # eigenes Fach (in dieser oder zeitgleicher Sitzung)
    OVERLAP = "overlap"     # Terminüberschneidung mit eigener Aufsicht
    QUOTA = "quota"         # Quote erreicht
    FULL = "full"           # Sitzung voll besetzt


_STATUS_BY_VERDICT: dict[Verdict, DashboardStatus] = {
    Verdict.ELIGIBLE: DashboardStatus.OPEN,
    Verdict.ALREADY_ASSIGNED: DashboardStatus.ASSIGNED,
    Verdict.SUBJECT_CONFLICT: DashboardStatus.CONFLICT,
    Verdict.TEACHING_OVERLAP: DashboardStatus.CONFLICT,
    Verdict.QUOTA_EXCEEDED: DashboardStatus.QUOTA,
    Verdict.SCHEDULE_OVERLAP: DashboardStatus.OVERLAP,
    Verdict.SESSION_FULL: DashboardStatus.FULL,
}


class AssignedSupervision(BaseModel):
    """Eine bestätigte Aufsicht mit Zeitfenster und geprüften Fächern."""

    assignment_id: str
    session_id: str
    date: date_type
    start: time
    end: Optional[time] = None
    subjects: list[str]
    origin: str


class TeacherProfile(BaseModel):
    """Stammdaten und Auslastung einer Lehrkraft."""

    teacher_id: str
    name: str
    grade: Optional[str] = None
    subjects: list[str]
    quota: Optional[int] = None
    load: int
    remaining: Optional[int] = None
    open_wishes: int
    supervisions: list[AssignedSupervision]


class SessionStatus(BaseModel):
    """Status einer Sitzung auf dem Dashboard einer Lehrkraft."""

    session_id: str
    date: date_type
    start: time
    end: Optional[time] = None
    subjects: list[str]
    registered: int
    required: int
    state: PairState
    verdict: Verdict
    status: DashboardStatus
    label: str
    detail: str = ""

    @property
    def can_wish(self) -> bool:
        return self.status is DashboardStatus.OPEN


def teacher_profile(ledger: AssignmentLedger, teacher_id: str) -> TeacherProfile:
    teacher = ledger.teacher(teacher_id)
    supervisions = []
    for a in sorted(teacher.assignments, key=lambda a: (a.window.date, a.window.start)):
        session = ledger.session(a.session_id)
        supervisions.append(AssignedSupervision(
            assignment_id=a.id,
            session_id=a.session_id,
            date=a.window.date,
            start=a.window.start,
            end=a.window.end,
            subjects=[s.name for s in session.subjects],
            origin=a.origin,
        ))

    return TeacherProfile(
        teacher_id=teacher.id,
        name=teacher.name,
        grade=teacher.grade,
        subjects=[s.name for s in teacher.subjects],
        quota=teacher.quota,
        load=teacher.load,
        remaining=teacher.remaining_quota,
        open_wishes=len(ledger.wishes_for_teacher(teacher_id)),
        supervisions=supervisions,
    )


def session_statuses(ledger: AssignmentLedger, teacher_id: str) -> list[SessionStatus]:
    """Status aller Sitzungen für eine Lehrkraft, chronologisch.

    Ein offener Wunsch überdeckt das Urteil nur, solange die Sitzung noch
    frei wäre; ein Konflikt bleibt auch bei bestehendem Wunsch sichtbar.
    """
    ledger.teacher(teacher_id)
    statuses: list[SessionStatus] = []
    for session in sorted(ledger.sessions, key=lambda s: (s.date, s.start, s.id)):
        report = ledger.explain(teacher_id, session.id)
        state = ledger.wish_state(teacher_id, session.id)
        status = _STATUS_BY_VERDICT[report.verdict]
        if state is PairState.WISHED and status is DashboardStatus.OPEN:
            status = DashboardStatus.WISHED

        statuses.append(SessionStatus(
            session_id=session.id,
            date=session.date,
            start=session.start,
            end=session.end,
            subjects=[s.name for s in session.subjects],
            registered=session.registered,
            required=session.required,
            state=state,
            verdict=report.verdict,
            status=status,
            label="Wunsch abgegeben" if status is DashboardStatus.WISHED else report.verdict.label,
            detail=report.detail,
        ))
    return statuses


def print_overview(ledger: AssignmentLedger, teacher_id: str) -> None:
    """Gibt Profil und Sitzungsstatus einer Lehrkraft über Rich aus."""
    from rich.console import Console
    from rich.panel import Panel
    from rich.table import Table
    from rich import box

    console = Console()
    profile = teacher_profile(ledger, teacher_id)
    quota = "unbegrenzt" if profile.quota is None else str(profile.quota)
    console.print(Panel(
        f"[bold]{profile.name}[/bold] ({profile.teacher_id})"
        + (f"  |  {profile.grade}" if profile.grade else "")
        + f"\nFächer: {', '.join(profile.subjects) or '–'}"
        + f"\nAufsichten: {profile.load} / {quota}  |  offene Wünsche: {profile.open_wishes}",
        title="Lehrkraft",
        border_style="cyan",
    ))

    colors = {
        DashboardStatus.ASSIGNED: "green",
        DashboardStatus.WISHED: "blue",
        DashboardStatus.OPEN: "white",
        DashboardStatus.FULL: "dim",
    }
    table = Table(box=box.ROUNDED)
    table.add_column("Sitzung", style="bold")
    table.add_column("Termin")
    table.add_column("Fächer")
    table.add_column("Besetzt", justify="right")
    table.add_column("Status")
    for st in session_statuses(ledger, teacher_id):
        end = f"{st.end:%H:%M}" if st.end else "?"
        color = colors.get(st.status, "red")
        table.add_row(
            st.session_id,
            f"{st.date:%d.%m.%Y} {st.start:%H:%M}–{end}",
            ", ".join(st.subjects),
            f"{st.registered}/{st.required}",
            f"[{color}]{st.label}[/{color}]",
        )
    console.print(table)
