"""Rich formatting helpers for the PayStream CLI.

Provides functions that format session snapshots and reports for terminal
display. Rich auto-detects TTY and degrades gracefully when piped (no ANSI
codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from paystream.display import TAB_LABELS, available_tabs, orchestrator_status
from paystream.models.session import AgentStatus

if TYPE_CHECKING:
    from paystream.reports import SharedReport
    from paystream.session import Session

_STATUS_STYLE: dict[AgentStatus, str] = {
    AgentStatus.PENDING: "dim",
    AgentStatus.WORKING: "yellow",
    AgentStatus.COMPLETE: "green",
    AgentStatus.ERROR: "red",
}


def get_console() -> Console:
    """Create a Rich Console that auto-detects TTY for graceful pipe degradation."""
    return Console(stderr=False)


def format_error(message: str, console: Console) -> None:
    """Display an error message."""
    console.print(f"[red]Error:[/red] {escape(message)}", highlight=False)


class SessionPrinter:
    """Snapshot listener that prints phase and worker transitions as they happen."""

    def __init__(self, console: Console) -> None:
        self._console = console
        self._phase: str | None = None
        self._statuses: dict[str, AgentStatus] = {}
        self._meta_shown = False

    def __call__(self, session: Session) -> None:
        if session.phase.value != self._phase:
            self._phase = session.phase.value
            if session.error is None:
                self._console.print(f"[cyan]▸ {self._phase.upper()}[/cyan]")
        if session.subject_meta is not None and not self._meta_shown:
            meta = session.subject_meta
            self._console.print(
                f"  [bold]{escape(meta.name)}[/bold] · {meta.unit_count} files · "
                f"{escape(', '.join(meta.tags)) or 'unknown languages'}"
            )
            self._meta_shown = True
        for task in session.agents:
            if self._statuses.get(task.name) is task.status:
                continue
            self._statuses[task.name] = task.status
            style = _STATUS_STYLE[task.status]
            self._console.print(
                f"  [{style}]{task.status.value:<8}[/{style}] {escape(task.name)} "
                f"[dim]{task.payment:.3f} ℏ · {orchestrator_status(session)}[/dim]"
            )


def format_session_summary(session: Session, console: Console) -> None:
    """Display the final state of a session."""
    if session.error is not None:
        format_error(session.error, console)
        return

    table = Table(show_header=True, header_style="bold", box=None, pad_edge=False)
    table.add_column("Agent")
    table.add_column("Status")
    table.add_column("Paid", justify="right", style="green")
    table.add_column("Alloc", justify="right", style="dim")
    table.add_column("Receipt", style="yellow")

    for slot in session.roster:
        task = session.registry.get(slot.name)
        status = session.registry.status_of(slot.name)
        style = _STATUS_STYLE[status]
        table.add_row(
            escape(slot.name),
            f"[{style}]{status.value}[/{style}]",
            f"{task.payment:.3f}" if task is not None else "-",
            f"{task.allocation_percent:g}%" if task is not None else "-",
            escape(task.receipt_id) if task is not None and task.receipt_id else "",
        )
    console.print(table)

    console.print(
        f"Budget:    {session.budget:.3f} ℏ  "
        f"spent {session.spent:.3f}  remaining {session.remaining_budget:.3f}"
    )
    if session.refund is not None:
        console.print(
            f"Refund:    [green]{session.refund.amount:.3f} ℏ[/green] "
            f"[dim]({escape(session.refund.receipt_id)})[/dim]"
        )
    tabs = [TAB_LABELS[t] for t, ok in available_tabs(session.results).items() if ok]
    if tabs:
        console.print(f"Sections:  {', '.join(tabs)}")
    if session.share_id:
        console.print(f"Share id:  [cyan]{escape(session.share_id)}[/cyan]")


def format_report(report: SharedReport, url: str, console: Console) -> None:
    """Display a shared report."""
    console.print(f"[bold]{escape(report.subject_name)}[/bold]")
    if report.subject_ref:
        console.print(f"  [dim]{escape(report.subject_ref)}[/dim]")
    if report.created_at is not None:
        console.print(f"  Created:   {report.created_at.strftime('%B %d, %Y')}")
    console.print(
        f"  Files:     {report.meta.unit_count}  "
        f"Languages: {escape(', '.join(report.meta.tags)) or '-'}"
    )
    tabs = [TAB_LABELS[t] for t, ok in available_tabs(report.data).items() if ok]
    console.print(f"  Sections:  {', '.join(tabs) if tabs else '-'}")
    console.print(f"  Link:      [cyan]{escape(url)}[/cyan]")
