"""
Command Line Interface for Bug Tracker.
"""

import asyncio
from contextlib import contextmanager
from typing import Iterator, List, Optional

import typer
import uvicorn
from rich import print as rprint
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..bugs.enums import Priority, Status
from ..bugs.errors import BugTrackerError, ValidationError
from ..bugs.services import BugService
from ..bugs.views import BugCriteria, apply_view, compute_stats
from ..config import get_settings
from ..db.base import drop_database, get_session_local, init_database
from ..db.store import BugStore
from ..log import configure_logging

app = typer.Typer(help="Bug Tracker - report, triage and follow up on bugs")
console = Console()

PRIORITY_STYLES = {
    "low": "blue",
    "medium": "yellow",
    "high": "dark_orange",
    "critical": "bold red",
}

STATUS_EMOJI = {
    "open": "🐞",
    "in-progress": "🟡",
    "resolved": "✅",
    "closed": "⏹️",
}


@app.callback()
def main() -> None:
    """Configure logging before any command runs."""
    configure_logging(get_settings())


@contextmanager
def _service() -> Iterator[BugService]:
    session_local = get_session_local()
    db = session_local()
    try:
        yield BugService(BugStore(db))
    finally:
        db.close()


def _fail(exc: BugTrackerError) -> None:
    console.print(f"❌ {exc.message}")
    if isinstance(exc, ValidationError):
        for error in exc.errors:
            console.print(f"   • {error.field}: {error.message}")
    raise typer.Exit(code=1)


@app.command()
def serve(
    port: int = typer.Option(None, help="Port to run the API server on"),
    host: str = typer.Option(None, help="Host to bind the server to"),
    reload: bool = typer.Option(False, help="Reload on code changes"),
):
    """Start the Bug Tracker API server."""
    settings = get_settings()
    host = host or settings.api_host
    port = port or settings.api_port
    rprint(Panel.fit(f"🐞 Starting Bug Tracker on http://{host}:{port}", style="bold blue"))
    uvicorn.run("bug_tracker.main:app", host=host, port=port, reload=reload)


@app.command()
def init_db(
    drop: bool = typer.Option(False, "--drop", help="Drop existing tables first"),
):
    """Create the database tables."""
    if drop:
        asyncio.run(drop_database())
        console.print("🗑️ Dropped existing tables")
    asyncio.run(init_database())
    console.print("✅ Database initialized")


@app.command()
def report(
    title: str = typer.Option(..., help="Short summary of the bug"),
    description: str = typer.Option(..., help="What happens, in at least 10 characters"),
    priority: Priority = typer.Option(Priority.MEDIUM, help="Bug priority"),
    assignee: str = typer.Option(..., help="Who should fix it"),
    reporter: str = typer.Option(..., help="Who found it"),
    environment: str = typer.Option(..., help="Browser, OS or build where it happens"),
    reproducible: bool = typer.Option(False, help="Whether the bug reproduces reliably"),
    steps: Optional[str] = typer.Option(None, help="Steps to reproduce"),
    tag: Optional[List[str]] = typer.Option(None, help="Tag (repeatable)"),
):
    """Report a new bug."""
    payload = {
        "title": title,
        "description": description,
        "priority": priority.value,
        "assignee": assignee,
        "reporter": reporter,
        "environment": environment,
        "reproducible": reproducible,
        "stepsToReproduce": steps,
        "tags": tag or [],
    }
    with _service() as service:
        try:
            bug = service.create(payload)
        except BugTrackerError as exc:
            _fail(exc)

    console.print(f"✅ Reported bug {bug.id}: {bug.title}")


@app.command("list")
def list_bugs(
    status: Optional[Status] = typer.Option(None, help="Only bugs with this status"),
    priority: Optional[Priority] = typer.Option(None, help="Only bugs with this priority"),
    assignee: Optional[str] = typer.Option(None, help="Only bugs assigned to this person"),
    reproducible: Optional[bool] = typer.Option(
        None, "--reproducible/--not-reproducible", help="Filter on reproducibility"
    ),
    search: Optional[str] = typer.Option(None, "--search", "-s", help="Search text"),
):
    """List bugs, optionally filtered and searched."""
    criteria = BugCriteria(
        status=status, priority=priority, assignee=assignee, reproducible=reproducible
    )
    with _service() as service:
        try:
            bugs = service.get_all()
        except BugTrackerError as exc:
            _fail(exc)

    shown = apply_view(bugs, criteria, search)
    if not shown:
        if bugs:
            console.print("No bugs match your search")
        else:
            console.print("No bugs reported yet")
        return

    table = Table(title="Bugs", show_header=True, header_style="bold magenta")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Title")
    table.add_column("Priority")
    table.add_column("Status")
    table.add_column("Assignee", style="green")
    table.add_column("Tags", style="dim")

    for bug in shown:
        style = PRIORITY_STYLES.get(bug.priority.value, "")
        table.add_row(
            bug.id,
            bug.title,
            f"[{style}]{bug.priority.value}[/{style}]" if style else bug.priority.value,
            f"{STATUS_EMOJI.get(bug.status.value, '❓')} {bug.status.value}",
            bug.assignee,
            ", ".join(bug.tags),
        )

    console.print(table)


@app.command()
def stats(
    status: Optional[Status] = typer.Option(None, help="Only bugs with this status"),
    priority: Optional[Priority] = typer.Option(None, help="Only bugs with this priority"),
    assignee: Optional[str] = typer.Option(None, help="Only bugs assigned to this person"),
    reproducible: Optional[bool] = typer.Option(
        None, "--reproducible/--not-reproducible", help="Filter on reproducibility"
    ),
    search: Optional[str] = typer.Option(None, "--search", "-s", help="Search text"),
):
    """Show status and priority breakdowns."""
    criteria = BugCriteria(
        status=status, priority=priority, assignee=assignee, reproducible=reproducible
    )
    with _service() as service:
        try:
            bugs = service.get_all()
        except BugTrackerError as exc:
            _fail(exc)

    result = compute_stats(apply_view(bugs, criteria, search))

    table = Table(title="Bug Statistics", show_header=True, header_style="bold cyan")
    table.add_column("Metric", style="yellow")
    table.add_column("Count", justify="right")

    table.add_row("Total", str(result.total))
    table.add_row("Open", str(result.open))
    table.add_row("In Progress", str(result.in_progress))
    table.add_row("Resolved", str(result.resolved))
    table.add_row("Closed", str(result.closed))
    table.add_section()
    table.add_row("Critical", str(result.critical))
    table.add_row("High", str(result.high))
    table.add_row("Medium", str(result.medium))
    table.add_row("Low", str(result.low))

    console.print(table)
    console.print(f"Completion rate: {result.resolved_percentage}%")


@app.command()
def set_status(
    bug_id: str = typer.Argument(..., help="ID of the bug"),
    status: Status = typer.Argument(..., help="New status"),
):
    """Move a bug to another status."""
    with _service() as service:
        try:
            bug = service.update(bug_id, {"status": status.value})
        except BugTrackerError as exc:
            _fail(exc)

    console.print(f"✅ Bug {bug.id} is now {bug.status.value}")


@app.command()
def delete(bug_id: str = typer.Argument(..., help="ID of the bug")):
    """Delete a bug."""
    with _service() as service:
        try:
            service.delete(bug_id)
        except BugTrackerError as exc:
            _fail(exc)

    console.print(f"🗑️ Deleted bug {bug_id}")


if __name__ == "__main__":
    app()
