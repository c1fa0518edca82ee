"""Otto command line tools."""

from __future__ import annotations

import asyncio
from datetime import datetime
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from otto.actions.builtin import BuiltinActions
from otto.actions.registry import ActionRegistry
from otto.config import load_settings
from otto.plugins import load_actions
from otto.scheduler.jobs import DATE_FORMAT, time_clauses
from otto.scheduler.store import JSONJobStore
from otto.utils.logging import configure_logging

app = typer.Typer(name="otto", help="Inspect an Otto installation.", add_completion=False)
console = Console()


def _parse_at(value: str | None) -> datetime:
    if not value:
        return datetime.now()
    try:
        return datetime.strptime(value, DATE_FORMAT)
    except ValueError:
        raise typer.BadParameter(f"expected {DATE_FORMAT!r}, got {value!r}") from None


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs.")) -> None:
    configure_logging(profile="console", level="DEBUG" if verbose else load_settings().log_level)


@app.command("actions")
def list_actions(
    entry_points: bool = typer.Option(True, help="Load action plugins from installed packages."),
) -> None:
    """List every registered action with its required authorizations."""
    settings = load_settings()
    registry = ActionRegistry()
    failed = load_actions(registry, [BuiltinActions(settings)], entry_points=entry_points)

    table = Table("action", "authorizations", "source", "description")
    for descriptor in sorted(registry.descriptors(), key=lambda item: item.name):
        table.add_row(
            descriptor.name,
            ", ".join(sorted(descriptor.authorizations)) or "-",
            descriptor.source,
            descriptor.description,
        )
    console.print(table)
    for plugin, error in failed.items():
        console.print(f"[red]plugin {plugin} failed: {error}[/red]")


@app.command("clauses")
def show_clauses(at: str | None = typer.Option(None, "--at", help=f"Instant to project, as {DATE_FORMAT}.")) -> None:
    """Print the scheduler clauses for an instant."""
    for name, value in time_clauses(_parse_at(at)):
        typer.echo(f"{name}={value}")


@app.command("jobs")
def show_jobs(
    file: Path | None = typer.Option(None, "--file", help="Job store file; defaults to the configured one."),
    at: str | None = typer.Option(None, "--at", help=f"Instant to match, as {DATE_FORMAT}."),
    uid: str | None = typer.Option(None, "--uid", help="Manager uid; defaults to this instance."),
    boot: bool = typer.Option(False, "--boot", help="Include the on-boot clause."),
) -> None:
    """List the jobs that would run at an instant."""
    settings = load_settings()
    store = JSONJobStore(file or settings.resolve_jobs_path())
    clauses = time_clauses(_parse_at(at))
    if boot:
        clauses.append(("on_boot", True))

    jobs = asyncio.run(store.find(uid or settings.uid, clauses))
    if not jobs:
        typer.echo("no matching jobs")
        return
    for job in jobs:
        typer.echo(f"{job.id}\t{job.program_name}\t{job.session_id}")


if __name__ == "__main__":
    app()
