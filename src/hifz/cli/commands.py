"""CLI commands for the hifz tracker.

Commands:
- serve: run the Web API with uvicorn
- next-date: date to pre-fill for a new loo7
- reschedule: date of the follow-up for a repeated loo7
- daily: per-student roll-up for a date from the configured store
- init-db: create the SQLite schema
"""

import asyncio
from datetime import date
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from hifz.config.app_config import load_app_config
from hifz.core.errors import Loo7Error
from hifz.core.loo7_service import Loo7Service
from hifz.core.schedule import default_recitation_date, next_scheduled_date, parse_date
from hifz.db.database import init_db as do_init_db
from hifz.db.factory import create_store

app = typer.Typer(
    name="hifz",
    help="Track Quran memorization assignments (loo7) and their evaluations.",
    no_args_is_help=True,
)

console = Console()


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host", help="Bind address"),
    port: int | None = typer.Option(None, "--port", "-p", help="Bind port"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
) -> None:
    """Run the Web API."""
    import uvicorn

    config = load_app_config()
    uvicorn.run(
        "hifz.web.api:create_app",
        factory=True,
        host=host or config.server.host,
        port=port or config.server.port,
        reload=reload,
    )


@app.command(name="next-date")
def next_date(
    today: str | None = typer.Option(
        None, "--today", "-t", help="Reference day (YYYY-MM-DD), defaults to today"
    ),
) -> None:
    """Print the date to pre-fill for a new loo7 (never a Friday)."""
    try:
        reference: date | None = parse_date(today) if today else None
    except Loo7Error as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)

    console.print(default_recitation_date(reference))


@app.command()
def reschedule(
    recitation_date: str = typer.Argument(..., help="Date of the loo7 to repeat (YYYY-MM-DD)"),
) -> None:
    """Print the date a repeated loo7 moves to."""
    try:
        console.print(next_scheduled_date(recitation_date))
    except Loo7Error as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)


@app.command()
def daily(
    recitation_date: str = typer.Argument(..., help="Day to summarize (YYYY-MM-DD)"),
    owner: str | None = typer.Option(None, "--owner", "-o", help="Sheikh id"),
) -> None:
    """Show each student's loo7 totals for a day."""
    config = load_app_config()
    owner_id = owner or config.tenancy.default_owner_id

    try:
        service = Loo7Service(create_store(config.storage))
        summaries = asyncio.run(service.daily_summary(owner_id, recitation_date))
    except Loo7Error as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)

    if not summaries:
        console.print(f"[yellow]No loo7s on {recitation_date}[/yellow]")
        return

    table = Table(show_header=True, header_style="bold", title=f"Loo7s {recitation_date}")
    table.add_column("Student")
    table.add_column("Total", justify="right")
    table.add_column("Pending", justify="right")
    table.add_column("Done", justify="center")

    for summary in summaries:
        table.add_row(
            summary.student.name,
            str(summary.loo7_count),
            str(summary.pending_count),
            "[green]✓[/green]" if summary.completed else "",
        )

    console.print(table)


@app.command(name="init-db")
def init_db(
    path: str | None = typer.Option(None, "--path", help="Database file"),
) -> None:
    """Create the SQLite tables if they do not exist."""
    db_path = Path(path) if path else load_app_config().storage.sqlite_path
    try:
        created = do_init_db(db_path)
    except Loo7Error as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)

    console.print(f"[green]✓ Database ready:[/green] {created}")


if __name__ == "__main__":
    app()
