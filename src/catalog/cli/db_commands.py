"""Database provisioning commands."""

import typer

from src.catalog.core.services import DbManageService

from .utils import console, get_db

db_app = typer.Typer(help="Database schema commands")


@db_app.command("init")
def init() -> None:
    """Create the catalog tables if they do not exist."""
    DbManageService(get_db()).create_all()
    console.print("[green]✓[/green] Catalog tables created")


@db_app.command("drop")
def drop(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt"),
) -> None:
    """Drop every catalog table, including all data."""
    if not yes:
        typer.confirm("This deletes all products and categories. Continue?", abort=True)
    DbManageService(get_db()).drop_all()
    console.print("[yellow]Catalog tables dropped[/yellow]")


@db_app.command("check")
def check() -> None:
    """Verify the database answers."""
    if not get_db().health_check():
        console.print("[red]Database is not reachable[/red]")
        raise typer.Exit(1)
    console.print("[green]✓[/green] Database is reachable")
