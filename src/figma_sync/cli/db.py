"""Database schema and connectivity commands."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from sqlalchemy.exc import SQLAlchemyError

from figma_sync.db.engine import get_database_url

db_app = typer.Typer(help="Manage the database schema.")
console = Console()


@db_app.command("migrate")
def migrate() -> None:
    """Upgrade the database schema to the latest migration."""
    from figma_sync.db.migrations import run_migrations

    url = get_database_url()
    try:
        run_migrations(url)
    except (SQLAlchemyError, OSError) as e:
        console.print(f"[red]Migration failed:[/red] {e}")
        raise typer.Exit(1) from e
    console.print("[green]Database schema is up to date.[/green]")


@db_app.command("ping")
def ping() -> None:
    """Check that the database accepts connections."""
    from figma_sync.db.engine import get_engine
    from figma_sync.db.sql import SqlFigmaDatabase

    db = SqlFigmaDatabase(get_engine())

    async def _run() -> bool:
        try:
            return await db.ping()
        finally:
            await db.dispose()

    if asyncio.run(_run()):
        console.print("Database: [green]up[/green]")
    else:
        console.print("Database: [red]down[/red]")
        raise typer.Exit(1)
