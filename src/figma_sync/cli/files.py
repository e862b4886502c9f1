import asyncio
from typing import Annotated

import typer
from rich.console import Console

from figma_sync.core.exceptions import FigmaSyncError
from figma_sync.core.importer import ImportResult, extract_file_key, run_import, run_sync
from figma_sync.core.ports.database import FigmaDatabase
from figma_sync.core.ports.figma import FigmaApi

console = Console()

TokenOption = Annotated[
    str | None,
    typer.Option("--token", envvar="FIGMA_TOKEN", help="Figma personal access token."),
]


def _get_database() -> FigmaDatabase:
    from figma_sync.db.engine import get_engine
    from figma_sync.db.sql import SqlFigmaDatabase

    return SqlFigmaDatabase(get_engine())


def _get_figma_client() -> FigmaApi:
    from figma_sync.figma.client import FigmaClient

    return FigmaClient()


def _require_token(token: str | None) -> str:
    if not token:
        console.print("[red]A Figma access token is required (--token or FIGMA_TOKEN).[/red]")
        raise typer.Exit(1)
    return token


def _print_result(verb: str, result: ImportResult) -> None:
    console.print(f"[green]{verb}[/green] {result.file.name!r} (key {result.file.key}, id {result.file.id})")
    console.print(f"[green]Stored[/green] {result.node_count} nodes")


def import_file(
    key_or_url: Annotated[str, typer.Argument(metavar="KEY_OR_URL", help="Figma file key or figma.com URL.")],
    token: TokenOption = None,
) -> None:
    """Import a Figma file with its styles and variables."""
    token = _require_token(token)
    file_key = extract_file_key(key_or_url)
    if not file_key:
        console.print(f"[red]Could not read a file key from {key_or_url!r}.[/red]")
        raise typer.Exit(1)

    db = _get_database()
    client = _get_figma_client()

    async def _run() -> ImportResult:
        try:
            await db.ensure_ready()
            return await run_import(db, client, file_key, token)
        finally:
            await client.aclose()
            await db.dispose()

    try:
        result = asyncio.run(_run())
    except FigmaSyncError as e:
        console.print(f"[red]Import failed:[/red] {e}")
        raise typer.Exit(1) from e
    _print_result("Imported", result)


def sync_file(
    file_id: Annotated[int, typer.Argument(help="Database id of a stored file.")],
    token: TokenOption = None,
) -> None:
    """Re-import a stored file from Figma, replacing its nodes."""
    token = _require_token(token)
    db = _get_database()
    client = _get_figma_client()

    async def _run() -> ImportResult:
        try:
            await db.ensure_ready()
            return await run_sync(db, client, file_id, token)
        finally:
            await client.aclose()
            await db.dispose()

    try:
        result = asyncio.run(_run())
    except FigmaSyncError as e:
        console.print(f"[red]Sync failed:[/red] {e}")
        raise typer.Exit(1) from e
    _print_result("Synced", result)


def delete_file(
    file_id: Annotated[int, typer.Argument(help="Database id of a stored file.")],
) -> None:
    """Delete a stored file and all of its nodes."""
    db = _get_database()

    async def _run() -> bool:
        try:
            await db.ensure_ready()
            return await db.delete_file(file_id)
        finally:
            await db.dispose()

    if not asyncio.run(_run()):
        console.print(f"[red]File {file_id} not found.[/red]")
        raise typer.Exit(1)
    console.print(f"[green]Deleted[/green] file {file_id}")
