import asyncio
import json
from collections.abc import Sequence
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.table import Table

from figma_sync.core.ports.database import FigmaDatabase
from figma_sync.core.query import (
    query_files as _query_files,
)
from figma_sync.core.query import (
    query_nodes as _query_nodes,
)
from figma_sync.core.query import (
    query_statistics as _query_statistics,
)

query_app = typer.Typer(help="Query the stored Figma files and nodes.")
console = Console()

_MAX_COL_WIDTH = 60


def _truncate(value: str, max_width: int = _MAX_COL_WIDTH) -> str:
    if len(value) > max_width:
        return value[: max_width - 3] + "..."
    return value


def _render_table(headers: Sequence[str], rows: Sequence[tuple[Any, ...]]) -> None:
    table = Table(show_lines=False)
    for h in headers:
        table.add_column(h)
    for row in rows:
        table.add_row(*(_truncate(str(v)) for v in row))
    console.print(table)
    console.print(f"({len(rows)} rows)")


def _get_database() -> FigmaDatabase:
    from figma_sync.db.engine import get_engine
    from figma_sync.db.sql import SqlFigmaDatabase

    return SqlFigmaDatabase(get_engine())


@query_app.command("files")
def files(
    limit: Annotated[int, typer.Option(min=1, help="Max rows to return.")] = 50,
) -> None:
    """List stored files ordered by name."""
    db = _get_database()

    async def _run() -> None:
        try:
            await db.ensure_ready()
            rows = await _query_files(db, limit)
            _render_table(
                ["id", "key", "name", "modified"],
                [(f.id, f.key, f.name, f.modified.isoformat()) for f in rows],
            )
        finally:
            await db.dispose()

    asyncio.run(_run())


@query_app.command("nodes")
def nodes(
    file_id: Annotated[int | None, typer.Option("--file-id", help="Only nodes of this file.")] = None,
    type: Annotated[str | None, typer.Option("--type", help="Node type, e.g. STYLE_FILL.")] = None,
    limit: Annotated[int, typer.Option(min=1, help="Max rows to return.")] = 50,
) -> None:
    """List stored nodes ordered by node id."""
    db = _get_database()

    async def _run() -> None:
        try:
            await db.ensure_ready()
            rows = await _query_nodes(db, file_id=file_id, node_type=type, limit=limit)
            _render_table(
                ["id", "file_id", "node_id", "type", "name", "raw_data"],
                [(n.id, n.file_id, n.node_id, n.type, n.name, json.dumps(n.raw_data)) for n in rows],
            )
        finally:
            await db.dispose()

    asyncio.run(_run())


@query_app.command("stats")
def stats(
    limit: Annotated[int, typer.Option(min=1, help="Max node types to list.")] = 50,
) -> None:
    """Show file and node counts with the node type breakdown."""
    db = _get_database()

    async def _run() -> None:
        try:
            await db.ensure_ready()
            result = await _query_statistics(db, limit)
            counts = result["counts"]
            console.print(f"Files: {counts['files']}  Nodes: {counts['nodes']}")
            _render_table(["type", "count"], [(t["type"], t["count"]) for t in result["node_types"]])
        finally:
            await db.dispose()

    asyncio.run(_run())
