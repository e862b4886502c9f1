from typing import Any

from figma_sync.core.ports.database import FigmaDatabase
from figma_sync.models import StoredFile, StoredNode


async def query_files(
    database: FigmaDatabase,
    limit: int = 50,
    after_name: str | None = None,
    after_id: int | None = None,
    before_name: str | None = None,
    before_id: int | None = None,
) -> list[StoredFile]:
    return await database.list_files_cursor(
        limit,
        after_name=after_name,
        after_id=after_id,
        before_name=before_name,
        before_id=before_id,
    )


async def query_nodes(
    database: FigmaDatabase,
    file_id: int | None = None,
    node_type: str | None = None,
    limit: int = 50,
    after_node_id: str | None = None,
    after_id: int | None = None,
    before_node_id: str | None = None,
    before_id: int | None = None,
) -> list[StoredNode]:
    return await database.list_nodes_cursor(
        limit,
        file_id=file_id,
        node_type=node_type,
        after_node_id=after_node_id,
        after_id=after_id,
        before_node_id=before_node_id,
        before_id=before_id,
    )


async def query_statistics(database: FigmaDatabase, limit: int = 50) -> dict[str, Any]:
    """Return the file count, node count and per-type node counts."""
    files = await database.count_files()
    nodes = await database.count_nodes()
    node_types = await database.node_type_counts(limit)
    return {
        "counts": {"files": files, "nodes": nodes},
        "node_types": [{"type": t, "count": c} for t, c in node_types],
    }
