from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query

from figma_sync.api.dependencies import get_database
from figma_sync.core.ports.database import FigmaDatabase
from figma_sync.core.query import query_statistics

router = APIRouter(tags=["statistics"])


@router.get("/statistics")
async def statistics(
    limit: int = Query(50, ge=1),
    db: FigmaDatabase = Depends(get_database),
) -> dict[str, Any]:
    """Aggregation endpoint: file and node counts plus the node type breakdown."""
    await db.ensure_ready()
    return await query_statistics(db, limit)
