from __future__ import annotations

from collections.abc import AsyncIterator

from figma_sync.core.ports.database import FigmaDatabase
from figma_sync.core.ports.figma import FigmaApi
from figma_sync.db.engine import get_engine
from figma_sync.db.sql import SqlFigmaDatabase
from figma_sync.figma.client import FigmaClient

_db: SqlFigmaDatabase | None = None
_figma: FigmaClient | None = None


async def get_database() -> AsyncIterator[FigmaDatabase]:
    """Yield a ``FigmaDatabase``, creating it lazily on first call."""
    global _db  # noqa: PLW0603
    if _db is None:
        _db = SqlFigmaDatabase(get_engine())
    yield _db


async def get_figma_client() -> AsyncIterator[FigmaApi]:
    global _figma  # noqa: PLW0603
    if _figma is None:
        _figma = FigmaClient()
    yield _figma


async def shutdown_clients() -> None:
    global _db, _figma  # noqa: PLW0603
    if _db is not None:
        await _db.dispose()
        _db = None
    if _figma is not None:
        await _figma.aclose()
        _figma = None
