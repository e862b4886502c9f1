from figma_sync.db.helpers import NODE_BATCH_SIZE, chunked
from figma_sync.db.memory import DuplicateNodeError, InMemoryFigmaDatabase
from figma_sync.db.sql import SqlFigmaDatabase
from figma_sync.db.tables import Base, FigmaFileRow, FigmaNodeRow

__all__ = [
    "NODE_BATCH_SIZE",
    "Base",
    "DuplicateNodeError",
    "FigmaFileRow",
    "FigmaNodeRow",
    "InMemoryFigmaDatabase",
    "SqlFigmaDatabase",
    "chunked",
]
