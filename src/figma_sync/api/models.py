"""Plain model objects returned by the custom data layers.

FastAPI-JSONAPI reads their attributes (``from_attributes=True``) to build
the JSON:API response envelopes.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from figma_sync.models import StoredFile, StoredNode


@dataclass
class FileModel:
    id: str
    key: str
    name: str
    thumbnail_url: str | None
    created: datetime
    modified: datetime

    @classmethod
    def from_stored(cls, stored: StoredFile) -> FileModel:
        return cls(
            id=str(stored.id),
            key=stored.key,
            name=stored.name,
            thumbnail_url=stored.thumbnail_url,
            created=stored.created,
            modified=stored.modified,
        )


@dataclass
class FigmaNodeModel:
    id: str
    figma_file_id: int
    node_id: str
    name: str
    type: str
    raw_data: dict[str, Any]

    @classmethod
    def from_stored(cls, stored: StoredNode) -> FigmaNodeModel:
        return cls(
            id=str(stored.id),
            figma_file_id=stored.file_id,
            node_id=stored.node_id,
            name=stored.name,
            type=stored.type,
            raw_data=stored.raw_data,
        )
