"""Figma file and node records.

The records only declare the fields that may be bound from external input.
Keyword construction is typed; bulk construction through ``model_validate``
silently drops any key that is not one of the declared fields.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class _Record(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class FileRecord(_Record):
    key: str
    name: str = ""
    thumbnail_url: str | None = Field(default=None, alias="thumbnailUrl")
    created: datetime | None = None
    modified: datetime | None = None
    nodes: list[NodeRecord] = Field(default_factory=list)


class NodeRecord(_Record):
    file_id: int = Field(alias="fileId")
    node_id: str = Field(alias="nodeId")
    name: str = ""
    type: str = ""
    raw_data: dict[str, Any] = Field(default_factory=dict, alias="rawData")
    file: FileRecord | None = None


FileRecord.model_rebuild()  # necessary for the file <-> nodes cycle
NodeRecord.model_rebuild()


@dataclass(frozen=True)
class StoredFile:
    """A persisted file row, identified by its database id."""

    id: int
    key: str
    name: str
    thumbnail_url: str | None
    created: datetime
    modified: datetime

    def to_record(self, nodes: list[NodeRecord] | None = None) -> FileRecord:
        return FileRecord(
            key=self.key,
            name=self.name,
            thumbnail_url=self.thumbnail_url,
            created=self.created,
            modified=self.modified,
            nodes=nodes or [],
        )


@dataclass(frozen=True)
class StoredNode:
    id: int
    file_id: int
    node_id: str
    name: str
    type: str
    raw_data: dict[str, Any]

    def to_record(self) -> NodeRecord:
        return NodeRecord(
            file_id=self.file_id,
            node_id=self.node_id,
            name=self.name,
            type=self.type,
            raw_data=self.raw_data,
        )
