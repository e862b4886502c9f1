from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict

# --- JSON:API resource schemas (used by FastAPI-JSONAPI ApplicationBuilder) ---


class FileSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    key: str
    name: str
    thumbnail_url: str | None = None
    created: datetime
    modified: datetime


class FigmaNodeSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    figma_file_id: int
    node_id: str
    name: str
    type: str
    raw_data: dict[str, Any]


class FileCreateSchema(BaseModel):
    """POST /files: import request attributes.

    ``file_key`` may be a raw key or a pasted figma.com URL.
    """

    file_key: str | None = None
    token: str | None = None


# --- Custom (non-JSON:API) endpoint schemas ---


class HealthResponse(BaseModel):
    status: str = "ok"


class ReadinessResponse(BaseModel):
    status: str = "ok"
    database: str = "up"


class SyncRequest(BaseModel):
    token: str | None = None


class SyncResponse(BaseModel):
    id: int
    key: str
    name: str
    thumbnail_url: str | None = None
    modified: datetime
    node_count: int


class NodeOut(BaseModel):
    node_id: str
    name: str
    type: str
    raw_data: dict[str, Any]


class FileWithNodesResponse(BaseModel):
    id: int
    key: str
    name: str
    thumbnail_url: str | None = None
    created: datetime | None = None
    modified: datetime | None = None
    nodes: list[NodeOut]
