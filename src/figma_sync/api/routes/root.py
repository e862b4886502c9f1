from __future__ import annotations

from typing import Any

from fastapi import APIRouter

router = APIRouter()


@router.get("/")
async def root() -> dict[str, Any]:
    """Root discovery endpoint listing the API's resources."""
    return {
        "jsonapi": {"version": "1.0"},
        "meta": {
            "title": "Figma Sync API",
            "description": "Import Figma files and store their styles and variables as nodes.",
            "version": "0.1.0",
        },
        "links": {
            "self": "/",
            "files": "/files",
            "figma-nodes": "/figma-nodes",
            "statistics": "/statistics",
            "openapi": "/openapi.json",
            "docs": "/docs",
        },
    }
