"""Custom BaseDataLayer classes bridging JSON:API operations to the FigmaDatabase protocol."""

from __future__ import annotations

from typing import Any

from fastapi import Request
from fastapi_jsonapi.data_layers.base import BaseDataLayer
from fastapi_jsonapi.data_typing import TypeModel, TypeSchema
from fastapi_jsonapi.exceptions import BadRequest, ObjectNotFound
from fastapi_jsonapi.querystring import QueryStringManager
from fastapi_jsonapi.views import RelationshipRequestInfo

from figma_sync.api.models import FigmaNodeModel, FileModel
from figma_sync.api.pagination import (
    InvalidCursorError,
    decode_cursor,
    encode_cursor,
    parse_page_params,
    slice_page,
    store_pagination_state,
)
from figma_sync.core.exceptions import FigmaSyncError
from figma_sync.core.importer import extract_file_key, run_import
from figma_sync.core.ports.database import FigmaDatabase
from figma_sync.core.ports.figma import FigmaApi
from figma_sync.core.query import query_files, query_nodes
from figma_sync.models import StoredFile, StoredNode


def _cursor_bounds(after: str | None, before: str | None) -> tuple[tuple[str, int] | None, tuple[str, int] | None]:
    try:
        if after:
            return decode_cursor(after), None
        if before:
            return None, decode_cursor(before)
    except InvalidCursorError as exc:
        raise BadRequest(detail=str(exc)) from exc
    return None, None


def _parse_id(raw: Any, what: str) -> int:
    try:
        return int(str(raw))
    except ValueError as exc:
        raise ObjectNotFound(detail=f"{what} {raw} not found") from exc


class FileDataLayer(BaseDataLayer):
    """Data layer for the ``files`` JSON:API resource."""

    def __init__(
        self,
        request: Request,
        model: type[TypeModel],
        schema: type[TypeSchema],
        resource_type: str,
        db: FigmaDatabase | None = None,
        figma: FigmaApi | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(request=request, model=model, schema=schema, resource_type=resource_type, **kwargs)
        assert db is not None, "FigmaDatabase dependency must be provided"
        self.db = db
        self.figma = figma

    async def get_collection(
        self,
        qs: QueryStringManager,
        view_kwargs: dict[str, Any] | None = None,
        relationship_request_info: RelationshipRequestInfo | None = None,
    ) -> tuple[int, list[Any]]:
        await self.db.ensure_ready()

        after_cursor, before_cursor, size = parse_page_params(self.request)
        after, before = _cursor_bounds(after_cursor, before_cursor)

        rows = await query_files(
            self.db,
            limit=size + 1,
            after_name=after[0] if after else None,
            after_id=after[1] if after else None,
            before_name=before[0] if before else None,
            before_id=before[1] if before else None,
        )
        page = slice_page(rows, size, after_cursor, before_cursor)

        def _cursor(f: StoredFile) -> str:
            return encode_cursor(f.name, f.id)

        store_pagination_state(self.request, "/files", size, page, _cursor)

        # 0 keeps FastAPI-JSONAPI from generating offset-based links
        return 0, [FileModel.from_stored(f) for f in page.items]

    async def get_object(
        self,
        view_kwargs: dict[str, Any],
        qs: QueryStringManager | None = None,
        relationship_request_info: RelationshipRequestInfo | None = None,
    ) -> Any:
        await self.db.ensure_ready()
        raw_id = view_kwargs.get("id", "")
        stored = await self.db.get_file(_parse_id(raw_id, "File"))
        if stored is None:
            raise ObjectNotFound(detail=f"File {raw_id} not found")
        return FileModel.from_stored(stored)

    async def create_object(self, data_create: Any, view_kwargs: dict[str, Any]) -> Any:
        await self.db.ensure_ready()
        attrs = data_create.attributes
        file_key: str | None = getattr(attrs, "file_key", None)
        token: str | None = getattr(attrs, "token", None)

        if not file_key or not token:
            raise BadRequest(detail="Please provide both File Key and Access Token.")
        assert self.figma is not None, "FigmaApi dependency must be provided"

        try:
            result = await run_import(self.db, self.figma, extract_file_key(file_key), token)
        except FigmaSyncError as exc:
            raise BadRequest(detail=f"Import failed: {exc}") from exc
        return FileModel.from_stored(result.file)


class FigmaNodeDataLayer(BaseDataLayer):
    """Data layer for the ``figma-nodes`` JSON:API resource."""

    def __init__(
        self,
        request: Request,
        model: type[TypeModel],
        schema: type[TypeSchema],
        resource_type: str,
        db: FigmaDatabase | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(request=request, model=model, schema=schema, resource_type=resource_type, **kwargs)
        assert db is not None, "FigmaDatabase dependency must be provided"
        self.db = db

    async def get_collection(
        self,
        qs: QueryStringManager,
        view_kwargs: dict[str, Any] | None = None,
        relationship_request_info: RelationshipRequestInfo | None = None,
    ) -> tuple[int, list[Any]]:
        await self.db.ensure_ready()

        after_cursor, before_cursor, size = parse_page_params(self.request)
        after, before = _cursor_bounds(after_cursor, before_cursor)

        file_id: int | None = None
        node_type: str | None = None
        for f in qs.filters:
            if f.get("op") != "eq":
                continue
            if f.get("name") == "figma_file_id":
                try:
                    file_id = int(str(f["val"]))
                except ValueError as exc:
                    raise BadRequest(detail=f"Invalid figma_file_id filter: {f['val']!r}") from exc
            elif f.get("name") == "type":
                node_type = str(f["val"])

        rows = await query_nodes(
            self.db,
            file_id=file_id,
            node_type=node_type,
            limit=size + 1,
            after_node_id=after[0] if after else None,
            after_id=after[1] if after else None,
            before_node_id=before[0] if before else None,
            before_id=before[1] if before else None,
        )
        page = slice_page(rows, size, after_cursor, before_cursor)

        def _cursor(n: StoredNode) -> str:
            return encode_cursor(n.node_id, n.id)

        store_pagination_state(self.request, "/figma-nodes", size, page, _cursor)
        return 0, [FigmaNodeModel.from_stored(n) for n in page.items]

    async def get_object(
        self,
        view_kwargs: dict[str, Any],
        qs: QueryStringManager | None = None,
        relationship_request_info: RelationshipRequestInfo | None = None,
    ) -> Any:
        await self.db.ensure_ready()
        raw_id = view_kwargs.get("id", "")
        stored = await self.db.get_node(_parse_id(raw_id, "FigmaNode"))
        if stored is None:
            raise ObjectNotFound(detail=f"FigmaNode {raw_id} not found")
        return FigmaNodeModel.from_stored(stored)
