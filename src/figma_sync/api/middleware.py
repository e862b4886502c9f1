"""ASGI middleware adding cursor pagination links to JSON:API list responses."""

from __future__ import annotations

import json
from typing import Any
from urllib.parse import quote

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

JSONAPI_MEDIA_TYPE = "application/vnd.api+json"


async def _read_body(response: Response) -> bytes:
    body_iterator = getattr(response, "body_iterator", None)
    if body_iterator is None:
        return bytes(getattr(response, "body", b""))
    chunks: list[bytes] = []
    async for chunk in body_iterator:
        chunks.append(chunk.encode() if isinstance(chunk, str) else chunk)
    return b"".join(chunks)


def _carried_query(request: Request) -> str:
    """Non-pagination query parameters, such as filters, kept on page links."""
    return "&".join(
        f"{quote(k, safe='[]')}={quote(v)}" for k, v in request.query_params.multi_items() if not k.startswith("page[")
    )


def _page_link(state: dict[str, Any], direction: str, cursor_key: str, flag: str, carried: str = "") -> str | None:
    if not state[flag] or cursor_key not in state:
        return None
    query = f"page[size]={state['size']}&page[{direction}]={quote(state[cursor_key])}"
    if carried:
        query = f"{carried}&{query}"
    return f"{state['resource_path']}?{query}"


class CursorPaginationMiddleware(BaseHTTPMiddleware):
    """Sets ``links.next``/``links.prev`` and drops offset-based ``meta`` counts."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)

        state: dict[str, Any] | None = getattr(request.state, "cursor_pagination", None)
        if state is None:
            return response

        raw = await _read_body(response)
        headers = dict(response.headers)
        try:
            body = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError):
            body = None
        if not isinstance(body, dict) or "data" not in body:
            return Response(content=raw, status_code=response.status_code, headers=headers)

        links: dict[str, str | None] = body.get("links") or {}
        carried = _carried_query(request)
        links["next"] = _page_link(state, "after", "last_cursor", "has_next", carried)
        links["prev"] = _page_link(state, "before", "first_cursor", "has_prev", carried)
        body["links"] = links

        meta: dict[str, Any] = body.get("meta") or {}
        meta.pop("count", None)
        meta.pop("totalPages", None)
        if meta:
            body["meta"] = meta
        else:
            body.pop("meta", None)

        content = json.dumps(body, default=str).encode()
        headers["content-length"] = str(len(content))
        return Response(content=content, status_code=response.status_code, headers=headers, media_type=JSONAPI_MEDIA_TYPE)
