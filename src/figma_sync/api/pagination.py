"""Cursor-based pagination for the JSON:API list endpoints.

Cursors are opaque base64 strings holding the sort key of a row and its id,
the id breaking ties between rows with equal sort keys.
"""

from __future__ import annotations

import base64
import json
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

from starlette.requests import Request

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 1000


class InvalidCursorError(ValueError):
    """Raised when a cursor string cannot be decoded."""


def encode_cursor(sort_value: str, id_value: int | str) -> str:
    payload = json.dumps({"s": sort_value, "i": str(id_value)}, separators=(",", ":"))
    return base64.urlsafe_b64encode(payload.encode()).decode()


def decode_cursor(cursor: str) -> tuple[str, int]:
    """Decode a cursor into ``(sort_value, id)``.

    Raises ``InvalidCursorError`` if the cursor is malformed.
    """
    try:
        payload = json.loads(base64.urlsafe_b64decode(cursor.encode()).decode())
        return str(payload["s"]), int(payload["i"])
    except (ValueError, KeyError, TypeError, UnicodeDecodeError) as exc:
        raise InvalidCursorError(f"Malformed cursor: {cursor!r}") from exc


def parse_page_params(request: Request) -> tuple[str | None, str | None, int]:
    """Extract ``page[after]``, ``page[before]`` and ``page[size]`` from the query string."""
    after = request.query_params.get("page[after]")
    before = request.query_params.get("page[before]")
    size_raw = request.query_params.get("page[size]", str(DEFAULT_PAGE_SIZE))
    try:
        size = max(1, min(int(size_raw), MAX_PAGE_SIZE))
    except (ValueError, TypeError):
        size = DEFAULT_PAGE_SIZE
    return after, before, size


@dataclass
class CursorPage(Generic[T]):
    items: list[T]
    has_next: bool
    has_prev: bool


def slice_page(rows: Sequence[T], size: int, after: str | None, before: str | None) -> CursorPage[T]:
    """Cut one page out of ``rows`` fetched with ``limit=size + 1``.

    Backward queries return the rows closest to the cursor last, so the page
    is taken from the end.
    """
    if before:
        page = list(rows[-size:])
        return CursorPage(items=page, has_next=len(page) > 0, has_prev=len(rows) > size)
    page = list(rows[:size])
    return CursorPage(items=page, has_next=len(rows) > size, has_prev=after is not None and len(page) > 0)


def store_pagination_state(
    request: Request,
    resource_path: str,
    size: int,
    page: CursorPage[T],
    cursor_of: Callable[[T], str],
) -> None:
    """Leave the link data on ``request.state`` for ``CursorPaginationMiddleware``."""
    state: dict[str, object] = {
        "resource_path": resource_path,
        "size": size,
        "has_next": page.has_next,
        "has_prev": page.has_prev,
    }
    if page.items:
        state["first_cursor"] = cursor_of(page.items[0])
        state["last_cursor"] = cursor_of(page.items[-1])
    request.state.cursor_pagination = state
