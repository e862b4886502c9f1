"""Tests for the FastAPI routes using an in-memory database and a fake Figma API."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from typing import Any, cast
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from figma_sync.api.app import create_app
from figma_sync.api.dependencies import get_database, get_figma_client
from figma_sync.api.pagination import InvalidCursorError, decode_cursor, encode_cursor
from figma_sync.core.exceptions import FigmaApiError, StorageError
from figma_sync.core.ports.database import FigmaDatabase
from figma_sync.core.ports.figma import FigmaApi
from figma_sync.db.memory import InMemoryFigmaDatabase
from figma_sync.models import FileRecord, NodeRecord
from tests.conftest import FakeFigmaApi


@pytest.fixture
def db() -> InMemoryFigmaDatabase:
    return InMemoryFigmaDatabase()


@pytest.fixture
def figma() -> FakeFigmaApi:
    return FakeFigmaApi()


@pytest.fixture
def client(db: InMemoryFigmaDatabase, figma: FakeFigmaApi) -> TestClient:
    app = create_app()

    async def _override_db() -> AsyncIterator[FigmaDatabase]:
        yield cast(FigmaDatabase, db)

    async def _override_figma() -> AsyncIterator[FigmaApi]:
        yield cast(FigmaApi, figma)

    app.dependency_overrides[get_database] = _override_db
    app.dependency_overrides[get_figma_client] = _override_figma
    return TestClient(app)


def _import(client: TestClient, file_key: str = "AbC123", token: str | None = "secret") -> dict[str, Any]:
    """Helper: POST /files with a JSON:API create envelope."""
    attributes: dict[str, Any] = {"file_key": file_key}
    if token is not None:
        attributes["token"] = token
    resp = client.post("/files", json={"data": {"type": "files", "attributes": attributes}})
    assert resp.status_code == 201, resp.text
    result: dict[str, Any] = resp.json()
    return result


def _seed_files(db: InMemoryFigmaDatabase, names: list[str]) -> None:
    for i, name in enumerate(names):
        asyncio.run(db.save_file(FileRecord(key=f"key{i}", name=name)))


def _seed_nodes(db: InMemoryFigmaDatabase, file_key: str, node_ids: list[str], type: str = "STYLE_FILL") -> int:
    stored = asyncio.run(db.save_file(FileRecord(key=file_key, name=file_key)))
    nodes = [NodeRecord(file_id=stored.id, node_id=n, name=n, type=type) for n in node_ids]
    asyncio.run(db.replace_nodes(stored.id, nodes))
    return stored.id


class TestRootRoute:
    def test_root_returns_discovery(self, client: TestClient) -> None:
        resp = client.get("/")
        assert resp.status_code == 200
        body = resp.json()
        assert body["jsonapi"]["version"] == "1.0"
        assert body["links"]["files"] == "/files"
        assert body["links"]["figma-nodes"] == "/figma-nodes"


class TestHealthRoutes:
    def test_liveness_returns_ok(self, client: TestClient) -> None:
        resp = client.get("/healthz/live")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}

    def test_readiness_returns_ok(self, client: TestClient) -> None:
        resp = client.get("/healthz/ready")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok", "database": "up"}


class TestFilesResource:
    def test_files_list_empty(self, client: TestClient) -> None:
        resp = client.get("/files")
        assert resp.status_code == 200
        body = resp.json()
        assert body["data"] == []
        assert body["jsonapi"]["version"] == "1.0"

    def test_create_imports_from_figma(self, client: TestClient, db: InMemoryFigmaDatabase, figma: FakeFigmaApi) -> None:
        body = _import(client)
        data = body["data"]
        assert data["type"] == "files"
        assert data["attributes"]["key"] == "AbC123"
        assert data["attributes"]["name"] == "Design System"
        assert figma.calls[0] == ("file", "AbC123", "secret")
        assert len(db.nodes) == 2

    def test_create_accepts_figma_url(self, client: TestClient) -> None:
        body = _import(client, file_key="https://www.figma.com/design/XyZ789/Landing?node-id=1-2")
        assert body["data"]["attributes"]["key"] == "XyZ789"

    def test_create_requires_key_and_token(self, client: TestClient, figma: FakeFigmaApi) -> None:
        resp = client.post("/files", json={"data": {"type": "files", "attributes": {"file_key": "AbC123"}}})
        assert resp.status_code == 400
        assert "Please provide both File Key and Access Token." in resp.text
        assert figma.calls == []

    def test_create_reports_import_failure(self, client: TestClient, figma: FakeFigmaApi) -> None:
        figma.file_error = FigmaApiError("Figma API Error (403): Forbidden - Invalid token", status_code=403)
        resp = client.post(
            "/files", json={"data": {"type": "files", "attributes": {"file_key": "AbC123", "token": "bad"}}}
        )
        assert resp.status_code == 400
        assert "Import failed: Figma API Error (403)" in resp.text

    def test_create_reports_storage_failure(
        self, client: TestClient, db: InMemoryFigmaDatabase, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(
            db, "replace_nodes", AsyncMock(side_effect=StorageError("Could not store nodes of figma file 1"))
        )
        resp = client.post(
            "/files", json={"data": {"type": "files", "attributes": {"file_key": "AbC123", "token": "t"}}}
        )
        assert resp.status_code == 400
        assert "Import failed: Could not store nodes" in resp.text

    def test_create_ignores_timestamps_in_payload(self, client: TestClient) -> None:
        resp = client.post(
            "/files",
            json={
                "data": {
                    "type": "files",
                    "attributes": {"file_key": "AbC123", "token": "t", "created": "2001-01-01T00:00:00Z"},
                }
            },
        )
        assert resp.status_code == 201, resp.text
        assert not resp.json()["data"]["attributes"]["created"].startswith("2001")

    def test_get_file_by_id(self, client: TestClient) -> None:
        file_id = _import(client)["data"]["id"]

        resp = client.get(f"/files/{file_id}")
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["id"] == file_id
        assert data["attributes"]["thumbnail_url"] == "https://s3.example.com/thumb.png"

    def test_get_file_not_found(self, client: TestClient) -> None:
        assert client.get("/files/999").status_code == 404

    def test_get_file_non_numeric_id(self, client: TestClient) -> None:
        assert client.get("/files/not-a-number").status_code in (404, 422)


class TestFileOperations:
    def test_delete_file(self, client: TestClient, db: InMemoryFigmaDatabase) -> None:
        file_id = _import(client)["data"]["id"]

        resp = client.delete(f"/files/{file_id}")

        assert resp.status_code == 204
        assert db.files == {}
        assert db.nodes == {}
        assert client.get(f"/files/{file_id}").status_code == 404

    def test_delete_unknown_file(self, client: TestClient) -> None:
        assert client.delete("/files/999").status_code == 404

    def test_sync_file(self, client: TestClient, figma: FakeFigmaApi) -> None:
        file_id = _import(client)["data"]["id"]
        figma.file["name"] = "Design System v2"

        resp = client.post(f"/files/{file_id}/sync", json={"token": "other"})

        assert resp.status_code == 200, resp.text
        body = resp.json()
        assert body["id"] == int(file_id)
        assert body["name"] == "Design System v2"
        assert body["node_count"] == 2
        assert figma.calls[-1] == ("file", "AbC123", "other")

    def test_sync_requires_token(self, client: TestClient) -> None:
        file_id = _import(client)["data"]["id"]
        assert client.post(f"/files/{file_id}/sync", json={}).status_code == 400

    def test_sync_unknown_file(self, client: TestClient) -> None:
        assert client.post("/files/999/sync", json={"token": "t"}).status_code == 404

    def test_sync_unknown_file_without_token(self, client: TestClient, figma: FakeFigmaApi) -> None:
        assert client.post("/files/999/sync", json={}).status_code == 404
        assert figma.calls == []

    def test_sync_storage_failure(
        self, client: TestClient, db: InMemoryFigmaDatabase, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        file_id = _import(client)["data"]["id"]
        monkeypatch.setattr(db, "replace_nodes", AsyncMock(side_effect=StorageError("Could not store nodes")))

        resp = client.post(f"/files/{file_id}/sync", json={"token": "t"})

        assert resp.status_code == 422
        assert resp.json()["detail"] == "Sync failed: Could not store nodes"

    def test_sync_figma_failure(self, client: TestClient, figma: FakeFigmaApi) -> None:
        file_id = _import(client)["data"]["id"]
        figma.file_error = FigmaApiError("Figma API Error (500): Internal Server Error", status_code=500)

        resp = client.post(f"/files/{file_id}/sync", json={"token": "t"})

        assert resp.status_code == 502
        assert "Sync failed" in resp.json()["detail"]

    def test_sync_without_styles(self, client: TestClient, figma: FakeFigmaApi) -> None:
        file_id = _import(client)["data"]["id"]
        figma.file = {"name": "Empty", "document": {"id": "0:0"}}
        figma.variables_error = FigmaApiError("Figma API Error (403): Forbidden", status_code=403)

        resp = client.post(f"/files/{file_id}/sync", json={"token": "t"})

        assert resp.status_code == 422

    def test_file_with_nodes(self, client: TestClient) -> None:
        file_id = _import(client)["data"]["id"]

        resp = client.get(f"/files/{file_id}/nodes")

        assert resp.status_code == 200
        body = resp.json()
        assert body["key"] == "AbC123"
        assert [n["node_id"] for n in body["nodes"]] == ["S:fill1", "S:text1"]
        assert body["nodes"][0]["raw_data"]["color"] == {"r": 1, "g": 0, "b": 0, "a": 1}

    def test_file_with_nodes_unknown(self, client: TestClient) -> None:
        assert client.get("/files/999/nodes").status_code == 404


class TestFigmaNodesResource:
    def test_list_empty(self, client: TestClient) -> None:
        resp = client.get("/figma-nodes")
        assert resp.status_code == 200
        assert resp.json()["data"] == []

    def test_filter_by_file_and_type(self, client: TestClient, db: InMemoryFigmaDatabase) -> None:
        file_a = _seed_nodes(db, "a", ["1:1", "1:2"])
        _seed_nodes(db, "b", ["2:1"], type="VARIABLE_COLOR")

        by_file = client.get("/figma-nodes", params={"filter[figma_file_id]": str(file_a)}).json()
        by_type = client.get("/figma-nodes", params={"filter[type]": "VARIABLE_COLOR"}).json()

        assert [d["attributes"]["node_id"] for d in by_file["data"]] == ["1:1", "1:2"]
        assert [d["attributes"]["node_id"] for d in by_type["data"]] == ["2:1"]
        assert by_type["data"][0]["type"] == "figma-nodes"

    def test_get_node_by_id(self, client: TestClient, db: InMemoryFigmaDatabase) -> None:
        _seed_nodes(db, "a", ["1:1"])
        node_pk = next(iter(db.nodes))

        resp = client.get(f"/figma-nodes/{node_pk}")

        assert resp.status_code == 200
        attrs = resp.json()["data"]["attributes"]
        assert attrs["node_id"] == "1:1"
        assert attrs["type"] == "STYLE_FILL"

    def test_get_node_not_found(self, client: TestClient) -> None:
        assert client.get("/figma-nodes/999").status_code == 404


class TestStatisticsRoute:
    def test_statistics(self, client: TestClient, db: InMemoryFigmaDatabase) -> None:
        _seed_nodes(db, "a", ["1", "2"])
        _seed_nodes(db, "b", ["3"], type="VARIABLE_COLOR")

        resp = client.get("/statistics")

        assert resp.status_code == 200
        body = resp.json()
        assert body["counts"] == {"files": 2, "nodes": 3}
        assert body["node_types"] == [
            {"type": "STYLE_FILL", "count": 2},
            {"type": "VARIABLE_COLOR", "count": 1},
        ]
        assert "meta" not in body


class TestCursorPagination:
    def test_encode_decode_cursor_roundtrip(self) -> None:
        cursor = encode_cursor("Design System", 42)
        assert decode_cursor(cursor) == ("Design System", 42)

    def test_decode_cursor_malformed_raises(self) -> None:
        with pytest.raises(InvalidCursorError):
            decode_cursor("not-valid-base64!!!")

    def test_files_default_pagination_no_stale_meta(self, client: TestClient) -> None:
        body = client.get("/files").json()
        assert "meta" not in body
        assert body["links"]["next"] is None
        assert body["links"]["prev"] is None

    def test_files_page_size_limits_results(self, client: TestClient, db: InMemoryFigmaDatabase) -> None:
        _seed_files(db, ["a", "b", "c"])

        body = client.get("/files", params={"page[size]": "2"}).json()

        assert [d["attributes"]["name"] for d in body["data"]] == ["a", "b"]
        assert body["links"]["next"] is not None
        assert body["links"]["prev"] is None

    def test_files_forward_and_back(self, client: TestClient, db: InMemoryFigmaDatabase) -> None:
        _seed_files(db, ["a", "b", "c"])

        body1 = client.get("/files", params={"page[size]": "2"}).json()
        body2 = client.get(body1["links"]["next"]).json()

        assert [d["attributes"]["name"] for d in body2["data"]] == ["c"]
        assert body2["links"]["next"] is None
        assert body2["links"]["prev"] is not None

        body3 = client.get(body2["links"]["prev"]).json()
        assert [d["attributes"]["name"] for d in body3["data"]] == ["a", "b"]
        assert body3["links"]["next"] is not None
        assert body3["links"]["prev"] is None

    def test_backward_page_ends_next_to_the_cursor(self, client: TestClient, db: InMemoryFigmaDatabase) -> None:
        _seed_files(db, ["a", "b", "c", "d", "e"])
        ids = {f.name: f.id for f in db.files.values()}

        cursor = encode_cursor("e", ids["e"])
        body = client.get("/files", params={"page[size]": "2", "page[before]": cursor}).json()

        assert [d["attributes"]["name"] for d in body["data"]] == ["c", "d"]
        assert body["links"]["prev"] is not None

    def test_files_cursor_past_end_returns_empty(self, client: TestClient, db: InMemoryFigmaDatabase) -> None:
        _seed_files(db, ["a"])

        cursor = encode_cursor("\uffff" * 10, 10**9)
        body = client.get("/files", params={"page[size]": "10", "page[after]": cursor}).json()

        assert body["data"] == []
        assert body["links"]["next"] is None
        assert body["links"]["prev"] is None

    def test_files_invalid_cursor_returns_error(self, client: TestClient) -> None:
        resp = client.get("/files", params={"page[after]": "not-a-valid-cursor!!!"})
        assert resp.status_code == 400

    def test_node_links_keep_filters(self, client: TestClient, db: InMemoryFigmaDatabase) -> None:
        file_id = _seed_nodes(db, "a", ["1:1", "1:2", "1:3"])
        _seed_nodes(db, "b", ["0:9"])

        body1 = client.get("/figma-nodes", params={"filter[figma_file_id]": str(file_id), "page[size]": "2"}).json()
        next_link = body1["links"]["next"]
        assert "filter[figma_file_id]" in next_link

        body2 = client.get(next_link).json()
        assert [d["attributes"]["node_id"] for d in body2["data"]] == ["1:3"]
