"""Shared fixtures and helpers for tests."""

import copy
import logging
import warnings
from pathlib import Path
from typing import Any

import pytest
from testcontainers.core.container import DockerContainer
from testcontainers.core.waiting_utils import wait_for_logs

from alembic import command
from alembic.config import Config
from figma_sync.core.exceptions import FigmaApiError
from figma_sync.db import InMemoryFigmaDatabase

logger = logging.getLogger(__name__)

_REPO_ROOT = Path(__file__).parent.parent


# ---------------------------------------------------------------------------
# Auto-marker: tag tests as "unit" or "integration" based on directory
# ---------------------------------------------------------------------------


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        test_path = Path(str(item.fspath))
        rel = test_path.relative_to(_REPO_ROOT / "tests")
        parts = rel.parts
        if parts and parts[0] == "integration":
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


# ---------------------------------------------------------------------------
# PostgresTestBase: helpers for integration tests that need a PostgreSQL container
# ---------------------------------------------------------------------------

POSTGRES_IMAGE = "postgres:16-alpine"


class PostgresTestBase:
    @staticmethod
    def create_container(image: str = POSTGRES_IMAGE) -> DockerContainer:
        return DockerContainer(image).with_exposed_ports(5432).with_env("POSTGRES_PASSWORD", "postgres")

    @staticmethod
    def get_alembic_config() -> Config:
        ini_path = str(_REPO_ROOT / "alembic.ini")
        cfg = Config(ini_path)
        cfg.set_main_option("script_location", str(_REPO_ROOT / "alembic"))
        return cfg

    @staticmethod
    def run_migrations(connection_url: str) -> None:
        cfg = PostgresTestBase.get_alembic_config()
        cfg.set_main_option("sqlalchemy.url", connection_url)
        command.upgrade(cfg, "head")

    @staticmethod
    def cleanup_migrations(connection_url: str) -> None:
        cfg = PostgresTestBase.get_alembic_config()
        cfg.set_main_option("sqlalchemy.url", connection_url)
        command.downgrade(cfg, "base")

    @staticmethod
    def wait_for_postgres(container: DockerContainer) -> None:
        # The official image restarts once after init; wait for the second "ready" line
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", DeprecationWarning)
            wait_for_logs(
                container,
                r"database system is ready to accept connections[\s\S]*database system is ready to accept connections",
                timeout=60,
            )


# ---------------------------------------------------------------------------
# Figma API test double
# ---------------------------------------------------------------------------


def make_file_payload() -> dict[str, Any]:
    """A trimmed ``GET /files/:key`` response with one fill and one text style."""
    return {
        "name": "Design System",
        "thumbnailUrl": "https://s3.example.com/thumb.png",
        "styles": {
            "S:fill1": {"key": "k1", "name": "Primary", "styleType": "FILL", "description": ""},
            "S:text1": {"key": "k2", "name": "Heading", "styleType": "TEXT", "description": ""},
        },
        "document": {
            "id": "0:0",
            "type": "DOCUMENT",
            "children": [
                {
                    "id": "1:1",
                    "type": "CANVAS",
                    "children": [
                        {
                            "id": "1:2",
                            "type": "RECTANGLE",
                            "styles": {"fill": "S:fill1"},
                            "fills": [{"type": "SOLID", "color": {"r": 1, "g": 0, "b": 0, "a": 1}}],
                        },
                        {
                            "id": "1:3",
                            "type": "TEXT",
                            "styles": {"text": "S:text1"},
                            "style": {"fontFamily": "Inter", "fontSize": 32},
                        },
                    ],
                }
            ],
        },
    }


class FakeFigmaApi:
    """Figma API double serving canned payloads and recording every call."""

    def __init__(
        self,
        file: dict[str, Any] | None = None,
        nodes: dict[str, Any] | None = None,
        variables: dict[str, Any] | None = None,
        file_error: FigmaApiError | None = None,
        nodes_error: FigmaApiError | None = None,
        variables_error: FigmaApiError | None = None,
    ) -> None:
        self.file = file if file is not None else make_file_payload()
        self.nodes = nodes or {"nodes": {}}
        self.variables = variables or {}
        self.file_error = file_error
        self.nodes_error = nodes_error
        self.variables_error = variables_error
        self.calls: list[tuple[str, str, Any]] = []
        self.closed = False

    async def get_file(self, file_key: str, token: str) -> dict[str, Any]:
        self.calls.append(("file", file_key, token))
        if self.file_error is not None:
            raise self.file_error
        return copy.deepcopy(self.file)

    async def get_file_nodes(self, file_key: str, node_ids: list[str], token: str) -> dict[str, Any]:
        self.calls.append(("nodes", file_key, list(node_ids)))
        if self.nodes_error is not None:
            raise self.nodes_error
        return copy.deepcopy(self.nodes)

    async def get_local_variables(self, file_key: str, token: str) -> dict[str, Any]:
        self.calls.append(("variables", file_key, token))
        if self.variables_error is not None:
            raise self.variables_error
        return copy.deepcopy(self.variables)

    async def aclose(self) -> None:
        self.closed = True

    def endpoints(self) -> list[str]:
        return [call[0] for call in self.calls]


# ---------------------------------------------------------------------------
# Shared unit-test fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def file_payload() -> dict[str, Any]:
    return make_file_payload()


@pytest.fixture
def fake_figma() -> FakeFigmaApi:
    return FakeFigmaApi()


@pytest.fixture
def in_memory_db() -> InMemoryFigmaDatabase:
    return InMemoryFigmaDatabase()
