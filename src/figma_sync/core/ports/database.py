from typing import Protocol

from figma_sync.models import FileRecord, NodeRecord, StoredFile, StoredNode


class FigmaDatabase(Protocol):
    async def ensure_ready(self) -> None: ...

    async def save_file(self, record: FileRecord) -> StoredFile: ...

    async def replace_nodes(self, file_id: int, nodes: list[NodeRecord]) -> int: ...

    async def get_file(self, file_id: int) -> StoredFile | None: ...

    async def get_file_by_key(self, key: str) -> StoredFile | None: ...

    async def get_file_with_nodes(self, file_id: int) -> FileRecord | None: ...

    async def list_files_cursor(
        self,
        limit: int = 50,
        after_name: str | None = None,
        after_id: int | None = None,
        before_name: str | None = None,
        before_id: int | None = None,
    ) -> list[StoredFile]: ...

    async def list_nodes_cursor(
        self,
        limit: int = 50,
        file_id: int | None = None,
        node_type: str | None = None,
        after_node_id: str | None = None,
        after_id: int | None = None,
        before_node_id: str | None = None,
        before_id: int | None = None,
    ) -> list[StoredNode]: ...

    async def get_node(self, node_pk: int) -> StoredNode | None: ...

    async def delete_file(self, file_id: int) -> bool: ...

    async def count_files(self) -> int: ...

    async def count_nodes(self) -> int: ...

    async def node_type_counts(self, limit: int = 50) -> list[tuple[str, int]]: ...

    async def ping(self) -> bool: ...

    async def dispose(self) -> None: ...
