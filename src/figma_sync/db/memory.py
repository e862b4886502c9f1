from dataclasses import replace

from figma_sync.core.exceptions import RecordNotFound, StorageError
from figma_sync.db.helpers import utcnow
from figma_sync.models import FileRecord, NodeRecord, StoredFile, StoredNode


class DuplicateNodeError(StorageError):
    """Raised when two nodes of one file share a node id."""


def _check_unique_node_ids(owner: int | str, nodes: list[NodeRecord]) -> None:
    seen: set[str] = set()
    for node in nodes:
        if node.node_id in seen:
            raise DuplicateNodeError(f"Duplicate node id {node.node_id!r} for figma file {owner}")
        seen.add(node.node_id)


class InMemoryFigmaDatabase:
    def __init__(self) -> None:
        self.files: dict[int, StoredFile] = {}
        self.nodes: dict[int, StoredNode] = {}
        self._next_file_id = 1
        self._next_node_id = 1

    async def ensure_ready(self) -> None:
        pass

    async def save_file(self, record: FileRecord) -> StoredFile:
        _check_unique_node_ids(record.key, record.nodes)
        now = utcnow()
        existing = next((f for f in self.files.values() if f.key == record.key), None)
        if existing is None:
            stored = StoredFile(
                id=self._next_file_id,
                key=record.key,
                name=record.name,
                thumbnail_url=record.thumbnail_url,
                created=record.created or now,
                modified=record.modified or now,
            )
            self._next_file_id += 1
        else:
            stored = replace(
                existing,
                name=record.name,
                thumbnail_url=record.thumbnail_url,
                created=record.created or existing.created,
                modified=record.modified or now,
            )
        self.files[stored.id] = stored
        if record.nodes:
            self._replace_nodes(stored.id, record.nodes)
        return stored

    async def replace_nodes(self, file_id: int, nodes: list[NodeRecord]) -> int:
        if file_id not in self.files:
            raise RecordNotFound(file_id)
        _check_unique_node_ids(file_id, nodes)
        return self._replace_nodes(file_id, nodes)

    async def get_file(self, file_id: int) -> StoredFile | None:
        return self.files.get(file_id)

    async def get_file_by_key(self, key: str) -> StoredFile | None:
        return next((f for f in self.files.values() if f.key == key), None)

    async def get_file_with_nodes(self, file_id: int) -> FileRecord | None:
        stored = self.files.get(file_id)
        if stored is None:
            return None
        owner = stored.to_record()
        records = [n.to_record().model_copy(update={"file": owner}) for n in self._file_nodes(file_id)]
        return stored.to_record(nodes=records)

    async def list_files_cursor(
        self,
        limit: int = 50,
        after_name: str | None = None,
        after_id: int | None = None,
        before_name: str | None = None,
        before_id: int | None = None,
    ) -> list[StoredFile]:
        all_files = sorted(self.files.values(), key=lambda f: (f.name, f.id))

        if after_name is not None and after_id is not None:
            all_files = [f for f in all_files if (f.name, f.id) > (after_name, after_id)]
        elif before_name is not None and before_id is not None:
            all_files = [f for f in all_files if (f.name, f.id) < (before_name, before_id)]
            return all_files[-limit:]

        return all_files[:limit]

    async def list_nodes_cursor(
        self,
        limit: int = 50,
        file_id: int | None = None,
        node_type: str | None = None,
        after_node_id: str | None = None,
        after_id: int | None = None,
        before_node_id: str | None = None,
        before_id: int | None = None,
    ) -> list[StoredNode]:
        nodes = sorted(self.nodes.values(), key=lambda n: (n.node_id, n.id))
        if file_id is not None:
            nodes = [n for n in nodes if n.file_id == file_id]
        if node_type is not None:
            nodes = [n for n in nodes if n.type == node_type]

        if after_node_id is not None and after_id is not None:
            nodes = [n for n in nodes if (n.node_id, n.id) > (after_node_id, after_id)]
        elif before_node_id is not None and before_id is not None:
            nodes = [n for n in nodes if (n.node_id, n.id) < (before_node_id, before_id)]
            return nodes[-limit:]

        return nodes[:limit]

    async def get_node(self, node_pk: int) -> StoredNode | None:
        return self.nodes.get(node_pk)

    async def delete_file(self, file_id: int) -> bool:
        if self.files.pop(file_id, None) is None:
            return False
        for node in self._file_nodes(file_id):
            del self.nodes[node.id]
        return True

    async def count_files(self) -> int:
        return len(self.files)

    async def count_nodes(self) -> int:
        return len(self.nodes)

    async def node_type_counts(self, limit: int = 50) -> list[tuple[str, int]]:
        counts: dict[str, int] = {}
        for node in self.nodes.values():
            counts[node.type] = counts.get(node.type, 0) + 1
        return sorted(counts.items(), key=lambda item: (-item[1], item[0]))[:limit]

    async def ping(self) -> bool:
        return True

    async def dispose(self) -> None:
        pass

    def _file_nodes(self, file_id: int) -> list[StoredNode]:
        return sorted((n for n in self.nodes.values() if n.file_id == file_id), key=lambda n: (n.node_id, n.id))

    def _replace_nodes(self, file_id: int, nodes: list[NodeRecord]) -> int:
        for old in self._file_nodes(file_id):
            del self.nodes[old.id]
        for node in nodes:
            self.nodes[self._next_node_id] = StoredNode(
                id=self._next_node_id,
                file_id=file_id,
                node_id=node.node_id,
                name=node.name,
                type=node.type,
                raw_data=dict(node.raw_data),
            )
            self._next_node_id += 1
        return len(nodes)
