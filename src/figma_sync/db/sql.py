import logging

from sqlalchemy import and_, delete, func, or_, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from figma_sync.core.exceptions import RecordNotFound, StorageError
from figma_sync.db.helpers import chunked, ensure_aware, utcnow
from figma_sync.db.tables import Base, FigmaFileRow, FigmaNodeRow
from figma_sync.models import FileRecord, NodeRecord, StoredFile, StoredNode

logger = logging.getLogger(__name__)


def _stored_file(row: FigmaFileRow) -> StoredFile:
    return StoredFile(
        id=row.id,
        key=row.file_key,
        name=row.name,
        thumbnail_url=row.thumbnail_url,
        created=ensure_aware(row.created),
        modified=ensure_aware(row.modified),
    )


def _stored_node(row: FigmaNodeRow) -> StoredNode:
    return StoredNode(
        id=row.id,
        file_id=row.figma_file_id,
        node_id=row.node_id,
        name=row.name,
        type=row.type,
        raw_data=dict(row.raw_data or {}),
    )


async def _replace_nodes(session: AsyncSession, file_id: int, nodes: list[NodeRecord]) -> int:
    """Delete every node of ``file_id`` and insert ``nodes`` in batches.

    Nodes are bound to ``file_id`` regardless of their own ``file_id``.
    """
    await session.execute(delete(FigmaNodeRow).where(FigmaNodeRow.figma_file_id == file_id))
    for chunk in chunked(nodes):
        session.add_all(
            FigmaNodeRow(
                figma_file_id=file_id,
                node_id=node.node_id,
                name=node.name,
                type=node.type,
                raw_data=node.raw_data,
            )
            for node in chunk
        )
        await session.flush()
    return len(nodes)


class SqlFigmaDatabase:
    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine
        self._sessions = async_sessionmaker(engine, expire_on_commit=False)
        self._tables_ensured = False

    async def ensure_ready(self) -> None:
        if self._tables_ensured:
            return
        try:
            async with self._engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except SQLAlchemyError as e:
            raise StorageError(f"Could not prepare the database: {e}") from e
        self._tables_ensured = True

    async def save_file(self, record: FileRecord) -> StoredFile:
        now = utcnow()
        try:
            async with self._sessions.begin() as session:
                row = await session.scalar(select(FigmaFileRow).where(FigmaFileRow.file_key == record.key))
                if row is None:
                    row = FigmaFileRow(file_key=record.key, created=record.created or now)
                    session.add(row)
                elif record.created is not None:
                    row.created = record.created
                row.name = record.name
                row.thumbnail_url = record.thumbnail_url
                row.modified = record.modified or now
                await session.flush()
                if record.nodes:
                    await _replace_nodes(session, row.id, record.nodes)
                stored = _stored_file(row)
        except SQLAlchemyError as e:
            raise StorageError(f"Could not save figma file {record.key}: {e}") from e
        logger.debug("Saved figma file %s (id=%s)", stored.key, stored.id)
        return stored

    async def replace_nodes(self, file_id: int, nodes: list[NodeRecord]) -> int:
        try:
            async with self._sessions.begin() as session:
                if await session.get(FigmaFileRow, file_id) is None:
                    raise RecordNotFound(file_id)
                count = await _replace_nodes(session, file_id, nodes)
        except SQLAlchemyError as e:
            raise StorageError(f"Could not store nodes of figma file {file_id}: {e}") from e
        logger.debug("Replaced nodes of figma file %s with %d nodes", file_id, count)
        return count

    async def get_file(self, file_id: int) -> StoredFile | None:
        async with self._sessions() as session:
            row = await session.get(FigmaFileRow, file_id)
            return _stored_file(row) if row is not None else None

    async def get_file_by_key(self, key: str) -> StoredFile | None:
        async with self._sessions() as session:
            row = await session.scalar(select(FigmaFileRow).where(FigmaFileRow.file_key == key))
            return _stored_file(row) if row is not None else None

    async def get_file_with_nodes(self, file_id: int) -> FileRecord | None:
        async with self._sessions() as session:
            row = await session.scalar(
                select(FigmaFileRow).where(FigmaFileRow.id == file_id).options(selectinload(FigmaFileRow.nodes))
            )
            if row is None:
                return None
            stored = _stored_file(row)
            nodes = [_stored_node(n) for n in sorted(row.nodes, key=lambda n: (n.node_id, n.id))]

        owner = stored.to_record()
        records = [n.to_record().model_copy(update={"file": owner}) for n in nodes]
        return stored.to_record(nodes=records)

    async def list_files_cursor(
        self,
        limit: int = 50,
        after_name: str | None = None,
        after_id: int | None = None,
        before_name: str | None = None,
        before_id: int | None = None,
    ) -> list[StoredFile]:
        stmt = select(FigmaFileRow)
        backwards = before_name is not None and before_id is not None

        if after_name is not None and after_id is not None:
            stmt = stmt.where(
                or_(
                    FigmaFileRow.name > after_name,
                    and_(FigmaFileRow.name == after_name, FigmaFileRow.id > after_id),
                )
            )
        elif backwards:
            stmt = stmt.where(
                or_(
                    FigmaFileRow.name < before_name,
                    and_(FigmaFileRow.name == before_name, FigmaFileRow.id < before_id),
                )
            )

        if backwards:
            stmt = stmt.order_by(FigmaFileRow.name.desc(), FigmaFileRow.id.desc())
        else:
            stmt = stmt.order_by(FigmaFileRow.name, FigmaFileRow.id)

        async with self._sessions() as session:
            rows = (await session.scalars(stmt.limit(limit))).all()
            result = [_stored_file(r) for r in rows]
        return result[::-1] if backwards else result

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
        stmt = select(FigmaNodeRow)
        backwards = before_node_id is not None and before_id is not None

        if file_id is not None:
            stmt = stmt.where(FigmaNodeRow.figma_file_id == file_id)
        if node_type is not None:
            stmt = stmt.where(FigmaNodeRow.type == node_type)

        if after_node_id is not None and after_id is not None:
            stmt = stmt.where(
                or_(
                    FigmaNodeRow.node_id > after_node_id,
                    and_(FigmaNodeRow.node_id == after_node_id, FigmaNodeRow.id > after_id),
                )
            )
        elif backwards:
            stmt = stmt.where(
                or_(
                    FigmaNodeRow.node_id < before_node_id,
                    and_(FigmaNodeRow.node_id == before_node_id, FigmaNodeRow.id < before_id),
                )
            )

        if backwards:
            stmt = stmt.order_by(FigmaNodeRow.node_id.desc(), FigmaNodeRow.id.desc())
        else:
            stmt = stmt.order_by(FigmaNodeRow.node_id, FigmaNodeRow.id)

        async with self._sessions() as session:
            rows = (await session.scalars(stmt.limit(limit))).all()
            result = [_stored_node(r) for r in rows]
        return result[::-1] if backwards else result

    async def get_node(self, node_pk: int) -> StoredNode | None:
        async with self._sessions() as session:
            row = await session.get(FigmaNodeRow, node_pk)
            return _stored_node(row) if row is not None else None

    async def delete_file(self, file_id: int) -> bool:
        async with self._sessions.begin() as session:
            row = await session.get(FigmaFileRow, file_id)
            if row is None:
                return False
            await session.delete(row)
        logger.info("Deleted figma file %s", file_id)
        return True

    async def count_files(self) -> int:
        async with self._sessions() as session:
            return int(await session.scalar(select(func.count(FigmaFileRow.id))) or 0)

    async def count_nodes(self) -> int:
        async with self._sessions() as session:
            return int(await session.scalar(select(func.count(FigmaNodeRow.id))) or 0)

    async def node_type_counts(self, limit: int = 50) -> list[tuple[str, int]]:
        count = func.count(FigmaNodeRow.id)
        stmt = (
            select(FigmaNodeRow.type, count)
            .group_by(FigmaNodeRow.type)
            .order_by(count.desc(), FigmaNodeRow.type)
            .limit(limit)
        )
        async with self._sessions() as session:
            rows = (await session.execute(stmt)).all()
        return [(str(t), int(c)) for t, c in rows]

    async def ping(self) -> bool:
        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception:
            logger.warning("Database ping failed", exc_info=True)
            return False

    async def dispose(self) -> None:
        await self._engine.dispose()
