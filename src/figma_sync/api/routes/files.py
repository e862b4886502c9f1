"""File operations that do not fit the JSON:API resource: delete, sync and the node listing."""

from fastapi import APIRouter, Depends, HTTPException, Response, status

from figma_sync.api.dependencies import get_database, get_figma_client
from figma_sync.api.schemas import FileWithNodesResponse, NodeOut, SyncRequest, SyncResponse
from figma_sync.core.exceptions import FigmaApiError, FigmaSyncError, RecordNotFound
from figma_sync.core.importer import run_sync
from figma_sync.core.ports.database import FigmaDatabase
from figma_sync.core.ports.figma import FigmaApi

router = APIRouter(prefix="/files", tags=["files"])


@router.delete("/{file_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_file(
    file_id: int,
    db: FigmaDatabase = Depends(get_database),
) -> Response:
    """Delete a file together with all of its nodes."""
    await db.ensure_ready()
    if not await db.delete_file(file_id):
        raise HTTPException(status_code=404, detail=f"File {file_id} not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{file_id}/sync", response_model=SyncResponse)
async def sync_file(
    file_id: int,
    body: SyncRequest,
    db: FigmaDatabase = Depends(get_database),
    figma: FigmaApi = Depends(get_figma_client),
) -> SyncResponse:
    """Re-import a stored file from Figma, replacing its nodes."""
    await db.ensure_ready()
    if await db.get_file(file_id) is None:
        raise HTTPException(status_code=404, detail=f"File {file_id} not found")
    if not body.token:
        raise HTTPException(status_code=400, detail="Access Token is required for syncing.")

    try:
        result = await run_sync(db, figma, file_id, body.token)
    except RecordNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except FigmaApiError as exc:
        raise HTTPException(status_code=502, detail=f"Sync failed: {exc}") from exc
    except FigmaSyncError as exc:
        raise HTTPException(status_code=422, detail=f"Sync failed: {exc}") from exc

    stored = result.file
    return SyncResponse(
        id=stored.id,
        key=stored.key,
        name=stored.name,
        thumbnail_url=stored.thumbnail_url,
        modified=stored.modified,
        node_count=result.node_count,
    )


@router.get("/{file_id}/nodes", response_model=FileWithNodesResponse)
async def file_with_nodes(
    file_id: int,
    db: FigmaDatabase = Depends(get_database),
) -> FileWithNodesResponse:
    await db.ensure_ready()
    record = await db.get_file_with_nodes(file_id)
    if record is None:
        raise HTTPException(status_code=404, detail=f"File {file_id} not found")
    return FileWithNodesResponse(
        id=file_id,
        key=record.key,
        name=record.name,
        thumbnail_url=record.thumbnail_url,
        created=record.created,
        modified=record.modified,
        nodes=[NodeOut(node_id=n.node_id, name=n.name, type=n.type, raw_data=n.raw_data) for n in record.nodes],
    )
