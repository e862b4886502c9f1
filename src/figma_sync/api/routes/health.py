from fastapi import APIRouter, Depends, Response, status

from figma_sync.api.dependencies import get_database
from figma_sync.api.schemas import HealthResponse, ReadinessResponse
from figma_sync.core.ports.database import FigmaDatabase

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse()


@router.get("/healthz/live", response_model=HealthResponse)
async def liveness() -> HealthResponse:
    """Liveness probe: the process is up."""
    return HealthResponse()


@router.get("/healthz/ready", response_model=ReadinessResponse)
async def readiness(
    response: Response,
    db: FigmaDatabase = Depends(get_database),
) -> ReadinessResponse:
    """Readiness probe: checks DB connectivity."""
    if await db.ping():
        return ReadinessResponse(status="ok", database="up")
    response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return ReadinessResponse(status="degraded", database="down")
