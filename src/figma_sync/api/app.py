from __future__ import annotations

from fastapi import FastAPI
from fastapi_jsonapi import ApplicationBuilder
from fastapi_jsonapi.views import Operation

from figma_sync.api.lifespan import lifespan
from figma_sync.api.middleware import CursorPaginationMiddleware
from figma_sync.api.models import FigmaNodeModel, FileModel
from figma_sync.api.routes.files import router as files_router
from figma_sync.api.routes.health import router as health_router
from figma_sync.api.routes.root import router as root_router
from figma_sync.api.routes.statistics import router as statistics_router
from figma_sync.api.schemas import FigmaNodeSchema, FileCreateSchema, FileSchema
from figma_sync.api.views import FigmaNodeView, FileView


def create_app() -> FastAPI:
    app = FastAPI(
        title="Figma Sync API",
        description="Import Figma files and store their styles and variables as nodes.",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Custom (non-JSON:API) endpoints
    app.include_router(root_router, include_in_schema=False)
    app.include_router(health_router, include_in_schema=False)
    app.include_router(files_router)
    app.include_router(statistics_router)

    # JSON:API resources via FastAPI-JSONAPI
    builder = ApplicationBuilder(app)
    builder.add_resource(
        path="/files",
        tags=["files"],
        view=FileView,
        model=FileModel,
        schema=FileSchema,
        schema_in_post=FileCreateSchema,
        resource_type="files",
        ending_slash=False,
        operations=[Operation.GET_LIST, Operation.GET, Operation.CREATE],
    )
    builder.add_resource(
        path="/figma-nodes",
        tags=["figma-nodes"],
        view=FigmaNodeView,
        model=FigmaNodeModel,
        schema=FigmaNodeSchema,
        resource_type="figma-nodes",
        ending_slash=False,
        operations=[Operation.GET_LIST, Operation.GET],
    )
    builder.initialize()

    # Cursor-based pagination link injection
    app.add_middleware(CursorPaginationMiddleware)

    return app
