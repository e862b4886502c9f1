"""JSON:API view classes for files and figma-nodes resources."""

from __future__ import annotations

from typing import Any, ClassVar

from fastapi import Depends
from fastapi_jsonapi.views import Operation, OperationConfig, ViewBase
from pydantic import BaseModel, ConfigDict

from figma_sync.api.data_layer import FigmaNodeDataLayer, FileDataLayer
from figma_sync.api.dependencies import get_database, get_figma_client


class DbDependency(BaseModel):
    """Pydantic model whose fields become FastAPI Depends() parameters."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    db: Any = Depends(get_database)


class FileDependencies(DbDependency):
    figma: Any = Depends(get_figma_client)


async def prepare_dl_kwargs(view: ViewBase, deps: DbDependency) -> dict[str, Any]:
    """Extract resolved dependencies and return kwargs for the data layer constructor."""
    return {"db": deps.db}


async def prepare_file_dl_kwargs(view: ViewBase, deps: FileDependencies) -> dict[str, Any]:
    return {"db": deps.db, "figma": deps.figma}


class FileView(ViewBase):
    data_layer_cls = FileDataLayer  # type: ignore[assignment]
    operation_dependencies: ClassVar[dict[Operation, OperationConfig]] = {
        Operation.ALL: OperationConfig(
            dependencies=FileDependencies,
            prepare_data_layer_kwargs=prepare_file_dl_kwargs,
        ),
    }


class FigmaNodeView(ViewBase):
    data_layer_cls = FigmaNodeDataLayer  # type: ignore[assignment]
    operation_dependencies: ClassVar[dict[Operation, OperationConfig]] = {
        Operation.ALL: OperationConfig(
            dependencies=DbDependency,
            prepare_data_layer_kwargs=prepare_dl_kwargs,
        ),
    }
