from typing import Any, Protocol


class FigmaApi(Protocol):
    async def get_file(self, file_key: str, token: str) -> dict[str, Any]: ...

    async def get_file_nodes(self, file_key: str, node_ids: list[str], token: str) -> dict[str, Any]: ...

    async def get_local_variables(self, file_key: str, token: str) -> dict[str, Any]: ...

    async def aclose(self) -> None: ...
