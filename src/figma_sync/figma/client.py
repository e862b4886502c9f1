"""
Client for the Figma REST API.
"""

from __future__ import annotations

import logging
import os
from typing import Any
from urllib.parse import quote

import httpx

from figma_sync.core.exceptions import FigmaApiError

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.figma.com/v1"
DEFAULT_TIMEOUT = 30.0
NODES_TIMEOUT = 15.0
VARIABLES_TIMEOUT = 10.0


def _error_message(response: httpx.Response) -> str:
    message = f"Figma API Error ({response.status_code}): {response.reason_phrase}"
    if not response.content:
        return message
    try:
        body = response.json()
    except ValueError:
        return message
    if isinstance(body, dict):
        if body.get("err"):
            message += f" - {body['err']}"
        elif body.get("message"):
            message += f" - {body['message']}"
    return message


class FigmaClient:
    """
    A thin async wrapper over the Figma file endpoints.

    Every request authenticates with a personal access token passed per call,
    so one client can serve several users.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or os.getenv("FIGMA_API_URL", DEFAULT_API_URL)).rstrip("/")
        self.timeout = timeout if timeout is not None else float(os.getenv("FIGMA_TIMEOUT", DEFAULT_TIMEOUT))
        self._client = httpx.AsyncClient(timeout=self.timeout, transport=transport)

    async def get_file(self, file_key: str, token: str) -> dict[str, Any]:
        """
        Fetch the full document of a file.

        Args:
            file_key: The key of the Figma file.
            token: A Figma personal access token.

        Returns:
            The decoded JSON response.

        Raises:
            FigmaApiError: If the request fails or returns a non-2xx status.
        """
        return await self._get(f"/files/{quote(file_key, safe='')}", token)

    async def get_file_nodes(self, file_key: str, node_ids: list[str], token: str) -> dict[str, Any]:
        """
        Fetch selected nodes of a file (``GET /files/:key/nodes?ids=...``).
        """
        ids = ",".join(node_ids)
        return await self._get(
            f"/files/{quote(file_key, safe='')}/nodes",
            token,
            params={"ids": ids},
            timeout=NODES_TIMEOUT,
        )

    async def get_local_variables(self, file_key: str, token: str) -> dict[str, Any]:
        """
        Fetch the local variables and variable collections of a file.

        The endpoint requires a token with the ``file_variables:read`` scope and
        answers 403 otherwise.
        """
        return await self._get(
            f"/files/{quote(file_key, safe='')}/variables/local",
            token,
            timeout=VARIABLES_TIMEOUT,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get(
        self,
        path: str,
        token: str,
        params: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> dict[str, Any]:
        url = f"{self.base_url}{path}"
        logger.debug("GET %s", url)
        try:
            response = await self._client.get(
                url,
                params=params,
                headers={"X-Figma-Token": token},
                timeout=timeout if timeout is not None else self.timeout,
            )
        except httpx.RequestError as e:
            raise FigmaApiError(f"Network error while calling Figma API: {e}") from e

        if not response.is_success:
            raise FigmaApiError(_error_message(response), status_code=response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            raise FigmaApiError(f"Figma API returned invalid JSON for {path}", response.status_code) from e
        if not isinstance(data, dict):
            raise FigmaApiError(f"Figma API returned an unexpected payload for {path}", response.status_code)
        return data
