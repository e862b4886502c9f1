import logging
import re
from dataclasses import dataclass

from figma_sync.core.exceptions import (
    FigmaApiError,
    FigmaSyncError,
    InvalidFigmaResponseError,
    NoStylesFoundError,
    RecordNotFound,
)
from figma_sync.core.ports.database import FigmaDatabase
from figma_sync.core.ports.figma import FigmaApi
from figma_sync.core.styles import (
    collect_styles,
    count_styles_with_values,
    enrich_styles_from_nodes,
    file_variables_to_nodes,
    local_variables_to_nodes,
    styles_to_nodes,
)
from figma_sync.models import FileRecord, NodeRecord, StoredFile

logger = logging.getLogger(__name__)

# The /nodes endpoint is only asked for this many styles per import
MAX_STYLE_NODE_LOOKUPS = 10

_URL_KEY_PATTERN = re.compile(r"(?:file|design)/([a-zA-Z0-9]+)")
_NON_ALNUM = re.compile(r"[^a-zA-Z0-9]")


@dataclass(frozen=True)
class ImportResult:
    file: StoredFile
    node_count: int


def extract_file_key(value: str) -> str:
    """Return the file key from a pasted Figma URL or a raw key.

    ``https://www.figma.com/file/AbC123/Name?node-id=1`` and ``" AbC123/ "``
    both yield ``"AbC123"``.
    """
    value = value.strip()
    if "figma.com" in value:
        match = _URL_KEY_PATTERN.search(value)
        if match:
            return match.group(1)

    candidate = value.split("/")[-1]
    candidate = candidate.split("?")[0]
    return _NON_ALNUM.sub("", candidate)


async def _enrich_from_style_nodes(client: FigmaApi, file_key: str, token: str, styles: dict) -> None:
    style_ids = list(styles)[:MAX_STYLE_NODE_LOOKUPS]
    if not style_ids:
        return
    try:
        response = await client.get_file_nodes(file_key, style_ids, token)
    except FigmaApiError as e:
        logger.warning("Failed to fetch style nodes: %s", e)
        return
    enrich_styles_from_nodes(styles, response)


async def _fetch_local_variables(client: FigmaApi, file_key: str, token: str, file_id: int) -> list[NodeRecord]:
    logger.info("No styles/variables in file data, trying the local variables endpoint")
    try:
        response = await client.get_local_variables(file_key, token)
        logger.debug("Variables API response: %s", response)
        nodes = local_variables_to_nodes(response, file_id)
    except FigmaSyncError as e:
        logger.warning("Variables API failed: %s", e)
        if isinstance(e, FigmaApiError) and e.status_code == 403:
            raise NoStylesFoundError(
                "No styles or variables found. Your Figma token is not allowed to read the Variables API "
                "(HTTP 403). The file itself was imported; create a token with the 'File content' and "
                "'Variables' read scopes to import variables."
            ) from e
        raise NoStylesFoundError(f"No styles or variables found in this file. Error: {e}") from e
    logger.info("Prepared %d variables from the local variables endpoint", len(nodes))
    return nodes


async def run_import(database: FigmaDatabase, client: FigmaApi, file_key: str, token: str) -> ImportResult:
    """Fetch a file from Figma and store it with its styles and variables as nodes.

    The file row is upserted before extraction, so a failed extraction still
    leaves the refreshed file metadata (and its previous nodes) in place.
    """
    try:
        data = await client.get_file(file_key, token)
        if not data.get("document"):
            raise InvalidFigmaResponseError("Invalid Figma response: Document structure is missing.")

        stored = await database.save_file(
            FileRecord(
                key=file_key,
                name=data.get("name") or "Untitled",
                thumbnail_url=data.get("thumbnailUrl"),
            )
        )

        styles = collect_styles(data)
        if styles and count_styles_with_values(styles) == 0:
            await _enrich_from_style_nodes(client, file_key, token, styles)

        nodes = styles_to_nodes(styles, stored.id) + file_variables_to_nodes(data, stored.id)
        if not nodes:
            nodes = await _fetch_local_variables(client, file_key, token, stored.id)
        if not nodes:
            raise NoStylesFoundError(
                "No styles or variables found in this Figma file. Please ensure the file has color styles, "
                "text styles, or variables defined."
            )

        count = await database.replace_nodes(stored.id, nodes)
        logger.info("Imported figma file %s with %d nodes", file_key, count)
        return ImportResult(file=stored, node_count=count)
    except FigmaSyncError as e:
        logger.error("Figma import of %s failed: %s", file_key, e)
        raise


async def run_sync(database: FigmaDatabase, client: FigmaApi, file_id: int, token: str) -> ImportResult:
    """Re-import a stored file from Figma."""
    stored = await database.get_file(file_id)
    if stored is None:
        raise RecordNotFound(file_id)
    return await run_import(database, client, stored.key, token)
