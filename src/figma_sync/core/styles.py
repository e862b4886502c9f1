"""Turn Figma file payloads into node records.

Styles are listed at the top of a file response without their values; the
values live on the document nodes that apply them. Variables are either
embedded in the file response or served by the local variables endpoint.
"""

from __future__ import annotations

from typing import Any

from figma_sync.core.exceptions import VariablesUnavailableError
from figma_sync.models import NodeRecord

StyleMap = dict[str, dict[str, Any]]

# Keys whose presence means a style definition carries actual values
_VALUE_KEYS = ("color", "textStyle", "fills")


def collect_styles(data: dict[str, Any]) -> StyleMap:
    """Return the file's style definitions keyed by style id, enriched from the document tree."""
    styles: StyleMap = {style_id: dict(style) for style_id, style in (data.get("styles") or {}).items()}
    document = data.get("document")
    if document:
        _walk_document(document, styles)
    return styles


def _walk_document(node: dict[str, Any], styles: StyleMap) -> None:
    for slot, style_id in (node.get("styles") or {}).items():
        style = styles.get(style_id)
        if style is None:
            continue
        if slot == "fill":
            if node.get("fills"):
                style["fills"] = node["fills"]
                if node["fills"][0].get("color"):
                    style["color"] = node["fills"][0]["color"]
        elif slot == "stroke":
            if node.get("strokes"):
                style["strokes"] = node["strokes"]
        elif slot == "text":
            if node.get("style"):
                style["textStyle"] = node["style"]
        elif slot == "effect":
            if node.get("effects"):
                style["effects"] = node["effects"]

    for child in node.get("children") or []:
        _walk_document(child, styles)


def count_styles_with_values(styles: StyleMap) -> int:
    return sum(1 for style in styles.values() if any(key in style for key in _VALUE_KEYS))


def enrich_styles_from_nodes(styles: StyleMap, nodes_response: dict[str, Any]) -> None:
    """Copy values from a ``/nodes`` response onto the matching style definitions, in place."""
    for node_id, wrapper in (nodes_response.get("nodes") or {}).items():
        style = styles.get(node_id)
        if style is None or not wrapper or not wrapper.get("document"):
            continue
        node = wrapper["document"]
        style_type = style.get("styleType")
        if style_type == "FILL" and node.get("fills"):
            style["fills"] = node["fills"]
            if node["fills"][0].get("color"):
                style["color"] = node["fills"][0]["color"]
        elif style_type == "TEXT" and node.get("style"):
            style["textStyle"] = node["style"]
        elif style_type == "EFFECT" and node.get("effects"):
            style["effects"] = node["effects"]


def styles_to_nodes(styles: StyleMap, file_id: int) -> list[NodeRecord]:
    return [
        NodeRecord(
            file_id=file_id,
            node_id=style_id,
            name=style.get("name") or "Unnamed Style",
            type="STYLE_" + str(style.get("styleType") or "UNKNOWN").upper(),
            raw_data=style,
        )
        for style_id, style in styles.items()
    ]


def file_variables_to_nodes(data: dict[str, Any], file_id: int) -> list[NodeRecord]:
    return [
        NodeRecord(
            file_id=file_id,
            node_id=var_id,
            name=variable.get("name") or "Unnamed Variable",
            type="VARIABLE_" + str(variable.get("resolvedType") or "UNKNOWN").upper(),
            raw_data=variable,
        )
        for var_id, variable in (data.get("variables") or {}).items()
    ]


def local_variables_to_nodes(response: dict[str, Any], file_id: int) -> list[NodeRecord]:
    """Build node records from a ``/variables/local`` response.

    Variables are emitted collection by collection; a variable whose collection
    is not listed is skipped.

    Raises ``VariablesUnavailableError`` if the payload lacks ``meta``, its
    collections, or its variables.
    """
    meta = response.get("meta")
    if not meta:
        raise VariablesUnavailableError("Variables API response missing 'meta' field.")
    collections: dict[str, Any] = meta.get("variableCollections") or {}
    if not collections:
        raise VariablesUnavailableError("No variable collections found.")
    variables: dict[str, Any] = meta.get("variables") or {}
    if not variables:
        raise VariablesUnavailableError("No variables found.")

    nodes: list[NodeRecord] = []
    for collection_id, collection in collections.items():
        for var_id, variable in variables.items():
            if variable.get("variableCollectionId") != collection_id:
                continue
            resolved_type = str(variable.get("resolvedType") or "UNKNOWN")
            nodes.append(
                NodeRecord(
                    file_id=file_id,
                    node_id=var_id,
                    name=variable.get("name") or "Unnamed Variable",
                    type="VARIABLE_" + resolved_type.upper(),
                    raw_data={
                        "collection": collection.get("name"),
                        "resolvedType": resolved_type,
                        "valuesByMode": variable.get("valuesByMode") or {},
                        "scopes": variable.get("scopes") or [],
                        "hiddenFromPublishing": variable.get("hiddenFromPublishing", False),
                    },
                )
            )
    return nodes
