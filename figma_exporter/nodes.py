"""Decoding of the document tree and depth-bounded flattening."""

from __future__ import annotations

from typing import Any, List, Mapping, Optional

from .errors import ConfigurationError, ProtocolError
from .models import Document, Node


def _optional_str(payload: Mapping[str, Any], key: str) -> Optional[str]:
    value = payload.get(key)
    return None if value is None else str(value)


def decode_node(payload: Any, operation: str = "decode document") -> Node:
    """Build a Node (and its subtree) from the JSON representation."""
    if not isinstance(payload, dict):
        raise ProtocolError("node is not an object", operation=operation)
    node_id = payload.get("id")
    if not isinstance(node_id, str) or not node_id:
        raise ProtocolError("node without an 'id'", operation=operation)
    raw_children = payload.get("children")
    if raw_children is None:
        raw_children = []
    if not isinstance(raw_children, list):
        raise ProtocolError(
            f"children of node {node_id} is not a list", operation=operation
        )
    return Node(
        id=node_id,
        name=str(payload.get("name") or ""),
        type=str(payload.get("type") or ""),
        visible=bool(payload.get("visible", True)),
        children=tuple(decode_node(child, operation) for child in raw_children),
    )


def decode_document(payload: Any, operation: str = "decode document") -> Document:
    """Validate the file response shape and decode it."""
    if not isinstance(payload, dict):
        raise ProtocolError("file response is not an object", operation=operation)
    if "document" not in payload:
        raise ProtocolError("file response has no 'document'", operation=operation)
    try:
        root = decode_node(payload["document"], operation)
    except RecursionError as exc:
        raise ProtocolError("document tree is nested too deeply", operation=operation) from exc
    schema_version = payload.get("schemaVersion")
    return Document(
        document=root,
        name=str(payload.get("name") or ""),
        role=_optional_str(payload, "role"),
        last_modified=_optional_str(payload, "lastModified"),
        thumbnail_url=_optional_str(payload, "thumbnailUrl"),
        version=_optional_str(payload, "version"),
        schema_version=schema_version if isinstance(schema_version, int) else None,
    )


def flatten_nodes(root: Node, depth: int) -> List[Node]:
    """Collect every node within ``depth`` levels below ``root``.

    Depth 1 yields the root's immediate children. Each further level appends
    the children of the nodes added by the previous one, so ancestors and
    descendants appear together, level by level in document order.
    """
    if depth < 1:
        raise ConfigurationError("depth must be 1 or more", operation="flatten nodes")
    frontier = list(root.children)
    flattened = list(frontier)
    for _ in range(depth - 1):
        frontier = [child for node in frontier for child in node.children]
        if not frontier:
            break
        flattened.extend(frontier)
    return flattened
