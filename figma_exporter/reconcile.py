"""Match placeholder files in the export directory against document nodes."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

from .errors import FilesystemError
from .models import LocalAsset, NameIndex, Node, Selection

logger = logging.getLogger("figma_exporter.reconcile")


def split_filename(filename: str) -> Tuple[Optional[str], Optional[str]]:
    """Split off the last extension segment; names without one have no base."""
    base, dot, extension = filename.rpartition(".")
    if not dot or not base:
        return None, None
    return base, extension


def list_local_assets(directory: Path) -> List[LocalAsset]:
    """List the entries of the export directory (non-recursive)."""
    assets: List[LocalAsset] = []
    try:
        with os.scandir(directory) as entries:
            for entry in sorted(entries, key=lambda e: e.name):
                base_name, extension = split_filename(entry.name)
                assets.append(
                    LocalAsset(
                        filename=entry.name,
                        base_name=base_name,
                        extension=extension,
                        is_dir=entry.is_dir(),
                    )
                )
    except OSError as exc:
        raise FilesystemError(
            f"cannot read directory {directory}: {exc}", operation="list directory"
        ) from exc
    return assets


def build_name_index(nodes: Iterable[Node]) -> NameIndex:
    """Index nodes by name; a later node with the same name replaces the earlier one."""
    index = NameIndex()
    for node in nodes:
        index.id_by_name[node.name] = node.id
        index.name_by_id[node.id] = node.name
    return index


def select_node_ids(assets: Sequence[LocalAsset], index: NameIndex) -> List[str]:
    selected: List[str] = []
    seen = set()
    for asset in assets:
        if asset.is_dir or asset.base_name is None:
            continue
        node_id = index.id_by_name.get(asset.base_name)
        if node_id is None:
            logger.debug("No node named %r, skipping %s", asset.base_name, asset.filename)
            continue
        if node_id not in seen:
            seen.add(node_id)
            selected.append(node_id)
    return selected


def reconcile(nodes: Sequence[Node], assets: Sequence[LocalAsset]) -> Selection:
    """Build the selection of node identifiers to export."""
    index = build_name_index(nodes)
    node_ids = select_node_ids(assets, index)
    logger.info(
        "Matched %d of %d local file(s) to document nodes",
        len(node_ids),
        sum(1 for asset in assets if not asset.is_dir),
    )
    return Selection(
        node_ids=tuple(node_ids),
        name_by_id={node_id: index.name_by_id[node_id] for node_id in node_ids},
    )
