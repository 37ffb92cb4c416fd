"""Image downloading and persistence utilities."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from filetype import guess

from .client import FigmaClient
from .config import DEFAULT_MAX_WORKERS
from .errors import FilesystemError
from .models import ItemFailure, Selection
from .pool import collect_failures, run_tasks
from .utils import sanitize_filename

logger = logging.getLogger("figma_exporter.images")

# Formats whose file signature filetype can recognise.
SNIFFABLE_FORMATS = {"png", "jpg"}


def detect_image_format(data: bytes) -> Optional[str]:
    """Detect image type using filetype; returns lowercase extension."""
    kind = guess(data)
    if kind and kind.mime.startswith("image/"):
        ext = kind.extension.lower()
        if ext == "jpeg":
            return "jpg"
        return ext
    return None


def build_destination(output_dir: Path, name: str, image_format: str) -> Path:
    """Return ``<output_dir>/<sanitized name>.<format>``, refusing to leave output_dir."""
    destination = output_dir / f"{sanitize_filename(name)}.{image_format}"
    # Resolve the parent only; a symlinked placeholder is replaced in place.
    root = output_dir.resolve()
    parent = destination.parent.resolve()
    if destination.name in ("", ".", "..") or (
        parent != root and root not in parent.parents
    ):
        raise FilesystemError(
            f"node name {name!r} resolves outside {output_dir}",
            operation="write image",
        )
    return destination


def write_file(path: Path, data: bytes) -> None:
    """Write ``data`` atomically: the file either appears complete or not at all."""
    tmp_name = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            dir=path.parent, prefix=f".{path.name}.", suffix=".part", delete=False
        ) as handle:
            tmp_name = handle.name
            handle.write(data)
        os.replace(tmp_name, path)
    except OSError as exc:
        if tmp_name and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise FilesystemError(
            f"cannot write {path}: {exc}", operation="write image"
        ) from exc


def save_image(
    client: FigmaClient,
    url: str,
    destination: Path,
    image_format: str,
) -> Path:
    """Fetch one rendered image and store it at ``destination``."""
    data = client.fetch_bytes(url)
    if image_format in SNIFFABLE_FORMATS:
        detected = detect_image_format(data)
        if detected != image_format:
            logger.warning(
                "%s: expected %s data but got %s",
                destination.name,
                image_format,
                detected or "unknown",
            )
    write_file(destination, data)
    logger.info("Saved %s", destination)
    return destination


def plan_destinations(
    selection: Selection,
    node_ids: Sequence[str],
    output_dir: Path,
    image_format: str,
    fail_fast: bool = True,
) -> Tuple[Dict[str, Path], List[ItemFailure]]:
    """Assign every node its output path before any download starts.

    Two names that sanitize to the same path would overwrite each other, so
    the first node in selection order keeps the path and the others fail.
    """
    planned: Dict[str, Path] = {}
    owners: Dict[Path, str] = {}
    failures: List[ItemFailure] = []
    for node_id in node_ids:
        name = selection.name_by_id[node_id]
        try:
            destination = build_destination(output_dir, name, image_format)
            owner = owners.get(destination)
            if owner is not None:
                raise FilesystemError(
                    f"node name {name!r} ({node_id}) maps to {destination.name}, "
                    f"already used by {selection.name_by_id[owner]!r} ({owner})",
                    operation="write image",
                )
        except FilesystemError as exc:
            if fail_fast:
                raise
            failures.append(ItemFailure(item=node_id, error=exc))
            continue
        owners[destination] = node_id
        planned[node_id] = destination
    return planned, failures


def download_images(
    client: FigmaClient,
    selection: Selection,
    urls: Mapping[str, Optional[str]],
    output_dir: Path,
    image_format: str,
    max_workers: int = DEFAULT_MAX_WORKERS,
    fail_fast: bool = True,
) -> Tuple[List[Path], List[str], List[ItemFailure]]:
    """Download every selected node that has a render URL.

    Returns the written paths, the identifiers skipped for lack of a URL, and
    the failed downloads (empty unless ``fail_fast`` is off).
    """
    pending: List[str] = []
    missing: List[str] = []
    for node_id in selection.node_ids:
        if urls.get(node_id):
            pending.append(node_id)
        else:
            logger.warning(
                "No render url for %s (%s), skipping",
                selection.name_by_id.get(node_id, node_id),
                node_id,
            )
            missing.append(node_id)

    planned, failures = plan_destinations(
        selection, pending, output_dir, image_format, fail_fast=fail_fast
    )

    def _download(node_id: str) -> Path:
        return save_image(client, urls[node_id], planned[node_id], image_format)

    outcomes = run_tasks(_download, list(planned), max_workers, fail_fast=fail_fast)
    written = [outcome.value for outcome in outcomes if outcome.ok]
    failures.extend(collect_failures(outcomes))
    for failure in failures:
        logger.error("Download of %s failed: %s", failure.item, failure.error)
    return written, missing, failures
