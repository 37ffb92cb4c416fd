"""Concurrent, batched retrieval of render URLs."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from .client import FigmaClient
from .config import DEFAULT_MAX_WORKERS, EXPORT_BATCH_SIZE
from .models import ItemFailure
from .pool import collect_failures, run_tasks
from .utils import chunk_by, merge_maps

logger = logging.getLogger("figma_exporter.batching")

UrlMap = Dict[str, Optional[str]]


def get_export_urls(
    client: FigmaClient,
    project_id: str,
    node_ids: Sequence[str],
    image_format: str,
    batch_size: int = EXPORT_BATCH_SIZE,
    max_workers: int = DEFAULT_MAX_WORKERS,
    fail_fast: bool = True,
) -> Tuple[UrlMap, List[ItemFailure]]:
    """Request render URLs for ``node_ids`` in batches of ``batch_size``.

    An empty selection issues no request at all. Failed batches are raised
    (``fail_fast``) or returned as failures alongside the URLs of the batches
    that succeeded; the failure item is the batch's list of identifiers.
    """
    chunks = chunk_by(node_ids, batch_size)
    if not chunks:
        logger.info("Nothing selected, skipping render requests")
        return {}, []
    logger.info(
        "Requesting render urls for %d node(s) in %d batch(es)",
        len(node_ids),
        len(chunks),
    )

    def _request(chunk: List[str]) -> UrlMap:
        urls = client.request_export_urls(project_id, chunk, image_format)
        requested = set(chunk)
        foreign = [node_id for node_id in urls if node_id not in requested]
        for node_id in foreign:
            logger.warning("Ignoring render url for unrequested node %s", node_id)
            del urls[node_id]
        return urls

    outcomes = run_tasks(_request, chunks, max_workers, fail_fast=fail_fast)
    merged = merge_maps(outcome.value for outcome in outcomes if outcome.ok)
    failures = collect_failures(outcomes)
    for failure in failures:
        logger.error(
            "Render request for %d node(s) failed: %s", len(failure.item), failure.error
        )
    return merged, failures
