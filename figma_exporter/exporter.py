"""High-level orchestration of a single export run."""

from __future__ import annotations

import logging
import time
from typing import Optional

from .batching import get_export_urls
from .client import FigmaClient
from .config import ExportConfig
from .images import download_images
from .models import ExportReport, Selection
from .nodes import flatten_nodes
from .reconcile import list_local_assets, reconcile

logger = logging.getLogger("figma_exporter")


def run_export(
    config: ExportConfig,
    client: Optional[FigmaClient] = None,
) -> ExportReport:
    """Fetch the document, match local placeholders, and download the renders.

    With ``config.fail_fast`` any error propagates as soon as its phase
    reaches the barrier. Otherwise failed batches and downloads are collected
    in the returned report and the run carries on with what succeeded.
    """
    config.validate()
    overall_start = time.perf_counter()
    owns_client = client is None
    if client is None:
        client = FigmaClient(
            config.token,
            api_base=config.api_base,
            timeout=config.timeout,
            pool_size=config.max_workers,
        )
    report = ExportReport()
    try:
        # A bad directory must fail before any network call.
        assets = list_local_assets(config.output_dir)

        logger.info("Fetching document %s", config.project_id)
        document = client.fetch_document(config.project_id)
        # Depth counts levels below the pages, which are always included.
        nodes = flatten_nodes(document.document, config.depth + 1)
        logger.debug("Flattened %d node(s) at depth %d", len(nodes), config.depth)

        selection = reconcile(nodes, assets)
        report.selected_ids = selection.node_ids

        urls, failures = get_export_urls(
            client,
            config.project_id,
            selection.node_ids,
            config.image_format,
            batch_size=config.batch_size,
            max_workers=config.max_workers,
            fail_fast=config.fail_fast,
        )
        report.urls = urls
        report.failures.extend(failures)
        # Nodes of a failed batch are reported as failures, not as missing.
        failed_ids = {node_id for failure in failures for node_id in failure.item}
        selection = Selection(
            node_ids=tuple(i for i in selection.node_ids if i not in failed_ids),
            name_by_id=selection.name_by_id,
        )

        written, missing, failures = download_images(
            client,
            selection,
            urls,
            config.output_dir,
            config.image_format,
            max_workers=config.max_workers,
            fail_fast=config.fail_fast,
        )
        report.written = written
        report.missing = missing
        report.failures.extend(failures)
    finally:
        if owns_client:
            client.close()
        report.total_seconds = time.perf_counter() - overall_start

    logger.info(
        "Finished in %.2fs (%d written, %d without url, %d failed)",
        report.total_seconds,
        len(report.written),
        len(report.missing),
        len(report.failures),
    )
    return report
