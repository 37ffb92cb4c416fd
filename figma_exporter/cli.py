"""Command-line entry point for the Figma exporter."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

from .config import (
    APP_VERSION,
    DEFAULT_FORMAT,
    DEFAULT_MAX_WORKERS,
    DEFAULT_TIMEOUT,
    SUPPORTED_FORMATS,
    ExportConfig,
    load_credentials,
)
from .errors import FigmaExporterError
from .exporter import run_export
from .update_check import check_update

logger = logging.getLogger("figma_exporter.cli")


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description=(
            "Export Figma frames as images, named after the placeholder files "
            "found in the target directory."
        ),
    )
    parser.add_argument(
        "--dir",
        type=Path,
        default=None,
        help="Image directory to search. ex: `--dir images`",
    )
    parser.add_argument(
        "--format",
        default=DEFAULT_FORMAT,
        help=f"Image format to export (default: {DEFAULT_FORMAT})",
    )
    parser.add_argument(
        "--depth",
        type=int,
        default=1,
        help="Depth of node to search (default: 1)",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=DEFAULT_MAX_WORKERS,
        help="Maximum number of concurrent requests",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT,
        help="Per-request timeout in seconds",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Read PROJECT_ID and FIGMA_TOKEN from this file instead of ./.env",
    )
    parser.add_argument(
        "--keep-going",
        action="store_true",
        help="Export whatever succeeds and report failed batches and downloads at the end",
    )
    parser.add_argument(
        "-v",
        "--version",
        action="store_true",
        help="Print version",
    )
    parser.add_argument(
        "--update-check",
        action="store_true",
        help="Check for updates",
    )
    parser.add_argument(
        "--format-list",
        action="store_true",
        help="Print the supported image formats",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    return parser.parse_args(argv)


def _run(args: argparse.Namespace) -> int:
    if args.version:
        print(APP_VERSION)
        return 0
    if args.update_check:
        print(check_update())
        return 0
    if args.format_list:
        print("supported format:")
        for image_format in SUPPORTED_FORMATS:
            print(image_format)
        return 0
    if args.dir is None:
        logger.error("please specify a directory. ex: `--dir images`")
        return 2

    project_id, token = load_credentials(args.env_file)
    config = ExportConfig(
        project_id=project_id,
        token=token,
        output_dir=Path(args.dir).resolve(),
        image_format=args.format,
        depth=args.depth,
        max_workers=args.workers,
        timeout=args.timeout,
        fail_fast=not args.keep_going,
    )
    report = run_export(config)
    if not report.ok:
        logger.error("%d item(s) failed, see errors above", len(report.failures))
        return 1
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )
    try:
        return _run(args)
    except FigmaExporterError as exc:
        logger.error("%s", exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
