"""Configuration objects and constants for the exporter."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from dotenv import find_dotenv, load_dotenv

from .errors import ConfigurationError

logger = logging.getLogger("figma_exporter")

APP_VERSION = "v0.3.0"
DEFAULT_API_BASE = "https://api.figma.com"
SUPPORTED_FORMATS = ("jpg", "png", "svg")
DEFAULT_FORMAT = "jpg"
# The images endpoint rejects requests naming too many nodes at once.
EXPORT_BATCH_SIZE = 20
DEFAULT_MAX_WORKERS = 8
DEFAULT_TIMEOUT = 60.0

PROJECT_ID_ENV = "PROJECT_ID"
TOKEN_ENV = "FIGMA_TOKEN"


@dataclass
class ExportConfig:
    """Top-level settings that control a single export run."""

    project_id: str
    token: str
    output_dir: Path
    image_format: str = DEFAULT_FORMAT
    depth: int = 1
    batch_size: int = EXPORT_BATCH_SIZE
    max_workers: int = DEFAULT_MAX_WORKERS
    timeout: float = DEFAULT_TIMEOUT
    api_base: str = DEFAULT_API_BASE
    fail_fast: bool = True

    def validate(self) -> None:
        """Reject values the pipeline cannot run with."""
        if not self.project_id:
            raise ConfigurationError(
                f"{PROJECT_ID_ENV} is not set", operation="configuration"
            )
        if not self.token:
            raise ConfigurationError(
                f"{TOKEN_ENV} is not set", operation="configuration"
            )
        if self.image_format not in SUPPORTED_FORMATS:
            raise ConfigurationError(
                f"'{self.image_format}' is unsupported format.",
                operation="configuration",
            )
        if self.depth < 1:
            raise ConfigurationError(
                "depth must be 1 or more", operation="configuration"
            )
        if self.batch_size < 1:
            raise ConfigurationError(
                "batch size must be 1 or more", operation="configuration"
            )
        if self.max_workers < 1:
            raise ConfigurationError(
                "worker count must be 1 or more", operation="configuration"
            )
        if self.timeout <= 0:
            raise ConfigurationError(
                "timeout must be positive", operation="configuration"
            )


def load_credentials(env_file: Optional[Path] = None) -> Tuple[str, str]:
    """Read the project id and access token from a .env file or the environment."""
    if env_file is not None and not Path(env_file).is_file():
        raise ConfigurationError(
            f"env file does not exist: {env_file}", operation="configuration"
        )
    dotenv_path = env_file or find_dotenv(usecwd=True)
    if dotenv_path and load_dotenv(dotenv_path=dotenv_path):
        logger.debug("Loaded environment from %s", dotenv_path)
    return os.getenv(PROJECT_ID_ENV, ""), os.getenv(TOKEN_ENV, "")
