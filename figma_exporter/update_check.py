"""Look up the latest published release of the exporter."""

from __future__ import annotations

import logging
from typing import Optional

import requests

from .config import APP_VERSION
from .errors import DecodeError, ProtocolError, TransportError

logger = logging.getLogger("figma_exporter.update_check")

RELEASES_URL = "https://api.github.com/repos/nl-plus-doc/figma-exporter/releases/latest"


def get_latest_version(
    session: Optional[requests.Session] = None,
    timeout: float = 15.0,
) -> str:
    """Return the tag name of the latest GitHub release."""
    operation = "update check"
    http = session or requests
    try:
        resp = http.get(RELEASES_URL, timeout=timeout)
        resp.raise_for_status()
    except requests.HTTPError as exc:
        raise ProtocolError(str(exc), operation=operation) from exc
    except requests.RequestException as exc:
        raise TransportError("check network status", operation=operation) from exc
    try:
        payload = resp.json()
    except ValueError as exc:
        raise DecodeError("release response is not valid JSON", operation=operation) from exc
    tag = payload.get("tag_name") if isinstance(payload, dict) else None
    if not isinstance(tag, str) or not tag:
        raise ProtocolError("could not get the release tag", operation=operation)
    return tag


def check_update(session: Optional[requests.Session] = None) -> str:
    """Return the message to print for ``--update-check``."""
    latest = get_latest_version(session)
    if latest == APP_VERSION:
        return "Already up to date."
    return f"latest: {latest}"
