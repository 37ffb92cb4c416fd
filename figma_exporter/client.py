"""Thin HTTP client for the Figma REST endpoints used by the exporter."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Sequence

import requests
from requests.adapters import HTTPAdapter

from .config import DEFAULT_API_BASE, DEFAULT_MAX_WORKERS, DEFAULT_TIMEOUT
from .errors import DecodeError, ProtocolError, TransportError
from .models import Document
from .nodes import decode_document

logger = logging.getLogger("figma_exporter.client")

API_VERSION = "v1"
TOKEN_HEADER = "X-FIGMA-TOKEN"


def _error_message(payload: Any, response: requests.Response) -> str:
    if isinstance(payload, dict):
        for key in ("err", "message", "error"):
            value = payload.get(key)
            if value and isinstance(value, str):
                return value
    return response.reason or f"HTTP {response.status_code}"


class FigmaClient:
    """Issue authenticated requests against the Figma API.

    A single ``requests.Session`` is shared by the worker threads; its
    adapters hold one pooled connection per worker so concurrent requests
    to the same host do not overflow the pool. Only ``get`` is called from
    the workers, and the session is not reconfigured once they start.
    """

    def __init__(
        self,
        token: str,
        api_base: str = DEFAULT_API_BASE,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
        pool_size: int = DEFAULT_MAX_WORKERS,
    ) -> None:
        self.token = token
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        if session is None:
            session = requests.Session()
            adapter = HTTPAdapter(pool_connections=pool_size, pool_maxsize=pool_size)
            session.mount("https://", adapter)
            session.mount("http://", adapter)
        self.session = session

    def __enter__(self) -> "FigmaClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self.session.close()

    def _url(self, *parts: str) -> str:
        return "/".join((self.api_base, API_VERSION) + parts)

    def _get(
        self,
        url: str,
        operation: str,
        params: Optional[Dict[str, str]] = None,
        authenticated: bool = True,
    ) -> requests.Response:
        headers = {TOKEN_HEADER: self.token} if authenticated else None
        try:
            return self.session.get(
                url, headers=headers, params=params, timeout=self.timeout
            )
        except requests.RequestException as exc:
            raise TransportError(str(exc), operation=operation) from exc

    def _get_json(
        self,
        url: str,
        operation: str,
        params: Optional[Dict[str, str]] = None,
    ) -> Any:
        response = self._get(url, operation, params=params)
        try:
            payload = response.json()
        except (ValueError, RecursionError) as exc:
            if not response.ok:
                raise ProtocolError(
                    _error_message(None, response),
                    operation=operation,
                    status_code=response.status_code,
                ) from exc
            raise DecodeError(
                f"response is not valid JSON: {exc}", operation=operation
            ) from exc
        if not response.ok:
            raise ProtocolError(
                f"HTTP {response.status_code}: {_error_message(payload, response)}",
                operation=operation,
                status_code=response.status_code,
            )
        return payload

    def fetch_document(self, project_id: str) -> Document:
        """Download and decode the full document tree of a file."""
        operation = "fetch document"
        logger.debug("Fetching document %s", project_id)
        payload = self._get_json(self._url("files", project_id), operation)
        return decode_document(payload, operation=operation)

    def request_export_urls(
        self,
        project_id: str,
        node_ids: Sequence[str],
        image_format: str,
    ) -> Dict[str, Optional[str]]:
        """Ask the API to render the given nodes and return their image URLs."""
        operation = "request export urls"
        params = {"ids": ",".join(node_ids), "format": image_format}
        logger.debug("Requesting %d render url(s) as %s", len(node_ids), image_format)
        payload = self._get_json(
            self._url("images", project_id), operation, params=params
        )
        if not isinstance(payload, dict):
            raise ProtocolError("images response is not an object", operation=operation)
        if payload.get("err"):
            raise ProtocolError(str(payload["err"]), operation=operation)
        images = payload.get("images")
        if not isinstance(images, dict):
            raise ProtocolError("images response has no 'images' map", operation=operation)
        urls: Dict[str, Optional[str]] = {}
        for node_id, url in images.items():
            if url is not None and not isinstance(url, str):
                raise ProtocolError(
                    f"render url for {node_id} is not a string", operation=operation
                )
            urls[str(node_id)] = url
        return urls

    def fetch_bytes(self, url: str) -> bytes:
        """Download a rendered image; render URLs are pre-signed and need no token."""
        operation = "download image"
        response = self._get(url, operation, authenticated=False)
        if not response.ok:
            raise ProtocolError(
                f"HTTP {response.status_code} for {url}",
                operation=operation,
                status_code=response.status_code,
            )
        return response.content
