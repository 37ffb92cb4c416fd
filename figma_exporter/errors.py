"""Exception types raised by the export pipeline."""

from __future__ import annotations

from typing import Optional


class FigmaExporterError(Exception):
    """Base class for every failure surfaced by the exporter."""

    def __init__(self, message: str, operation: Optional[str] = None) -> None:
        super().__init__(message)
        self.operation = operation

    def __str__(self) -> str:
        message = super().__str__()
        if self.operation:
            return f"{self.operation} failed: {message}"
        return message


class ConfigurationError(FigmaExporterError):
    """Invalid depth, unsupported format, or missing credential."""


class TransportError(FigmaExporterError):
    """The network call could not complete."""


class DecodeError(FigmaExporterError):
    """The response body is not well-formed JSON."""


class ProtocolError(FigmaExporterError):
    """The response decoded but is not what the API contract promises."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message, operation)
        self.status_code = status_code


class FilesystemError(FigmaExporterError):
    """Listing, reading, or writing on the local filesystem failed."""
