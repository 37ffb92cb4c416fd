"""Data models used throughout the export pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class Node:
    """A single entry of the remote document hierarchy."""

    id: str
    name: str
    type: str = ""
    visible: bool = True
    children: Tuple["Node", ...] = ()


@dataclass(frozen=True)
class Document:
    """Decoded file response: metadata plus the root node."""

    document: Node
    name: str = ""
    role: Optional[str] = None
    last_modified: Optional[str] = None
    thumbnail_url: Optional[str] = None
    version: Optional[str] = None
    schema_version: Optional[int] = None


@dataclass
class NameIndex:
    """Lookups between node names and identifiers."""

    id_by_name: Dict[str, str] = field(default_factory=dict)
    name_by_id: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class LocalAsset:
    """A placeholder file observed in the export directory."""

    filename: str
    base_name: Optional[str]
    extension: Optional[str]
    is_dir: bool = False


@dataclass(frozen=True)
class Selection:
    """Node identifiers chosen for export and their display names."""

    node_ids: Tuple[str, ...]
    name_by_id: Dict[str, str]


@dataclass
class TaskOutcome:
    """Result slot written by exactly one pool task."""

    item: Any
    value: Any = None
    error: Optional[BaseException] = None
    done: bool = False

    @property
    def ok(self) -> bool:
        return self.done and self.error is None


@dataclass
class ItemFailure:
    """A work item that failed and the exception it raised."""

    item: Any
    error: BaseException


@dataclass
class ExportReport:
    """Summary of one export run."""

    selected_ids: Tuple[str, ...] = ()
    urls: Dict[str, Optional[str]] = field(default_factory=dict)
    written: List[Path] = field(default_factory=list)
    missing: List[str] = field(default_factory=list)
    failures: List[ItemFailure] = field(default_factory=list)
    total_seconds: float = 0.0

    @property
    def ok(self) -> bool:
        return not self.failures
