"""Utility helpers for filename normalization and batching."""

from __future__ import annotations

import re
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, TypeVar

T = TypeVar("T")

# Characters rejected by at least one common filesystem. ``/`` is kept because
# nested frame names map onto nested directories.
ILLEGAL_FILENAME_PATTERN = re.compile(r'[:<>"\\|?*\x00-\x1f]')


def sanitize_filename(value: str, replacement: str = "-") -> str:
    """Replace filesystem-illegal characters and leave everything else alone."""
    return ILLEGAL_FILENAME_PATTERN.sub(replacement, value)


def chunk_by(items: Sequence[T], chunk_size: int) -> List[List[T]]:
    """Split items into contiguous chunks of at most ``chunk_size`` entries."""
    if chunk_size < 1:
        raise ValueError("chunk_size must be positive")
    return [list(items[i : i + chunk_size]) for i in range(0, len(items), chunk_size)]


def merge_maps(
    maps: Iterable[Optional[Mapping[str, Optional[str]]]],
) -> Dict[str, Optional[str]]:
    """Merge partial mappings in order; later entries win on key collisions."""
    merged: Dict[str, Optional[str]] = {}
    for partial in maps:
        if partial:
            merged.update(partial)
    return merged
