"""Domain model for file entries from either storage backend.

This package contains non-UI primitives:
- origin-tagged file items with id-based identity
- lightweight listing rows for local directories
- directory scanning and the listing sort policy
"""

from __future__ import annotations

from .types import (
    DEVICE_LABEL,
    LOCAL_ORIGIN,
    CachedFileInfo,
    FileItem,
    FileOrigin,
    OriginKind,
    device_item_id,
)
from .fs import (
    DirectoryListing,
    SortMode,
    cached_info_for_path,
    is_hidden_name,
    list_directory,
    sort_entries,
)

__all__ = [
    "DEVICE_LABEL",
    "LOCAL_ORIGIN",
    "CachedFileInfo",
    "DirectoryListing",
    "FileItem",
    "FileOrigin",
    "OriginKind",
    "SortMode",
    "cached_info_for_path",
    "device_item_id",
    "is_hidden_name",
    "list_directory",
    "sort_entries",
]
