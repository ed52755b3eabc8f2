"""Local directory scanning and listing sort policy."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path

from .types import CachedFileInfo


class SortMode(Enum):
    NAME = "name"
    MODIFIED = "modified"
    TYPE = "type"

    @property
    def label(self) -> str:
        return self.value.capitalize()


@dataclass(frozen=True)
class DirectoryListing:
    """Directories and files of one folder, each list already sorted."""

    path: Path
    directories: list[CachedFileInfo] = field(default_factory=list)
    files: list[CachedFileInfo] = field(default_factory=list)
    hidden_count: int = 0

    @property
    def all_items(self) -> list[CachedFileInfo]:
        return self.directories + self.files


def is_hidden_name(name: str) -> bool:
    return name.startswith(".")


def _timestamp(stat_result: os.stat_result) -> datetime | None:
    try:
        return datetime.fromtimestamp(stat_result.st_mtime)
    except (OverflowError, OSError, ValueError):
        return None


def cached_info_for_path(path: Path) -> CachedFileInfo | None:
    """Stat one path (following symlinks) into a listing row, or ``None``."""
    try:
        stat_result = path.stat()
    except OSError:
        return None
    is_dir = path.is_dir()
    return CachedFileInfo(
        path=path,
        is_dir=is_dir,
        size=0 if is_dir else int(stat_result.st_size),
        modified=_timestamp(stat_result),
        is_hidden=is_hidden_name(path.name),
    )


def _name_key(info: CachedFileInfo) -> tuple[str, str]:
    return (info.name.casefold(), info.name)


def sort_entries(items: list[CachedFileInfo], mode: SortMode) -> list[CachedFileInfo]:
    """Return ``items`` ordered by ``mode``.

    ``MODIFIED`` puts the newest first and entries without a date last.
    ``TYPE`` puts names with an extension first, grouped by extension.
    """
    if mode is SortMode.MODIFIED:
        dated = [item for item in items if item.modified is not None]
        undated = [item for item in items if item.modified is None]
        dated.sort(key=_name_key)
        dated.sort(key=lambda item: item.modified, reverse=True)
        undated.sort(key=_name_key)
        return dated + undated
    if mode is SortMode.TYPE:
        return sorted(items, key=lambda item: (not item.extension, item.extension, *_name_key(item)))
    return sorted(items, key=_name_key)


def list_directory(
    directory: Path,
    show_hidden: bool,
    sort_mode: SortMode = SortMode.NAME,
) -> tuple[DirectoryListing, OSError | None]:
    """List one directory into sorted directory/file rows.

    Returns ``(listing, scan_error)``. ``scan_error`` is set (and the listing
    empty) when the directory itself cannot be read; unreadable children are
    kept with unknown metadata.
    """
    directories: list[CachedFileInfo] = []
    files: list[CachedFileInfo] = []
    hidden_count = 0
    try:
        with os.scandir(directory) as entries:
            for child in entries:
                name = child.name
                hidden = is_hidden_name(name)
                if hidden and not show_hidden:
                    hidden_count += 1
                    continue

                try:
                    is_dir = child.is_dir()
                except OSError:
                    is_dir = False

                size = 0
                modified: datetime | None = None
                try:
                    stat_result = child.stat()
                    modified = _timestamp(stat_result)
                    if not is_dir:
                        size = int(stat_result.st_size)
                except OSError:
                    pass

                info = CachedFileInfo(
                    path=Path(child.path),
                    is_dir=is_dir,
                    size=size,
                    modified=modified,
                    is_hidden=hidden,
                )
                (directories if is_dir else files).append(info)
    except OSError as exc:
        return DirectoryListing(path=directory), exc

    listing = DirectoryListing(
        path=directory,
        directories=sort_entries(directories, sort_mode),
        files=sort_entries(files, sort_mode),
        hidden_count=hidden_count,
    )
    return listing, None


__all__ = [
    "DirectoryListing",
    "SortMode",
    "cached_info_for_path",
    "is_hidden_name",
    "list_directory",
    "sort_entries",
]
