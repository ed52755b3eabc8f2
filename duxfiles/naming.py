"""Collision-free destination names.

All helpers only probe; they never create, rename or overwrite anything, so
the returned name is free at the time of the call.
"""

from __future__ import annotations

import os
from pathlib import Path


def _occupied(path: Path) -> bool:
    # lexists: a dangling symlink still occupies its name.
    return os.path.lexists(path)


def split_name(name: str, is_dir: bool = False) -> tuple[str, str]:
    """Split ``name`` into ``(stem, suffix)``; directories keep no suffix.

    Leading-dot names such as ``.bashrc`` have no suffix.
    """
    if is_dir:
        return name, ""
    stem, suffix = os.path.splitext(name)
    if not stem:
        return name, ""
    return stem, suffix


def unique_destination(directory: Path, name: str, is_dir: bool = False) -> Path:
    """Return ``directory / name`` or the first free ``"stem N.ext"`` with N >= 2.

    ``file.txt`` → ``file 2.txt`` → ``file 3.txt``; directories and
    extensionless names become ``name 2``, ``name 3``.
    """
    candidate = directory / name
    if not _occupied(candidate):
        return candidate
    stem, suffix = split_name(name, is_dir)
    counter = 2
    while True:
        candidate = directory / f"{stem} {counter}{suffix}"
        if not _occupied(candidate):
            return candidate
        counter += 1


def unique_child_name(directory: Path, base: str, suffix: str = "", start: int = 1) -> Path:
    """Return ``base+suffix`` or the first free ``"base N"+suffix`` from ``start``.

    Used for "New Folder", "untitled.txt" and "name copy" style names.
    """
    candidate = directory / f"{base}{suffix}"
    counter = start
    while _occupied(candidate):
        candidate = directory / f"{base} {counter}{suffix}"
        counter += 1
    return candidate


__all__ = [
    "split_name",
    "unique_child_name",
    "unique_destination",
]
