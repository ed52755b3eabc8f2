"""Single-item local file operations behind the explorer's commands.

Every function returns the resulting path and raises a ``DuxError`` subclass
on failure. Newly created names never replace an existing entry.
"""

from __future__ import annotations

import os
import shutil
from pathlib import Path

from send2trash import send2trash

from .errors import AlreadyExists, InvalidState, IOFailure, from_os_error
from .naming import split_name, unique_child_name

NEW_FOLDER_NAME = "New Folder"
NEW_FILE_STEM = "untitled"
NEW_FILE_SUFFIX = ".txt"


def validate_name(name: str) -> str:
    """Return ``name`` stripped, or raise ``InvalidState`` if it is unusable."""
    cleaned = name.strip()
    if not cleaned or cleaned in (".", ".."):
        raise InvalidState("Invalid name", name)
    if os.sep in cleaned or (os.altsep and os.altsep in cleaned) or "\0" in cleaned:
        raise InvalidState("Name must not contain a path separator", name)
    return cleaned


def create_folder(directory: Path, name: str = NEW_FOLDER_NAME) -> Path:
    """Create ``name`` (or ``"name 1"``, ``"name 2"``...) inside ``directory``."""
    target = unique_child_name(directory, validate_name(name))
    try:
        target.mkdir()
    except OSError as exc:
        raise from_os_error(exc, target) from exc
    return target


def create_file(directory: Path, stem: str = NEW_FILE_STEM, suffix: str = NEW_FILE_SUFFIX) -> Path:
    """Create an empty ``untitled.txt`` (then ``untitled 1.txt``...)."""
    target = unique_child_name(directory, validate_name(stem), suffix)
    try:
        # "x" mode fails instead of truncating a file created meanwhile.
        with open(target, "x", encoding="utf-8"):
            pass
    except OSError as exc:
        raise from_os_error(exc, target) from exc
    return target


def duplicate(path: Path) -> Path:
    """Copy ``path`` beside itself as ``"name copy.ext"`` or ``"name copy 2.ext"``."""
    if not os.path.lexists(path):
        raise from_os_error(FileNotFoundError(2, "No such file or directory"), path)
    is_dir = path.is_dir() and not path.is_symlink()
    stem, suffix = split_name(path.name, is_dir)
    target = unique_child_name(path.parent, f"{stem} copy", suffix, start=2)
    try:
        if is_dir:
            shutil.copytree(path, target, symlinks=True)
        else:
            shutil.copy2(path, target, follow_symlinks=False)
    except shutil.Error as exc:
        raise IOFailure(str(exc), path) from exc
    except OSError as exc:
        raise from_os_error(exc, path) from exc
    return target


def _rename_within_parent(path: Path, new_name: str) -> Path:
    target = path.with_name(new_name)
    if target == path:
        return path
    # Case-only renames on case-insensitive volumes see the source as "existing".
    if os.path.lexists(target) and not _same_entry(path, target):
        raise AlreadyExists("An item with that name already exists", target)
    try:
        os.rename(path, target)
    except OSError as exc:
        raise from_os_error(exc, path) from exc
    return target


def _same_entry(left: Path, right: Path) -> bool:
    try:
        return os.path.samefile(left, right)
    except OSError:
        return False


def rename(path: Path, new_name: str) -> Path:
    if not os.path.lexists(path):
        raise from_os_error(FileNotFoundError(2, "No such file or directory"), path)
    return _rename_within_parent(path, validate_name(new_name))


def toggle_hidden_name(path: Path) -> Path:
    """Add or drop the leading dot that hides ``path``."""
    name = path.name
    if name.startswith("."):
        new_name = name.lstrip(".")
        if not new_name:
            raise InvalidState("Cannot unhide this name", path)
    else:
        new_name = "." + name
    return rename(path, new_name)


def move_to_trash(path: Path) -> None:
    if not os.path.lexists(path):
        raise from_os_error(FileNotFoundError(2, "No such file or directory"), path)
    try:
        send2trash(os.fspath(path))
    except OSError as exc:
        raise from_os_error(exc, path) from exc


__all__ = [
    "NEW_FILE_STEM",
    "NEW_FILE_SUFFIX",
    "NEW_FOLDER_NAME",
    "create_file",
    "create_folder",
    "duplicate",
    "move_to_trash",
    "rename",
    "toggle_hidden_name",
    "validate_name",
]
