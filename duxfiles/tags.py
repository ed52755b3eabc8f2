"""Persisted color-tag classification of files.

Tags are keyed on plain absolute path strings and survive the files
themselves; a tagged path that no longer exists is still listed (with
``exists=False``) until it is untagged.

``version`` increments once per call that actually changes the mapping.
Redundant adds/removes leave it untouched, so observers can treat a version
bump as "something changed" without diffing collections.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from .notifications import NotificationCenter

logger = logging.getLogger(__name__)


class TagColor(Enum):
    RED = "red"
    BLUE = "blue"
    GREEN = "green"
    ORANGE = "orange"

    @property
    def label(self) -> str:
        return self.value.capitalize()


def _home_text() -> str:
    return str(Path.home())


def collapse_home(path_text: str) -> str:
    """Replace a leading home-directory prefix with ``~``."""
    home = _home_text()
    if path_text == home:
        return "~"
    prefix = home.rstrip(os.sep)
    # A root home would otherwise prefix every absolute path.
    if prefix and path_text.startswith(prefix + os.sep):
        return "~" + path_text[len(prefix):]
    return path_text


@dataclass(frozen=True)
class TaggedFile:
    """Path-derived row for the color-tag browser."""

    path: Path
    exists: bool
    is_dir: bool

    @property
    def id(self) -> str:
        return str(self.path)

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def parent_path(self) -> str:
        return collapse_home(str(self.path.parent))


def _tag_key(path: Path | str) -> str:
    return os.path.abspath(os.fspath(path))


class ColorTagManager:
    """Color → ordered path set, persisted as one JSON document.

    Every effective mutation rewrites the whole file. A failed write is
    logged and reported but the in-memory mapping stays authoritative.
    """

    def __init__(self, file_path: Path, notifications: NotificationCenter | None = None) -> None:
        self.file_path = file_path
        self.notifications = notifications
        self.version = 0
        self._lock = threading.RLock()
        # dict keys double as an insertion-ordered set.
        self._tags: dict[TagColor, dict[str, None]] = {color: {} for color in TagColor}
        self._load()

    def _load(self) -> None:
        try:
            raw = json.loads(self.file_path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return
        except (OSError, ValueError) as exc:
            logger.warning("ignoring unreadable tag store %s: %s", self.file_path, exc)
            return
        if not isinstance(raw, dict):
            return
        for color in TagColor:
            paths = raw.get(color.value)
            if not isinstance(paths, list):
                continue
            bucket = self._tags[color]
            for path_text in paths:
                if isinstance(path_text, str) and path_text:
                    bucket[path_text] = None

    def save(self) -> bool:
        """Rewrite the store file from memory; returns False on failure."""
        with self._lock:
            payload = {color.value: list(self._tags[color]) for color in TagColor}
            try:
                self.file_path.parent.mkdir(parents=True, exist_ok=True)
                tmp_path = self.file_path.with_name(self.file_path.name + ".tmp")
                tmp_path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
                os.replace(tmp_path, self.file_path)
            except OSError as exc:
                logger.error("could not save tag store %s: %s", self.file_path, exc)
                if self.notifications is not None:
                    self.notifications.show_error(f"Failed to save color tags: {exc}")
                return False
            return True

    def _changed(self) -> None:
        self.version += 1
        self.save()

    def add(self, path: Path | str, color: TagColor) -> bool:
        """Tag ``path`` with ``color``; returns whether anything changed."""
        key = _tag_key(path)
        with self._lock:
            bucket = self._tags[color]
            if key in bucket:
                return False
            bucket[key] = None
            self._changed()
            return True

    def remove(self, path: Path | str, color: TagColor) -> bool:
        key = _tag_key(path)
        with self._lock:
            bucket = self._tags[color]
            if key not in bucket:
                return False
            del bucket[key]
            self._changed()
            return True

    def remove_all(self, path: Path | str) -> bool:
        """Untag ``path`` from every color in one mutation."""
        key = _tag_key(path)
        with self._lock:
            removed = False
            for bucket in self._tags.values():
                if key in bucket:
                    del bucket[key]
                    removed = True
            if removed:
                self._changed()
            return removed

    def toggle(self, path: Path | str, color: TagColor) -> bool:
        """Flip the tag and return the new tagged state."""
        with self._lock:
            if self.is_tagged(path, color):
                self.remove(path, color)
                return False
            self.add(path, color)
            return True

    def is_tagged(self, path: Path | str, color: TagColor) -> bool:
        with self._lock:
            return _tag_key(path) in self._tags[color]

    def count(self, color: TagColor) -> int:
        with self._lock:
            return len(self._tags[color])

    @property
    def total_count(self) -> int:
        with self._lock:
            return sum(len(bucket) for bucket in self._tags.values())

    def list(self, color: TagColor) -> list[str]:
        """Return tagged paths for ``color`` in tagging order."""
        with self._lock:
            return list(self._tags[color])

    def colors_for_file(self, path: Path | str) -> set[TagColor]:
        key = _tag_key(path)
        with self._lock:
            return {color for color in TagColor if key in self._tags[color]}

    def files_for_color(self, color: TagColor) -> list[TaggedFile]:
        """Build browser rows for ``color`` sorted case-insensitively by name."""
        rows: list[TaggedFile] = []
        for path_text in self.list(color):
            path = Path(path_text)
            rows.append(TaggedFile(path=path, exists=path.exists(), is_dir=path.is_dir()))
        rows.sort(key=lambda row: (row.name.casefold(), row.id))
        return rows


__all__ = [
    "ColorTagManager",
    "TagColor",
    "TaggedFile",
    "collapse_home",
]
