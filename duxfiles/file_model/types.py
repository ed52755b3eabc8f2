"""Domain datatypes for entries from the local filesystem or a device sandbox."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from ..tags import collapse_home

if TYPE_CHECKING:
    from ..device.bridge import DeviceEntry

DEVICE_LABEL = "iPhone"


class OriginKind(Enum):
    LOCAL = "local"
    DEVICE_APP = "device_app"


@dataclass(frozen=True)
class FileOrigin:
    """Tagged variant naming which backend an entry belongs to.

    ``device_id``/``app_id``/``app_name`` are only meaningful for
    ``OriginKind.DEVICE_APP``; they stay empty for local entries.
    """

    kind: OriginKind
    device_id: str = ""
    app_id: str = ""
    app_name: str = ""

    @classmethod
    def local(cls) -> FileOrigin:
        return cls(OriginKind.LOCAL)

    @classmethod
    def device_app(cls, device_id: str, app_id: str, app_name: str) -> FileOrigin:
        return cls(OriginKind.DEVICE_APP, device_id=device_id, app_id=app_id, app_name=app_name)

    @property
    def is_local(self) -> bool:
        return self.kind is OriginKind.LOCAL


LOCAL_ORIGIN = FileOrigin.local()


def device_item_id(device_id: str, app_id: str, path: str) -> str:
    return f"device:{device_id}:{app_id}:{path}"


@dataclass(frozen=True, eq=False)
class FileItem:
    """One file or directory from either origin.

    Equality and hashing use ``id`` only, so the same relative path under
    different devices or apps never collides with a local path.
    """

    id: str
    name: str
    path: str
    is_dir: bool
    size: int | None
    modified: datetime | None
    origin: FileOrigin = field(default=LOCAL_ORIGIN)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FileItem):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    @property
    def is_local(self) -> bool:
        return self.origin.kind is OriginKind.LOCAL

    @property
    def local_path(self) -> Path | None:
        """Filesystem path for local items; ``None`` for device items."""
        if self.origin.kind is OriginKind.LOCAL:
            return Path(self.path)
        return None

    @property
    def display_path(self) -> str:
        if self.origin.kind is OriginKind.LOCAL:
            return collapse_home(self.path)
        return f"{DEVICE_LABEL}: {self.origin.app_name}{self.path}"

    @classmethod
    def local(
        cls,
        path: Path | str,
        *,
        is_dir: bool = False,
        size: int | None = None,
        modified: datetime | None = None,
    ) -> FileItem:
        """Build a local item without touching the filesystem."""
        path_text = os.path.abspath(os.fspath(path))
        return cls(
            id=path_text,
            name=os.path.basename(path_text.rstrip(os.sep)) or path_text,
            path=path_text,
            is_dir=is_dir,
            size=size,
            modified=modified,
            origin=LOCAL_ORIGIN,
        )

    @classmethod
    def from_local(cls, path: Path | str) -> FileItem | None:
        """Stat ``path`` and build a local item, or ``None`` if it is missing."""
        try:
            stat = os.stat(path)
        except OSError:
            return None
        is_dir = os.path.isdir(path)
        return cls.local(
            path,
            is_dir=is_dir,
            size=int(stat.st_size),
            modified=datetime.fromtimestamp(stat.st_mtime),
        )

    @classmethod
    def from_device(cls, entry: DeviceEntry, device_id: str, app_id: str, app_name: str) -> FileItem:
        return cls(
            id=device_item_id(device_id, app_id, entry.path),
            name=entry.name,
            path=entry.path,
            is_dir=entry.is_dir,
            size=entry.size,
            modified=entry.modified,
            origin=FileOrigin.device_app(device_id, app_id, app_name),
        )


@dataclass(frozen=True)
class CachedFileInfo:
    """Metadata for one local entry in a directory listing."""

    path: Path
    is_dir: bool
    size: int
    modified: datetime | None
    is_hidden: bool

    @property
    def id(self) -> str:
        return self.path.absolute().as_uri()

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def extension(self) -> str:
        return self.path.suffix[1:].lower() if self.path.suffix else ""


__all__ = [
    "DEVICE_LABEL",
    "LOCAL_ORIGIN",
    "CachedFileInfo",
    "FileItem",
    "FileOrigin",
    "OriginKind",
    "device_item_id",
]
