"""Contract for a mobile device's per-app sandboxed filesystem.

The USB transport lives outside this package; implementations subclass
``DeviceFilesystem`` and raise ``DuxError`` subclasses on failure:
``DeviceUnavailable`` when the device drops mid-call, ``NotFound`` for
missing remote paths, ``AlreadyExists`` from ``mkdir`` and ``IOFailure``
for anything else. Device and app ids are opaque strings.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path


@dataclass(frozen=True)
class DeviceEntry:
    """One remote directory entry; ``path`` is absolute inside the sandbox."""

    name: str
    path: str
    is_dir: bool
    size: int | None = None
    modified: datetime | None = None


@dataclass(frozen=True)
class DeviceInfo:
    id: str
    name: str
    is_connected: bool = True


@dataclass(frozen=True)
class DeviceApp:
    id: str
    name: str
    version: str = ""


def join_remote_path(parent: str, name: str) -> str:
    """Join sandbox path segments with ``/`` regardless of host OS."""
    if not parent or parent == "/":
        return f"/{name}"
    return f"{parent.rstrip('/')}/{name}"


def remote_parent(path: str) -> str:
    stripped = path.rstrip("/")
    if not stripped or "/" not in stripped:
        return "/"
    parent = stripped.rsplit("/", 1)[0]
    return parent or "/"


def remote_name(path: str) -> str:
    return path.rstrip("/").rsplit("/", 1)[-1]


class DeviceFilesystem(ABC):
    """Operations the core needs against one app sandbox on one device."""

    def devices(self) -> list[DeviceInfo]:
        """Connected devices; discovery is optional for bridges."""
        return []

    def apps(self, device_id: str) -> list[DeviceApp]:
        """Apps exposing a document sandbox on ``device_id``."""
        return []

    @abstractmethod
    def list(self, device_id: str, app_id: str, path: str) -> list[DeviceEntry]:
        """Return entries of ``path`` in a stable order."""

    @abstractmethod
    def upload(self, device_id: str, app_id: str, local_path: Path, remote_path: str) -> None:
        """Copy a local file or directory tree to ``remote_path``."""

    @abstractmethod
    def download(self, device_id: str, app_id: str, remote_path: str, local_path: Path) -> None:
        """Copy a remote file to ``local_path``."""

    @abstractmethod
    def delete(self, device_id: str, app_id: str, path: str) -> None:
        """Remove ``path``; directories are removed with their contents."""

    @abstractmethod
    def mkdir(self, device_id: str, app_id: str, path: str) -> None:
        """Create a directory; raises ``AlreadyExists`` when ``path`` is taken."""


__all__ = [
    "DeviceApp",
    "DeviceEntry",
    "DeviceFilesystem",
    "DeviceInfo",
    "join_remote_path",
    "remote_name",
    "remote_parent",
]
