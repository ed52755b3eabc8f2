"""Process-wide multi-item selection spanning local and device origins.

The selection is a plain insertion-ordered set keyed by ``FileItem.id``.
Batch operations walk a snapshot of it and treat every item independently:
one failing item is recorded in the ``BatchResult`` and never aborts the
rest. Callers decide when to ``clear()``; copy, upload and download leave the
selection untouched.
"""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from pathlib import Path

from .device.bridge import DeviceFilesystem, join_remote_path
from .errors import AlreadyExists, DuxError, InvalidState, IOFailure, from_os_error
from .file_model import FileItem
from .file_ops import move_to_trash
from .naming import unique_destination
from .notifications import NotificationCenter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ItemFailure:
    item: FileItem
    error: DuxError


@dataclass
class BatchResult:
    """Outcome of one batch; ``count`` is the number of items that succeeded."""

    succeeded: list[FileItem] = field(default_factory=list)
    failures: list[ItemFailure] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.succeeded)

    @property
    def ok(self) -> bool:
        return not self.failures


def _require_local(item: FileItem) -> Path:
    local_path = item.local_path
    if local_path is None:
        raise InvalidState("Not a local item", item.display_path)
    return local_path


def _require_device(item: FileItem) -> None:
    if item.is_local:
        raise InvalidState("Not a device item", item.display_path)


def copy_local_item(item: FileItem, destination: Path) -> Path:
    """Copy one local item into ``destination`` under a conflict-free name."""
    source = _require_local(item)
    target = unique_destination(destination, item.name, is_dir=item.is_dir)
    try:
        if source.is_dir() and not source.is_symlink():
            shutil.copytree(source, target, symlinks=True)
        else:
            shutil.copy2(source, target, follow_symlinks=False)
    except shutil.Error as exc:
        # copytree collects per-entry failures and raises them together.
        raise IOFailure(f"Partial copy ({len(exc.args[0])} entries failed)", source) from exc
    except OSError as exc:
        raise from_os_error(exc, source) from exc
    return target


def _same_directory(left: Path, right: Path) -> bool:
    try:
        return os.path.samefile(left, right)
    except OSError:
        return False


def move_local_item(item: FileItem, destination: Path) -> Path:
    """Move one local item into ``destination``; a move onto its own folder fails."""
    source = _require_local(item)
    if _same_directory(source.parent, destination):
        raise AlreadyExists("Item is already in that folder", source)
    target = unique_destination(destination, item.name, is_dir=item.is_dir)
    try:
        shutil.move(os.fspath(source), os.fspath(target))
    except shutil.Error as exc:
        raise IOFailure(str(exc), source) from exc
    except OSError as exc:
        raise from_os_error(exc, source) from exc
    return target


def trash_local_item(item: FileItem) -> None:
    move_to_trash(_require_local(item))


class SelectionManager:
    """Shared selection set plus batch transfer operations.

    ``bridge`` is only needed for device-origin batches; without one those
    items fail with ``InvalidState``.
    """

    def __init__(
        self,
        bridge: DeviceFilesystem | None = None,
        notifications: NotificationCenter | None = None,
    ) -> None:
        self.bridge = bridge
        self.notifications = notifications
        self.version = 0
        self._items: dict[str, FileItem] = {}

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[FileItem]:
        return iter(list(self._items.values()))

    @property
    def items(self) -> list[FileItem]:
        return list(self._items.values())

    @property
    def count(self) -> int:
        return len(self._items)

    @property
    def is_empty(self) -> bool:
        return not self._items

    @property
    def local_items(self) -> list[FileItem]:
        return [item for item in self._items.values() if item.is_local]

    @property
    def device_items(self) -> list[FileItem]:
        return [item for item in self._items.values() if not item.is_local]

    def _bump(self) -> None:
        self.version += 1

    def add(self, item: FileItem) -> bool:
        """Add ``item``; adding an already-selected item is a no-op."""
        if item.id in self._items:
            return False
        self._items[item.id] = item
        self._bump()
        return True

    def add_local(self, path: Path | str) -> bool:
        """Select a local path by statting it; missing paths are ignored."""
        item = FileItem.from_local(path)
        if item is None:
            return False
        return self.add(item)

    def remove(self, item: FileItem) -> bool:
        if self._items.pop(item.id, None) is None:
            return False
        self._bump()
        return True

    def toggle(self, item: FileItem) -> bool:
        """Flip membership and return whether ``item`` is now selected."""
        if item.id in self._items:
            self.remove(item)
            return False
        self.add(item)
        return True

    def contains(self, item: FileItem) -> bool:
        return item.id in self._items

    def contains_local(self, path: Path | str) -> bool:
        """Match local-origin items only; device items never match a path."""
        key = os.path.abspath(os.fspath(path))
        item = self._items.get(key)
        return item is not None and item.is_local

    def contains_device(self, path: str, device_id: str, app_id: str) -> bool:
        return any(
            item.path == path and item.origin.device_id == device_id and item.origin.app_id == app_id
            for item in self.device_items
        )

    def clear(self) -> None:
        if self._items:
            self._items.clear()
            self._bump()

    def remove_by_path(self, path: Path | str) -> bool:
        """Remove the first local item whose path equals ``path``."""
        key = os.path.abspath(os.fspath(path))
        for item in self.local_items:
            if item.path == key:
                return self.remove(item)
        return False

    def update_local_path(self, old_path: Path | str, new_path: Path | str) -> bool:
        """Follow a rename: swap the old local item for one at ``new_path``.

        Position in the selection order is kept.
        """
        old_key = os.path.abspath(os.fspath(old_path))
        old_item = self._items.get(old_key)
        if old_item is None or not old_item.is_local:
            return False
        new_item = FileItem.from_local(new_path) or FileItem.local(new_path, is_dir=old_item.is_dir)
        updated: dict[str, FileItem] = {}
        for key, item in self._items.items():
            if key == old_key:
                updated[new_item.id] = new_item
            else:
                updated[key] = item
        self._items = updated
        self._bump()
        return True

    def _run_batch(
        self,
        items: list[FileItem],
        action: Callable[[FileItem], object],
        label: str,
    ) -> BatchResult:
        result = BatchResult()
        for item in items:
            try:
                action(item)
            except DuxError as exc:
                logger.warning("%s failed for %s: %s", label, item.display_path, exc)
                result.failures.append(ItemFailure(item, exc))
            except OSError as exc:
                error = from_os_error(exc, item.display_path)
                logger.warning("%s failed for %s: %s", label, item.display_path, error)
                result.failures.append(ItemFailure(item, error))
            else:
                result.succeeded.append(item)
        return result

    def _report(self, result: BatchResult, verb: str) -> None:
        if self.notifications is None:
            return
        noun = "item" if result.count == 1 else "items"
        if result.failures:
            first = result.failures[0]
            self.notifications.show_error(
                f"{verb} {result.count} {noun}, {len(result.failures)} failed ({first.error})"
            )
        elif result.count:
            self.notifications.show(f"{verb} {result.count} {noun}")

    def copy_local_items(self, destination: Path) -> BatchResult:
        """Copy every selected local item into ``destination``; never overwrites."""
        result = self._run_batch(
            self.local_items,
            lambda item: copy_local_item(item, destination),
            "copy",
        )
        self._report(result, "Copied")
        return result

    def move_local_items(self, destination: Path) -> BatchResult:
        """Move local items into ``destination`` and drop moved ones from the selection."""
        result = self._run_batch(
            self.local_items,
            lambda item: move_local_item(item, destination),
            "move",
        )
        for item in result.succeeded:
            self.remove(item)
        self._report(result, "Moved")
        return result

    def trash_local_items(self) -> BatchResult:
        result = self._run_batch(self.local_items, trash_local_item, "trash")
        for item in result.succeeded:
            self.remove(item)
        self._report(result, "Moved to Trash")
        return result

    def _bridge_for(self, item: FileItem) -> DeviceFilesystem:
        if self.bridge is None:
            raise InvalidState("No device bridge available", item.display_path)
        return self.bridge

    def download_device_item(self, item: FileItem, destination: Path, move: bool = False) -> Path:
        """Download one device item; with ``move`` the remote copy is deleted afterwards."""
        _require_device(item)
        bridge = self._bridge_for(item)
        origin = item.origin
        target = unique_destination(destination, item.name, is_dir=item.is_dir)
        bridge.download(origin.device_id, origin.app_id, item.path, target)
        if move:
            bridge.delete(origin.device_id, origin.app_id, item.path)
        return target

    def download_device_items(self, destination: Path, move: bool = False) -> BatchResult:
        result = self._run_batch(
            self.device_items,
            lambda item: self.download_device_item(item, destination, move=move),
            "download",
        )
        if move:
            for item in result.succeeded:
                self.remove(item)
        self._report(result, "Moved" if move else "Downloaded")
        return result

    def upload_local_item(self, item: FileItem, device_id: str, app_id: str, remote_dir: str) -> str:
        source = _require_local(item)
        if self.bridge is None:
            raise InvalidState("No device bridge available", item.display_path)
        remote_path = join_remote_path(remote_dir, item.name)
        self.bridge.upload(device_id, app_id, source, remote_path)
        return remote_path

    def upload_local_items(self, device_id: str, app_id: str, remote_dir: str) -> BatchResult:
        result = self._run_batch(
            self.local_items,
            lambda item: self.upload_local_item(item, device_id, app_id, remote_dir),
            "upload",
        )
        self._report(result, "Uploaded")
        return result

    def delete_device_item(self, item: FileItem) -> None:
        _require_device(item)
        bridge = self._bridge_for(item)
        bridge.delete(item.origin.device_id, item.origin.app_id, item.path)

    def delete_all(self) -> BatchResult:
        """Trash local items, delete device items, then clear the selection."""
        local_result = self._run_batch(self.local_items, trash_local_item, "trash")
        device_result = self._run_batch(self.device_items, self.delete_device_item, "delete")
        result = BatchResult(
            succeeded=local_result.succeeded + device_result.succeeded,
            failures=local_result.failures + device_result.failures,
        )
        self.clear()
        self._report(result, "Deleted")
        return result


__all__ = [
    "BatchResult",
    "ItemFailure",
    "SelectionManager",
    "copy_local_item",
    "move_local_item",
    "trash_local_item",
]
