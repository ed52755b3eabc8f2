"""Construction of the process-wide services.

The selection, tag store and folder-size cache are shared by every view, so
they are built exactly once here and handed to consumers explicitly. Tests
build their own instances instead of going through this module.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from . import config
from .device import DeviceBrowser, DeviceFilesystem
from .explorer import FileExplorerManager
from .folder_sizes import FolderSizeCache
from .notifications import NotificationCenter
from .selection import SelectionManager
from .tags import ColorTagManager

logger = logging.getLogger(__name__)


@dataclass
class Services:
    notifications: NotificationCenter
    selection: SelectionManager
    folder_sizes: FolderSizeCache
    tags: ColorTagManager
    explorer: FileExplorerManager
    device_browser: DeviceBrowser | None = None

    def shutdown(self) -> None:
        """Stop background work and flush the folder-size cache."""
        self.explorer.shutdown()
        self.folder_sizes.save()


def build_services(
    *,
    bridge: DeviceFilesystem | None = None,
    tag_store_path: Path | None = None,
    folder_size_cache_path: Path | None = None,
    persist_folder_sizes: bool = True,
    show_hidden: bool | None = None,
) -> Services:
    """Wire up shared services from persisted settings.

    ``show_hidden`` overrides the persisted preference for this process
    without saving it.
    """
    notifications = NotificationCenter()
    selection = SelectionManager(bridge=bridge, notifications=notifications)
    cache_path = folder_size_cache_path or config.default_folder_size_cache_path()
    folder_sizes = FolderSizeCache(cache_path if persist_folder_sizes else None)
    tags = ColorTagManager(tag_store_path or config.default_tag_store_path(), notifications=notifications)

    persisted_hidden = config.load_show_hidden()
    explorer = FileExplorerManager(
        selection=selection,
        folder_sizes=folder_sizes,
        notifications=notifications,
        show_hidden=persisted_hidden if show_hidden is None else show_hidden,
        high_churn_folders=config.load_high_churn_folders(),
        search_debounce_seconds=config.load_search_debounce_seconds(),
        search_max_results=config.load_search_max_results(),
        persist_show_hidden=config.save_show_hidden if show_hidden is None else None,
    )
    device_browser = DeviceBrowser(bridge, notifications) if bridge is not None else None
    logger.debug("services ready (tags=%s, sizes=%s)", tags.file_path, cache_path)
    return Services(
        notifications=notifications,
        selection=selection,
        folder_sizes=folder_sizes,
        tags=tags,
        explorer=explorer,
        device_browser=device_browser,
    )


__all__ = [
    "Services",
    "build_services",
]
