"""Device-side storage: the bridge contract plus browse state on top of it."""

from __future__ import annotations

from .bridge import (
    DeviceApp,
    DeviceEntry,
    DeviceFilesystem,
    DeviceInfo,
    join_remote_path,
    remote_name,
    remote_parent,
)
from .browser import APP_DOCUMENTS_BASE_PATH, BrowseMode, DeviceBrowser, sort_device_entries

__all__ = [
    "APP_DOCUMENTS_BASE_PATH",
    "BrowseMode",
    "DeviceApp",
    "DeviceBrowser",
    "DeviceEntry",
    "DeviceFilesystem",
    "DeviceInfo",
    "join_remote_path",
    "remote_name",
    "remote_parent",
    "sort_device_entries",
]
