"""Browse state for app sandboxes on a connected device.

Mirrors the local explorer's navigation for the device side: pick a device,
pick an app, then walk its document tree. Every bridge call runs in the
background; ``process_background_results`` applies the newest listing on the
foreground and drops anything a later navigation superseded.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from ..background import BackgroundRequest, LatestRequestScheduler
from ..errors import DeviceUnavailable, DuxError
from ..file_model import FileItem
from ..notifications import NotificationCenter
from .bridge import DeviceApp, DeviceEntry, DeviceFilesystem, DeviceInfo, remote_parent

logger = logging.getLogger(__name__)

APP_DOCUMENTS_BASE_PATH = "/Documents"


class BrowseMode(Enum):
    APPS = "apps"
    APP_DOCUMENTS = "app_documents"


@dataclass(frozen=True)
class DeviceListingRequest:
    mode: BrowseMode
    device_id: str
    app_id: str = ""
    path: str = "/"


def sort_device_entries(entries: list[DeviceEntry]) -> list[DeviceEntry]:
    """Directories first, then case-insensitive name order."""
    return sorted(entries, key=lambda entry: (not entry.is_dir, entry.name.casefold(), entry.name))


class DeviceBrowser:
    """Foreground-owned navigation state over a ``DeviceFilesystem``."""

    def __init__(self, bridge: DeviceFilesystem, notifications: NotificationCenter) -> None:
        self.bridge = bridge
        self.notifications = notifications
        self.devices: list[DeviceInfo] = []
        self.current_device: DeviceInfo | None = None
        self.current_app: DeviceApp | None = None
        self.browse_mode = BrowseMode.APPS
        self.current_path = "/"
        self.apps: list[DeviceApp] = []
        self.files: list[DeviceEntry] = []
        self.is_loading = False
        self._scheduler: LatestRequestScheduler[DeviceListingRequest, list] = LatestRequestScheduler(
            self._run_listing,
            name="duxfiles-device-listing",
        )

    def _run_listing(self, request: BackgroundRequest[DeviceListingRequest]) -> list:
        payload = request.payload
        if payload.mode is BrowseMode.APPS:
            apps = self.bridge.apps(payload.device_id)
            return sorted(apps, key=lambda app: (app.name.casefold(), app.id))
        entries = self.bridge.list(payload.device_id, payload.app_id, payload.path)
        return sort_device_entries(entries)

    def refresh_devices(self) -> None:
        """Re-read connected devices and drop browse state for a vanished one."""
        try:
            self.devices = list(self.bridge.devices())
        except DuxError as exc:
            self.notifications.show_error(f"Device scan failed: {exc}")
            self.devices = []
        current = self.current_device
        if current is not None and all(device.id != current.id for device in self.devices):
            self._reset()

    def _reset(self) -> None:
        self._scheduler.cancel()
        self.current_device = None
        self.current_app = None
        self.browse_mode = BrowseMode.APPS
        self.current_path = "/"
        self.apps = []
        self.files = []
        self.is_loading = False

    def select_device(self, device: DeviceInfo) -> None:
        self.current_device = device
        self.current_app = None
        self.browse_mode = BrowseMode.APPS
        self.current_path = "/"
        self.files = []
        self.apps = []
        self._load(DeviceListingRequest(BrowseMode.APPS, device.id))

    def select_app(self, app: DeviceApp) -> None:
        self.current_app = app
        self.browse_mode = BrowseMode.APP_DOCUMENTS
        self.current_path = APP_DOCUMENTS_BASE_PATH
        self.files = []
        self.load_files()

    def back_to_apps(self) -> None:
        self._scheduler.cancel()
        self.current_app = None
        self.browse_mode = BrowseMode.APPS
        self.current_path = "/"
        self.files = []
        self.is_loading = False

    def navigate_to(self, path: str) -> None:
        self.current_path = path
        self.load_files()

    def navigate_up(self) -> None:
        """Go to the parent folder; leaving the documents root returns to the app list."""
        if self.current_path.rstrip("/") == APP_DOCUMENTS_BASE_PATH or self.current_path == "/":
            self.back_to_apps()
            return
        parent = remote_parent(self.current_path)
        self.navigate_to(APP_DOCUMENTS_BASE_PATH if parent == "/" else parent)

    def load_files(self) -> None:
        if self.current_device is None or self.current_app is None:
            return
        self._load(
            DeviceListingRequest(
                BrowseMode.APP_DOCUMENTS,
                self.current_device.id,
                app_id=self.current_app.id,
                path=self.current_path,
            )
        )

    def _load(self, request: DeviceListingRequest) -> None:
        self.is_loading = True
        self._scheduler.schedule(request)

    def process_background_results(self) -> bool:
        """Apply finished listings; returns whether browse state changed."""
        changed = False
        for result in self._scheduler.drain_results():
            request = result.request.payload
            self.is_loading = False
            changed = True
            if result.error is not None:
                self._report_failure(request, result.error)
                continue
            if request.mode is BrowseMode.APPS:
                self.apps = list(result.value or [])
            else:
                self.files = list(result.value or [])
        return changed

    def _report_failure(self, request: DeviceListingRequest, error: Exception) -> None:
        if isinstance(error, DeviceUnavailable):
            self.notifications.show_error(f"Device disconnected: {error}")
            self._reset()
            return
        if not isinstance(error, DuxError):
            logger.error("device listing failed for %s", request, exc_info=error)
        self.notifications.show_error(f"Failed to list {request.path}: {error}")

    def file_items(self) -> list[FileItem]:
        """Current listing as device-origin items, ready for the selection."""
        if self.current_device is None or self.current_app is None:
            return []
        return [
            FileItem.from_device(entry, self.current_device.id, self.current_app.id, self.current_app.name)
            for entry in self.files
        ]


__all__ = [
    "APP_DOCUMENTS_BASE_PATH",
    "BrowseMode",
    "DeviceBrowser",
    "DeviceListingRequest",
    "sort_device_entries",
]
