"""Navigation, listing and search state for the local file browser.

``FileExplorerManager`` owns everything the browser pane shows: the current
directory, its sorted listing, the cursor, pane focus and the search panel.
All state lives on the caller's thread. Search and folder-size work runs in
the background and only lands when the caller drains it through
``process_background_results``; a result whose request was superseded in the
meantime is dropped there.

Sort policy: entering a *different* directory resets ``sort_mode`` to the
folder default (modified-date for high-churn folders such as ``Downloads``,
name otherwise). Reloading the same directory keeps whatever the user chose.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path

from .background import BackgroundRequest, LatestRequestScheduler
from .config import DEFAULT_HIGH_CHURN_FOLDERS, DEFAULT_SEARCH_DEBOUNCE_MS, DEFAULT_SEARCH_MAX_RESULTS
from .errors import DuxError
from .file_model import CachedFileInfo, FileItem, SortMode, list_directory, sort_entries
from .file_ops import (
    create_file,
    create_folder,
    duplicate,
    move_to_trash,
    rename,
    toggle_hidden_name,
)
from .folder_sizes import FolderSizeCache, FolderSizeWorker
from .navigation import NavigationHistory
from .notifications import NotificationCenter
from .search import search_names
from .selection import SelectionManager
from .tags import collapse_home

logger = logging.getLogger(__name__)

SearchFunction = Callable[..., "tuple[list[CachedFileInfo], str | None]"]

# Trash folders keep their entries dot-prefixed; always list them.
ALWAYS_SHOW_HIDDEN_FOLDERS = frozenset({".trash", ".local/share/trash/files"})


@dataclass(frozen=True)
class SearchRequest:
    root: Path
    query: str
    show_hidden: bool
    max_results: int


def default_sort_mode(path: Path, high_churn_folders: Iterable[str] = DEFAULT_HIGH_CHURN_FOLDERS) -> SortMode:
    """Return ``MODIFIED`` for high-churn folder names, else ``NAME``."""
    names = {name.casefold() for name in high_churn_folders}
    return SortMode.MODIFIED if path.name.casefold() in names else SortMode.NAME


def _forces_hidden(path: Path) -> bool:
    text = path.as_posix().casefold()
    return any(text.endswith("/" + suffix) for suffix in ALWAYS_SHOW_HIDDEN_FOLDERS)


class FileExplorerManager:
    """Foreground state machine for one browser window."""

    def __init__(
        self,
        *,
        selection: SelectionManager,
        folder_sizes: FolderSizeCache,
        notifications: NotificationCenter,
        show_hidden: bool = False,
        high_churn_folders: Iterable[str] = DEFAULT_HIGH_CHURN_FOLDERS,
        search_debounce_seconds: float = DEFAULT_SEARCH_DEBOUNCE_MS / 1000.0,
        search_max_results: int = DEFAULT_SEARCH_MAX_RESULTS,
        search: SearchFunction = search_names,
        persist_show_hidden: Callable[[bool], bool] | None = None,
    ) -> None:
        self.selection = selection
        self.folder_sizes = folder_sizes
        self.notifications = notifications
        self.high_churn_folders = frozenset(name.casefold() for name in high_churn_folders)
        self.search_max_results = max(1, search_max_results)
        self._search = search
        self._persist_show_hidden = persist_show_hidden

        self.current_path = Path.home()
        self._loaded = False
        self.sort_mode = SortMode.NAME
        self.show_hidden = show_hidden
        self.directories: list[CachedFileInfo] = []
        self.files: list[CachedFileInfo] = []
        self.hidden_count = 0

        self.selected_index = -1
        self.selected_item: Path | None = None
        self._selection_memory: dict[Path, Path] = {}
        self.history = NavigationHistory()

        self.sidebar_focused = False
        self.sidebar_index = 0
        self.right_pane_focused = False
        self.right_pane_index = 0

        self.is_searching = False
        self.search_query = ""
        self.search_results: list[CachedFileInfo] = []
        self.is_search_running = False
        self.list_cursor_index = -1

        self._search_scheduler: LatestRequestScheduler[SearchRequest, tuple[list[CachedFileInfo], str | None]] = (
            LatestRequestScheduler(
                self._run_search,
                name="duxfiles-search",
                debounce_seconds=search_debounce_seconds,
            )
        )
        self._size_worker = FolderSizeWorker(folder_sizes)
        self._pending_sizes: set[Path] = set()

    @property
    def all_items(self) -> list[CachedFileInfo]:
        return self.directories + self.files

    @property
    def display_path(self) -> str:
        return collapse_home(str(self.current_path))

    # Listing

    def _list(self, directory: Path, sort_mode: SortMode) -> bool:
        show_hidden = self.show_hidden or _forces_hidden(directory)
        listing, error = list_directory(directory, show_hidden, sort_mode)
        if error is not None:
            display = collapse_home(str(directory))
            if isinstance(error, PermissionError):
                self.notifications.show_error(f"Permission denied: {display}")
            else:
                self.notifications.show_error(f"Cannot open {display}: {error.strerror or error}")
            return False
        self.directories = listing.directories
        self.files = listing.files
        self.hidden_count = listing.hidden_count
        return True

    def _index_of(self, path: Path | None) -> int:
        if path is None:
            return -1
        for index, info in enumerate(self.all_items):
            if info.path == path:
                return index
        return -1

    def _save_cursor(self) -> None:
        if self.selected_item is not None and self.selected_index >= 0:
            self._selection_memory[self.current_path] = self.selected_item

    def _restore_cursor(self) -> None:
        remembered = self._selection_memory.get(self.current_path)
        index = self._index_of(remembered)
        if index >= 0:
            self.selected_index = index
            self.selected_item = remembered
        else:
            self.clear_selection()

    def navigate_to(self, path: Path | str, *, record_history: bool = True) -> bool:
        """Open a directory, or open a file's folder and put the cursor on the file.

        Returns False, with state unchanged and an error notification, when
        the target is missing or cannot be listed.
        """
        target = Path(os.path.expanduser(os.fspath(path)))
        try:
            resolved = target.resolve(strict=True)
        except (OSError, RuntimeError):
            self.notifications.show_error(f"Path does not exist: {collapse_home(str(target))}")
            return False

        if not resolved.is_dir():
            if not self._loaded or resolved.parent != self.current_path:
                if not self.navigate_to(resolved.parent, record_history=record_history):
                    return False
            self.selected_item = resolved
            self.selected_index = self._index_of(resolved)
            return True

        entering_new_path = not self._loaded or resolved != self.current_path
        sort_mode = self.default_sort_mode(resolved) if entering_new_path else self.sort_mode
        previous_path = self.current_path
        self._save_cursor()
        if not self._list(resolved, sort_mode):
            return False

        # Results computed for the previous folder must never land here.
        self._search_scheduler.cancel()
        if self.is_searching:
            self.cancel_search()
        else:
            self.is_search_running = False
        if self._loaded and entering_new_path and record_history:
            self.history.record(previous_path)
        self.current_path = resolved
        self.sort_mode = sort_mode
        self._loaded = True
        self._restore_cursor()
        logger.debug("navigated to %s (sort=%s)", resolved, sort_mode.value)
        return True

    def default_sort_mode(self, path: Path) -> SortMode:
        return default_sort_mode(path, self.high_churn_folders)

    def navigate_up(self) -> bool:
        """Go to the parent directory with the folder we left under the cursor."""
        parent = self.current_path.parent
        if parent == self.current_path:
            return False
        self._selection_memory[parent] = self.current_path
        return self.navigate_to(parent)

    @property
    def can_go_back(self) -> bool:
        return self.history.can_go_back

    @property
    def can_go_forward(self) -> bool:
        return self.history.can_go_forward

    def _navigate_history(self, target: Path | None, undo: Callable[[Path], None]) -> bool:
        if target is None:
            return False
        if self.navigate_to(target, record_history=False):
            return True
        undo(target)
        return False

    def go_back(self) -> bool:
        current = self.current_path
        target = self.history.go_back(current)

        def undo(failed: Path) -> None:
            if self.history.forward and self.history.forward[-1] == current:
                self.history.forward.pop()
            self.history.back.append(failed)

        return self._navigate_history(target, undo)

    def go_forward(self) -> bool:
        current = self.current_path
        target = self.history.go_forward(current)

        def undo(failed: Path) -> None:
            if self.history.back and self.history.back[-1] == current:
                self.history.back.pop()
            self.history.forward.append(failed)

        return self._navigate_history(target, undo)

    def refresh(self) -> bool:
        """Re-list the current directory without touching the sort mode."""
        selected = self.selected_item
        if not self._list(self.current_path, self.sort_mode):
            return False
        self._put_cursor_on(selected)
        return True

    def _put_cursor_on(self, path: Path | None) -> None:
        index = self._index_of(path)
        if index >= 0:
            self.selected_index = index
            self.selected_item = path
        elif self.selected_index >= 0 and self.all_items:
            self.selected_index = min(self.selected_index, len(self.all_items) - 1)
            self.selected_item = self.all_items[self.selected_index].path
        else:
            self.clear_selection()

    def set_sort_mode(self, mode: SortMode) -> None:
        """Apply an explicit sort choice; it sticks until another folder is entered."""
        self.sort_mode = mode
        selected = self.selected_item
        self.directories = sort_entries(self.directories, mode)
        self.files = sort_entries(self.files, mode)
        if self.selected_index >= 0:
            self._put_cursor_on(selected)

    def toggle_show_hidden(self) -> bool:
        self.show_hidden = not self.show_hidden
        if self._persist_show_hidden is not None:
            self._persist_show_hidden(self.show_hidden)
        self.refresh()
        return self.show_hidden

    # Cursor

    def clear_selection(self) -> None:
        self.selected_index = -1
        self.selected_item = None

    def select_current_folder(self) -> None:
        self.selected_item = self.current_path
        self.selected_index = -1

    def select_item(self, index: int) -> bool:
        items = self.all_items
        if not 0 <= index < len(items):
            return False
        self.selected_index = index
        self.selected_item = items[index].path
        return True

    def select_next(self) -> None:
        items = self.all_items
        if not items:
            return
        self.select_item(self.selected_index + 1 if self.selected_index < len(items) - 1 else 0)

    def select_previous(self) -> None:
        items = self.all_items
        if not items:
            return
        self.select_item(self.selected_index - 1 if self.selected_index > 0 else len(items) - 1)

    def select_first(self) -> None:
        self.select_item(0)

    def select_last(self) -> None:
        self.select_item(len(self.all_items) - 1)

    def jump_to_letter(self, letter: str) -> bool:
        """Move to the next name starting with ``letter``, wrapping around."""
        prefix = letter.casefold()
        items = self.all_items
        start = self.selected_index + 1
        order = list(range(start, len(items))) + list(range(0, min(start, len(items))))
        for index in order:
            if items[index].name.casefold().startswith(prefix):
                return self.select_item(index)
        self.notifications.show(f"No item starting with '{letter.upper()}'")
        return False

    # Pane focus

    def focus_sidebar(self) -> None:
        self.sidebar_focused = True
        self.right_pane_focused = False

    def unfocus_sidebar(self) -> None:
        self.sidebar_focused = False

    def focus_right_pane(self) -> None:
        self.right_pane_focused = True
        self.sidebar_focused = False
        self.right_pane_index = 0

    def unfocus_right_pane(self) -> None:
        self.right_pane_focused = False

    # Search

    def start_search(self) -> None:
        self._search_scheduler.cancel()
        self.is_searching = True
        self.search_query = ""
        self.search_results = []
        self.is_search_running = False
        self.list_cursor_index = -1

    def cancel_search(self) -> None:
        self._search_scheduler.cancel()
        self.is_searching = False
        self.search_query = ""
        self.search_results = []
        self.is_search_running = False
        self.list_cursor_index = -1

    def perform_search(self, query: str) -> int | None:
        """Debounce and run a name search below the current directory.

        Every call supersedes the previous one. Returns the request id, or
        ``None`` for a blank query, which clears results without searching.
        """
        self.search_query = query
        trimmed = query.strip()
        if not trimmed:
            self._search_scheduler.cancel()
            self.search_results = []
            self.is_search_running = False
            return None
        self.is_search_running = True
        return self._search_scheduler.schedule(
            SearchRequest(
                root=self.current_path,
                query=trimmed,
                show_hidden=self.show_hidden,
                max_results=self.search_max_results,
            )
        )

    def _run_search(self, request: BackgroundRequest[SearchRequest]) -> tuple[list[CachedFileInfo], str | None]:
        payload = request.payload
        return self._search(
            payload.root,
            payload.query,
            payload.show_hidden,
            max_results=payload.max_results,
            cancel_event=request.cancel_event,
        )

    def list_select_next(self, count: int) -> None:
        if count <= 0:
            return
        self.list_cursor_index = self.list_cursor_index + 1 if self.list_cursor_index < count - 1 else 0

    def list_select_previous(self, count: int) -> None:
        if count <= 0:
            return
        self.list_cursor_index = self.list_cursor_index - 1 if self.list_cursor_index > 0 else count - 1

    # Background results

    def process_background_results(self) -> bool:
        """Apply finished searches and folder sizes; returns whether state changed."""
        changed = False
        for result in self._search_scheduler.drain_results():
            changed = True
            self.is_search_running = False
            error: object = result.error
            results: list[CachedFileInfo] = []
            if error is None and result.value is not None:
                results, error = result.value
            if error is not None:
                if isinstance(error, Exception) and not isinstance(error, DuxError):
                    logger.error("search for %r failed", result.request.payload.query, exc_info=error)
                self.search_results = []
                self.notifications.show_error(f"Search failed: {error}")
                continue
            self.search_results = results
            self.list_cursor_index = -1

        for size_result in self._size_worker.drain_results():
            changed = True
            if size_result.error is not None:
                logger.error("folder size computation failed", exc_info=size_result.error)
            self._pending_sizes.difference_update(size_result.request.payload)
        return changed

    def folder_size(self, path: Path) -> int | None:
        """Return the cached recursive size, scheduling a computation when unknown."""
        size = self.folder_sizes.get_cached_size(path)
        if size is None and path not in self._pending_sizes:
            self._pending_sizes.add(path)
            self._size_worker.schedule(sorted(self._pending_sizes))
        return size

    def shutdown(self) -> None:
        """Cancel background work owned by this manager."""
        self._search_scheduler.cancel()
        self._size_worker.cancel()
        self._pending_sizes.clear()

    # Selection integration

    def _cursor_item(self) -> FileItem | None:
        if self.selected_item is None:
            return None
        return FileItem.from_local(self.selected_item)

    def toggle_in_selection(self) -> bool | None:
        """Toggle the item under the cursor; returns its new membership."""
        item = self._cursor_item()
        if item is None:
            return None
        return self.selection.toggle(item)

    def add_to_selection(self) -> bool:
        item = self._cursor_item()
        if item is None:
            return False
        return self.selection.add(item)

    def select_all_files(self) -> int:
        """Add every file (not directory) in the listing to the selection."""
        added = 0
        for info in self.files:
            if self.selection.add_local(info.path):
                added += 1
        return added

    def is_in_selection(self, path: Path | str) -> bool:
        return self.selection.contains_local(path)

    # File operations

    def _after_change(self, focus: Path) -> None:
        self.folder_sizes.invalidate(self.current_path)
        self.refresh()
        self._put_cursor_on(focus)

    def _report(self, action: str, error: DuxError) -> None:
        self.notifications.show_error(f"{action} failed: {error}")

    def create_new_folder(self, name: str = "New Folder") -> Path | None:
        try:
            created = create_folder(self.current_path, name)
        except DuxError as exc:
            self._report("New folder", exc)
            return None
        self._after_change(created)
        return created

    def create_new_file(self) -> Path | None:
        try:
            created = create_file(self.current_path)
        except DuxError as exc:
            self._report("New file", exc)
            return None
        self._after_change(created)
        return created

    def duplicate_item(self, path: Path) -> Path | None:
        try:
            copied = duplicate(path)
        except DuxError as exc:
            self._report("Duplicate", exc)
            return None
        self._after_change(copied)
        return copied

    def rename_item(self, path: Path, new_name: str) -> Path | None:
        try:
            renamed = rename(path, new_name)
        except DuxError as exc:
            self._report("Rename", exc)
            return None
        if renamed != path:
            self.selection.update_local_path(path, renamed)
        self._after_change(renamed)
        return renamed

    def toggle_hidden_name(self, path: Path) -> Path | None:
        """Hide or unhide ``path`` by renaming it; keeps the cursor on it when visible."""
        try:
            renamed = toggle_hidden_name(path)
        except DuxError as exc:
            self._report("Hide", exc)
            return None
        self.selection.update_local_path(path, renamed)
        self._after_change(renamed)
        return renamed

    def move_to_trash(self, path: Path) -> bool:
        index = self._index_of(path)
        try:
            move_to_trash(path)
        except DuxError as exc:
            self._report("Move to Trash", exc)
            return False
        self.selection.remove_by_path(path)
        self.notifications.show(f"Moved {path.name} to Trash")
        self.refresh()
        self.folder_sizes.invalidate(self.current_path)
        if index >= 0 and self.all_items:
            self.select_item(min(index, len(self.all_items) - 1))
        elif not self.all_items:
            self.clear_selection()
        return True


__all__ = [
    "ALWAYS_SHOW_HIDDEN_FOLDERS",
    "FileExplorerManager",
    "SearchRequest",
    "default_sort_mode",
]
