"""Memoized recursive folder sizes.

``FolderSizeCache`` is purely advisory: losing it is a cold start, never a
correctness problem. Entries remember the directory mtime they were computed
against and read as absent once the directory changed.
``FolderSizeWorker`` computes sizes off the foreground and feeds the cache.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from collections.abc import Iterable
from pathlib import Path
from typing import NamedTuple

from .background import BackgroundRequest, BackgroundResult, LatestRequestScheduler

logger = logging.getLogger(__name__)

SAVE_DELAY_SECONDS = 1.0


class CacheEntry(NamedTuple):
    size: int
    mtime_ns: int | None


def _cache_key(path: Path | str) -> str:
    return os.path.abspath(os.fspath(path))


def _dir_mtime_ns(key: str) -> int | None:
    try:
        return int(os.stat(key).st_mtime_ns)
    except OSError:
        return None


class FolderSizeCache:
    """Thread-safe map from absolute directory path to last computed size.

    All writes go through one lock, and entries are immutable tuples, so a
    concurrent reader sees either the old or the new entry, never a mix.
    """

    def __init__(self, cache_file: Path | None = None, save_delay: float = SAVE_DELAY_SECONDS) -> None:
        self._cache: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._cache_file = cache_file
        self._save_delay = save_delay
        self._save_timer: threading.Timer | None = None
        if cache_file is not None:
            self._load()

    def _load(self) -> None:
        assert self._cache_file is not None
        try:
            raw = json.loads(self._cache_file.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return
        except (OSError, ValueError) as exc:
            logger.info("discarding unreadable folder-size cache %s: %s", self._cache_file, exc)
            return
        if not isinstance(raw, dict):
            return
        for key, value in raw.items():
            if not isinstance(key, str) or not isinstance(value, dict):
                continue
            size = value.get("size")
            mtime_ns = value.get("mtime_ns")
            if isinstance(size, bool) or not isinstance(size, int) or size < 0:
                continue
            if mtime_ns is not None and (isinstance(mtime_ns, bool) or not isinstance(mtime_ns, int)):
                continue
            self._cache[key] = CacheEntry(size, mtime_ns)

    def get_cached_size(self, path: Path | str) -> int | None:
        """Return the cached size, or ``None`` when unknown or stale.

        ``None`` means "recompute"; a cached ``0`` is a real value.
        """
        key = _cache_key(path)
        with self._lock:
            entry = self._cache.get(key)
        if entry is None:
            return None
        if entry.mtime_ns is not None:
            current_mtime_ns = _dir_mtime_ns(key)
            if current_mtime_ns is None or current_mtime_ns > entry.mtime_ns:
                return None
        return entry.size

    def set_cached_size(self, path: Path | str, size: int) -> None:
        key = _cache_key(path)
        entry = CacheEntry(max(0, int(size)), _dir_mtime_ns(key))
        with self._lock:
            self._cache[key] = entry
            self._schedule_save_locked()

    def invalidate(self, path: Path | str) -> None:
        """Drop the cached entry so the next read reports it absent."""
        key = _cache_key(path)
        with self._lock:
            if self._cache.pop(key, None) is not None:
                self._schedule_save_locked()

    def clear_all(self) -> None:
        with self._lock:
            self._cache.clear()
            self._schedule_save_locked()

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    def _schedule_save_locked(self) -> None:
        if self._cache_file is None:
            return
        if self._save_timer is not None:
            self._save_timer.cancel()
        timer = threading.Timer(self._save_delay, self.save)
        timer.daemon = True
        self._save_timer = timer
        timer.start()

    def save(self) -> bool:
        """Write the cache file now; failures are logged and ignored."""
        if self._cache_file is None:
            return False
        with self._lock:
            if self._save_timer is not None:
                self._save_timer.cancel()
            self._save_timer = None
            snapshot = {key: {"size": entry.size, "mtime_ns": entry.mtime_ns} for key, entry in self._cache.items()}
        try:
            self._cache_file.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self._cache_file.with_name(self._cache_file.name + ".tmp")
            tmp_path.write_text(json.dumps(snapshot), encoding="utf-8")
            os.replace(tmp_path, self._cache_file)
        except OSError as exc:
            logger.info("could not persist folder-size cache %s: %s", self._cache_file, exc)
            return False
        return True


def compute_directory_size(path: Path | str, cancel_event: threading.Event | None = None) -> int | None:
    """Sum file sizes below ``path`` without following symlinks.

    Unreadable entries are skipped. Returns ``None`` when cancelled.
    """
    total = 0
    stack = [os.fspath(path)]
    while stack:
        if cancel_event is not None and cancel_event.is_set():
            return None
        current = stack.pop()
        try:
            with os.scandir(current) as entries:
                for entry in entries:
                    try:
                        if entry.is_dir(follow_symlinks=False):
                            stack.append(entry.path)
                        else:
                            total += entry.stat(follow_symlinks=False).st_size
                    except OSError:
                        continue
        except OSError:
            continue
    return total


class FolderSizeWorker:
    """Compute sizes for a batch of directories in the background.

    Each ``schedule`` supersedes the previous batch; directories that already
    have a fresh cache entry are skipped. Computed sizes are stored into the
    cache as they finish and reported together when the batch settles.
    """

    def __init__(self, cache: FolderSizeCache) -> None:
        self.cache = cache
        self._scheduler: LatestRequestScheduler[tuple[Path, ...], dict[Path, int]] = LatestRequestScheduler(
            self._compute_batch,
            name="duxfiles-folder-sizes",
        )

    def _compute_batch(self, request: BackgroundRequest[tuple[Path, ...]]) -> dict[Path, int]:
        sizes: dict[Path, int] = {}
        for directory in request.payload:
            if request.cancelled:
                break
            cached = self.cache.get_cached_size(directory)
            if cached is not None:
                sizes[directory] = cached
                continue
            size = compute_directory_size(directory, request.cancel_event)
            if size is None:
                break
            self.cache.set_cached_size(directory, size)
            sizes[directory] = size
        return sizes

    def schedule(self, directories: Iterable[Path]) -> int:
        return self._scheduler.schedule(tuple(directories))

    def cancel(self) -> None:
        self._scheduler.cancel()

    def drain_results(self) -> list[BackgroundResult[tuple[Path, ...], dict[Path, int]]]:
        return self._scheduler.drain_results()


__all__ = [
    "FolderSizeCache",
    "FolderSizeWorker",
    "compute_directory_size",
]
